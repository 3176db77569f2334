import pytest

from gigmatch.errors import InvalidPreferencesError
from gigmatch.matching.types import DIMENSIONS, ScoreBreakdown
from gigmatch.matching.weights import (
    DEFAULT_WEIGHTS,
    aggregate,
    canonical_dimension,
    resolve_weights,
    round_half_up,
)


def _breakdown(value: float) -> ScoreBreakdown:
    return ScoreBreakdown(**{d: value for d in DIMENSIONS})


def test_default_weights_sum_to_one():
    assert sum(DEFAULT_WEIGHTS.values()) == pytest.approx(1.0, abs=1e-9)
    assert tuple(DEFAULT_WEIGHTS) == DIMENSIONS


def test_resolve_weights_without_overrides_returns_defaults():
    assert resolve_weights(None) == DEFAULT_WEIGHTS
    assert resolve_weights([]) == DEFAULT_WEIGHTS


def test_named_dimension_takes_exact_weight_and_rest_rescales():
    w = resolve_weights([("skills", 0.5)])

    assert w["skills"] == 0.5
    assert sum(w.values()) == pytest.approx(1.0)
    # remaining 0.5 shared in proportion to defaults (0.75 total)
    assert w["experience"] == pytest.approx(0.20 / 0.75 * 0.5)
    assert w["verification"] == pytest.approx(0.03 / 0.75 * 0.5)


def test_full_override_must_sum_to_one():
    full = [(d, 1 / len(DIMENSIONS)) for d in DIMENSIONS]
    w = resolve_weights(full)
    assert sum(w.values()) == pytest.approx(1.0)

    with pytest.raises(InvalidPreferencesError):
        resolve_weights([(d, 0.1) for d in DIMENSIONS])


def test_response_time_aliases():
    assert canonical_dimension("responseTime") == "response_time"
    assert canonical_dimension("response-time") == "response_time"
    assert resolve_weights([("responseTime", 0.2)])["response_time"] == 0.2


@pytest.mark.parametrize("overrides", [
    [("charisma", 0.3)],
    [("skills", -0.1)],
    [("skills", "lots")],
    [("skills", float("nan"))],
    [("skills", 0.7), ("budget", 0.6)],
])
def test_invalid_overrides_raise(overrides):
    with pytest.raises(InvalidPreferencesError):
        resolve_weights(overrides)


def test_round_half_up():
    assert round_half_up(0.845) == 0.85
    assert round_half_up(0.844) == 0.84
    assert round_half_up(0.125) == 0.13


def test_aggregate_bounds():
    assert aggregate(_breakdown(1.0)) == 1.0
    assert aggregate(_breakdown(0.0)) == 0.0
    assert aggregate(_breakdown(0.5)) == 0.5


def test_aggregate_respects_weights():
    b = ScoreBreakdown(
        skills=1.0, experience=0.0, availability=0.0, budget=0.0,
        location=0.0, portfolio=0.0, response_time=0.0, verification=0.0,
    )
    assert aggregate(b) == 0.25
    assert aggregate(b, resolve_weights([("skills", 0.6)])) == 0.6
