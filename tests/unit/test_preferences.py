import logging

from gigmatch.matching.preferences import (
    MatchingPreferences,
    preferences_from_dict,
    resolve_preferences,
)
from gigmatch.matching.weights import DEFAULT_WEIGHTS


def test_defaults():
    resolved = resolve_preferences(None)
    prefs = resolved.preferences
    assert prefs.include_partial_matches is True
    assert prefs.minimum_score == 0.3
    assert prefs.max_results == 20
    assert prefs.require_verification is False
    assert resolved.weights == DEFAULT_WEIGHTS
    assert resolved.warnings == []


def test_preferences_from_dict_accepts_camel_case():
    prefs = preferences_from_dict({
        "includePartialMatches": False,
        "minimumScore": 0.5,
        "maxResults": 3,
        "prioritizeFactors": [{"factor": "skills", "weight": 0.4}],
        "excludeProfiles": ["a", "b"],
        "requireVerification": True,
        "budgetTolerance": 10,
    })
    assert prefs == MatchingPreferences(
        include_partial_matches=False,
        minimum_score=0.5,
        max_results=3,
        prioritize_factors=[("skills", 0.4)],
        exclude_profiles=["a", "b"],
        require_verification=True,
        budget_tolerance=10,
    )


def test_preferences_from_dict_accepts_snake_case_and_mapping_factors():
    prefs = preferences_from_dict({"max_results": 7, "prioritize_factors": {"budget": 0.3}})
    assert prefs.max_results == 7
    assert prefs.prioritize_factors == [("budget", 0.3)]


def test_resolve_applies_valid_factor_overrides():
    resolved = resolve_preferences({"prioritizeFactors": [("skills", 0.5)]})
    assert resolved.weights["skills"] == 0.5
    assert resolved.warnings == []


def test_invalid_fields_fall_back_individually(caplog):
    with caplog.at_level(logging.WARNING, logger="gigmatch.matching.preferences"):
        resolved = resolve_preferences(
            MatchingPreferences(minimum_score=1.5, max_results=0, budget_tolerance=-5, exclude_profiles=["x"])
        )
    prefs = resolved.preferences
    assert prefs.minimum_score == 0.3
    assert prefs.max_results == 20
    assert prefs.budget_tolerance == 0.0
    # valid fields survive
    assert prefs.exclude_profiles == ["x"]
    assert len(resolved.warnings) == 3
    assert caplog.text.count("Invalid matching preferences") == 3


def test_invalid_factors_fall_back_to_default_weights(caplog):
    with caplog.at_level(logging.WARNING, logger="gigmatch.matching.preferences"):
        resolved = resolve_preferences({"prioritizeFactors": [{"factor": "vibes", "weight": 0.2}]})
    assert resolved.weights == DEFAULT_WEIGHTS
    assert "vibes" in caplog.text


def test_boolean_max_results_is_rejected():
    assert resolve_preferences(MatchingPreferences(max_results=True)).preferences.max_results == 20


def test_string_flags_are_read_as_booleans(caplog):
    with caplog.at_level(logging.WARNING, logger="gigmatch.matching.preferences"):
        resolved = resolve_preferences({"includePartialMatches": "false", "requireVerification": "no"})
    prefs = resolved.preferences
    assert prefs.include_partial_matches is False
    assert prefs.require_verification is False
    assert resolved.warnings == []

    assert resolve_preferences({"requireVerification": "TRUE"}).preferences.require_verification is True


def test_unrecognised_flags_fall_back_with_warning(caplog):
    with caplog.at_level(logging.WARNING, logger="gigmatch.matching.preferences"):
        resolved = resolve_preferences({"includePartialMatches": "sometimes", "requireVerification": [1]})
    prefs = resolved.preferences
    assert prefs.include_partial_matches is True
    assert prefs.require_verification is False
    assert len(resolved.warnings) == 2
    assert "expected a boolean" in caplog.text


def test_scalar_exclude_profiles_is_one_id():
    assert resolve_preferences({"excludeProfiles": "p1"}).preferences.exclude_profiles == ["p1"]
    assert resolve_preferences({"excludeProfiles": "p1, p2"}).preferences.exclude_profiles == ["p1", "p2"]
