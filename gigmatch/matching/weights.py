from __future__ import annotations

import math
from typing import Dict, Iterable, Mapping, Optional, Tuple

from gigmatch.errors import InvalidPreferencesError
from gigmatch.matching.types import DIMENSIONS, ScoreBreakdown

DEFAULT_WEIGHTS: Dict[str, float] = {
    "skills": 0.25,
    "experience": 0.20,
    "availability": 0.15,
    "budget": 0.15,
    "location": 0.10,
    "portfolio": 0.08,
    "response_time": 0.04,
    "verification": 0.03,
}

WEIGHT_SUM_TOLERANCE = 1e-9

# Accept the document-store spelling of dimension names too
_DIMENSION_ALIASES = {"responsetime": "response_time"}


def canonical_dimension(name: str) -> str:
    key = (name or "").strip()
    lowered = key.lower().replace("-", "_")
    return _DIMENSION_ALIASES.get(lowered.replace("_", ""), lowered)


def resolve_weights(overrides: Optional[Iterable[Tuple[str, float]]] = None) -> Dict[str, float]:
    """
    Apply `prioritize_factors` overrides to the default vector.

    Each named dimension takes exactly the given weight. Unnamed dimensions
    share the remaining mass in proportion to their default weights, so the
    result always sums to 1.0.

    Raises InvalidPreferencesError for unknown dimensions, negative weights,
    or named weights that leave no valid remainder.
    """
    if not overrides:
        return dict(DEFAULT_WEIGHTS)

    named: Dict[str, float] = {}
    for raw_name, raw_weight in overrides:
        name = canonical_dimension(raw_name)
        if name not in DEFAULT_WEIGHTS:
            raise InvalidPreferencesError(f"unknown dimension in prioritize_factors: {raw_name!r}")
        try:
            weight = float(raw_weight)
        except (TypeError, ValueError):
            raise InvalidPreferencesError(f"weight for {raw_name!r} is not a number: {raw_weight!r}")
        if weight < 0 or math.isnan(weight) or math.isinf(weight):
            raise InvalidPreferencesError(f"weight for {raw_name!r} must be a finite non-negative number")
        named[name] = weight

    named_total = sum(named.values())
    if named_total > 1.0 + WEIGHT_SUM_TOLERANCE:
        raise InvalidPreferencesError(f"prioritize_factors weights sum to {named_total:.3f}, above 1.0")

    unnamed = [d for d in DIMENSIONS if d not in named]
    remainder = max(0.0, 1.0 - named_total)

    if not unnamed:
        if abs(named_total - 1.0) > 1e-6:
            raise InvalidPreferencesError(
                f"prioritize_factors covers every dimension but sums to {named_total:.3f}, not 1.0"
            )
        # Tiny float drift: rescale onto exactly 1.0
        return {d: named[d] / named_total for d in DIMENSIONS}

    unnamed_default_total = sum(DEFAULT_WEIGHTS[d] for d in unnamed)
    weights = dict(named)
    for d in unnamed:
        weights[d] = remainder * DEFAULT_WEIGHTS[d] / unnamed_default_total
    return {d: weights[d] for d in DIMENSIONS}


def round_half_up(value: float, places: int = 2) -> float:
    factor = 10 ** places
    # Small epsilon absorbs representation error (0.845 stored as 0.84499...)
    return math.floor(value * factor + 0.5 + 1e-9) / factor


def aggregate(breakdown: ScoreBreakdown, weights: Mapping[str, float] = DEFAULT_WEIGHTS) -> float:
    """Weighted sum of the eight dimension scores, rounded to 2 decimals."""
    total = sum(score * weights[name] for name, score in breakdown.items())
    total = 0.0 if total < 0.0 else (1.0 if total > 1.0 else total)
    return round_half_up(total, 2)
