from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from gigmatch.errors import InvalidPreferencesError
from gigmatch.matching.weights import DEFAULT_WEIGHTS, resolve_weights
from gigmatch.parsing import parse_bool, parse_str_list

logger = logging.getLogger(__name__)

DEFAULT_MINIMUM_SCORE = 0.3
DEFAULT_MAX_RESULTS = 20


@dataclass(frozen=True)
class MatchingPreferences:
    include_partial_matches: bool = True
    minimum_score: float = DEFAULT_MINIMUM_SCORE
    max_results: int = DEFAULT_MAX_RESULTS
    # (dimension, weight) overrides; see weights.resolve_weights for the policy
    prioritize_factors: List[Tuple[str, float]] = field(default_factory=list)
    exclude_profiles: List[str] = field(default_factory=list)
    require_verification: bool = False
    # Percentage. Advisory: validated and carried, not read by the scorers.
    budget_tolerance: float = 0.0


@dataclass(frozen=True)
class ResolvedPreferences:
    preferences: MatchingPreferences
    weights: Dict[str, float]
    warnings: List[str]


def _factor_pairs(raw: Any) -> List[Tuple[str, float]]:
    """Accepts [{"factor": "skills", "weight": 0.4}, ...], [("skills", 0.4)] or {"skills": 0.4}."""
    if not raw:
        return []
    if isinstance(raw, Mapping):
        return [(str(k), v) for k, v in raw.items()]
    pairs: List[Tuple[str, float]] = []
    for item in raw:
        if isinstance(item, Mapping):
            name = item.get("factor") or item.get("dimension") or ""
            pairs.append((str(name), item.get("weight")))
        elif isinstance(item, (list, tuple)) and len(item) == 2:
            pairs.append((str(item[0]), item[1]))
        else:
            pairs.append((str(item), None))
    return pairs


def preferences_from_dict(raw: Optional[Mapping[str, Any]]) -> MatchingPreferences:
    """
    Build preferences from a request payload (camelCase or snake_case keys).
    Values are carried as given; validation happens in resolve_preferences.
    """
    raw = raw or {}
    defaults = MatchingPreferences()

    def pick(*keys: str, default: Any) -> Any:
        for k in keys:
            if k in raw and raw[k] is not None:
                return raw[k]
        return default

    return MatchingPreferences(
        include_partial_matches=pick("includePartialMatches", "include_partial_matches",
                                     default=defaults.include_partial_matches),
        minimum_score=pick("minimumScore", "minimum_score", default=defaults.minimum_score),
        max_results=pick("maxResults", "max_results", default=defaults.max_results),
        prioritize_factors=_factor_pairs(pick("prioritizeFactors", "prioritize_factors", default=[])),
        exclude_profiles=parse_str_list(pick("excludeProfiles", "exclude_profiles", default=[])),
        require_verification=pick("requireVerification", "require_verification",
                                  default=defaults.require_verification),
        budget_tolerance=pick("budgetTolerance", "budget_tolerance", default=defaults.budget_tolerance),
    )


def _check_flag(value: Any) -> bool:
    # "true"/"false", "yes"/"no", 1/0 and real booleans; anything else is rejected
    flag = parse_bool(value, None)
    if flag is None:
        raise InvalidPreferencesError(f"expected a boolean, got {value!r}")
    return flag


def _check_minimum_score(value: Any) -> float:
    try:
        v = float(value)
    except (TypeError, ValueError):
        raise InvalidPreferencesError(f"minimum_score is not a number: {value!r}")
    if math.isnan(v) or v < 0.0 or v > 1.0:
        raise InvalidPreferencesError(f"minimum_score must be within [0, 1], got {value!r}")
    return v


def _check_max_results(value: Any) -> int:
    if isinstance(value, bool):
        raise InvalidPreferencesError(f"max_results is not an integer: {value!r}")
    try:
        v = int(value)
    except (TypeError, ValueError):
        raise InvalidPreferencesError(f"max_results is not an integer: {value!r}")
    if v <= 0:
        raise InvalidPreferencesError(f"max_results must be positive, got {value!r}")
    return v


def _check_budget_tolerance(value: Any) -> float:
    try:
        v = float(value)
    except (TypeError, ValueError):
        raise InvalidPreferencesError(f"budget_tolerance is not a number: {value!r}")
    if math.isnan(v) or v < 0.0:
        raise InvalidPreferencesError(f"budget_tolerance must be non-negative, got {value!r}")
    return v


def resolve_preferences(
        prefs: Union[MatchingPreferences, Mapping[str, Any], None] = None,
) -> ResolvedPreferences:
    """
    Validate preferences field by field. An invalid field is not fatal: it is
    replaced with its default and a warning is logged and returned.
    """
    if prefs is None:
        prefs = MatchingPreferences()
    elif isinstance(prefs, Mapping):
        prefs = preferences_from_dict(prefs)

    defaults = MatchingPreferences()
    warnings: List[str] = []

    def _correct(check, value, default):
        try:
            return check(value)
        except InvalidPreferencesError as exc:
            msg = f"{exc}; using default {default!r}"
            logger.warning("Invalid matching preferences: %s", msg)
            warnings.append(msg)
            return default

    include_partial = _correct(_check_flag, prefs.include_partial_matches, defaults.include_partial_matches)
    require_verification = _correct(_check_flag, prefs.require_verification, defaults.require_verification)
    minimum_score = _correct(_check_minimum_score, prefs.minimum_score, defaults.minimum_score)
    max_results = _correct(_check_max_results, prefs.max_results, defaults.max_results)
    budget_tolerance = _correct(_check_budget_tolerance, prefs.budget_tolerance, defaults.budget_tolerance)
    weights = _correct(resolve_weights, list(prefs.prioritize_factors), dict(DEFAULT_WEIGHTS))

    resolved = replace(
        prefs,
        include_partial_matches=include_partial,
        require_verification=require_verification,
        exclude_profiles=parse_str_list(prefs.exclude_profiles),
        minimum_score=minimum_score,
        max_results=max_results,
        budget_tolerance=budget_tolerance,
    )
    return ResolvedPreferences(preferences=resolved, weights=weights, warnings=warnings)
