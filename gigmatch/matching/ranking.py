from __future__ import annotations

from dataclasses import replace
from typing import AbstractSet, List, Sequence

from gigmatch.matching.preferences import MatchingPreferences
from gigmatch.matching.types import (
    CompetitionLevel,
    Confidence,
    ProfileMatch,
    ProjectMatch,
    Recommendation,
)


def confidence_for(score: float) -> Confidence:
    if score >= 0.8:
        return Confidence.EXCELLENT
    if score >= 0.6:
        return Confidence.HIGH
    if score >= 0.4:
        return Confidence.MEDIUM
    return Confidence.LOW


def recommendation_for(score: float) -> Recommendation:
    if score >= 0.8:
        return Recommendation.HIGHLY_RECOMMEND
    if score >= 0.6:
        return Recommendation.RECOMMEND
    if score >= 0.4:
        return Recommendation.CONSIDER
    return Recommendation.REJECT


def competition_level_for(position: int, pool_size: int) -> CompetitionLevel:
    """
    `position` is the 0-based place of the candidate in the whole scored pool
    (before any preference filtering), best first. Low means the candidate sits
    strictly inside the top 10% of the pool, medium inside the top 30%.
    """
    # strict bounds in integer form: in a pool of 10 only position 0 is low
    if position * 10 < pool_size:
        return CompetitionLevel.LOW
    if position * 10 < pool_size * 3:
        return CompetitionLevel.MEDIUM
    return CompetitionLevel.HIGH


def filter_and_rank(
        matches: Sequence[ProfileMatch],
        prefs: MatchingPreferences,
        *,
        partial_profile_ids: AbstractSet[str] = frozenset(),
) -> List[ProfileMatch]:
    """
    Filter -> sort (overall desc, profile id asc) -> truncate -> dense re-rank.

    `partial_profile_ids` lists candidates missing a required skill; they are
    dropped when the caller turned include_partial_matches off.
    """
    excluded = set(prefs.exclude_profiles or [])

    kept = [
        m for m in matches
        if m.score.overall >= prefs.minimum_score
        and m.profile.id not in excluded
        and (not prefs.require_verification or m.profile.verification.is_verified)
        and (prefs.include_partial_matches or m.profile.id not in partial_profile_ids)
    ]
    kept.sort(key=lambda m: (-m.score.overall, m.profile.id))
    kept = kept[: prefs.max_results]
    return [replace(m, rank=i) for i, m in enumerate(kept, start=1)]


def rank_projects(
        matches: Sequence[ProjectMatch],
        prefs: MatchingPreferences,
        *,
        partial_project_ids: AbstractSet[str] = frozenset(),
) -> List[ProjectMatch]:
    kept = [
        m for m in matches
        if m.score.overall >= prefs.minimum_score
        and (prefs.include_partial_matches or m.project.id not in partial_project_ids)
    ]
    kept.sort(key=lambda m: (-m.score.overall, m.project.id))
    kept = kept[: prefs.max_results]
    return [replace(m, rank=i) for i, m in enumerate(kept, start=1)]
