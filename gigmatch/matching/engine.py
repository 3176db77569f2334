from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from threading import Event
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, TypeVar, Union

from gigmatch.config import EngineConfig, load_engine_config
from gigmatch.core.text_processing import SkillMatchMode
from gigmatch.errors import MatchingCancelled, NotFoundError
from gigmatch.matching.eligibility import is_eligible
from gigmatch.matching.insights import generate_insights, generate_reasoning, identify_concerns, identify_strengths
from gigmatch.matching.preferences import MatchingPreferences, resolve_preferences
from gigmatch.matching.ranking import (
    competition_level_for,
    confidence_for,
    filter_and_rank,
    rank_projects,
    recommendation_for,
)
from gigmatch.matching.scoring import (
    availability_score,
    budget_score,
    experience_score,
    location_score,
    missing_required_skills,
    portfolio_score,
    response_time_score,
    skills_score,
    verification_score,
)
from gigmatch.matching.success import estimate_success_rate
from gigmatch.matching.types import MatchScore, ProfileMatch, ProjectMatch, ScoreBreakdown
from gigmatch.matching.weights import DEFAULT_WEIGHTS, aggregate
from gigmatch.models import Profile, Project, utc_now
from gigmatch.parsing import parse_profile, parse_project, parse_timestamp
from gigmatch.repositories import MatchRepository, ProfileRepository, ProjectRepository, RawRecord

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

PreferencesInput = Union[MatchingPreferences, Mapping[str, Any], None]


def score_match(
        profile: Profile,
        project: Project,
        weights: Optional[Mapping[str, float]] = None,
        *,
        skill_match_mode: SkillMatchMode = SkillMatchMode.SUBSTRING,
) -> MatchScore:
    """Score one (profile, project) pair. Pure: reads only its arguments."""
    w = dict(DEFAULT_WEIGHTS)
    if weights:
        w.update(weights)

    breakdown = ScoreBreakdown(
        skills=skills_score(profile.skills, project.skills, skill_match_mode),
        experience=experience_score(profile.experience, project.experience),
        availability=availability_score(profile.availability, project.timeline),
        budget=budget_score(profile.pricing, project.budget),
        location=location_score(profile.location, project.location),
        portfolio=portfolio_score(profile.portfolio, project.industry, project.skills, skill_match_mode),
        response_time=response_time_score(profile.response_time, project.client_info.response_time),
        verification=verification_score(profile.verification),
    )

    return MatchScore(
        overall=aggregate(breakdown, w),
        breakdown=breakdown,
        reasoning=generate_reasoning(breakdown),
        concerns=identify_concerns(breakdown, project),
        strengths=identify_strengths(breakdown),
    )


def build_profile_match(
        profile: Profile,
        project: Project,
        score: MatchScore,
        *,
        position: int,
        pool_size: int,
) -> ProfileMatch:
    """`position` is the 0-based place in the full scored pool; rank is provisional until re-ranked."""
    confidence = confidence_for(score.overall)
    recommendation = recommendation_for(score.overall)
    return ProfileMatch(
        profile=profile,
        project=project,
        score=score,
        rank=position + 1,
        confidence=confidence,
        recommendation=recommendation,
        insights=generate_insights(score, project, confidence, recommendation),
        estimated_success_rate=estimate_success_rate(profile, project, score),
        competition_level=competition_level_for(position, pool_size),
    )


@dataclass(frozen=True)
class _Scored:
    score: MatchScore
    partial: bool  # missing at least one required skill


class MatchingEngine:
    """
    Stateless matching service. Repositories are injected; nothing is cached
    between calls, so one engine can serve concurrent requests.
    """

    def __init__(
            self,
            *,
            profiles: ProfileRepository,
            projects: ProjectRepository,
            matches: Optional[MatchRepository] = None,
            config: Optional[EngineConfig] = None,
            clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._profiles = profiles
        self._projects = projects
        self._matches = matches
        self.config = config or load_engine_config()
        self._clock = clock

    # --- fan-out / fan-in ---

    def _fan_out(
            self,
            items: Sequence[T],
            func: Callable[[T], R],
            *,
            cancel: Optional[Event],
            timeout: Optional[float],
    ) -> List[R]:
        """
        Run `func` over `items` on a thread pool, batch by batch. Cancellation
        and the timeout are checked between batches. Output order matches input.
        """
        if not items:
            return []

        timeout = timeout if timeout is not None else self.config.timeout_seconds
        deadline = time.monotonic() + timeout if timeout is not None else None
        batch_size = self.config.batch_size
        results: List[R] = []

        with ThreadPoolExecutor(max_workers=min(self.config.max_workers, len(items))) as pool:
            for start in range(0, len(items), batch_size):
                if cancel is not None and cancel.is_set():
                    raise MatchingCancelled(f"cancelled after {start} of {len(items)} candidates")
                if deadline is not None and time.monotonic() >= deadline:
                    raise MatchingCancelled(f"timed out after {start} of {len(items)} candidates")
                batch = items[start:start + batch_size]
                results.extend(pool.map(func, batch))

        return results

    def _score_pair(self, profile: Profile, project: Project, weights: Mapping[str, float]) -> _Scored:
        mode = self.config.skill_match_mode
        score = score_match(profile, project, weights, skill_match_mode=mode)
        partial = bool(missing_required_skills(profile.skills, project.skills, mode))
        logger.debug("Scored profile=%s project=%s overall=%.2f", profile.id, project.id, score.overall)
        return _Scored(score=score, partial=partial)

    # --- record loading ---

    def _load_project(self, project_id: str, now: datetime) -> Project:
        raw = self._projects.get_project(project_id) if project_id else None
        if raw is None:
            raise NotFoundError("project", project_id)
        return parse_project(raw, project_id, now=now)

    def _load_profile(self, profile_id: str, now: datetime) -> Profile:
        raw = self._profiles.get_profile(profile_id) if profile_id else None
        if raw is None:
            raise NotFoundError("profile", profile_id)
        return parse_profile(raw, profile_id, now=now)

    @staticmethod
    def _parse_pool(records: Sequence[RawRecord], parser: Callable[..., T], kind: str, now: datetime) -> List[T]:
        out: List[T] = []
        for raw in records:
            try:
                out.append(parser(raw, now=now))
            except NotFoundError:
                logger.warning("Skipping %s record without an id", kind)
        return out

    # --- public API ---

    def rank_candidates(
            self,
            project: Project,
            profiles: Sequence[Profile],
            preferences: PreferencesInput = None,
            *,
            cancel: Optional[Event] = None,
            timeout: Optional[float] = None,
    ) -> List[ProfileMatch]:
        """Eligibility -> parallel scoring -> ranking, over entities already in memory."""
        resolved = resolve_preferences(preferences)
        eligible = [p for p in profiles if is_eligible(p, project)]
        logger.debug("%d of %d candidates eligible for project %s", len(eligible), len(profiles), project.id)

        scored = self._fan_out(
            eligible,
            lambda p: self._score_pair(p, project, resolved.weights),
            cancel=cancel,
            timeout=timeout,
        )

        # Position within the whole scored pool drives the competition level
        order = sorted(range(len(eligible)), key=lambda i: (-scored[i].score.overall, eligible[i].id))
        pool_size = len(eligible)
        matches = [
            build_profile_match(eligible[i], project, scored[i].score, position=pos, pool_size=pool_size)
            for pos, i in enumerate(order)
        ]
        partial_ids = {eligible[i].id for i in range(pool_size) if scored[i].partial}

        return filter_and_rank(matches, resolved.preferences, partial_profile_ids=partial_ids)

    def find_matches(
            self,
            project_id: str,
            preferences: PreferencesInput = None,
            *,
            now: Optional[datetime] = None,
            cancel: Optional[Event] = None,
            timeout: Optional[float] = None,
            persist: bool = True,
    ) -> List[ProfileMatch]:
        """
        Rank candidate profiles for a project.

        Raises NotFoundError when the project id does not resolve. Storing the
        result is best-effort: a failing MatchRepository is logged, and the
        ranked list is returned anyway.
        """
        start = time.time()
        # Naive datetimes are read as UTC, like stored timestamps
        now = parse_timestamp(now or self._clock())

        project = self._load_project(project_id, now)
        records = self._profiles.list_candidate_profiles(limit=self.config.project_pool_limit)
        profiles = self._parse_pool(records, parse_profile, "profile", now)

        ranked = self.rank_candidates(project, profiles, preferences, cancel=cancel, timeout=timeout)

        if persist and self._matches is not None:
            try:
                self._matches.store_matches(project_id, ranked)
            except Exception:
                logger.warning("Storing matches for project %s failed; returning results anyway",
                               project_id, exc_info=True)

        logger.info(
            "Matched project %s: %d candidates fetched, %d returned in %dms",
            project_id, len(profiles), len(ranked), int((time.time() - start) * 1000),
        )
        return ranked

    def rank_projects_for(
            self,
            profile: Profile,
            projects: Sequence[Project],
            preferences: PreferencesInput = None,
            *,
            cancel: Optional[Event] = None,
            timeout: Optional[float] = None,
    ) -> List[ProjectMatch]:
        resolved = resolve_preferences(preferences)
        eligible = [p for p in projects if is_eligible(profile, p)]

        scored = self._fan_out(
            eligible,
            lambda proj: self._score_pair(profile, proj, resolved.weights),
            cancel=cancel,
            timeout=timeout,
        )

        matches = [
            ProjectMatch(project=proj, score=s.score, recommendation=recommendation_for(s.score.overall))
            for proj, s in zip(eligible, scored)
        ]
        partial_ids = {proj.id for proj, s in zip(eligible, scored) if s.partial}
        return rank_projects(matches, resolved.preferences, partial_project_ids=partial_ids)

    def find_projects_for_profile(
            self,
            profile_id: str,
            preferences: PreferencesInput = None,
            *,
            now: Optional[datetime] = None,
            cancel: Optional[Event] = None,
            timeout: Optional[float] = None,
    ) -> List[ProjectMatch]:
        """Rank open projects for one profile. Raises NotFoundError for an unknown profile id."""
        start = time.time()
        # Naive datetimes are read as UTC, like stored timestamps
        now = parse_timestamp(now or self._clock())

        profile = self._load_profile(profile_id, now)
        records = self._projects.list_open_projects(now=now, limit=self.config.profile_pool_limit)
        projects = self._parse_pool(records, parse_project, "project", now)

        ranked = self.rank_projects_for(profile, projects, preferences, cancel=cancel, timeout=timeout)

        logger.info(
            "Matched profile %s: %d open projects fetched, %d returned in %dms",
            profile_id, len(projects), len(ranked), int((time.time() - start) * 1000),
        )
        return ranked


def match_summary_rows(matches: Sequence[ProfileMatch]) -> List[Dict[str, Any]]:
    """Flat rows for quick inspection / tabular output."""
    return [
        {
            "rank": m.rank,
            "profile_id": m.profile.id,
            "name": m.profile.name,
            "overall": m.score.overall,
            "confidence": m.confidence.value,
            "recommendation": m.recommendation.value,
            "success_rate": round(m.estimated_success_rate, 2),
            "competition": m.competition_level.value,
        }
        for m in matches
    ]
