"""
Dimension scorers.

Every function here is pure and total over well-formed entities: no I/O, no
clock reads, no exceptions for missing optional data. Each returns [0, 1].
"""
from __future__ import annotations

from typing import Iterable, Optional, Sequence

from gigmatch.core.text_processing import SkillMatchMode, any_skill_matches
from gigmatch.models import (
    EXPERIENCE_RANK,
    Availability,
    AvailabilityStatus,
    Budget,
    BudgetType,
    Experience,
    ExperienceRequirement,
    Location,
    LocationRequirement,
    LocationType,
    Portfolio,
    Pricing,
    SkillRequirement,
    Timeline,
    Verification,
)

REQUIRED_SKILLS_WEIGHT = 0.8
OPTIONAL_SKILLS_WEIGHT = 0.2

# Portfolio relevance is measured against at most this many past projects
PORTFOLIO_RELEVANCE_WINDOW = 5
PORTFOLIO_SIZE_FOR_FULL_CREDIT = 10
EMPTY_PORTFOLIO_SCORE = 0.3

NEUTRAL_SCORE = 0.5


def clamp01(x: float) -> float:
    return 0.0 if x < 0.0 else (1.0 if x > 1.0 else x)


def _match_ratio(
        wanted: Sequence[SkillRequirement],
        offered: Sequence[str],
        mode: SkillMatchMode,
) -> float:
    if not wanted:
        return 1.0
    hits = sum(1 for s in wanted if any_skill_matches(s.name, offered, mode))
    return hits / len(wanted)


def skills_score(
        profile_skills: Sequence[str],
        project_skills: Sequence[SkillRequirement],
        mode: SkillMatchMode = SkillMatchMode.SUBSTRING,
) -> float:
    """
    0.8 * required-match ratio + 0.2 * optional-match ratio.
    An empty group counts as fully matched, so a project with no skills is 1.0.
    """
    required = [s for s in project_skills if s.required]
    optional = [s for s in project_skills if not s.required]
    score = (
            REQUIRED_SKILLS_WEIGHT * _match_ratio(required, profile_skills, mode)
            + OPTIONAL_SKILLS_WEIGHT * _match_ratio(optional, profile_skills, mode)
    )
    return clamp01(score)


def missing_required_skills(
        profile_skills: Sequence[str],
        project_skills: Sequence[SkillRequirement],
        mode: SkillMatchMode = SkillMatchMode.SUBSTRING,
) -> list[str]:
    return [
        s.name for s in project_skills
        if s.required and not any_skill_matches(s.name, profile_skills, mode)
    ]


def experience_score(profile_exp: Experience, project_exp: ExperienceRequirement) -> float:
    score = 0.0

    # Years
    if profile_exp.years >= project_exp.minimum_years:
        score += 0.5
        if profile_exp.years >= project_exp.minimum_years * 1.5:
            score += 0.2
    else:
        score -= 0.3

    # Level: full credit at or above the preferred level, partial below it
    profile_level = EXPERIENCE_RANK[profile_exp.level]
    required_level = EXPERIENCE_RANK[project_exp.preferred_level]
    if profile_level >= required_level:
        score += 0.5
    else:
        score += max(0.0, (profile_level / required_level) * 0.3)

    return clamp01(score)


def availability_score(availability: Availability, timeline: Timeline) -> float:
    """
    Capacity is stored as a percentage; tiers below compare the fraction.
    Timeline fit compares the candidate's next-available date with the
    project start, so the result does not depend on the wall clock.
    """
    if availability.status == AvailabilityStatus.UNAVAILABLE:
        return 0.0

    capacity = availability.capacity_fraction
    if availability.status == AvailabilityStatus.BUSY and capacity < 0.3:
        return 0.2

    score = 0.5

    if capacity >= 0.8:
        score += 0.3
    elif capacity >= 0.5:
        score += 0.2
    else:
        score += 0.1

    if availability.next_available is None:
        score += 0.2  # immediately available
    elif availability.next_available.date() <= timeline.start_date.date():
        score += 0.2
    else:
        score -= 0.1

    return clamp01(score)


def rate_for_budget(pricing: Pricing, budget_type: BudgetType) -> Optional[float]:
    if budget_type == BudgetType.HOURLY:
        return pricing.hourly_rate
    if budget_type == BudgetType.FIXED:
        return pricing.project_rate or pricing.hourly_rate
    return pricing.retainer_rate or pricing.hourly_rate


def budget_score(pricing: Pricing, budget: Budget) -> float:
    rate = rate_for_budget(pricing, budget.type)
    if not rate:
        return NEUTRAL_SCORE  # no pricing info

    midpoint = budget.midpoint
    if midpoint <= 0:
        return NEUTRAL_SCORE  # no budget info

    deviation = abs(rate - midpoint) / midpoint
    if deviation <= 0.1:
        return 1.0
    if deviation <= 0.2:
        return 0.8
    if deviation <= 0.4:
        return 0.6
    if deviation <= 0.6:
        return 0.4
    return 0.2


def _contains_ci(values: Optional[Iterable[str]], needle: str) -> bool:
    if not values or not needle:
        return False
    n = needle.strip().lower()
    return any((v or "").strip().lower() == n for v in values)


def location_score(profile_loc: Location, project_loc: LocationRequirement) -> float:
    if project_loc.type == LocationType.REMOTE:
        return 1.0

    score = 0.0
    if _contains_ci(project_loc.countries, profile_loc.country):
        score += 0.6
    if _contains_ci(project_loc.cities, profile_loc.city):
        score += 0.4
    if project_loc.timezone and project_loc.timezone.strip().lower() == profile_loc.timezone.strip().lower():
        score += 0.2
    return clamp01(score)


def portfolio_score(
        portfolio: Portfolio,
        project_industry: str,
        project_skills: Sequence[SkillRequirement],
        mode: SkillMatchMode = SkillMatchMode.SUBSTRING,
) -> float:
    projects = portfolio.projects
    if not projects:
        return EMPTY_PORTFOLIO_SCORE

    skill_names = [s.name for s in project_skills]
    industry = (project_industry or "").strip().lower()

    def _relevant(p) -> bool:
        if industry and p.industry.strip().lower() == industry:
            return True
        return any(any_skill_matches(tech, skill_names, mode) for tech in p.technologies)

    relevant = sum(1 for p in projects if _relevant(p))
    relevance = min(1.0, relevant / min(len(projects), PORTFOLIO_RELEVANCE_WINDOW))
    rating = min(portfolio.ratings.average / 5.0, 1.0)
    experience = min(len(projects) / PORTFOLIO_SIZE_FOR_FULL_CREDIT, 1.0)

    return clamp01((relevance * 0.5) + (rating * 0.3) + (experience * 0.2))


def response_time_score(profile_hours: float, client_expected_hours: float) -> float:
    if profile_hours <= client_expected_hours:
        return 1.0
    return clamp01(client_expected_hours / profile_hours)


def verification_score(verification: Verification) -> float:
    score = 0.5 if verification.is_verified else 0.0
    score += min(len(verification.badges) * 0.1, 0.5)
    return min(1.0, score)
