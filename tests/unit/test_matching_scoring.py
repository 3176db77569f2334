from datetime import datetime, timezone

import pytest

from gigmatch.core.text_processing import SkillMatchMode
from gigmatch.matching.scoring import (
    availability_score,
    budget_score,
    clamp01,
    experience_score,
    location_score,
    missing_required_skills,
    portfolio_score,
    response_time_score,
    skills_score,
    verification_score,
)
from gigmatch.models import (
    Availability,
    AvailabilityStatus,
    Budget,
    BudgetType,
    Experience,
    ExperienceLevel,
    ExperienceRequirement,
    Location,
    LocationRequirement,
    LocationType,
    Portfolio,
    PortfolioProject,
    Pricing,
    Ratings,
    SkillRequirement,
    Timeline,
    Verification,
)

START = datetime(2026, 11, 1, tzinfo=timezone.utc)
TIMELINE = Timeline(start_date=START, end_date=datetime(2027, 2, 1, tzinfo=timezone.utc), duration=92)


def _req(name: str) -> SkillRequirement:
    return SkillRequirement(name=name, required=True)


def _opt(name: str) -> SkillRequirement:
    return SkillRequirement(name=name, required=False)


# ------------------------------------------------------------------
# Skills
# ------------------------------------------------------------------

def test_skills_required_and_optional_weighting():
    # python required (matched), docker optional (missed) => 0.8*1 + 0.2*0
    assert skills_score(["python", "aws"], [_req("python"), _opt("docker")]) == pytest.approx(0.80)


def test_skills_no_project_skills_is_full_match():
    assert skills_score(["python"], []) == 1.0
    assert skills_score([], []) == 1.0


def test_skills_empty_profile_with_requirements_scores_zero_required_part():
    assert skills_score([], [_req("python")]) == pytest.approx(0.2)  # optional group empty => 1.0
    assert skills_score([], [_req("python"), _opt("go")]) == 0.0


def test_skills_matching_is_case_insensitive_and_bidirectional_substring():
    assert skills_score(["Python 3"], [_req("python")]) == 1.0
    assert skills_score(["react"], [_req("React Native")]) == 1.0


def test_skills_substring_mode_is_loose_about_java():
    assert skills_score(["javascript"], [_req("java")]) == 1.0


def test_skills_token_mode_requires_whole_tokens():
    assert skills_score(["javascript"], [_req("java")], SkillMatchMode.TOKEN) == pytest.approx(0.2)
    assert skills_score(["React Native"], [_req("react")], SkillMatchMode.TOKEN) == 1.0


def test_skills_monotonic_when_adding_a_matching_skill():
    project = [_req("python"), _req("django"), _opt("docker"), _opt("aws")]
    skills = ["go"]
    previous = skills_score(skills, project)
    for extra in ("python", "docker", "django", "aws"):
        skills = skills + [extra]
        current = skills_score(skills, project)
        assert current >= previous
        previous = current
    assert previous == 1.0


def test_missing_required_skills_lists_only_required():
    project = [_req("python"), _req("django"), _opt("docker")]
    assert missing_required_skills(["python"], project) == ["django"]


# ------------------------------------------------------------------
# Experience
# ------------------------------------------------------------------

def test_experience_exceeding_years_and_level_is_capped_at_one():
    s = experience_score(
        Experience(level=ExperienceLevel.EXPERT, years=9),
        ExperienceRequirement(minimum_years=4, preferred_level=ExperienceLevel.SENIOR),
    )
    assert s == 1.0


def test_experience_meets_years_but_below_level_gets_partial_level_credit():
    s = experience_score(
        Experience(level=ExperienceLevel.INTERMEDIATE, years=5),
        ExperienceRequirement(minimum_years=4, preferred_level=ExperienceLevel.SENIOR),
    )
    # +0.5 years (5 < 6, no bonus) + (2/3)*0.3 level
    assert s == pytest.approx(0.7)


def test_experience_below_minimum_is_penalised_and_clamped():
    s = experience_score(
        Experience(level=ExperienceLevel.ENTRY, years=1),
        ExperienceRequirement(minimum_years=4, preferred_level=ExperienceLevel.SENIOR),
    )
    assert s == 0.0


# ------------------------------------------------------------------
# Availability
# ------------------------------------------------------------------

def test_availability_unavailable_is_zero_regardless_of_capacity():
    assert availability_score(Availability(status=AvailabilityStatus.UNAVAILABLE, capacity=100), TIMELINE) == 0.0


def test_availability_busy_with_low_capacity():
    assert availability_score(Availability(status=AvailabilityStatus.BUSY, capacity=20), TIMELINE) == 0.2


def test_availability_capacity_is_read_as_percentage():
    high = availability_score(Availability(capacity=90), TIMELINE)
    mid = availability_score(Availability(capacity=60), TIMELINE)
    low = availability_score(Availability(capacity=10), TIMELINE)
    assert high == pytest.approx(1.0)
    assert mid == pytest.approx(0.9)
    assert low == pytest.approx(0.8)


def test_availability_next_available_before_start_counts_as_fit():
    avail = Availability(capacity=100, next_available=datetime(2026, 10, 20, tzinfo=timezone.utc))
    assert availability_score(avail, TIMELINE) == pytest.approx(1.0)


def test_availability_next_available_after_start_is_penalised():
    avail = Availability(capacity=60, next_available=datetime(2026, 12, 1, tzinfo=timezone.utc))
    assert availability_score(avail, TIMELINE) == pytest.approx(0.6)


# ------------------------------------------------------------------
# Budget
# ------------------------------------------------------------------

def test_budget_hourly_rate_at_midpoint_is_perfect():
    assert budget_score(Pricing(hourly_rate=75), Budget(min=50, max=100, type=BudgetType.HOURLY)) == 1.0


def test_budget_deviation_buckets():
    budget = Budget(min=50, max=100, type=BudgetType.HOURLY)  # midpoint 75
    assert budget_score(Pricing(hourly_rate=85), budget) == 0.8   # 13%
    assert budget_score(Pricing(hourly_rate=100), budget) == 0.6  # 33%
    assert budget_score(Pricing(hourly_rate=115), budget) == 0.4  # 53%
    assert budget_score(Pricing(hourly_rate=160), budget) == 0.2  # 113%


def test_budget_neutral_without_rate_or_budget():
    assert budget_score(Pricing(), Budget(min=50, max=100, type=BudgetType.HOURLY)) == 0.5
    assert budget_score(Pricing(hourly_rate=75), Budget(min=0, max=0, type=BudgetType.HOURLY)) == 0.5


def test_budget_fixed_and_retainer_fall_back_to_hourly_rate():
    assert budget_score(Pricing(hourly_rate=15000), Budget(min=10000, max=20000, type=BudgetType.FIXED)) == 1.0
    assert budget_score(Pricing(project_rate=15000, hourly_rate=1), Budget(min=10000, max=20000)) == 1.0
    assert budget_score(Pricing(hourly_rate=3000), Budget(min=2000, max=4000, type=BudgetType.RETAINER)) == 1.0


def test_budget_hourly_ignores_project_rate():
    assert budget_score(Pricing(project_rate=75), Budget(min=50, max=100, type=BudgetType.HOURLY)) == 0.5


# ------------------------------------------------------------------
# Location / portfolio / response time / verification
# ------------------------------------------------------------------

def test_location_remote_project_is_perfect():
    assert location_score(Location(country="NG"), LocationRequirement(type=LocationType.REMOTE)) == 1.0


def test_location_components_are_additive_and_clamped():
    req = LocationRequirement(type=LocationType.ONSITE, countries=["US"], cities=["Austin"], timezone="America/Chicago")
    assert location_score(Location(country="US", city="Austin", timezone="America/Chicago"), req) == 1.0
    assert location_score(Location(country="us", city="Dallas"), req) == pytest.approx(0.6)
    assert location_score(Location(country="DE", city="Berlin"), req) == 0.0


def test_location_hybrid_without_constraints_scores_zero():
    assert location_score(Location(country="US"), LocationRequirement(type=LocationType.HYBRID)) == 0.0


def test_portfolio_empty_is_neutral_low():
    assert portfolio_score(Portfolio(), "fintech", [_req("python")]) == 0.3


def test_portfolio_relevance_rating_and_size():
    portfolio = Portfolio(
        projects=[
            PortfolioProject(technologies=["python", "postgres"], industry="fintech"),
            PortfolioProject(technologies=["python"], industry="fintech"),
        ],
        ratings=Ratings(average=4.8, count=31),
    )
    # relevance 2/2, rating 0.96, size 0.2
    assert portfolio_score(portfolio, "fintech", [_req("python")]) == pytest.approx(0.5 + 0.288 + 0.04)


def test_portfolio_relevance_is_capped_for_large_portfolios():
    projects = [PortfolioProject(technologies=["python"]) for _ in range(12)]
    s = portfolio_score(Portfolio(projects=projects, ratings=Ratings(average=5.0)), "", [_req("python")])
    assert s == 1.0


def test_portfolio_blank_industry_does_not_count_as_relevant():
    portfolio = Portfolio(projects=[PortfolioProject(technologies=["cobol"], industry="")])
    assert portfolio_score(portfolio, "", [_req("python")]) == pytest.approx(0.02)


def test_response_time_ratio():
    assert response_time_score(4, 12) == 1.0
    assert response_time_score(48, 12) == pytest.approx(0.25)
    assert response_time_score(10, 0) == 0.0


def test_verification_components():
    assert verification_score(Verification()) == 0.0
    assert verification_score(Verification(is_verified=True, badges=["a", "b"])) == pytest.approx(0.7)
    assert verification_score(Verification(badges=[str(i) for i in range(10)])) == pytest.approx(0.5)
    assert verification_score(Verification(is_verified=True, badges=[str(i) for i in range(7)])) == 1.0


def test_clamp01():
    assert clamp01(-1) == 0.0
    assert clamp01(2) == 1.0
    assert clamp01(0.25) == 0.25


# ------------------------------------------------------------------
# Range property over edge-case inputs
# ------------------------------------------------------------------

@pytest.mark.parametrize("profile_skills,project_skills", [
    ([], []),
    (["python"], []),
    ([], [_req("python")]),
    (["a", "b", "c"], [_opt("x")]),
])
def test_skills_always_within_unit_interval(profile_skills, project_skills):
    assert 0.0 <= skills_score(profile_skills, project_skills) <= 1.0


@pytest.mark.parametrize("status,capacity", [
    (AvailabilityStatus.AVAILABLE, 0),
    (AvailabilityStatus.AVAILABLE, 100),
    (AvailabilityStatus.BUSY, 0),
    (AvailabilityStatus.BUSY, 100),
    (AvailabilityStatus.UNAVAILABLE, 50),
])
def test_availability_always_within_unit_interval(status, capacity):
    late = Availability(status=status, capacity=capacity, next_available=datetime(2030, 1, 1, tzinfo=timezone.utc))
    assert 0.0 <= availability_score(late, TIMELINE) <= 1.0
    assert 0.0 <= availability_score(Availability(status=status, capacity=capacity), TIMELINE) <= 1.0


INF = float("inf")


@pytest.mark.parametrize("years", [0, 0.5, 100, INF])
@pytest.mark.parametrize("minimum_years", [0, 50])
@pytest.mark.parametrize("level", list(ExperienceLevel))
@pytest.mark.parametrize("preferred", [ExperienceLevel.ENTRY, ExperienceLevel.EXPERT])
def test_experience_always_within_unit_interval(years, minimum_years, level, preferred):
    s = experience_score(
        Experience(level=level, years=years),
        ExperienceRequirement(minimum_years=minimum_years, preferred_level=preferred),
    )
    assert 0.0 <= s <= 1.0


@pytest.mark.parametrize("pricing", [
    Pricing(),
    Pricing(hourly_rate=INF),
    Pricing(hourly_rate=1e-9),
    Pricing(hourly_rate=INF, project_rate=INF, retainer_rate=INF),
    Pricing(project_rate=1e12, retainer_rate=0),
])
@pytest.mark.parametrize("low,high", [(0, 0), (0, 1e12), (1e-6, 1e-6), (100, 50)])
@pytest.mark.parametrize("budget_type", list(BudgetType))
def test_budget_always_within_unit_interval(pricing, low, high, budget_type):
    assert 0.0 <= budget_score(pricing, Budget(min=low, max=high, type=budget_type)) <= 1.0


@pytest.mark.parametrize("location_type", list(LocationType))
@pytest.mark.parametrize("profile_loc", [
    Location(),
    Location(country="US", city="Austin", timezone="America/Chicago"),
    Location(country="", city="", timezone=""),
])
def test_location_always_within_unit_interval(location_type, profile_loc):
    full = LocationRequirement(
        type=location_type, countries=["US"], cities=["Austin"], timezone="America/Chicago",
    )
    bare = LocationRequirement(type=location_type, countries=[], cities=None, timezone="")
    assert 0.0 <= location_score(profile_loc, full) <= 1.0
    assert 0.0 <= location_score(profile_loc, bare) <= 1.0


@pytest.mark.parametrize("average", [0, 5, 100])
@pytest.mark.parametrize("count", [0, 1, 12])
@pytest.mark.parametrize("industry", ["", "fintech"])
def test_portfolio_always_within_unit_interval(average, count, industry):
    projects = [PortfolioProject(technologies=["python"], industry="fintech") for _ in range(count)]
    portfolio = Portfolio(projects=projects, ratings=Ratings(average=average, count=count))
    assert 0.0 <= portfolio_score(portfolio, industry, [_req("python")]) <= 1.0
    assert 0.0 <= portfolio_score(portfolio, industry, []) <= 1.0


@pytest.mark.parametrize("profile_hours,expected_hours", [
    (0, 0),
    (INF, 0),
    (INF, INF),
    (0, INF),
    (48, 12),
    (1, 1000),
    (1000, 1),
    (1, 0),
])
def test_response_time_always_within_unit_interval(profile_hours, expected_hours):
    assert 0.0 <= response_time_score(profile_hours, expected_hours) <= 1.0


def test_response_time_zero_expectation_only_rewards_instant_replies():
    assert response_time_score(0, 0) == 1.0
    assert response_time_score(1, 0) == 0.0
    assert response_time_score(INF, 0) == 0.0


@pytest.mark.parametrize("is_verified", [False, True])
@pytest.mark.parametrize("badge_count", [0, 1, 5, 20])
def test_verification_always_within_unit_interval(is_verified, badge_count):
    verification = Verification(is_verified=is_verified, badges=[f"b{i}" for i in range(badge_count)])
    assert 0.0 <= verification_score(verification) <= 1.0
