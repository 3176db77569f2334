from __future__ import annotations

from gigmatch.matching.scoring import clamp01
from gigmatch.matching.types import MatchScore
from gigmatch.models import Complexity, ExperienceLevel, Profile, Project


def estimate_success_rate(profile: Profile, project: Project, score: MatchScore) -> float:
    """Overall score discounted to 70%, then nudged by track-record signals."""
    rate = score.overall * 0.7

    rating = profile.portfolio.ratings.average
    if rating > 4.5:
        rate += 0.15
    elif rating < 3.5:
        rate -= 0.1

    if score.breakdown.experience > 0.9:
        rate += 0.1

    if profile.verification.is_verified:
        rate += 0.05

    if project.complexity == Complexity.ENTERPRISE and profile.experience.level != ExperienceLevel.EXPERT:
        rate -= 0.15

    return clamp01(rate)
