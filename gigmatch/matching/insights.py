"""
Rule-based explanation text for a score breakdown.

No model calls: the same breakdown always yields the same sentences, in the
same order, so results stay reproducible and cheap to generate.
"""
from __future__ import annotations

from typing import List

from gigmatch.matching.types import (
    Confidence,
    MatchInsights,
    MatchScore,
    Recommendation,
    ScoreBreakdown,
)
from gigmatch.models import Project

STRENGTH_THRESHOLD = 0.8

# Display names for dimension keys ("response_time" -> "response time")
_DIMENSION_LABELS = {"response_time": "response time"}


def dimension_label(name: str) -> str:
    return _DIMENSION_LABELS.get(name, name)


def identify_strengths(breakdown: ScoreBreakdown) -> List[str]:
    return [
        f"Excellent {dimension_label(name)} match"
        for name, score in breakdown.items()
        if score > STRENGTH_THRESHOLD
    ]


def identify_concerns(breakdown: ScoreBreakdown, project: Project) -> List[str]:
    concerns: List[str] = []
    if breakdown.budget < 0.5:
        concerns.append("Budget expectations may exceed project constraints")
    if breakdown.availability < 0.6:
        concerns.append("Limited availability may impact project timeline")
    if breakdown.location < 0.4 and not project.is_remote:
        concerns.append("Geographic location may present coordination challenges")
    return concerns


def generate_reasoning(breakdown: ScoreBreakdown) -> List[str]:
    reasoning: List[str] = []
    if breakdown.skills > 0.8:
        reasoning.append("Strong technical skill alignment with project requirements")
    if breakdown.experience > 0.7:
        reasoning.append("Relevant experience level matches project complexity")
    if breakdown.portfolio > 0.7:
        reasoning.append("Portfolio demonstrates success in similar projects")
    return reasoning


def _sentence_case(text: str) -> str:
    return text[:1].upper() + text[1:]


def match_summary(overall: float, confidence: Confidence, recommendation: Recommendation) -> str:
    """e.g. 'Excellent match with 85% compatibility. Highly recommend for this project.'"""
    percent = int(overall * 100 + 0.5)
    action = recommendation.value.replace("_", " ")
    return (
        f"{_sentence_case(confidence.value)} match with {percent}% compatibility. "
        f"{_sentence_case(action)} for this project."
    )


def generate_insights(
        score: MatchScore,
        project: Project,
        confidence: Confidence,
        recommendation: Recommendation,
) -> MatchInsights:
    b = score.breakdown

    key_strengths: List[str] = []
    if b.skills > 0.8:
        key_strengths.append("Excellent skill match with all required technologies")
    if b.experience > 0.8:
        key_strengths.append("Strong relevant experience in similar projects")
    if b.portfolio > 0.7:
        key_strengths.append("Proven track record with relevant portfolio projects")

    potential_concerns: List[str] = []
    if b.budget < 0.5:
        potential_concerns.append("Budget expectations may not align with project budget")
    if b.availability < 0.6:
        potential_concerns.append("Availability constraints might affect project timeline")
    if b.location < 0.4 and not project.is_remote:
        potential_concerns.append("Location mismatch may require additional coordination")

    if score.overall > 0.8:
        recommendations = ["Highly recommended candidate - proceed with interview"]
    elif score.overall > 0.6:
        recommendations = ["Good candidate - review portfolio and conduct screening"]
    else:
        recommendations = ["Consider for backup - address identified concerns first"]

    return MatchInsights(
        summary=match_summary(score.overall, confidence, recommendation),
        key_strengths=key_strengths,
        potential_concerns=potential_concerns,
        recommendations=recommendations,
    )
