from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Tuple

from gigmatch.models import Profile, Project, to_jsonable

# Canonical dimension order; breakdowns, weights and reports all follow it.
DIMENSIONS: Tuple[str, ...] = (
    "skills",
    "experience",
    "availability",
    "budget",
    "location",
    "portfolio",
    "response_time",
    "verification",
)


class Confidence(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    EXCELLENT = "excellent"


class Recommendation(str, Enum):
    REJECT = "reject"
    CONSIDER = "consider"
    RECOMMEND = "recommend"
    HIGHLY_RECOMMEND = "highly_recommend"


class CompetitionLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class ScoreBreakdown:
    skills: float
    experience: float
    availability: float
    budget: float
    location: float
    portfolio: float
    response_time: float
    verification: float

    def items(self) -> List[Tuple[str, float]]:
        return [(name, getattr(self, name)) for name in DIMENSIONS]

    def to_dict(self) -> Dict[str, float]:
        return dict(self.items())


@dataclass(frozen=True)
class MatchScore:
    overall: float
    breakdown: ScoreBreakdown
    # Human-friendly explanation payload (stable, deterministic)
    reasoning: List[str] = field(default_factory=list)
    concerns: List[str] = field(default_factory=list)
    strengths: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return to_jsonable(self)


@dataclass(frozen=True)
class MatchInsights:
    summary: str
    key_strengths: List[str] = field(default_factory=list)
    potential_concerns: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ProfileMatch:
    profile: Profile
    project: Project
    score: MatchScore
    rank: int
    confidence: Confidence
    recommendation: Recommendation
    insights: MatchInsights
    estimated_success_rate: float
    competition_level: CompetitionLevel

    def to_dict(self, *, include_entities: bool = False) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "profile_id": self.profile.id,
            "project_id": self.project.id,
            "rank": self.rank,
            "score": self.score.to_dict(),
            "confidence": self.confidence.value,
            "recommendation": self.recommendation.value,
            "insights": to_jsonable(self.insights),
            "estimated_success_rate": self.estimated_success_rate,
            "competition_level": self.competition_level.value,
        }
        if include_entities:
            d["profile"] = self.profile.to_dict()
            d["project"] = self.project.to_dict()
        return d


@dataclass(frozen=True)
class ProjectMatch:
    """Reverse direction result: one open project scored for a profile."""
    project: Project
    score: MatchScore
    recommendation: Recommendation
    rank: int = 0

    def to_dict(self, *, include_entities: bool = False) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "project_id": self.project.id,
            "rank": self.rank,
            "score": self.score.to_dict(),
            "recommendation": self.recommendation.value,
        }
        if include_entities:
            d["project"] = self.project.to_dict()
        return d
