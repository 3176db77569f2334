from __future__ import annotations

from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


class UserType(str, Enum):
    FREELANCER = "freelancer"
    VENDOR = "vendor"
    ORGANIZATION = "organization"


class ExperienceLevel(str, Enum):
    ENTRY = "entry"
    INTERMEDIATE = "intermediate"
    SENIOR = "senior"
    EXPERT = "expert"


# Ordinal used by the experience scorer (entry < intermediate < senior < expert)
EXPERIENCE_RANK: Dict[ExperienceLevel, int] = {
    ExperienceLevel.ENTRY: 1,
    ExperienceLevel.INTERMEDIATE: 2,
    ExperienceLevel.SENIOR: 3,
    ExperienceLevel.EXPERT: 4,
}


class SkillLevel(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"


class AvailabilityStatus(str, Enum):
    AVAILABLE = "available"
    BUSY = "busy"
    UNAVAILABLE = "unavailable"


class BudgetType(str, Enum):
    HOURLY = "hourly"
    FIXED = "fixed"
    RETAINER = "retainer"


class LocationType(str, Enum):
    REMOTE = "remote"
    ONSITE = "onsite"
    HYBRID = "hybrid"


class Complexity(str, Enum):
    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"
    ENTERPRISE = "enterprise"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def normalize_whitespace(text: str) -> str:
    return " ".join((text or "").split()).strip()


def _clean_list(values: List[str]) -> List[str]:
    """Whitespace-normalize, drop empties, keep first occurrence order."""
    out: List[str] = []
    seen = set()
    for v in values or []:
        nv = normalize_whitespace(str(v))
        if nv and nv.lower() not in seen:
            out.append(nv)
            seen.add(nv.lower())
    return out


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


def to_jsonable(value: Any) -> Any:
    """asdict() plus enum/datetime coercion, for JSON output and persistence."""
    return _jsonable(asdict(value))


# --- Profile (candidate) ---


@dataclass(frozen=True)
class Experience:
    level: ExperienceLevel = ExperienceLevel.ENTRY
    years: float = 0.0
    industries: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class BudgetRange:
    min: float = 0.0
    max: float = 0.0
    currency: str = "USD"


@dataclass(frozen=True)
class WorkingHours:
    timezone: str = "UTC"
    availability: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ProfilePreferences:
    project_types: List[str] = field(default_factory=list)
    budget_range: BudgetRange = field(default_factory=BudgetRange)
    working_hours: WorkingHours = field(default_factory=WorkingHours)
    remote: bool = True
    locations: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class PortfolioProject:
    title: str = ""
    description: str = ""
    technologies: List[str] = field(default_factory=list)
    industry: str = ""
    duration: float = 0.0
    budget: float = 0.0


@dataclass(frozen=True)
class Ratings:
    average: float = 0.0
    count: int = 0


@dataclass(frozen=True)
class Portfolio:
    projects: List[PortfolioProject] = field(default_factory=list)
    ratings: Ratings = field(default_factory=Ratings)


@dataclass(frozen=True)
class Pricing:
    hourly_rate: Optional[float] = None
    project_rate: Optional[float] = None
    retainer_rate: Optional[float] = None


@dataclass(frozen=True)
class Availability:
    status: AvailabilityStatus = AvailabilityStatus.AVAILABLE
    capacity: float = 100.0  # percentage, 0..100
    next_available: Optional[datetime] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "capacity", min(100.0, max(0.0, float(self.capacity))))
        object.__setattr__(self, "next_available", _as_utc(self.next_available))

    @property
    def capacity_fraction(self) -> float:
        return self.capacity / 100.0


@dataclass(frozen=True)
class Location:
    country: str = ""
    city: str = ""
    timezone: str = "UTC"


@dataclass(frozen=True)
class Verification:
    is_verified: bool = False
    badges: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class Profile:
    """
    Candidate provider snapshot. Built by gigmatch.parsing.parse_profile;
    the engine never mutates it.
    """
    id: str
    user_id: str = ""
    user_type: UserType = UserType.FREELANCER
    name: str = ""
    title: Optional[str] = None
    skills: List[str] = field(default_factory=list)
    experience: Experience = field(default_factory=Experience)
    preferences: ProfilePreferences = field(default_factory=ProfilePreferences)
    portfolio: Portfolio = field(default_factory=Portfolio)
    pricing: Pricing = field(default_factory=Pricing)
    availability: Availability = field(default_factory=Availability)
    location: Location = field(default_factory=Location)
    verification: Verification = field(default_factory=Verification)
    last_active: datetime = field(default_factory=utc_now)
    response_time: float = 24.0  # hours

    def __post_init__(self) -> None:
        object.__setattr__(self, "name", normalize_whitespace(self.name))
        object.__setattr__(self, "skills", _clean_list(self.skills))
        object.__setattr__(self, "last_active", _as_utc(self.last_active))

    def to_dict(self) -> Dict[str, Any]:
        return to_jsonable(self)


# --- Project (requirement) ---


@dataclass(frozen=True)
class SkillRequirement:
    name: str
    level: SkillLevel = SkillLevel.INTERMEDIATE
    required: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "name", normalize_whitespace(self.name))


@dataclass(frozen=True)
class Budget:
    min: float = 0.0
    max: float = 0.0
    currency: str = "USD"
    type: BudgetType = BudgetType.FIXED

    def __post_init__(self) -> None:
        # Guard: swapped ranges
        if self.max < self.min:
            lo, hi = self.max, self.min
            object.__setattr__(self, "min", lo)
            object.__setattr__(self, "max", hi)

    @property
    def midpoint(self) -> float:
        return (self.min + self.max) / 2


@dataclass(frozen=True)
class Timeline:
    start_date: datetime = field(default_factory=utc_now)
    end_date: datetime = field(default_factory=utc_now)
    duration: int = 0  # days

    def __post_init__(self) -> None:
        object.__setattr__(self, "start_date", _as_utc(self.start_date))
        object.__setattr__(self, "end_date", _as_utc(self.end_date))


@dataclass(frozen=True)
class LocationRequirement:
    type: LocationType = LocationType.REMOTE
    countries: Optional[List[str]] = None
    cities: Optional[List[str]] = None
    timezone: Optional[str] = None


@dataclass(frozen=True)
class ExperienceRequirement:
    minimum_years: float = 0.0
    preferred_level: ExperienceLevel = ExperienceLevel.INTERMEDIATE


@dataclass(frozen=True)
class ProjectRequirements:
    languages: List[str] = field(default_factory=list)
    certifications: Optional[List[str]] = None
    portfolio: bool = False
    references: bool = False


@dataclass(frozen=True)
class ClientInfo:
    company_size: str = ""
    industry: str = ""
    previous_projects: int = 0
    response_time: float = 24.0  # hours the client expects


@dataclass(frozen=True)
class Project:
    """
    Project requirement snapshot. Built by gigmatch.parsing.parse_project.
    """
    id: str
    title: str = ""
    description: str = ""
    skills: List[SkillRequirement] = field(default_factory=list)
    budget: Budget = field(default_factory=Budget)
    timeline: Timeline = field(default_factory=Timeline)
    location: LocationRequirement = field(default_factory=LocationRequirement)
    industry: str = ""
    complexity: Complexity = Complexity.MODERATE
    team_size: int = 1
    experience: ExperienceRequirement = field(default_factory=ExperienceRequirement)
    requirements: ProjectRequirements = field(default_factory=ProjectRequirements)
    client_info: ClientInfo = field(default_factory=ClientInfo)
    status: str = "open"
    deadline: Optional[datetime] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "title", normalize_whitespace(self.title))
        object.__setattr__(self, "description", normalize_whitespace(self.description))
        object.__setattr__(self, "deadline", _as_utc(self.deadline))

    @property
    def is_remote(self) -> bool:
        return self.location.type == LocationType.REMOTE

    def to_dict(self) -> Dict[str, Any]:
        return to_jsonable(self)
