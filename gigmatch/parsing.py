"""
gigmatch/parsing.py

Record Parser: the only place raw document-store records are read.

Records arrive as plain dicts whose shape drifts over time (camelCase keys,
missing sub-objects, numbers stored as strings, several timestamp encodings).
Everything here is total: a missing or malformed optional field falls back to
its named default. The only failure is a record with no identity.
"""
from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar

from gigmatch.errors import NotFoundError
from gigmatch.models import (
    Availability,
    AvailabilityStatus,
    Budget,
    BudgetRange,
    BudgetType,
    ClientInfo,
    Complexity,
    Experience,
    ExperienceLevel,
    ExperienceRequirement,
    Location,
    LocationRequirement,
    LocationType,
    Portfolio,
    PortfolioProject,
    Pricing,
    Profile,
    ProfilePreferences,
    Project,
    ProjectRequirements,
    Ratings,
    SkillLevel,
    SkillRequirement,
    Timeline,
    UserType,
    Verification,
    WorkingHours,
    utc_now,
)

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)

# --- Named defaults ---

DEFAULT_CAPACITY = 100.0
DEFAULT_REMOTE = True
DEFAULT_RESPONSE_TIME_HOURS = 24.0
DEFAULT_CLIENT_RESPONSE_TIME_HOURS = 24.0
DEFAULT_TIMEZONE = "UTC"
DEFAULT_CURRENCY = "USD"
DEFAULT_TEAM_SIZE = 1
MAX_RATING = 5.0


# --- Field coercion helpers ---


def _get(raw: Optional[Mapping[str, Any]], *keys: str) -> Any:
    """First present, non-None value among camelCase/snake_case aliases."""
    if not isinstance(raw, Mapping):
        return None
    for k in keys:
        v = raw.get(k)
        if v is not None:
            return v
    return None


def _section(raw: Optional[Mapping[str, Any]], *keys: str) -> Mapping[str, Any]:
    v = _get(raw, *keys)
    return v if isinstance(v, Mapping) else {}


def _str(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return str(value).strip()


def _float(value: Any, default: float) -> float:
    if value is None or isinstance(value, bool):
        return default
    try:
        out = float(value)
    except (TypeError, ValueError):
        return default
    if out != out:  # NaN
        return default
    return out


def _opt_float(value: Any) -> Optional[float]:
    out = _float(value, -1.0)
    # Rates of zero or less carry no pricing signal
    return out if out > 0 else None


def _int(value: Any, default: int) -> int:
    return int(_float(value, float(default)))


def parse_bool(value: Any, default: Optional[bool]) -> Optional[bool]:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        v = value.strip().lower()
        if v in ("true", "yes", "1", "y"):
            return True
        if v in ("false", "no", "0", "n"):
            return False
        return default
    if isinstance(value, (int, float)):
        return bool(value)
    return default


def _enum(enum_cls: Type[E], value: Any, default: E) -> E:
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        try:
            return enum_cls(value.strip().lower())
        except ValueError:
            logger.debug("Unknown %s value %r, using %s", enum_cls.__name__, value, default.value)
    return default


def _opt_str(value: Any) -> Optional[str]:
    s = _str(value)
    return s or None


def parse_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [p.strip() for p in value.split(",") if p.strip()]
    if isinstance(value, (list, tuple, set)):
        return [str(v).strip() for v in value if v is not None and str(v).strip()]
    return []


def _opt_str_list(value: Any) -> Optional[List[str]]:
    if value is None:
        return None
    return parse_str_list(value)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Accepts: datetime, date, ISO-8601 string, epoch seconds, and document-store
    timestamp maps ({"seconds": ...} / {"_seconds": ...}). Returns UTC or None.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, Mapping):
        secs = _get(value, "seconds", "_seconds")
        return parse_timestamp(secs) if secs is not None else None
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(float(value), tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        try:
            return parse_timestamp(datetime.fromisoformat(s))
        except ValueError:
            return None
    return None


def _identity(raw: Mapping[str, Any], given: Optional[str], kind: str) -> str:
    ident = _str(given) or _str(_get(raw, "id"))
    if not ident:
        raise NotFoundError(kind)
    return ident


# --- Profile ---


def _parse_portfolio_project(raw: Any) -> Optional[PortfolioProject]:
    if not isinstance(raw, Mapping):
        return None
    return PortfolioProject(
        title=_str(_get(raw, "title")),
        description=_str(_get(raw, "description")),
        technologies=parse_str_list(_get(raw, "technologies")),
        industry=_str(_get(raw, "industry")),
        duration=_float(_get(raw, "duration"), 0.0),
        budget=_float(_get(raw, "budget"), 0.0),
    )


def parse_profile(
        raw: Optional[Mapping[str, Any]],
        profile_id: Optional[str] = None,
        *,
        now: Optional[datetime] = None,
) -> Profile:
    """
    Map a raw profile record onto a fully populated Profile.

    `profile_id` wins over the record's own "id" (document ids often live
    outside the document body). Raises NotFoundError when neither is set.
    """
    raw = raw if isinstance(raw, Mapping) else {}
    ident = _identity(raw, profile_id, "profile")
    now = now or utc_now()

    exp = _section(raw, "experience")
    prefs = _section(raw, "preferences")
    budget_range = _section(prefs, "budgetRange", "budget_range")
    working_hours = _section(prefs, "workingHours", "working_hours")
    portfolio = _section(raw, "portfolio")
    ratings = _section(portfolio, "ratings")
    pricing = _section(raw, "pricing")
    avail = _section(raw, "availability")
    loc = _section(raw, "location")
    verif = _section(raw, "verification")

    raw_projects = _get(portfolio, "projects")
    if not isinstance(raw_projects, (list, tuple)):
        raw_projects = []
    projects = [p for p in map(_parse_portfolio_project, raw_projects) if p is not None]

    rating_avg = min(MAX_RATING, max(0.0, _float(_get(ratings, "average"), 0.0)))

    return Profile(
        id=ident,
        user_id=_str(_get(raw, "userId", "user_id")),
        user_type=_enum(UserType, _get(raw, "userType", "user_type"), UserType.FREELANCER),
        name=_str(_get(raw, "name")),
        title=_opt_str(_get(raw, "title")),
        skills=parse_str_list(_get(raw, "skills")),
        experience=Experience(
            level=_enum(ExperienceLevel, _get(exp, "level"), ExperienceLevel.ENTRY),
            years=max(0.0, _float(_get(exp, "years"), 0.0)),
            industries=parse_str_list(_get(exp, "industries")),
        ),
        preferences=ProfilePreferences(
            project_types=parse_str_list(_get(prefs, "projectTypes", "project_types")),
            budget_range=BudgetRange(
                min=_float(_get(budget_range, "min"), 0.0),
                max=_float(_get(budget_range, "max"), 0.0),
                currency=_str(_get(budget_range, "currency"), DEFAULT_CURRENCY) or DEFAULT_CURRENCY,
            ),
            working_hours=WorkingHours(
                timezone=_str(_get(working_hours, "timezone"), DEFAULT_TIMEZONE) or DEFAULT_TIMEZONE,
                availability=parse_str_list(_get(working_hours, "availability")),
            ),
            remote=parse_bool(_get(prefs, "remote"), DEFAULT_REMOTE),
            locations=parse_str_list(_get(prefs, "locations")),
        ),
        portfolio=Portfolio(
            projects=projects,
            ratings=Ratings(
                average=rating_avg,
                count=max(0, _int(_get(ratings, "count"), 0)),
            ),
        ),
        pricing=Pricing(
            hourly_rate=_opt_float(_get(pricing, "hourlyRate", "hourly_rate")),
            project_rate=_opt_float(_get(pricing, "projectRate", "project_rate")),
            retainer_rate=_opt_float(_get(pricing, "retainerRate", "retainer_rate")),
        ),
        availability=Availability(
            status=_enum(AvailabilityStatus, _get(avail, "status"), AvailabilityStatus.AVAILABLE),
            capacity=_float(_get(avail, "capacity"), DEFAULT_CAPACITY),
            next_available=parse_timestamp(_get(avail, "nextAvailable", "next_available")),
        ),
        location=Location(
            country=_str(_get(loc, "country")),
            city=_str(_get(loc, "city")),
            timezone=_str(_get(loc, "timezone"), DEFAULT_TIMEZONE) or DEFAULT_TIMEZONE,
        ),
        verification=Verification(
            is_verified=parse_bool(_get(verif, "isVerified", "is_verified"), False),
            badges=parse_str_list(_get(verif, "badges")),
        ),
        last_active=parse_timestamp(_get(raw, "lastActive", "last_active")) or now,
        response_time=max(0.0, _float(_get(raw, "responseTime", "response_time"), DEFAULT_RESPONSE_TIME_HOURS)),
    )


# --- Project ---


def _parse_skill_requirement(raw: Any) -> Optional[SkillRequirement]:
    # Plain strings are treated as required skills at the default level
    if isinstance(raw, str):
        return SkillRequirement(name=raw) if raw.strip() else None
    if not isinstance(raw, Mapping):
        return None
    name = _str(_get(raw, "name"))
    if not name:
        return None
    return SkillRequirement(
        name=name,
        level=_enum(SkillLevel, _get(raw, "level"), SkillLevel.INTERMEDIATE),
        required=parse_bool(_get(raw, "required"), True),
    )


def parse_project(
        raw: Optional[Mapping[str, Any]],
        project_id: Optional[str] = None,
        *,
        now: Optional[datetime] = None,
) -> Project:
    """Map a raw project record onto a fully populated Project."""
    raw = raw if isinstance(raw, Mapping) else {}
    ident = _identity(raw, project_id, "project")
    now = now or utc_now()

    budget = _section(raw, "budget")
    timeline = _section(raw, "timeline")
    loc = _section(raw, "location")
    exp = _section(raw, "experience")
    reqs = _section(raw, "requirements")
    client = _section(raw, "clientInfo", "client_info")

    raw_skills = _get(raw, "skills")
    if not isinstance(raw_skills, (list, tuple)):
        raw_skills = []
    skills = [s for s in map(_parse_skill_requirement, raw_skills) if s is not None]

    return Project(
        id=ident,
        title=_str(_get(raw, "title")),
        description=_str(_get(raw, "description")),
        skills=skills,
        budget=Budget(
            min=max(0.0, _float(_get(budget, "min"), 0.0)),
            max=max(0.0, _float(_get(budget, "max"), 0.0)),
            currency=_str(_get(budget, "currency"), DEFAULT_CURRENCY) or DEFAULT_CURRENCY,
            type=_enum(BudgetType, _get(budget, "type"), BudgetType.FIXED),
        ),
        timeline=Timeline(
            start_date=parse_timestamp(_get(timeline, "startDate", "start_date")) or now,
            end_date=parse_timestamp(_get(timeline, "endDate", "end_date")) or now,
            duration=max(0, _int(_get(timeline, "duration"), 0)),
        ),
        location=LocationRequirement(
            type=_enum(LocationType, _get(loc, "type"), LocationType.REMOTE),
            countries=_opt_str_list(_get(loc, "countries")),
            cities=_opt_str_list(_get(loc, "cities")),
            timezone=_opt_str(_get(loc, "timezone")),
        ),
        industry=_str(_get(raw, "industry")),
        complexity=_enum(Complexity, _get(raw, "complexity"), Complexity.MODERATE),
        team_size=max(1, _int(_get(raw, "teamSize", "team_size"), DEFAULT_TEAM_SIZE)),
        experience=ExperienceRequirement(
            minimum_years=max(0.0, _float(_get(exp, "minimumYears", "minimum_years"), 0.0)),
            preferred_level=_enum(
                ExperienceLevel,
                _get(exp, "preferredLevel", "preferred_level"),
                ExperienceLevel.INTERMEDIATE,
            ),
        ),
        requirements=ProjectRequirements(
            languages=parse_str_list(_get(reqs, "languages")),
            certifications=_opt_str_list(_get(reqs, "certifications")),
            portfolio=parse_bool(_get(reqs, "portfolio"), False),
            references=parse_bool(_get(reqs, "references"), False),
        ),
        client_info=ClientInfo(
            company_size=_str(_get(client, "companySize", "company_size")),
            industry=_str(_get(client, "industry")),
            previous_projects=max(0, _int(_get(client, "previousProjects", "previous_projects"), 0)),
            response_time=max(
                0.0,
                _float(_get(client, "responseTime", "response_time"), DEFAULT_CLIENT_RESPONSE_TIME_HOURS),
            ),
        ),
        status=_str(_get(raw, "status"), "open").lower() or "open",
        deadline=parse_timestamp(_get(raw, "deadline")),
    )


def records_by_id(raw: Any) -> Dict[str, Mapping[str, Any]]:
    """
    Store files hold either {"<id>": {...}, ...} or [{"id": ...}, ...].
    Entries without an id are skipped.
    """
    out: Dict[str, Mapping[str, Any]] = {}
    if isinstance(raw, Mapping):
        for k, v in raw.items():
            if isinstance(v, Mapping):
                out[str(k)] = v
    elif isinstance(raw, (list, tuple)):
        for v in raw:
            if isinstance(v, Mapping) and _str(_get(v, "id")):
                out[_str(_get(v, "id"))] = v
    return out
