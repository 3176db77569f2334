from __future__ import annotations

from gigmatch.models import AvailabilityStatus, LocationType, Profile, Project


def is_eligible(profile: Profile, project: Project) -> bool:
    """
    Cheap pre-screen run before scoring:
    - unavailable candidates are out
    - for onsite/hybrid projects, a candidate who does not accept remote work
      must be located in one of the project's allowed countries
    """
    if profile.availability.status == AvailabilityStatus.UNAVAILABLE:
        return False

    if project.location.type != LocationType.REMOTE and not profile.preferences.remote:
        allowed = {c.strip().lower() for c in (project.location.countries or [])}
        if profile.location.country.strip().lower() not in allowed:
            return False

    return True
