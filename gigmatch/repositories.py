from __future__ import annotations

import json
import os
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Protocol, Sequence

from gigmatch import config
from gigmatch.models import utc_now
from gigmatch.parsing import parse_timestamp, records_by_id

if TYPE_CHECKING:
    from gigmatch.matching.types import ProfileMatch

RawRecord = Mapping[str, Any]


def _ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def _best_effort_lockdown_file_permissions(path: Path) -> None:
    """
    Best-effort privacy: on Unix, set 600. On Windows, no-op.
    """
    try:
        os.chmod(path, 0o600)
    except OSError:
        pass


def _flag(raw: RawRecord, key: str, nested: Optional[str] = None) -> bool:
    # Missing flags count as set: local fixtures rarely carry them
    value = raw.get(key)
    if nested is not None:
        value = value.get(nested) if isinstance(value, Mapping) else None
    return value is None or bool(value)


def is_listed_candidate(raw: RawRecord) -> bool:
    """Active and publicly listed."""
    return _flag(raw, "isActive") and _flag(raw, "publicProfile", "isPublic")


def is_open_project(raw: RawRecord, now: datetime) -> bool:
    status = str(raw.get("status") or "open").strip().lower()
    if status != "open":
        return False
    deadline = parse_timestamp(raw.get("deadline"))
    return deadline is None or deadline > now


def _deadline_sort_key(raw: RawRecord):
    deadline = parse_timestamp(raw.get("deadline"))
    # Projects without a deadline sort last
    return (deadline is None, deadline.timestamp() if deadline else 0.0)


class ProfileRepository(Protocol):
    def get_profile(self, profile_id: str) -> Optional[RawRecord]:
        ...

    def list_candidate_profiles(self, *, limit: int) -> List[RawRecord]:
        """Active, publicly listed profiles, at most `limit`."""
        ...


class ProjectRepository(Protocol):
    def get_project(self, project_id: str) -> Optional[RawRecord]:
        ...

    def list_open_projects(self, *, now: datetime, limit: int) -> List[RawRecord]:
        """Open projects whose deadline is after `now`, soonest deadline first."""
        ...


class MatchRepository(Protocol):
    def store_matches(self, project_id: str, matches: Sequence[ProfileMatch]) -> None:
        ...


def _with_id(record_id: str, raw: RawRecord) -> Dict[str, Any]:
    out = dict(raw)
    out.setdefault("id", record_id)
    return out


class InMemoryMarketplaceStore:
    """
    Dict-backed implementation of all three repositories.
    Useful for tests and for callers that already hold records in memory.
    """

    def __init__(
            self,
            profiles: Any = None,
            projects: Any = None,
    ) -> None:
        self.profiles: Dict[str, RawRecord] = records_by_id(profiles or {})
        self.projects: Dict[str, RawRecord] = records_by_id(projects or {})
        self.stored: List[Dict[str, Any]] = []

    def get_profile(self, profile_id: str) -> Optional[RawRecord]:
        raw = self.profiles.get(profile_id)
        return _with_id(profile_id, raw) if raw is not None else None

    def list_candidate_profiles(self, *, limit: int) -> List[RawRecord]:
        out = [_with_id(pid, raw) for pid, raw in self.profiles.items() if is_listed_candidate(raw)]
        return out[:limit]

    def get_project(self, project_id: str) -> Optional[RawRecord]:
        raw = self.projects.get(project_id)
        return _with_id(project_id, raw) if raw is not None else None

    def list_open_projects(self, *, now: datetime, limit: int) -> List[RawRecord]:
        out = [_with_id(pid, raw) for pid, raw in self.projects.items() if is_open_project(raw, now)]
        out.sort(key=_deadline_sort_key)
        return out[:limit]

    def store_matches(self, project_id: str, matches: Sequence[ProfileMatch]) -> None:
        self.stored.append(_match_record(project_id, matches))


def _match_record(project_id: str, matches: Sequence[ProfileMatch]) -> Dict[str, Any]:
    return {
        "project_id": project_id,
        "stored_at": utc_now().isoformat(),
        "matches": [m.to_dict() for m in matches],
    }


class JsonMarketplaceStore:
    """
    Local persistence using JSON files.

    Layout:
      <base_dir>/
        profiles.json -> { "<profile_id>": {...raw profile...}, ... } or [{"id": ...}, ...]
        projects.json -> same shape for projects
        matches.jsonl -> JSON lines: {"project_id": "...", "stored_at": "...", "matches": [...]}
    """

    def __init__(self, base_dir: Path) -> None:
        self.base_dir = base_dir
        self.profiles_path = base_dir / "profiles.json"
        self.projects_path = base_dir / "projects.json"
        self.matches_path = base_dir / "matches.jsonl"
        _ensure_dir(self.base_dir)

    def _load(self, path: Path) -> Dict[str, RawRecord]:
        if not path.exists():
            return {}
        raw_text = path.read_text(encoding="utf-8").strip()
        if not raw_text:
            return {}
        return records_by_id(json.loads(raw_text))

    def _delegate(self) -> InMemoryMarketplaceStore:
        return InMemoryMarketplaceStore(
            profiles=self._load(self.profiles_path),
            projects=self._load(self.projects_path),
        )

    def get_profile(self, profile_id: str) -> Optional[RawRecord]:
        return self._delegate().get_profile(profile_id)

    def list_candidate_profiles(self, *, limit: int) -> List[RawRecord]:
        return self._delegate().list_candidate_profiles(limit=limit)

    def get_project(self, project_id: str) -> Optional[RawRecord]:
        return self._delegate().get_project(project_id)

    def list_open_projects(self, *, now: datetime, limit: int) -> List[RawRecord]:
        return self._delegate().list_open_projects(now=now, limit=limit)

    def store_matches(self, project_id: str, matches: Sequence[ProfileMatch]) -> None:
        line = json.dumps(_match_record(project_id, matches), sort_keys=True)
        with self.matches_path.open("a", encoding="utf-8") as f:
            f.write(line + "\n")
        _best_effort_lockdown_file_permissions(self.matches_path)

    def load_matches(self, project_id: Optional[str] = None) -> List[Dict[str, Any]]:
        """Stored runs, oldest first; optionally only those for one project."""
        if not self.matches_path.exists():
            return []
        runs: List[Dict[str, Any]] = []
        for line in self.matches_path.read_text(encoding="utf-8").splitlines():
            if not line.strip():
                continue
            record = json.loads(line)
            if project_id is None or record.get("project_id") == project_id:
                runs.append(record)
        return runs


def default_repo_dir() -> Path:
    """
    Default local persistence dir (GIGMATCH_DATA_DIR overrides it).
    """
    return Path(config.DATA_DIR)
