# gigmatch/config.py
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from gigmatch.core.text_processing import SkillMatchMode


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_skill_mode(name: str, default: SkillMatchMode) -> SkillMatchMode:
    raw = (os.getenv(name) or "").strip().lower()
    try:
        return SkillMatchMode(raw) if raw else default
    except ValueError:
        return default


# --- Local persistence / diagnostics ---

DATA_DIR: str = os.environ.get("GIGMATCH_DATA_DIR", "").strip() or ".gigmatch"
LOG_LEVEL: str = os.environ.get("GIGMATCH_LOG_LEVEL", "WARNING").strip().upper() or "WARNING"


@dataclass(frozen=True)
class EngineConfig:
    project_pool_limit: int = 100
    profile_pool_limit: int = 50
    max_workers: int = 8
    batch_size: int = 25
    timeout_seconds: Optional[float] = None
    skill_match_mode: SkillMatchMode = SkillMatchMode.SUBSTRING

    def __post_init__(self) -> None:
        # Non-positive sizes would stall the fan-out; fall back to the defaults
        if self.project_pool_limit <= 0:
            object.__setattr__(self, "project_pool_limit", 100)
        if self.profile_pool_limit <= 0:
            object.__setattr__(self, "profile_pool_limit", 50)
        if self.max_workers <= 0:
            object.__setattr__(self, "max_workers", 8)
        if self.batch_size <= 0:
            object.__setattr__(self, "batch_size", 25)
        if self.timeout_seconds is not None and self.timeout_seconds <= 0:
            object.__setattr__(self, "timeout_seconds", None)


def load_engine_config() -> EngineConfig:
    return EngineConfig(
        project_pool_limit=_env_int("GIGMATCH_PROJECT_POOL_LIMIT", 100),
        profile_pool_limit=_env_int("GIGMATCH_PROFILE_POOL_LIMIT", 50),
        max_workers=_env_int("GIGMATCH_MAX_WORKERS", 8),
        batch_size=_env_int("GIGMATCH_BATCH_SIZE", 25),
        timeout_seconds=_env_float("GIGMATCH_TIMEOUT_SECONDS", None),
        skill_match_mode=_env_skill_mode("GIGMATCH_SKILL_MATCH_MODE", SkillMatchMode.SUBSTRING),
    )
