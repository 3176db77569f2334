import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from gigmatch.repositories import InMemoryMarketplaceStore

# Path to tests/fixtures directory
FIXTURES_DIR = Path(__file__).parent / "fixtures"

# Fixed "now" so date-dependent behaviour is reproducible
FIXED_NOW = datetime(2026, 10, 1, tzinfo=timezone.utc)


@pytest.fixture
def fixtures_dir() -> Path:
    """
    Exposes the fixtures directory in case a test needs direct file access.
    """
    return FIXTURES_DIR


@pytest.fixture
def load_text(fixtures_dir):
    """
    Fixture that returns a function: load_text("file.ext") -> str
    This avoids repeating file reading logic in every test file.
    """
    def _load(name: str) -> str:
        return (fixtures_dir / name).read_text(encoding="utf-8")
    return _load


@pytest.fixture
def load_json(load_text):
    """
    Fixture that returns a function: load_json("file.json") -> dict
    Built on load_text so there's one source of truth for file IO.
    """
    def _load(name: str):
        return json.loads(load_text(name))
    return _load


@pytest.fixture
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def marketplace(load_json) -> InMemoryMarketplaceStore:
    """In-memory store seeded from tests/fixtures/{profiles,projects}.json."""
    return InMemoryMarketplaceStore(
        profiles=load_json("profiles.json"),
        projects=load_json("projects.json"),
    )
