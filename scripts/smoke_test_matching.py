"""
smoke_test_matching.py - End-to-end run of the matching engine over a
synthetic marketplace written to a temporary data dir.

Usage (from repo root):
    python scripts/smoke_test_matching.py

Exit codes:
    0  - all checks passed
    1  - a check failed
"""

from __future__ import annotations

import json
import tempfile
from pathlib import Path

from gigmatch.matching.engine import MatchingEngine
from gigmatch.matching.preferences import MatchingPreferences
from gigmatch.repositories import JsonMarketplaceStore

PASS = "✅"
FAIL = "❌"

_SKILLS = ["python", "django", "react", "aws", "docker", "postgres", "go", "kubernetes"]


def check(label: str, condition: bool, detail: str = "") -> bool:
    mark = PASS if condition else FAIL
    suffix = f" ({detail})" if detail else ""
    print(f"  {mark} {label}{suffix}")
    return condition


def _synthetic_profiles(n: int = 40) -> dict:
    out = {}
    for i in range(n):
        out[f"p{i:03d}"] = {
            "name": f"Provider {i}",
            "skills": [_SKILLS[(i + k) % len(_SKILLS)] for k in range(1 + i % 4)],
            "experience": {"level": ["entry", "intermediate", "senior", "expert"][i % 4], "years": i % 12},
            "pricing": {"hourlyRate": 40 + (i * 7) % 90},
            "availability": {"status": ["available", "busy", "available", "unavailable"][i % 4],
                             "capacity": (i * 13) % 101},
            "location": {"country": ["US", "DE", "IN"][i % 3], "city": "Berlin" if i % 3 == 1 else "Austin"},
            "verification": {"isVerified": i % 2 == 0, "badges": ["top-rated"] * (i % 3)},
            "portfolio": {"projects": [{"technologies": ["python"], "industry": "fintech"}] * (i % 6),
                          "ratings": {"average": (i % 6) * 0.9, "count": i}},
            "responseTime": 2 + i % 30,
        }
    return out


def _synthetic_projects() -> dict:
    return {
        "proj-api": {
            "title": "Payments API",
            "skills": [{"name": "python", "required": True}, {"name": "docker", "required": False}],
            "budget": {"min": 50, "max": 100, "type": "hourly"},
            "location": {"type": "remote"},
            "industry": "fintech",
            "complexity": "complex",
            "experience": {"minimumYears": 3, "preferredLevel": "senior"},
            "clientInfo": {"responseTime": 12},
            "status": "open",
        },
    }


def main() -> int:
    print("=== gigmatch Smoke Test: Matching ===")
    ok = True
    with tempfile.TemporaryDirectory() as tmp:
        base = Path(tmp)
        (base / "profiles.json").write_text(json.dumps(_synthetic_profiles()), encoding="utf-8")
        (base / "projects.json").write_text(json.dumps(_synthetic_projects()), encoding="utf-8")

        store = JsonMarketplaceStore(base)
        engine = MatchingEngine(profiles=store, projects=store, matches=store)

        matches = engine.find_matches("proj-api", MatchingPreferences(max_results=5, minimum_score=0.0))
        ok &= check("returns at most 5 matches", 0 < len(matches) <= 5, f"got {len(matches)}")
        ok &= check("ranks are dense", [m.rank for m in matches] == list(range(1, len(matches) + 1)))
        scores = [m.score.overall for m in matches]
        ok &= check("scores non-increasing", scores == sorted(scores, reverse=True), str(scores))
        ok &= check("no unavailable candidates",
                    all(m.profile.availability.status.value != "unavailable" for m in matches))
        ok &= check("run persisted", len(store.load_matches("proj-api")) == 1)

        projects = engine.find_projects_for_profile("p002", MatchingPreferences(minimum_score=0.0))
        ok &= check("reverse lookup returns the open project", [p.project.id for p in projects] == ["proj-api"])

    print("OK" if ok else "FAILED")
    return 0 if ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
