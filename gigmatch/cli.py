from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from gigmatch import config
from gigmatch.errors import NotFoundError
from gigmatch.matching.engine import MatchingEngine, match_summary_rows
from gigmatch.matching.preferences import MatchingPreferences
from gigmatch.matching.types import ProfileMatch, ProjectMatch
from gigmatch.repositories import JsonMarketplaceStore, default_repo_dir


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=(level or config.LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def print_profile_matches(project_id: str, matches: Sequence[ProfileMatch]) -> None:
    print(f"\n=== Candidates for project {project_id} ===")
    if not matches:
        print("No candidates met the criteria.")
        return

    for row, m in zip(match_summary_rows(matches), matches):
        name = f" ({row['name']})" if row["name"] else ""
        print(f"\n{row['rank']}) {row['profile_id']}{name}")
        print(f"   score: {row['overall']}  [{row['confidence']} / {row['recommendation']}]")
        print(f"   est. success: {int(row['success_rate'] * 100)}%  competition: {row['competition']}")
        print(f"   {m.insights.summary}")
        if m.insights.key_strengths:
            print(f"   strengths: {'; '.join(m.insights.key_strengths)}")
        if m.insights.potential_concerns:
            print(f"   concerns: {'; '.join(m.insights.potential_concerns)}")


def print_project_matches(profile_id: str, matches: Sequence[ProjectMatch]) -> None:
    print(f"\n=== Open projects for profile {profile_id} ===")
    if not matches:
        print("No projects met the criteria.")
        return

    for m in matches:
        title = f" - {m.project.title}" if m.project.title else ""
        print(f"\n{m.rank}) {m.project.id}{title}")
        print(f"   score: {m.score.overall}  [{m.recommendation.value}]")
        if m.score.concerns:
            print(f"   concerns: {'; '.join(m.score.concerns)}")


def print_history(project_id: str, runs: Sequence[Dict[str, Any]]) -> None:
    print(f"\n=== Stored runs for project {project_id} ===")
    if not runs:
        print("No stored runs.")
        return

    for run in runs:
        ids = ", ".join(m.get("profile_id", "?") for m in run.get("matches", [])) or "(none)"
        print(f"\n{run.get('stored_at', '?')}: {ids}")


def _preferences_from_args(args: argparse.Namespace) -> MatchingPreferences:
    return MatchingPreferences(
        include_partial_matches=not args.strict_matches,
        minimum_score=args.min_score,
        max_results=args.max_results,
        exclude_profiles=list(args.exclude or []),
        require_verification=args.require_verification,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="gigmatch: rank providers for projects (and projects for providers)")
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--project-id", help="Rank candidate profiles for this project")
    target.add_argument("--profile-id", help="Rank open projects for this profile")
    parser.add_argument("--data-dir", type=str, default="", help="Directory holding profiles.json / projects.json")
    parser.add_argument("--min-score", type=float, default=0.3, help="Drop matches below this overall score")
    parser.add_argument("--max-results", type=int, default=20, help="How many matches to return")
    parser.add_argument("--exclude", action="append", help="Profile id to exclude (repeatable)")
    parser.add_argument("--require-verification", action="store_true", help="Only verified profiles")
    parser.add_argument("--strict-matches", action="store_true", help="Drop candidates missing a required skill")
    parser.add_argument("--json", action="store_true", help="Print JSON only (machine-readable)")
    parser.add_argument("--dry-run", action="store_true", help="Do not write matches.jsonl")
    parser.add_argument("--history", action="store_true", help="Show stored runs for --project-id instead of matching")
    parser.add_argument("--log-level", default=None, help="Logging level (default: GIGMATCH_LOG_LEVEL or WARNING)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    data_dir = Path(args.data_dir) if args.data_dir else default_repo_dir()
    if not data_dir.exists():
        print(f"\n[gigmatch] Data directory not found: {data_dir}", file=sys.stderr)
        print("Tip: pass --data-dir or set GIGMATCH_DATA_DIR to a folder with profiles.json/projects.json\n",
              file=sys.stderr)
        return 2

    store = JsonMarketplaceStore(data_dir)

    if args.history:
        if not args.project_id:
            print("\n[gigmatch] --history needs --project-id", file=sys.stderr)
            return 2
        runs = store.load_matches(args.project_id)
        if args.json:
            print(json.dumps({"project_id": args.project_id, "runs": runs}, indent=2))
        else:
            print_history(args.project_id, runs)
        return 0

    engine = MatchingEngine(profiles=store, projects=store, matches=store)
    prefs = _preferences_from_args(args)

    try:
        if args.project_id:
            found = engine.find_matches(args.project_id, prefs, persist=not args.dry_run)
            payload: Dict[str, Any] = {
                "project_id": args.project_id,
                "matches": [m.to_dict() for m in found],
            }
            if not args.json:
                print_profile_matches(args.project_id, found)
        else:
            found_projects = engine.find_projects_for_profile(args.profile_id, prefs)
            payload = {
                "profile_id": args.profile_id,
                "projects": [m.to_dict() for m in found_projects],
            }
            if not args.json:
                print_project_matches(args.profile_id, found_projects)
    except NotFoundError as exc:
        print(f"\n[gigmatch] {exc}", file=sys.stderr)
        return 2

    if args.json:
        print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
