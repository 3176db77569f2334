from .engine import MatchingEngine, score_match
from .preferences import MatchingPreferences, resolve_preferences
from .types import MatchScore, ProfileMatch, ProjectMatch, ScoreBreakdown

__all__ = [
    "MatchingEngine",
    "score_match",
    "MatchingPreferences",
    "resolve_preferences",
    "MatchScore",
    "ProfileMatch",
    "ProjectMatch",
    "ScoreBreakdown",
]
