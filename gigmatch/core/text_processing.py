from __future__ import annotations

import re
import unicodedata
from enum import Enum
from typing import Iterable, List

# NOTE: Skill and technology comparisons across the scorers all go through this
# module so "python" vs "Python 3" behaves the same everywhere.

# Token pattern:
# - alphanumerics
# - allows internal separators like + # . - (e.g., c#, c++, node.js, ruby-on-rails)
_WORD_RE = re.compile(r"[a-z0-9]+(?:[#+.-][a-z0-9]+)*[#+]*", re.IGNORECASE)


class SkillMatchMode(str, Enum):
    # Case-insensitive containment in either direction ("react" ~ "react native").
    SUBSTRING = "substring"
    # Whole-token overlap only ("java" does not match "javascript").
    TOKEN = "token"


def normalize_text(text: str) -> str:
    """
    Deterministic normalization for skill names and free text.

    - remove unicode quirks (smart quotes, non-breaking spaces)
    - normalize dashes
    - collapse whitespace
    """
    if not text:
        return ""
    t = unicodedata.normalize("NFKC", text)
    t = t.replace("\u00a0", " ")
    t = re.sub(r"[\u2010-\u2015]", "-", t)
    t = " ".join(t.split())
    return t


def normalize_skill(name: str) -> str:
    return normalize_text(name).lower()


def skill_tokens(name: str) -> List[str]:
    """Ordered tokens of one skill name. No stopword filtering: 'go' and 'r' are skills."""
    normalized = normalize_skill(name)
    return [m.group(0) for m in _WORD_RE.finditer(normalized)]


def skills_match(a: str, b: str, mode: SkillMatchMode = SkillMatchMode.SUBSTRING) -> bool:
    """
    True when two skill names refer to the same thing under `mode`.
    Empty names never match.
    """
    na, nb = normalize_skill(a), normalize_skill(b)
    if not na or not nb:
        return False
    if mode == SkillMatchMode.TOKEN:
        ta, tb = skill_tokens(na), skill_tokens(nb)
        if not ta or not tb:
            return False
        # every token of the shorter name must appear in the longer one
        short, long_ = (ta, tb) if len(ta) <= len(tb) else (tb, ta)
        return set(short) <= set(long_)
    return na in nb or nb in na


def any_skill_matches(
        wanted: str,
        offered: Iterable[str],
        mode: SkillMatchMode = SkillMatchMode.SUBSTRING,
) -> bool:
    return any(skills_match(wanted, o, mode) for o in offered or [])
