"""Disambiguation: pick one FIDE candidate for a roster query.

A surname/first-name search regularly returns several rows from the target
federation. Typical causes
--------------------------
• **Duplicate listings** – the same junior registered twice (e.g. once by a
  school, once by the national federation) so two ids share one name.
• **Namesakes** – a parent or older sibling with the same name, often an adult
  who has been rated for years.
• **Loose search** – FIDE matches on prefixes, so "Li, Ann" also finds
  "Li, Anna".

For a youth event the player we want is almost always the *young* one, so
candidates born before :data:`BIRTH_YEAR_CUTOFF` are dropped when there is a
choice. This is a heuristic, not identity resolution: it will occasionally
pick the wrong person, and a player with no younger namesake is still
returned even when they look too old.
"""

import logging
from typing import List, Optional, Sequence

from rapidfuzz import fuzz, utils

from etl.models import CandidateMatch

logger = logging.getLogger(__name__)

# Born 2005 or later, i.e. 20 or younger on 1 January 2025.
BIRTH_YEAR_CUTOFF = 2005


def _is_duplicate(name1: str, name2: str) -> bool:
    """Return True if two names carry the same words (case, punctuation and order ignored)."""

    if name1.lower() == name2.lower():
        return True
    return fuzz.token_sort_ratio(name1, name2, processor=utils.default_process) == 100


def all_duplicates(candidates: Sequence[CandidateMatch]) -> bool:
    """True when every candidate has the first one's name and federation."""
    if not candidates:
        return False
    first = candidates[0]
    return all(
        c.fed_code == first.fed_code and _is_duplicate(c.name, first.name)
        for c in candidates[1:]
    )


def _young_enough(candidate: CandidateMatch, cutoff: int) -> bool:
    # Unknown birth year is kept; we cannot rule the player out.
    if not candidate.birth_year.isdigit():
        return True
    return int(candidate.birth_year) >= cutoff


def select_candidate(
    candidates: Sequence[CandidateMatch],
    birth_year_cutoff: int = BIRTH_YEAR_CUTOFF,
) -> Optional[CandidateMatch]:
    """Return the best candidate, or ``None`` when there are none.

    A single candidate is returned as-is. With several, candidates born before
    *birth_year_cutoff* are discarded unless that would discard all of them,
    and the first remaining one (in FIDE's order) wins.
    """
    if not candidates:
        return None
    if len(candidates) == 1:
        return candidates[0]

    pool: List[CandidateMatch] = [c for c in candidates if _young_enough(c, birth_year_cutoff)]
    if not pool:
        pool = list(candidates)

    chosen = pool[0]
    logger.debug(
        "Disambiguated %d candidates (%s) → %s [%s, b. %s]",
        len(candidates),
        "duplicate listings" if all_duplicates(candidates) else "different names",
        chosen.name,
        chosen.fide_id or "no id",
        chosen.birth_year or "?",
    )
    return chosen


__all__ = ["BIRTH_YEAR_CUTOFF", "all_duplicates", "select_candidate"]
