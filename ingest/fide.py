"""Look up a single player's FIDE rating.

ratings.fide.com has no public API. Its search page (``index.phtml``) loads
results through an AJAX call to ``incl_search_l.php`` which returns an HTML
fragment; we call that endpoint directly with the headers a browser would
send and hand the body to :mod:`ingest.fide_parser`.

Every failure (unknown country, HTTP error, timeout, no matching row) ends in
``None`` plus a log line naming the player. Missing data is the normal case
for junior players and must never stop a batch.
"""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import quote

import requests

from etl.disambiguation import BIRTH_YEAR_CUTOFF, select_candidate
from etl.federations import resolve_federation_code
from etl.models import CandidateMatch

from .fide_parser import parse_fide_response

logger = logging.getLogger(__name__)

FIDE_BASE_URL = "https://ratings.fide.com"
SEARCH_ENDPOINT = f"{FIDE_BASE_URL}/incl_search_l.php"
SEARCH_PAGE = f"{FIDE_BASE_URL}/index.phtml"

HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko; ZonalRosterBot/0.1)"
    ),
    "Referer": SEARCH_PAGE,
    "X-Requested-With": "XMLHttpRequest",
}

REQUEST_TIMEOUT = 15  # seconds

# Fallback client when the caller passes no session. Worker threads only call
# its get(), which is safe to share; main.orchestrate opens one per run.
_SESSION = requests.Session()


def search_query(surname: str, first_name: str) -> str:
    """FIDE expects ``"Surname, FirstName"``."""
    return f"{surname.strip()}, {first_name.strip()}"


def search_url(surname: str, first_name: str) -> str:
    """Human-facing search page URL, handy when checking a miss by hand."""
    return f"{SEARCH_PAGE}?search={quote(search_query(surname, first_name))}"


def profile_url(fide_id: str) -> str:
    return f"{FIDE_BASE_URL}/profile/{fide_id}"


def fetch_rating(
    surname: str,
    first_name: str,
    country: str,
    *,
    session: Optional[requests.Session] = None,
    timeout: float = REQUEST_TIMEOUT,
    birth_year_cutoff: int = BIRTH_YEAR_CUTOFF,
) -> Optional[CandidateMatch]:
    """Return the best FIDE match for a roster entry, or ``None``.

    Parameters
    ----------
    surname, first_name : str
        Name as typed in the roster.
    country : str
        Free-text country; resolved to the federation the result must belong to.
    session : requests.Session, optional
        HTTP session to use (defaults to a shared module-level session).
    timeout : float, optional
        Per-request timeout in seconds.
    birth_year_cutoff : int, optional
        Passed to :func:`etl.disambiguation.select_candidate`.
    """
    player = f"{surname}, {first_name} ({country or 'no country'})"

    fed_code = resolve_federation_code(country)
    if not fed_code:
        logger.debug("No FIDE federation for %s – skipping lookup", player)
        return None

    query = search_query(surname, first_name)
    http = session or _SESSION

    try:
        logger.debug("Requesting %s search=%r", SEARCH_ENDPOINT, query)
        resp = http.get(
            SEARCH_ENDPOINT,
            params={"search": query, "simple": 1},
            headers=HEADERS,
            timeout=timeout,
        )
    except requests.RequestException as exc:
        logger.warning("FIDE request failed for %s: %s", player, exc)
        return None

    if not resp.ok:
        logger.warning("FIDE returned HTTP %s for %s", resp.status_code, player)
        return None

    candidates = parse_fide_response(resp.text, fed_code)
    if not candidates:
        logger.debug("No %s rows in FIDE response for %s", fed_code, player)
        return None

    match = select_candidate(candidates, birth_year_cutoff)
    if match is not None:
        logger.debug("Matched %s → %s (id %s, rating %s)", player, match.name, match.fide_id, match.std_rating or "unrated")
    return match


__all__ = [
    "HEADERS",
    "REQUEST_TIMEOUT",
    "fetch_rating",
    "profile_url",
    "search_query",
    "search_url",
]
