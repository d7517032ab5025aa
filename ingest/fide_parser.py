"""Parser for the ratings.fide.com search AJAX response.

``incl_search_l.php`` returns a bare HTML fragment: a table whose ``<tbody>``
holds one ``<tr>`` per player. The markup is not a published contract and we
have seen the same field rendered several different ways, e.g. for the
federation cell::

    <td class="flag-wrapper"><img src="/svg/AUS.svg" alt="AUS">AUS</td>
    <td data-label="Fed"><img src="/svg/AUS.svg" alt="AUS">AUS</td>
    <td class="flag-wrapper"><img src="/svg/AUS.svg"></td>

Everything that knows about that markup lives in this module. Each field is
pulled with a cascade of lookups of decreasing specificity so that a change
upstream degrades to "no result" instead of an exception.
"""

from __future__ import annotations

import re
from typing import List, Optional

from bs4 import BeautifulSoup
from bs4.element import Tag

from etl.models import CandidateMatch


# Two or three capitals not glued to other capitals, e.g. "AUS" in "/svg/AUS.svg"
_FED_TOKEN_RE = re.compile(r"(?<![A-Z])([A-Z]{2,3})(?![A-Z])")
_FED_TEXT_RE = re.compile(r"^[A-Z]+$")
_DIGITS_RE = re.compile(r"^\d+$")
_PROFILE_RE = re.compile(r"/profile/(\d+)")


def dedupe_title(title: Optional[str]) -> str:
    """Collapse repeated title tokens, keeping first-seen order.

    The title cell sometimes repeats a title (``"CM CM"``).

    >>> dedupe_title("WCM CM WCM")
    'WCM CM'
    """
    if not title:
        return ""
    seen: List[str] = []
    for token in title.split():
        if token not in seen:
            seen.append(token)
    return " ".join(seen)


# ---------------------------------------------------------------------------
# Cell helpers
# ---------------------------------------------------------------------------

def _label_matcher(label: str):
    wanted = label.lower()
    return lambda value: value is not None and value.strip().lower() == wanted


def _labelled_cells(row: Tag, label: str) -> List[Tag]:
    return row.find_all("td", attrs={"data-label": _label_matcher(label)})


def _labelled_text(row: Tag, label: str) -> str:
    cells = _labelled_cells(row, label)
    return cells[0].get_text(strip=True) if cells else ""


def _digits_only(value: str) -> str:
    return value if _DIGITS_RE.match(value) else ""


# ---------------------------------------------------------------------------
# Federation cascade
# ---------------------------------------------------------------------------

def _flag_cell(row: Tag) -> Optional[Tag]:
    return row.find("td", class_="flag-wrapper")


def _fed_cell(row: Tag) -> Optional[Tag]:
    cells = _labelled_cells(row, "Fed")
    return cells[0] if cells else None


def _fed_from_image_text(cell: Optional[Tag]) -> Optional[str]:
    """Visible code that sits right after the flag image."""
    if cell is None:
        return None
    img = cell.find("img", alt=True)
    if img is None or not _FED_TEXT_RE.match(img["alt"].strip()):
        return None
    sibling = img.next_sibling
    text = sibling.strip() if isinstance(sibling, str) else ""
    if _FED_TEXT_RE.match(text):
        return text
    return None


def _fed_from_token_scan(cell: Optional[Tag]) -> Optional[str]:
    """Any 2–3 letter uppercase token in the cell text or its image attributes."""
    if cell is None:
        return None
    haystacks = [cell.get_text(" ", strip=True)]
    for img in cell.find_all("img"):
        haystacks.extend([img.get("alt") or "", img.get("src") or ""])
    for text in haystacks:
        match = _FED_TOKEN_RE.search(text)
        if match:
            return match.group(1)
    return None


def extract_federation(row: Tag) -> Optional[str]:
    """Return the federation code of *row*, or ``None`` if none can be found."""
    flag_cell = _flag_cell(row)
    fed_cell = _fed_cell(row)
    for strategy, cell in (
        (_fed_from_image_text, flag_cell),
        (_fed_from_image_text, fed_cell),
        (_fed_from_token_scan, flag_cell),
        (_fed_from_token_scan, fed_cell),
    ):
        code = strategy(cell)
        if code:
            return code
    return None


# ---------------------------------------------------------------------------
# Other fields
# ---------------------------------------------------------------------------

def _extract_fide_id(row: Tag) -> str:
    fide_id = _digits_only(_labelled_text(row, "FIDEID"))
    if fide_id:
        return fide_id
    for link in row.find_all("a", href=True):
        match = _PROFILE_RE.search(link["href"])
        if match:
            return match.group(1)
    return ""


def _extract_name(row: Tag) -> str:
    link = row.find("a", class_="found_name")
    if link is None:
        link = row.find("a", href=_PROFILE_RE)
    return link.get_text(strip=True) if link is not None else ""


def _extract_std_rating(row: Tag) -> str:
    # Standard, rapid and blitz all share the "Rtg" label; standard comes first.
    return _labelled_text(row, "Rtg")


def _parse_row(row: Tag, fed_code: str) -> CandidateMatch:
    return CandidateMatch(
        fide_id=_extract_fide_id(row),
        name=_extract_name(row),
        title=dedupe_title(_labelled_text(row, "title")),
        std_rating=_extract_std_rating(row),
        fed_code=fed_code,
        birth_year=_digits_only(_labelled_text(row, "B-Year")),
    )


def parse_fide_response(html: Optional[str], target_fed_code: Optional[str] = None) -> List[CandidateMatch]:
    """Extract player rows from a FIDE search response.

    Parameters
    ----------
    html : str
        Raw response body of ``incl_search_l.php``.
    target_fed_code : str, optional
        Only rows from this federation are kept. ``None`` keeps every row
        that has a recognisable federation.

    Returns
    -------
    List[CandidateMatch]
        Matching rows in the order FIDE listed them. Empty when the response
        holds no result table.
    """
    if not html:
        return []

    soup = BeautifulSoup(html, "lxml")
    tbody = soup.find("tbody")
    if tbody is None:
        return []

    results: List[CandidateMatch] = []
    for row in tbody.find_all("tr"):
        fed_code = extract_federation(row)
        if not fed_code:
            continue
        if target_fed_code and fed_code != target_fed_code:
            continue
        results.append(_parse_row(row, fed_code))

    return results


__all__ = ["CandidateMatch", "dedupe_title", "extract_federation", "parse_fide_response"]
