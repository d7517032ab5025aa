"""Read the tournament entry list exported from the organisers' spreadsheet.

The Google Sheets export starts with a banner row ("All paid entries as of
…") before the real header, so the first line is always thrown away. Every
cell is kept as a trimmed string; in particular the literal ``NA`` that
organisers type for "no federation" must survive as text rather than become
a missing value.

When ``ROSTER_URL`` is set the sheet is downloaded fresh and the local copy
refreshed. If the download fails we carry on with the local copy, but flag the
load as *stale* so the run summary and the report can say so.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, TextIO, Union

import pandas as pd
import requests

logger = logging.getLogger(__name__)

DOWNLOAD_TIMEOUT = 30  # seconds


@dataclass
class RosterLoad:
    """Parsed roster plus where it came from."""

    header: List[str]
    records: List[Dict[str, str]]
    source: str
    stale: bool = False
    notes: List[str] = field(default_factory=list)


def read_roster(source: Union[str, Path, TextIO]) -> RosterLoad:
    """Parse a roster CSV (banner line, then header, then one row per entry)."""

    df = pd.read_csv(
        source,
        skiprows=1,
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=True,
        skipinitialspace=True,
    )
    df.columns = [str(c).strip() for c in df.columns]
    df = df.fillna("")
    # pandas names blank header cells "Unnamed: N"; they carry nothing useful
    df = df.loc[:, [c for c in df.columns if c and not c.startswith("Unnamed:")]]
    df = df.apply(lambda col: col.str.strip())

    # Rows that were only commas
    df = df[(df != "").any(axis=1)]

    records = df.to_dict(orient="records")
    label = str(source) if isinstance(source, (str, Path)) else getattr(source, "name", "<stream>")
    logger.info("Read %d roster rows (%d columns) from %s", len(records), len(df.columns), label)
    return RosterLoad(header=list(df.columns), records=records, source=label)


def _download(url: str, session: Optional[requests.Session], timeout: float) -> str:
    http = session or requests
    resp = http.get(url, timeout=timeout)
    resp.raise_for_status()
    # Sheets serves UTF-8 without always declaring it; requests would assume latin-1
    if "charset" not in resp.headers.get("Content-Type", "").lower():
        resp.encoding = "utf-8"
    return resp.text


def load_roster(
    path: Union[str, Path],
    url: Optional[str] = None,
    *,
    session: Optional[requests.Session] = None,
    timeout: float = DOWNLOAD_TIMEOUT,
) -> RosterLoad:
    """Load the roster, preferring the live *url* and falling back to *path*.

    Raises
    ------
    FileNotFoundError
        If no live copy could be fetched and *path* does not exist.
    """
    path = Path(path)

    if url:
        try:
            logger.info("Downloading roster from %s", url)
            text = _download(url, session, timeout)
            roster = read_roster(io.StringIO(text))
        except (requests.RequestException, ValueError) as exc:
            logger.warning("Live roster unavailable (%s); falling back to %s", exc, path)
            note = f"Live roster could not be downloaded ({exc.__class__.__name__}); using local copy {path}."
        else:
            roster.source = url
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(text, encoding="utf-8")
            except OSError as exc:
                logger.warning("Could not refresh local roster copy %s: %s", path, exc)
            return roster

        if not path.exists():
            raise FileNotFoundError(f"Roster download failed and no local copy at {path}")
        roster = read_roster(path)
        roster.stale = True
        roster.notes.append(note)
        return roster

    return read_roster(path)


__all__ = ["RosterLoad", "load_roster", "read_roster"]
