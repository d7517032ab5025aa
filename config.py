"""Runtime settings, read from the environment (and ``.env`` via main.py).

==========================  ==================  ================================
Variable                    Default             Meaning
==========================  ==================  ================================
``ENABLED_CACHE``           ``false``           reuse / store FIDE lookups
``FIDE_CACHE_PATH``         ``fide-cache.json`` cache document
``FR_CONCURRENCY``          ``5``               lookups in flight per batch
``FR_BATCH_DELAY``          ``0.2``             seconds between batches
``FR_BIRTH_YEAR_CUTOFF``    ``2005``            prefer players born this year+
``FR_REQUEST_TIMEOUT``      ``15``              seconds per FIDE request
``ROSTER_PATH``             ``www/data.csv``    local roster CSV
``ROSTER_URL``              (unset)             live CSV export of the sheet
``REPORT_OUTPUT``           ``www/index.html``  generated page
``REPORT_TITLE``            see below           page heading
``REPORT_SUBTITLE``         (unset)             line under the heading
``FR_PROGRESS``             ``false``           show a tqdm progress bar
``FR_LOGLEVEL``             ``INFO``            logging level
==========================  ==================  ================================
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from etl.disambiguation import BIRTH_YEAR_CUTOFF
from etl.enrichment import DEFAULT_BATCH_DELAY, DEFAULT_CONCURRENCY
from etl.report import DEFAULT_TITLE
from ingest.fide import REQUEST_TIMEOUT

logger = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    cache_enabled: bool = False
    cache_path: Path = Path("fide-cache.json")
    concurrency: int = DEFAULT_CONCURRENCY
    batch_delay: float = DEFAULT_BATCH_DELAY
    birth_year_cutoff: int = BIRTH_YEAR_CUTOFF
    request_timeout: float = REQUEST_TIMEOUT
    roster_path: Path = Path("www/data.csv")
    roster_url: Optional[str] = None
    report_output: Path = Path("www/index.html")
    report_title: str = DEFAULT_TITLE
    report_subtitle: Optional[str] = None
    show_progress: bool = False
    log_level: str = "INFO"


def _flag(env: Mapping[str, str], name: str, default: bool = False) -> bool:
    raw = env.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


def _number(env: Mapping[str, str], name: str, default, cast, minimum=None):
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = cast(raw.strip())
    except ValueError:
        logger.warning("Ignoring %s=%r (not a valid %s); using %s", name, raw, cast.__name__, default)
        return default
    if minimum is not None and value < minimum:
        logger.warning("Ignoring %s=%r (must be >= %s); using %s", name, raw, minimum, default)
        return default
    return value


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Build :class:`Settings` from *env* (defaults to ``os.environ``)."""
    env = os.environ if env is None else env
    return Settings(
        cache_enabled=_flag(env, "ENABLED_CACHE"),
        cache_path=Path(env.get("FIDE_CACHE_PATH") or "fide-cache.json"),
        concurrency=_number(env, "FR_CONCURRENCY", DEFAULT_CONCURRENCY, int, minimum=1),
        batch_delay=_number(env, "FR_BATCH_DELAY", DEFAULT_BATCH_DELAY, float, minimum=0),
        birth_year_cutoff=_number(env, "FR_BIRTH_YEAR_CUTOFF", BIRTH_YEAR_CUTOFF, int),
        request_timeout=_number(env, "FR_REQUEST_TIMEOUT", REQUEST_TIMEOUT, float, minimum=0.1),
        roster_path=Path(env.get("ROSTER_PATH") or "www/data.csv"),
        roster_url=env.get("ROSTER_URL") or None,
        report_output=Path(env.get("REPORT_OUTPUT") or "www/index.html"),
        report_title=env.get("REPORT_TITLE") or DEFAULT_TITLE,
        report_subtitle=env.get("REPORT_SUBTITLE") or None,
        show_progress=_flag(env, "FR_PROGRESS"),
        log_level=(env.get("FR_LOGLEVEL") or "INFO").upper(),
    )


__all__ = ["Settings", "load_settings"]
