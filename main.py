"""Main orchestrator script.

Run ad-hoc (or from CI whenever the entry sheet changes) to perform the full
pipeline: load the roster, enrich every entry with FIDE data, and write the
participants page.
"""

import functools
import logging
import sys
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import requests
from dotenv import load_dotenv

from config import Settings, load_settings
from etl import enrichment, report
from ingest import cache, fide, roster

# Load environment variables from .env if present (safe-no-op if file missing)
load_dotenv()

logger = logging.getLogger(__name__)


@dataclass
class RunSummary:
    """What one run did, including whether the roster was a stale copy."""

    roster_source: str
    roster_stale: bool
    counts: Dict[str, int]
    total: int
    report_path: Optional[str] = None
    notes: List[str] = field(default_factory=list)


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def orchestrate(settings: Optional[Settings] = None, session: Optional[requests.Session] = None) -> RunSummary:
    """Run the roster → FIDE → HTML pipeline once.

    Without an explicit *session* a fresh one is opened for this run and
    closed afterwards.
    """
    settings = settings or load_settings()
    if session is not None:
        return _run(settings, session)
    with requests.Session() as own_session:
        return _run(settings, own_session)


def _run(settings: Settings, session) -> RunSummary:
    logger.info("Loading roster")
    entries = roster.load_roster(settings.roster_path, settings.roster_url, session=session)
    if entries.stale:
        logger.warning("Using stale roster copy %s", entries.source)

    store = cache.open_cache(settings.cache_path, settings.cache_enabled)

    fetch = functools.partial(
        fide.fetch_rating,
        session=session,
        timeout=settings.request_timeout,
        birth_year_cutoff=settings.birth_year_cutoff,
    )

    logger.info("Fetching FIDE ratings for %d players", len(entries.records))
    result = enrichment.enrich_records(
        entries.records,
        fetch=fetch,
        cache=store,
        concurrency_limit=settings.concurrency,
        inter_batch_delay=settings.batch_delay,
        show_progress=settings.show_progress,
    )

    out = report.write_html_report(
        entries,
        result,
        settings.report_output,
        title=settings.report_title,
        subtitle=settings.report_subtitle,
    )

    summary = RunSummary(
        roster_source=entries.source,
        roster_stale=entries.stale,
        counts=result.summary(),
        total=result.total,
        report_path=str(out),
        notes=list(entries.notes),
    )
    logger.info(
        "Pipeline complete → %s (%d records, %d divisions, %d found, %d cached%s)",
        out,
        summary.total,
        len(report.collect_divisions(result.records)),
        summary.counts["found"],
        summary.counts["cached"],
        ", STALE roster" if summary.roster_stale else "",
    )
    return summary


def main() -> int:
    settings = load_settings()
    setup_logging(settings.log_level)
    try:
        orchestrate(settings)
    except FileNotFoundError as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
