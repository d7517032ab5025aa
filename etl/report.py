"""Report module: renders the enriched roster as a static HTML page."""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

from jinja2 import Environment, FileSystemLoader

from etl.enrichment import FIELD_ID, FIELD_RATING, FIELD_TITLE, EnrichmentResult
from etl.federations import resolve_flag
from ingest.fide import profile_url
from ingest.roster import RosterLoad

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"
DEFAULT_TITLE = "Oceania Zonal Youth 2025"


def collect_divisions(records: List[Dict[str, str]]) -> List[str]:
    """Sorted unique, non-empty ``Division`` values."""
    return sorted({r.get("Division", "") for r in records if r.get("Division")})


def _row_context(record: Dict[str, str]) -> Dict:
    fide_id = record.get(FIELD_ID, "")
    return {
        "cells": record,
        "division": record.get("Division", ""),
        "flag": resolve_flag(record.get("Country", "")),
        "fide_id": fide_id,
        "profile_url": profile_url(fide_id) if fide_id else "",
        "title": record.get(FIELD_TITLE, ""),
        "rating": record.get(FIELD_RATING, ""),
    }


def render_html_report(
    roster: RosterLoad,
    result: EnrichmentResult,
    title: str = DEFAULT_TITLE,
    subtitle: Optional[str] = None,
) -> str:
    """Return the report page as a string."""
    env = Environment(loader=FileSystemLoader(str(TEMPLATE_DIR)), autoescape=True)
    template = env.get_template("report.html")
    return template.render(
        title=title,
        subtitle=subtitle,
        header=roster.header,
        rows=[_row_context(r) for r in result.records],
        divisions=collect_divisions(result.records),
        stats=result.summary(),
        total=result.total,
        stale=roster.stale,
        notes=roster.notes,
        source=roster.source,
    )


def write_html_report(
    roster: RosterLoad,
    result: EnrichmentResult,
    output_path: Union[str, Path] = "www/index.html",
    title: str = DEFAULT_TITLE,
    subtitle: Optional[str] = None,
) -> Path:
    """Write the report to *output_path* and return the path.

    I/O errors propagate to the caller.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(render_html_report(roster, result, title, subtitle), encoding="utf-8")
    logger.info("HTML report written: %s (%d rows)", output_path, result.total)
    return output_path


__all__ = ["collect_divisions", "render_html_report", "write_html_report"]
