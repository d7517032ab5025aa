"""Batch enrichment: attach FIDE title / rating / id to every roster record.

Records are looked up in fixed windows of ``concurrency_limit``: the whole
window is fired at FIDE concurrently, awaited, and followed by a short pause
before the next one. That keeps at most ``concurrency_limit`` connections open
to ratings.fide.com (it throttles aggressive clients) while still overlapping
the ~1 s latency of each search. Windows served entirely from the cache skip
the pause since nothing went over the network.

The cache and the records are only touched from the coordinating thread;
worker threads just run ``fetch``.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Optional, Sequence

from tqdm import tqdm

from etl.federations import resolve_federation_code
from etl.models import CandidateMatch
from ingest.cache import NullCache, cache_key
from ingest.fide import fetch_rating

logger = logging.getLogger(__name__)

# Enrichment columns added to every roster record
FIELD_TITLE = "FederationTitle"
FIELD_RATING = "StandardRating"
FIELD_ID = "FederationId"
FIELD_NAME = "DisplayName"
ENRICHMENT_FIELDS = (FIELD_TITLE, FIELD_RATING, FIELD_ID, FIELD_NAME)

SURNAME_COLUMNS = ("Surname", "Last Name")
FIRST_NAME_COLUMNS = ("First Name", "FirstName")
COUNTRY_COLUMNS = ("Country", "Federation")

DEFAULT_CONCURRENCY = 5
DEFAULT_BATCH_DELAY = 0.2  # seconds between windows
FLUSH_EVERY = 4  # windows between cache saves
PROGRESS_EVERY = 10  # records between progress lines

Fetcher = Callable[[str, str, str], Optional[CandidateMatch]]


@dataclass
class EnrichmentResult:
    """Outcome of one :func:`enrich_records` run."""

    records: List[Dict[str, str]]
    processed_count: int = 0
    found_count: int = 0
    cache_hit_count: int = 0
    fetched_count: int = 0
    error_count: int = 0

    @property
    def total(self) -> int:
        return len(self.records)

    def summary(self) -> Dict[str, int]:
        return {
            "processed": self.processed_count,
            "found": self.found_count,
            "cached": self.cache_hit_count,
            "fetched": self.fetched_count,
            "errors": self.error_count,
        }


def _first_value(record: Dict[str, str], columns: Sequence[str]) -> str:
    for col in columns:
        value = record.get(col)
        if value:
            return str(value).strip()
    return ""


def identity(record: Dict[str, str]):
    """Return ``(surname, first_name, country)`` for *record*."""
    return (
        _first_value(record, SURNAME_COLUMNS),
        _first_value(record, FIRST_NAME_COLUMNS),
        _first_value(record, COUNTRY_COLUMNS),
    )


def apply_match(record: Dict[str, str], match: Optional[CandidateMatch]) -> bool:
    """Write *match* onto *record*; return True if there was one."""
    if not match:
        return False
    record[FIELD_TITLE] = match.title or ""
    record[FIELD_RATING] = match.std_rating or ""
    record[FIELD_ID] = match.fide_id or ""
    record[FIELD_NAME] = match.name or ""
    return True


def _windows(items: Sequence, size: int) -> Iterator[Sequence]:
    for start in range(0, len(items), size):
        yield items[start:start + size]


def enrich_records(
    records: List[Dict[str, str]],
    fetch: Fetcher = fetch_rating,
    cache=None,
    concurrency_limit: int = DEFAULT_CONCURRENCY,
    inter_batch_delay: float = DEFAULT_BATCH_DELAY,
    *,
    flush_every: int = FLUSH_EVERY,
    progress_every: int = PROGRESS_EVERY,
    sleep: Callable[[float], None] = time.sleep,
    show_progress: bool = False,
) -> EnrichmentResult:
    """Enrich *records* in place with FIDE data.

    Parameters
    ----------
    records : list of dict
        Roster rows; each gets the :data:`ENRICHMENT_FIELDS` keys.
    fetch : callable, optional
        ``fetch(surname, first_name, country)`` → match or ``None``.
    cache : CacheStore or NullCache, optional
        Lookup cache; ``None`` means no caching.
    concurrency_limit : int, optional
        Window size, i.e. the maximum number of lookups in flight.
    inter_batch_delay : float, optional
        Seconds to wait between windows that hit the network.

    Returns
    -------
    EnrichmentResult
        The same record list plus processed / found / cached counts.
    """
    if concurrency_limit < 1:
        raise ValueError("concurrency_limit must be at least 1")
    if flush_every < 1 or progress_every < 1:
        raise ValueError("flush_every and progress_every must be at least 1")
    if cache is None:
        cache = NullCache()

    result = EnrichmentResult(records=records)
    total = len(records)

    def _tick() -> None:
        result.processed_count += 1
        done = result.processed_count
        if done % progress_every == 0 or done == total:
            logger.info(
                "Progress: %d/%d (%d found, %d from cache)",
                done, total, result.found_count, result.cache_hit_count,
            )

    for record in records:
        for name in ENRICHMENT_FIELDS:
            record.setdefault(name, "")

    to_process = []
    for record in records:
        surname, first_name, _ = identity(record)
        if surname and first_name:
            to_process.append(record)
        else:
            logger.debug("Skipping roster row without a full name: %r", record)
            _tick()

    windows = list(_windows(to_process, concurrency_limit))
    logger.info(
        "Looking up %d of %d players in %d batches of up to %d",
        len(to_process), total, len(windows), concurrency_limit,
    )

    with ThreadPoolExecutor(max_workers=concurrency_limit) as pool:
        for idx, window in enumerate(tqdm(windows, desc="FIDE lookups", unit="batch", disable=not show_progress)):
            pending = {}
            for record in window:
                surname, first_name, country = identity(record)
                key = cache_key(surname, first_name, country)
                cached = cache.get(key)
                if cached is not None:
                    result.cache_hit_count += 1
                    if apply_match(record, cached):
                        result.found_count += 1
                    _tick()
                    continue
                if resolve_federation_code(country) is None:
                    logger.debug("No FIDE federation for %s, %s (%r)", surname, first_name, country)
                    cache.put(key, None)
                    _tick()
                    continue
                future = pool.submit(fetch, surname, first_name, country)
                pending[future] = (record, key)

            # The executor never has more than one window queued, so at most
            # concurrency_limit lookups run at once.
            wait(pending)
            for future, (record, key) in pending.items():
                surname, first_name, country = identity(record)
                result.fetched_count += 1
                try:
                    match = future.result()
                except Exception:  # noqa: BLE001
                    # A lookup must never sink the batch; leave the record bare
                    # and uncached so the next run retries it.
                    result.error_count += 1
                    logger.exception("FIDE lookup crashed for %s, %s (%s)", surname, first_name, country)
                    _tick()
                    continue
                cache.put(key, match)
                if apply_match(record, match):
                    result.found_count += 1
                else:
                    logger.debug("No FIDE match for %s, %s (%s)", surname, first_name, country)
                _tick()

            if (idx + 1) % flush_every == 0:
                cache.flush()

            is_last = idx == len(windows) - 1
            if pending and not is_last and inter_batch_delay > 0:
                sleep(inter_batch_delay)

    cache.flush()
    if cache.enabled:
        logger.info("Cache saved (%d entries)", len(cache))
    logger.info(
        "Completed: found FIDE ratings for %d of %d players (%d from cache, %d looked up)",
        result.found_count, len(to_process), result.cache_hit_count, result.fetched_count,
    )
    return result


__all__ = [
    "ENRICHMENT_FIELDS",
    "EnrichmentResult",
    "apply_match",
    "enrich_records",
    "identity",
]
