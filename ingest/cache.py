"""Simple JSON cache for FIDE lookups.

One flat document maps ``"surname,first name,country"`` (lower-cased) to the
match we found, or to ``null`` when FIDE had nobody. Storing the misses too
means a second run over the same roster makes no network calls at all for
players we already know are unrated.

Caching is opt-in (``ENABLED_CACHE=true``). When it is off the pipeline gets a
:class:`NullCache`, which has the same methods and never touches disk, so
callers never branch on the setting.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from etl.models import CandidateMatch

logger = logging.getLogger(__name__)


DEFAULT_CACHE_PATH = Path("fide-cache.json")


class _Miss:
    """Marker for "looked up, FIDE has no such player"."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISS"

    def __bool__(self) -> bool:
        return False


MISS = _Miss()

CacheValue = Union[CandidateMatch, _Miss]


def cache_key(surname: str, first_name: str, country: str) -> str:
    return f"{surname},{first_name},{country}".lower()


class CacheStore:
    """JSON-file backed cache of FIDE lookups."""

    enabled = True

    def __init__(self, path: Union[str, Path] = DEFAULT_CACHE_PATH) -> None:
        self.path = Path(path)
        self._entries: Dict[str, Optional[Dict[str, Any]]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def load(self) -> None:
        """Replace the in-memory contents with the file's ({} if missing or corrupted)."""

        self._entries = {}
        if not self.path.exists():
            logger.info("Cache enabled but %s not found, starting fresh", self.path)
            return
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Could not load cache %s (%s), starting fresh", self.path, exc)
            return
        if not isinstance(data, dict):
            logger.warning("Cache %s is not a JSON object, starting fresh", self.path)
            return
        self._entries = data
        logger.info("Cache enabled: loaded %d entries from %s", len(self._entries), self.path)

    def get(self, key: str) -> Optional[CacheValue]:
        """Return the cached match, :data:`MISS`, or ``None`` if never looked up."""

        if key not in self._entries:
            return None
        value = self._entries[key]
        if not isinstance(value, dict):
            return MISS
        return CandidateMatch.from_dict(value)

    def put(self, key: str, value: Optional[CacheValue]) -> None:
        """Record *value* for *key*; ``None`` and :data:`MISS` both store a miss."""

        if isinstance(value, CandidateMatch):
            self._entries[key] = value.to_dict()
        else:
            self._entries[key] = None

    def flush(self) -> None:
        """Write the cache back to disk (pretty-printed for readability)."""

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(self._entries, ensure_ascii=False, indent=2), encoding="utf-8")
        except OSError as exc:
            logger.warning("Could not save cache %s (%s)", self.path, exc)
            return
        logger.debug("Cache saved to %s (%d entries)", self.path, len(self._entries))


class NullCache:
    """Stand-in used when caching is disabled: remembers nothing."""

    enabled = False

    def __len__(self) -> int:
        return 0

    def load(self) -> None:
        logger.info("Cache disabled (ENABLED_CACHE != true)")

    def get(self, key: str) -> None:
        return None

    def put(self, key: str, value: Optional[CacheValue]) -> None:
        pass

    def flush(self) -> None:
        pass


def open_cache(path: Union[str, Path] = DEFAULT_CACHE_PATH, enabled: bool = False):
    """Return a loaded :class:`CacheStore`, or a :class:`NullCache` when disabled."""

    store = CacheStore(path) if enabled else NullCache()
    store.load()
    return store


__all__ = [
    "MISS",
    "CacheStore",
    "NullCache",
    "cache_key",
    "open_cache",
]
