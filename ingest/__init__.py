from .cache import CacheStore, NullCache, open_cache
from .fide import fetch_rating
from .fide_parser import parse_fide_response
from .roster import load_roster, read_roster

__all__ = [
    "CacheStore",
    "NullCache",
    "fetch_rating",
    "load_roster",
    "open_cache",
    "parse_fide_response",
    "read_roster",
]
