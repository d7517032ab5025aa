"""Country text → FIDE federation code / flag lookup.

The roster is typed in by hand, so the tables below carry every spelling we
have actually seen in the entry sheet (typos included) next to the canonical
names and codes. Lookup is exact first, then case-insensitive; anything we do
not recognise simply has no federation.
"""

from typing import Dict, Optional


FEDERATION_CODES: Dict[str, Optional[str]] = {
    "Australia": "AUS",
    "Austrlaia": "AUS",  # typo in entry sheet
    "Ausralia": "AUS",
    "ACF": "AUS",
    "AUS": "AUS",
    "New Zealand": "NZL",
    "NZ": "NZL",
    "NZL": "NZL",
    "Guam": "GUM",
    "GUM": "GUM",
    "Nauru": "NRU",
    "NRU": "NRU",
    "Fiji": "FIJ",
    "FIJ": "FIJ",
    "New Caledonia": "NCL",
    "NCL": "NCL",
    "Vanuatu": "VAN",
    "VAN": "VAN",
    "Tonga": "TGA",
    "TGA": "TGA",
    "Papua New Guinea": "PNG",
    "PNG": "PNG",
    "NA": None,  # not applicable
    "": None,
}

FLAGS: Dict[str, str] = {
    "Australia": "🇦🇺",
    "Austrlaia": "🇦🇺",
    "Ausralia": "🇦🇺",
    "ACF": "🇦🇺",
    "AUS": "🇦🇺",
    "New Zealand": "🇳🇿",
    "NZ": "🇳🇿",
    "NZL": "🇳🇿",
    "Guam": "🇬🇺",
    "GUM": "🇬🇺",
    "Nauru": "🇳🇷",
    "NRU": "🇳🇷",
    "Fiji": "🇫🇯",
    "FIJ": "🇫🇯",
    "New Caledonia": "🇳🇨",
    "NCL": "🇳🇨",
    "Vanuatu": "🇻🇺",
    "VAN": "🇻🇺",
    "Tonga": "🇹🇴",
    "TGA": "🇹🇴",
    "Papua New Guinea": "🇵🇬",
    "PNG": "🇵🇬",
}


def _casefold_table(table: Dict[str, Optional[str]]) -> Dict[str, Optional[str]]:
    folded: Dict[str, Optional[str]] = {}
    for key, value in table.items():
        folded.setdefault(key.casefold(), value)
    return folded


_FOLDED_CODES = _casefold_table(FEDERATION_CODES)
_FOLDED_FLAGS = _casefold_table(FLAGS)


def _lookup(table, folded, country: Optional[str]):
    if not country:
        return None
    normalised = country.strip()
    if normalised in table:
        return table[normalised]
    return folded.get(normalised.casefold())


def resolve_federation_code(country: Optional[str]) -> Optional[str]:
    """Return the 3-letter FIDE federation for *country* (``None`` if unknown).

    >>> resolve_federation_code("AUSTRALIA")
    'AUS'
    >>> resolve_federation_code("NA") is None
    True
    """
    return _lookup(FEDERATION_CODES, _FOLDED_CODES, country)


def resolve_flag(country: Optional[str]) -> str:
    """Return the flag emoji for *country*, or an empty string."""
    return _lookup(FLAGS, _FOLDED_FLAGS, country) or ""


__all__ = ["FEDERATION_CODES", "FLAGS", "resolve_federation_code", "resolve_flag"]
