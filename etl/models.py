"""Record types shared by the ingest and enrichment layers."""

from dataclasses import asdict, dataclass
from typing import Dict


@dataclass(frozen=True)
class CandidateMatch:
    """One player row extracted from a FIDE search response."""

    fide_id: str
    name: str
    title: str
    std_rating: str
    fed_code: str
    birth_year: str = ""

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict) -> "CandidateMatch":
        """Rebuild a match from its cached JSON form (missing keys → "")."""
        return cls(
            fide_id=str(data.get("fide_id") or ""),
            name=str(data.get("name") or ""),
            title=str(data.get("title") or ""),
            std_rating=str(data.get("std_rating") or ""),
            fed_code=str(data.get("fed_code") or ""),
            birth_year=str(data.get("birth_year") or ""),
        )


__all__ = ["CandidateMatch"]
