"""Value objects describing the outcome of a barcode lookup."""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .records import MediaRecord


class LookupFailure(Enum):
    """Why a lookup produced no record."""
    NOT_FOUND = "not_found"
    SERVICE_UNAVAILABLE = "service_unavailable"
    ERROR = "error"


@dataclass
class ResolvedFields:
    """Record fields populated by a lookup. Unset fields stay None."""

    title: Optional[str] = None
    primary_credit: Optional[str] = None
    year: Optional[int] = None
    genre: Optional[str] = None
    length_minutes: Optional[int] = None
    cover_url: Optional[str] = None
    rating: Optional[str] = None
    notes: Optional[str] = None

    def populated(self) -> Dict[str, Any]:
        """Only the fields the lookup actually set."""
        return {key: value for key, value in asdict(self).items() if value is not None}

    def is_empty(self) -> bool:
        return not self.populated()

    def apply_to(self, record: MediaRecord) -> MediaRecord:
        """Overwrite the record's fields with every populated value, in place."""
        for key, value in self.populated().items():
            if key == "rating" and not hasattr(record, "rating"):
                continue
            setattr(record, key, value)
        return record


@dataclass
class LookupResult:
    """Outcome of resolving one barcode."""

    found: bool
    barcode: str
    fields: ResolvedFields = field(default_factory=ResolvedFields)
    reason: Optional[LookupFailure] = None
    message: str = ""
    attempted: List[str] = field(default_factory=list)
    source: Optional[str] = None
    rating_needs_verification: bool = False

    @classmethod
    def hit(
        cls,
        barcode: str,
        fields: ResolvedFields,
        source: str,
        attempted: Optional[List[str]] = None,
        message: str = "",
    ) -> "LookupResult":
        return cls(
            found=True,
            barcode=barcode,
            fields=fields,
            source=source,
            attempted=list(attempted or [barcode]),
            message=message,
            rating_needs_verification=fields.rating is not None,
        )

    @classmethod
    def miss(
        cls,
        barcode: str,
        reason: LookupFailure,
        message: str,
        attempted: Optional[List[str]] = None,
        source: Optional[str] = None,
    ) -> "LookupResult":
        return cls(
            found=False,
            barcode=barcode,
            reason=reason,
            message=message,
            attempted=list(attempted or []),
            source=source,
        )
