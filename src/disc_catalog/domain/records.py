"""Media record entities.

A MediaRecord is the persisted description of one CD or DVD. The store
assigns ``id`` on creation and ``date_added`` is stamped at the same moment;
neither changes afterwards.
"""

import re
from dataclasses import dataclass, fields, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Type

from ..exceptions import ValidationError

MIN_YEAR = 1900
DEFAULT_GENRE = "Unknown"

CD_GENRES: List[str] = [
    "Rock", "Pop", "Classical", "Classical Compilation", "Compilation", "Jazz",
    "Blues", "Country", "Electronic", "Folk", "Hip Hop", "R&B/Soul", "Metal",
    "Punk", "Reggae", "Alternative", "Indie", "World Music", "Soundtrack",
    "Opera", "Gospel", "Dance", "Other",
]

DVD_GENRES: List[str] = [
    "Action", "Adventure", "Animation", "Biography", "Comedy", "Crime",
    "Documentary", "Drama", "Family", "Fantasy", "Film Noir", "History",
    "Horror", "Musical", "Mystery", "Romance", "Sci-Fi", "Sport", "Thriller",
    "War", "Western", "Other",
]

# UK classifications offered for DVDs
DVD_RATINGS: List[str] = ["U", "PG", "12", "12A", "15", "18", "R18", "TBC", "Unrated"]


class MediaKind(Enum):
    """The two kinds of physical media in the catalog."""
    CD = "cd"
    DVD = "dvd"

    @property
    def collection(self) -> str:
        """Name of the store collection holding records of this kind."""
        return f"{self.value}s"

    @property
    def label(self) -> str:
        return self.value.upper()

    @property
    def credit_label(self) -> str:
        return "artist" if self is MediaKind.CD else "director"

    @property
    def genres(self) -> List[str]:
        """Suggested genres for records of this kind."""
        return CD_GENRES if self is MediaKind.CD else DVD_GENRES


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _clean(value: Optional[Any]) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _coerce_int(value: Any) -> Optional[int]:
    """Integer from a stored value; older documents may hold strings like "2010"."""
    if value is None or isinstance(value, int):
        return value
    match = re.match(r"\s*(\d+)", str(value))
    return int(match.group(1)) if match else None


def parse_year(value: Optional[Any], current_year: Optional[int] = None) -> int:
    """Validate a year, defaulting blank input to the current year.

    Raises:
        ValidationError: If the year is not a number within [1900, current year].
    """
    current_year = current_year or utc_now().year
    text = _clean(value)
    if text is None:
        return current_year

    try:
        year = int(text)
    except ValueError:
        raise ValidationError("Please enter a valid year.")

    if year < MIN_YEAR or year > current_year:
        raise ValidationError(f"Year must be between {MIN_YEAR} and {current_year}.")
    return year


@dataclass(kw_only=True)
class MediaRecord:
    """Fields shared by every kind of record."""

    kind: ClassVar[MediaKind]
    credit_field: ClassVar[str]
    length_field: ClassVar[str]
    # Field names as persisted in the store
    document_keys: ClassVar[Dict[str, str]] = {
        "title": "title",
        "year": "year",
        "genre": "genre",
        "barcode": "barcode",
        "cover_url": "coverUrl",
        "notes": "notes",
    }

    title: str = ""
    year: Optional[int] = None
    genre: str = ""
    barcode: Optional[str] = None
    cover_url: Optional[str] = None
    notes: Optional[str] = None

    # Assigned by the store
    id: Optional[str] = None
    date_added: Optional[datetime] = None

    @property
    def primary_credit(self) -> str:
        """The performing artist of a CD or the director of a DVD."""
        return getattr(self, self.credit_field) or ""

    @primary_credit.setter
    def primary_credit(self, value: str) -> None:
        setattr(self, self.credit_field, value)

    @property
    def length_minutes(self) -> Optional[int]:
        """Total playing time of a CD or runtime of a DVD, in minutes."""
        return getattr(self, self.length_field)

    @length_minutes.setter
    def length_minutes(self, value: Optional[int]) -> None:
        setattr(self, self.length_field, value)

    @property
    def is_new(self) -> bool:
        return self.id is None

    def get_display_name(self) -> str:
        """Human-readable name such as ``"Title" by Artist``."""
        joiner = "by" if self.kind is MediaKind.CD else "directed by"
        return f'"{self.title}" {joiner} {self.primary_credit}'

    def prepared(self, current_year: Optional[int] = None) -> "MediaRecord":
        """Return a copy normalised for saving.

        Strings are trimmed, the year is validated (blank becomes the current
        year), a blank genre becomes "Unknown" and empty optional values are
        dropped.

        Raises:
            ValidationError: If the title or primary credit is missing or the
                year is out of range.
        """
        title = _clean(self.title)
        credit = _clean(self.primary_credit)
        if not title or not credit:
            raise ValidationError(
                f"Please enter at least a title and {self.kind.credit_label}."
            )

        changes: Dict[str, Any] = {
            "title": title,
            self.credit_field: credit,
            "year": parse_year(self.year, current_year),
            "genre": _clean(self.genre) or DEFAULT_GENRE,
            "barcode": _clean(self.barcode),
            "cover_url": _clean(self.cover_url),
            "notes": _clean(self.notes),
        }
        length = self.length_minutes
        changes[self.length_field] = length if length and length > 0 else None
        changes.update(self._prepared_extra())
        return replace(self, **changes)

    def _prepared_extra(self) -> Dict[str, Any]:
        return {}

    def to_document(self) -> Dict[str, Any]:
        """Serialize to a store document, omitting empty optional values and the id."""
        document: Dict[str, Any] = {}
        for attribute, key in self.document_keys.items():
            value = getattr(self, attribute)
            if value is None or value == "" or (attribute == self.length_field and value <= 0):
                continue
            document[key] = value
        if self.date_added is not None:
            document["dateAdded"] = self.date_added
        return document

    def update_fields(self) -> Dict[str, Any]:
        """Document fields for a partial update; never carries ``dateAdded``."""
        document = self.to_document()
        document.pop("dateAdded", None)
        return document

    @classmethod
    def from_document(cls, record_id: Optional[str], data: Dict[str, Any]) -> "MediaRecord":
        """Build a record from a store document."""
        kwargs: Dict[str, Any] = {}
        for attribute, key in cls.document_keys.items():
            if key in data:
                kwargs[attribute] = data[key]
        for attribute in ("year", cls.length_field):
            if attribute in kwargs:
                kwargs[attribute] = _coerce_int(kwargs[attribute])

        date_added = data.get("dateAdded")
        if isinstance(date_added, str):
            date_added = datetime.fromisoformat(date_added)
        if date_added is not None and date_added.tzinfo is None:
            # Stored times without an offset are UTC
            date_added = date_added.replace(tzinfo=timezone.utc)
        return cls(id=record_id, date_added=date_added or utc_now(), **kwargs)


@dataclass(kw_only=True)
class CDRecord(MediaRecord):
    """An audio disc."""

    kind: ClassVar[MediaKind] = MediaKind.CD
    credit_field: ClassVar[str] = "artist"
    length_field: ClassVar[str] = "duration_minutes"
    document_keys: ClassVar[Dict[str, str]] = {
        **MediaRecord.document_keys,
        "artist": "artist",
        "duration_minutes": "duration",
    }

    artist: str = ""
    duration_minutes: Optional[int] = None


@dataclass(kw_only=True)
class DVDRecord(MediaRecord):
    """A video disc."""

    kind: ClassVar[MediaKind] = MediaKind.DVD
    credit_field: ClassVar[str] = "director"
    length_field: ClassVar[str] = "runtime_minutes"
    document_keys: ClassVar[Dict[str, str]] = {
        **MediaRecord.document_keys,
        "director": "director",
        "runtime_minutes": "runtime",
        "rating": "rating",
    }

    director: str = ""
    runtime_minutes: Optional[int] = None
    rating: Optional[str] = None

    def _prepared_extra(self) -> Dict[str, Any]:
        return {"rating": _clean(self.rating)}


RECORD_TYPES: Dict[MediaKind, Type[MediaRecord]] = {
    MediaKind.CD: CDRecord,
    MediaKind.DVD: DVDRecord,
}


def record_type_for(kind: MediaKind) -> Type[MediaRecord]:
    return RECORD_TYPES[kind]


def new_record(kind: MediaKind, **values: Any) -> MediaRecord:
    """Create an unsaved record of the given kind.

    ``primary_credit`` and ``length_minutes`` are accepted as aliases for the
    kind-specific field names.
    """
    record_type = record_type_for(kind)
    if "primary_credit" in values:
        values[record_type.credit_field] = values.pop("primary_credit")
    if "length_minutes" in values:
        values[record_type.length_field] = values.pop("length_minutes")
    known = {f.name for f in fields(record_type)}
    unknown = set(values) - known
    if unknown:
        raise ValidationError(f"Unknown {kind.label} fields: {', '.join(sorted(unknown))}")
    return record_type(**values)
