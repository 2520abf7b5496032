"""Parsing helpers that turn catalog payloads into record fields."""

import math
import re
from typing import Any, Dict, Iterable, List, Optional, Tuple

# Sentinel the movie catalog uses for missing values
NOT_AVAILABLE = "N/A"

UNRATED = "Unrated"

# US (MPAA) classifications to UK (BBFC) classifications. Approximate only.
RATING_MAP: Dict[str, str] = {
    "G": "U",
    "PG": "PG",
    "PG-13": "12A",
    "R": "15",
    "NC-17": "18",
}

_YEAR_IN_BRACKETS = re.compile(r"^(.+?)\s*[\(\[](\d{4})[\)\]]")
_FORMAT_SUFFIX = re.compile(r"\s*[-–]\s*(DVD|Blu-ray|Blu Ray).*$", re.IGNORECASE)
_BRACKETED_TAG = re.compile(r"\s*\[.*?\]\s*")
_LEADING_YEAR = re.compile(r"^\s*(\d{4})")
_FIRST_INTEGER = re.compile(r"(\d+)")


def join_artist_credits(credits: Optional[Iterable[Dict[str, Any]]]) -> Optional[str]:
    """Join every credited name of a MusicBrainz ``artist-credit`` list with ", "."""
    names = [credit.get("name") for credit in credits or [] if credit.get("name")]
    return ", ".join(names) if names else None


def release_year(date: Optional[str]) -> Optional[int]:
    """Extract the four-digit year prefix of a date such as ``1997-05-21`` or ``2010–2012``."""
    if not date:
        return None
    match = _LEADING_YEAR.match(str(date))
    return int(match.group(1)) if match else None


def total_duration_minutes(media: Optional[List[Dict[str, Any]]]) -> Optional[int]:
    """Sum track lengths (milliseconds) over every medium and round to whole minutes.

    Tracks without a length count as zero. Returns None when there are no media.
    """
    if not media:
        return None

    total_ms = 0
    for medium in media:
        for track in medium.get("tracks") or []:
            length = track.get("length")
            if length:
                total_ms += length

    # Half-up rounding; round() would round half to even
    return math.floor(total_ms / 60000 + 0.5)


def _strip_format_suffix(title: str) -> str:
    return _FORMAT_SUFFIX.sub("", title)


def extract_movie_title(product_title: str) -> Tuple[str, Optional[str]]:
    """Extract a movie title and optional year from a retail product title.

    ``"Inception (2010) [Blu-ray]"`` gives ``("Inception", "2010")``;
    ``"The Matrix - Blu-ray"`` gives ``("The Matrix", None)``.
    """
    product_title = (product_title or "").strip()

    match = _YEAR_IN_BRACKETS.match(product_title)
    if match:
        return _strip_format_suffix(match.group(1)).strip(), match.group(2)

    title = _strip_format_suffix(product_title)
    title = _BRACKETED_TAG.sub(" ", title)
    return " ".join(title.split()), None


def map_rating(source_rating: Optional[str]) -> str:
    """Map a movie-catalog content rating to the local vocabulary."""
    if not source_rating:
        return UNRATED
    return RATING_MAP.get(source_rating.strip(), UNRATED)


def parse_runtime(runtime: Optional[str]) -> Optional[int]:
    """First integer in a runtime string such as ``"148 min"``."""
    if not runtime or runtime == NOT_AVAILABLE:
        return None
    match = _FIRST_INTEGER.search(runtime)
    return int(match.group(1)) if match else None


def first_genre(genres: Optional[str]) -> Optional[str]:
    """First entry of a comma-separated genre list."""
    if not genres or genres == NOT_AVAILABLE:
        return None
    genre = genres.split(",")[0].strip()
    return genre or None


def available(value: Optional[str]) -> Optional[str]:
    """Return the value unless it is empty or the catalog's "N/A" sentinel."""
    if value is None:
        return None
    value = str(value).strip()
    if not value or value == NOT_AVAILABLE:
        return None
    return value
