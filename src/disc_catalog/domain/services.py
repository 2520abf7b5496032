"""Catalog domain services.

The CatalogService wraps the per-kind repositories with the rules the front end
needs: save-time validation, the duplicate-barcode confirmation, newest-first
browsing with text search, and dashboard statistics.
"""

import inspect
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, Optional, Union

from ..exceptions import NotFoundError, StoreError
from .records import MediaKind, MediaRecord, utc_now
from .repositories import MediaRecordRepository

logger = logging.getLogger(__name__)

# Called with the existing record that shares the barcode; returns whether to save anyway
DuplicateConfirmation = Callable[[MediaRecord], Union[bool, Awaitable[bool]]]

RECENT_ITEMS_LIMIT = 5


@dataclass
class SaveOutcome:
    """Result of a save attempt."""

    saved: bool
    record: Optional[MediaRecord] = None
    created: bool = False
    cancelled: bool = False
    duplicate: Optional[MediaRecord] = None
    error: Optional[str] = None


@dataclass
class CatalogStatistics:
    """Counts and total playing time shown on the dashboard."""

    cd_count: int
    dvd_count: int
    total_minutes: int

    @property
    def total_count(self) -> int:
        return self.cd_count + self.dvd_count

    @property
    def total_hours(self) -> int:
        return self.total_minutes // 60


def _sort_key(record: MediaRecord):
    return record.date_added or utc_now()


def matches_query(record: MediaRecord, query: str) -> bool:
    """Case-insensitive substring match over the fields shown in the list."""
    needle = query.strip().lower()
    if not needle:
        return True
    haystack = [
        record.title,
        record.primary_credit,
        record.genre,
        record.barcode,
        str(record.year) if record.year else None,
    ]
    return any(needle in value.lower() for value in haystack if value)


class CatalogService:
    """Service for saving and browsing catalog records."""

    def __init__(self, repositories: Dict[MediaKind, MediaRecordRepository]):
        self.repositories = repositories

    def repository(self, kind: MediaKind) -> MediaRecordRepository:
        try:
            return self.repositories[kind]
        except KeyError:
            raise StoreError(f"No store configured for {kind.label} records")

    async def find_duplicate_barcode(
        self,
        kind: MediaKind,
        barcode: Optional[str],
        exclude_id: Optional[str] = None
    ) -> Optional[MediaRecord]:
        """Find another record of the same kind with exactly this barcode.

        A linear scan over a freshly fetched collection; the record being
        edited is excluded by id.
        """
        barcode = (barcode or "").strip()
        if not barcode:
            return None

        for record in await self.repository(kind).list_all():
            if record.id is not None and record.id == exclude_id:
                continue
            if record.barcode == barcode:
                return record
        return None

    async def save(
        self,
        record: MediaRecord,
        confirm_duplicate: Optional[DuplicateConfirmation] = None
    ) -> SaveOutcome:
        """Create or update a record.

        If another record already carries the same barcode, the save only
        proceeds when ``confirm_duplicate`` returns True. Declining (or giving
        no callback) leaves the store untouched.

        Raises:
            ValidationError: If required fields are missing or the year is invalid.
        """
        prepared = record.prepared()
        kind = prepared.kind

        if prepared.barcode:
            try:
                duplicate = await self.find_duplicate_barcode(kind, prepared.barcode, exclude_id=prepared.id)
            except StoreError as e:
                # A failed check never blocks the save
                logger.warning(f"Duplicate barcode check failed: {e}")
                duplicate = None

            if duplicate is not None:
                logger.info(f"Barcode {prepared.barcode} already used by {duplicate.get_display_name()}")
                if not await self._confirm(confirm_duplicate, duplicate):
                    return SaveOutcome(saved=False, record=record, cancelled=True, duplicate=duplicate)

        repository = self.repository(kind)
        try:
            if prepared.is_new:
                await repository.create(prepared)
                created = True
            else:
                await repository.update(prepared.id, prepared.update_fields())
                created = False
        except (StoreError, NotFoundError) as e:
            logger.error(f"Error saving {kind.label}: {e}")
            return SaveOutcome(
                saved=False,
                record=record,
                error=f"Failed to save {kind.label}. Please try again."
            )

        return SaveOutcome(saved=True, record=prepared, created=created)

    @staticmethod
    async def _confirm(confirm_duplicate: Optional[DuplicateConfirmation], duplicate: MediaRecord) -> bool:
        if confirm_duplicate is None:
            return False
        decision = confirm_duplicate(duplicate)
        if inspect.isawaitable(decision):
            decision = await decision
        return bool(decision)

    async def get(self, kind: MediaKind, record_id: str) -> Optional[MediaRecord]:
        return await self.repository(kind).get(record_id)

    async def delete(self, kind: MediaKind, record_id: str) -> None:
        await self.repository(kind).delete(record_id)
        logger.info(f"Deleted {kind.label} {record_id}")

    async def list_records(self, kind: MediaKind, query: Optional[str] = None) -> List[MediaRecord]:
        """All records of a kind, newest first, optionally filtered by a search string."""
        records = await self.repository(kind).list_all()
        if query:
            records = [r for r in records if matches_query(r, query)]
        return sorted(records, key=_sort_key, reverse=True)

    async def recent_items(self, limit: int = RECENT_ITEMS_LIMIT) -> List[MediaRecord]:
        """Most recently added records across every kind."""
        records: List[MediaRecord] = []
        for kind in self.repositories:
            records.extend(await self.repository(kind).list_all())
        return sorted(records, key=_sort_key, reverse=True)[:limit]

    async def statistics(self) -> CatalogStatistics:
        counts: Dict[MediaKind, int] = {MediaKind.CD: 0, MediaKind.DVD: 0}
        total_minutes = 0
        for kind in self.repositories:
            records = await self.repository(kind).list_all()
            counts[kind] = len(records)
            total_minutes += sum(r.length_minutes or 0 for r in records)
        return CatalogStatistics(
            cd_count=counts[MediaKind.CD],
            dvd_count=counts[MediaKind.DVD],
            total_minutes=total_minutes,
        )
