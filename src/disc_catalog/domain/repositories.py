"""Catalog Store repository interface.

One repository serves one collection ("cds" or "dvds"). The store is a flat
document collection: no transactions and no server-side queries beyond
fetching everything.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from .records import MediaKind, MediaRecord, record_type_for


class MediaRecordRepository(ABC):
    """Repository for the records of a single media kind."""

    def __init__(self, kind: MediaKind):
        self.kind = kind
        self.record_type = record_type_for(kind)

    @property
    def collection(self) -> str:
        return self.kind.collection

    @abstractmethod
    async def create(self, record: MediaRecord) -> str:
        """Store a new record and return the id the store assigned.

        The record's ``id`` and ``date_added`` are set on the passed object.
        """
        pass

    @abstractmethod
    async def list_all(self) -> List[MediaRecord]:
        """Fetch every record of this kind."""
        pass

    @abstractmethod
    async def get(self, record_id: str) -> Optional[MediaRecord]:
        """Find a record by id."""
        pass

    @abstractmethod
    async def update(self, record_id: str, fields: Dict[str, Any]) -> None:
        """Apply a field-level partial update.

        Raises:
            NotFoundError: If no record has this id.
        """
        pass

    @abstractmethod
    async def delete(self, record_id: str) -> None:
        """Delete a record. Deleting a missing id is not an error."""
        pass

    async def count(self) -> int:
        return len(await self.list_all())

    @staticmethod
    def writable_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
        """Drop the fields an update must never touch."""
        return {key: value for key, value in fields.items() if key not in ("id", "dateAdded")}
