"""In-memory catalog store for testing and dry runs."""

from copy import deepcopy
from typing import Any, Dict, List, Optional
from uuid import uuid4

from ...domain.records import MediaKind, MediaRecord, utc_now
from ...domain.repositories import MediaRecordRepository
from ...exceptions import NotFoundError


class InMemoryRecordRepository(MediaRecordRepository):
    """In-memory implementation of MediaRecordRepository.

    Documents are kept exactly as a document store would hold them, so the
    record <-> document mapping is exercised the same way.
    """

    def __init__(self, kind: MediaKind):
        super().__init__(kind)
        self._documents: Dict[str, Dict[str, Any]] = {}

    async def create(self, record: MediaRecord) -> str:
        record_id = uuid4().hex
        record.id = record_id
        record.date_added = utc_now()
        self._documents[record_id] = record.to_document()
        return record_id

    async def list_all(self) -> List[MediaRecord]:
        return [
            self.record_type.from_document(record_id, deepcopy(document))
            for record_id, document in self._documents.items()
        ]

    async def get(self, record_id: str) -> Optional[MediaRecord]:
        document = self._documents.get(record_id)
        if document is None:
            return None
        return self.record_type.from_document(record_id, deepcopy(document))

    async def update(self, record_id: str, fields: Dict[str, Any]) -> None:
        if record_id not in self._documents:
            raise NotFoundError(f"No {self.kind.label} with id {record_id}")
        self._documents[record_id].update(self.writable_fields(fields))

    async def delete(self, record_id: str) -> None:
        self._documents.pop(record_id, None)

    async def count(self) -> int:
        return len(self._documents)
