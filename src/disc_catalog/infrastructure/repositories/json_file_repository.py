"""
File-based catalog store.

Each collection lives in its own JSON file (``cds.json``, ``dvds.json``)
under a data directory, mapping record id to document.
"""

import json
import logging
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional
from uuid import uuid4

import aiofiles

from ...domain.records import MediaKind, MediaRecord, utc_now
from ...domain.repositories import MediaRecordRepository
from ...exceptions import NotFoundError, StoreError

logger = logging.getLogger(__name__)


def _encode_document(document: Dict[str, Any]) -> Dict[str, Any]:
    return {
        key: value.isoformat() if isinstance(value, datetime) else value
        for key, value in document.items()
    }


class JsonFileRecordRepository(MediaRecordRepository):
    """File-based implementation of MediaRecordRepository using JSON storage."""

    def __init__(self, kind: MediaKind, storage_dir: Path):
        super().__init__(kind)
        self.storage_dir = Path(storage_dir)
        self._file = self.storage_dir / f"{self.collection}.json"
        self._cache: Optional[Dict[str, Dict[str, Any]]] = None

    @property
    def path(self) -> Path:
        return self._file

    async def _load_data(self) -> Dict[str, Dict[str, Any]]:
        """Load every document of the collection."""
        if self._cache is not None:
            return self._cache

        if not self._file.exists():
            self._cache = {}
            return self._cache

        try:
            async with aiofiles.open(self._file, 'r') as f:
                data = json.loads(await f.read() or "{}")
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"Cannot read {self._file}: {e}")

        if not isinstance(data, dict):
            raise StoreError(f"Cannot read {self._file}: expected an object of documents")
        self._cache = data
        return self._cache

    async def _save_data(self, data: Dict[str, Dict[str, Any]]) -> None:
        """Write the collection back to its file."""
        try:
            self.storage_dir.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(self._file, 'w') as f:
                await f.write(json.dumps(data, indent=2))
        except OSError as e:
            raise StoreError(f"Cannot write {self._file}: {e}")
        self._cache = data
        logger.debug(f"Wrote {len(data)} {self.collection} to {self._file}")

    async def create(self, record: MediaRecord) -> str:
        # Changes go to a copy; the cache only moves on after a successful write
        data = dict(await self._load_data())
        record_id = uuid4().hex
        date_added = utc_now()
        document = _encode_document(replace(record, id=record_id, date_added=date_added).to_document())
        data[record_id] = document
        await self._save_data(data)
        record.id = record_id
        record.date_added = date_added
        return record_id

    async def list_all(self) -> List[MediaRecord]:
        data = await self._load_data()
        return [
            self.record_type.from_document(record_id, document)
            for record_id, document in data.items()
        ]

    async def get(self, record_id: str) -> Optional[MediaRecord]:
        data = await self._load_data()
        document = data.get(record_id)
        if document is None:
            return None
        return self.record_type.from_document(record_id, document)

    async def update(self, record_id: str, fields: Dict[str, Any]) -> None:
        data = await self._load_data()
        if record_id not in data:
            raise NotFoundError(f"No {self.kind.label} with id {record_id}")
        data = dict(data)
        data[record_id] = {**data[record_id], **_encode_document(self.writable_fields(fields))}
        await self._save_data(data)

    async def delete(self, record_id: str) -> None:
        data = await self._load_data()
        if record_id in data:
            await self._save_data({key: value for key, value in data.items() if key != record_id})
