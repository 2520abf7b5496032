"""
Hosted catalog store backed by Cloud Firestore.

Talks to the Firestore REST API (v1) with aiohttp. Each media kind is a flat
collection ("cds", "dvds"); documents are auto-id'd by the server. Updates
send an ``updateMask`` so they only touch the fields they carry.
"""

import asyncio
import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

import aiohttp

from ...domain.records import MediaKind, MediaRecord, utc_now
from ...domain.repositories import MediaRecordRepository
from ...exceptions import NotFoundError, StoreError

logger = logging.getLogger(__name__)

FIRESTORE_URL = "https://firestore.googleapis.com/v1"
PAGE_SIZE = 300

_TIMESTAMP = re.compile(r"^(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(?:\.(\d+))?(Z|[+-]\d{2}:\d{2})$")


def format_timestamp(value: datetime) -> str:
    """RFC 3339 UTC timestamp as Firestore expects it."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def parse_timestamp(text: str) -> datetime:
    """Parse a Firestore timestamp; fractions beyond microseconds are truncated."""
    match = _TIMESTAMP.match(text)
    if not match:
        raise ValueError(f"Invalid timestamp: {text!r}")
    base, fraction, offset = match.groups()
    fraction = (fraction or "0")[:6].ljust(6, "0")
    offset = "+00:00" if offset == "Z" else offset
    return datetime.fromisoformat(f"{base}.{fraction}{offset}").astimezone(timezone.utc)


def encode_value(value: Any) -> Dict[str, Any]:
    """Encode a Python value as a Firestore typed value."""
    if value is None:
        return {"nullValue": None}
    if isinstance(value, bool):
        return {"booleanValue": value}
    if isinstance(value, int):
        return {"integerValue": str(value)}
    if isinstance(value, float):
        return {"doubleValue": value}
    if isinstance(value, datetime):
        return {"timestampValue": format_timestamp(value)}
    if isinstance(value, (list, tuple)):
        return {"arrayValue": {"values": [encode_value(v) for v in value]}}
    if isinstance(value, dict):
        return {"mapValue": {"fields": encode_fields(value)}}
    return {"stringValue": str(value)}


def encode_fields(document: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
    return {key: encode_value(value) for key, value in document.items()}


def decode_value(value: Dict[str, Any]) -> Any:
    """Decode a Firestore typed value."""
    if "nullValue" in value:
        return None
    if "booleanValue" in value:
        return bool(value["booleanValue"])
    if "integerValue" in value:
        return int(value["integerValue"])
    if "doubleValue" in value:
        return float(value["doubleValue"])
    if "timestampValue" in value:
        return parse_timestamp(value["timestampValue"])
    if "stringValue" in value:
        return value["stringValue"]
    if "arrayValue" in value:
        return [decode_value(v) for v in value["arrayValue"].get("values", [])]
    if "mapValue" in value:
        return decode_fields(value["mapValue"].get("fields", {}))
    raise ValueError(f"Unsupported Firestore value: {sorted(value)}")


def decode_fields(fields: Dict[str, Dict[str, Any]]) -> Dict[str, Any]:
    return {key: decode_value(value) for key, value in fields.items()}


def document_id(name: str) -> str:
    """Last segment of a document resource name."""
    return name.rsplit("/", 1)[-1]


class FirestoreRecordRepository(MediaRecordRepository):
    """MediaRecordRepository over the Firestore REST API."""

    def __init__(
        self,
        kind: MediaKind,
        project_id: str,
        api_key: str = "",
        database: str = "(default)",
        base_url: str = FIRESTORE_URL,
        timeout: float = 10
    ):
        super().__init__(kind)
        self.project_id = project_id
        self.api_key = api_key
        self.timeout = timeout
        self.documents_url = (
            f"{base_url.rstrip('/')}/projects/{project_id}/databases/{database}/documents"
        )

    @property
    def collection_url(self) -> str:
        return f"{self.documents_url}/{self.collection}"

    def _document_url(self, record_id: str) -> str:
        return f"{self.collection_url}/{record_id}"

    async def _request(
        self,
        method: str,
        url: str,
        params: Optional[List[Tuple[str, str]]] = None,
        body: Optional[Dict[str, Any]] = None
    ) -> Tuple[int, Dict[str, Any]]:
        """Send a request and return ``(status, json_body)``.

        Raises:
            StoreError: On network failure or an unexpected status.
        """
        params = list(params or [])
        if self.api_key:
            params.append(("key", self.api_key))

        logger.debug(f"Firestore {method} {url}")
        try:
            async with aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as session:
                async with session.request(method, url, params=params, json=body) as response:
                    data = await response.json(content_type=None)
                    status = response.status
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise StoreError(f"Firestore request failed: {e}")

        data = data or {}
        if status == 404 or 200 <= status < 300:
            return status, data

        message = data.get("error", {}).get("message", "") if isinstance(data, dict) else ""
        raise StoreError(f"Firestore responded {status}: {message}".rstrip(": "))

    def _to_record(self, document: Dict[str, Any]) -> MediaRecord:
        return self.record_type.from_document(
            document_id(document["name"]),
            decode_fields(document.get("fields", {})),
        )

    async def create(self, record: MediaRecord) -> str:
        record.date_added = utc_now()
        status, data = await self._request(
            "POST", self.collection_url, body={"fields": encode_fields(record.to_document())}
        )
        if status == 404 or "name" not in data:
            raise StoreError(f"Firestore did not create the {self.kind.label} document")
        record.id = document_id(data["name"])
        logger.debug(f"Created {self.collection}/{record.id}")
        return record.id

    async def list_all(self) -> List[MediaRecord]:
        records: List[MediaRecord] = []
        page_token = None
        while True:
            params = [("pageSize", str(PAGE_SIZE))]
            if page_token:
                params.append(("pageToken", page_token))
            status, data = await self._request("GET", self.collection_url, params=params)
            if status == 404:
                break
            records.extend(self._to_record(document) for document in data.get("documents", []))
            page_token = data.get("nextPageToken")
            if not page_token:
                break
        return records

    async def get(self, record_id: str) -> Optional[MediaRecord]:
        status, data = await self._request("GET", self._document_url(record_id))
        if status == 404:
            return None
        return self._to_record(data)

    async def update(self, record_id: str, fields: Dict[str, Any]) -> None:
        fields = self.writable_fields(fields)
        params = [("updateMask.fieldPaths", key) for key in fields]
        params.append(("currentDocument.exists", "true"))
        status, _ = await self._request(
            "PATCH", self._document_url(record_id), params=params, body={"fields": encode_fields(fields)}
        )
        if status == 404:
            raise NotFoundError(f"No {self.kind.label} with id {record_id}")

    async def delete(self, record_id: str) -> None:
        await self._request("DELETE", self._document_url(record_id))
