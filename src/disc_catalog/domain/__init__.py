"""
Domain layer for the disc catalog.

Records, barcode and metadata helpers, lookup value objects, the store
repository interface and the catalog service.
"""

from .records import MediaKind, MediaRecord, CDRecord, DVDRecord, new_record
from .lookup import LookupFailure, LookupResult, ResolvedFields
from .repositories import MediaRecordRepository
from .services import CatalogService, CatalogStatistics, SaveOutcome

__all__ = [
    # Records
    "MediaKind",
    "MediaRecord",
    "CDRecord",
    "DVDRecord",
    "new_record",
    # Lookups
    "LookupFailure",
    "LookupResult",
    "ResolvedFields",
    # Store
    "MediaRecordRepository",
    "CatalogService",
    "CatalogStatistics",
    "SaveOutcome",
]
