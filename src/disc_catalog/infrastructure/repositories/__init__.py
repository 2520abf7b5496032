"""
Repository Implementations - Infrastructure Layer

Catalog store implementations for the MediaRecordRepository interface, and a
factory that picks one from configuration.
"""

from typing import Dict

from ...domain.records import MediaKind
from ...domain.repositories import MediaRecordRepository
from ...exceptions import ConfigurationError
from ...models.config import StoreConfig
from .memory_repository import InMemoryRecordRepository
from .json_file_repository import JsonFileRecordRepository
from .firestore_repository import FirestoreRecordRepository


def create_repository(config: StoreConfig, kind: MediaKind) -> MediaRecordRepository:
    """Build the store for one media kind from configuration."""
    if config.backend == "memory":
        return InMemoryRecordRepository(kind)
    if config.backend == "json":
        return JsonFileRecordRepository(kind, config.data_path)
    if config.backend == "firestore":
        if not config.project_id:
            raise ConfigurationError("The firestore store needs a project_id")
        return FirestoreRecordRepository(
            kind,
            project_id=config.project_id,
            api_key=config.api_key,
            database=config.database,
        )
    raise ConfigurationError(f"Unknown store backend: {config.backend}")


def create_repositories(config: StoreConfig) -> Dict[MediaKind, MediaRecordRepository]:
    return {kind: create_repository(config, kind) for kind in MediaKind}


__all__ = [
    "InMemoryRecordRepository",
    "JsonFileRecordRepository",
    "FirestoreRecordRepository",
    "create_repository",
    "create_repositories",
]
