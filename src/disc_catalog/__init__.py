"""Disc Catalog

Catalog a personal CD and DVD collection, pre-filling records from public
catalogs by barcode.
"""

__version__ = "1.0.0"

from .domain.records import (
    MediaKind,
    MediaRecord,
    CDRecord,
    DVDRecord,
    new_record
)

from .domain.lookup import (
    LookupFailure,
    LookupResult,
    ResolvedFields
)

from .domain.services import (
    CatalogService,
    CatalogStatistics,
    SaveOutcome
)

from .core.resolver import MetadataResolver

from .infrastructure.repositories import (
    create_repository,
    create_repositories
)

from .models.config import Config, load_config

__all__ = [
    # Records
    'MediaKind',
    'MediaRecord',
    'CDRecord',
    'DVDRecord',
    'new_record',
    # Lookups
    'LookupFailure',
    'LookupResult',
    'ResolvedFields',
    'MetadataResolver',
    # Catalog
    'CatalogService',
    'CatalogStatistics',
    'SaveOutcome',
    'create_repository',
    'create_repositories',
    # Configuration
    'Config',
    'load_config',
]
