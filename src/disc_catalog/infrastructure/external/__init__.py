"""
External Services - Infrastructure Layer

Adapters for the public catalogs the resolver queries, implementing the
Anti-Corruption Layer pattern so catalog payloads stay out of the domain.
"""

from .base import JsonApiAdapter
from .musicbrainz_adapter import MusicBrainzAdapter
from .coverart_adapter import CoverArtArchiveAdapter
from .upcitemdb_adapter import UpcItemDbAdapter
from .omdb_adapter import OmdbAdapter

__all__ = [
    "JsonApiAdapter",
    "MusicBrainzAdapter",
    "CoverArtArchiveAdapter",
    "UpcItemDbAdapter",
    "OmdbAdapter",
]
