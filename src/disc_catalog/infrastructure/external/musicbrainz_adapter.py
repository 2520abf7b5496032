"""
MusicBrainz Adapter - Anti-Corruption Layer for the MusicBrainz API.

Looks releases up by barcode and fetches release details with their track
listing. MusicBrainz asks clients for a descriptive User-Agent and at most
one request per second; pacing is left to the resolver.
"""

import logging
from typing import Any, Dict, List, Optional

from ...exceptions import ServiceUnavailableError
from .base import JsonApiAdapter

logger = logging.getLogger(__name__)


class MusicBrainzAdapter(JsonApiAdapter):
    """Adapter for the MusicBrainz web service (ws/2)."""

    service_name = "MusicBrainz"

    def __init__(
        self,
        base_url: str = "https://musicbrainz.org/ws/2",
        user_agent: str = "DiscCatalog/1.0.0",
        timeout: float = 10
    ):
        super().__init__(base_url, user_agent, timeout)

    async def search_releases_by_barcode(self, barcode: str) -> List[Dict[str, Any]]:
        """Search releases carrying the given barcode.

        Returns the release list in the order MusicBrainz ranks them; empty
        when nothing matched or the request was refused.

        Raises:
            ServiceUnavailableError: If MusicBrainz answers 503.
        """
        status, data = await self._get_json(
            f"{self.base_url}/release",
            params={"query": f"barcode:{barcode}", "fmt": "json"},
        )
        if status == 503:
            raise ServiceUnavailableError(self.service_name)
        if not data:
            return []

        releases = data.get("releases") or []
        logger.debug(f"MusicBrainz returned {len(releases)} releases for barcode {barcode}")
        return releases

    async def get_release(self, release_id: str) -> Optional[Dict[str, Any]]:
        """Fetch a release including its media and track lengths."""
        status, data = await self._get_json(
            f"{self.base_url}/release/{release_id}",
            params={"fmt": "json", "inc": "recordings"},
        )
        if status == 503:
            raise ServiceUnavailableError(self.service_name)
        return data
