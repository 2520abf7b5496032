"""Cover Art Archive adapter."""

import logging
from typing import Any, Dict, List, Optional

from .base import JsonApiAdapter

logger = logging.getLogger(__name__)

# Preferred thumbnail sizes, best first. "500" is the medium-resolution image.
THUMBNAIL_SIZES = ("500", "large")


def select_cover_url(images: List[Dict[str, Any]]) -> Optional[str]:
    """Pick the front cover (or the first image) and return its medium thumbnail."""
    if not images:
        return None

    cover = next((image for image in images if image.get("front")), images[0])
    thumbnails = cover.get("thumbnails") or {}
    for size in THUMBNAIL_SIZES:
        if thumbnails.get(size):
            return thumbnails[size]
    return None


class CoverArtArchiveAdapter(JsonApiAdapter):
    """Adapter for coverartarchive.org, keyed by MusicBrainz release id."""

    service_name = "Cover Art Archive"

    def __init__(
        self,
        base_url: str = "https://coverartarchive.org",
        user_agent: str = "DiscCatalog/1.0.0",
        timeout: float = 10
    ):
        super().__init__(base_url, user_agent, timeout)

    async def front_cover_url(self, release_id: str) -> Optional[str]:
        status, data = await self._get_json(f"{self.base_url}/release/{release_id}")
        if not data:
            logger.debug(f"No cover art for release {release_id} (status {status})")
            return None
        return select_cover_url(data.get("images") or [])
