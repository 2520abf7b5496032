"""OMDb adapter: movie metadata by title."""

import logging
from typing import Any, Dict, Optional

from .base import JsonApiAdapter

logger = logging.getLogger(__name__)


class OmdbAdapter(JsonApiAdapter):
    """Adapter for the Open Movie Database API.

    OMDb answers HTTP 200 for misses too, with ``"Response": "False"`` and an
    ``Error`` message in the body.
    """

    service_name = "OMDb"

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://www.omdbapi.com",
        user_agent: str = "DiscCatalog/1.0.0",
        timeout: float = 10
    ):
        super().__init__(base_url, user_agent, timeout)
        self.api_key = api_key

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def find_movie(self, title: str, year: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """Best match for a movie title, optionally narrowed by year."""
        params = {"t": title, "type": "movie", "apikey": self.api_key}
        if year:
            params["y"] = str(year)

        _, data = await self._get_json(f"{self.base_url}/", params=params)
        if not data:
            return None
        if data.get("Response") != "True":
            logger.debug(f"OMDb has no match for {title!r}: {data.get('Error')}")
            return None
        return data
