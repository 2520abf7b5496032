"""UPCitemdb adapter: product listings by UPC/EAN."""

import logging
from typing import Optional

from .base import JsonApiAdapter

logger = logging.getLogger(__name__)


class UpcItemDbAdapter(JsonApiAdapter):
    """Adapter for the UPCitemdb trial lookup endpoint."""

    service_name = "UPCitemdb"

    def __init__(
        self,
        base_url: str = "https://api.upcitemdb.com",
        user_agent: str = "DiscCatalog/1.0.0",
        timeout: float = 10
    ):
        super().__init__(base_url, user_agent, timeout)

    async def product_title(self, barcode: str) -> Optional[str]:
        """Free-text title of the first product listed for a barcode."""
        status, data = await self._get_json(
            f"{self.base_url}/prod/trial/lookup",
            params={"upc": barcode},
        )
        if not data:
            if status == 429:
                logger.warning("UPCitemdb daily trial limit reached")
            return None

        items = data.get("items") or []
        if not items:
            return None
        title = (items[0].get("title") or "").strip()
        return title or None
