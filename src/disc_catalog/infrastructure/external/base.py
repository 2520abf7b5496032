"""Shared HTTP plumbing for the external catalog adapters."""

import logging
from typing import Any, Dict, Optional, Tuple

import aiohttp

logger = logging.getLogger(__name__)


class JsonApiAdapter:
    """Base adapter for JSON web services.

    A session is opened per request; lookups are rare and strictly sequential.
    Network and decode errors propagate to the caller, which decides whether
    a failing source is fatal.
    """

    service_name = "catalog"

    def __init__(self, base_url: str, user_agent: str, timeout: float = 10):
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent
        self.timeout = timeout

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "User-Agent": self.user_agent,
            "Accept": "application/json",
        }

    async def _get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Tuple[int, Optional[Any]]:
        """GET a URL and decode its JSON body.

        Returns:
            ``(status, data)``; ``data`` is None for any non-200 status.
        """
        logger.debug(f"{self.service_name} GET {url} {params or ''}")
        async with aiohttp.ClientSession(
            headers=self.headers,
            timeout=aiohttp.ClientTimeout(total=self.timeout)
        ) as session:
            async with session.get(url, params=params) as response:
                if response.status != 200:
                    logger.debug(f"{self.service_name} responded {response.status} for {url}")
                    return response.status, None
                return response.status, await response.json(content_type=None)
