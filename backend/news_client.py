"""
News API Client
Proxies keyword searches to NewsAPI's /everything endpoint
"""

import logging
from typing import Any, Dict, Optional

import httpx

from backend.config import settings
from backend.errors import UpstreamError

logger = logging.getLogger(__name__)


class NewsClient:
    """
    NewsAPI client
    Returns the upstream search payload untouched
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.NEWS_API_KEY
        self.base_url = base_url or settings.NEWS_API_URL
        self.timeout = timeout or settings.UPSTREAM_TIMEOUT
        self._transport = transport

    async def search(self, topic: str) -> Dict[str, Any]:
        """
        Search news articles about a topic

        Args:
            topic: Free-text query

        Returns:
            The NewsAPI response body
        """
        if not self.api_key:
            raise UpstreamError("NEWS_API_KEY not configured")

        params = {
            "q": topic,
            "apiKey": self.api_key,
        }

        logger.info(f"[NEWS API] Fetching news for: {topic}")
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(f"{self.base_url}/everything", params=params)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"[NEWS API ERROR] Status: {e.response.status_code}")
            raise UpstreamError(f"NewsAPI returned {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error(f"[NEWS API ERROR] {type(e).__name__}")
            raise UpstreamError(f"NewsAPI request failed: {type(e).__name__}") from e
        except ValueError as e:
            logger.error("[NEWS API ERROR] Response was not JSON")
            raise UpstreamError("NewsAPI returned a malformed payload") from e


_news_client = None


def get_news_client() -> NewsClient:
    """Get singleton News client instance"""
    global _news_client
    if _news_client is None:
        _news_client = NewsClient()
    return _news_client
