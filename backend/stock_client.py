"""
Alpha Vantage Client
Fetches company overview data using the Alpha Vantage API.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from backend.config import settings
from backend.errors import UpstreamError

logger = logging.getLogger(__name__)


class AlphaVantageClient:
    """
    Alpha Vantage data client
    Provides the OVERVIEW function for a single symbol.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.ALPHA_VANTAGE_API_KEY
        self.base_url = base_url or settings.ALPHA_VANTAGE_URL
        self.timeout = timeout or settings.UPSTREAM_TIMEOUT
        self._transport = transport

    def _ensure_api_key(self) -> None:
        if not self.api_key:
            raise UpstreamError("ALPHA_VANTAGE_API_KEY not configured")

    async def _request(self, **params) -> Dict[str, Any]:
        self._ensure_api_key()
        payload = {
            **params,
            "apikey": self.api_key,
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(self.base_url, params=payload)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            raise UpstreamError(f"Alpha Vantage returned {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise UpstreamError(f"Alpha Vantage request failed: {type(e).__name__}") from e
        except ValueError as e:
            raise UpstreamError("Alpha Vantage returned a malformed payload") from e

        # Alpha Vantage reports rate limits and bad symbols with a 200 status.
        if not isinstance(data, dict) or not data:
            raise UpstreamError("Invalid symbol or API limit reached.")
        if "Note" in data:
            raise UpstreamError(f"Alpha Vantage rate limit: {data['Note']}")
        if "Error Message" in data:
            raise UpstreamError(data["Error Message"])
        if "Information" in data:
            raise UpstreamError(str(data["Information"]))

        return data

    async def get_overview(self, symbol: str) -> Dict[str, Any]:
        """
        Get the company overview for a symbol.
        """
        ticker = symbol.upper().strip()
        logger.info(f"[ALPHAVANTAGE] Fetching overview for {ticker}")
        return await self._request(function="OVERVIEW", symbol=ticker)


_alphavantage_client = None


def get_alphavantage_client() -> AlphaVantageClient:
    """Get singleton Alpha Vantage client instance."""
    global _alphavantage_client
    if _alphavantage_client is None:
        _alphavantage_client = AlphaVantageClient()
    return _alphavantage_client
