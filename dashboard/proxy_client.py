"""
Proxy API Client
Client the dashboard uses to call the key-holding proxy service
"""

import logging
from typing import Any, Dict, Optional

import httpx

from dashboard.config import config

logger = logging.getLogger(__name__)


class ProxyClientError(Exception):
    """
    A proxy call failed.

    message is the proxy's {"error": ...} text when one came back, otherwise
    the transport error text. network is True when no response arrived at all.
    """

    def __init__(self, message: str, network: bool = False):
        super().__init__(message)
        self.message = message
        self.network = network


class ProxyClient:
    """
    Client for the proxy service
    One method per proxy endpoint
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = (base_url or config.PROXY_BASE_URL).rstrip("/")
        self.timeout = timeout or config.PROXY_TIMEOUT
        self._transport = transport
        self._client = None

    @property
    def client(self) -> httpx.Client:
        """Lazy initialization of the HTTP client"""
        if self._client is None:
            self._client = httpx.Client(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def _send(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = self.client.request(method, path, **kwargs)
        except httpx.TransportError as e:
            logger.error(f"Proxy unreachable at {self.base_url}: {type(e).__name__}")
            raise ProxyClientError(str(e) or type(e).__name__, network=True) from e

        if response.is_error:
            raise ProxyClientError(self._error_message(response))

        try:
            return response.json()
        except ValueError as e:
            raise ProxyClientError(f"Malformed response from {path}") from e

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("error"):
            return str(body["error"])
        return f"Request failed with status code {response.status_code}"

    def fetch_news(self, topic: str) -> Dict[str, Any]:
        """GET /api/news?topic=..."""
        return self._send("GET", "/api/news", params={"topic": topic})

    def fetch_stock(self, symbol: str) -> Dict[str, Any]:
        """GET /api/stock?symbol=..."""
        return self._send("GET", "/api/stock", params={"symbol": symbol})

    def analyze(self, data: Any) -> Optional[str]:
        """
        POST /api/analyze

        Returns:
            The raw analysis text, or None when the proxy sent none
        """
        body = self._send("POST", "/api/analyze", json={"data": data})
        if isinstance(body, dict):
            return body.get("analysis")
        return None
