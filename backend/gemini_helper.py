"""
Gemini API Helper
Sends the analyst prompt to Gemini with the key in a header instead of the URL
"""
import json
import logging
from typing import Any, Optional

import httpx

from backend.config import settings
from backend.errors import UpstreamError

logger = logging.getLogger(__name__)

# =========================
# ANALYST PROMPT
# =========================

SYSTEM_PROMPT = """You are an expert financial analyst. Your task is to analyze the provided JSON data and deliver a report.
RULES:
1. Your response MUST start with the line "Summary:".
2. After the summary, your response MUST include the line "Key Insights:".
3. Under "Key Insights:", you MUST list three numbered insights on new lines.
4. DO NOT use any markdown formatting."""


def build_user_query(data: Any) -> str:
    return f"Analyze the following data: {json.dumps(data, indent=2)}"


class GeminiClient:
    """
    Gemini generateContent client
    Returns the first candidate's text or raises UpstreamError
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.GEMINI_API_KEY
        self.api_url = api_url or settings.gemini_api_url
        self.timeout = timeout or settings.UPSTREAM_TIMEOUT
        self._transport = transport

    async def analyze(self, data: Any) -> str:
        """
        Ask Gemini to analyze a JSON payload

        Args:
            data: Any JSON-serializable value fetched by the client

        Returns:
            The raw response text from Gemini

        Raises:
            UpstreamError: If the key is missing, the call fails or no text comes back
        """
        if not self.api_key:
            raise UpstreamError("GEMINI_API_KEY not configured")

        headers = {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
        }
        payload = {
            "contents": [
                {
                    "parts": [
                        {"text": build_user_query(data)}
                    ]
                }
            ],
            "systemInstruction": {
                "parts": [
                    {"text": SYSTEM_PROMPT}
                ]
            },
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.api_url, headers=headers, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"Gemini API HTTP error: {type(e).__name__}")
            raise UpstreamError(f"Gemini request failed: {type(e).__name__}") from e

        if response.status_code != 200:
            logger.error(f"Gemini API error: {response.status_code}")
            raise UpstreamError(f"Gemini API returned {response.status_code}")

        try:
            body = response.json()
            text = body["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.error(f"Unexpected Gemini response structure: {type(e).__name__}")
            raise UpstreamError("The AI returned an empty response.") from e

        if not isinstance(text, str) or not text:
            raise UpstreamError("The AI returned an empty response.")
        return text


_gemini_client = None


def get_gemini_client() -> GeminiClient:
    """Get singleton Gemini client instance"""
    global _gemini_client
    if _gemini_client is None:
        _gemini_client = GeminiClient()
    return _gemini_client
