"""
Translation Infrastructure
==========================

HTTP client for the Google Cloud Translation v2 REST API.
"""

from typing import List, Optional

import httpx

from grievance_cell.config import settings
from grievance_cell.core import TranslationException
from grievance_cell.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


class GoogleTranslateClient:
    """
    Batch text translation.

    Raises TranslationException on transport errors, non-2xx responses
    and malformed payloads; callers decide how to degrade.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._api_key = api_key if api_key is not None else settings.translation_api_key
        self._api_url = api_url or settings.translation_api_url
        self._timeout = timeout or settings.translation_timeout_seconds
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._timeout, transport=self._transport)
        return self._http_client

    async def translate(
        self,
        texts: List[str],
        target_language: str,
        source_language: Optional[str] = None,
    ) -> List[str]:
        """Translate texts, preserving order."""
        if not self.is_configured:
            raise TranslationException("API key not configured")

        params = [("key", self._api_key), ("target", target_language), ("format", "text")]
        if source_language:
            params.append(("source", source_language))
        params.extend(("q", text) for text in texts)

        try:
            client = await self._get_client()
            response = await client.post(self._api_url, params=params)
        except httpx.HTTPError as e:
            raise TranslationException(str(e)) from e

        if response.status_code != 200:
            raise TranslationException(
                f"HTTP {response.status_code}",
                {"body": response.text[:500]}
            )

        try:
            translations = response.json().get("data", {}).get("translations") or []
        except (ValueError, AttributeError) as e:
            raise TranslationException("Malformed translation response") from e

        if len(translations) != len(texts):
            raise TranslationException(
                "Unexpected number of translations",
                {"expected": len(texts), "received": len(translations)}
            )

        return [item["translatedText"] for item in translations]

    async def detect(self, text: str) -> str:
        """Detected language code of a text."""
        if not self.is_configured:
            raise TranslationException("API key not configured")

        try:
            client = await self._get_client()
            response = await client.post(
                f"{self._api_url.rstrip('/')}/detect",
                params=[("key", self._api_key), ("q", text)]
            )
        except httpx.HTTPError as e:
            raise TranslationException(str(e)) from e

        if response.status_code != 200:
            raise TranslationException(f"HTTP {response.status_code}", {"body": response.text[:500]})

        try:
            return response.json()["data"]["detections"][0][0]["language"]
        except (KeyError, IndexError, TypeError) as e:
            raise TranslationException("Malformed detection response") from e

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None
