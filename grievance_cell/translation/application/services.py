"""
Translation Application Services
=================================

Translation with a per-request cache and graceful degradation: when the
API cannot be reached the caller gets the original texts back.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from grievance_cell.config import SUPPORTED_LANGUAGES
from grievance_cell.core import TranslationException, ValidationException
from grievance_cell.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

DEFAULT_LANGUAGE = "en"


class ITranslationClient(ABC):
    """Interface for the translation API."""

    @abstractmethod
    async def translate(
        self,
        texts: List[str],
        target_language: str,
        source_language: Optional[str] = None
    ) -> List[str]:
        """Translate texts in order."""

    @abstractmethod
    async def detect(self, text: str) -> str:
        """Detect the language of a text."""


class TranslationCache:
    """
    Translated strings keyed by language pair and text.

    Create one per request and pass it to the service; it is never shared
    between requests.
    """

    def __init__(self):
        self._entries: Dict[str, str] = {}

    @staticmethod
    def key(text: str, target_language: str, source_language: Optional[str] = None) -> str:
        return f"{source_language or 'auto'}:{target_language}:{text}"

    def get(self, key: str) -> Optional[str]:
        return self._entries.get(key)

    def put(self, key: str, value: str) -> None:
        self._entries[key] = value

    def __len__(self) -> int:
        return len(self._entries)


class TranslationService:
    """Batch translation through the cache."""

    def __init__(self, client: ITranslationClient):
        self._client = client

    @staticmethod
    def _validate_language(code: Optional[str], field: str) -> None:
        if code is not None and code not in SUPPORTED_LANGUAGES:
            raise ValidationException(
                f"Unsupported {field}: {code}",
                {"supported": SUPPORTED_LANGUAGES}
            )

    async def translate(
        self,
        texts: List[str],
        target_language: str,
        cache: TranslationCache,
        source_language: Optional[str] = None
    ) -> List[str]:
        """
        Translate texts, preserving order.

        English without an explicit source is returned unchanged; API
        failures return the original texts.

        Raises:
            ValidationException: unsupported language code
        """
        self._validate_language(target_language, "target_language")
        self._validate_language(source_language, "source_language")

        if target_language == DEFAULT_LANGUAGE and not source_language:
            return list(texts)

        keys = [TranslationCache.key(t, target_language, source_language) for t in texts]
        missing = list(dict.fromkeys(t for t, k in zip(texts, keys) if cache.get(k) is None))

        if missing:
            try:
                translated = await self._client.translate(missing, target_language, source_language)
            except TranslationException as e:
                logger.error(
                    "Translation failed, returning original text",
                    extra={"target_language": target_language, "count": len(missing), "error": e.message}
                )
                translated = None

            if translated is not None:
                for text, value in zip(missing, translated):
                    cache.put(TranslationCache.key(text, target_language, source_language), value)

        return [cache.get(k) or t for t, k in zip(texts, keys)]

    async def detect(self, text: str) -> str:
        """Detected language, English when detection fails."""
        try:
            return await self._client.detect(text)
        except TranslationException as e:
            logger.warning("Language detection failed", extra={"error": e.message})
            return DEFAULT_LANGUAGE
