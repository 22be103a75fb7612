"""
Translation Application Layer
==============================
"""

from grievance_cell.translation.application.dto import (
    TranslateRequest,
    TranslateResponse,
    DetectRequest,
    DetectResponse,
)
from grievance_cell.translation.application.services import (
    TranslationService,
    TranslationCache,
    ITranslationClient,
)

__all__ = [
    "TranslateRequest",
    "TranslateResponse",
    "DetectRequest",
    "DetectResponse",
    "TranslationService",
    "TranslationCache",
    "ITranslationClient",
]
