"""
Translation Controllers (API Routes)
=====================================
"""

from fastapi import APIRouter, Depends, HTTPException, Request

from grievance_cell.translation.application import (
    DetectRequest,
    DetectResponse,
    ITranslationClient,
    TranslateRequest,
    TranslateResponse,
    TranslationCache,
    TranslationService,
)

router = APIRouter(prefix="/api/translate", tags=["Translation"])


# ========== Dependencies ==========

def get_translation_client(request: Request) -> ITranslationClient:
    client = getattr(request.app.state, "translation_client", None)
    if client is None:
        raise HTTPException(status_code=503, detail="Translation client not initialized")
    return client


def get_translation_service(
    client: ITranslationClient = Depends(get_translation_client)
) -> TranslationService:
    return TranslationService(client)


def get_translation_cache() -> TranslationCache:
    """A fresh cache for every request."""
    return TranslationCache()


# ========== Route Handlers ==========

@router.post("", response_model=TranslateResponse, summary="Translate texts")
async def translate(
    payload: TranslateRequest,
    service: TranslationService = Depends(get_translation_service),
    cache: TranslationCache = Depends(get_translation_cache)
):
    translations = await service.translate(
        payload.texts,
        payload.target_language,
        cache,
        source_language=payload.source_language
    )
    return TranslateResponse(target_language=payload.target_language, translations=translations)


@router.post("/detect", response_model=DetectResponse, summary="Detect the language of a text")
async def detect_language(
    payload: DetectRequest,
    service: TranslationService = Depends(get_translation_service)
):
    return DetectResponse(language=await service.detect(payload.text))


# Export router for inclusion in main app
translation_router = router
