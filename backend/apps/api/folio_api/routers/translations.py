"""
Translations router.

Provides endpoints for reading and editing stored translation records and
for the machine-translation review queue.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Query, status

from folio_core.bundles import StaticBundleLoader
from folio_core.exceptions import TranslationNotFoundError
from folio_core.locales import normalize_locale
from folio_core.schemas import (
    BundleSyncResponse,
    ReviewRequest,
    ReviewResponse,
    TranslationRecordResponse,
    UpdateTranslationRequest,
)
from folio_core.services import TranslationService, TranslationStore

from ..dependencies import get_bundles, get_translation_service, get_translation_store

router = APIRouter()


@router.get("")
async def get_locale_messages(
    store: Annotated[TranslationStore, Depends(get_translation_store)],
    bundles: Annotated[StaticBundleLoader, Depends(get_bundles)],
    locale: str | None = None,
) -> dict[str, Any]:
    """
    Get all flat messages for a locale.

    Stored translations take precedence over bundled messages; the source
    locale fills any key the requested locale lacks.
    """
    resolved_locale = normalize_locale(locale)
    messages = bundles.messages(resolved_locale)
    if resolved_locale != bundles.source_locale:
        messages.update(await store.locale_dump(bundles.source_locale))
    messages.update(await store.locale_dump(resolved_locale))
    return {"locale": resolved_locale, "messages": messages}


@router.get("/review")
async def get_review_queue(
    translation_service: Annotated[TranslationService, Depends(get_translation_service)],
    limit: int = Query(100, ge=1, le=500),
) -> list[TranslationRecordResponse]:
    """Machine translations awaiting human review."""
    records = await translation_service.get_review_queue(limit)
    return [TranslationRecordResponse.model_validate(r) for r in records]


@router.post("/review")
async def mark_reviewed(
    data: ReviewRequest,
    translation_service: Annotated[TranslationService, Depends(get_translation_service)],
) -> ReviewResponse:
    """Mark records as reviewed."""
    return ReviewResponse(reviewed=await translation_service.mark_reviewed(data.keys))


@router.post("/sync-bundles")
async def sync_bundles(
    translation_service: Annotated[TranslationService, Depends(get_translation_service)],
    bundles: Annotated[StaticBundleLoader, Depends(get_bundles)],
    overwrite: bool = False,
) -> BundleSyncResponse:
    """
    Load the shipped message bundles into translation records.

    Existing text is kept unless ``overwrite`` is set. Run ``/api/translate/bulk``
    afterwards to queue the new keys for machine translation.
    """
    return await translation_service.sync_bundles(bundles, overwrite=overwrite)


@router.get("/{key}")
async def get_translation(
    key: str,
    translation_service: Annotated[TranslationService, Depends(get_translation_service)],
) -> TranslationRecordResponse:
    """
    Get one translation record.

    Raises:
        HTTPException: If the key does not exist.
    """
    try:
        record = await translation_service.get_translation(key)
    except TranslationNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from None
    return TranslationRecordResponse.model_validate(record)


@router.put("/{key}")
async def update_translation(
    key: str,
    data: UpdateTranslationRequest,
    translation_service: Annotated[TranslationService, Depends(get_translation_service)],
) -> TranslationRecordResponse:
    """
    Manually edit a translation record.

    Args:
        key: Dot-path key.
        data: Locale texts to write.
        translation_service: Translation service.

    Returns:
        Updated record.

    Raises:
        HTTPException: If the key does not exist.
    """
    try:
        record = await translation_service.update_translation(
            key, data.texts, mark_reviewed=data.mark_reviewed
        )
    except TranslationNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from None
    return TranslationRecordResponse.model_validate(record)
