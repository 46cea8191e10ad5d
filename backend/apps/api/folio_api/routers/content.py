"""
Content router.

Provides endpoints for resolving localized site content and for saving
admin-authored overrides.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Query, status

from folio_core.exceptions import ContentValidationError
from folio_core.locales import normalize_locale
from folio_core.schemas import (
    ContentRecordResponse,
    ContentUpsertRequest,
    MultilangContentRequest,
    MultilangSaveResponse,
)
from folio_core.services import Resolver, TranslationService

from ..dependencies import get_resolver, get_translation_service

router = APIRouter()


@router.get("/multilang")
async def get_multilang_content(
    resolver: Annotated[Resolver, Depends(get_resolver)],
    section: str = Query(..., min_length=1, max_length=100),
) -> dict[str, Any]:
    """
    Get a section's content across all locales.

    Args:
        resolver: Content resolver.
        section: Section name.

    Returns:
        Section name and ``{field: {locale: value}}``.
    """
    return {"section": section, "content": await resolver.resolve_multilang(section)}


@router.post("/multilang")
async def save_multilang_content(
    data: MultilangContentRequest,
    translation_service: Annotated[TranslationService, Depends(get_translation_service)],
) -> MultilangSaveResponse:
    """
    Save a multi-language section form.

    Args:
        data: Section name and per-field locale maps.
        translation_service: Translation service.

    Returns:
        Saved field names and the translation keys written.

    Raises:
        HTTPException: If a structured field has the wrong shape.
    """
    try:
        return await translation_service.save_section_content(data.section, data.content)
    except ContentValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from None


@router.get("/resolve")
async def resolve_key(
    resolver: Annotated[Resolver, Depends(get_resolver)],
    key: str = Query(..., min_length=1, max_length=255),
    locale: str | None = None,
    fallback: str = "",
) -> dict[str, str]:
    """Resolve one key for one locale."""
    resolved_locale = normalize_locale(locale)
    value = await resolver.resolve(resolved_locale, key, fallback)
    return {"key": key, "locale": resolved_locale, "value": value}


@router.get("/{section}")
async def get_section(
    section: str,
    resolver: Annotated[Resolver, Depends(get_resolver)],
    locale: str | None = None,
) -> dict[str, Any]:
    """
    Get every field of a section resolved for one locale.

    Args:
        section: Section name.
        resolver: Content resolver.
        locale: Requested locale; unknown locales use the source locale.

    Returns:
        Section name, effective locale and resolved fields.
    """
    resolved_locale = normalize_locale(locale)
    return {
        "section": section,
        "locale": resolved_locale,
        "content": await resolver.resolve_section(resolved_locale, section),
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def upsert_content(
    data: ContentUpsertRequest,
    translation_service: Annotated[TranslationService, Depends(get_translation_service)],
) -> ContentRecordResponse:
    """
    Write one raw content override.

    Raises:
        HTTPException: If the value has the wrong shape for its field.
    """
    try:
        record = await translation_service.upsert_content(data.section, data.tag, data.value)
    except ContentValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from None
    return ContentRecordResponse.model_validate(record)
