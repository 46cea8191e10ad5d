"""
Translate router.

Provides endpoints for machine translation and for driving the
translation job pipeline.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from folio_core.exceptions import EngineUnavailableError
from folio_core.schemas import (
    BatchTranslateRequest,
    BatchTranslateResponse,
    BulkTriggerResponse,
    EngineStatusResponse,
    JobStats,
    PipelineRunResult,
    RetryResponse,
    TranslateRequest,
    TranslateResponse,
    TranslationStatus,
)
from folio_core.services import TranslationPipeline, TranslationService

from ..dependencies import get_translation_pipeline, get_translation_service

router = APIRouter()


@router.get("")
async def get_engine_status(
    translation_service: Annotated[TranslationService, Depends(get_translation_service)],
) -> EngineStatusResponse:
    """Report whether machine translation is available and with which providers."""
    return translation_service.get_status()


@router.post("")
async def translate(
    data: TranslateRequest,
    translation_service: Annotated[TranslationService, Depends(get_translation_service)],
) -> TranslateResponse:
    """
    Translate one text and save it under its key.

    Args:
        data: Key, source text and locales.
        translation_service: Translation service.

    Returns:
        Per-locale text; failed locales carry the source text and an error.

    Raises:
        HTTPException: If no translation provider is configured.
    """
    try:
        return await translation_service.translate_and_save(
            key=data.key,
            text=data.text,
            source_locale=data.source_locale,
            target_locales=data.target_locales,
            context=data.context,
            force_retranslate=data.force_retranslate,
        )
    except EngineUnavailableError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e)
        ) from None


@router.post("/batch")
async def translate_batch(
    data: BatchTranslateRequest,
    translation_service: Annotated[TranslationService, Depends(get_translation_service)],
) -> BatchTranslateResponse:
    """
    Translate and save several texts.

    Raises:
        HTTPException: If no translation provider is configured.
    """
    try:
        return await translation_service.translate_batch(
            data.translations,
            source_locale=data.source_locale,
            target_locales=data.target_languages,
        )
    except EngineUnavailableError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e)
        ) from None


@router.post("/bulk")
async def trigger_bulk_translation(
    pipeline: Annotated[TranslationPipeline, Depends(get_translation_pipeline)],
    translation_service: Annotated[TranslationService, Depends(get_translation_service)],
) -> BulkTriggerResponse:
    """
    Queue jobs for every key with untranslated locales.

    When a worker is connected, a pipeline pass is enqueued as well.
    """
    keys = await pipeline.trigger_bulk()
    enqueued = await translation_service.queue_processing() if keys else False
    return BulkTriggerResponse(queued=len(keys), keys=keys, enqueued=enqueued)


@router.post("/process-queue")
async def process_queue(
    pipeline: Annotated[TranslationPipeline, Depends(get_translation_pipeline)],
    limit: int | None = Query(None, ge=1, le=200),
) -> PipelineRunResult:
    """
    Run one pipeline pass in this request.

    Args:
        pipeline: Translation pipeline.
        limit: Maximum number of jobs to claim.

    Returns:
        Counts and per-job errors of the pass.
    """
    return await pipeline.process_pending(limit)


@router.get("/status")
async def get_translation_status(
    pipeline: Annotated[TranslationPipeline, Depends(get_translation_pipeline)],
) -> TranslationStatus:
    """Per-locale completeness of stored translations."""
    return await pipeline.translation_status()


@router.get("/jobs/stats")
async def get_job_stats(
    pipeline: Annotated[TranslationPipeline, Depends(get_translation_pipeline)],
) -> JobStats:
    """Job counts per status."""
    return await pipeline.stats()


@router.post("/jobs/retry")
async def retry_failed_jobs(
    pipeline: Annotated[TranslationPipeline, Depends(get_translation_pipeline)],
) -> RetryResponse:
    """Move failed jobs below their retry ceiling back to pending."""
    return RetryResponse(retried=await pipeline.retry_failed_jobs())
