"""Translation queue worker tasks.

Runs the translation pipeline out of band: queue jobs for untranslated
keys, process pending jobs and retry failed ones. The translation engine
and configuration are built once at worker startup and read from the arq
context.
"""

from typing import Any

from folio_core import get_logger
from folio_core.config import TranslationConfig
from folio_core.services import TranslationEngine, TranslationPipeline
from folio_database.session import get_session_context

logger = get_logger(__name__)


def _pipeline_deps(ctx: dict[str, Any]) -> tuple[TranslationEngine, TranslationConfig]:
    config = ctx.get("translation_config") or TranslationConfig()
    engine = ctx.get("translation_engine") or TranslationEngine.from_config(config)
    return engine, config


async def process_translation_queue(
    ctx: dict[str, Any], limit: int | None = None
) -> dict[str, Any]:
    """
    Run one pipeline pass.

    Args:
        ctx: Worker context.
        limit: Maximum number of jobs to claim.

    Returns:
        Dictionary with pass counts.
    """
    engine, config = _pipeline_deps(ctx)
    if not engine.is_available():
        logger.warning("No translation providers configured; jobs will fail and retry")

    async with get_session_context() as session:
        pipeline = TranslationPipeline(session, engine, config)
        run = await pipeline.process_pending(limit)

    logger.info(
        "Translation queue pass finished",
        extra={"claimed": run.claimed, "completed": run.completed, "failed": run.failed},
    )
    return {"status": "success", **run.model_dump()}


async def trigger_bulk_translation(ctx: dict[str, Any]) -> dict[str, Any]:
    """
    Queue jobs for every key with untranslated locales.

    Args:
        ctx: Worker context.

    Returns:
        Dictionary with the number of keys queued.
    """
    engine, config = _pipeline_deps(ctx)

    async with get_session_context() as session:
        pipeline = TranslationPipeline(session, engine, config)
        keys = await pipeline.trigger_bulk()

    return {"status": "success", "queued": len(keys)}


async def retry_failed_translation_jobs(ctx: dict[str, Any]) -> dict[str, Any]:
    """
    Reset failed jobs that are still below their retry ceiling.

    Args:
        ctx: Worker context.

    Returns:
        Dictionary with the number of jobs reset.
    """
    engine, config = _pipeline_deps(ctx)

    async with get_session_context() as session:
        pipeline = TranslationPipeline(session, engine, config)
        retried = await pipeline.retry_failed_jobs()

    return {"status": "success", "retried": retried}


async def scheduled_translation_sync(ctx: dict[str, Any]) -> dict[str, Any]:
    """
    Cron entry point: queue new work, then process one batch.

    Args:
        ctx: Worker context.

    Returns:
        Dictionary combining both steps.
    """
    triggered = await trigger_bulk_translation(ctx)
    processed = await process_translation_queue(ctx)
    return {
        "status": "success",
        "queued": triggered["queued"],
        "claimed": processed["claimed"],
        "completed": processed["completed"],
        "failed": processed["failed"],
    }
