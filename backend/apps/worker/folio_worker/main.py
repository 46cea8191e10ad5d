"""
Folio Worker - arq worker entry point.

Run with ``arq folio_worker.main.WorkerSettings``.
"""

from typing import Any

from arq import cron
from arq.connections import RedisSettings

from folio_core import get_logger, init_logging
from folio_core.config import TranslationConfig
from folio_core.services import TranslationEngine

from .config import worker_config
from .tasks.translation import (
    process_translation_queue,
    retry_failed_translation_jobs,
    scheduled_translation_sync,
    trigger_bulk_translation,
)

logger = get_logger(__name__)


async def startup(ctx: dict[str, Any]) -> None:
    """
    Worker startup handler.

    Args:
        ctx: Worker context dictionary.
    """
    from folio_database.session import init_database

    init_logging(worker_config.log_level, json_format=worker_config.log_json)
    init_database(worker_config.database_url)

    translation_config = TranslationConfig()
    ctx["translation_config"] = translation_config
    ctx["translation_engine"] = TranslationEngine.from_config(translation_config)
    logger.info("Folio worker started")


async def shutdown(ctx: dict[str, Any]) -> None:
    """
    Worker shutdown handler.

    Args:
        ctx: Worker context dictionary.
    """
    from folio_database.session import close_database

    _ = ctx
    await close_database()
    logger.info("Folio worker stopped")


def _cron_minutes(interval: int) -> set[int]:
    return set(range(0, 60, interval))


class WorkerSettings:
    """arq worker configuration."""

    functions = [
        process_translation_queue,
        trigger_bulk_translation,
        retry_failed_translation_jobs,
    ]

    cron_jobs = (
        [
            cron(
                scheduled_translation_sync,
                minute=_cron_minutes(worker_config.queue_cron_minutes),
                run_at_startup=False,
            )
        ]
        if worker_config.queue_cron_minutes
        else []
    )

    on_startup = startup
    on_shutdown = shutdown

    redis_settings = RedisSettings.from_dsn(worker_config.redis_url)

    # Provider calls are bounded per job; leave room for a full batch
    job_timeout = 900
    max_jobs = 4
