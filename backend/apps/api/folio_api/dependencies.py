"""
FastAPI dependencies.

Provides dependency injection for database sessions, the Redis pool and
services. Process-wide objects (message bundles, translation engine and
configuration) are created in the application lifespan and read from
``app.state``.
"""

from typing import Annotated

from arq.connections import ArqRedis
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from folio_core.bundles import StaticBundleLoader
from folio_core.config import TranslationConfig
from folio_core.services import (
    ContentStore,
    DefaultsCatalog,
    Resolver,
    TranslationEngine,
    TranslationPipeline,
    TranslationService,
    TranslationStore,
)
from folio_database.session import get_session


def get_bundles(request: Request) -> StaticBundleLoader:
    """Get the message bundles loaded at startup."""
    return request.app.state.bundles


def get_translation_engine(request: Request) -> TranslationEngine:
    """Get the translation engine built at startup."""
    return request.app.state.translation_engine


def get_translation_config(request: Request) -> TranslationConfig:
    """Get the translation configuration loaded at startup."""
    return request.app.state.translation_config


async def get_redis_pool(request: Request) -> ArqRedis | None:
    """
    Get the Redis connection pool for arq.

    Returns:
        ArqRedis pool, or None when Redis is not configured.
    """
    return getattr(request.app.state, "redis_pool", None)


# Service dependencies
def get_resolver(
    session: Annotated[AsyncSession, Depends(get_session)],
    bundles: Annotated[StaticBundleLoader, Depends(get_bundles)],
) -> Resolver:
    """Get content resolver instance."""
    return Resolver(
        bundles=bundles,
        translations=TranslationStore(session),
        content=ContentStore(session),
        catalog=DefaultsCatalog(bundles),
    )


def get_translation_service(
    session: Annotated[AsyncSession, Depends(get_session)],
    engine: Annotated[TranslationEngine, Depends(get_translation_engine)],
    redis_pool: Annotated[ArqRedis | None, Depends(get_redis_pool)],
) -> TranslationService:
    """Get translation service instance."""
    return TranslationService(session, engine, redis_pool)


def get_translation_pipeline(
    session: Annotated[AsyncSession, Depends(get_session)],
    engine: Annotated[TranslationEngine, Depends(get_translation_engine)],
    config: Annotated[TranslationConfig, Depends(get_translation_config)],
) -> TranslationPipeline:
    """Get translation pipeline instance."""
    return TranslationPipeline(session, engine, config)


def get_translation_store(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> TranslationStore:
    """Get translation store instance."""
    return TranslationStore(session)
