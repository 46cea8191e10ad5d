"""
Folio API - FastAPI application entry point.

This module initializes the FastAPI application and configures
middleware, routers, and lifecycle events.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from arq import create_pool
from arq.connections import RedisSettings
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from folio_core import get_logger, init_logging
from folio_core.bundles import StaticBundleLoader
from folio_core.config import TranslationConfig
from folio_core.services import TranslationEngine

from .config import Settings, settings
from .routers import content, translate, translations

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifecycle manager.

    Builds the process-wide objects (database engine, message bundles,
    translation engine, optional Redis pool) and stores them on
    ``app.state``.

    Args:
        app: The FastAPI application instance.

    Yields:
        None during application runtime.
    """
    from folio_database.session import close_database, init_database

    app_settings: Settings = app.state.settings
    init_logging(app_settings.log_level, json_format=app_settings.log_json)
    logger.info("Starting Folio API", extra={"version": app_settings.version})

    init_database(app_settings.database_url, echo=app_settings.debug)

    translation_config = TranslationConfig()
    app.state.translation_config = translation_config
    # A missing source bundle raises BundleLoadError and aborts startup
    app.state.bundles = StaticBundleLoader.from_directory(translation_config.bundle_dir)
    app.state.translation_engine = TranslationEngine.from_config(translation_config)

    # Redis is optional; without it the queue is processed on request only
    app.state.redis_pool = None
    if app_settings.redis_url:
        redis_settings = RedisSettings.from_dsn(app_settings.redis_url)
        app.state.redis_pool = await create_pool(redis_settings)
        logger.info("Redis pool initialized")

    yield

    # Shutdown: Cleanup resources
    if app.state.redis_pool:
        await app.state.redis_pool.close()
        logger.info("Redis pool closed")
    await close_database()
    logger.info("Shutting down Folio API")


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """
    Build a FastAPI application.

    Args:
        app_settings: Settings to use. Defaults to the environment settings.

    Returns:
        Configured application.
    """
    app_settings = app_settings or settings

    application = FastAPI(
        title="Folio API",
        description="Folio - localized portfolio content and translation API",
        version=app_settings.version,
        lifespan=lifespan,
        docs_url="/api/docs" if app_settings.debug else None,
        redoc_url="/api/redoc" if app_settings.debug else None,
    )
    application.state.settings = app_settings

    # Configure CORS middleware
    application.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register API routers
    application.include_router(content.router, prefix="/api/content", tags=["Content"])
    application.include_router(translate.router, prefix="/api/translate", tags=["Translate"])
    application.include_router(
        translations.router, prefix="/api/translations", tags=["Translations"]
    )

    @application.get("/api/health")
    async def health_check() -> dict[str, str]:
        """
        Health check endpoint.

        Returns:
            Dictionary containing service status and version.
        """
        return {"status": "healthy", "version": app_settings.version}

    return application


app = create_app()
