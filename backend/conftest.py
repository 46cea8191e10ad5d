"""Global pytest fixtures for testing."""

import contextlib
import os
from collections.abc import AsyncGenerator
from typing import Any

import dotenv
import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool, StaticPool

from folio_api.config import Settings
from folio_api.main import create_app
from folio_core.bundles import StaticBundleLoader
from folio_core.config import TranslationConfig
from folio_core.services.translation_engine import TranslationEngine
from folio_core.services.translation_providers import TranslationProvider
from folio_database import Base
from folio_database.session import get_session

with contextlib.suppress(OSError):
    dotenv.load_dotenv()


class MockArqRedis:
    """Mock ArqRedis for testing."""

    def __init__(self):
        self.enqueued_jobs: list[tuple[str, tuple[Any, ...], dict[str, Any]]] = []

    async def enqueue_job(self, func_name: str, *args: Any, **kwargs: Any) -> None:
        """Mock enqueue_job that records calls without actually queuing."""
        self.enqueued_jobs.append((func_name, args, kwargs))

    async def close(self) -> None:
        return None

    def reset(self) -> None:
        """Reset recorded jobs."""
        self.enqueued_jobs.clear()


class FakeProvider(TranslationProvider):
    """In-memory provider: ``[<target>] <text>``, or a configured failure."""

    def __init__(
        self,
        name: str = "Fake",
        fail_locales: set[str] | None = None,
        available: bool = True,
    ) -> None:
        self.name = name
        self.fail_locales = fail_locales or set()
        self.available = available
        self.calls: list[tuple[str, str, str]] = []

    def is_available(self) -> bool:
        return self.available

    def translate(self, text: str, source: str, target: str) -> str:
        self.calls.append((text, source, target))
        if target in self.fail_locales:
            raise RuntimeError(f"{self.name} cannot translate to {target}")
        return f"[{target}] {text}"


# Global mock redis instance for testing
mock_redis = MockArqRedis()

# SQLite in memory by default; a real database may be supplied for integration runs
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")

# Safety check: ensure tests only run on a test database
if not TEST_DATABASE_URL.startswith("sqlite") and "test" not in TEST_DATABASE_URL:
    raise RuntimeError(
        f"Safety check failed: TEST_DATABASE_URL must point to a test database "
        f"(name should contain 'test'). Current: {TEST_DATABASE_URL}"
    )


@pytest_asyncio.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create test database engine with a fresh schema."""
    if TEST_DATABASE_URL.startswith("sqlite"):
        engine = create_async_engine(
            TEST_DATABASE_URL,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    async_session = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with async_session() as session:
        yield session


@pytest.fixture
def translation_config() -> TranslationConfig:
    """Translation config that ignores the environment's provider keys."""
    return TranslationConfig(
        _env_file=None,
        provider_order="",
        max_attempts=3,
        batch_size=50,
        provider_timeout_seconds=5,
        job_timeout_seconds=10,
    )


@pytest.fixture
def bundles() -> StaticBundleLoader:
    """Small in-memory bundle set."""
    return StaticBundleLoader(
        {
            "en": {
                "hero.title": "Full-Stack Developer",
                "hero.subtitle": "I build things",
                "skills.catFullTitle": "Full-Stack Development",
                "skills.catFullDesc": "React, Next.js",
                "skills.catDataTitle": "Data Engineering",
                "skills.catDataDesc": "ETL, SQL",
                "skills.catCloudTitle": "Cloud & DevOps",
                "skills.catCloudDesc": "AWS, CI/CD",
                "services.title": "Services",
                "services.webTitle": "Web Development",
                "services.webDesc": "Web apps",
                "services.mobileTitle": "Mobile Apps",
                "services.mobileDesc": "Mobile apps",
                "services.dataTitle": "Data Engineering",
                "services.dataDesc": "Pipelines",
            },
            "ar": {"hero.title": "مطور متكامل"},
            "de": {},
        }
    )


@pytest.fixture
def provider_factory() -> type[FakeProvider]:
    """Build extra fake providers inside a test."""
    return FakeProvider


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def translation_engine(fake_provider: FakeProvider) -> TranslationEngine:
    return TranslationEngine([fake_provider], provider_timeout=5)


@pytest.fixture
def test_app(
    bundles: StaticBundleLoader,
    translation_engine: TranslationEngine,
    translation_config: TranslationConfig,
) -> FastAPI:
    """Application with startup state populated for tests."""
    app = create_app(Settings(_env_file=None, version="test"))
    app.state.bundles = bundles
    app.state.translation_engine = translation_engine
    app.state.translation_config = translation_config
    app.state.redis_pool = mock_redis
    return app


@pytest_asyncio.fixture
async def client(
    test_app: FastAPI, db_session: AsyncSession
) -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client with database override."""

    async def override_get_session():
        yield db_session

    test_app.dependency_overrides[get_session] = override_get_session

    # Reset mock redis state before each test
    mock_redis.reset()

    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    test_app.dependency_overrides.clear()


@pytest.fixture
def test_mock_redis() -> MockArqRedis:
    """Provide access to the mock redis instance for testing."""
    return mock_redis
