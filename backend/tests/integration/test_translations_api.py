"""Integration tests for content and translation API endpoints."""

import json

import pytest
import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from folio_core.services import TranslationEngine, TranslationStore
from folio_core.services.translation_service import PROCESS_QUEUE_TASK


@pytest_asyncio.fixture
async def hero_title(db_session: AsyncSession):
    """Create a translation record with English source text only."""
    record = await TranslationStore(db_session).save_texts(
        "hero.title", {"en": "Full-Stack Developer"}
    )
    await db_session.commit()
    return record


class TestContentEndpoints:
    """Test /api/content endpoints."""

    @pytest.mark.asyncio
    async def test_get_section_resolves_bundles(self, client: AsyncClient):
        response = await client.get("/api/content/hero", params={"locale": "ar"})

        assert response.status_code == 200
        data = response.json()
        assert data["locale"] == "ar"
        assert data["content"]["title"] == "مطور متكامل"
        assert data["content"]["subtitle"] == "I build things"

    @pytest.mark.asyncio
    async def test_unknown_locale_uses_source(self, client: AsyncClient):
        response = await client.get("/api/content/hero", params={"locale": "xx"})

        assert response.json()["locale"] == "en"

    @pytest.mark.asyncio
    async def test_resolve_key_with_fallback(self, client: AsyncClient):
        response = await client.get(
            "/api/content/resolve",
            params={"key": "hero.missing", "locale": "fr", "fallback": "Default"},
        )

        assert response.status_code == 200
        assert response.json() == {"key": "hero.missing", "locale": "fr", "value": "Default"}

    @pytest.mark.asyncio
    async def test_multilang_round_trip(self, client: AsyncClient):
        response = await client.post(
            "/api/content/multilang",
            json={
                "section": "hero",
                "content": {
                    "title": {"en": "Engineer", "fr": "Ingénieur"},
                    "title_translations_hidden": {"de": True},
                },
            },
        )

        assert response.status_code == 200
        assert response.json()["translation_keys"] == ["hero.title"]

        response = await client.get("/api/content/multilang", params={"section": "hero"})
        content = response.json()["content"]
        assert content["title"]["en"] == "Engineer"
        assert content["title"]["fr"] == "Ingénieur"
        assert content["title_translations_hidden"] == {"de": "true"}

        response = await client.get("/api/content/hero", params={"locale": "fr"})
        assert response.json()["content"]["title"] == "Ingénieur"
        assert response.json()["content"]["title_hidden"] is True

    @pytest.mark.asyncio
    async def test_multilang_rejects_invalid_structured_content(self, client: AsyncClient):
        response = await client.post(
            "/api/content/multilang",
            json={"section": "services", "content": {"items": [{"title": "no id"}]}},
        )

        assert response.status_code == 400
        assert "services.items" in response.json()["detail"]

    @pytest.mark.asyncio
    async def test_upsert_structured_content(self, client: AsyncClient):
        response = await client.post(
            "/api/content",
            json={
                "section": "services",
                "tag": "items",
                "value": [{"id": "api", "title": {"en": "APIs", "fr": "API"}}],
            },
        )

        assert response.status_code == 201
        assert json.loads(response.json()["value"])[0]["id"] == "api"

        response = await client.get("/api/content/services", params={"locale": "fr"})
        items = response.json()["content"]["items"]
        assert items == [
            {
                "id": "api",
                "hidden": False,
                "title": "API",
                "description": "",
                "icon": "",
                "technologies": [],
            }
        ]


class TestTranslateEndpoints:
    """Test /api/translate endpoints."""

    @pytest.mark.asyncio
    async def test_engine_status(self, client: AsyncClient):
        response = await client.get("/api/translate")

        assert response.status_code == 200
        assert response.json()["available"] is True
        assert response.json()["providers"] == ["Fake"]

    @pytest.mark.asyncio
    async def test_translate(self, client: AsyncClient):
        response = await client.post(
            "/api/translate",
            json={"key": "hero.title", "text": "Developer", "targetLocales": ["fr"]},
        )

        assert response.status_code == 200
        assert response.json()["translations"] == {"fr": "[fr] Developer"}

        response = await client.get("/api/translations/hero.title")
        assert response.json()["texts"]["fr"] == "[fr] Developer"
        assert response.json()["needs_review"] is True

    @pytest.mark.asyncio
    async def test_translate_without_providers(self, client: AsyncClient, test_app):
        test_app.state.translation_engine = TranslationEngine([])

        response = await client.post("/api/translate", json={"key": "a.b", "text": "Hi"})

        assert response.status_code == 503

    @pytest.mark.asyncio
    async def test_batch(self, client: AsyncClient):
        response = await client.post(
            "/api/translate/batch",
            json={
                "translations": [
                    {"key": "hero.title", "text": "Developer"},
                    {"key": "hero.subtitle", "text": "Hello"},
                ],
                "targetLanguages": ["de"],
            },
        )

        assert response.status_code == 200
        assert response.json()["success_count"] == 2

    @pytest.mark.asyncio
    async def test_bulk_then_process_queue(
        self, client: AsyncClient, hero_title, test_mock_redis
    ):
        response = await client.post("/api/translate/bulk")

        assert response.status_code == 200
        assert response.json() == {"queued": 1, "keys": ["hero.title"], "enqueued": True}
        assert test_mock_redis.enqueued_jobs[0][0] == PROCESS_QUEUE_TASK

        response = await client.post("/api/translate/process-queue")
        assert response.json()["completed"] == 1

        response = await client.get("/api/translate/status")
        assert response.json()["complete"] == 1

        response = await client.get("/api/translate/jobs/stats")
        assert response.json()["completed"] == 1

    @pytest.mark.asyncio
    async def test_bulk_without_work_does_not_enqueue(
        self, client: AsyncClient, test_mock_redis
    ):
        response = await client.post("/api/translate/bulk")

        assert response.json()["queued"] == 0
        assert test_mock_redis.enqueued_jobs == []

    @pytest.mark.asyncio
    async def test_retry_jobs(self, client: AsyncClient):
        response = await client.post("/api/translate/jobs/retry")

        assert response.status_code == 200
        assert response.json() == {"retried": 0}


class TestTranslationsEndpoints:
    """Test /api/translations endpoints."""

    @pytest.mark.asyncio
    async def test_locale_messages_prefer_store(self, client: AsyncClient, hero_title):
        response = await client.get("/api/translations", params={"locale": "ar"})

        messages = response.json()["messages"]
        # Stored source text outranks the Arabic bundle
        assert messages["hero.title"] == "Full-Stack Developer"
        assert messages["hero.subtitle"] == "I build things"

    @pytest.mark.asyncio
    async def test_get_unknown_key(self, client: AsyncClient):
        response = await client.get("/api/translations/nope.key")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_update_and_review(self, client: AsyncClient, hero_title):
        response = await client.put(
            "/api/translations/hero.title",
            json={"texts": {"fr": "Développeur"}, "markReviewed": True},
        )

        assert response.status_code == 200
        assert response.json()["locale_status"]["fr"] == "manual"

        response = await client.get("/api/translations/review")
        assert response.json() == []

        response = await client.post("/api/translations/review", json={"keys": ["hero.title"]})
        assert response.json() == {"reviewed": 0}

    @pytest.mark.asyncio
    async def test_sync_bundles_seeds_records_for_bulk(self, client: AsyncClient):
        response = await client.post("/api/translations/sync-bundles")

        assert response.status_code == 200
        assert response.json() == {"created": 15, "updated": 0, "unchanged": 0}

        response = await client.get("/api/translations/hero.title")
        assert response.json()["texts"]["ar"] == "مطور متكامل"

        response = await client.post("/api/translate/bulk")
        assert response.json()["queued"] == 15
