"""Tests for translation service."""

from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import SQLAlchemyError

from folio_core.exceptions import (
    ContentValidationError,
    EngineUnavailableError,
    TranslationNotFoundError,
)
from folio_core.redis_keys import RedisKeys
from folio_core.schemas.translation import BatchTranslateItem, TranslateResponse
from folio_core.services import ContentStore, TranslationEngine, TranslationService
from folio_core.services.translation_service import PROCESS_QUEUE_TASK
from folio_database.models import LocaleStatus


class TestTranslationServiceStatus:
    """Test TranslationService.get_status."""

    def test_reports_providers(self, db_session, translation_engine):
        status = TranslationService(db_session, translation_engine).get_status()

        assert status.available
        assert status.providers == ["Fake"]
        assert status.source_locale == "en"
        assert "ar" in status.supported_locales

    def test_unavailable_engine(self, db_session):
        status = TranslationService(db_session, TranslationEngine([])).get_status()

        assert not status.available
        assert status.providers == []


class TestTranslateAndSave:
    """Test TranslationService.translate_and_save."""

    @pytest.mark.asyncio
    async def test_requires_engine(self, db_session):
        service = TranslationService(db_session, TranslationEngine([]))

        with pytest.raises(EngineUnavailableError):
            await service.translate_and_save("hero.title", "Developer")

    @pytest.mark.asyncio
    async def test_translates_and_stores(self, db_session, translation_engine):
        service = TranslationService(db_session, translation_engine)

        response = await service.translate_and_save(
            "hero.title", "Developer", target_locales=["fr", "de"]
        )

        assert response.success
        assert response.translations == {"fr": "[fr] Developer", "de": "[de] Developer"}
        assert sorted(response.translated_locales) == ["de", "fr"]
        record = await service.get_translation("hero.title")
        assert record.text_for("en") == "Developer"
        assert record.auto_translated
        assert record.needs_review

    @pytest.mark.asyncio
    async def test_existing_translations_are_skipped(
        self, db_session, translation_engine, fake_provider
    ):
        service = TranslationService(db_session, translation_engine)
        await service.translate_and_save("hero.title", "Developer", target_locales=["fr"])
        fake_provider.calls.clear()

        response = await service.translate_and_save(
            "hero.title", "Developer", target_locales=["fr"]
        )

        assert response.skipped
        assert response.translations == {"fr": "[fr] Developer"}
        assert fake_provider.calls == []

    @pytest.mark.asyncio
    async def test_force_retranslate(self, db_session, translation_engine, fake_provider):
        service = TranslationService(db_session, translation_engine)
        await service.translate_and_save("hero.title", "Developer", target_locales=["fr"])
        fake_provider.calls.clear()

        response = await service.translate_and_save(
            "hero.title", "Developer", target_locales=["fr"], force_retranslate=True
        )

        assert not response.skipped
        assert response.translated_locales == ["fr"]
        assert len(fake_provider.calls) == 1

    @pytest.mark.asyncio
    async def test_non_translatable_text_is_stored_not_sent(
        self, db_session, translation_engine, fake_provider
    ):
        service = TranslationService(db_session, translation_engine)

        response = await service.translate_and_save("stats.years", "10+")

        assert response.skipped
        assert fake_provider.calls == []

    @pytest.mark.asyncio
    async def test_partial_failure_reports_errors(self, db_session, provider_factory):
        engine = TranslationEngine([provider_factory(fail_locales={"de"})])
        service = TranslationService(db_session, engine)

        response = await service.translate_and_save(
            "hero.title", "Developer", target_locales=["fr", "de"]
        )

        assert not response.success
        assert response.translations["de"] == "Developer"
        assert response.translated_locales == ["fr"]
        record = await service.get_translation("hero.title")
        assert record.text_for("de") == ""


class TestTranslateBatch:
    """Test TranslationService.translate_batch."""

    @pytest.mark.asyncio
    async def test_one_failing_item_does_not_stop_the_rest(
        self, db_session, translation_engine
    ):
        service = TranslationService(db_session, translation_engine)
        ok = TranslateResponse(key="hero.subtitle", success=True)

        with patch.object(
            service,
            "translate_and_save",
            AsyncMock(side_effect=[SQLAlchemyError("locked"), ok]),
        ):
            response = await service.translate_batch(
                [
                    BatchTranslateItem(key="hero.title", text="Developer"),
                    BatchTranslateItem(key="hero.subtitle", text="Hello"),
                ]
            )

        assert response.success_count == 1
        assert response.failure_count == 1
        assert response.results[0].errors == ["locked"]


class TestSaveSectionContent:
    """Test TranslationService.save_section_content."""

    @pytest.mark.asyncio
    async def test_locale_maps_go_to_store_and_content(self, db_session, translation_engine):
        service = TranslationService(db_session, translation_engine)

        response = await service.save_section_content(
            "hero",
            {
                "title": {"en": "Engineer", "fr": "Ingénieur", "xx": "ignored"},
                "title_hidden": False,
            },
        )

        assert response.saved_fields == ["title", "title_hidden"]
        assert response.translation_keys == ["hero.title"]
        record = await service.get_translation("hero.title")
        assert record.status_for("fr") == LocaleStatus.MANUAL
        assert record.status_for("de") == LocaleStatus.NEEDS_TRANSLATION
        assert not record.needs_review
        values = await ContentStore(db_session).section_values("hero")
        assert values == {"title": {"en": "Engineer", "fr": "Ingénieur"}, "title_hidden": False}

    @pytest.mark.asyncio
    async def test_structured_field_goes_to_content_only(self, db_session, translation_engine):
        service = TranslationService(db_session, translation_engine)

        response = await service.save_section_content(
            "services", {"items": [{"id": "web", "title": {"en": "Web"}}]}
        )

        assert response.translation_keys == []
        with pytest.raises(TranslationNotFoundError):
            await service.get_translation("services.items")

    @pytest.mark.asyncio
    async def test_invalid_structured_field_saves_nothing(self, db_session, translation_engine):
        service = TranslationService(db_session, translation_engine)

        with pytest.raises(ContentValidationError):
            await service.save_section_content(
                "services",
                {"title": {"en": "Services"}, "items": [{"title": "missing id"}]},
            )

        with pytest.raises(TranslationNotFoundError):
            await service.get_translation("services.title")


class TestManualEdits:
    """Test update_translation and the review queue."""

    @pytest.mark.asyncio
    async def test_update_unknown_key(self, db_session, translation_engine):
        service = TranslationService(db_session, translation_engine)

        with pytest.raises(TranslationNotFoundError, match="not found"):
            await service.update_translation("nope.key", {"fr": "x"})

    @pytest.mark.asyncio
    async def test_update_clears_review_flag(self, db_session, translation_engine):
        service = TranslationService(db_session, translation_engine)
        await service.translate_and_save("hero.title", "Developer", target_locales=["fr"])
        assert [r.key for r in await service.get_review_queue()] == ["hero.title"]

        record = await service.update_translation("hero.title", {"fr": "Développeur"})

        assert record.text_for("fr") == "Développeur"
        assert record.status_for("fr") == LocaleStatus.MANUAL
        assert not record.needs_review
        assert await service.get_review_queue() == []

    @pytest.mark.asyncio
    async def test_mark_reviewed(self, db_session, translation_engine):
        service = TranslationService(db_session, translation_engine)
        await service.translate_and_save("hero.title", "Developer", target_locales=["fr"])

        assert await service.mark_reviewed(["hero.title", "other.key"]) == 1


class TestQueueProcessing:
    """Test TranslationService.queue_processing."""

    @pytest.mark.asyncio
    async def test_without_redis(self, db_session, translation_engine):
        assert not await TranslationService(db_session, translation_engine).queue_processing()

    @pytest.mark.asyncio
    async def test_enqueues_single_job(self, db_session, translation_engine):
        redis_pool = AsyncMock()
        service = TranslationService(db_session, translation_engine, redis_pool)

        assert await service.queue_processing()
        redis_pool.enqueue_job.assert_called_once_with(
            PROCESS_QUEUE_TASK, _job_id=RedisKeys.translation_queue_job()
        )

    @pytest.mark.asyncio
    async def test_redis_error_is_reported(self, db_session, translation_engine):
        redis_pool = AsyncMock()
        redis_pool.enqueue_job.side_effect = ConnectionError("redis down")
        service = TranslationService(db_session, translation_engine, redis_pool)

        assert not await service.queue_processing()
