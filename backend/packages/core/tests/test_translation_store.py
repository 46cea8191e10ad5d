"""Tests for the translation store."""

import pytest

from folio_core.services.translation_filter import LEGACY_TRANSLATE_NEEDED
from folio_core.services.translation_store import TranslationStore, pending_locales
from folio_database.models import LocaleStatus


class TestSaveTexts:
    """Test TranslationStore.save_texts."""

    @pytest.mark.asyncio
    async def test_new_record_fills_every_locale(self, db_session):
        store = TranslationStore(db_session)

        record = await store.save_texts("hero.title", {"en": "Developer"})

        assert record.text_for("en") == "Developer"
        assert record.status_for("en") == LocaleStatus.MANUAL
        assert record.text_for("fr") == ""
        assert record.status_for("fr") == LocaleStatus.NEEDS_TRANSLATION
        assert set(record.texts) == {"en", "ar", "tr", "it", "fr", "de"}

    @pytest.mark.asyncio
    async def test_source_change_flags_targets_but_keeps_text(self, db_session):
        store = TranslationStore(db_session)
        await store.save_texts("hero.title", {"en": "Developer", "fr": "Développeur"})

        record = await store.save_texts("hero.title", {"en": "Engineer"})

        assert record.text_for("fr") == "Développeur"
        assert record.status_for("fr") == LocaleStatus.NEEDS_TRANSLATION

    @pytest.mark.asyncio
    async def test_same_source_keeps_manual_status(self, db_session):
        store = TranslationStore(db_session)
        await store.save_texts("hero.title", {"en": "Developer", "fr": "Développeur"})

        record = await store.save_texts("hero.title", {"en": "Developer"})

        assert record.status_for("fr") == LocaleStatus.MANUAL

    @pytest.mark.asyncio
    async def test_legacy_marker_becomes_empty_needs_translation(self, db_session):
        store = TranslationStore(db_session)

        record = await store.save_texts(
            "hero.title", {"en": "Developer", "de": LEGACY_TRANSLATE_NEEDED}
        )

        assert record.text_for("de") == ""
        assert record.status_for("de") == LocaleStatus.NEEDS_TRANSLATION

    @pytest.mark.asyncio
    async def test_unsupported_locales_are_ignored(self, db_session):
        store = TranslationStore(db_session)

        record = await store.save_texts("hero.title", {"en": "Developer", "xx": "?"})

        assert "xx" not in record.texts


class TestApplyTranslations:
    """Test TranslationStore.apply_translations."""

    @pytest.mark.asyncio
    async def test_fills_empty_locales_only(self, db_session):
        store = TranslationStore(db_session)
        await store.save_texts("hero.title", {"en": "Developer", "fr": "Développeur"})

        applied = await store.apply_translations(
            "hero.title", {"fr": "[fr] Developer", "de": "[de] Developer"}
        )
        record = await store.get("hero.title")

        assert applied == ["de"]
        assert record.text_for("fr") == "Développeur"
        assert record.status_for("de") == LocaleStatus.TRANSLATED
        assert record.auto_translated
        assert record.needs_review

    @pytest.mark.asyncio
    async def test_force_overwrites(self, db_session):
        store = TranslationStore(db_session)
        await store.save_texts("hero.title", {"en": "Developer", "fr": "Développeur"})

        applied = await store.apply_translations("hero.title", {"fr": "Dev"}, force=True)

        assert applied == ["fr"]

    @pytest.mark.asyncio
    async def test_blank_values_never_erase(self, db_session):
        store = TranslationStore(db_session)
        await store.save_texts("hero.title", {"en": "Developer", "fr": "Développeur"})

        applied = await store.apply_translations("hero.title", {"fr": " "}, force=True)
        record = await store.get("hero.title")

        assert applied == []
        assert record.text_for("fr") == "Développeur"
        assert not record.needs_review

    @pytest.mark.asyncio
    async def test_unknown_key(self, db_session):
        assert await TranslationStore(db_session).apply_translations("nope.key", {"fr": "x"}) == []


class TestReadsAndReview:
    """Test read helpers and the review queue."""

    @pytest.mark.asyncio
    async def test_value_and_locale_dump(self, db_session):
        store = TranslationStore(db_session)
        await store.save_texts("hero.title", {"en": "Developer", "fr": "Développeur"})
        await store.save_texts("hero.subtitle", {"en": "Hi"})
        await db_session.commit()

        assert await store.value("hero.title", "fr") == "Développeur"
        assert await store.value("hero.subtitle", "fr") is None
        assert await store.locale_dump("fr") == {"hero.title": "Développeur"}
        assert [r.key for r in await store.list_section("hero")] == [
            "hero.subtitle",
            "hero.title",
        ]

    @pytest.mark.asyncio
    async def test_pending_locales(self, db_session):
        store = TranslationStore(db_session)
        record = await store.save_texts(
            "hero.title", {"en": "Developer", "fr": "Développeur", "de": "Entwickler"}
        )

        assert pending_locales(record) == ["ar", "tr", "it"]

    @pytest.mark.asyncio
    async def test_mark_reviewed(self, db_session):
        store = TranslationStore(db_session)
        await store.save_texts("hero.title", {"en": "Developer"})
        await store.apply_translations("hero.title", {"fr": "Développeur"})
        await db_session.commit()

        assert [r.key for r in await store.review_queue()] == ["hero.title"]
        assert await store.mark_reviewed(["hero.title"]) == 1
        assert await store.mark_reviewed([]) == 0


class TestSyncBundles:
    """Test TranslationStore.sync_bundles."""

    @pytest.mark.asyncio
    async def test_creates_records_from_every_bundle(self, db_session, bundles):
        store = TranslationStore(db_session)

        result = await store.sync_bundles(bundles)

        assert result.created == 15
        assert result.updated == result.unchanged == 0
        record = await store.get("hero.title")
        assert record.text_for("en") == "Full-Stack Developer"
        assert record.text_for("ar") == "مطور متكامل"
        assert record.status_for("ar") == LocaleStatus.MANUAL
        assert record.status_for("fr") == LocaleStatus.NEEDS_TRANSLATION
        assert pending_locales(record) == ["tr", "it", "fr", "de"]

    @pytest.mark.asyncio
    async def test_keeps_edits_and_fills_blanks(self, db_session, bundles):
        store = TranslationStore(db_session)
        await store.save_texts("hero.title", {"en": "Engineer", "fr": "Ingénieur"})
        await store.save_texts("hero.subtitle", {"en": "I build things"})

        result = await store.sync_bundles(bundles)

        assert (result.created, result.updated, result.unchanged) == (13, 1, 1)
        record = await store.get("hero.title")
        assert record.text_for("en") == "Engineer"
        assert record.text_for("fr") == "Ingénieur"
        assert record.text_for("ar") == "مطور متكامل"

    @pytest.mark.asyncio
    async def test_overwrite_replaces_stored_text(self, db_session, bundles):
        store = TranslationStore(db_session)
        await store.save_texts("hero.title", {"en": "Engineer", "fr": "Ingénieur"})

        await store.sync_bundles(bundles, overwrite=True)

        record = await store.get("hero.title")
        assert record.text_for("en") == "Full-Stack Developer"
        # Not bundled: kept, but flagged because the source changed
        assert record.text_for("fr") == "Ingénieur"
        assert record.status_for("fr") == LocaleStatus.NEEDS_TRANSLATION

    @pytest.mark.asyncio
    async def test_second_sync_is_a_no_op(self, db_session, bundles):
        store = TranslationStore(db_session)
        await store.sync_bundles(bundles)

        result = await store.sync_bundles(bundles)

        assert (result.created, result.updated, result.unchanged) == (0, 0, 15)
