"""
Translation service.

Authoring-side operations: translate-and-save for one key or a batch,
multi-language section saves from the admin panel, manual edits and the
review queue.
"""

from collections.abc import Mapping
from typing import Any

from arq.connections import ArqRedis
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from folio_core import get_logger
from folio_core.bundles import StaticBundleLoader
from folio_core.exceptions import (
    ContentValidationError,
    EngineUnavailableError,
    TranslationNotFoundError,
)
from folio_core.locales import SOURCE_LOCALE, SUPPORTED_LOCALES, TARGET_LOCALES
from folio_core.redis_keys import RedisKeys
from folio_core.schemas.content import MultilangSaveResponse, structured_type
from folio_core.schemas.translation import (
    BatchTranslateItem,
    BatchTranslateResponse,
    BundleSyncResponse,
    EngineStatusResponse,
    TranslateResponse,
)
from folio_database.models import SiteContent, Translation

from .content_store import ContentStore, is_hidden_flag
from .translation_engine import TranslationEngine, TranslationRequest
from .translation_filter import needs_translation
from .translation_store import TranslationStore, pending_locales

logger = get_logger(__name__)

PROCESS_QUEUE_TASK = "process_translation_queue"


class TranslationService:
    """Translation management service."""

    def __init__(
        self,
        session: AsyncSession,
        engine: TranslationEngine,
        redis_pool: ArqRedis | None = None,
    ) -> None:
        self.session = session
        self.engine = engine
        self.redis_pool = redis_pool
        self.translations = TranslationStore(session)
        self.content = ContentStore(session)

    def get_status(self) -> EngineStatusResponse:
        return EngineStatusResponse(
            available=self.engine.is_available(),
            providers=self.engine.get_available_providers(),
            source_locale=SOURCE_LOCALE,
            supported_locales=list(SUPPORTED_LOCALES),
        )

    def _require_engine(self) -> None:
        if not self.engine.is_available():
            raise EngineUnavailableError()

    async def translate_and_save(
        self,
        key: str,
        text: str,
        source_locale: str = SOURCE_LOCALE,
        target_locales: list[str] | None = None,
        context: str | None = None,
        force_retranslate: bool = False,
    ) -> TranslateResponse:
        """
        Store source text for a key and machine-translate its target locales.

        Locales that already hold a translation are skipped unless
        ``force_retranslate`` is set. Translated locales are stored with
        ``auto_translated`` and ``needs_review`` set.

        Args:
            key: Dot-path key.
            text: Source-locale text.
            source_locale: Locale of ``text``.
            target_locales: Locales to fill. Defaults to all target locales.
            context: Optional hint for providers.
            force_retranslate: Overwrite existing translations.

        Returns:
            TranslateResponse with per-locale text and errors.

        Raises:
            EngineUnavailableError: If no provider is configured.
        """
        self._require_engine()

        targets = [
            locale
            for locale in (target_locales or TARGET_LOCALES)
            if locale in SUPPORTED_LOCALES and locale != source_locale
        ]

        record = await self.translations.save_texts(key, {source_locale: text}, source_locale)
        needed = targets if force_retranslate else pending_locales(record, targets)

        if not needed or not needs_translation(text):
            await self.session.commit()
            return TranslateResponse(
                key=key,
                success=True,
                skipped=True,
                translations={locale: record.text_for(locale) for locale in targets},
            )

        result = await self.engine.translate_content(
            TranslationRequest(
                text=text,
                key=key,
                source_locale=source_locale,
                target_locales=needed,
                context=context,
            )
        )
        applied = await self.translations.apply_translations(
            key, result.translated, force=force_retranslate
        )
        await self.session.commit()

        logger.info(
            "Translated and saved",
            extra={"key": key, "applied": applied, "failed_locales": result.failed_locales},
        )
        return TranslateResponse(
            key=key,
            success=result.success,
            translations=result.per_locale,
            translated_locales=applied,
            errors=result.error_messages(),
            providers=result.providers_used,
        )

    async def translate_batch(
        self,
        items: list[BatchTranslateItem],
        source_locale: str = SOURCE_LOCALE,
        target_locales: list[str] | None = None,
    ) -> BatchTranslateResponse:
        """
        Translate and save many keys; one failing item does not stop the rest.

        Raises:
            EngineUnavailableError: If no provider is configured.
        """
        self._require_engine()

        results: list[TranslateResponse] = []
        for item in items:
            try:
                response = await self.translate_and_save(
                    key=item.key,
                    text=item.text,
                    source_locale=source_locale,
                    target_locales=target_locales,
                    context=item.context,
                )
            except SQLAlchemyError as e:
                await self.session.rollback()
                logger.exception("Batch item failed", extra={"key": item.key})
                response = TranslateResponse(key=item.key, success=False, errors=[str(e)])
            results.append(response)

        success_count = sum(1 for r in results if r.success)
        return BatchTranslateResponse(
            results=results,
            success_count=success_count,
            failure_count=len(results) - success_count,
        )

    async def save_section_content(
        self, section: str, content: Mapping[str, Any]
    ) -> MultilangSaveResponse:
        """
        Save a multi-language admin form for one section.

        Locale maps go to the translation store (canonical) and to site
        content (compatibility). Structured fields and hidden flags go to
        site content only, validated against their registered shape.

        Raises:
            ContentValidationError: If any field has the wrong shape. Nothing
                is saved in that case.
        """
        saved: list[str] = []
        translation_keys: list[str] = []

        try:
            for field, value in content.items():
                if is_hidden_flag(field) or structured_type(section, field) is not None:
                    await self.content.upsert(section, field, value)
                    saved.append(field)
                    continue

                if isinstance(value, dict):
                    texts = {
                        locale: "" if v is None else str(v)
                        for locale, v in value.items()
                        if locale in SUPPORTED_LOCALES
                    }
                else:
                    texts = {SOURCE_LOCALE: "" if value is None else str(value)}

                key = f"{section}.{field}"
                record = await self.translations.save_texts(key, texts)
                record.auto_translated = False
                record.needs_review = False
                await self.content.upsert(section, field, texts)
                saved.append(field)
                translation_keys.append(key)

            await self.session.commit()
        except ContentValidationError:
            await self.session.rollback()
            raise

        logger.info(
            "Section content saved",
            extra={"section": section, "fields": len(saved)},
        )
        return MultilangSaveResponse(
            section=section, saved_fields=saved, translation_keys=translation_keys
        )

    async def upsert_content(self, section: str, tag: str, value: Any) -> SiteContent:
        """Write one raw site content row."""
        try:
            record = await self.content.upsert(section, tag, value)
        except ContentValidationError:
            await self.session.rollback()
            raise
        await self.session.commit()
        return record

    async def update_translation(
        self, key: str, texts: Mapping[str, str], mark_reviewed: bool = True
    ) -> Translation:
        """
        Manually edit an existing record.

        Raises:
            TranslationNotFoundError: If the key does not exist.
        """
        if await self.translations.get(key) is None:
            raise TranslationNotFoundError(key)

        record = await self.translations.save_texts(key, texts)
        if mark_reviewed:
            record.needs_review = False
        await self.session.commit()
        await self.session.refresh(record)
        return record

    async def get_translation(self, key: str) -> Translation:
        record = await self.translations.get(key)
        if record is None:
            raise TranslationNotFoundError(key)
        return record

    async def get_review_queue(self, limit: int = 100) -> list[Translation]:
        return await self.translations.review_queue(limit)

    async def mark_reviewed(self, keys: list[str]) -> int:
        """Clear the review flag on the given keys."""
        count = await self.translations.mark_reviewed(keys)
        await self.session.commit()
        return count

    async def sync_bundles(
        self, bundles: StaticBundleLoader, overwrite: bool = False
    ) -> BundleSyncResponse:
        """Seed translation records from the message bundles and commit."""
        result = await self.translations.sync_bundles(bundles, overwrite=overwrite)
        await self.session.commit()
        return result

    async def queue_processing(self) -> bool:
        """
        Ask the worker to run a pipeline pass.

        Returns:
            True if a task was enqueued.
        """
        if not self.redis_pool:
            return False
        try:
            await self.redis_pool.enqueue_job(
                PROCESS_QUEUE_TASK, _job_id=RedisKeys.translation_queue_job()
            )
        except Exception:
            logger.exception("Failed to queue translation processing")
            return False
        logger.info("Queued translation processing task")
        return True
