"""
Translation store.

Flat key to per-locale text storage backed by the ``translations`` table.
Store methods never commit; the calling service owns the transaction.
"""

from collections.abc import Iterable, Mapping

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from folio_core import get_logger
from folio_core.bundles import StaticBundleLoader
from folio_core.locales import SOURCE_LOCALE, SUPPORTED_LOCALES, TARGET_LOCALES
from folio_core.schemas.translation import BundleSyncResponse
from folio_database.models import LocaleStatus, Translation

from .translation_filter import LEGACY_TRANSLATE_NEEDED, is_blank

logger = get_logger(__name__)


def pending_locales(record: Translation, targets: Iterable[str] = TARGET_LOCALES) -> list[str]:
    """Target locales that are empty or flagged for (re)translation."""
    return [
        locale
        for locale in targets
        if is_blank(record.text_for(locale))
        or record.status_for(locale) == LocaleStatus.NEEDS_TRANSLATION
    ]


def _clean(value: str | None) -> tuple[str, LocaleStatus | None]:
    """
    Normalize an incoming value.

    The legacy marker becomes empty text flagged for translation; blank
    input becomes empty text with no explicit status.
    """
    if value is None:
        return "", None
    if value.strip() == LEGACY_TRANSLATE_NEEDED:
        return "", LocaleStatus.NEEDS_TRANSLATION
    if not value.strip():
        return "", None
    return value, LocaleStatus.MANUAL


class TranslationStore:
    """Translation record access."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, key: str, for_update: bool = False) -> Translation | None:
        """
        Get a record by key.

        Args:
            key: Dot-path key.
            for_update: Lock the row for the rest of the transaction.

        Returns:
            Record or None.
        """
        stmt = select(Translation).where(Translation.key == key)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_all(self) -> list[Translation]:
        result = await self.session.execute(select(Translation).order_by(Translation.key))
        return list(result.scalars().all())

    async def list_section(self, section: str) -> list[Translation]:
        """Records whose key starts with ``<section>.``."""
        stmt = (
            select(Translation)
            .where(Translation.key.startswith(f"{section}.", autoescape=True))
            .order_by(Translation.key)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def value(self, key: str, locale: str) -> str | None:
        """Non-blank stored text for one key and locale, or None."""
        record = await self.get(key)
        if record is None:
            return None
        text = record.text_for(locale)
        return None if is_blank(text) else text

    async def locale_dump(self, locale: str) -> dict[str, str]:
        """All non-blank values for one locale, keyed by dot-path."""
        return {
            record.key: record.text_for(locale)
            for record in await self.list_all()
            if not is_blank(record.text_for(locale))
        }

    async def save_texts(
        self,
        key: str,
        texts: Mapping[str, str | None],
        source_locale: str = SOURCE_LOCALE,
    ) -> Translation:
        """
        Write human-authored text for one or more locales.

        Written target locales become ``manual``. When the source text
        changes, every target locale not written in the same call is
        flagged ``needs_translation`` while keeping its current text, so
        readers still see the old translation until a new one lands.

        Args:
            key: Dot-path key.
            texts: Locale to text. Unsupported locales are ignored.
            source_locale: Locale treated as authoritative.

        Returns:
            The created or updated record (flushed, not committed).
        """
        record = await self.get(key, for_update=True)
        if record is None:
            record = Translation(key=key, texts={}, locale_status={})
            self.session.add(record)

        new_texts = dict(record.texts or {})
        new_status = dict(record.locale_status or {})
        previous_source = record.text_for(source_locale)

        written: set[str] = set()
        for locale, raw in texts.items():
            if locale not in SUPPORTED_LOCALES:
                continue
            value, status = _clean(raw)
            new_texts[locale] = value
            written.add(locale)
            if locale == source_locale:
                new_status[locale] = (
                    LocaleStatus.MANUAL.value if value else LocaleStatus.MISSING.value
                )
            elif status is None:
                new_status[locale] = LocaleStatus.MISSING.value
            else:
                new_status[locale] = status.value

        source_changed = (
            source_locale in written
            and not is_blank(new_texts.get(source_locale))
            and new_texts.get(source_locale) != previous_source
        )
        if source_changed:
            for locale in TARGET_LOCALES:
                if locale not in written:
                    new_status[locale] = LocaleStatus.NEEDS_TRANSLATION.value

        for locale in SUPPORTED_LOCALES:
            new_texts.setdefault(locale, "")
            new_status.setdefault(locale, LocaleStatus.MISSING.value)

        # JSON columns are replaced, never mutated in place
        record.texts = new_texts
        record.locale_status = new_status
        await self.session.flush()
        return record

    async def apply_translations(
        self,
        key: str,
        translated: Mapping[str, str],
        force: bool = False,
    ) -> list[str]:
        """
        Persist machine translations for one record in a single update.

        Only locales that are empty or flagged ``needs_translation`` are
        overwritten, unless ``force`` is set. Blank values are ignored so a
        failure can never erase stored text.

        Args:
            key: Dot-path key.
            translated: Locale to translated text.
            force: Overwrite existing translations.

        Returns:
            Locales actually written.
        """
        record = await self.get(key, for_update=True)
        if record is None:
            return []

        new_texts = dict(record.texts or {})
        new_status = dict(record.locale_status or {})
        applied: list[str] = []

        for locale, value in translated.items():
            if locale not in TARGET_LOCALES or is_blank(value):
                continue
            writable = (
                force
                or is_blank(record.text_for(locale))
                or record.status_for(locale) == LocaleStatus.NEEDS_TRANSLATION
            )
            if not writable:
                continue
            new_texts[locale] = value
            new_status[locale] = LocaleStatus.TRANSLATED.value
            applied.append(locale)

        if applied:
            record.texts = new_texts
            record.locale_status = new_status
            record.auto_translated = True
            record.needs_review = True
            await self.session.flush()

        return applied

    async def review_queue(self, limit: int = 100) -> list[Translation]:
        """Records with machine output awaiting review, oldest update first."""
        stmt = (
            select(Translation)
            .where(Translation.needs_review.is_(True))
            .order_by(Translation.updated_at)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def mark_reviewed(self, keys: Iterable[str]) -> int:
        """Clear the review flag. Returns the number of records updated."""
        key_list = list(keys)
        if not key_list:
            return 0
        stmt = (
            update(Translation)
            .where(Translation.key.in_(key_list), Translation.needs_review.is_(True))
            .values(needs_review=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0

    async def sync_bundles(
        self, bundles: StaticBundleLoader, overwrite: bool = False
    ) -> BundleSyncResponse:
        """
        Load the static message bundles into translation records.

        Keys missing from the table are created from every bundle that has
        them. For existing records only blank locales are filled, so manual
        edits and machine output survive; ``overwrite`` writes every bundled
        value that differs from the stored one. Bundled text is stored as
        human-authored.

        Args:
            bundles: Loaded message bundles.
            overwrite: Replace stored text with bundled text.

        Returns:
            Created, updated and unchanged record counts.
        """
        per_locale = {
            locale: bundles.bundle(locale)
            for locale in SUPPORTED_LOCALES
            if locale in bundles.locales
        }
        keys = dict.fromkeys(key for messages in per_locale.values() for key in messages)
        existing = {record.key: record for record in await self.list_all()}
        result = BundleSyncResponse()

        for key in keys:
            bundled = {
                locale: messages[key] for locale, messages in per_locale.items() if key in messages
            }
            record = existing.get(key)
            if record is None:
                await self.save_texts(key, bundled, source_locale=bundles.source_locale)
                result.created += 1
                continue

            writes = {
                locale: text
                for locale, text in bundled.items()
                if text != record.text_for(locale)
                and (overwrite or is_blank(record.text_for(locale)))
            }
            if writes:
                await self.save_texts(key, writes, source_locale=bundles.source_locale)
                result.updated += 1
            else:
                result.unchanged += 1

        logger.info(
            "Message bundles synced",
            extra={
                "created": result.created,
                "updated": result.updated,
                "unchanged": result.unchanged,
            },
        )
        return result
