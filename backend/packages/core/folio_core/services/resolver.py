"""
Content resolver.

Decides which source wins for every displayable key and locale. Sources are
tried in strict order:

1. non-hidden site content override
2. translation record, requested locale
3. translation record, source locale
4. message bundle, requested locale
5. message bundle, source locale
6. caller fallback

Blank values are skipped, never returned as a winner. Resolution reads
only; it never writes.
"""

import json
from collections.abc import Mapping
from typing import Any

from folio_core import get_logger
from folio_core.bundles import StaticBundleLoader
from folio_core.locales import SUPPORTED_LOCALES, normalize_locale
from folio_core.schemas.content import ContentItem, structured_type
from folio_database.models import Translation

from .content_store import (
    HIDDEN_SUFFIX,
    TRANSLATIONS_HIDDEN_SUFFIX,
    ContentStore,
    is_hidden_flag,
    truthy,
)
from .defaults_catalog import DefaultsCatalog
from .translation_filter import is_blank
from .translation_store import TranslationStore

logger = get_logger(__name__)


def split_key(key: str) -> tuple[str, str]:
    """Split ``section.field`` at the first dot."""
    section, _, field = key.partition(".")
    return section, field


def hidden_for_locale(values: Mapping[str, Any], field: str, locale: str) -> bool:
    """Whether the override of ``field`` is hidden for one locale."""
    if truthy(values.get(f"{field}{HIDDEN_SUFFIX}")):
        return True
    per_locale = values.get(f"{field}{TRANSLATIONS_HIDDEN_SUFFIX}")
    return isinstance(per_locale, dict) and truthy(per_locale.get(locale))


def hidden_anywhere(values: Mapping[str, Any], field: str) -> bool:
    """Collapsed hidden flag: hidden outright or hidden for any locale."""
    return truthy(values.get(f"{field}{HIDDEN_SUFFIX}")) or truthy(
        values.get(f"{field}{TRANSLATIONS_HIDDEN_SUFFIX}")
    )


def _has_hidden_flags(values: Mapping[str, Any], field: str) -> bool:
    return (
        f"{field}{HIDDEN_SUFFIX}" in values
        or f"{field}{TRANSLATIONS_HIDDEN_SUFFIX}" in values
    )


def _non_blank(value: Any) -> str | None:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int | float):
        return str(value)
    if isinstance(value, str) and not is_blank(value):
        return value
    return None


class Resolver:
    """Merges bundles, translation records, content overrides and defaults."""

    def __init__(
        self,
        bundles: StaticBundleLoader,
        translations: TranslationStore,
        content: ContentStore,
        catalog: DefaultsCatalog,
    ) -> None:
        self.bundles = bundles
        self.translations = translations
        self.content = content
        self.catalog = catalog
        self.source_locale = bundles.source_locale

    def _override_text(self, values: Mapping[str, Any], field: str, locale: str) -> str | None:
        value = values.get(field)
        if value is None or hidden_for_locale(values, field, locale):
            return None
        if isinstance(value, dict):
            return _non_blank(value.get(locale))
        if isinstance(value, list):
            return None
        # A plain scalar override is source-locale text
        if locale != self.source_locale:
            return None
        return _non_blank(value)

    def _resolve_scalar(
        self,
        locale: str,
        key: str,
        values: Mapping[str, Any],
        record: Translation | None,
        fallback: str,
    ) -> str:
        _, field = split_key(key)
        source = self.source_locale

        if field:
            text = self._override_text(values, field, locale)
            if text is not None:
                return text

        if record is not None:
            for candidate in (locale, source):
                text = _non_blank(record.text_for(candidate))
                if text is not None:
                    return text

        for candidate in (locale, source):
            text = self.bundles.get(candidate, key)
            if text is not None and not is_blank(text):
                return text

        return fallback

    async def resolve(self, locale: str | None, key: str, fallback: str = "") -> str:
        """
        Resolve one key for one locale.

        Args:
            locale: Requested locale. Unknown locales become the source locale.
            key: Dot-path key (``section.field``).
            fallback: Returned when no source has a value.

        Returns:
            Winning text. Never None.
        """
        locale = normalize_locale(locale)
        section, field = split_key(key)

        values = await self.content.section_values(section) if field else {}
        record = await self.translations.get(key)
        return self._resolve_scalar(locale, key, values, record, fallback or "")

    def _known_fields(
        self, section: str, values: Mapping[str, Any], records: Mapping[str, Translation]
    ) -> list[str]:
        prefix = f"{section}."
        ordered = [
            *self.bundles.keys_for_section(section),
            *(key[len(prefix) :] for key in records),
            *values.keys(),
            *self.catalog.fields_for_section(section),
        ]
        return [f for f in dict.fromkeys(ordered) if f and not is_hidden_flag(f)]

    def _structured_items(
        self, section: str, field: str, values: Mapping[str, Any], locale: str
    ) -> tuple[Any, str | None]:
        """Items for a structured field and the locale that fills their blanks."""
        value = values.get(field)
        if value is not None and not hidden_for_locale(values, field, locale):
            if isinstance(value, list):
                return value, self.source_locale
            if isinstance(value, str):
                # Quarantined row: hand back the raw string
                return value, None
        # Synthesized defaults stay blank outside the source locale
        return self.catalog.synthesize(section, field) or [], None

    def _is_structured(self, section: str, field: str, values: Mapping[str, Any]) -> bool:
        return (
            structured_type(section, field) is not None
            or self.catalog.has_template(section, field)
            or isinstance(values.get(field), list)
        )

    async def resolve_section(self, locale: str | None, section: str) -> dict[str, Any]:
        """
        Resolve every known field of a section for one locale.

        Scalar fields follow the same precedence as ``resolve``. Structured
        fields use the override when present, otherwise the synthesized
        default; items are localized to the requested locale, and override
        items missing that locale fall back to their source text. Fields with
        hidden flags get one collapsed ``<field>_hidden`` entry.
        """
        locale = normalize_locale(locale)
        values = await self.content.section_values(section)
        records = {r.key: r for r in await self.translations.list_section(section)}

        resolved: dict[str, Any] = {}
        for field in self._known_fields(section, values, records):
            key = f"{section}.{field}"
            if self._is_structured(section, field, values):
                items, fallback_locale = self._structured_items(section, field, values, locale)
                if isinstance(items, list):
                    resolved[field] = [
                        (
                            item.localized(locale, fallback_locale)
                            if isinstance(item, ContentItem)
                            else item
                        )
                        for item in items
                    ]
                else:
                    resolved[field] = items
            else:
                resolved[field] = self._resolve_scalar(
                    locale, key, values, records.get(key), ""
                )

            if _has_hidden_flags(values, field):
                resolved[f"{field}{HIDDEN_SUFFIX}"] = hidden_anywhere(values, field)

        return resolved

    async def resolve_multilang(self, section: str) -> dict[str, dict[str, str]]:
        """
        Per-locale view of a section for editing.

        Each locale takes its own override, record or bundle value with no
        cross-locale fallback; locales without a value are omitted.
        Structured fields are returned as serialized JSON under the source
        locale, and hidden flags in their stored ``{locale: "true"}`` form.
        """
        values = await self.content.section_values(section)
        records = {r.key: r for r in await self.translations.list_section(section)}
        source = self.source_locale

        merged: dict[str, dict[str, str]] = {}
        for field in self._known_fields(section, values, records):
            key = f"{section}.{field}"

            if self._is_structured(section, field, values):
                value = values.get(field)
                if value is None:
                    value = self.catalog.synthesize(section, field) or []
                if isinstance(value, list):
                    payload = [
                        item.model_dump(mode="json") if isinstance(item, ContentItem) else item
                        for item in value
                    ]
                    merged[field] = {source: json.dumps(payload, ensure_ascii=False)}
                else:
                    merged[field] = {source: str(value)}
            else:
                per_locale: dict[str, str] = {}
                record = records.get(key)
                override = values.get(field)
                for locale in SUPPORTED_LOCALES:
                    text: str | None = None
                    if isinstance(override, dict):
                        text = _non_blank(override.get(locale))
                    elif override is not None and locale == source:
                        text = _non_blank(override)
                    if text is None and record is not None:
                        text = _non_blank(record.text_for(locale))
                    if text is None:
                        text = self.bundles.get(locale, key)
                    if text is not None:
                        per_locale[locale] = text
                merged[field] = per_locale

            if truthy(values.get(f"{field}{HIDDEN_SUFFIX}")):
                merged[f"{field}{HIDDEN_SUFFIX}"] = {source: "true"}
            per_locale_hidden = values.get(f"{field}{TRANSLATIONS_HIDDEN_SUFFIX}")
            if isinstance(per_locale_hidden, dict):
                flags = {loc: "true" for loc, flag in per_locale_hidden.items() if truthy(flag)}
                if flags:
                    merged[f"{field}{TRANSLATIONS_HIDDEN_SUFFIX}"] = flags

        return merged
