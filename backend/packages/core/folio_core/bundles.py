"""
Static message bundles.

Loads the compiled per-locale message trees shipped with the application
and exposes them as flat dot-path lookups. The source-locale bundle is
authoritative: it must load, and merged views always contain every source
key.
"""

import json
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from . import get_logger
from .exceptions import BundleLoadError
from .locales import SOURCE_LOCALE, SUPPORTED_LOCALES

logger = get_logger(__name__)


def flatten_messages(tree: Mapping[str, Any], prefix: str = "") -> dict[str, str]:
    """
    Flatten a nested message tree into dot-path keys.

    Non-string leaves (numbers, booleans) are stringified; lists are
    skipped because message bundles only carry scalar strings.
    """
    flat: dict[str, str] = {}
    for name, value in tree.items():
        path = f"{prefix}.{name}" if prefix else str(name)
        if isinstance(value, Mapping):
            flat.update(flatten_messages(value, path))
        elif isinstance(value, bool):
            flat[path] = "true" if value else "false"
        elif isinstance(value, str | int | float):
            flat[path] = str(value)
    return flat


class StaticBundleLoader:
    """Per-locale message bundles loaded from ``<locale>.json`` files."""

    def __init__(
        self,
        bundles: Mapping[str, Mapping[str, str]],
        source_locale: str = SOURCE_LOCALE,
    ) -> None:
        if source_locale not in bundles:
            raise BundleLoadError(f"Source locale bundle '{source_locale}' is missing")
        self.source_locale = source_locale
        self._bundles: dict[str, dict[str, str]] = {
            locale: dict(messages) for locale, messages in bundles.items()
        }

    @classmethod
    def from_directory(
        cls,
        directory: Path,
        locales: Iterable[str] = SUPPORTED_LOCALES,
        source_locale: str = SOURCE_LOCALE,
    ) -> "StaticBundleLoader":
        """
        Load bundles from a directory of JSON files.

        A missing or unreadable target-locale bundle is logged and treated as
        empty. The source bundle must be present and valid.

        Args:
            directory: Directory containing ``<locale>.json`` files.
            locales: Locales to load.
            source_locale: Authoritative locale.

        Returns:
            Loader with all bundles flattened.

        Raises:
            BundleLoadError: If the source bundle cannot be loaded.
        """
        bundles: dict[str, dict[str, str]] = {}
        for locale in locales:
            path = Path(directory) / f"{locale}.json"
            try:
                with path.open(encoding="utf-8") as fh:
                    tree = json.load(fh)
            except (OSError, json.JSONDecodeError) as e:
                if locale == source_locale:
                    raise BundleLoadError(
                        f"Cannot load source bundle {path}: {e}"
                    ) from e
                logger.warning(
                    "Message bundle unavailable, treating as empty",
                    extra={"locale": locale, "path": str(path)},
                )
                bundles[locale] = {}
                continue

            if not isinstance(tree, dict):
                if locale == source_locale:
                    raise BundleLoadError(f"Source bundle {path} is not a JSON object")
                bundles[locale] = {}
                continue
            bundles[locale] = flatten_messages(tree)

        logger.info(
            "Message bundles loaded",
            extra={"locales": sorted(bundles), "source_keys": len(bundles[source_locale])},
        )
        return cls(bundles, source_locale=source_locale)

    def get(self, locale: str, key: str) -> str | None:
        """Return the non-empty bundle value for one locale, or None."""
        value = self._bundles.get(locale, {}).get(key)
        if value is None or not value.strip():
            return None
        return value

    def messages(self, locale: str) -> dict[str, str]:
        """
        Merged flat messages for a locale.

        Source-locale messages fill every key the requested bundle lacks, so
        the result is always complete.
        """
        merged = dict(self._bundles[self.source_locale])
        if locale != self.source_locale:
            merged.update(
                {k: v for k, v in self._bundles.get(locale, {}).items() if v.strip()}
            )
        return merged

    def keys_for_section(self, section: str) -> list[str]:
        """Field names below ``section.`` in the source bundle, in file order."""
        prefix = f"{section}."
        return [
            key[len(prefix) :]
            for key in self._bundles[self.source_locale]
            if key.startswith(prefix)
        ]

    def bundle(self, locale: str) -> dict[str, str]:
        """Non-blank messages of one locale's own bundle, with no source fill."""
        return {k: v for k, v in self._bundles.get(locale, {}).items() if v.strip()}

    def missing_keys(self, locale: str) -> list[str]:
        """Source keys that the given locale's bundle does not translate."""
        bundle = self._bundles.get(locale, {})
        return [key for key in self._bundles[self.source_locale] if not bundle.get(key)]

    @property
    def locales(self) -> list[str]:
        return list(self._bundles)
