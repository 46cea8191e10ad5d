"""
Supported locales.

The single source of truth for the locale set. Every component that needs
to know which locales exist reads it from here.
"""

SOURCE_LOCALE = "en"

TARGET_LOCALES: tuple[str, ...] = ("ar", "tr", "it", "fr", "de")

SUPPORTED_LOCALES: tuple[str, ...] = (SOURCE_LOCALE, *TARGET_LOCALES)

LOCALE_NAMES: dict[str, str] = {
    "en": "English",
    "ar": "Arabic",
    "tr": "Turkish",
    "it": "Italian",
    "fr": "French",
    "de": "German",
}

RTL_LOCALES = frozenset({"ar"})


def is_supported(locale: str | None) -> bool:
    """Check whether a locale code is part of the supported set."""
    return locale in SUPPORTED_LOCALES


def normalize_locale(locale: str | None) -> str:
    """
    Coerce a requested locale into the supported set.

    Unknown or empty locales fall back to the source locale.
    """
    if not locale:
        return SOURCE_LOCALE
    code = locale.strip().replace("_", "-").split("-")[0].lower()
    return code if code in SUPPORTED_LOCALES else SOURCE_LOCALE


def is_rtl(locale: str) -> bool:
    """Check whether a locale is written right-to-left."""
    return locale in RTL_LOCALES
