"""
Translation gate.

Decides whether a piece of source text is worth sending to a translation
provider before any provider call is spent on it.
"""

import re
from collections.abc import Iterable, Mapping

from bs4 import BeautifulSoup

from folio_core.locales import TARGET_LOCALES
from folio_core.rtl import is_processed

# Legacy marker written into empty target columns by the old database trigger
LEGACY_TRANSLATE_NEEDED = "[TRANSLATE_NEEDED]"

_URL_RE = re.compile(r"(?:https?://|www\.)\S+|\b[\w.+-]+@[\w-]+\.[\w.]+\b", re.IGNORECASE)


def is_blank(value: str | None) -> bool:
    """True for None, empty, whitespace-only, or the legacy marker."""
    if value is None:
        return True
    stripped = value.strip()
    return not stripped or stripped == LEGACY_TRANSLATE_NEEDED


def has_translatable_content(text: str) -> bool:
    """Check for alphabetic content once markup, entities and URLs are removed."""
    stripped = text
    if "<" in stripped or "&" in stripped:
        stripped = BeautifulSoup(stripped, "html.parser").get_text(" ")
    stripped = _URL_RE.sub(" ", stripped)
    return any(ch.isalpha() for ch in stripped)


def needs_translation(
    text: str | None,
    existing: Mapping[str, str | None] | None = None,
    target_locales: Iterable[str] | None = None,
) -> bool:
    """
    Decide whether text should be machine translated.

    Args:
        text: Source-locale text.
        existing: Current per-locale values, if a record already exists.
        target_locales: Locales that must be filled. Defaults to all targets.

    Returns:
        False for blank input, input without alphabetic content, text that
        already carries direction markup, and when every target locale in
        ``existing`` is already filled. True otherwise.
    """
    if text is None or is_blank(text):
        return False

    if is_processed(text):
        return False

    if not has_translatable_content(text):
        return False

    if existing is not None:
        targets = list(target_locales) if target_locales is not None else list(TARGET_LOCALES)
        if targets and all(not is_blank(existing.get(locale)) for locale in targets):
            return False

    return True
