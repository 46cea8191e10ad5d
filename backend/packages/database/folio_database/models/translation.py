"""
Translation model definition.

This module defines the Translation model: one row per dot-path message
key, holding the text for every locale plus its translation state.
"""

from enum import Enum
from typing import Any

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, JSONType, TimestampMixin


class LocaleStatus(str, Enum):
    """Translation state of one locale within a record."""

    MISSING = "missing"
    NEEDS_TRANSLATION = "needs_translation"
    TRANSLATED = "translated"
    MANUAL = "manual"


class Translation(Base, TimestampMixin):
    """
    Translation record.

    Attributes:
        key: Dot-path message key (e.g. "hero.title").
        texts: Locale code to text. A locale that is absent is empty.
        locale_status: Locale code to LocaleStatus value.
        auto_translated: Whether any locale was filled by machine translation.
        needs_review: Whether a human should review the machine output.
    """

    __tablename__ = "translations"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    texts: Mapped[dict[str, Any]] = mapped_column(JSONType, default=dict, nullable=False)
    locale_status: Mapped[dict[str, Any]] = mapped_column(
        JSONType, default=dict, nullable=False
    )
    auto_translated: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    needs_review: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False, index=True
    )

    def text_for(self, locale: str) -> str:
        """Stored text for a locale, empty string when absent."""
        value = (self.texts or {}).get(locale)
        return value if isinstance(value, str) else ""

    def status_for(self, locale: str) -> LocaleStatus:
        """Stored status for a locale, MISSING when absent or unknown."""
        raw = (self.locale_status or {}).get(locale)
        try:
            return LocaleStatus(raw)
        except ValueError:
            return LocaleStatus.MISSING
