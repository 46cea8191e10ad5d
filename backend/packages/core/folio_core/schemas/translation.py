"""
Translation schemas.

Request and response models for translation and translation-record
operations. Request bodies accept camelCase names.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from folio_core.locales import SOURCE_LOCALE


class TranslateRequest(BaseModel):
    """Translate one text into the target locales."""

    model_config = ConfigDict(populate_by_name=True)

    key: str = Field(min_length=1, max_length=255)
    text: str
    source_locale: str = Field(default=SOURCE_LOCALE, alias="sourceLocale")
    target_locales: list[str] | None = Field(default=None, alias="targetLocales")
    context: str | None = None
    force_retranslate: bool = Field(default=False, alias="forceRetranslate")


class TranslateResponse(BaseModel):
    """Outcome of translating one key."""

    key: str
    success: bool
    skipped: bool = False
    translations: dict[str, str] = Field(default_factory=dict)
    translated_locales: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    providers: dict[str, str] = Field(default_factory=dict)


class BatchTranslateItem(BaseModel):
    """One item of a batch translation request."""

    key: str = Field(min_length=1, max_length=255)
    text: str
    context: str | None = None


class BatchTranslateRequest(BaseModel):
    """Translate many texts into the same locales."""

    model_config = ConfigDict(populate_by_name=True)

    translations: list[BatchTranslateItem] = Field(min_length=1, max_length=200)
    source_locale: str = Field(default=SOURCE_LOCALE, alias="sourceLocale")
    target_languages: list[str] | None = Field(default=None, alias="targetLanguages")


class BatchTranslateResponse(BaseModel):
    """Per-item results of a batch translation."""

    results: list[TranslateResponse]
    success_count: int
    failure_count: int


class EngineStatusResponse(BaseModel):
    """Translation engine availability."""

    available: bool
    providers: list[str]
    source_locale: str
    supported_locales: list[str]


class TranslationStatus(BaseModel):
    """Completeness of the translation store per target locale."""

    total_keys: int
    complete: int
    incomplete: int
    missing_by_locale: dict[str, int]


class TranslationRecordResponse(BaseModel):
    """Translation record."""

    model_config = ConfigDict(from_attributes=True)

    key: str
    texts: dict[str, str]
    locale_status: dict[str, str]
    auto_translated: bool
    needs_review: bool
    updated_at: datetime | None = None


class UpdateTranslationRequest(BaseModel):
    """Manual edit of a translation record."""

    model_config = ConfigDict(populate_by_name=True)

    texts: dict[str, str]
    mark_reviewed: bool = Field(default=True, alias="markReviewed")


class ReviewRequest(BaseModel):
    """Mark records as reviewed."""

    keys: list[str] = Field(min_length=1)


class ReviewResponse(BaseModel):
    reviewed: int


class BundleSyncResponse(BaseModel):
    """Outcome of loading the message bundles into translation records."""

    created: int = 0
    updated: int = 0
    unchanged: int = 0
