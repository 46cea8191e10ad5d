"""
Pydantic schemas for API requests and responses.
"""

from .content import (
    STRUCTURED_FIELDS,
    ContentItem,
    ContentRecordResponse,
    ContentUpsertRequest,
    GenericKeyValue,
    LocalizedText,
    MultilangContentRequest,
    MultilangSaveResponse,
    ProjectContent,
    ServiceItem,
    Skill,
    SkillCategory,
)
from .job import BulkTriggerResponse, JobStats, PipelineRunResult, RetryResponse
from .translation import (
    BatchTranslateItem,
    BatchTranslateRequest,
    BatchTranslateResponse,
    BundleSyncResponse,
    EngineStatusResponse,
    ReviewRequest,
    ReviewResponse,
    TranslateRequest,
    TranslateResponse,
    TranslationRecordResponse,
    TranslationStatus,
    UpdateTranslationRequest,
)

__all__ = [
    # Content
    "STRUCTURED_FIELDS",
    "ContentItem",
    "ContentRecordResponse",
    "ContentUpsertRequest",
    "GenericKeyValue",
    "LocalizedText",
    "MultilangContentRequest",
    "MultilangSaveResponse",
    "ProjectContent",
    "ServiceItem",
    "Skill",
    "SkillCategory",
    # Jobs
    "BulkTriggerResponse",
    "JobStats",
    "PipelineRunResult",
    "RetryResponse",
    # Translation
    "BatchTranslateItem",
    "BatchTranslateRequest",
    "BatchTranslateResponse",
    "BundleSyncResponse",
    "EngineStatusResponse",
    "ReviewRequest",
    "ReviewResponse",
    "TranslateRequest",
    "TranslateResponse",
    "TranslationRecordResponse",
    "TranslationStatus",
    "UpdateTranslationRequest",
]
