"""
Service layer.

Business logic services for the application.
"""

from .content_store import ContentStore
from .defaults_catalog import DefaultsCatalog
from .resolver import Resolver
from .translation_engine import (
    ProviderOutcome,
    TranslationEngine,
    TranslationError,
    TranslationRequest,
    TranslationResult,
)
from .translation_filter import needs_translation
from .translation_pipeline import TranslationPipeline
from .translation_service import TranslationService
from .translation_store import TranslationStore

__all__ = [
    "ContentStore",
    "DefaultsCatalog",
    "Resolver",
    "TranslationStore",
    "TranslationService",
    "TranslationPipeline",
    # Engine
    "TranslationEngine",
    "TranslationRequest",
    "TranslationResult",
    "TranslationError",
    "ProviderOutcome",
    "needs_translation",
]
