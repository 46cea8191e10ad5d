"""
Database models package.

This module exports all SQLAlchemy models for the Folio application.
"""

from .base import Base, TimestampMixin
from .site_content import SiteContent
from .translation import LocaleStatus, Translation
from .translation_job import JobStatus, TranslationJob

__all__ = [
    "Base",
    "TimestampMixin",
    "Translation",
    "LocaleStatus",
    "SiteContent",
    "TranslationJob",
    "JobStatus",
]
