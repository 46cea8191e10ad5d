"""
Translation job model definition.

A job is the unit of work of the translation pipeline: fill the missing
target locales of one translation key.
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, JSONType, TimestampMixin, generate_uuid


class JobStatus(str, Enum):
    """Translation job lifecycle state."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class TranslationJob(Base, TimestampMixin):
    """
    Translation job.

    Attributes:
        id: Unique job identifier (UUID).
        key: Translation key this job fills.
        source_text: Source-locale text at the time the job was created.
        source_locale: Locale of ``source_text``.
        target_locales: Locales still to be translated.
        context: Optional hint passed to providers.
        status: Job lifecycle state.
        attempt_count: Number of processing attempts that ended in failure.
        max_attempts: Retry ceiling.
        last_error: Last failure message.
        started_at: When the job was last claimed.
        completed_at: When the job completed.
    """

    __tablename__ = "translation_jobs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    key: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    source_text: Mapped[str] = mapped_column(Text, nullable=False)
    source_locale: Mapped[str] = mapped_column(String(10), nullable=False, default="en")
    target_locales: Mapped[list[str]] = mapped_column(JSONType, default=list, nullable=False)
    context: Mapped[str | None] = mapped_column(Text)
    status: Mapped[str] = mapped_column(
        String(20), default=JobStatus.PENDING.value, nullable=False, index=True
    )
    attempt_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    max_attempts: Mapped[int] = mapped_column(Integer, default=3, nullable=False)
    last_error: Mapped[str | None] = mapped_column(Text)
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # At most one active (non-completed) job per key
    __table_args__ = (
        Index(
            "uq_translation_jobs_active_key",
            "key",
            unique=True,
            postgresql_where=text("status != 'completed'"),
            sqlite_where=text("status != 'completed'"),
        ),
    )
