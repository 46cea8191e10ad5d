"""
Translation job schemas.
"""

from pydantic import BaseModel, Field


class JobStats(BaseModel):
    """Job counts per status."""

    pending: int = 0
    processing: int = 0
    completed: int = 0
    failed: int = 0
    total: int = 0
    avg_completion_seconds: float | None = None


class PipelineRunResult(BaseModel):
    """Outcome of one pipeline pass."""

    claimed: int = 0
    completed: int = 0
    requeued: int = 0
    failed: int = 0
    released: int = 0
    errors: list[str] = Field(default_factory=list)


class BulkTriggerResponse(BaseModel):
    """Keys that now have a pending job."""

    queued: int
    keys: list[str]
    enqueued: bool = False


class RetryResponse(BaseModel):
    retried: int
