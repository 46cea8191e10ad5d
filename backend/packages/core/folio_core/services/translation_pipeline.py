"""
Translation pipeline.

Batch job queue that keeps target locales populated. Jobs move through
``pending -> processing -> completed | failed``; failed jobs below their
retry ceiling can go back to ``pending``. Each pass is bounded by a batch
size and every job runs in isolation, so one failure never aborts the
batch and no job is left claimed.
"""

import asyncio
from datetime import UTC, datetime, timedelta

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from folio_core import get_logger
from folio_core.config import TranslationConfig
from folio_core.locales import SOURCE_LOCALE, TARGET_LOCALES
from folio_core.schemas.job import JobStats, PipelineRunResult
from folio_core.schemas.translation import TranslationStatus
from folio_database.models import JobStatus, TranslationJob

from .translation_engine import (
    TranslationEngine,
    TranslationError,
    TranslationRequest,
    TranslationResult,
)
from .translation_filter import is_blank, needs_translation
from .translation_store import TranslationStore, pending_locales

logger = get_logger(__name__)

_STATUS_VALUES = frozenset(s.value for s in JobStatus)


def _now() -> datetime:
    return datetime.now(UTC)


class TranslationPipeline:
    """Creates, claims and advances translation jobs."""

    def __init__(
        self,
        session: AsyncSession,
        engine: TranslationEngine,
        config: TranslationConfig,
        source_locale: str = SOURCE_LOCALE,
    ) -> None:
        self.session = session
        self.engine = engine
        self.config = config
        self.source_locale = source_locale
        self.translations = TranslationStore(session)

    async def _active_job(self, key: str) -> TranslationJob | None:
        stmt = (
            select(TranslationJob)
            .where(
                TranslationJob.key == key,
                TranslationJob.status != JobStatus.COMPLETED.value,
            )
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def _latest_completed(self, key: str) -> TranslationJob | None:
        stmt = (
            select(TranslationJob)
            .where(
                TranslationJob.key == key,
                TranslationJob.status == JobStatus.COMPLETED.value,
            )
            .order_by(TranslationJob.completed_at.desc())
            .limit(1)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def enqueue(
        self,
        key: str,
        source_text: str,
        target_locales: list[str],
        context: str | None = None,
    ) -> TranslationJob | None:
        """
        Upsert the job for one key.

        An active or completed job for the same source text is left alone.
        An active job for different source text is reset in place; a
        completed job for old source text gets a new pending job next to it.

        Returns:
            The new or reset job, or None if nothing changed.
        """
        active = await self._active_job(key)
        if active is not None:
            if active.source_text == source_text:
                return None
            if active.status == JobStatus.PROCESSING.value:
                # The running pass re-reads the source before translating
                return None
            active.source_text = source_text
            active.target_locales = list(target_locales)
            active.context = context
            active.status = JobStatus.PENDING.value
            active.attempt_count = 0
            active.max_attempts = self.config.max_attempts
            active.last_error = None
            active.started_at = None
            active.completed_at = None
            return active

        completed = await self._latest_completed(key)
        if completed is not None and completed.source_text == source_text:
            return None

        job = TranslationJob(
            key=key,
            source_text=source_text,
            source_locale=self.source_locale,
            target_locales=list(target_locales),
            context=context,
            status=JobStatus.PENDING.value,
            attempt_count=0,
            max_attempts=self.config.max_attempts,
        )
        self.session.add(job)
        await self.session.flush()
        return job

    async def trigger_bulk(self) -> list[str]:
        """
        Queue a job for every record with untranslated target locales.

        Returns:
            Keys whose job was created or reset by this call. Calling it
            again without changes returns an empty list.
        """
        queued: list[str] = []
        for record in await self.translations.list_all():
            source_text = record.text_for(self.source_locale)
            if is_blank(source_text) or not needs_translation(source_text):
                continue
            targets = pending_locales(record)
            if not targets:
                continue
            if await self.enqueue(record.key, source_text, targets) is not None:
                queued.append(record.key)

        await self.session.commit()
        logger.info("Bulk translation triggered", extra={"queued": len(queued)})
        return queued

    async def release_stale_jobs(self) -> int:
        """Return jobs stuck in ``processing`` past the stale threshold to ``pending``."""
        cutoff = _now() - timedelta(seconds=self.config.stale_job_seconds)
        stmt = (
            update(TranslationJob)
            .where(
                TranslationJob.status == JobStatus.PROCESSING.value,
                TranslationJob.started_at < cutoff,
            )
            .values(
                status=JobStatus.PENDING.value,
                started_at=None,
                last_error="Released stale processing claim",
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        released = result.rowcount or 0
        if released:
            logger.warning("Released stale translation jobs", extra={"count": released})
        return released

    async def _claim(self, job_id: str) -> bool:
        stmt = (
            update(TranslationJob)
            .where(
                TranslationJob.id == job_id,
                TranslationJob.status == JobStatus.PENDING.value,
            )
            .values(status=JobStatus.PROCESSING.value, started_at=_now())
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return (result.rowcount or 0) == 1

    async def _load_job(self, job_id: str) -> TranslationJob | None:
        stmt = (
            select(TranslationJob)
            .where(TranslationJob.id == job_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def _translate(
        self, job: TranslationJob, text: str, targets: list[str]
    ) -> TranslationResult:
        request = TranslationRequest(
            text=text,
            key=job.key,
            source_locale=job.source_locale,
            target_locales=targets,
            context=job.context,
        )
        try:
            return await asyncio.wait_for(
                self.engine.translate_content(request),
                timeout=self.config.job_timeout_seconds,
            )
        except TimeoutError:
            result = TranslationResult(key=job.key)
            for locale in targets:
                result.per_locale[locale] = text
                result.errors.append(
                    TranslationError(
                        key=job.key,
                        locale=locale,
                        provider=None,
                        message=f"Job timed out after {self.config.job_timeout_seconds:g}s",
                    )
                )
            return result

    def _complete(self, job: TranslationJob) -> None:
        job.status = JobStatus.COMPLETED.value
        job.completed_at = _now()
        job.last_error = None

    def _record_failure(self, job: TranslationJob, message: str) -> None:
        """
        Count a failed attempt.

        Below the ceiling the job goes straight back to pending, so the
        pipeline only leaves jobs in ``failed`` once attempts are exhausted.
        """
        job.attempt_count = (job.attempt_count or 0) + 1
        job.last_error = message
        if job.attempt_count >= job.max_attempts:
            job.status = JobStatus.FAILED.value
        else:
            job.status = JobStatus.PENDING.value
            job.started_at = None

    async def _run_job(self, job_id: str, run: PipelineRunResult) -> None:
        job = await self._load_job(job_id)
        if job is None:
            return

        try:
            record = await self.translations.get(job.key)
            source_text = record.text_for(job.source_locale) if record is not None else ""

            if record is None or is_blank(source_text) or not needs_translation(source_text):
                self._complete(job)
                await self.session.commit()
                run.completed += 1
                return

            if source_text != job.source_text:
                job.source_text = source_text
                targets = pending_locales(record)
            else:
                targets = pending_locales(record, job.target_locales or TARGET_LOCALES)

            if not targets:
                self._complete(job)
                await self.session.commit()
                run.completed += 1
                return

            result = await self._translate(job, source_text, targets)

            applied = await self.translations.apply_translations(job.key, result.translated)
            if result.success:
                self._complete(job)
                job.target_locales = targets
            else:
                job.target_locales = result.failed_locales
                self._record_failure(job, "; ".join(result.error_messages()))

            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.exception("Failed to persist translation job", extra={"job_id": job_id})
            run.errors.append(f"{job_id}: {e}")
            await self._mark_persist_failure(job_id, str(e), run)
            return

        logger.info(
            "Translation job processed",
            extra={
                "job_id": job_id,
                "key": job.key,
                "status": job.status,
                "applied": applied,
                "failed_locales": result.failed_locales,
            },
        )
        if job.status == JobStatus.COMPLETED.value:
            run.completed += 1
        elif job.status == JobStatus.FAILED.value:
            run.failed += 1
            run.errors.append(f"{job.key}: {job.last_error}")
        else:
            run.requeued += 1
            run.errors.append(f"{job.key}: {job.last_error}")

    async def _mark_persist_failure(
        self, job_id: str, message: str, run: PipelineRunResult
    ) -> None:
        try:
            job = await self._load_job(job_id)
            if job is None:
                return
            self._record_failure(job, message)
            await self.session.commit()
        except SQLAlchemyError:
            await self.session.rollback()
            logger.exception(
                "Could not record job failure; stale release will recover it",
                extra={"job_id": job_id},
            )
            return

        if job.status == JobStatus.FAILED.value:
            run.failed += 1
        else:
            run.requeued += 1

    async def process_pending(self, limit: int | None = None) -> PipelineRunResult:
        """
        Run one pipeline pass.

        Releases stale claims, then claims up to ``limit`` pending jobs
        (oldest first) with a conditional update and processes each one.

        Args:
            limit: Batch size. Defaults to the configured batch size.

        Returns:
            Counts of claimed, completed, requeued and failed jobs plus
            per-job error messages.
        """
        run = PipelineRunResult()
        run.released = await self.release_stale_jobs()

        batch = limit or self.config.batch_size
        stmt = (
            select(TranslationJob.id)
            .where(TranslationJob.status == JobStatus.PENDING.value)
            .order_by(TranslationJob.created_at)
            .limit(batch)
        )
        job_ids = list((await self.session.execute(stmt)).scalars().all())

        for job_id in job_ids:
            if not await self._claim(job_id):
                continue
            run.claimed += 1
            await self._run_job(job_id, run)

        logger.info(
            "Translation queue processed",
            extra={
                "claimed": run.claimed,
                "completed": run.completed,
                "requeued": run.requeued,
                "failed": run.failed,
            },
        )
        return run

    async def retry_failed_jobs(self) -> int:
        """
        Move failed jobs still below their retry ceiling back to pending.

        Jobs the pipeline fails itself are already at the ceiling; this
        picks up jobs marked failed outside a pipeline pass.

        Returns:
            Number of jobs reset.
        """
        stmt = (
            update(TranslationJob)
            .where(
                TranslationJob.status == JobStatus.FAILED.value,
                TranslationJob.attempt_count < TranslationJob.max_attempts,
            )
            .values(status=JobStatus.PENDING.value, started_at=None)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        retried = result.rowcount or 0
        logger.info("Retried failed translation jobs", extra={"count": retried})
        return retried

    async def stats(self) -> JobStats:
        """Job counts per status and average processing time of completed jobs."""
        rows = await self.session.execute(
            select(TranslationJob.status, func.count()).group_by(TranslationJob.status)
        )
        stats = JobStats()
        for status, count in rows.all():
            if status in _STATUS_VALUES:
                setattr(stats, status, count)
            stats.total += count

        durations = await self.session.execute(
            select(TranslationJob.started_at, TranslationJob.completed_at).where(
                TranslationJob.status == JobStatus.COMPLETED.value,
                TranslationJob.started_at.is_not(None),
                TranslationJob.completed_at.is_not(None),
            )
        )
        seconds = [
            (completed - started).total_seconds() for started, completed in durations.all()
        ]
        if seconds:
            stats.avg_completion_seconds = sum(seconds) / len(seconds)
        return stats

    async def translation_status(self) -> TranslationStatus:
        """Completeness of target locales across all records with source text."""
        missing = dict.fromkeys(TARGET_LOCALES, 0)
        total = complete = 0

        for record in await self.translations.list_all():
            if is_blank(record.text_for(self.source_locale)):
                continue
            total += 1
            pending = pending_locales(record)
            if not pending:
                complete += 1
            for locale in pending:
                missing[locale] += 1

        return TranslationStatus(
            total_keys=total,
            complete=complete,
            incomplete=total - complete,
            missing_by_locale=missing,
        )
