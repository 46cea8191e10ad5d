"""Redis key templates.

Centralized management of the Redis keys and arq job ids used by the
application so the API and the worker agree on them.
"""


class RedisKeys:
    """Redis key templates and helper methods."""

    # ============================================================================
    # Translation queue
    # ============================================================================

    # arq deduplicates jobs by id: while one pipeline pass is queued or
    # running, enqueueing another with the same id is a no-op.
    # Format: translation:process_queue
    @staticmethod
    def translation_queue_job() -> str:
        """
        Get the arq job id of the translation pipeline pass.

        Returns:
            Job id string.
        """
        return "translation:process_queue"
