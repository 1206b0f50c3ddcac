"""Durable one-shot job scheduler.

Jobs are rows in the scheduled_jobs table. A job is registered under a handler
name with a JSON payload and a run time; the background worker calls
run_due_jobs() periodically, which claims each due job by deleting its row and
then awaits the handler registered under the job's name with the payload.

Deleting before running means a job fires at most once: a handler that fails
is logged and not retried.
"""

from datetime import datetime
from typing import Awaitable, Callable, Dict, Optional

from sqlalchemy.orm import Session, sessionmaker

import crud
import database
from config import settings
from logger_config import setup_logger
from time_utils import utc_now

logger = setup_logger(__name__, 'scheduler.log')

JobHandler = Callable[[dict], Awaitable[None]]


class JobScheduler:
    """Registers one-shot jobs and fires them when due."""

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self.session_factory = session_factory or database.SessionLocal
        self._handlers: Dict[str, JobHandler] = {}

    def add_job_handler(self, name: str, handler: JobHandler) -> None:
        """Register the coroutine run for jobs named `name`."""
        self._handlers[name] = handler

    def run_job(self, name: str, data: dict, run_at: datetime) -> str:
        """Schedule a one-shot job.

        The caller is responsible for rejecting run times that are not in the future.

        Args:
            name: Handler name
            data: Payload handed to the handler verbatim
            run_at: When the job should fire

        Returns:
            str: Job ID
        """
        db: Session = self.session_factory()
        try:
            job = crud.create_job(db, name, data, run_at)
            logger.info(f"Scheduled job {job.id} ({name}) for {run_at.isoformat()}")
            return job.id
        finally:
            db.close()

    def pending_count(self, name: Optional[str] = None) -> int:
        db: Session = self.session_factory()
        try:
            return crud.count_pending_jobs(db, name)
        finally:
            db.close()

    async def run_due_jobs(
        self,
        now: Optional[datetime] = None,
        limit: int = settings.WORKER_BATCH_SIZE
    ) -> int:
        """Fire every job due at `now`.

        Returns:
            int: Number of jobs claimed and handed to a handler
        """
        now = now or utc_now()
        db: Session = self.session_factory()
        try:
            # Snapshot before claiming; commits expire the ORM instances
            due = [
                (job.id, job.name, dict(job.payload or {}))
                for job in crud.get_due_jobs(db, now, limit)
            ]
            if not due:
                logger.debug("No due jobs at this time")
                return 0

            logger.info(f"Found {len(due)} due job(s)")
            fired = 0
            for job_id, name, payload in due:
                if not crud.claim_job(db, job_id):
                    logger.info(f"Job {job_id} already claimed, skipping")
                    continue

                handler = self._handlers.get(name)
                if handler is None:
                    logger.error(f"No handler registered for job {job_id} ({name}), dropping it")
                    continue

                fired += 1
                try:
                    await handler(payload)
                    logger.info(f"Job {job_id} ({name}) completed")
                except Exception as e:
                    logger.error(f"Job {job_id} ({name}) failed: {str(e)}", exc_info=True)

            return fired
        finally:
            db.close()
