"""CRUD operations for scheduled jobs.

IMPORTANT: All datetime parameters are aware UTC datetime objects, NOT strings.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from database import ScheduledJob
from time_utils import ensure_utc, utc_now


def create_job(db: Session, name: str, payload: dict, run_at: datetime) -> ScheduledJob:
    """Create a one-shot job.

    Args:
        db: Database session
        name: Registered handler name
        payload: JSON-serializable data handed to the handler when it fires
        run_at: When the job becomes due (datetime object)

    Returns:
        ScheduledJob: Created job

    Raises:
        SQLAlchemyError: On database errors
    """
    job = ScheduledJob(
        id=str(uuid.uuid4()),
        name=name,
        payload=payload,
        run_at=ensure_utc(run_at),
        created_at=utc_now(),
    )
    db.add(job)
    db.commit()
    db.refresh(job)
    return job


def get_job(db: Session, job_id: str) -> Optional[ScheduledJob]:
    return db.query(ScheduledJob).filter(ScheduledJob.id == job_id).first()


def get_due_jobs(db: Session, now: datetime, limit: int = 100) -> List[ScheduledJob]:
    """Get jobs whose run_at is at or before `now`, oldest first.

    Args:
        db: Database session
        now: Reference time
        limit: Maximum number of results

    Returns:
        List[ScheduledJob]: Due jobs
    """
    return db.query(ScheduledJob).filter(
        ScheduledJob.run_at <= ensure_utc(now)
    ).order_by(ScheduledJob.run_at).limit(limit).all()


def claim_job(db: Session, job_id: str) -> bool:
    """Delete a job row, claiming it for execution.

    Returns:
        bool: True if this call removed the row, False if it was already gone
    """
    deleted = db.query(ScheduledJob).filter(
        ScheduledJob.id == job_id
    ).delete(synchronize_session=False)
    db.commit()
    return deleted == 1


def count_pending_jobs(db: Session, name: Optional[str] = None) -> int:
    query = db.query(ScheduledJob)
    if name:
        query = query.filter(ScheduledJob.name == name)
    return query.count()
