"""Database module for RemindMe Service.

This module defines the SQLAlchemy model for durable one-shot jobs and the
database session management.
IMPORTANT: run_at and created_at are stored as UTC DateTime objects, NOT strings.
"""

from sqlalchemy import create_engine, Column, String, DateTime, JSON, Index
from sqlalchemy.orm import declarative_base, sessionmaker

from config import settings

# SQLAlchemy Base
Base = declarative_base()


class ScheduledJob(Base):
    """A named one-shot job waiting for its run time.

    The row is deleted when the job fires; there is no history table.
    """

    __tablename__ = "scheduled_jobs"

    id = Column(String, primary_key=True, doc="Unique job ID (UUID)")
    name = Column(String, nullable=False, doc="Registered handler name, e.g. 'reminder'")
    payload = Column(JSON, nullable=False, default=dict, doc="Data passed verbatim to the handler")

    run_at = Column(
        DateTime(timezone=True),
        nullable=False,
        doc="When the job becomes due (UTC)"
    )
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        doc="When the job was registered (UTC)"
    )

    __table_args__ = (
        Index('idx_scheduled_jobs_run_at', 'run_at'),
    )

    def __repr__(self):
        return f"<ScheduledJob(id={self.id}, name={self.name}, run_at={self.run_at})>"


# Database Engine Setup
engine = create_engine(
    settings.DATABASE_URL,
    connect_args={"check_same_thread": False} if "sqlite" in settings.DATABASE_URL else {},
    echo=False  # Set to True for SQL debugging
)

# Session Factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """Database session dependency for FastAPI.

    Yields:
        Session: SQLAlchemy database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    """Create tables on the given engine (default: the configured one)."""
    Base.metadata.create_all(bind=bind or engine)
