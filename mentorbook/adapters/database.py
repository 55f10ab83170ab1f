"""
SQLAlchemy persistence for availability windows and sessions.

The ``sessions`` table carries a partial unique index on
(mentor_id, session_date, slot) for non-cancelled rows. That index is the
single point where concurrent bookings for the same slot are serialized.
"""

from __future__ import annotations

import logging

from sqlalchemy import JSON, Column, Date, DateTime, Index, Integer, String, Text, create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.sql import func

logger = logging.getLogger(__name__)

Base = declarative_base()
metadata = Base.metadata

ACTIVE_SESSION_CLAUSE = text("status != 'cancelled'")


class AvailabilityWindowRow(Base):
    __tablename__ = "availability_windows"

    id = Column(Integer, primary_key=True)
    mentor_id = Column(String(64), nullable=False)
    day_of_week = Column(Integer, nullable=False)
    start_time = Column(String(5), nullable=False)  # HH:MM
    end_time = Column(String(5), nullable=False)  # HH:MM
    slots = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("ix_availability_windows_mentor_day", "mentor_id", "day_of_week"),
    )


class SessionRow(Base):
    __tablename__ = "sessions"

    id = Column(Integer, primary_key=True)
    mentor_id = Column(String(64), nullable=False)
    mentee_id = Column(String(64), nullable=False)
    session_date = Column(Date, nullable=False)
    slot = Column(String(5), nullable=False)  # HH:MM
    status = Column(String(16), nullable=False, default="requested")
    note = Column(Text, nullable=False, default="")
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("ix_sessions_mentor_date", "mentor_id", "session_date"),
        Index("ix_sessions_mentee", "mentee_id"),
        Index(
            "uq_sessions_mentor_date_slot_active",
            "mentor_id",
            "session_date",
            "slot",
            unique=True,
            sqlite_where=ACTIVE_SESSION_CLAUSE,
            postgresql_where=ACTIVE_SESSION_CLAUSE,
        ),
    )


class Database:
    """
    Owns the engine and the session factory shared by the stores.
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.engine: Engine = create_engine(url, echo=echo, **_engine_options(url))
        self.session_factory = sessionmaker(
            bind=self.engine,
            autoflush=False,
            expire_on_commit=False,
        )

    def create_all(self) -> None:
        """Create tables and indexes if they do not exist yet."""
        metadata.create_all(self.engine)
        logger.info("Database schema ensured at %s", self.engine.url.render_as_string(hide_password=True))

    def dispose(self) -> None:
        self.engine.dispose()


def _engine_options(url: str) -> dict:
    if not url.startswith("sqlite"):
        return {}
    # SQLite is used from several threads; writers wait on the file lock
    # instead of failing immediately.
    return {"connect_args": {"check_same_thread": False, "timeout": 30}}
