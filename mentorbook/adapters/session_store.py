"""
Storage of booked sessions.

``insert_if_vacant`` relies on the partial unique index declared in
``database.py``: two concurrent inserts for the same (mentor, date, slot)
are serialized by the database, one commits and the other gets
``ConflictError``.
"""

from __future__ import annotations

import logging
from typing import Collection, List

from pendulum import DateTime
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from ..domain.exceptions import ConflictError, InvalidTransitionError, NotFoundError
from ..domain.models import Session, SessionStatus, UserRole
from .database import SessionRow

logger = logging.getLogger(__name__)


class SessionStore:
    """Holds booked sessions; never hard-deletes them."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def insert_if_vacant(self, session: Session) -> Session:
        """
        Insert a session unless an active one already holds its slot.

        Raises:
            ConflictError: If the (mentor, date, slot) key is already taken
        """
        try:
            with self._session_factory.begin() as db:
                row = SessionRow(
                    mentor_id=session.mentor_id,
                    mentee_id=session.mentee_id,
                    session_date=session.session_date,
                    slot=session.slot,
                    status=session.status.value,
                    note=session.note or "",
                )
                db.add(row)
                db.flush()
                stored = _to_domain(row)
        except IntegrityError as exc:
            logger.warning(
                "Slot conflict for mentor %s on %s at %s",
                session.mentor_id,
                session.session_date.isoformat(),
                session.slot,
            )
            raise ConflictError() from exc

        return stored

    def find_by_id(self, session_id: int) -> Session | None:
        with self._session_factory() as db:
            row = db.get(SessionRow, session_id)
            return _to_domain(row) if row is not None else None

    def find_by_mentor_and_date_range(
        self,
        mentor_id: str,
        from_instant: DateTime,
        to_instant: DateTime,
    ) -> List[Session]:
        """
        Return a mentor's sessions whose civil date falls within the range.

        Cancelled sessions are included; callers decide what counts as booked.
        """
        stmt = (
            select(SessionRow)
            .where(
                SessionRow.mentor_id == mentor_id,
                SessionRow.session_date >= from_instant.date(),
                SessionRow.session_date <= to_instant.date(),
            )
            .order_by(SessionRow.session_date, SessionRow.slot, SessionRow.id)
        )
        with self._session_factory() as db:
            return [_to_domain(row) for row in db.scalars(stmt)]

    def find_by_participant(self, user_id: str, role: UserRole) -> List[Session]:
        """Return every session where the user takes part in the given role."""
        column = SessionRow.mentor_id if role is UserRole.MENTOR else SessionRow.mentee_id
        stmt = (
            select(SessionRow)
            .where(column == user_id)
            .order_by(SessionRow.session_date, SessionRow.slot, SessionRow.id)
        )
        with self._session_factory() as db:
            return [_to_domain(row) for row in db.scalars(stmt)]

    def find_for_participant(self, session_id: int, user_id: str, role: UserRole) -> Session | None:
        """Return a session only if the user takes part in it in the given role."""
        session = self.find_by_id(session_id)
        if session is None or not session.involves(user_id, role):
            return None
        return session

    def update_status(
        self,
        session_id: int,
        status: SessionStatus,
        from_statuses: Collection[SessionStatus] | None = None,
    ) -> Session:
        """
        Set a session's status.

        With ``from_statuses`` the write only applies while the current status
        is one of them. Check and write are a single conditional UPDATE, so
        two concurrent transitions out of the same status cannot both win.

        Raises:
            NotFoundError: If no session has this id
            InvalidTransitionError: If the current status is not in from_statuses
            ConflictError: If reactivating a cancelled session collides with
                an active booking of the same slot
        """
        try:
            with self._session_factory.begin() as db:
                if from_statuses is None:
                    row = db.get(SessionRow, session_id)
                    if row is None:
                        raise NotFoundError(f"Session {session_id} not found")
                    row.status = status.value
                    db.flush()
                else:
                    result = db.execute(
                        update(SessionRow)
                        .where(
                            SessionRow.id == session_id,
                            SessionRow.status.in_([s.value for s in from_statuses]),
                        )
                        .values(status=status.value)
                        .execution_options(synchronize_session=False)
                    )
                    row = db.get(SessionRow, session_id, populate_existing=True)
                    if row is None:
                        raise NotFoundError(f"Session {session_id} not found")
                    if result.rowcount == 0:
                        raise InvalidTransitionError(
                            f"Cannot move session {session_id} from {row.status} to {status.value}"
                        )
                stored = _to_domain(row)
        except IntegrityError as exc:
            raise ConflictError() from exc

        logger.info("Session %s is now %s", session_id, status.value)
        return stored


def _to_domain(row: SessionRow) -> Session:
    return Session(
        id=row.id,
        mentor_id=row.mentor_id,
        mentee_id=row.mentee_id,
        session_date=row.session_date,
        slot=row.slot,
        status=SessionStatus(row.status),
        note=row.note or "",
    )
