"""
Storage of recurring weekly availability windows.
"""

from __future__ import annotations

import logging
from datetime import time
from typing import List

from sqlalchemy import select
from sqlalchemy.orm import sessionmaker

from ..domain.exceptions import NotFoundError
from ..domain.models import AvailabilityWindow
from ..domain.slot_generator import DEFAULT_SLOT_WIDTH_MINUTES, format_slot, generate_slots, parse_window_bound
from .database import AvailabilityWindowRow

logger = logging.getLogger(__name__)


class AvailabilityStore:
    """
    Holds availability windows keyed by mentor and day of week.

    Slots are always recomputed on write, so a stored window can never
    disagree with its own time range. Overlapping windows for the same
    mentor and day are accepted; readers take the union.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        slot_width_minutes: int = DEFAULT_SLOT_WIDTH_MINUTES,
    ):
        self._session_factory = session_factory
        self.slot_width_minutes = slot_width_minutes

    def upsert_window(self, window: AvailabilityWindow) -> AvailabilityWindow:
        """
        Insert a new window, or replace the one with the same id.

        Returns:
            The stored window, with its id and recomputed slots
        """
        slots = generate_slots(window.start_time, window.end_time, self.slot_width_minutes)

        with self._session_factory.begin() as db:
            row = db.get(AvailabilityWindowRow, window.id) if window.id is not None else None
            if row is None:
                row = AvailabilityWindowRow()
                db.add(row)

            row.mentor_id = window.mentor_id
            row.day_of_week = window.day_of_week
            row.start_time = format_slot(window.start_time)
            row.end_time = format_slot(window.end_time)
            row.slots = slots
            db.flush()
            stored = _to_domain(row)

        logger.info("Saved availability window %s for mentor %s: %s", stored.id, stored.mentor_id, stored)
        return stored

    def update_window(self, window_id: int, new_start: time, new_end: time) -> AvailabilityWindow:
        """
        Replace a window's start, end and slots in one write.

        Raises:
            NotFoundError: If no window has this id
            InvalidRangeError: If new_end is not after new_start
        """
        slots = generate_slots(new_start, new_end, self.slot_width_minutes)

        with self._session_factory.begin() as db:
            row = db.get(AvailabilityWindowRow, window_id)
            if row is None:
                raise NotFoundError(f"Availability window {window_id} not found")

            row.start_time = format_slot(new_start)
            row.end_time = format_slot(new_end)
            row.slots = slots
            db.flush()
            stored = _to_domain(row)

        logger.info("Updated availability window %s: %s", window_id, stored)
        return stored

    def find_window(self, window_id: int) -> AvailabilityWindow | None:
        with self._session_factory() as db:
            row = db.get(AvailabilityWindowRow, window_id)
            return _to_domain(row) if row is not None else None

    def find_windows(self, mentor_id: str, day_of_week: int) -> List[AvailabilityWindow]:
        """Return every window of a mentor on a weekday, in creation order."""
        stmt = (
            select(AvailabilityWindowRow)
            .where(
                AvailabilityWindowRow.mentor_id == mentor_id,
                AvailabilityWindowRow.day_of_week == day_of_week,
            )
            .order_by(AvailabilityWindowRow.id)
        )
        with self._session_factory() as db:
            return [_to_domain(row) for row in db.scalars(stmt)]

    def find_windows_for_mentor(self, mentor_id: str) -> List[AvailabilityWindow]:
        """Return a mentor's whole weekly schedule ordered by day, then start."""
        stmt = (
            select(AvailabilityWindowRow)
            .where(AvailabilityWindowRow.mentor_id == mentor_id)
            .order_by(
                AvailabilityWindowRow.day_of_week,
                AvailabilityWindowRow.start_time,
                AvailabilityWindowRow.id,
            )
        )
        with self._session_factory() as db:
            return [_to_domain(row) for row in db.scalars(stmt)]


def _to_domain(row: AvailabilityWindowRow) -> AvailabilityWindow:
    return AvailabilityWindow(
        id=row.id,
        mentor_id=row.mentor_id,
        day_of_week=row.day_of_week,
        start_time=parse_window_bound(row.start_time),
        end_time=parse_window_bound(row.end_time),
        slots=list(row.slots or []),
    )
