"""
Free-slot resolution for one mentor on one civil date.

The resolver combines the weekly template (every window matching the
weekday, merged as a union) with the sessions already booked that day and
returns what is left. It reads only; the booking path re-checks at insert
time through the store's uniqueness guarantee.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, List, Protocol, Sequence

from pendulum import DateTime

from ..domain.civil import civil_day_of_week, day_bounds
from ..domain.models import AvailabilityWindow, DayAvailability, Session

logger = logging.getLogger(__name__)


class WindowSource(Protocol):
    """Protocol describing the availability reads needed by the resolver."""

    def find_windows(self, mentor_id: str, day_of_week: int) -> List[AvailabilityWindow]:
        """Return every window of a mentor on a weekday."""


class SessionSource(Protocol):
    """Protocol describing the session reads needed by the resolver."""

    def find_by_mentor_and_date_range(
        self,
        mentor_id: str,
        from_instant: DateTime,
        to_instant: DateTime,
    ) -> List[Session]:
        """Return a mentor's sessions within the range."""


class AvailabilityResolver:
    """
    Computes the free slots of a mentor for a date.

    Algorithm:
    1. Derive the weekday of the date
    2. Load every window of the mentor on that weekday
    3. Union their slots, de-duplicated and sorted in clock order
    4. Load the day's sessions and drop cancelled ones
    5. Remove booked slots from the union
    """

    def __init__(
        self,
        availability_store: WindowSource,
        session_store: SessionSource,
        timezone: str = "UTC",
    ) -> None:
        self._availability_store = availability_store
        self._session_store = session_store
        self.timezone = timezone

    def resolve(self, mentor_id: str, session_date: date) -> List[str]:
        """Return the ordered free slot labels, empty if the mentor has no window that day."""
        return list(self.availability(mentor_id, session_date).free_slots)

    def availability(self, mentor_id: str, session_date: date) -> DayAvailability:
        """Resolve the date and keep enough detail to tell 'no window' from 'fully booked'."""
        day_of_week = civil_day_of_week(session_date)
        windows = self._availability_store.find_windows(mentor_id, day_of_week)

        if not windows:
            logger.debug("Mentor %s has no window on weekday %s", mentor_id, day_of_week)
            return DayAvailability(
                mentor_id=mentor_id,
                session_date=session_date,
                day_of_week=day_of_week,
                window_count=0,
                template_slots=(),
                free_slots=(),
            )

        all_slots = self.union_slots(windows)

        start_of_day, end_of_day = day_bounds(session_date, self.timezone)
        sessions = self._session_store.find_by_mentor_and_date_range(
            mentor_id, start_of_day, end_of_day
        )
        booked = self.booked_slots(sessions, session_date)

        free = tuple(slot for slot in all_slots if slot not in booked)

        logger.debug(
            "Mentor %s on %s: %d template slots, %d booked, %d free",
            mentor_id,
            session_date.isoformat(),
            len(all_slots),
            len(booked),
            len(free),
        )

        return DayAvailability(
            mentor_id=mentor_id,
            session_date=session_date,
            day_of_week=day_of_week,
            window_count=len(windows),
            template_slots=all_slots,
            free_slots=free,
        )

    @staticmethod
    def union_slots(windows: Iterable[AvailabilityWindow]) -> tuple[str, ...]:
        """
        Merge the slots of several windows.

        Duplicates are dropped and the result is ordered by slot time, so
        two overlapping windows yield one continuous run.

        Example:
        09:00-10:00 and 09:30-11:00 -> 09:00, 09:30, 10:00, 10:30
        """
        seen: dict[str, None] = {}
        for window in windows:
            for slot in window.slots:
                seen.setdefault(slot, None)
        # HH:MM labels sort lexically in clock order
        return tuple(sorted(seen))

    @staticmethod
    def booked_slots(sessions: Sequence[Session], session_date: date) -> set[str]:
        """Slots held by active sessions on the given date."""
        return {
            session.slot
            for session in sessions
            if session.status.is_active and session.session_date == session_date
        }
