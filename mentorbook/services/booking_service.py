"""
Booking orchestration: validate a requested slot, then commit it.

The free-slot read done through the resolver can be stale by the time the
insert happens. The session store's uniqueness guarantee is what decides a
race; a conflict there is reported to the caller as ``SlotTakenError``.
"""

from __future__ import annotations

import logging
from datetime import date, time
from typing import Collection, List, Protocol

from ..adapters.user_directory import UserDirectory
from ..domain.exceptions import (
    ConflictError,
    NoAvailabilityError,
    NotAvailableThisDayError,
    NotFoundError,
    SlotTakenError,
)
from ..domain.models import AvailabilityWindow, DayAvailability, Session, SessionStatus, UserRole
from .availability_resolver import AvailabilityResolver
from .requests import (
    BookingRequest,
    ScheduleRequest,
    ScheduleUpdateRequest,
    StatusUpdateRequest,
    parse_request,
)

logger = logging.getLogger(__name__)


class ScheduleStore(Protocol):
    """Protocol describing the availability writes needed by the service."""

    def upsert_window(self, window: AvailabilityWindow) -> AvailabilityWindow:
        """Insert or replace a window."""

    def update_window(self, window_id: int, new_start: time, new_end: time) -> AvailabilityWindow:
        """Replace a window's range and slots."""

    def find_window(self, window_id: int) -> AvailabilityWindow | None:
        """Look up one window."""

    def find_windows_for_mentor(self, mentor_id: str) -> List[AvailabilityWindow]:
        """Return a mentor's weekly schedule."""


class BookingStore(Protocol):
    """Protocol describing the session operations needed by the service."""

    def insert_if_vacant(self, session: Session) -> Session:
        """Insert unless the slot is held; raise ConflictError otherwise."""

    def find_by_id(self, session_id: int) -> Session | None:
        """Look up one session."""

    def find_by_participant(self, user_id: str, role: UserRole) -> List[Session]:
        """Return sessions of a participant."""

    def find_for_participant(self, session_id: int, user_id: str, role: UserRole) -> Session | None:
        """Return a session if the participant takes part in it."""

    def update_status(
        self,
        session_id: int,
        status: SessionStatus,
        from_statuses: Collection[SessionStatus] | None = None,
    ) -> Session:
        """Set a session's status, optionally only from the given statuses."""


class BookingService:
    """
    Entry point for schedule writes, bookings and session lifecycle updates.

    Dependencies are protocols, so tests can swap any store for a stub.
    """

    def __init__(
        self,
        users: UserDirectory,
        resolver: AvailabilityResolver,
        availability_store: ScheduleStore,
        session_store: BookingStore,
        strict_status_transitions: bool = False,
    ) -> None:
        self._users = users
        self._resolver = resolver
        self._availability_store = availability_store
        self._session_store = session_store
        self.strict_status_transitions = strict_status_transitions

    # Schedules

    def create_schedule(self, request: ScheduleRequest) -> AvailabilityWindow:
        """Add a recurring weekly window for a mentor."""
        self._require_mentor(request.mentor_id)
        window = AvailabilityWindow(
            mentor_id=request.mentor_id,
            day_of_week=request.day_of_week,
            start_time=request.start_time,
            end_time=request.end_time,
        )
        return self._availability_store.upsert_window(window)

    def update_schedule(self, request: ScheduleUpdateRequest) -> AvailabilityWindow:
        """
        Move an existing window; start, end and slots change together.

        Raises:
            NotFoundError: Unknown window, or its owner is no longer a mentor
        """
        window = self._availability_store.find_window(request.window_id)
        if window is None:
            raise NotFoundError(f"Availability window {request.window_id} not found")
        self._require_mentor(window.mentor_id)
        return self._availability_store.update_window(
            request.window_id, request.start_time, request.end_time
        )

    def schedule_for(self, mentor_id: str) -> List[AvailabilityWindow]:
        self._require_mentor(mentor_id)
        return self._availability_store.find_windows_for_mentor(mentor_id)

    # Availability

    def available_slots(self, mentor_id: str, session_date: date) -> DayAvailability:
        """Resolve free slots for a known mentor."""
        self._require_mentor(mentor_id)
        return self._resolver.availability(mentor_id, session_date)

    # Bookings

    def book(self, request: BookingRequest) -> Session:
        """
        Book a slot for a mentee.

        Steps:
        1. The mentor must exist with role mentor
        2. The mentor must have a window that weekday, with something free
        3. The requested slot must be among the free slots
        4. Insert through the store; a lost race becomes SlotTakenError

        Raises:
            NotFoundError: Unknown mentor
            NotAvailableThisDayError: No window on the date's weekday
            NoAvailabilityError: Windows exist but every slot is booked
            SlotTakenError: The slot is not free, or was taken concurrently
        """
        self._require_mentor(request.mentor_id)

        availability = self._resolver.availability(request.mentor_id, request.session_date)

        if not availability.has_windows:
            raise NotAvailableThisDayError()
        if not availability.free_slots:
            raise NoAvailabilityError()
        if request.slot not in availability.free_slots:
            raise SlotTakenError()

        session = Session(
            mentor_id=request.mentor_id,
            mentee_id=request.mentee_id,
            session_date=request.session_date,
            slot=request.slot,
            status=SessionStatus.REQUESTED,
            note=request.note,
        )

        try:
            created = self._session_store.insert_if_vacant(session)
        except ConflictError as exc:
            raise SlotTakenError() from exc

        logger.info(
            "Booked session %s: mentor %s, mentee %s, %s %s",
            created.id,
            created.mentor_id,
            created.mentee_id,
            created.session_date.isoformat(),
            created.slot,
        )
        return created

    def book_slot(
        self,
        mentor_id: str,
        mentee_id: str,
        session_date: date | str,
        slot: str,
        note: str = "",
    ) -> Session:
        """Validate raw arguments into a BookingRequest and book it."""
        request = parse_request(
            BookingRequest,
            mentor_id=mentor_id,
            mentee_id=mentee_id,
            session_date=session_date,
            slot=slot,
            note=note,
        )
        return self.book(request)

    # Session lifecycle

    def update_status(self, request: StatusUpdateRequest) -> Session:
        """
        Change a session's status.

        Transitions are permissive unless ``strict_status_transitions`` is on,
        in which case only requested -> confirmed|cancelled and
        confirmed -> completed|cancelled are allowed.

        Raises:
            NotFoundError: Unknown session
            InvalidTransitionError: Strict mode and the move is not allowed
            SlotTakenError: Reviving a cancelled session whose slot was rebooked
        """
        from_statuses = None
        if self.strict_status_transitions:
            from_statuses = [
                status for status in SessionStatus if status.can_transition_to(request.status)
            ]

        try:
            return self._session_store.update_status(
                request.session_id, request.status, from_statuses=from_statuses
            )
        except ConflictError as exc:
            raise SlotTakenError() from exc

    def sessions_for(self, user_id: str, role: UserRole) -> List[Session]:
        return self._session_store.find_by_participant(user_id, role)

    def session_for(self, session_id: int, user_id: str, role: UserRole) -> Session:
        session = self._session_store.find_for_participant(session_id, user_id, role)
        if session is None:
            raise NotFoundError(f"Session {session_id} not found")
        return session

    def _require_mentor(self, mentor_id: str) -> None:
        if not self._users.exists_with_role(mentor_id, UserRole.MENTOR):
            raise NotFoundError("Mentor not found")
