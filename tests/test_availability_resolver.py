"""
Tests for the AvailabilityResolver.
"""

from datetime import date, time, timedelta
from typing import Dict, List, Tuple

import pytest

from mentorbook.domain.models import AvailabilityWindow, Session, SessionStatus
from mentorbook.services.availability_resolver import AvailabilityResolver

MONDAY = date(2024, 11, 25)
SUNDAY = date(2024, 11, 24)


class StubWindowSource:
    """Minimal stub matching WindowSource."""

    def __init__(self, windows: Dict[Tuple[str, int], List[AvailabilityWindow]]):
        self._windows = windows
        self.calls: List[Tuple[str, int]] = []

    def find_windows(self, mentor_id, day_of_week):
        self.calls.append((mentor_id, day_of_week))
        return self._windows.get((mentor_id, day_of_week), [])


class StubSessionSource:
    """Minimal stub matching SessionSource."""

    def __init__(self, sessions: List[Session]):
        self._sessions = sessions
        self.calls: List[Dict[str, str]] = []

    def find_by_mentor_and_date_range(self, mentor_id, from_instant, to_instant):
        self.calls.append(
            {
                "mentor": mentor_id,
                "start": from_instant.to_datetime_string(),
                "end": to_instant.to_datetime_string(),
            }
        )
        return [s for s in self._sessions if s.mentor_id == mentor_id]


def _window(start: time, end: time, day: int = 0) -> AvailabilityWindow:
    return AvailabilityWindow.build("ada", day, start, end)


def _booked(slot: str, status: SessionStatus = SessionStatus.REQUESTED, session_date: date = MONDAY) -> Session:
    return Session(mentor_id="ada", mentee_id="grace", session_date=session_date, slot=slot, status=status)


def _resolver(windows, sessions=None) -> AvailabilityResolver:
    return AvailabilityResolver(
        availability_store=StubWindowSource(windows),
        session_store=StubSessionSource(sessions or []),
        timezone="Europe/Berlin",
    )


class TestAvailabilityResolver:
    """Tests for AvailabilityResolver with stubbed stores."""

    def test_no_window_returns_empty(self):
        """No window for the weekday means no slots and no session lookup."""
        sessions = StubSessionSource([])
        resolver = AvailabilityResolver(StubWindowSource({}), sessions)

        availability = resolver.availability("ada", SUNDAY)

        assert resolver.resolve("ada", SUNDAY) == []
        assert not availability.has_windows
        assert not availability.is_fully_booked
        assert availability.day_of_week == 6
        assert sessions.calls == []

    def test_window_without_bookings_is_fully_free(self):
        """A template with zero bookings returns every slot."""
        resolver = _resolver({("ada", 0): [_window(time(9, 0), time(11, 0))]})

        assert resolver.resolve("ada", MONDAY) == ["09:00", "09:30", "10:00", "10:30"]

    def test_booked_slots_are_removed(self):
        resolver = _resolver(
            {("ada", 0): [_window(time(9, 0), time(11, 0))]},
            [_booked("09:30"), _booked("10:30", SessionStatus.CONFIRMED)],
        )

        assert resolver.resolve("ada", MONDAY) == ["09:00", "10:00"]

    def test_cancelled_sessions_do_not_occupy(self):
        resolver = _resolver(
            {("ada", 0): [_window(time(9, 0), time(10, 0))]},
            [_booked("09:00", SessionStatus.CANCELLED)],
        )

        assert resolver.resolve("ada", MONDAY) == ["09:00", "09:30"]

    def test_completed_sessions_occupy(self):
        resolver = _resolver(
            {("ada", 0): [_window(time(9, 0), time(10, 0))]},
            [_booked("09:00", SessionStatus.COMPLETED)],
        )

        assert resolver.resolve("ada", MONDAY) == ["09:30"]

    def test_sessions_on_other_dates_ignored(self):
        """Only sessions on the resolved date count."""
        resolver = _resolver(
            {("ada", 0): [_window(time(9, 0), time(10, 0))]},
            [_booked("09:00", session_date=date(2024, 12, 2))],
        )

        assert resolver.resolve("ada", MONDAY) == ["09:00", "09:30"]

    def test_fully_booked(self):
        """Fully booked is distinct from not available."""
        resolver = _resolver(
            {("ada", 0): [_window(time(9, 0), time(10, 0))]},
            [_booked("09:00"), _booked("09:30")],
        )

        availability = resolver.availability("ada", MONDAY)

        assert availability.has_windows
        assert availability.is_fully_booked
        assert availability.free_slots == ()
        assert availability.template_slots == ("09:00", "09:30")

    def test_union_of_overlapping_windows(self):
        """Overlapping windows merge into one de-duplicated, ordered run."""
        resolver = _resolver(
            {
                ("ada", 0): [
                    _window(time(9, 30), time(11, 0)),
                    _window(time(9, 0), time(10, 0)),
                ]
            }
        )

        assert resolver.resolve("ada", MONDAY) == ["09:00", "09:30", "10:00", "10:30"]

    def test_union_of_disjoint_windows(self):
        """Every matched window counts, not only the first."""
        resolver = _resolver(
            {
                ("ada", 0): [
                    _window(time(14, 0), time(15, 0)),
                    _window(time(9, 0), time(10, 0)),
                ]
            },
            [_booked("14:00")],
        )

        availability = resolver.availability("ada", MONDAY)

        assert availability.window_count == 2
        assert list(availability.free_slots) == ["09:00", "09:30", "14:30"]

    def test_queries_whole_civil_day(self):
        """Sessions are looked up from the first to the last instant of the date."""
        sessions = StubSessionSource([])
        windows = StubWindowSource({("ada", 0): [_window(time(9, 0), time(10, 0))]})
        resolver = AvailabilityResolver(windows, sessions, timezone="Europe/Berlin")

        resolver.resolve("ada", MONDAY)

        assert windows.calls == [("ada", 0)]
        assert sessions.calls == [
            {"mentor": "ada", "start": "2024-11-25 00:00:00", "end": "2024-11-25 23:59:59"}
        ]

    def test_resolve_is_idempotent(self):
        resolver = _resolver(
            {("ada", 0): [_window(time(9, 0), time(12, 0))]},
            [_booked("10:00")],
        )

        assert resolver.resolve("ada", MONDAY) == resolver.resolve("ada", MONDAY)


class TestAvailabilityResolverWithDatabase:
    """Resolver wired to the real stores."""

    def test_window_then_booking(self, availability_store, session_store, resolver):
        availability_store.upsert_window(AvailabilityWindow("ada", 0, time(9, 0), time(10, 0)))

        assert resolver.resolve("ada", MONDAY) == ["09:00", "09:30"]

        session_store.insert_if_vacant(_booked("09:00"))

        assert resolver.resolve("ada", MONDAY) == ["09:30"]
        assert resolver.resolve("ada", date(2024, 12, 2)) == ["09:00", "09:30"]

    @pytest.mark.parametrize("day_offset", range(1, 7))
    def test_other_weekdays_unavailable(self, availability_store, resolver, day_offset):
        availability_store.upsert_window(AvailabilityWindow("ada", 0, time(9, 0), time(10, 0)))

        assert resolver.resolve("ada", MONDAY + timedelta(days=day_offset)) == []
