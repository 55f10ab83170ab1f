"""
Domain models for availability windows and booked sessions.
"""

from dataclasses import dataclass, field, replace
from datetime import date, time
from enum import Enum
from typing import FrozenSet, List, Optional

from .civil import weekday_name
from .exceptions import InvalidRangeError
from .slot_generator import DEFAULT_SLOT_WIDTH_MINUTES, format_slot, generate_slots


class SessionStatus(str, Enum):
    """Lifecycle of a booked session."""

    REQUESTED = "requested"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"

    @property
    def is_active(self) -> bool:
        """Active sessions occupy their slot; cancelled ones release it."""
        return self is not SessionStatus.CANCELLED

    @property
    def is_terminal(self) -> bool:
        return self in (SessionStatus.CANCELLED, SessionStatus.COMPLETED)

    def can_transition_to(self, target: "SessionStatus") -> bool:
        return target in ALLOWED_TRANSITIONS[self]


ALLOWED_TRANSITIONS: dict[SessionStatus, FrozenSet[SessionStatus]] = {
    SessionStatus.REQUESTED: frozenset({SessionStatus.CONFIRMED, SessionStatus.CANCELLED}),
    SessionStatus.CONFIRMED: frozenset({SessionStatus.COMPLETED, SessionStatus.CANCELLED}),
    SessionStatus.CANCELLED: frozenset(),
    SessionStatus.COMPLETED: frozenset(),
}


class UserRole(str, Enum):
    """Role of a participant. Also used to scope session lookups."""

    MENTOR = "mentor"
    MENTEE = "mentee"


@dataclass
class AvailabilityWindow:
    """
    A recurring weekly interval a mentor can be booked in.

    Invariant: start_time < end_time and ``slots`` is the fixed-width
    decomposition of [start_time, end_time).
    """
    mentor_id: str
    day_of_week: int  # 0=Monday, 6=Sunday
    start_time: time
    end_time: time
    slots: List[str] = field(default_factory=list)
    id: Optional[int] = None

    def __post_init__(self):
        if self.day_of_week not in range(7):
            raise InvalidRangeError(f"Day of week must be between 0 and 6, got {self.day_of_week}")
        if self.start_time >= self.end_time:
            raise InvalidRangeError(
                f"Start time {format_slot(self.start_time)} must be before "
                f"end time {format_slot(self.end_time)}"
            )

    @classmethod
    def build(
        cls,
        mentor_id: str,
        day_of_week: int,
        start_time: time,
        end_time: time,
        width_minutes: int = DEFAULT_SLOT_WIDTH_MINUTES,
        window_id: Optional[int] = None,
    ) -> "AvailabilityWindow":
        """Create a window with its slots computed from the time range."""
        return cls(
            mentor_id=mentor_id,
            day_of_week=day_of_week,
            start_time=start_time,
            end_time=end_time,
            slots=generate_slots(start_time, end_time, width_minutes),
            id=window_id,
        )

    def with_range(
        self,
        start_time: time,
        end_time: time,
        width_minutes: int = DEFAULT_SLOT_WIDTH_MINUTES,
    ) -> "AvailabilityWindow":
        """Return a copy with start, end and slots replaced together."""
        slots = generate_slots(start_time, end_time, width_minutes)
        return replace(self, start_time=start_time, end_time=end_time, slots=slots)

    def __str__(self) -> str:
        return (
            f"{weekday_name(self.day_of_week)} "
            f"{format_slot(self.start_time)} - {format_slot(self.end_time)}"
        )


@dataclass
class Session:
    """A booked mentorship session occupying one slot on one civil date."""
    mentor_id: str
    mentee_id: str
    session_date: date
    slot: str
    status: SessionStatus = SessionStatus.REQUESTED
    note: str = ""
    id: Optional[int] = None

    @property
    def key(self) -> tuple[str, date, str]:
        """The uniqueness key shared by at most one active session."""
        return (self.mentor_id, self.session_date, self.slot)

    def involves(self, user_id: str, role: UserRole) -> bool:
        if role is UserRole.MENTOR:
            return self.mentor_id == user_id
        return self.mentee_id == user_id

    def format_display(self) -> str:
        """
        Format the session for display.
        Format: Weekday, YYYY-MM-DD | HH:MM (status)
        """
        weekday = weekday_name(self.session_date.weekday())
        return f"{weekday}, {self.session_date.isoformat()} | {self.slot} ({self.status.value})"


@dataclass(frozen=True)
class DayAvailability:
    """
    Result of resolving one mentor on one date.

    ``window_count`` is zero when the mentor has no window for the weekday,
    which is distinct from every slot being booked.
    """
    mentor_id: str
    session_date: date
    day_of_week: int
    window_count: int
    template_slots: tuple[str, ...]
    free_slots: tuple[str, ...]

    @property
    def has_windows(self) -> bool:
        return self.window_count > 0

    @property
    def is_fully_booked(self) -> bool:
        return self.has_windows and not self.free_slots
