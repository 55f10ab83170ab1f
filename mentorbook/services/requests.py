"""
Explicit input structs, validated before any domain logic runs.
"""

from __future__ import annotations

from datetime import date, time
from typing import Any, Type, TypeVar

from pydantic import BaseModel, ValidationError, field_validator

from ..domain.exceptions import InvalidRangeError, InvalidRequestError
from ..domain.models import SessionStatus
from ..domain.slot_generator import END_OF_DAY, format_slot, parse_slot

RequestT = TypeVar("RequestT", bound=BaseModel)


class ScheduleRequest(BaseModel):
    """Create a recurring weekly availability window."""
    mentor_id: str
    day_of_week: int
    start_time: time
    end_time: time

    @field_validator("mentor_id")
    @classmethod
    def validate_mentor_id(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("mentor_id must not be empty")
        return value.strip()

    @field_validator("day_of_week")
    @classmethod
    def validate_day(cls, value: int) -> int:
        """Validate day is between 0 (Monday) and 6 (Sunday)."""
        if value not in range(7):
            raise ValueError(f"day_of_week must be between 0 and 6, got {value}")
        return value

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def accept_end_of_day(cls, value: Any) -> Any:
        return _end_of_day(value)


class ScheduleUpdateRequest(BaseModel):
    """Move an existing window to a new time range."""
    window_id: int
    start_time: time
    end_time: time

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def accept_end_of_day(cls, value: Any) -> Any:
        return _end_of_day(value)


class BookingRequest(BaseModel):
    """Book one slot of a mentor on a civil date."""
    mentor_id: str
    mentee_id: str
    session_date: date
    slot: str
    note: str = ""

    @field_validator("mentor_id", "mentee_id")
    @classmethod
    def validate_ids(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("participant ids must not be empty")
        return value.strip()

    @field_validator("slot")
    @classmethod
    def normalize_slot(cls, value: str) -> str:
        """Accept H:MM and HH:MM, store HH:MM."""
        return format_slot(parse_slot(value))


class StatusUpdateRequest(BaseModel):
    session_id: int
    status: SessionStatus


def parse_request(model: Type[RequestT], **data: Any) -> RequestT:
    """
    Build and validate an input struct.

    Raises:
        InvalidRangeError: If the struct carries a time range whose end is not after its start
        InvalidRequestError: For any other validation failure
    """
    try:
        request = model(**data)
    except ValidationError as exc:
        raise InvalidRequestError(_summarize(exc)) from exc

    start = getattr(request, "start_time", None)
    end = getattr(request, "end_time", None)
    if start is not None and end is not None and end <= start:
        raise InvalidRangeError(
            f"Start time {format_slot(start)} must be before end time {format_slot(end)}"
        )

    return request


def _summarize(exc: ValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        problems.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "Invalid request: " + "; ".join(problems)


def _end_of_day(value: Any) -> Any:
    """Map the "24:00" window bound onto END_OF_DAY before time parsing."""
    if isinstance(value, str) and value.strip() == "24:00":
        return END_OF_DAY
    return value
