"""
Fixed-width slot generation.

Pure and deterministic: the same window always decomposes into the same
ordered list of ``"HH:MM"`` labels.
"""

from datetime import time
from typing import List

import pendulum

from .exceptions import InvalidRangeError

DEFAULT_SLOT_WIDTH_MINUTES = 30
SLOT_LABEL_FORMAT = "HH:mm"

# Window end meaning midnight at the close of the day, written "24:00".
END_OF_DAY = time.max

# Any fixed day works as an anchor; only the clock part matters.
_ANCHOR = pendulum.datetime(2000, 1, 3, tz="UTC")


def generate_slots(
    start: time,
    end: time,
    width_minutes: int = DEFAULT_SLOT_WIDTH_MINUTES,
) -> List[str]:
    """
    Decompose [start, end) into fixed-width slot labels.

    A trailing interval shorter than ``width_minutes`` is dropped. An end of
    ``END_OF_DAY`` runs the window up to midnight.

    Example:
    09:00 - 10:15 at 30 minutes -> ["09:00", "09:30"]

    Raises:
        InvalidRangeError: If end is not after start or the width is not positive
    """
    if width_minutes <= 0:
        raise InvalidRangeError(f"Slot width must be positive, got {width_minutes}")
    if end <= start:
        raise InvalidRangeError(
            f"Start time {format_slot(start)} must be before end time {format_slot(end)}"
        )

    cursor = _ANCHOR.set(hour=start.hour, minute=start.minute, second=0, microsecond=0)
    if end == END_OF_DAY:
        limit = _ANCHOR.add(days=1)
    else:
        limit = _ANCHOR.set(hour=end.hour, minute=end.minute, second=0, microsecond=0)

    slots: List[str] = []
    while cursor.add(minutes=width_minutes) <= limit:
        slots.append(cursor.format(SLOT_LABEL_FORMAT))
        cursor = cursor.add(minutes=width_minutes)

    return slots


def format_slot(value: time) -> str:
    """Render a time-of-day as a slot label."""
    if value == END_OF_DAY:
        return "24:00"
    return f"{value.hour:02d}:{value.minute:02d}"


def parse_slot(label: str) -> time:
    """
    Parse an ``"HH:MM"`` (or ``"H:MM"``) label into a time.

    Raises:
        ValueError: If the label is not a valid 24-hour clock value
    """
    parts = label.strip().split(":")
    if len(parts) != 2 or not all(part.isdigit() for part in parts) or len(parts[1]) != 2:
        raise ValueError(f"Slot label must look like HH:MM, got '{label}'")
    hour, minute = int(parts[0]), int(parts[1])
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise ValueError(f"Slot label out of range: '{label}'")
    return time(hour=hour, minute=minute)


def parse_window_bound(label: str) -> time:
    """
    Parse a window start or end; unlike slot labels, ``"24:00"`` is accepted.

    Raises:
        ValueError: If the label is neither HH:MM nor 24:00
    """
    if label.strip() == "24:00":
        return END_OF_DAY
    return parse_slot(label)
