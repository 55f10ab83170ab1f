"""
Civil calendar helpers.

All day-of-week and day-boundary arithmetic lives here so the rest of the
engine never depends on locale or process timezone settings.
"""

from datetime import date
from typing import Tuple

import pendulum
from pendulum import DateTime

WEEKDAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)


def civil_day_of_week(value: date) -> int:
    """Return the weekday of a civil date, 0=Monday ... 6=Sunday."""
    return pendulum.date(value.year, value.month, value.day).weekday()


def day_bounds(value: date, timezone: str = "UTC") -> Tuple[DateTime, DateTime]:
    """Return the first and last instant of a civil date in ``timezone``."""
    midnight = pendulum.datetime(value.year, value.month, value.day, tz=timezone)
    return midnight.start_of("day"), midnight.end_of("day")


def weekday_name(day_of_week: int) -> str:
    return WEEKDAY_NAMES[day_of_week]


def parse_weekday(value: str) -> int:
    """
    Parse a weekday given as a number (0-6) or an English name/prefix.

    Raises:
        ValueError: If the value cannot be mapped to a weekday
    """
    text = value.strip().lower()
    if text.isdigit():
        day = int(text)
        if day in range(7):
            return day
        raise ValueError(f"Day of week must be between 0 and 6, got {day}")

    if len(text) >= 3:
        for idx, name in enumerate(WEEKDAY_NAMES):
            if name.lower().startswith(text):
                return idx

    raise ValueError(f"Unknown day of week: '{value}'")
