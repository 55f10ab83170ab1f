"""
Domain layer - Pure booking logic without storage or transport concerns.
"""

from .civil import civil_day_of_week, day_bounds
from .models import AvailabilityWindow, DayAvailability, Session, SessionStatus, UserRole
from .slot_generator import generate_slots

__all__ = [
    "AvailabilityWindow",
    "DayAvailability",
    "Session",
    "SessionStatus",
    "UserRole",
    "civil_day_of_week",
    "day_bounds",
    "generate_slots",
]
