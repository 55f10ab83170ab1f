"""
Service layer that orchestrates stores and domain logic.
"""

from .availability_resolver import AvailabilityResolver
from .booking_service import BookingService
from .requests import (
    BookingRequest,
    ScheduleRequest,
    ScheduleUpdateRequest,
    StatusUpdateRequest,
    parse_request,
)

__all__ = [
    "AvailabilityResolver",
    "BookingRequest",
    "BookingService",
    "ScheduleRequest",
    "ScheduleUpdateRequest",
    "StatusUpdateRequest",
    "parse_request",
]
