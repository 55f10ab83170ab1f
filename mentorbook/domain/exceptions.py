"""
Domain-specific exception hierarchy for the mentorship booking engine.

Every error kind carries a stable ``code`` and a stable default message so
callers can branch on the kind instead of the string content.
"""


class MentorBookError(Exception):
    """Base class for all application-level errors."""

    code = "error"
    default_message = "Unexpected booking error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidRangeError(MentorBookError):
    """Raised when a time window is malformed (end not after start)."""

    code = "invalid_range"
    default_message = "Start time must be before end time"


class InvalidRequestError(MentorBookError):
    """Raised when an input struct fails validation."""

    code = "invalid_request"
    default_message = "Request is invalid"


class NotFoundError(MentorBookError):
    """Raised for an unknown mentor, window or session."""

    code = "not_found"
    default_message = "Resource not found"


class NotAvailableThisDayError(MentorBookError):
    code = "not_available_this_day"
    default_message = "Mentor is not available this day of the week"


class NoAvailabilityError(MentorBookError):
    code = "no_availability"
    default_message = "Mentor is fully booked for the selected date"


class SlotTakenError(MentorBookError):
    """Raised when the requested slot is not free, including a lost race."""

    code = "slot_taken"
    default_message = "Sorry, this mentor is not available for the selected time"


class ConflictError(MentorBookError):
    """
    Storage-level uniqueness violation on (mentor, date, slot).

    Internal only: the service layer translates it to ``SlotTakenError``.
    """

    code = "conflict"
    default_message = "Session slot already taken at the storage level"


class InvalidTransitionError(MentorBookError):
    code = "invalid_transition"
    default_message = "Session status transition is not allowed"
