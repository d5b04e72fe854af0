"""Exception types raised by the availability and reschedule engine."""


class FieldbookError(Exception):
    """Base class for engine errors."""


class BookingStoreError(FieldbookError):
    """Raised by a booking store when a create/cancel/confirm call fails."""


class RescheduleError(FieldbookError):
    """Raised when a reschedule cannot proceed or the replacement booking was not created."""


class SelectionError(FieldbookError):
    """Raised when a selected start time cannot host the requested duration.

    ``reason`` is one of the ``SelectionReason`` values so callers can show
    a specific message (blocked vs past vs unavailable vs too short).
    """

    def __init__(self, reason: str, message: str) -> None:
        super().__init__(message)
        self.reason = reason
        self.message = message
