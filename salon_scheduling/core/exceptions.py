# salon_scheduling/core/exceptions.py
"""Errors raised by the scheduling services.

Every public operation either succeeds or raises exactly one of these. The
message is meant to be shown to the person using the booking screens.
"""
from typing import Iterable


class SchedulingError(Exception):
    """Base class for scheduling failures that map to a client response."""
    status_code = 400
    default_message = "Unable to complete the scheduling request."

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidRequestError(SchedulingError):
    """Malformed input; the caller can fix it and retry."""
    status_code = 400
    default_message = "Invalid request."


class NotFoundError(SchedulingError):
    status_code = 404
    default_message = "Not found."


class SlotUnavailableError(SchedulingError):
    """The requested time is not (or no longer) free."""
    status_code = 409
    default_message = "Selected slot is no longer available. Please pick another time."


class TokenInvalidError(SchedulingError):
    """A reschedule link that can no longer be redeemed."""
    status_code = 410
    default_message = "This reschedule link is no longer valid. Please request a new link."


class LinkAlreadyUsedError(TokenInvalidError):
    default_message = "Reschedule link has already been used. Please request a new link."


class LinkExpiredError(TokenInvalidError):
    default_message = "Reschedule link has expired. Please request a new link."


class ServiceMismatchError(SchedulingError):
    status_code = 400
    default_message = "Service mismatch for reschedule."


class TokenAllocationError(SchedulingError):
    status_code = 503
    default_message = "Unable to allocate reschedule token."


class UnknownAddOnsError(InvalidRequestError):
    """Raised when a booking references add-ons missing from the catalog."""

    def __init__(self, missing_ids: Iterable):
        self.missing_ids = [str(add_on_id) for add_on_id in missing_ids]
        super().__init__(f"Unknown add-ons: {', '.join(self.missing_ids)}")
