"""
Application error taxonomy.

Every error raised by the service layer is an `AppError`. The HTTP layer turns
it into ``{"error": <message>, "code": <code>}`` with ``status_code``; the
real-time layer emits the same payload as an ``error`` event instead of
disconnecting.
"""

from typing import Optional


class AppError(Exception):
    """Base class for expected, user-facing failures."""

    status_code: int = 500
    code: Optional[str] = None

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.code:
            body["code"] = self.code
        return body


class ValidationError(AppError):
    """Malformed or missing input."""
    status_code = 400


class AuthenticationError(AppError):
    """Missing, invalid or expired session token."""
    status_code = 401


class AuthorizationError(AppError):
    """Valid principal acting outside its permissions."""
    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    """Duplicate value for a unique field."""
    status_code = 400
    code = "DUPLICATE"


class InsufficientFundsError(AppError):
    status_code = 400
    code = "INSUFFICIENT_FUNDS"


class InvalidAmountError(AppError):
    status_code = 400
    code = "INVALID_AMOUNT"


class AppointmentRequiredError(AppError):
    """No paid, confirmed/completed appointment exists for the pair."""
    status_code = 403
    code = "NO_APPOINTMENT"


class AppointmentEndedError(AppError):
    """The qualifying appointment's window is over; the chat is view-only."""
    status_code = 403
    code = "APPOINTMENT_ENDED"

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["appointmentEnded"] = True
        return body


class ChatLockedError(AppError):
    status_code = 403
    code = "CHAT_LOCKED"
