"""Domain error hierarchy.

Services raise these; the handlers registered in ``stayhub.main`` turn them
into ``{"detail": message}`` JSON responses with the matching status code.
"""

from fastapi import status


class StayHubError(Exception):
    """Base class for errors that map onto a client-facing HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


# ---------------------------------------------------------------------------
# 400: validation and business-rule conflicts
# ---------------------------------------------------------------------------


class ValidationFailed(StayHubError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed"


class InvalidRange(ValidationFailed):
    default_message = "End date must be after start date"


class InvalidTransition(ValidationFailed):
    """A booking status change that the lifecycle table does not allow."""

    def __init__(self, current: str, requested: str) -> None:
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot change booking status from '{current}' to '{requested}'")


class ConflictError(StayHubError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Request conflicts with the current state"


class DuplicateIdentity(ConflictError):
    default_message = "Username or email already exists"


class RoomUnavailable(ConflictError):
    default_message = "Room is not available for selected dates"


class RoomHasBookings(ConflictError):
    default_message = "Cannot delete room with existing bookings"


class InvalidCredentials(StayHubError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid credentials"


# ---------------------------------------------------------------------------
# 401 / 403: authentication and authorization
# ---------------------------------------------------------------------------


class Unauthenticated(StayHubError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Access token required"


class AccountDisabled(StayHubError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Account is deactivated"


class Forbidden(StayHubError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied. Insufficient permissions."


# ---------------------------------------------------------------------------
# 404
# ---------------------------------------------------------------------------


class NotFound(StayHubError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"
