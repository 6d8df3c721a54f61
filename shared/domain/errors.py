"""Domain error codes shared by the venue and booking contexts.

Only caller mistakes and infrastructure contention are raised. Expected
booking outcomes (slot taken, venue closed, ...) are returned as values,
see ``apps.bookings.domain.results``.
"""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    FORMAT_ERROR = "FORMAT_ERROR"
    INVALID_INTERVAL = "INVALID_INTERVAL"
    NOT_FOUND = "NOT_FOUND"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    CONCURRENCY_ERROR = "CONCURRENCY_ERROR"


@dataclass(eq=False)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class ValidationError(DomainError):
    """Raised when input violates a domain rule (caller's fault)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(code=ErrorCode.VALIDATION_ERROR, message=message)
        self.field = field


class FormatError(DomainError, ValueError):
    """Raised when a time or date string is malformed."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.FORMAT_ERROR, message=message)


class InvalidIntervalError(DomainError, ValueError):
    """Raised when an interval does not end after it starts."""

    def __init__(self, message: str = "End time must be after start time.") -> None:
        super().__init__(code=ErrorCode.INVALID_INTERVAL, message=message)


class NotFoundError(DomainError):
    """Raised when a court, venue or booking is missing or unavailable."""

    def __init__(self, resource: str, resource_id=None, message: str | None = None) -> None:
        super().__init__(
            code=ErrorCode.NOT_FOUND,
            message=message or f"{resource} not found",
        )
        self.resource = resource
        self.resource_id = resource_id


class PermissionDeniedError(DomainError):
    """Raised when the caller may not act on the resource."""

    def __init__(self, message: str = "You do not have permission to perform this action.") -> None:
        super().__init__(code=ErrorCode.PERMISSION_DENIED, message=message)


class InvalidTransitionError(DomainError):
    """Raised when a booking status transition is not allowed."""

    def __init__(self, current: str, target: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_TRANSITION,
            message=f"Cannot move booking from {current} to {target}.",
        )
        self.current = current
        self.target = target


class ConcurrencyError(DomainError):
    """Raised when a reservation transaction keeps failing under contention."""

    def __init__(self, message: str = "The booking could not be completed, please retry.") -> None:
        super().__init__(code=ErrorCode.CONCURRENCY_ERROR, message=message)
