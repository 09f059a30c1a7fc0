"""Domain error codes for events, attendance and users.

Every failure carries a code the request layer maps to a transport status,
plus a stable message that is safe to show to the caller.
"""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    INVALID_INPUT = "INVALID_INPUT"
    INVALID_ID = "INVALID_ID"
    NOT_FOUND = "NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
    INVALID_CAPACITY = "INVALID_CAPACITY"
    ALREADY_JOINED = "ALREADY_JOINED"
    EVENT_FULL = "EVENT_FULL"
    JOIN_CONFLICT = "JOIN_CONFLICT"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    STORAGE_UNAVAILABLE = "STORAGE_UNAVAILABLE"


@dataclass(eq=False)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class InvalidInputError(DomainError):
    """Raised when a required field is missing or blank."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_INPUT, message=message)


class InvalidIdError(DomainError):
    """Raised when an identifier is not a well-formed UUID."""

    def __init__(self, kind: str = "event") -> None:
        super().__init__(code=ErrorCode.INVALID_ID, message=f"Invalid {kind} ID")


class EventNotFoundError(DomainError):
    """Raised when an event is not found."""

    def __init__(self, event_id: str) -> None:
        super().__init__(code=ErrorCode.NOT_FOUND, message="Event not found")
        self.event_id = event_id


class UserNotFoundError(DomainError):
    """Raised when a user is not found."""

    def __init__(self) -> None:
        super().__init__(code=ErrorCode.NOT_FOUND, message="User not found")


class UserAlreadyExistsError(DomainError):
    def __init__(self) -> None:
        super().__init__(code=ErrorCode.ALREADY_EXISTS, message="User already exists")


class ForbiddenError(DomainError):
    """Raised when someone other than the creator edits an event."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.FORBIDDEN,
            message="You don't have permission to update this event",
        )


class InvalidCapacityError(DomainError):
    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_CAPACITY, message=message)


class AlreadyJoinedError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.ALREADY_JOINED,
            message="You have already joined this event",
        )


class EventFullError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.EVENT_FULL,
            message="Event is full. No more spots available.",
        )


class JoinConflictError(DomainError):
    """Raised when the conditional join write matched nothing.

    Another request changed the event between the snapshot read and the
    write, so the caller may already be on the roster or the event may have
    filled up.
    """

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.JOIN_CONFLICT,
            message="Unable to join event. You may have already joined or the event may be full.",
        )


class StorageUnavailableError(DomainError):
    """Raised when the backing store cannot be reached. Safe to retry."""

    def __init__(self, operation: str) -> None:
        super().__init__(
            code=ErrorCode.STORAGE_UNAVAILABLE,
            message="Storage is temporarily unavailable. Please try again later.",
        )
        self.operation = operation
