from eventhub.schemas.user import UserCreate, UserResponse, UserDeletedResponse
from eventhub.schemas.event import (
    EventCreate,
    EventUpdate,
    EventResponse,
    EventCreatedResponse,
    EventUpdatedResponse,
    EventDeletedResponse,
    JoinRequest,
    JoinResponse,
    MembershipResponse,
    ErrorResponse,
)

__all__ = [
    "UserCreate", "UserResponse", "UserDeletedResponse",
    "EventCreate", "EventUpdate", "EventResponse",
    "EventCreatedResponse", "EventUpdatedResponse", "EventDeletedResponse",
    "JoinRequest", "JoinResponse", "MembershipResponse", "ErrorResponse",
]
