from eventhub.domain.models import Event, JoinResult, MembershipStatus, UpdateResult, User
from eventhub.domain.values import MAX_CAPACITY, EventId, UserId, as_utc, normalize_email, parse_capacity

__all__ = [
    "Event",
    "User",
    "JoinResult",
    "MembershipStatus",
    "UpdateResult",
    "EventId",
    "UserId",
    "normalize_email",
    "parse_capacity",
    "as_utc",
    "MAX_CAPACITY",
]
