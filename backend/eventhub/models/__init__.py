from eventhub.models.event import Event, EventAttendee
from eventhub.models.user import User

__all__ = ["Event", "EventAttendee", "User"]
