"""
Pydantic schemas for event-related request/response validation.

Wire format is camelCase (maxAttendees, currentAttendees, ...), matching
the web client; Python code uses snake_case names.
"""

from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

_CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EventCreate(BaseModel):
    model_config = _CAMEL

    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    location: Optional[str] = Field(None, max_length=255)
    category: Optional[str] = Field(None, max_length=100)
    date: Optional[datetime] = None
    image_url: Optional[str] = Field(None, max_length=1000)
    creator_email: Optional[str] = Field(None, max_length=320)
    # Parsed leniently by the registry: absent or non-numeric means unlimited
    max_attendees: Any = None


class EventUpdate(BaseModel):
    """Partial update. ``creatorEmail`` identifies the requester.

    Unknown keys are kept so the registry can log and drop attempts to
    write roster or counter fields.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    location: Optional[str] = Field(None, max_length=255)
    category: Optional[str] = Field(None, max_length=100)
    date: Optional[datetime] = None
    image_url: Optional[str] = Field(None, max_length=1000)
    creator_email: Optional[str] = None
    max_attendees: Any = None

    def split_requester(self) -> tuple[Optional[str], dict[str, Any]]:
        """Return (requester email, patch of explicitly sent fields)."""
        patch = self.model_dump(exclude_unset=True)
        requester = patch.pop("creator_email", None)
        return requester, patch


class EventResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    title: str
    description: Optional[str]
    location: Optional[str]
    category: Optional[str]
    date: Optional[datetime]
    image_url: Optional[str]
    creator_email: Optional[str]
    max_attendees: int
    current_attendees: int
    attendees: list[str]
    is_full: bool
    attendance_state: str
    created_at: datetime
    updated_at: Optional[datetime]

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> str:
        return str(value)


class EventCreatedResponse(BaseModel):
    model_config = _CAMEL

    success: bool = True
    message: str
    event_id: str


class EventUpdatedResponse(BaseModel):
    model_config = _CAMEL

    success: bool = True
    message: str
    event_id: str
    status: str  # updated | unchanged


class EventDeletedResponse(BaseModel):
    success: bool = True
    message: str


class JoinRequest(BaseModel):
    email: Optional[str] = None


class JoinResponse(BaseModel):
    model_config = _CAMEL

    success: bool = True
    message: str
    current_attendees: int
    max_attendees: int
    event_id: str
    user_email: str


class MembershipResponse(BaseModel):
    model_config = _CAMEL

    success: bool = True
    has_joined: bool
    current_attendees: int
    max_attendees: int
    user_email: str
    attendees: list[str]


class ErrorResponse(BaseModel):
    success: bool = False
    code: str
    message: str
