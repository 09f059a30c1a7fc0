"""
Event model with attendee roster and denormalized attendee counter.

Key design decisions:
- `current_attendees` is denormalized so the capacity predicate of a join
  is evaluated on the event row itself, under that row's lock
- Roster rows live in `event_attendees`; the unique constraint on
  (event_id, email_normalized) makes duplicate admission impossible even
  if two joins slip past the conditional UPDATE
- CHECK constraints are the last line of defence for the counter
"""

from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    ForeignKey,
    Index,
    CheckConstraint,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from eventhub.db.base import Base, TimestampMixin


class Event(Base, TimestampMixin):
    __tablename__ = "events"

    id = Column(String(36), primary_key=True)
    title = Column(String(255), nullable=False)
    description = Column(String(5000), nullable=True)
    location = Column(String(255), nullable=True)
    category = Column(String(100), nullable=True)
    date = Column(DateTime(timezone=True), nullable=True)
    image_url = Column(String(1000), nullable=True)
    creator_email = Column(String(320), nullable=True)
    max_attendees = Column(Integer, nullable=False, default=0)  # 0 = unlimited
    current_attendees = Column(Integer, nullable=False, default=0)

    attendee_entries = relationship(
        "EventAttendee",
        back_populates="event",
        lazy="selectin",
        order_by="EventAttendee.id",
    )

    __table_args__ = (
        CheckConstraint("max_attendees >= 0", name="check_max_attendees_non_negative"),
        CheckConstraint("current_attendees >= 0", name="check_current_attendees_non_negative"),
        CheckConstraint(
            "max_attendees = 0 OR current_attendees <= max_attendees",
            name="check_current_lte_max",
        ),
        # "My events" listing
        Index("ix_events_creator_email", "creator_email"),
    )

    def __repr__(self) -> str:
        return (
            f"<Event(id={self.id}, title={self.title}, "
            f"attendees={self.current_attendees}/{self.max_attendees or 'unlimited'})>"
        )


class EventAttendee(Base):
    __tablename__ = "event_attendees"

    id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(String(36), ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    # As submitted by the joiner (trimmed); display form
    email = Column(String(320), nullable=False)
    # Lowercased + trimmed; identity form
    email_normalized = Column(String(320), nullable=False)
    joined_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    event = relationship("Event", back_populates="attendee_entries")

    __table_args__ = (
        UniqueConstraint("event_id", "email_normalized", name="uq_event_attendee_email"),
        Index("ix_event_attendees_event_id", "event_id"),
    )

    def __repr__(self) -> str:
        return f"<EventAttendee(event={self.event_id}, email={self.email})>"
