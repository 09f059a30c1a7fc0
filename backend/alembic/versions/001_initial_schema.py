"""Initial schema: users, events, event_attendees with constraints.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("photo_url", sa.String(1000), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "events",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.String(5000), nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("category", sa.String(100), nullable=True),
        sa.Column("date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("image_url", sa.String(1000), nullable=True),
        sa.Column("creator_email", sa.String(320), nullable=True),
        sa.Column("max_attendees", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("current_attendees", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("max_attendees >= 0", name="check_max_attendees_non_negative"),
        sa.CheckConstraint("current_attendees >= 0", name="check_current_attendees_non_negative"),
        # Last line of defence against overfilling; joins already guard it in the UPDATE
        sa.CheckConstraint(
            "max_attendees = 0 OR current_attendees <= max_attendees",
            name="check_current_lte_max",
        ),
    )
    op.create_index("ix_events_creator_email", "events", ["creator_email"])

    op.create_table(
        "event_attendees",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "event_id",
            sa.String(36),
            sa.ForeignKey("events.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("email_normalized", sa.String(320), nullable=False),
        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        # One roster entry per person per event, case and whitespace insensitive.
        # Also backs the NOT EXISTS lookup of the join UPDATE.
        sa.UniqueConstraint("event_id", "email_normalized", name="uq_event_attendee_email"),
    )
    op.create_index("ix_event_attendees_event_id", "event_attendees", ["event_id"])


def downgrade() -> None:
    op.drop_table("event_attendees")
    op.drop_table("events")
    op.drop_table("users")
