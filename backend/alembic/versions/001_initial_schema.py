"""Initial schema: events and registrations with occupancy and uniqueness guards.

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
        "events",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("slug", sa.String(120), nullable=True, unique=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.String(1000), nullable=True),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("event_type", sa.String(50), nullable=False, server_default=sa.text("'workshop'")),
        sa.Column("event_format", sa.String(20), nullable=False, server_default=sa.text("'on-campus'")),
        sa.Column("featured", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'upcoming'")),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("spots_taken", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("capacity >= 0", name="check_capacity_non_negative"),
        sa.CheckConstraint("spots_taken >= 0", name="check_spots_taken_non_negative"),
        sa.CheckConstraint(
            "status IN ('upcoming', 'ongoing', 'completed', 'cancelled')",
            name="check_event_status",
        ),
        sa.CheckConstraint(
            "event_format IN ('on-campus', 'online', 'hybrid')",
            name="check_event_format",
        ),
    )
    op.create_index("ix_events_id", "events", ["id"])
    op.create_index("ix_events_date", "events", ["date"])
    op.create_index("ix_events_status_date", "events", ["status", "date"])

    op.create_table(
        "registrations",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("event_id", sa.Integer(), sa.ForeignKey("events.id"), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("email_normalized", sa.String(320), nullable=False),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("year", sa.String(50), nullable=True),
        sa.Column("program", sa.String(200), nullable=True),
        sa.Column("consent_updates", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("on_waitlist", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("waitlist_position", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'confirmed'")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(
            "(on_waitlist AND waitlist_position IS NOT NULL AND waitlist_position > 0)"
            " OR (NOT on_waitlist AND waitlist_position IS NULL)",
            name="check_waitlist_position_iff_waitlisted",
        ),
        sa.CheckConstraint("status IN ('confirmed', 'cancelled')", name="check_registration_status"),
    )
    op.create_index("ix_registrations_id", "registrations", ["id"])
    op.create_index("ix_registrations_event_id", "registrations", ["event_id"])
    # One active registration per (event, normalized email). Cancelled rows
    # are excluded so a participant can register again after cancelling.
    op.create_index(
        "uq_registrations_event_email_active",
        "registrations",
        ["event_id", "email_normalized"],
        unique=True,
        postgresql_where=sa.text("status != 'cancelled'"),
    )
    op.create_index(
        "uq_registrations_event_waitlist_position",
        "registrations",
        ["event_id", "waitlist_position"],
        unique=True,
        postgresql_where=sa.text("on_waitlist AND status != 'cancelled'"),
    )


def downgrade() -> None:
    op.drop_table("registrations")
    op.drop_table("events")
