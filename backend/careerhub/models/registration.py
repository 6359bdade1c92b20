"""
Registration model: one participant's RSVP for one event.

Key design decisions:
- `email_normalized` (trimmed, case-folded) is the de-duplication key; the
  submitted `email` is kept as typed for display
- Partial unique index on (event_id, email_normalized) over non-cancelled rows:
  a duplicate that slips past the application check fails at INSERT
- Partial unique index on (event_id, waitlist_position) over active waitlisted
  rows keeps waitlist positions distinct per event
- Status field allows cancellation without deleting records
"""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    Integer,
    String,
    text,
)

from careerhub.db.base import Base, TimestampMixin

STATUS_CONFIRMED = "confirmed"
STATUS_CANCELLED = "cancelled"

UQ_ACTIVE_EMAIL = "uq_registrations_event_email_active"
UQ_WAITLIST_POSITION = "uq_registrations_event_waitlist_position"

_ACTIVE = text("status != 'cancelled'")
_ACTIVE_WAITLISTED = text("on_waitlist AND status != 'cancelled'")


class Registration(Base, TimestampMixin):
    __tablename__ = "registrations"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    email = Column(String(320), nullable=False)
    email_normalized = Column(String(320), nullable=False)
    phone = Column(String(50), nullable=True)
    year = Column(String(50), nullable=True)
    program = Column(String(200), nullable=True)
    consent_updates = Column(Boolean, nullable=False, default=False)
    on_waitlist = Column(Boolean, nullable=False, default=False)
    waitlist_position = Column(Integer, nullable=True)
    status = Column(String(20), nullable=False, default=STATUS_CONFIRMED)

    __table_args__ = (
        Index(
            UQ_ACTIVE_EMAIL, "event_id", "email_normalized",
            unique=True, postgresql_where=_ACTIVE, sqlite_where=_ACTIVE,
        ),
        Index(
            UQ_WAITLIST_POSITION, "event_id", "waitlist_position",
            unique=True, postgresql_where=_ACTIVE_WAITLISTED, sqlite_where=_ACTIVE_WAITLISTED,
        ),
        CheckConstraint(
            "(on_waitlist AND waitlist_position IS NOT NULL AND waitlist_position > 0)"
            " OR (NOT on_waitlist AND waitlist_position IS NULL)",
            name="check_waitlist_position_iff_waitlisted",
        ),
        CheckConstraint("status IN ('confirmed', 'cancelled')", name="check_registration_status"),
    )

    @property
    def is_active(self) -> bool:
        return self.status != STATUS_CANCELLED

    def __repr__(self) -> str:
        return (
            f"<Registration(id={self.id}, event={self.event_id}, email={self.email_normalized}, "
            f"waitlist={self.waitlist_position}, status={self.status})>"
        )
