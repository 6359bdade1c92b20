"""
Event model with occupancy tracking.

Key design decisions:
- `spots_taken` is a denormalized counter of seated registrations, so an
  admission can compare it to `capacity` without a COUNT over registrations
- `spots_taken` is only changed by guarded UPDATEs (admission and cancellation)
- Capacity may be lowered below `spots_taken` by an admin edit; admission then
  waitlists everyone until cancellations bring occupancy back under capacity
- `status`, `event_type`, `event_format` and `featured` only drive listing
  filters; admission does not look at them
"""

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Index, Integer, String

from careerhub.db.base import Base, TimestampMixin

EVENT_STATUSES = ("upcoming", "ongoing", "completed", "cancelled")
EVENT_FORMATS = ("on-campus", "online", "hybrid")

DEFAULT_EVENT_TYPE = "workshop"
DEFAULT_EVENT_FORMAT = "on-campus"
DEFAULT_EVENT_STATUS = "upcoming"


def _one_of(column: str, values: tuple[str, ...]) -> str:
    return f"{column} IN ({', '.join(repr(v) for v in values)})"


class Event(Base, TimestampMixin):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    slug = Column(String(120), unique=True, nullable=True)
    title = Column(String(255), nullable=False)
    description = Column(String(1000), nullable=True)
    date = Column(DateTime(timezone=True), nullable=False)
    location = Column(String(255), nullable=True)
    event_type = Column(String(50), nullable=False, default=DEFAULT_EVENT_TYPE)
    event_format = Column(String(20), nullable=False, default=DEFAULT_EVENT_FORMAT)
    featured = Column(Boolean, nullable=False, default=False)
    status = Column(String(20), nullable=False, default=DEFAULT_EVENT_STATUS)
    capacity = Column(Integer, nullable=False)
    spots_taken = Column(Integer, nullable=False, default=0, server_default="0")

    __table_args__ = (
        CheckConstraint("capacity >= 0", name="check_capacity_non_negative"),
        CheckConstraint("spots_taken >= 0", name="check_spots_taken_non_negative"),
        CheckConstraint(_one_of("status", EVENT_STATUSES), name="check_event_status"),
        CheckConstraint(_one_of("event_format", EVENT_FORMATS), name="check_event_format"),
        Index("ix_events_date", "date"),
        Index("ix_events_status_date", "status", "date"),
    )

    @property
    def spots_left(self) -> int:
        return max(self.capacity - self.spots_taken, 0)

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, title={self.title}, taken={self.spots_taken}/{self.capacity})>"
