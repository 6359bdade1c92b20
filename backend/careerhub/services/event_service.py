"""
Event service handling CRUD operations.
Occupancy (spots_taken) is never written here; see admission_service and
registration_service.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from careerhub.core.errors import ConflictError, InvalidInputError, NotFoundError
from careerhub.core.logging import get_logger
from careerhub.models.event import Event
from careerhub.schemas.event import EventCreate, EventFilters, EventUpdate

logger = get_logger(__name__)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


async def create_event(db: AsyncSession, event_data: EventCreate) -> Event:
    """Create a new event with no seats taken."""
    event_date = _as_utc(event_data.date)
    if event_date <= datetime.now(timezone.utc):
        raise InvalidInputError("Event date must be in the future", field="date")

    if event_data.slug and await _find_by_slug(db, event_data.slug) is not None:
        raise ConflictError(f"Slug '{event_data.slug}' is already in use")

    event = Event(
        slug=event_data.slug,
        title=event_data.title,
        description=event_data.description,
        date=event_date,
        location=event_data.location,
        event_type=event_data.event_type,
        event_format=event_data.event_format,
        featured=event_data.featured,
        capacity=event_data.capacity,
        spots_taken=0,
    )
    db.add(event)
    try:
        await db.flush()
    except IntegrityError as exc:
        # A concurrent create took the slug after the check above
        await db.rollback()
        if event_data.slug and "slug" in str(exc.orig):
            raise ConflictError(f"Slug '{event_data.slug}' is already in use") from exc
        raise
    await db.refresh(event)

    logger.info("event_created", event_id=event.id, title=event.title, capacity=event.capacity)
    return event


async def get_event(db: AsyncSession, event_id: int) -> Event:
    """Get a single event by ID."""
    result = await db.execute(select(Event).where(Event.id == event_id))
    event = result.scalar_one_or_none()

    if not event:
        raise NotFoundError("Event", event_id)
    return event


async def get_event_by_ref(db: AsyncSession, ref: str) -> Event:
    """Get an event by numeric ID or by slug."""
    if ref.isdigit():
        return await get_event(db, int(ref))

    event = await _find_by_slug(db, ref)
    if not event:
        raise NotFoundError("Event", ref)
    return event


async def _find_by_slug(db: AsyncSession, slug: str):
    result = await db.execute(select(Event).where(Event.slug == slug))
    return result.scalar_one_or_none()


async def update_event(db: AsyncSession, event_id: int, event_data: EventUpdate) -> Event:
    """
    Apply an admin edit. Lowering capacity below spots_taken is allowed;
    new RSVPs are then waitlisted until occupancy drops under capacity.
    """
    event = await get_event(db, event_id)

    changes = event_data.model_dump(exclude_unset=True, exclude_none=True)
    if "date" in changes:
        changes["date"] = _as_utc(changes["date"])
    for field, value in changes.items():
        setattr(event, field, value)

    await db.flush()
    await db.refresh(event)

    logger.info("event_updated", event_id=event.id, fields=sorted(changes))
    return event


async def list_events(
    db: AsyncSession,
    page: int = 1,
    page_size: int = 20,
    filters: Optional[EventFilters] = None,
) -> tuple[list[Event], int]:
    """
    List events with pagination and optional type/format/featured/status filters.
    Uses the ix_events_date index for date filtering and ordering.
    """
    filters = filters or EventFilters()
    query = select(Event)

    if filters.upcoming_only:
        query = query.where(Event.date >= datetime.now(timezone.utc))
    if filters.event_type:
        query = query.where(Event.event_type == filters.event_type)
    if filters.event_format:
        query = query.where(Event.event_format == filters.event_format)
    if filters.featured is not None:
        query = query.where(Event.featured == filters.featured)
    if filters.status:
        query = query.where(Event.status == filters.status)

    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar()

    events_query = (
        query
        .order_by(Event.date.asc(), Event.id.asc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    result = await db.execute(events_query)
    events = list(result.scalars().all())

    return events, total
