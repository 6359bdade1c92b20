"""
Event endpoints with Redis caching on list operations.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from careerhub.core.logging import get_logger
from careerhub.db.session import get_db
from careerhub.schemas.event import (
    EventCreate,
    EventFilters,
    EventFormat,
    EventListResponse,
    EventResponse,
    EventStatus,
    EventUpdate,
)
from careerhub.services.cache_service import (
    get_cached_events,
    invalidate_event_cache,
    set_cached_events,
)
from careerhub.services.event_service import create_event, get_event_by_ref, list_events, update_event

logger = get_logger(__name__)
router = APIRouter(prefix="/events", tags=["Events"])


@router.post("/", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event_endpoint(
    event_data: EventCreate,
    db: AsyncSession = Depends(get_db),
):
    """Create a new event. Access control is enforced in front of this service."""
    event = await create_event(db, event_data)
    await invalidate_event_cache()
    return event


@router.get("/", response_model=EventListResponse)
async def list_events_endpoint(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    upcoming_only: bool = Query(True),
    event_type: Optional[str] = Query(None, alias="type", max_length=50),
    event_format: Optional[EventFormat] = Query(None, alias="format"),
    featured: Optional[bool] = Query(None),
    event_status: Optional[EventStatus] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
):
    """
    List events with pagination, filtered by type, format, featured flag and status.
    Served from Redis when cached; invalidated on any occupancy change.
    """
    filters = EventFilters(
        upcoming_only=upcoming_only,
        event_type=event_type,
        event_format=event_format,
        featured=featured,
        status=event_status,
    )
    cached = await get_cached_events(page, page_size, filters)
    if cached:
        logger.info("events_list_cache_hit", page=page)
        cached["cached"] = True
        return EventListResponse(**cached)

    events, total = await list_events(db, page, page_size, filters)

    response_data = {
        "events": [EventResponse.model_validate(e).model_dump() for e in events],
        "total": total,
        "page": page,
        "page_size": page_size,
        "cached": False,
    }
    await set_cached_events(page, page_size, filters, response_data)

    return EventListResponse(**response_data)


@router.get("/{ref}", response_model=EventResponse)
async def get_event_endpoint(
    ref: str,
    db: AsyncSession = Depends(get_db),
):
    """Get a single event by numeric ID or slug. Not cached."""
    return await get_event_by_ref(db, ref)


@router.patch("/{event_id}", response_model=EventResponse)
async def update_event_endpoint(
    event_id: int,
    event_data: EventUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Edit event metadata or capacity."""
    event = await update_event(db, event_id, event_data)
    await invalidate_event_cache()
    return event
