"""
Pydantic schemas for event-related request/response validation.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

# Lowercase words joined by hyphens, with at least one letter somewhere.
# All-digit references are resolved as event ids, so an all-digit slug
# could never be looked up.
SLUG_PATTERN = r"^(?:[0-9]+-)*[a-z0-9]*[a-z][a-z0-9]*(?:-[a-z0-9]+)*$"

EventFormat = Literal["on-campus", "online", "hybrid"]
EventStatus = Literal["upcoming", "ongoing", "completed", "cancelled"]


class EventCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    slug: Optional[str] = Field(None, min_length=1, max_length=120, pattern=SLUG_PATTERN)
    description: Optional[str] = Field(None, max_length=1000)
    date: datetime
    location: Optional[str] = Field(None, max_length=255)
    event_type: str = Field("workshop", min_length=1, max_length=50)
    event_format: EventFormat = "on-campus"
    featured: bool = False
    capacity: int = Field(..., ge=0, le=100000)


class EventUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    date: Optional[datetime] = None
    location: Optional[str] = Field(None, max_length=255)
    event_type: Optional[str] = Field(None, min_length=1, max_length=50)
    event_format: Optional[EventFormat] = None
    featured: Optional[bool] = None
    status: Optional[EventStatus] = None
    capacity: Optional[int] = Field(None, ge=0, le=100000)


class EventFilters(BaseModel):
    """Listing filters. Every field also becomes part of the cache key."""

    upcoming_only: bool = True
    event_type: Optional[str] = None
    event_format: Optional[EventFormat] = None
    featured: Optional[bool] = None
    status: Optional[EventStatus] = None


class EventResponse(BaseModel):
    id: int
    slug: Optional[str]
    title: str
    description: Optional[str]
    date: datetime
    location: Optional[str]
    event_type: str
    event_format: str
    featured: bool
    status: str
    capacity: int
    spots_taken: int
    spots_left: int
    created_at: datetime

    model_config = {"from_attributes": True}


class EventListResponse(BaseModel):
    events: list[EventResponse]
    total: int
    page: int
    page_size: int
    cached: bool = False
