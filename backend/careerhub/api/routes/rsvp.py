"""
RSVP endpoints: admission and per-event registration lists.
"""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from careerhub.db.session import get_db
from careerhub.schemas.registration import (
    AdmissionResponse,
    EventRegistrationsResponse,
    RegistrationResponse,
    RSVPCreate,
)
from careerhub.services.admission_service import Outcome, admit
from careerhub.services.cache_service import invalidate_event_cache
from careerhub.services.interfaces.registration_store import RegistrationStore
from careerhub.services.registration_service import list_event_registrations
from careerhub.services.registration_store import SqlAlchemyRegistrationStore

router = APIRouter(prefix="/events", tags=["RSVP"])


def get_registration_store(db: AsyncSession = Depends(get_db)) -> RegistrationStore:
    return SqlAlchemyRegistrationStore(db)


@router.post("/{event_id}/rsvp", response_model=AdmissionResponse, status_code=status.HTTP_201_CREATED)
async def rsvp_endpoint(
    event_id: int,
    rsvp_data: RSVPCreate,
    store: RegistrationStore = Depends(get_registration_store),
):
    """
    Register for an event.

    Seats the participant while capacity remains, otherwise places them on
    the waitlist. One active registration per email (case-insensitive).
    """
    result = await admit(store, event_id, rsvp_data.to_participant())
    if result.outcome is Outcome.SEATED:
        # spots_left changed
        await invalidate_event_cache()

    return AdmissionResponse(
        outcome=result.outcome.value,
        waitlist_position=result.waitlist_position,
        registration_id=result.registration.id,
        message=result.message,
    )


@router.get("/{event_id}/registrations", response_model=EventRegistrationsResponse)
async def list_registrations_endpoint(
    event_id: int,
    registration_status: Optional[Literal["confirmed", "cancelled"]] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
):
    """Registrations split into confirmed, waitlist (by position) and cancelled."""
    registrations = await list_event_registrations(db, event_id, registration_status)
    return EventRegistrationsResponse(
        confirmed=[RegistrationResponse.model_validate(r) for r in registrations.confirmed],
        waitlist=[RegistrationResponse.model_validate(r) for r in registrations.waitlist],
        cancelled=[RegistrationResponse.model_validate(r) for r in registrations.cancelled],
        total=sum(len(group) for group in registrations),
    )
