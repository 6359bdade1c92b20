"""
Registration listing and cancellation.

Only seated registrations can be cancelled. Waitlist positions are assigned
as (active waitlisted count + 1) and nothing promotes or renumbers the
waitlist, so removing a waitlisted row would let the next RSVP reuse a
position that is still held.

Lock order matches admission: the event row first, then registration rows.
"""

from typing import NamedTuple, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from careerhub.core.errors import NotFoundError, RegistrationNotCancellableError
from careerhub.core.logging import get_logger
from careerhub.models.event import Event
from careerhub.models.registration import STATUS_CANCELLED, STATUS_CONFIRMED, Registration
from careerhub.services.event_service import get_event

logger = get_logger(__name__)


class EventRegistrations(NamedTuple):
    confirmed: list[Registration]
    waitlist: list[Registration]
    cancelled: list[Registration]


async def list_event_registrations(
    db: AsyncSession, event_id: int, status: Optional[str] = None
) -> EventRegistrations:
    """
    Registrations for an event, split into seated, waitlisted and cancelled.
    `status` ("confirmed" or "cancelled") restricts which rows are loaded.
    """
    await get_event(db, event_id)

    query = select(Registration).where(Registration.event_id == event_id)
    if status:
        query = query.where(Registration.status == status)

    result = await db.execute(
        query.order_by(Registration.created_at.asc(), Registration.id.asc())
    )
    registrations = list(result.scalars().all())

    active = [r for r in registrations if r.is_active]
    return EventRegistrations(
        confirmed=[r for r in active if not r.on_waitlist],
        waitlist=sorted(
            (r for r in active if r.on_waitlist),
            key=lambda r: r.waitlist_position,
        ),
        cancelled=[r for r in registrations if not r.is_active],
    )


async def cancel_registration(db: AsyncSession, registration_id: int) -> Registration:
    """
    Cancel a seated registration and release its seat.
    The status flip is conditional so two concurrent cancels release one seat.
    """
    result = await db.execute(select(Registration).where(Registration.id == registration_id))
    registration = result.scalar_one_or_none()

    if not registration:
        raise NotFoundError("Registration", registration_id)

    if registration.status == STATUS_CANCELLED:
        raise RegistrationNotCancellableError(registration_id, "already cancelled")

    if registration.on_waitlist:
        raise RegistrationNotCancellableError(
            registration_id, "waitlisted registrations keep their position"
        )

    await db.execute(
        select(Event.id).where(Event.id == registration.event_id).with_for_update()
    )
    flipped = await db.execute(
        update(Registration)
        .where(
            Registration.id == registration_id,
            Registration.status == STATUS_CONFIRMED,
        )
        .values(status=STATUS_CANCELLED)
    )
    if flipped.rowcount != 1:
        raise RegistrationNotCancellableError(registration_id, "already cancelled")

    await db.execute(
        update(Event)
        .where(Event.id == registration.event_id, Event.spots_taken > 0)
        .values(spots_taken=Event.spots_taken - 1)
    )
    await db.flush()
    await db.refresh(registration)

    logger.info(
        "registration_cancelled",
        registration_id=registration.id,
        event_id=registration.event_id,
        email=registration.email_normalized,
    )
    return registration
