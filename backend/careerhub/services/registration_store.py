"""
SQLAlchemy implementation of the registration store.

ATOMICITY
=========

Seated insert:
  UPDATE events SET spots_taken = spots_taken + 1
   WHERE id = :event_id AND spots_taken < capacity
  INSERT INTO registrations ...
  COMMIT

  If the UPDATE matches no row the transaction is rolled back and
  SeatUnavailable is raised, so the counter never moves without a matching
  registration row and never overshoots capacity.

Waitlisted insert:
  SELECT ... FROM events WHERE id = :event_id FOR UPDATE
  SELECT count(*) of active waitlisted registrations
  INSERT INTO registrations ... (waitlist_position = count + 1)
  COMMIT

  The row lock serializes concurrent waitlisters on the same event, so the
  count and the insert see the same waitlist. On SQLite FOR UPDATE is not
  rendered; BEGIN IMMEDIATE (see db/session.py) serializes instead.

Duplicates:
  The partial unique index on (event_id, email_normalized) rejects a second
  active registration even when two requests pass the application check at
  the same time. That IntegrityError becomes DuplicateRegistrationError.
"""

from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from careerhub.core.errors import DuplicateRegistrationError, NotFoundError, PersistenceError
from careerhub.core.logging import get_logger
from careerhub.models.event import Event
from careerhub.models.registration import STATUS_CANCELLED, UQ_ACTIVE_EMAIL, Registration
from careerhub.services.interfaces.registration_store import RegistrationStore, SeatUnavailable

logger = get_logger(__name__)


def _is_active_email_violation(exc: IntegrityError) -> bool:
    # PostgreSQL names the index; SQLite lists the columns
    detail = str(exc.orig)
    return UQ_ACTIVE_EMAIL in detail or "email_normalized" in detail


class SqlAlchemyRegistrationStore(RegistrationStore):
    """Registration store bound to one request's AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _failure(self, operation: str, exc: Exception) -> PersistenceError:
        await self.db.rollback()
        logger.error("registration_store_failed", operation=operation, error=str(exc))
        return PersistenceError(operation)

    async def find_event(self, event_id: int) -> Event:
        try:
            result = await self.db.execute(select(Event).where(Event.id == event_id))
            event = result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise await self._failure("find_event", exc) from exc

        if event is None:
            raise NotFoundError("Event", event_id)
        return event

    async def find_active_registration(
        self, event_id: int, normalized_email: str
    ) -> Optional[Registration]:
        try:
            result = await self.db.execute(
                select(Registration).where(
                    Registration.event_id == event_id,
                    Registration.email_normalized == normalized_email,
                    Registration.status != STATUS_CANCELLED,
                )
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise await self._failure("find_active_registration", exc) from exc

    async def count_waitlisted(self, event_id: int) -> int:
        try:
            count = await self.db.scalar(
                select(func.count(Registration.id)).where(
                    Registration.event_id == event_id,
                    Registration.on_waitlist.is_(True),
                    Registration.status != STATUS_CANCELLED,
                )
            )
        except SQLAlchemyError as exc:
            raise await self._failure("count_waitlisted", exc) from exc
        return int(count or 0)

    async def insert_registration(
        self, registration: Registration, increment_occupancy: bool
    ) -> Registration:
        if increment_occupancy and registration.on_waitlist:
            raise ValueError("A waitlisted registration cannot take a seat")

        event_id = registration.event_id
        try:
            if increment_occupancy:
                await self._take_seat(event_id)
            elif registration.on_waitlist:
                await self._assign_waitlist_position(registration)

            self.db.add(registration)
            await self.db.flush()
            await self.db.commit()
        except IntegrityError as exc:
            await self.db.rollback()
            if _is_active_email_violation(exc):
                logger.info(
                    "registration_duplicate_rejected_by_index",
                    event_id=event_id,
                    email=registration.email_normalized,
                )
                raise DuplicateRegistrationError(event_id) from exc
            raise await self._failure("insert_registration", exc) from exc
        except SQLAlchemyError as exc:
            raise await self._failure("insert_registration", exc) from exc

        return registration

    async def _take_seat(self, event_id: int) -> None:
        result = await self.db.execute(
            update(Event)
            .where(Event.id == event_id, Event.spots_taken < Event.capacity)
            .values(spots_taken=Event.spots_taken + 1)
        )
        if result.rowcount != 1:
            await self.db.rollback()
            raise SeatUnavailable(event_id)

    async def _assign_waitlist_position(self, registration: Registration) -> None:
        await self.db.execute(
            select(Event.id).where(Event.id == registration.event_id).with_for_update()
        )
        position = await self.count_waitlisted(registration.event_id) + 1
        if registration.waitlist_position != position:
            logger.info(
                "waitlist_position_reassigned",
                event_id=registration.event_id,
                requested=registration.waitlist_position,
                assigned=position,
            )
            registration.waitlist_position = position
