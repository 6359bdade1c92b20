"""
Admission service: turns one RSVP request into a seat or a waitlist slot.

ADMISSION ALGORITHM
===================

  1. Validate the participant (non-empty name, local@domain email)
  2. Normalize the email (trim + casefold) before any lookup or insert
  3. Load the event (NotFoundError if missing)
  4. Reject if an active registration exists for (event, normalized email)
  5. spots_left = capacity - spots_taken
     > 0  -> insert a confirmed registration and take a seat atomically
     <= 0 -> waitlist at position (active waitlisted count + 1)

Step 4 is only the fast path. The store's unique index is what actually
prevents two concurrent requests from both registering the same email.

Step 5 reads spots_taken without a lock. Two requests can both see the last
seat; the store's guarded increment lets exactly one of them take it and
raises SeatUnavailable for the other, which is then waitlisted.

No error is retried here. A caller retrying after PersistenceError cannot
double-admit: once a row exists the retry fails at step 4.
"""

import re
import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from careerhub.core.errors import CareerHubError, DuplicateRegistrationError, InvalidInputError
from careerhub.core.logging import get_logger
from careerhub.core.metrics import admission_latency, record_admission, seat_guard_misses
from careerhub.models.registration import STATUS_CONFIRMED, Registration
from careerhub.services.interfaces.registration_store import RegistrationStore, SeatUnavailable

logger = get_logger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

_OUTCOME_BY_ERROR_CODE = {
    "INVALID_INPUT": "invalid_input",
    "NOT_FOUND": "not_found",
    "DUPLICATE_REGISTRATION": "duplicate",
}


class Outcome(str, Enum):
    SEATED = "seated"
    WAITLISTED = "waitlisted"


@dataclass(frozen=True)
class Participant:
    name: str
    email: str
    phone: Optional[str] = None
    year: Optional[str] = None
    program: Optional[str] = None
    consent_updates: bool = False


@dataclass(frozen=True)
class AdmissionResult:
    outcome: Outcome
    registration: Registration
    waitlist_position: Optional[int] = None

    @property
    def message(self) -> str:
        if self.outcome is Outcome.WAITLISTED:
            return f"You're on the waitlist (position #{self.waitlist_position})"
        return "Registration confirmed successfully"


def normalize_email(email: str) -> str:
    return email.strip().casefold()


def validate_participant(participant: Participant) -> Participant:
    """Return the participant with trimmed name and email, or raise InvalidInputError."""
    name = (participant.name or "").strip()
    if not name:
        raise InvalidInputError("Name is required", field="name")

    email = (participant.email or "").strip()
    if not email:
        raise InvalidInputError("Email is required", field="email")
    if not EMAIL_PATTERN.match(email):
        raise InvalidInputError("Email address is not valid", field="email")

    return replace(participant, name=name, email=email)


def _new_registration(
    event_id: int, participant: Participant, waitlist_position: Optional[int] = None
) -> Registration:
    return Registration(
        event_id=event_id,
        name=participant.name,
        email=participant.email,
        email_normalized=normalize_email(participant.email),
        phone=participant.phone,
        year=participant.year,
        program=participant.program,
        consent_updates=participant.consent_updates,
        on_waitlist=waitlist_position is not None,
        waitlist_position=waitlist_position,
        status=STATUS_CONFIRMED,
    )


async def admit(
    store: RegistrationStore,
    event_id: int,
    participant: Participant,
) -> AdmissionResult:
    """
    Seat or waitlist one participant for an event.

    Raises:
        InvalidInputError, NotFoundError, DuplicateRegistrationError, PersistenceError
    """
    start = time.perf_counter()
    try:
        result = await _admit(store, event_id, participant)
    except CareerHubError as exc:
        record_admission(_OUTCOME_BY_ERROR_CODE.get(exc.code, "error"))
        logger.warning(
            "registration_rejected",
            event_id=event_id,
            code=exc.code,
            reason=exc.message,
        )
        raise
    finally:
        admission_latency.observe(time.perf_counter() - start)

    record_admission(result.outcome.value)
    return result


async def _admit(
    store: RegistrationStore, event_id: int, participant: Participant
) -> AdmissionResult:
    participant = validate_participant(participant)
    email_key = normalize_email(participant.email)

    event = await store.find_event(event_id)

    if await store.find_active_registration(event_id, email_key) is not None:
        raise DuplicateRegistrationError(event_id)

    spots_left = event.capacity - event.spots_taken
    if spots_left > 0:
        try:
            registration = await store.insert_registration(
                _new_registration(event_id, participant), increment_occupancy=True
            )
        except SeatUnavailable:
            seat_guard_misses.inc()
            logger.info("seat_guard_missed", event_id=event_id, email=email_key)
        else:
            logger.info(
                "registration_seated",
                event_id=event_id,
                registration_id=registration.id,
                email=email_key,
            )
            return AdmissionResult(Outcome.SEATED, registration)

    position = await store.count_waitlisted(event_id) + 1
    registration = await store.insert_registration(
        _new_registration(event_id, participant, waitlist_position=position),
        increment_occupancy=False,
    )
    logger.info(
        "registration_waitlisted",
        event_id=event_id,
        registration_id=registration.id,
        email=email_key,
        position=registration.waitlist_position,
    )
    return AdmissionResult(Outcome.WAITLISTED, registration, registration.waitlist_position)
