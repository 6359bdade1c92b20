"""
Registration store interface.
The admission service depends on this, not on a specific database.
"""

from abc import ABC, abstractmethod
from typing import Optional

from careerhub.models.event import Event
from careerhub.models.registration import Registration


class SeatUnavailable(Exception):
    """
    Raised by insert_registration when the occupancy guard fails.

    Another admission took the last seat between the capacity read and the
    increment. Nothing was written; the caller should waitlist instead.
    """

    def __init__(self, event_id: int):
        super().__init__(f"No seat left for event {event_id}")
        self.event_id = event_id


class RegistrationStore(ABC):
    """
    Persistence operations required by the admission service.

    Implementations:
    - SqlAlchemyRegistrationStore: PostgreSQL / SQLite through an AsyncSession
    """

    @abstractmethod
    async def find_event(self, event_id: int) -> Event:
        """
        Load an event.

        Raises:
            NotFoundError: no event with this id
            PersistenceError: the store failed
        """

    @abstractmethod
    async def find_active_registration(
        self, event_id: int, normalized_email: str
    ) -> Optional[Registration]:
        """
        Return the non-cancelled registration for (event, email), if any.

        Args:
            event_id: Event ID
            normalized_email: Trimmed, case-folded email
        """

    @abstractmethod
    async def count_waitlisted(self, event_id: int) -> int:
        """Count non-cancelled waitlisted registrations for an event."""

    @abstractmethod
    async def insert_registration(
        self, registration: Registration, increment_occupancy: bool
    ) -> Registration:
        """
        Insert a registration, optionally taking one seat, atomically.

        Either both the insert and the increment happen, or neither does.
        The increment only succeeds while spots_taken < capacity.
        For waitlisted registrations the store may reassign
        waitlist_position so that positions stay strictly increasing.

        Args:
            registration: Unsaved registration
            increment_occupancy: Take a seat (seated admission)

        Returns:
            The persisted registration

        Raises:
            SeatUnavailable: increment requested but the event is full
            DuplicateRegistrationError: active registration already exists
            PersistenceError: any other store failure
        """
