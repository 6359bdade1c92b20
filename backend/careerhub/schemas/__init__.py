from careerhub.schemas.event import (
    EventCreate,
    EventFilters,
    EventListResponse,
    EventResponse,
    EventUpdate,
)
from careerhub.schemas.registration import (
    AdmissionResponse,
    EventRegistrationsResponse,
    RegistrationCancelResponse,
    RegistrationResponse,
    RSVPCreate,
)

__all__ = [
    "EventCreate", "EventUpdate", "EventFilters", "EventResponse", "EventListResponse",
    "RSVPCreate", "AdmissionResponse", "RegistrationResponse",
    "EventRegistrationsResponse", "RegistrationCancelResponse",
]
