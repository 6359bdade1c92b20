"""
Pydantic schemas for RSVP and registration request/response validation.

Name and email are deliberately optional here: their presence and format are
checked by the admission service so a missing field is reported the same way
as a malformed one.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from careerhub.services.admission_service import Participant


class RSVPCreate(BaseModel):
    name: Optional[str] = Field(None, max_length=200)
    email: Optional[str] = Field(None, max_length=320)
    phone: Optional[str] = Field(None, max_length=50)
    year: Optional[str] = Field(None, max_length=50)
    program: Optional[str] = Field(None, max_length=200)
    consent: bool = False

    def to_participant(self) -> Participant:
        return Participant(
            name=self.name or "",
            email=self.email or "",
            phone=self.phone or None,
            year=self.year or None,
            program=self.program or None,
            consent_updates=self.consent,
        )


class AdmissionResponse(BaseModel):
    outcome: Literal["seated", "waitlisted"]
    waitlist_position: Optional[int] = None
    registration_id: int
    message: str


class RegistrationResponse(BaseModel):
    id: int
    event_id: int
    name: str
    email: str
    phone: Optional[str]
    year: Optional[str]
    program: Optional[str]
    consent_updates: bool
    on_waitlist: bool
    waitlist_position: Optional[int]
    status: str
    created_at: datetime

    model_config = {"from_attributes": True}


class EventRegistrationsResponse(BaseModel):
    confirmed: list[RegistrationResponse]
    waitlist: list[RegistrationResponse]
    cancelled: list[RegistrationResponse] = []
    total: int


class RegistrationCancelResponse(BaseModel):
    message: str
    registration_id: int
    status: str
