"""
Registration endpoints: cancellation.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from careerhub.db.session import get_db
from careerhub.schemas.registration import RegistrationCancelResponse
from careerhub.services.cache_service import invalidate_event_cache
from careerhub.services.registration_service import cancel_registration

router = APIRouter(prefix="/registrations", tags=["Registrations"])


@router.delete("/{registration_id}", response_model=RegistrationCancelResponse)
async def cancel_registration_endpoint(
    registration_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Cancel a seated registration and release the seat back to the event."""
    registration = await cancel_registration(db, registration_id)
    await invalidate_event_cache()
    return RegistrationCancelResponse(
        message="Registration cancelled successfully",
        registration_id=registration.id,
        status=registration.status,
    )
