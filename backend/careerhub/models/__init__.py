from careerhub.models.event import Event
from careerhub.models.registration import Registration

__all__ = ["Event", "Registration"]
