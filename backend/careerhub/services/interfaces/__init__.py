"""
Service interfaces for dependency inversion.
Allows swapping implementations without changing business logic.
"""

from .registration_store import RegistrationStore, SeatUnavailable

__all__ = ['RegistrationStore', 'SeatUnavailable']
