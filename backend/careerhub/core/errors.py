"""
Error hierarchy for the RSVP service.

Every error carries a stable code, a category and the HTTP status the API
layer answers with. Services raise these; api/error_handlers.py renders them.

Admission failures come in four kinds:
  - InvalidInputError: malformed participant, rejected before any storage access
  - NotFoundError: referenced event does not exist
  - DuplicateRegistrationError: participant already holds an active registration
  - PersistenceError: the database failed; the caller may retry admit()
"""

from enum import Enum
from typing import Any, Optional


class ErrorCategory(str, Enum):
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    DATABASE = "database"
    INTERNAL = "internal"


class CareerHubError(Exception):
    """Base exception for all service errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        http_status: int = 500,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.http_status = http_status
        self.details = details or {}

    def to_response(self) -> dict:
        body = {
            "code": self.code,
            "message": self.message,
            "category": self.category.value,
        }
        if self.details:
            body["details"] = self.details
        return {"error": body}


class InvalidInputError(CareerHubError):
    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(
            message, "INVALID_INPUT", ErrorCategory.VALIDATION, 400,
            {"field": field} if field else None,
        )
        self.field = field


class NotFoundError(CareerHubError):
    def __init__(self, resource_type: str, resource_id: Any):
        super().__init__(
            f"{resource_type} {resource_id} not found",
            "NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class DuplicateRegistrationError(CareerHubError):
    def __init__(self, event_id: int):
        super().__init__(
            "You have already registered for this event",
            "DUPLICATE_REGISTRATION", ErrorCategory.CONFLICT, 400,
        )
        self.event_id = event_id


class PersistenceError(CareerHubError):
    def __init__(self, operation: str, message: str = "Database operation failed"):
        super().__init__(
            f"{message} ({operation})",
            "PERSISTENCE_ERROR", ErrorCategory.DATABASE, 500,
        )
        self.operation = operation


class ConflictError(CareerHubError):
    def __init__(self, message: str):
        super().__init__(message, "CONFLICT", ErrorCategory.CONFLICT, 409)


class RegistrationNotCancellableError(CareerHubError):
    def __init__(self, registration_id: int, reason: str):
        super().__init__(
            f"Registration {registration_id} cannot be cancelled: {reason}",
            "REGISTRATION_NOT_CANCELLABLE", ErrorCategory.CONFLICT, 409,
        )
        self.registration_id = registration_id
