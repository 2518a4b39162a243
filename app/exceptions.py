# app/exceptions.py
"""
Domain error taxonomy.
Every failure the services raise maps to one error code and one HTTP status;
app.main renders them as {"detail": ..., "code": ...}.
"""

from typing import Optional


class AnomalyEngineError(Exception):
    """Base class for all errors raised by the services."""

    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"detail": self.message, "code": self.error_code}


class MissingFieldError(AnomalyEngineError):
    status_code = 400
    error_code = "MISSING_FIELD"
    default_message = "Missing required fields"

    def __init__(self, field: Optional[str] = None):
        self.field = field
        super().__init__(f"Missing required field: {field}" if field else None)


class InvalidInputError(AnomalyEngineError):
    status_code = 400
    error_code = "INVALID_INPUT"
    default_message = "Invalid input"


class ForbiddenError(AnomalyEngineError):
    status_code = 403
    error_code = "FORBIDDEN"
    default_message = "Access denied"


class NotFoundError(AnomalyEngineError):
    status_code = 404
    error_code = "NOT_FOUND"
    default_message = "Not found"


class NotFoundOrForbiddenError(AnomalyEngineError):
    # Absent and foreign-owned entities are deliberately reported the same way
    status_code = 404
    error_code = "NOT_FOUND_OR_FORBIDDEN"
    default_message = "One or more cameras not found or access denied"


class StorageUnavailableError(AnomalyEngineError):
    status_code = 503
    error_code = "STORAGE_UNAVAILABLE"
    default_message = "Storage temporarily unavailable"


class ConflictError(AnomalyEngineError):
    status_code = 409
    error_code = "CONFLICT"
    default_message = "Request conflicts with current state"
