"""
Exceptions raised by the maintenance engine.

Each carries a stable error code and the HTTP status the API layer answers
with, so request handlers and batch jobs can share one taxonomy.
"""

from typing import Any, Optional


class MaintenanceError(Exception):
    """Base class for all engine errors"""

    code = "MAINTENANCE_ERROR"
    status_code = 500

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {"detail": self.message, "code": self.code, "details": self.details}

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class NotFoundError(MaintenanceError):
    """Asset, task, complaint, unit, building or work order is missing"""

    code = "NOT_FOUND"
    status_code = 404


class InvalidStateError(MaintenanceError):
    """Entity is in a state that does not allow the operation"""

    code = "INVALID_STATE"
    status_code = 400


class ValidationError(MaintenanceError):
    code = "VALIDATION_ERROR"
    status_code = 400


class StoreError(MaintenanceError):
    """Underlying persistence failure"""

    code = "STORE_ERROR"
    status_code = 500


class DuplicateError(StoreError):
    """A uniqueness constraint rejected the write"""

    code = "DUPLICATE"
    status_code = 409
