"""
Scheduling errors.

Every precondition failure in the scheduling core is raised as one of these,
before any row is written. The API layer renders them as
``{"type": ..., "message": ..., "details": {...}}`` with the matching status code.
"""

import enum
from typing import Any, Optional


class ErrorType(str, enum.Enum):
    validation = "validation"
    not_found = "not_found"
    conflict = "conflict"
    state = "state"
    authorization = "authorization"


class SchedulingError(Exception):
    """Base class for all per-request scheduling failures."""

    error_type: ErrorType = ErrorType.validation
    status_code: int = 400

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.error_type.value,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(SchedulingError):
    """Malformed or missing input."""

    error_type = ErrorType.validation
    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None, details: Optional[dict[str, Any]] = None) -> None:
        details = dict(details or {})
        if field is not None:
            details["field"] = field
        super().__init__(message, details)
        self.field = field


class NotFoundError(SchedulingError):
    error_type = ErrorType.not_found
    status_code = 404

    def __init__(self, entity: str, entity_id: Any, message: Optional[str] = None) -> None:
        super().__init__(
            message or f"{entity} not found",
            {"entity": entity, "id": entity_id},
        )
        self.entity = entity
        self.entity_id = entity_id


class ConflictError(SchedulingError):
    """
    A business rule rejected the request.

    ``reason`` is a stable machine-readable code, one of:
    time_overlap, time_off, already_assigned, already_applied,
    not_qualified, not_staff, fully_staffed, duplicate.
    """

    error_type = ErrorType.conflict
    status_code = 409

    def __init__(self, message: str, reason: str, details: Optional[dict[str, Any]] = None) -> None:
        details = dict(details or {})
        details["reason"] = reason
        super().__init__(message, details)
        self.reason = reason


class StateError(SchedulingError):
    """Operation attempted from a status that does not allow it."""

    error_type = ErrorType.state
    status_code = 409

    def __init__(self, message: str, current_status: Optional[str] = None) -> None:
        details = {"current_status": current_status} if current_status is not None else {}
        super().__init__(message, details)
        self.current_status = current_status


class AuthorizationError(SchedulingError):
    error_type = ErrorType.authorization
    status_code = 403
