"""Error kinds raised by Listly guards and services."""
from enum import Enum
from typing import Optional, List, Dict, Any


class ErrorCode(str, Enum):
    """Machine-readable error codes, mapped to transport statuses by callers."""
    VALIDATION_ERROR = "VALIDATION_ERROR"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    LIST_NOT_EMPTY = "LIST_NOT_EMPTY"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ServiceError(Exception):
    """Base class for expected service failures."""

    code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        suggestions: Optional[List[str]] = None,
        metadata: Optional[Dict[str, Any]] = None,
        code: Optional[ErrorCode] = None
    ):
        self.message = message
        self.suggestions = suggestions or []
        self.metadata = metadata or {}
        if code is not None:
            self.code = code
        super().__init__(message)


class NotFoundError(ServiceError):
    """Resource is absent, or the caller may not learn that it exists."""
    code = ErrorCode.NOT_FOUND

    def __init__(self, resource: str = "Resource", **kwargs):
        super().__init__(f"{resource} not found", **kwargs)


class ForbiddenError(ServiceError):
    """Caller has some access to the resource, but not enough for the action."""
    code = ErrorCode.FORBIDDEN


class ValidationError(ServiceError):
    """Input or business limit violated."""
    code = ErrorCode.VALIDATION_ERROR


class ConflictError(ServiceError):
    """Duplicate of something that must be unique."""
    code = ErrorCode.CONFLICT
