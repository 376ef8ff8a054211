"""Domain errors raised by the workflow and scoring services.

Every error carries the HTTP status the API layer answers with, so routers
never translate them by hand (see ``tenderflow.main``).
"""
from typing import Any, Dict, List, Optional


class TenderflowError(Exception):
    status_code = 500

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or []

    def to_dict(self) -> dict:
        payload = {"detail": self.message}
        if self.errors:
            payload["errors"] = self.errors
        return payload


class NotFoundError(TenderflowError):
    status_code = 404


class ForbiddenError(TenderflowError):
    status_code = 403


class AuthenticationError(TenderflowError):
    status_code = 401


class ValidationError(TenderflowError):
    """Malformed payload. ``errors`` holds ``{"field": ..., "message": ...}`` items."""
    status_code = 422

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(f"Invalid value for '{field}': {message}", [{"field": field, "message": message}])


class ConflictError(TenderflowError):
    """The document changed underneath the caller; re-read and retry."""
    status_code = 409


class InvalidStageError(ConflictError):
    pass


class EvaluationLockedError(ConflictError):
    pass


class DependencyFailure(TenderflowError):
    """Database, storage or AI provider unreachable. Retryable."""
    status_code = 503
