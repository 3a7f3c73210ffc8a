"""Custom exception types for domain, client and web layers."""
from __future__ import annotations

from typing import Any


class AppError(Exception):
    """Base app exception."""


class ValidationError(AppError):
    """Validation failure for user input, keyed by field name."""

    def __init__(self, errors: dict[str, str]):
        self.errors = dict(errors)
        super().__init__("; ".join(f"{field}: {message}" for field, message in self.errors.items()))


class ApiError(AppError):
    """Normalized failure of a backend call (non-2xx, bad envelope or transport error)."""

    def __init__(self, message: str, status_code: int | None = None, payload: Any = None):
        self.message = message
        self.status_code = status_code
        self.payload = payload
        super().__init__(message)


class UnauthorizedError(AppError):
    """The console session is missing or was rejected by a backend."""


class PermissionDeniedError(AppError):
    """Admin-only action attempted with a member role."""


class WorkflowNotFoundError(AppError):
    """Workflow id is not part of the selected project's list."""


class ExecutionInFlightError(AppError):
    """Execute invoked while a previous execution is still pending."""
