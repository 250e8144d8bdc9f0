"""Structured error helpers and the pipeline error taxonomy."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.responses import JSONResponse


def build_error_payload(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    payload = {"error": {"code": code, "message": message}}
    if details is not None:
        payload["error"]["details"] = details
    return payload


class AppError(Exception):
    """Application-scoped error for standardized API responses."""

    def __init__(self, status_code: int, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message
        self.details = details
        self.payload = build_error_payload(code, message, details)


async def app_error_handler(_: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.payload)


def raise_app_error(status_code: int, code: str, message: str, details: Optional[Dict[str, Any]] = None) -> None:
    """Raise an AppError with a standardized error shape."""
    raise AppError(status_code, code, message, details)


class PipelineError(AppError):
    """
    Base class for every failure the pipeline engine reports.

    Subclasses pin the HTTP status and error code so the presentation layer
    can render them without inspecting the type.
    """

    status_code = 500
    code = "PIPELINE_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(type(self).status_code, type(self).code, message, details)


class ValidationError(PipelineError):
    """Rejected input: illegal stage transition, missing rejection reason, bad conversion state."""

    status_code = 422
    code = "VALIDATION_ERROR"


class PermissionDenied(PipelineError):
    """Caller's role level is too low for the requested operation."""

    status_code = 403
    code = "PERMISSION_DENIED"


class NoManagersAvailable(PipelineError):
    """No active manager exists to supervise a converted account."""

    status_code = 409
    code = "NO_MANAGERS_AVAILABLE"


class NetworkOrBackendFailure(PipelineError):
    """Transport failure or malformed response from the remote backend."""

    status_code = 502
    code = "BACKEND_FAILURE"


class NotFound(PipelineError):
    """Requested lane or application is not materialized in the live pipeline."""

    status_code = 404
    code = "NOT_FOUND"
