"""
Async RPC client for the remote function backend.

Every remote operation is a named query or mutation posted as JSON:

    POST /api/query     {"path": "hr/pipeline:getStagePage", "args": {...}, "format": "json"}
    POST /api/mutation  {"path": "hr/pipeline:moveApplicationStage", ...}

A successful call answers ``{"status": "success", "value": ...}``; a function
that throws answers ``{"status": "error", "errorMessage": ..., "errorData": ...}``.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional, TypeVar

import httpx
import pydantic

from hr_pipeline.core.config import settings
from hr_pipeline.errors import NetworkOrBackendFailure, PermissionDenied, ValidationError

logger = logging.getLogger(__name__)

_PERMISSION_PREFIXES = ("permission denied", "unauthorized", "forbidden")

ParsedT = TypeVar("ParsedT")


def _strip_none(args: Dict[str, Any]) -> Dict[str, Any]:
    """Omit unset optional arguments; the backend rejects explicit nulls."""
    return {key: value for key, value in args.items() if value is not None}


def parse_response(parser: Callable[[Any], ParsedT], value: Any, path: str) -> ParsedT:
    """Validate a successful response value, treating a bad shape as a backend failure."""
    try:
        return parser(value)
    except pydantic.ValidationError as exc:
        logger.warning("Backend %s returned a malformed %s: %s", path, exc.title, exc)
        raise NetworkOrBackendFailure(
            f"Malformed backend response for {path}",
            {
                "path": path,
                "errors": [{"loc": list(error["loc"]), "msg": error["msg"]} for error in exc.errors()],
            },
        ) from exc


def _function_error(path: str, body: Dict[str, Any]) -> Exception:
    message = str(body.get("errorMessage") or "Backend function failed")
    details: Dict[str, Any] = {"path": path}
    if body.get("errorData") is not None:
        details["error_data"] = body["errorData"]
    if message.strip().lower().startswith(_PERMISSION_PREFIXES):
        return PermissionDenied(message, details)
    return ValidationError(message, details)


class BackendClient:
    """Thin wrapper over ``httpx.AsyncClient`` speaking the function RPC protocol."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        auth_token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        headers = {"Content-Type": "application/json"}
        token = auth_token if auth_token is not None else settings.BACKEND_AUTH_TOKEN
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.BACKEND_URL,
            headers=headers,
            timeout=timeout if timeout is not None else settings.BACKEND_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def query(self, path: str, args: Optional[Dict[str, Any]] = None) -> Any:
        return await self._call("query", path, args or {})

    async def mutation(self, path: str, args: Optional[Dict[str, Any]] = None) -> Any:
        return await self._call("mutation", path, args or {})

    async def _call(self, kind: str, path: str, args: Dict[str, Any]) -> Any:
        logger.debug("Backend %s %s", kind, path)
        try:
            response = await self._client.post(
                f"/api/{kind}",
                json={"path": path, "args": _strip_none(args), "format": "json"},
            )
        except httpx.HTTPError as exc:
            logger.warning("Backend %s %s failed: %s", kind, path, exc)
            raise NetworkOrBackendFailure(
                f"Could not reach backend for {path}",
                {"path": path, "reason": str(exc)},
            ) from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise NetworkOrBackendFailure(
                f"Malformed backend response for {path}",
                {"path": path, "status_code": response.status_code},
            ) from exc

        if isinstance(body, dict) and body.get("status") == "error" and body.get("errorMessage"):
            error = _function_error(path, body)
            logger.info("Backend %s %s rejected: %s", kind, path, error)
            raise error

        if not response.is_success or not isinstance(body, dict) or body.get("status") != "success":
            raise NetworkOrBackendFailure(
                f"Unexpected backend response for {path}",
                {"path": path, "status_code": response.status_code},
            )

        return body.get("value")

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "BackendClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
