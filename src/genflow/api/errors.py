"""Reusable error primitives for API exception handling."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from fastapi import Request, status
from fastapi.responses import JSONResponse

from ..exceptions import KieApiError, KieError, TaskNotFoundError

# provider statuses that describe the caller's request and are passed through
FORWARDED_PROVIDER_STATUSES = frozenset({401, 402, 422})


@dataclass(slots=True)
class ApiError(Exception):
    """Structured application-level error for HTTP handlers."""

    status_code: int
    code: str
    message: str
    headers: Mapping[str, str] | None = None

    def to_response(self) -> JSONResponse:
        """Materialise the error into a ``JSONResponse`` instance."""

        return JSONResponse(
            status_code=self.status_code,
            content={"error": {"code": self.code, "message": self.message}},
            headers=dict(self.headers or {}),
        )


async def api_error_handler(_: Request, exc: ApiError) -> JSONResponse:
    """Convert :class:`ApiError` exceptions into JSON payloads."""

    return exc.to_response()


def task_not_found_error(exc: TaskNotFoundError) -> ApiError:
    return ApiError(status.HTTP_404_NOT_FOUND, "task_not_found", str(exc))


def provider_error(exc: KieError) -> ApiError:
    """Map a Kie.ai failure onto the HTTP status returned to the caller."""

    if isinstance(exc, KieApiError) and exc.status_code in FORWARDED_PROVIDER_STATUSES:
        return ApiError(exc.status_code, "provider_rejected", exc.message)
    return ApiError(status.HTTP_502_BAD_GATEWAY, "provider_error", str(exc))


__all__ = [
    "ApiError",
    "FORWARDED_PROVIDER_STATUSES",
    "api_error_handler",
    "provider_error",
    "task_not_found_error",
]
