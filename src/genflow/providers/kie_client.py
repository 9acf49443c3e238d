"""Kie.ai HTTP transport.

Handles bearer authentication, JSON encoding, error envelopes and the retry
policy shared by every model: 429 and 500 responses and network failures are
retried with exponential backoff, every other non-2xx status is raised on the
first attempt.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

import httpx

from ..core.config import AppConfig
from ..exceptions import (
    ConfigurationError,
    KieError,
    KieNetworkError,
    KieResponseError,
    api_error_for_status,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.kie.ai"
DEFAULT_MAX_RETRIES = 3
DEFAULT_TIMEOUT_SECONDS = 30.0
BACKOFF_BASE_SECONDS = 1.0
BACKOFF_CAP_SECONDS = 10.0

SleepFunc = Callable[[float], Awaitable[None]]
# (filename, content, content type), as accepted by httpx ``files=``
FileField = tuple[str, bytes, str]


def backoff_delay(attempt: int) -> float:
    """Delay before retry ``attempt`` (1-based): 1s, 2s, 4s, ... capped at 10s."""

    if attempt < 1:
        return 0.0
    return min(BACKOFF_BASE_SECONDS * 2 ** (attempt - 1), BACKOFF_CAP_SECONDS)


class KieClient:
    """Authenticated JSON client for the Kie.ai API."""

    def __init__(
        self,
        *,
        api_key: str | None,
        base_url: str = DEFAULT_BASE_URL,
        max_retries: int = DEFAULT_MAX_RETRIES,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        http_client: httpx.AsyncClient | None = None,
        sleep: SleepFunc | None = None,
    ) -> None:
        if not api_key or not api_key.strip():
            raise ConfigurationError("KIE_API_KEY environment variable is not set")
        self._api_key = api_key.strip()
        self.base_url = base_url.rstrip("/")
        self.max_retries = max(0, max_retries)
        self.timeout_seconds = timeout_seconds
        self._client = http_client or httpx.AsyncClient()
        self._owns_client = http_client is None
        self._sleep: SleepFunc = sleep or asyncio.sleep

    @classmethod
    def from_config(cls, config: AppConfig, **kwargs: Any) -> "KieClient":
        return cls(
            api_key=config.kie_api_key,
            base_url=config.kie_base_url,
            max_retries=config.request_max_retries,
            timeout_seconds=config.request_timeout_seconds,
            **kwargs,
        )

    async def get(
        self,
        path: str,
        params: Mapping[str, Any] | None = None,
        *,
        max_retries: int | None = None,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        return await self.send(
            "GET", path, params=params, max_retries=max_retries, timeout=timeout
        )

    async def post(
        self,
        path: str,
        body: Mapping[str, Any],
        *,
        max_retries: int | None = None,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        return await self.send(
            "POST", path, body, max_retries=max_retries, timeout=timeout
        )

    async def upload(
        self,
        url: str,
        *,
        files: Mapping[str, FileField],
        data: Mapping[str, str] | None = None,
        max_retries: int | None = None,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        """POST a multipart form to an absolute ``url`` (the upload host)."""

        return await self.send(
            "POST", url, files=files, data=data, max_retries=max_retries, timeout=timeout
        )

    async def send(
        self,
        method: str,
        path: str,
        body: Mapping[str, Any] | None = None,
        *,
        params: Mapping[str, Any] | None = None,
        files: Mapping[str, FileField] | None = None,
        data: Mapping[str, str] | None = None,
        max_retries: int | None = None,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        """Send a request and return the parsed response envelope.

        ``path`` is joined to ``base_url`` unless it is already absolute.
        Each attempt is bounded as a whole by ``timeout``; an attempt that
        overruns it is aborted and retried as a network failure. Raises the
        last observed :class:`~genflow.exceptions.KieError` once
        ``max_retries`` retries are exhausted.
        """

        retries = self.max_retries if max_retries is None else max(0, max_retries)
        attempt_timeout = self.timeout_seconds if timeout is None else timeout
        url = path if path.startswith(("http://", "https://")) else f"{self.base_url}{path}"
        query = _clean_params(params)
        last_error: KieError | None = None

        for attempt in range(retries + 1):
            if attempt > 0:
                delay = backoff_delay(attempt)
                logger.warning(
                    "kie.request.retry",
                    extra={
                        "method": method,
                        "path": path,
                        "attempt": attempt + 1,
                        "delay": delay,
                        "error": str(last_error),
                    },
                )
                await self._sleep(delay)

            try:
                response = await asyncio.wait_for(
                    self._client.request(
                        method,
                        url,
                        json=dict(body) if body is not None else None,
                        params=query,
                        files=dict(files) if files is not None else None,
                        data=dict(data) if data is not None else None,
                        headers=self._headers(multipart=files is not None),
                        timeout=attempt_timeout,
                    ),
                    timeout=attempt_timeout,
                )
            except asyncio.TimeoutError as exc:
                network_error = KieNetworkError(
                    f"Request {method} {path} exceeded {attempt_timeout:g}s timeout"
                )
                network_error.__cause__ = exc
                last_error = network_error
                continue
            except httpx.TransportError as exc:
                network_error = KieNetworkError(
                    f"Network error during {method} {path}: {exc!r}"
                )
                network_error.__cause__ = exc
                last_error = network_error
                continue

            envelope = _parse_envelope(response)
            if response.is_success:
                if envelope is None:
                    raise KieResponseError(
                        f"Kie.ai returned a non-JSON body for {method} {path}"
                    )
                return envelope

            envelope = envelope or {}
            error = api_error_for_status(
                response.status_code,
                msg=envelope.get("msg"),
                code=envelope.get("code"),
                details=envelope.get("details"),
            )
            if not error.retryable:
                logger.error(
                    "kie.request.error",
                    extra={
                        "method": method,
                        "path": path,
                        "status": response.status_code,
                        "detail": error.message,
                    },
                )
                raise error
            last_error = error

        assert last_error is not None
        logger.error(
            "kie.request.exhausted",
            extra={
                "method": method,
                "path": path,
                "attempts": retries + 1,
                "error": str(last_error),
            },
        )
        raise last_error

    def _headers(self, *, multipart: bool = False) -> dict[str, str]:
        headers = {"Authorization": f"Bearer {self._api_key}"}
        # httpx sets the multipart boundary itself
        if not multipart:
            headers["Content-Type"] = "application/json"
        return headers

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


def _clean_params(params: Mapping[str, Any] | None) -> dict[str, str] | None:
    if not params:
        return None
    return {key: str(value) for key, value in params.items() if value is not None}


def _parse_envelope(response: httpx.Response) -> dict[str, Any] | None:
    try:
        data = response.json()
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    return data
