"""Application level exceptions for provider integration and persistence."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator, Mapping

from sqlalchemy import exc as sa_exc

__all__ = [
    "GenflowError",
    "ConfigurationError",
    "KieError",
    "KieApiError",
    "KieAuthError",
    "KiePaymentError",
    "KieValidationError",
    "KieRateLimitError",
    "KieServerError",
    "KieNetworkError",
    "KieResponseError",
    "NormalizationError",
    "MalformedResultError",
    "MissingResultFieldError",
    "UnknownTaskStateError",
    "RepositoryError",
    "TaskNotFoundError",
    "TaskAlreadyFinalizedError",
    "DatabaseOperationError",
    "api_error_for_status",
    "handle_sqlalchemy_errors",
]


class GenflowError(Exception):
    """Base class for application specific errors."""


class ConfigurationError(GenflowError):
    """Raised when required process configuration is missing."""


# ---------------------------------------------------------------------------
# Provider transport
# ---------------------------------------------------------------------------
class KieError(GenflowError):
    """Base class for errors raised while talking to Kie.ai."""

    retryable: bool = False


class KieApiError(KieError):
    """Non-2xx HTTP response carrying the provider error envelope."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        code: int | None = None,
        details: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.details = dict(details) if details else None


class KieAuthError(KieApiError):
    """401: the API key was rejected."""


class KiePaymentError(KieApiError):
    """402: the account has insufficient credits."""


class KieValidationError(KieApiError):
    """422: the provider rejected request parameters."""


class KieRateLimitError(KieApiError):
    """429: too many requests."""

    retryable = True


class KieServerError(KieApiError):
    """500: provider side failure."""

    retryable = True


class KieNetworkError(KieError):
    """Connection failure or per-attempt timeout."""

    retryable = True


class KieResponseError(KieError):
    """2xx response whose envelope does not match the expected contract."""


_STATUS_ERRORS: dict[int, tuple[type[KieApiError], str]] = {
    401: (KieAuthError, "Unauthorized"),
    402: (KiePaymentError, "Payment Required"),
    422: (KieValidationError, "Validation Error"),
    429: (KieRateLimitError, "Rate Limited"),
    500: (KieServerError, "Server Error"),
}


def api_error_for_status(
    status_code: int,
    *,
    msg: str | None,
    code: int | None = None,
    details: Mapping[str, Any] | None = None,
) -> KieApiError:
    """Build the :class:`KieApiError` subclass matching ``status_code``."""

    error_cls, label = _STATUS_ERRORS.get(status_code, (KieApiError, "HTTP Error"))
    message = f"{label} ({status_code}): {msg or 'Unknown error'}"
    return error_cls(message, status_code=status_code, code=code, details=details)


# ---------------------------------------------------------------------------
# Result normalization
# ---------------------------------------------------------------------------
class NormalizationError(GenflowError):
    """Provider status payload could not be normalized."""


class MalformedResultError(NormalizationError):
    """``resultJson`` is not valid JSON or holds malformed result URLs."""


class MissingResultFieldError(NormalizationError):
    """A success payload lacks the field carrying result URLs."""


class UnknownTaskStateError(NormalizationError):
    """The status field holds a value outside the documented encoding."""


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------
class RepositoryError(GenflowError):
    """Base class for persistence layer failures."""


class TaskNotFoundError(RepositoryError):
    """Raised when a generation task could not be located."""


class TaskAlreadyFinalizedError(RepositoryError):
    """Raised when a terminal update targets a task that already left PENDING."""


class DatabaseOperationError(RepositoryError):
    """Raised for unexpected database errors."""


@dataclass(slots=True)
class _EntityContext:
    """Internal helper describing the entity for error messages."""

    entity: str | None = None

    def format(self, message: str) -> str:
        if self.entity:
            return f"{self.entity}: {message}"
        return message


def _translate_sqlalchemy_error(exc: Exception, *, context: _EntityContext) -> RepositoryError:
    if isinstance(exc, sa_exc.IntegrityError):
        return DatabaseOperationError(context.format("integrity constraint violated"))
    if isinstance(exc, sa_exc.DBAPIError):
        return DatabaseOperationError(context.format("database operation failed"))
    return RepositoryError(context.format(str(exc)))


@contextmanager
def handle_sqlalchemy_errors(*, entity: str | None = None) -> Iterator[None]:
    """Translate SQLAlchemy errors into repository errors."""

    context = _EntityContext(entity)
    try:
        yield
    except (sa_exc.IntegrityError, sa_exc.DBAPIError) as exc:
        raise _translate_sqlalchemy_error(exc, context=context) from exc
