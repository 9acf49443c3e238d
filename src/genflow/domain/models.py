"""Domain models for generation tasks.

``GenerationTask`` mirrors the persisted record owned by the task store. A
task starts ``PENDING`` and moves exactly once to ``SUCCESS`` or ``FAILED``;
``TaskUpdate`` describes that single terminal write and validates that the
result and failure fields match the target status.

Normalizers report provider status through the ``Succeeded`` / ``Pending`` /
``Failed`` outcome values defined at the bottom of the module.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Union

TIMEOUT_FAILURE_CODE = "TIMEOUT"


class GenerationService(str, Enum):
    """Third-party services that host generation models."""

    KIE = "KIE"


class GenerationModel(str, Enum):
    """Generation models reachable through a service."""

    IMAGEN4 = "IMAGEN4"
    VEO3 = "VEO3"
    MIDJOURNEY = "MIDJOURNEY"
    SORA2 = "SORA2"


SUPPORTED_COMBINATIONS: Mapping[GenerationService, frozenset[GenerationModel]] = {
    GenerationService.KIE: frozenset(
        {
            GenerationModel.IMAGEN4,
            GenerationModel.VEO3,
            GenerationModel.MIDJOURNEY,
            GenerationModel.SORA2,
        }
    ),
}


def is_supported_combination(service: GenerationService | str, model: GenerationModel | str) -> bool:
    """Return ``True`` when ``service`` offers ``model``."""

    try:
        service_key = GenerationService(service)
        model_key = GenerationModel(model)
    except ValueError:
        return False
    return model_key in SUPPORTED_COMBINATIONS.get(service_key, frozenset())


class TaskStatus(str, Enum):
    """Lifecycle states of a generation task."""

    PENDING = "PENDING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self is not TaskStatus.PENDING


def serialize_result_urls(urls: list[str]) -> str:
    """Serialize result URLs into the stored ``result_payload`` format."""

    return json.dumps({"resultUrls": list(urls)})


@dataclass(slots=True)
class TaskDraft:
    """Data required to create a PENDING task row."""

    service: GenerationService
    model: GenerationModel
    external_task_id: str
    provider_params: Mapping[str, Any]
    prompt_id: str | None = None


@dataclass(slots=True)
class GenerationTask:
    """Persisted generation task."""

    id: str
    service: GenerationService
    model: GenerationModel
    external_task_id: str
    status: TaskStatus
    provider_params: Mapping[str, Any]
    created_at: datetime
    prompt_id: str | None = None
    result_payload: str | None = None
    failure_code: str | None = None
    failure_message: str | None = None
    completed_at: datetime | None = None

    @property
    def result_urls(self) -> list[str]:
        if not self.result_payload:
            return []
        return list(json.loads(self.result_payload).get("resultUrls") or [])


@dataclass(slots=True)
class TaskUpdate:
    """Terminal write applied to a task exactly once."""

    status: TaskStatus
    completed_at: datetime
    result_urls: list[str] | None = None
    failure_code: str | None = None
    failure_message: str | None = None

    def __post_init__(self) -> None:
        if not self.status.is_terminal:
            raise ValueError("TaskUpdate requires a terminal status")
        if self.status is TaskStatus.SUCCESS:
            if self.result_urls is None:
                raise ValueError("SUCCESS update requires result_urls")
            if self.failure_code is not None or self.failure_message is not None:
                raise ValueError("SUCCESS update cannot carry failure details")
        else:
            if self.result_urls is not None:
                raise ValueError("FAILED update cannot carry result_urls")
            if not self.failure_code:
                raise ValueError("FAILED update requires failure_code")

    @classmethod
    def success(cls, urls: list[str], *, completed_at: datetime) -> "TaskUpdate":
        return cls(status=TaskStatus.SUCCESS, completed_at=completed_at, result_urls=list(urls))

    @classmethod
    def failure(cls, code: str, message: str, *, completed_at: datetime) -> "TaskUpdate":
        return cls(
            status=TaskStatus.FAILED,
            completed_at=completed_at,
            failure_code=code,
            failure_message=message,
        )

    @property
    def result_payload(self) -> str | None:
        if self.result_urls is None:
            return None
        return serialize_result_urls(self.result_urls)


# ---------------------------------------------------------------------------
# Normalized provider outcomes
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class Succeeded:
    """Provider finished; ``urls`` keeps the provider's order."""

    urls: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class Pending:
    """Provider is still generating."""


@dataclass(frozen=True, slots=True)
class Failed:
    """Provider reported a terminal failure."""

    code: str
    message: str


NormalizedOutcome = Union[Succeeded, Pending, Failed]
