"""Domain models of the generation core."""

from .models import (
    SUPPORTED_COMBINATIONS,
    TIMEOUT_FAILURE_CODE,
    Failed,
    GenerationModel,
    GenerationService,
    GenerationTask,
    NormalizedOutcome,
    Pending,
    Succeeded,
    TaskDraft,
    TaskStatus,
    TaskUpdate,
    is_supported_combination,
    serialize_result_urls,
)

__all__ = [
    "SUPPORTED_COMBINATIONS",
    "TIMEOUT_FAILURE_CODE",
    "Failed",
    "GenerationModel",
    "GenerationService",
    "GenerationTask",
    "NormalizedOutcome",
    "Pending",
    "Succeeded",
    "TaskDraft",
    "TaskStatus",
    "TaskUpdate",
    "is_supported_combination",
    "serialize_result_urls",
]
