"""Repository interfaces for persistence layer implementations."""

from __future__ import annotations

from typing import Protocol

from ..domain.models import GenerationTask, TaskDraft, TaskStatus, TaskUpdate


class TaskStore(Protocol):
    """Persistence operations for generation tasks.

    Methods are synchronous; async callers run them in a worker thread.
    """

    def create(self, draft: TaskDraft) -> str:
        """Persist a PENDING task and return its internal identifier."""

    def update(self, task_id: str, update: TaskUpdate) -> GenerationTask:
        """Apply the single terminal write to a PENDING task."""

    def get(self, task_id: str) -> GenerationTask:
        """Return a task by identifier."""

    def list_by_status(self, status: TaskStatus, *, limit: int | None = None) -> list[GenerationTask]:
        """Return tasks in ``status``, newest first."""

    def list_by_prompt(self, prompt_id: str) -> list[GenerationTask]:
        """Return tasks owned by ``prompt_id``, newest first."""
