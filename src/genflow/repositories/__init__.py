"""Persistence for generation tasks."""

from .generation_task_repository import GenerationTaskRepository
from .interfaces import TaskStore

__all__ = ["GenerationTaskRepository", "TaskStore"]
