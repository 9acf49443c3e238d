"""Application services."""

from .generation_service import GenerationService
from .resume import ResumeSummary, resume_pending_tasks

__all__ = ["GenerationService", "ResumeSummary", "resume_pending_tasks"]
