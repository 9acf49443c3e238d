"""Re-attach pollers to tasks left PENDING by a previous process."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import structlog

from ..domain.models import TIMEOUT_FAILURE_CODE, TaskStatus, TaskUpdate
from ..exceptions import TaskAlreadyFinalizedError
from ..repositories.interfaces import TaskStore
from ..workers.poller import PollingSupervisor

logger = structlog.get_logger(__name__)

DEFAULT_MAX_TASK_AGE = timedelta(minutes=5)
DEFAULT_MAX_TASKS = 50


def restart_timeout_message(max_task_age: timedelta) -> str:
    seconds = max_task_age.total_seconds()
    if seconds % 60 == 0:
        minutes = int(seconds // 60)
        span = f"{minutes} minute" if minutes == 1 else f"{minutes} minutes"
    else:
        span = f"{seconds:g} seconds"
    return f"Task timed out after server restart (exceeded {span})"


@dataclass(slots=True)
class ResumeSummary:
    resumed: int = 0
    timed_out: int = 0
    skipped: int = 0


async def resume_pending_tasks(
    *,
    store: TaskStore,
    supervisor: PollingSupervisor,
    max_tasks: int = DEFAULT_MAX_TASKS,
    max_task_age: timedelta = DEFAULT_MAX_TASK_AGE,
    clock: Callable[[], datetime] | None = None,
) -> ResumeSummary:
    """Resume polling for the newest PENDING tasks.

    Tasks older than ``max_task_age`` are failed with ``TIMEOUT`` instead of
    being polled again; tasks without a provider identifier are skipped.
    """

    now = (clock or (lambda: datetime.now(timezone.utc)))()
    summary = ResumeSummary()
    timeout_message = restart_timeout_message(max_task_age)
    pending = await asyncio.to_thread(store.list_by_status, TaskStatus.PENDING, limit=max_tasks)
    if not pending:
        logger.info("resume.none_pending")
        return summary

    for task in pending:
        age = now - task.created_at
        if age > max_task_age:
            update = TaskUpdate.failure(
                TIMEOUT_FAILURE_CODE, timeout_message, completed_at=now
            )
            try:
                await asyncio.to_thread(store.update, task.id, update)
            except TaskAlreadyFinalizedError:
                logger.info("resume.task.already_final", task_id=task.id)
                continue
            logger.info(
                "resume.task.expired",
                task_id=task.id,
                age_seconds=int(age.total_seconds()),
            )
            summary.timed_out += 1
            continue
        if not task.external_task_id:
            logger.warning("resume.task.skipped", task_id=task.id, reason="no_external_id")
            summary.skipped += 1
            continue
        if supervisor.start_polling(task.id, task.model, task.external_task_id) is None:
            logger.warning("resume.task.not_started", task_id=task.id, reason="shutdown")
            summary.skipped += 1
            continue
        summary.resumed += 1

    logger.info(
        "resume.completed",
        resumed=summary.resumed,
        timed_out=summary.timed_out,
        skipped=summary.skipped,
    )
    return summary


__all__ = ["ResumeSummary", "restart_timeout_message", "resume_pending_tasks"]
