"""Polling of provider tasks until they reach a terminal state.

:class:`TaskPoller` drives a single task: it waits, queries the provider,
normalizes the payload and writes exactly one terminal update to the task
store. :class:`PollingSupervisor` runs one poller per in-flight task as a
detached asyncio task and stops them on shutdown.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections import deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, TypeVar

from ..core.config import AppConfig
from ..domain.models import (
    TIMEOUT_FAILURE_CODE,
    Failed,
    GenerationModel,
    GenerationTask,
    Pending,
    Succeeded,
    TaskUpdate,
)
from ..providers.kie_results import normalizer_for
from ..providers.kie_tasks import KieTaskApi
from ..repositories.interfaces import TaskStore

T = TypeVar("T")

logger = logging.getLogger(__name__)

DEFAULT_MAX_FAILURES = 100


@dataclass(frozen=True, slots=True)
class PollingPolicy:
    """Wait schedule and limits of a polling loop.

    The first query happens after ``initial_delay_seconds``. Later queries
    wait ``fast_interval_seconds`` while fewer than ``fast_attempts`` queries
    were made, ``standard_interval_seconds`` below ``standard_attempts`` and
    ``max_interval_seconds`` afterwards.
    """

    initial_delay_seconds: float = 2.0
    fast_interval_seconds: float = 2.0
    standard_interval_seconds: float = 5.0
    max_interval_seconds: float = 10.0
    fast_attempts: int = 3
    standard_attempts: int = 20
    budget_seconds: float = 5 * 60
    max_attempts: int | None = None

    @classmethod
    def from_config(cls, config: AppConfig) -> "PollingPolicy":
        return cls(
            initial_delay_seconds=config.poll_initial_delay_seconds,
            fast_interval_seconds=config.poll_interval_seconds,
            standard_interval_seconds=config.poll_standard_interval_seconds,
            max_interval_seconds=config.poll_max_interval_seconds,
            budget_seconds=config.poll_budget_seconds,
            max_attempts=config.poll_max_attempts,
        )

    def interval_for(self, attempt: int) -> float:
        if attempt < self.fast_attempts:
            return self.fast_interval_seconds
        if attempt < self.standard_attempts:
            return self.standard_interval_seconds
        return self.max_interval_seconds

    def delay_before(self, attempt: int) -> float:
        if attempt == 0:
            return self.initial_delay_seconds
        return self.interval_for(attempt)


class TaskPoller:
    """Advance one task from PENDING to a terminal state."""

    def __init__(
        self,
        *,
        task_api: KieTaskApi,
        store: TaskStore,
        policy: PollingPolicy | None = None,
        clock: Callable[[], datetime] | None = None,
        sleep: Callable[[float], Any] | None = None,
    ) -> None:
        self._task_api = task_api
        self._store = store
        self.policy = policy or PollingPolicy()
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._sleep = self._wrap_sleep(sleep)

    @staticmethod
    def _wrap_sleep(
        sleep: Callable[[float], Any] | None,
    ) -> Callable[[float], Awaitable[None]]:
        if sleep is None:
            return asyncio.sleep

        async def _async_sleep(seconds: float) -> None:
            result = sleep(seconds)
            if inspect.isawaitable(result):
                await result

        return _async_sleep

    @staticmethod
    async def _run_sync(func: Callable[..., T], /, *args: Any, **kwargs: Any) -> T:
        """Execute ``func`` in a worker thread to avoid blocking the event loop."""

        return await asyncio.to_thread(func, *args, **kwargs)

    async def run(
        self,
        task_id: str,
        model: GenerationModel | str,
        external_task_id: str,
        *,
        shutdown_event: asyncio.Event | None = None,
    ) -> GenerationTask | None:
        """Poll until a terminal write; return the updated task.

        Returns ``None`` when ``shutdown_event`` stops the loop first, leaving
        the row PENDING. Errors raised by the task store propagate.
        """

        model = GenerationModel(model)
        normalizer = normalizer_for(model)
        policy = self.policy
        started_at = self._clock()
        attempt = 0
        log_extra = {"task_id": task_id, "model": model.value, "external_task_id": external_task_id}

        logger.info("poller.task.started", extra=log_extra)
        while True:
            if _stopping(shutdown_event):
                logger.info("poller.task.interrupted", extra={**log_extra, "attempts": attempt})
                return None
            await self._sleep(policy.delay_before(attempt))
            if _stopping(shutdown_event):
                logger.info("poller.task.interrupted", extra={**log_extra, "attempts": attempt})
                return None

            elapsed = (self._clock() - started_at).total_seconds()
            if elapsed >= policy.budget_seconds:
                return await self._write_timeout(
                    task_id,
                    f"Polling timeout after {policy.budget_seconds:g} seconds",
                    log_extra={**log_extra, "attempts": attempt, "elapsed": elapsed},
                )
            if policy.max_attempts is not None and attempt >= policy.max_attempts:
                return await self._write_timeout(
                    task_id,
                    f"Polling stopped after {attempt} attempts",
                    log_extra={**log_extra, "attempts": attempt, "elapsed": elapsed},
                )

            attempt += 1
            try:
                raw = await self._task_api.query_task(model, external_task_id)
                outcome = normalizer.normalize(raw)
            except Exception as exc:
                logger.warning(
                    "poller.attempt.failed",
                    extra={**log_extra, "attempt": attempt, "error": repr(exc)},
                )
                continue

            if isinstance(outcome, Pending):
                logger.debug("poller.task.pending", extra={**log_extra, "attempt": attempt})
                continue
            if isinstance(outcome, Succeeded):
                update = TaskUpdate.success(list(outcome.urls), completed_at=self._clock())
                task = await self._run_sync(self._store.update, task_id, update)
                logger.info(
                    "poller.task.succeeded",
                    extra={**log_extra, "attempts": attempt, "result_count": len(outcome.urls)},
                )
                return task
            if isinstance(outcome, Failed):
                update = TaskUpdate.failure(
                    outcome.code, outcome.message, completed_at=self._clock()
                )
                task = await self._run_sync(self._store.update, task_id, update)
                logger.info(
                    "poller.task.failed",
                    extra={**log_extra, "attempts": attempt, "fail_code": outcome.code},
                )
                return task
            raise TypeError(f"Unexpected normalized outcome: {outcome!r}")

    async def _write_timeout(
        self, task_id: str, message: str, *, log_extra: dict[str, Any]
    ) -> GenerationTask:
        update = TaskUpdate.failure(TIMEOUT_FAILURE_CODE, message, completed_at=self._clock())
        task = await self._run_sync(self._store.update, task_id, update)
        logger.warning("poller.task.timeout", extra=log_extra)
        return task


def _stopping(shutdown_event: asyncio.Event | None) -> bool:
    return shutdown_event is not None and shutdown_event.is_set()


@dataclass(slots=True)
class PollingFailure:
    """Error that escaped a polling loop."""

    task_id: str
    error: BaseException


class PollingSupervisor:
    """Run one detached :class:`TaskPoller` loop per task.

    Only the latest ``max_failures`` crashed loops are kept on ``failures``.
    """

    def __init__(
        self,
        poller: TaskPoller,
        *,
        shutdown_grace_seconds: float = 5.0,
        max_failures: int = DEFAULT_MAX_FAILURES,
    ) -> None:
        self._poller = poller
        self._shutdown_grace_seconds = shutdown_grace_seconds
        self._shutdown_event = asyncio.Event()
        self._tasks: dict[str, asyncio.Task[None]] = {}
        self.failures: deque[PollingFailure] = deque(maxlen=max_failures)

    @property
    def in_flight(self) -> frozenset[str]:
        return frozenset(task_id for task_id, task in self._tasks.items() if not task.done())

    def start_polling(
        self,
        task_id: str,
        model: GenerationModel | str,
        external_task_id: str,
    ) -> asyncio.Task[None] | None:
        """Spawn a polling loop; a task that is already polled is left alone."""

        existing = self._tasks.get(task_id)
        if existing is not None and not existing.done():
            logger.debug("poller.task.already_running", extra={"task_id": task_id})
            return existing
        if self._shutdown_event.is_set():
            logger.warning("poller.task.rejected", extra={"task_id": task_id, "reason": "shutdown"})
            return None
        task = asyncio.create_task(
            self._run(task_id, GenerationModel(model), external_task_id),
            name=f"genflow-poller-{task_id}",
        )
        self._tasks[task_id] = task
        task.add_done_callback(lambda done, key=task_id: self._forget(key, done))
        return task

    def _forget(self, task_id: str, task: asyncio.Task[None]) -> None:
        if self._tasks.get(task_id) is task:
            del self._tasks[task_id]

    async def _run(self, task_id: str, model: GenerationModel, external_task_id: str) -> None:
        try:
            await self._poller.run(
                task_id, model, external_task_id, shutdown_event=self._shutdown_event
            )
        except asyncio.CancelledError:
            logger.info("poller.task.cancelled", extra={"task_id": task_id})
            raise
        except Exception as exc:
            logger.exception(
                "poller.crashed",
                extra={"task_id": task_id, "model": model.value, "external_task_id": external_task_id},
            )
            self.failures.append(PollingFailure(task_id=task_id, error=exc))

    async def join(self) -> None:
        """Wait for every loop started so far to finish."""

        tasks = list(self._tasks.values())
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def shutdown(self, grace_seconds: float | None = None) -> None:
        """Stop loops, waiting up to the grace period before cancelling them."""

        self._shutdown_event.set()
        tasks = [task for task in self._tasks.values() if not task.done()]
        if not tasks:
            return
        grace = self._shutdown_grace_seconds if grace_seconds is None else grace_seconds
        _, pending = await asyncio.wait(tasks, timeout=grace)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        logger.info(
            "poller.supervisor.stopped",
            extra={"finished": len(tasks) - len(pending), "cancelled": len(pending)},
        )


__all__ = ["PollingFailure", "PollingPolicy", "PollingSupervisor", "TaskPoller"]
