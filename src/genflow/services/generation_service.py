"""Generation task orchestration."""

from __future__ import annotations

import asyncio

import structlog

from ..domain.models import GenerationTask, TaskDraft
from ..providers.kie_models import GenerationRequest
from ..providers.kie_tasks import KieTaskApi
from ..repositories.interfaces import TaskStore
from ..workers.poller import PollingSupervisor

logger = structlog.get_logger(__name__)


class GenerationService:
    """Create provider tasks and track them through the task store.

    ``create_task`` returns as soon as the PENDING row exists; completion is
    observed by reading the task again.
    """

    def __init__(
        self,
        *,
        task_api: KieTaskApi,
        store: TaskStore,
        supervisor: PollingSupervisor,
    ) -> None:
        self._task_api = task_api
        self._store = store
        self._supervisor = supervisor

    async def create_task(
        self, request: GenerationRequest, *, prompt_id: str | None = None
    ) -> GenerationTask:
        created = await self._task_api.create_task(request)
        draft = TaskDraft(
            service=request.generation_service,
            model=request.generation_model,
            external_task_id=created.external_task_id,
            provider_params=request.to_params(),
            prompt_id=prompt_id,
        )
        task_id = await asyncio.to_thread(self._store.create, draft)
        logger.info(
            "generation.task.created",
            task_id=task_id,
            model=draft.model.value,
            external_task_id=draft.external_task_id,
            prompt_id=prompt_id,
        )
        self._supervisor.start_polling(task_id, draft.model, draft.external_task_id)
        return await asyncio.to_thread(self._store.get, task_id)

    async def get_task(self, task_id: str) -> GenerationTask:
        return await asyncio.to_thread(self._store.get, task_id)

    async def list_tasks(self, prompt_id: str) -> list[GenerationTask]:
        return await asyncio.to_thread(self._store.list_by_prompt, prompt_id)


__all__ = ["GenerationService"]
