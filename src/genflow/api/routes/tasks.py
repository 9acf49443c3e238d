"""Generation task router."""

from __future__ import annotations

import logging
from typing import Annotated, List

from fastapi import APIRouter, Depends, Path, Query, status

from ...exceptions import KieError, TaskNotFoundError
from ...services.generation_service import GenerationService
from ..errors import provider_error, task_not_found_error
from ..schemas import CreateTaskRequest, TaskResponse
from .dependencies import get_generation_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/generation", tags=["Generation"])


@router.post(
    "/tasks",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_task(
    body: CreateTaskRequest,
    service: Annotated[GenerationService, Depends(get_generation_service)],
) -> TaskResponse:
    """Create a provider task and start polling it."""

    try:
        task = await service.create_task(body.provider_params, prompt_id=body.prompt_id)
    except KieError as exc:
        logger.warning(
            "api.task.create_failed",
            extra={"model": body.provider_params.model, "error": str(exc)},
        )
        raise provider_error(exc) from exc
    return TaskResponse.from_domain(task)


@router.get(
    "/tasks/{task_id}",
    response_model=TaskResponse,
    status_code=status.HTTP_200_OK,
)
async def get_task(
    task_id: Annotated[str, Path(min_length=1, max_length=64)],
    service: Annotated[GenerationService, Depends(get_generation_service)],
) -> TaskResponse:
    try:
        task = await service.get_task(task_id)
    except TaskNotFoundError as exc:
        raise task_not_found_error(exc) from exc
    return TaskResponse.from_domain(task)


@router.get(
    "/tasks",
    response_model=List[TaskResponse],
    status_code=status.HTTP_200_OK,
)
async def list_tasks(
    prompt_id: Annotated[str, Query(alias="promptId", min_length=1, max_length=64)],
    service: Annotated[GenerationService, Depends(get_generation_service)],
) -> List[TaskResponse]:
    """List tasks of a prompt, newest first."""

    tasks = await service.list_tasks(prompt_id)
    return [TaskResponse.from_domain(task) for task in tasks]
