from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import update

from src.genflow.db.db_models import GenerationTaskModel
from src.genflow.domain.models import (
    GenerationModel,
    GenerationService,
    TaskDraft,
    TaskStatus,
    TaskUpdate,
)
from src.genflow.exceptions import TaskAlreadyFinalizedError, TaskNotFoundError
from src.genflow.repositories.generation_task_repository import GenerationTaskRepository

COMPLETED_AT = datetime(2026, 1, 1, 12, 5, tzinfo=timezone.utc)


def _draft(external_task_id: str = "ext-1", prompt_id: str | None = "prompt-1") -> TaskDraft:
    return TaskDraft(
        service=GenerationService.KIE,
        model=GenerationModel.VEO3,
        external_task_id=external_task_id,
        provider_params={"model": "VEO3", "prompt": "sunrise", "modelVariant": "veo3"},
        prompt_id=prompt_id,
    )


def _set_created_at(session_factory, task_id: str, created_at: datetime) -> None:
    with session_factory() as session:
        session.execute(
            update(GenerationTaskModel)
            .where(GenerationTaskModel.id == task_id)
            .values(created_at=created_at)
        )
        session.commit()


def test_create_records_pending_task(session_factory) -> None:
    repo = GenerationTaskRepository(session_factory)

    task_id = repo.create(_draft())
    task = repo.get(task_id)

    assert task.status is TaskStatus.PENDING
    assert task.model is GenerationModel.VEO3
    assert task.external_task_id == "ext-1"
    assert task.prompt_id == "prompt-1"
    assert task.provider_params == {"model": "VEO3", "prompt": "sunrise", "modelVariant": "veo3"}
    assert task.created_at.tzinfo is not None
    assert task.completed_at is None
    assert task.result_urls == []


def test_success_update_stores_result_payload(session_factory) -> None:
    repo = GenerationTaskRepository(session_factory)
    task_id = repo.create(_draft())

    task = repo.update(
        task_id, TaskUpdate.success(["https://cdn/1.mp4", "https://cdn/2.mp4"], completed_at=COMPLETED_AT)
    )

    assert task.status is TaskStatus.SUCCESS
    assert task.result_payload == '{"resultUrls": ["https://cdn/1.mp4", "https://cdn/2.mp4"]}'
    assert task.result_urls == ["https://cdn/1.mp4", "https://cdn/2.mp4"]
    assert task.failure_code is None
    assert task.completed_at == COMPLETED_AT
    assert repo.get(task_id) == task


def test_failure_update_stores_code_and_message(session_factory) -> None:
    repo = GenerationTaskRepository(session_factory)
    task_id = repo.create(_draft())

    task = repo.update(task_id, TaskUpdate.failure("TIMEOUT", "too slow", completed_at=COMPLETED_AT))

    assert task.status is TaskStatus.FAILED
    assert (task.failure_code, task.failure_message) == ("TIMEOUT", "too slow")
    assert task.result_payload is None


def test_second_terminal_update_is_rejected(session_factory) -> None:
    repo = GenerationTaskRepository(session_factory)
    task_id = repo.create(_draft())
    repo.update(task_id, TaskUpdate.success(["https://cdn/1.mp4"], completed_at=COMPLETED_AT))

    with pytest.raises(TaskAlreadyFinalizedError):
        repo.update(task_id, TaskUpdate.failure("X", "late", completed_at=COMPLETED_AT))

    task = repo.get(task_id)
    assert task.status is TaskStatus.SUCCESS
    assert task.failure_code is None


def test_unknown_task_raises_not_found(session_factory) -> None:
    repo = GenerationTaskRepository(session_factory)

    with pytest.raises(TaskNotFoundError):
        repo.get("missing")
    with pytest.raises(TaskNotFoundError):
        repo.update("missing", TaskUpdate.failure("X", "y", completed_at=COMPLETED_AT))


def test_list_by_status_newest_first_with_limit(session_factory) -> None:
    repo = GenerationTaskRepository(session_factory)
    base = datetime(2026, 1, 1, tzinfo=timezone.utc)
    ids = [repo.create(_draft(external_task_id=f"ext-{index}")) for index in range(3)]
    for offset, task_id in enumerate(ids):
        _set_created_at(session_factory, task_id, base + timedelta(minutes=offset))
    repo.update(ids[2], TaskUpdate.failure("X", "y", completed_at=COMPLETED_AT))

    pending = repo.list_by_status(TaskStatus.PENDING)
    limited = repo.list_by_status(TaskStatus.PENDING, limit=1)

    assert [task.id for task in pending] == [ids[1], ids[0]]
    assert [task.id for task in limited] == [ids[1]]
    assert [task.id for task in repo.list_by_status(TaskStatus.FAILED)] == [ids[2]]


def test_list_by_prompt_filters_and_orders(session_factory) -> None:
    repo = GenerationTaskRepository(session_factory)
    base = datetime(2026, 1, 1, tzinfo=timezone.utc)
    older = repo.create(_draft(prompt_id="p-1"))
    newer = repo.create(_draft(prompt_id="p-1"))
    repo.create(_draft(prompt_id="p-2"))
    _set_created_at(session_factory, older, base)
    _set_created_at(session_factory, newer, base + timedelta(seconds=30))

    assert [task.id for task in repo.list_by_prompt("p-1")] == [newer, older]
    assert repo.list_by_prompt("p-404") == []
