"""Persistence layer for generation tasks."""

from __future__ import annotations

import json
import uuid
from collections.abc import Callable
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from ..db.db_models import GenerationTaskModel
from ..domain.models import (
    GenerationModel,
    GenerationService,
    GenerationTask,
    TaskDraft,
    TaskStatus,
    TaskUpdate,
)
from ..exceptions import (
    TaskAlreadyFinalizedError,
    TaskNotFoundError,
    handle_sqlalchemy_errors,
)


class GenerationTaskRepository:
    """Manage generation_tasks records.

    Terminal updates are guarded with ``WHERE status = 'PENDING'`` so a row
    changes status at most once, even with concurrent writers.
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def create(self, draft: TaskDraft) -> str:
        task_id = uuid.uuid4().hex
        with handle_sqlalchemy_errors(entity="generation_task"), self._session_factory() as session:
            session.add(
                GenerationTaskModel(
                    id=task_id,
                    prompt_id=draft.prompt_id,
                    service=GenerationService(draft.service).value,
                    model=GenerationModel(draft.model).value,
                    external_task_id=draft.external_task_id,
                    status=TaskStatus.PENDING.value,
                    provider_params=json.dumps(dict(draft.provider_params)),
                    created_at=datetime.now(timezone.utc),
                )
            )
            session.commit()
        return task_id

    def update(self, task_id: str, task_update: TaskUpdate) -> GenerationTask:
        with handle_sqlalchemy_errors(entity="generation_task"), self._session_factory() as session:
            result = session.execute(
                update(GenerationTaskModel)
                .where(
                    GenerationTaskModel.id == task_id,
                    GenerationTaskModel.status == TaskStatus.PENDING.value,
                )
                .values(
                    status=task_update.status.value,
                    result_json=task_update.result_payload,
                    fail_code=task_update.failure_code,
                    fail_msg=task_update.failure_message,
                    completed_at=task_update.completed_at,
                )
            )
            if result.rowcount == 0:
                session.rollback()
                model = session.get(GenerationTaskModel, task_id)
                if model is None:
                    raise TaskNotFoundError(f"Generation task '{task_id}' not found")
                raise TaskAlreadyFinalizedError(
                    f"Generation task '{task_id}' is already {model.status}"
                )
            session.commit()
            model = session.get(GenerationTaskModel, task_id, populate_existing=True)
            assert model is not None
            return _to_domain(model)

    def get(self, task_id: str) -> GenerationTask:
        with handle_sqlalchemy_errors(entity="generation_task"), self._session_factory() as session:
            model = session.get(GenerationTaskModel, task_id)
            if model is None:
                raise TaskNotFoundError(f"Generation task '{task_id}' not found")
            return _to_domain(model)

    def list_by_status(self, status: TaskStatus, *, limit: int | None = None) -> list[GenerationTask]:
        stmt = (
            select(GenerationTaskModel)
            .where(GenerationTaskModel.status == TaskStatus(status).value)
            .order_by(GenerationTaskModel.created_at.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        with handle_sqlalchemy_errors(entity="generation_task"), self._session_factory() as session:
            return [_to_domain(model) for model in session.scalars(stmt)]

    def list_by_prompt(self, prompt_id: str) -> list[GenerationTask]:
        stmt = (
            select(GenerationTaskModel)
            .where(GenerationTaskModel.prompt_id == prompt_id)
            .order_by(GenerationTaskModel.created_at.desc())
        )
        with handle_sqlalchemy_errors(entity="generation_task"), self._session_factory() as session:
            return [_to_domain(model) for model in session.scalars(stmt)]


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite drops tzinfo on read
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def _to_domain(model: GenerationTaskModel) -> GenerationTask:
    created_at = _as_utc(model.created_at)
    assert created_at is not None
    return GenerationTask(
        id=model.id,
        service=GenerationService(model.service),
        model=GenerationModel(model.model),
        external_task_id=model.external_task_id,
        status=TaskStatus(model.status),
        provider_params=json.loads(model.provider_params),
        created_at=created_at,
        prompt_id=model.prompt_id,
        result_payload=model.result_json,
        failure_code=model.fail_code,
        failure_message=model.fail_msg,
        completed_at=_as_utc(model.completed_at),
    )


__all__ = ["GenerationTaskRepository"]
