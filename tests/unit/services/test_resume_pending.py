from __future__ import annotations

from datetime import timedelta

import pytest

from src.genflow.domain.models import GenerationModel, TaskStatus
from src.genflow.services.resume import restart_timeout_message, resume_pending_tasks
from tests.helpers.kie import START, Clock, FakeStore, RecordingSupervisor, make_task


@pytest.mark.asyncio
async def test_no_pending_tasks() -> None:
    summary = await resume_pending_tasks(store=FakeStore(), supervisor=RecordingSupervisor())

    assert (summary.resumed, summary.timed_out, summary.skipped) == (0, 0, 0)


@pytest.mark.asyncio
async def test_fresh_tasks_resume_and_stale_tasks_expire() -> None:
    clock = Clock(START + timedelta(minutes=10))
    store = FakeStore(
        make_task("fresh", model=GenerationModel.VEO3, external_task_id="veo-1", created_at=START + timedelta(minutes=8)),
        make_task("stale", created_at=START),
        make_task("done", created_at=START + timedelta(minutes=9), status=TaskStatus.SUCCESS),
    )
    supervisor = RecordingSupervisor()

    summary = await resume_pending_tasks(store=store, supervisor=supervisor, clock=clock)

    assert (summary.resumed, summary.timed_out) == (1, 1)
    assert supervisor.calls == [("fresh", GenerationModel.VEO3, "veo-1")]
    stale = store.get("stale")
    assert stale.status is TaskStatus.FAILED
    assert stale.failure_code == "TIMEOUT"
    assert stale.failure_message == "Task timed out after server restart (exceeded 5 minutes)"
    assert stale.completed_at == clock()
    assert store.get("fresh").status is TaskStatus.PENDING


@pytest.mark.asyncio
async def test_tasks_without_external_id_are_skipped() -> None:
    store = FakeStore(make_task("orphan", external_task_id=""))
    supervisor = RecordingSupervisor()

    summary = await resume_pending_tasks(store=store, supervisor=supervisor, clock=Clock())

    assert summary.skipped == 1
    assert supervisor.calls == []
    assert store.get("orphan").status is TaskStatus.PENDING


@pytest.mark.asyncio
async def test_only_newest_tasks_up_to_limit_are_considered() -> None:
    store = FakeStore(
        *[
            make_task(f"task-{index}", external_task_id=f"ext-{index}", created_at=START + timedelta(seconds=index))
            for index in range(5)
        ]
    )
    supervisor = RecordingSupervisor()

    summary = await resume_pending_tasks(
        store=store, supervisor=supervisor, max_tasks=2, clock=Clock(START + timedelta(minutes=1))
    )

    assert summary.resumed == 2
    assert [call[0] for call in supervisor.calls] == ["task-4", "task-3"]


@pytest.mark.asyncio
async def test_restart_timeout_message_follows_configured_age() -> None:
    clock = Clock(START + timedelta(minutes=3))
    store = FakeStore(make_task("stale", created_at=START))

    summary = await resume_pending_tasks(
        store=store,
        supervisor=RecordingSupervisor(),
        max_task_age=timedelta(seconds=90),
        clock=clock,
    )

    assert summary.timed_out == 1
    assert store.get("stale").failure_message == "Task timed out after server restart (exceeded 90 seconds)"


def test_restart_timeout_message_formats_whole_minutes() -> None:
    assert restart_timeout_message(timedelta(minutes=1)) == "Task timed out after server restart (exceeded 1 minute)"
    assert restart_timeout_message(timedelta(minutes=10)) == "Task timed out after server restart (exceeded 10 minutes)"


@pytest.mark.asyncio
async def test_tasks_rejected_by_stopping_supervisor_are_not_counted_as_resumed() -> None:
    store = FakeStore(make_task("fresh", created_at=START))
    supervisor = RecordingSupervisor()
    supervisor.accepting = False

    summary = await resume_pending_tasks(store=store, supervisor=supervisor, clock=Clock())

    assert (summary.resumed, summary.skipped) == (0, 1)
    assert store.get("fresh").status is TaskStatus.PENDING
