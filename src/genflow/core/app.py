"""FastAPI application factory for the generation core.

``create_app`` wires the task store, the Kie.ai client, the polling
supervisor and the generation service onto ``app.state``. Startup resumes
PENDING tasks left by a previous process; shutdown stops the pollers and
closes the HTTP client.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI

from ..api.errors import ApiError, api_error_handler
from ..api.routes import tasks_router, uploads_router
from ..db.db_init import create_db_engine, create_session_factory, init_db
from ..exceptions import RepositoryError
from ..providers.kie_client import KieClient
from ..providers.kie_tasks import KieTaskApi
from ..providers.kie_uploads import KieUploadApi
from ..repositories.generation_task_repository import GenerationTaskRepository
from ..repositories.interfaces import TaskStore
from ..services.generation_service import GenerationService
from ..services.resume import resume_pending_tasks
from ..workers.poller import PollingPolicy, PollingSupervisor, TaskPoller
from .config import AppConfig

logger = logging.getLogger(__name__)


def create_app(
    app_config: AppConfig | None = None,
    *,
    store: TaskStore | None = None,
    client: KieClient | None = None,
    supervisor: PollingSupervisor | None = None,
) -> FastAPI:
    """Build the application; ``store``, ``client`` and ``supervisor`` override defaults."""

    config = app_config or AppConfig.build_default()
    if store is None:
        engine = create_db_engine(config.database_url)
        init_db(engine)
        store = GenerationTaskRepository(create_session_factory(engine))
    kie_client = client or KieClient.from_config(config)
    task_api = KieTaskApi(kie_client)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # asyncio primitives must be created inside the running loop
        polling = supervisor or PollingSupervisor(
            TaskPoller(
                task_api=task_api,
                store=store,
                policy=PollingPolicy.from_config(config),
            )
        )
        app.state.supervisor = polling
        app.state.generation_service = GenerationService(
            task_api=task_api, store=store, supervisor=polling
        )
        if config.resume_on_startup:
            try:
                await resume_pending_tasks(
                    store=store,
                    supervisor=polling,
                    max_tasks=config.resume_max_tasks,
                    max_task_age=timedelta(seconds=config.poll_budget_seconds),
                )
            except RepositoryError:
                logger.exception("resume.failed")
        try:
            yield
        finally:
            await polling.shutdown()
            await kie_client.aclose()

    app = FastAPI(title="genflow", version="0.1.0", lifespan=lifespan)
    app.state.config = config
    app.state.store = store
    app.state.task_api = task_api
    app.state.upload_api = KieUploadApi(kie_client, upload_url=config.kie_upload_url)
    app.add_exception_handler(ApiError, api_error_handler)
    app.include_router(tasks_router)
    app.include_router(uploads_router)
    return app


__all__ = ["create_app"]
