"""Task creation and status queries against Kie.ai."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from ..domain.models import GenerationModel
from ..exceptions import KieResponseError
from .kie_client import KieClient
from .kie_models import GenerationRequest
from .kie_requests import query_endpoint_for, to_wire_request

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CreatedTask:
    external_task_id: str


class KieTaskApi:
    """Creates provider tasks and fetches their raw status payloads.

    Transport errors are propagated unchanged; nothing here touches the task
    store.
    """

    def __init__(self, client: KieClient) -> None:
        self._client = client

    async def create_task(self, request: GenerationRequest) -> CreatedTask:
        wire = to_wire_request(request)
        envelope = await self._client.post(wire.endpoint, wire.body)
        data = envelope.get("data")
        task_id = data.get("taskId") if isinstance(data, dict) else None
        if not task_id:
            raise KieResponseError(
                f"Kie.ai response for {wire.endpoint} did not include data.taskId"
            )
        logger.info(
            "kie.task.created",
            extra={"model": request.model, "external_task_id": task_id},
        )
        return CreatedTask(external_task_id=str(task_id))

    async def query_task(
        self, model: GenerationModel | str, external_task_id: str
    ) -> dict[str, Any]:
        """Return the ``data`` object of the model's record-info endpoint."""

        endpoint = query_endpoint_for(model)
        envelope = await self._client.get(endpoint, {"taskId": external_task_id})
        code = envelope.get("code")
        if code != 200:
            raise KieResponseError(
                f"API returned error code: {code} - {envelope.get('msg') or 'Unknown error'}"
            )
        data = envelope.get("data")
        if not isinstance(data, dict):
            raise KieResponseError(f"Kie.ai response for {endpoint} did not include data")
        return data


__all__ = ["CreatedTask", "KieTaskApi"]
