from __future__ import annotations

import httpx
import pytest

from src.genflow.domain.models import GenerationModel
from src.genflow.exceptions import KieResponseError, KieValidationError
from src.genflow.providers.kie_models import Imagen4Request, Veo3Request
from src.genflow.providers.kie_tasks import CreatedTask, KieTaskApi
from tests.helpers.kie import envelope, make_client


@pytest.mark.asyncio
async def test_create_task_posts_wire_body_and_returns_task_id() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=envelope({"taskId": "veo-123"}))

    api = KieTaskApi(make_client(handler))
    created = await api.create_task(Veo3Request(prompt="sunrise", model_variant="veo3"))

    assert created == CreatedTask(external_task_id="veo-123")
    assert seen[0].url.path == "/api/v1/veo/generate"


@pytest.mark.asyncio
async def test_create_task_without_task_id_is_a_response_error() -> None:
    api = KieTaskApi(make_client(lambda request: httpx.Response(200, json=envelope({}))))

    with pytest.raises(KieResponseError):
        await api.create_task(Imagen4Request(input={"prompt": "cat"}))


@pytest.mark.asyncio
async def test_create_task_propagates_transport_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(422, json={"code": 422, "msg": "prompt too long"})

    api = KieTaskApi(make_client(handler))

    with pytest.raises(KieValidationError, match="prompt too long"):
        await api.create_task(Imagen4Request(input={"prompt": "cat"}))


@pytest.mark.asyncio
async def test_query_task_returns_data_object() -> None:
    seen: list[httpx.Request] = []
    data = {"taskId": "mj-1", "successFlag": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=envelope(data))

    api = KieTaskApi(make_client(handler))

    assert await api.query_task(GenerationModel.MIDJOURNEY, "mj-1") == data
    assert seen[0].url.path == "/api/v1/mj/record-info"
    assert seen[0].url.params["taskId"] == "mj-1"


@pytest.mark.asyncio
async def test_query_task_rejects_non_200_envelope_code() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"code": 404, "msg": "record not found", "data": None})

    api = KieTaskApi(make_client(handler))

    with pytest.raises(KieResponseError, match="API returned error code: 404 - record not found"):
        await api.query_task("IMAGEN4", "ext-1")
