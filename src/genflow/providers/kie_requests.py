"""Mapping of request variants onto Kie.ai wire requests."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from ..domain.models import GenerationModel
from .kie_models import Imagen4Request, MidjourneyRequest, Sora2Request, Veo3Request

CREATE_ENDPOINTS: Mapping[GenerationModel, str] = {
    GenerationModel.IMAGEN4: "/api/v1/jobs/createTask",
    GenerationModel.SORA2: "/api/v1/jobs/createTask",
    GenerationModel.VEO3: "/api/v1/veo/generate",
    GenerationModel.MIDJOURNEY: "/api/v1/mj/generate",
}

QUERY_ENDPOINTS: Mapping[GenerationModel, str] = {
    GenerationModel.IMAGEN4: "/api/v1/jobs/recordInfo",
    GenerationModel.SORA2: "/api/v1/jobs/recordInfo",
    GenerationModel.VEO3: "/api/v1/veo/record-info",
    GenerationModel.MIDJOURNEY: "/api/v1/mj/record-info",
}


@dataclass(frozen=True, slots=True)
class WireRequest:
    """Endpoint path and JSON body of a task creation call."""

    endpoint: str
    body: dict[str, Any]


def create_endpoint_for(model: GenerationModel | str) -> str:
    return CREATE_ENDPOINTS[GenerationModel(model)]


def query_endpoint_for(model: GenerationModel | str) -> str:
    return QUERY_ENDPOINTS[GenerationModel(model)]


def to_wire_request(request: Any) -> WireRequest:
    """Translate a ``GenerationRequest`` variant into its wire form.

    Imagen4 and Sora2 nest generation parameters under ``input``; Veo3 and
    Midjourney take a flat body. Unset options are omitted and boolean
    flags are only sent when true.
    """

    if isinstance(request, (Imagen4Request, Sora2Request)):
        body = _job_body(request)
    elif isinstance(request, Veo3Request):
        body = _veo3_body(request)
    elif isinstance(request, MidjourneyRequest):
        body = _midjourney_body(request)
    else:
        raise TypeError(f"Unsupported generation request: {type(request).__name__}")
    return WireRequest(endpoint=create_endpoint_for(request.generation_model), body=body)


def _job_body(request: Imagen4Request | Sora2Request) -> dict[str, Any]:
    body: dict[str, Any] = {
        "model": request.api_model,
        "input": request.input.model_dump(mode="json", exclude_none=True),
    }
    if request.callback_url:
        body["callBackUrl"] = request.callback_url
    return body


def _veo3_body(request: Veo3Request) -> dict[str, Any]:
    body: dict[str, Any] = {
        "prompt": request.prompt,
        "modelVariant": request.model_variant,
    }
    _put_if_truthy(body, "generationType", request.generation_type)
    _put_if_truthy(body, "imageUrls", request.image_urls)
    _put_if_truthy(body, "aspectRatio", request.aspect_ratio)
    _put_if_truthy(body, "seeds", request.seeds)
    _put_if_truthy(body, "watermark", request.watermark)
    _put_if_truthy(body, "callBackUrl", request.callback_url)
    _put_if_truthy(body, "enableTranslation", request.enable_translation)
    return body


def _midjourney_body(request: MidjourneyRequest) -> dict[str, Any]:
    body: dict[str, Any] = {
        "taskType": request.task_type,
        "prompt": request.prompt,
    }
    _put_if_truthy(body, "speed", request.speed)
    _put_if_truthy(body, "fileUrls", request.file_urls)
    _put_if_truthy(body, "aspectRatio", request.aspect_ratio)
    _put_if_truthy(body, "version", request.version)
    # numeric tuning values are meaningful at zero
    for key, value in (
        ("variety", request.variety),
        ("stylization", request.stylization),
        ("weirdness", request.weirdness),
        ("ow", request.ow),
    ):
        if value is not None:
            body[key] = value
    _put_if_truthy(body, "waterMark", request.water_mark)
    _put_if_truthy(body, "enableTranslation", request.enable_translation)
    _put_if_truthy(body, "callBackUrl", request.callback_url)
    _put_if_truthy(body, "videoBatchSize", request.video_batch_size)
    _put_if_truthy(body, "motion", request.motion)
    return body


def _put_if_truthy(body: dict[str, Any], key: str, value: Any) -> None:
    if value:
        body[key] = value


__all__ = [
    "CREATE_ENDPOINTS",
    "QUERY_ENDPOINTS",
    "WireRequest",
    "create_endpoint_for",
    "query_endpoint_for",
    "to_wire_request",
]
