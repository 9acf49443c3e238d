from __future__ import annotations

import pytest
from pydantic import ValidationError

from src.genflow.domain.models import GenerationModel
from src.genflow.providers.kie_models import (
    Imagen4Request,
    MidjourneyRequest,
    Sora2Request,
    Veo3Request,
    parse_generation_request,
)
from src.genflow.providers.kie_requests import (
    create_endpoint_for,
    query_endpoint_for,
    to_wire_request,
)


@pytest.mark.parametrize(
    ("model", "create", "query"),
    [
        (GenerationModel.IMAGEN4, "/api/v1/jobs/createTask", "/api/v1/jobs/recordInfo"),
        (GenerationModel.SORA2, "/api/v1/jobs/createTask", "/api/v1/jobs/recordInfo"),
        (GenerationModel.VEO3, "/api/v1/veo/generate", "/api/v1/veo/record-info"),
        (GenerationModel.MIDJOURNEY, "/api/v1/mj/generate", "/api/v1/mj/record-info"),
    ],
)
def test_endpoint_table(model, create, query) -> None:
    assert create_endpoint_for(model) == create
    assert query_endpoint_for(model.value) == query


def test_imagen4_nests_input_and_omits_unset_options() -> None:
    request = parse_generation_request(
        {
            "service": "KIE",
            "model": "IMAGEN4",
            "input": {"prompt": "a red fox", "aspect_ratio": "16:9"},
        }
    )

    wire = to_wire_request(request)

    assert isinstance(request, Imagen4Request)
    assert wire.endpoint == "/api/v1/jobs/createTask"
    assert wire.body == {
        "model": "google/imagen4-fast",
        "input": {"prompt": "a red fox", "aspect_ratio": "16:9"},
    }


def test_sora2_keeps_false_input_flags_and_callback() -> None:
    request = Sora2Request(
        input={"prompt": "waves", "n_frames": "10", "remove_watermark": False},
        callback_url="https://example.com/hook",
    )

    wire = to_wire_request(request)

    assert wire.body == {
        "model": "sora-2-text-to-video",
        "input": {"prompt": "waves", "n_frames": "10", "remove_watermark": False},
        "callBackUrl": "https://example.com/hook",
    }


def test_veo3_body_is_flat() -> None:
    request = parse_generation_request(
        {
            "model": "VEO3",
            "prompt": "drone shot",
            "modelVariant": "veo3_fast",
            "imageUrls": ["https://example.com/a.png"],
            "seeds": 12345,
            "enableTranslation": True,
        }
    )

    wire = to_wire_request(request)

    assert isinstance(request, Veo3Request)
    assert wire.endpoint == "/api/v1/veo/generate"
    assert wire.body == {
        "prompt": "drone shot",
        "modelVariant": "veo3_fast",
        "imageUrls": ["https://example.com/a.png"],
        "seeds": 12345,
        "enableTranslation": True,
    }


def test_veo3_false_translation_flag_is_not_sent() -> None:
    request = Veo3Request(prompt="p", model_variant="veo3", enable_translation=False)

    assert to_wire_request(request).body == {"prompt": "p", "modelVariant": "veo3"}


def test_midjourney_keeps_zero_tuning_values() -> None:
    request = MidjourneyRequest(
        task_type="mj_txt2img",
        prompt="castle",
        variety=0,
        stylization=0,
        weirdness=0,
        ow=5,
        water_mark="",
        video_batch_size=2,
    )

    wire = to_wire_request(request)

    assert wire.endpoint == "/api/v1/mj/generate"
    assert wire.body == {
        "taskType": "mj_txt2img",
        "prompt": "castle",
        "variety": 0,
        "stylization": 0,
        "weirdness": 0,
        "ow": 5,
        "videoBatchSize": 2,
    }


def test_unknown_request_type_is_rejected() -> None:
    with pytest.raises(TypeError):
        to_wire_request({"model": "IMAGEN4"})


def test_parse_rejects_unknown_model() -> None:
    with pytest.raises(ValidationError):
        parse_generation_request({"service": "KIE", "model": "DALLE", "prompt": "x"})


def test_parse_rejects_fields_from_other_variants() -> None:
    with pytest.raises(ValidationError):
        parse_generation_request(
            {"model": "VEO3", "prompt": "x", "modelVariant": "veo3", "taskType": "mj_txt2img"}
        )


def test_veo3_accepts_at_most_three_images() -> None:
    with pytest.raises(ValidationError):
        Veo3Request(prompt="x", model_variant="veo3", image_urls=["u1", "u2", "u3", "u4"])


def test_to_params_uses_original_field_names() -> None:
    request = MidjourneyRequest(task_type="mj_video", prompt="run", motion="high")

    assert request.to_params() == {
        "service": "KIE",
        "model": "MIDJOURNEY",
        "taskType": "mj_video",
        "prompt": "run",
        "motion": "high",
    }
    assert parse_generation_request(request.to_params()) == request
