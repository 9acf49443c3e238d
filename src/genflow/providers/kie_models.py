"""Request variants for Kie.ai generation models.

``GenerationRequest`` is a closed tagged union: each variant pins its
``service`` and ``model`` literals and carries only the fields of that model.
Raw mappings (for example the ``providerParams`` object posted by a client)
are parsed with :func:`parse_generation_request`, which dispatches on
``model``. Field names are snake_case; the camelCase names used by the
original request payloads are accepted as aliases.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator

from ..domain.models import GenerationModel, GenerationService, is_supported_combination


class _RequestBase(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True,
        extra="forbid",
        frozen=True,
        protected_namespaces=(),
    )

    @model_validator(mode="after")
    def _check_combination(self) -> "_RequestBase":
        service = getattr(self, "service")
        model = getattr(self, "model")
        if not is_supported_combination(service, model):
            raise ValueError(f"Invalid combination: {service} does not support {model}")
        return self

    @property
    def generation_service(self) -> GenerationService:
        return GenerationService(getattr(self, "service"))

    @property
    def generation_model(self) -> GenerationModel:
        return GenerationModel(getattr(self, "model"))

    def to_params(self) -> dict[str, Any]:
        """Serialize with original field names, dropping unset options."""

        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ---------------------------------------------------------------------------
# Imagen4 (image)
# ---------------------------------------------------------------------------
class Imagen4Input(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    prompt: str = Field(min_length=1, max_length=5000)
    negative_prompt: str | None = Field(default=None, max_length=5000)
    aspect_ratio: Literal["1:1", "16:9", "9:16", "3:4", "4:3"] | None = None
    num_images: Literal["1", "2", "3", "4"] | None = None
    seed: int | None = None


class Imagen4Request(_RequestBase):
    service: Literal["KIE"] = "KIE"
    model: Literal["IMAGEN4"] = "IMAGEN4"
    api_model: Literal["google/imagen4-fast"] = Field(
        default="google/imagen4-fast", alias="apiModel"
    )
    input: Imagen4Input
    callback_url: str | None = Field(default=None, alias="callBackUrl")


# ---------------------------------------------------------------------------
# Sora2 (video)
# ---------------------------------------------------------------------------
class Sora2Input(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    prompt: str = Field(min_length=1, max_length=5000)
    aspect_ratio: Literal["portrait", "landscape"] | None = None
    n_frames: Literal["10", "15"] | None = None
    remove_watermark: bool | None = None


class Sora2Request(_RequestBase):
    service: Literal["KIE"] = "KIE"
    model: Literal["SORA2"] = "SORA2"
    api_model: Literal["sora-2-text-to-video"] = Field(
        default="sora-2-text-to-video", alias="apiModel"
    )
    input: Sora2Input
    callback_url: str | None = Field(default=None, alias="callBackUrl")


# ---------------------------------------------------------------------------
# Veo3 (video)
# ---------------------------------------------------------------------------
class Veo3Request(_RequestBase):
    service: Literal["KIE"] = "KIE"
    model: Literal["VEO3"] = "VEO3"
    prompt: str = Field(min_length=1, max_length=5000)
    model_variant: Literal["veo3", "veo3_fast"] = Field(alias="modelVariant")
    generation_type: (
        Literal["TEXT_2_VIDEO", "FIRST_AND_LAST_FRAMES_2_VIDEO", "REFERENCE_2_VIDEO"]
        | None
    ) = Field(default=None, alias="generationType")
    image_urls: list[str] | None = Field(default=None, max_length=3, alias="imageUrls")
    aspect_ratio: Literal["16:9", "9:16", "Auto"] | None = Field(
        default=None, alias="aspectRatio"
    )
    seeds: int | None = Field(default=None, ge=10000, le=99999)
    watermark: str | None = None
    callback_url: str | None = Field(default=None, alias="callBackUrl")
    enable_translation: bool | None = Field(default=None, alias="enableTranslation")


# ---------------------------------------------------------------------------
# Midjourney (image / video)
# ---------------------------------------------------------------------------
class MidjourneyRequest(_RequestBase):
    service: Literal["KIE"] = "KIE"
    model: Literal["MIDJOURNEY"] = "MIDJOURNEY"
    task_type: Literal[
        "mj_txt2img",
        "mj_img2img",
        "mj_style_reference",
        "mj_omni_reference",
        "mj_video",
        "mj_video_hd",
    ] = Field(alias="taskType")
    prompt: str = Field(min_length=1, max_length=2000)
    speed: Literal["relaxed", "fast", "turbo"] | None = None
    file_urls: list[str] | None = Field(default=None, alias="fileUrls")
    aspect_ratio: (
        Literal["1:2", "9:16", "2:3", "3:4", "5:6", "6:5", "4:3", "3:2", "1:1", "16:9", "2:1"]
        | None
    ) = Field(default=None, alias="aspectRatio")
    version: Literal["7", "6.1", "6", "5.2", "5.1", "niji6"] | None = None
    variety: int | None = Field(default=None, ge=0, le=100)
    stylization: int | None = Field(default=None, ge=0, le=1000)
    weirdness: int | None = Field(default=None, ge=0, le=3000)
    ow: int | None = Field(default=None, ge=1, le=1000)
    water_mark: str | None = Field(default=None, alias="waterMark")
    enable_translation: bool | None = Field(default=None, alias="enableTranslation")
    callback_url: str | None = Field(default=None, alias="callBackUrl")
    video_batch_size: Literal[1, 2, 4] | None = Field(default=None, alias="videoBatchSize")
    motion: Literal["high", "low"] | None = None


GenerationRequest = Annotated[
    Union[Imagen4Request, Veo3Request, MidjourneyRequest, Sora2Request],
    Field(discriminator="model"),
]

_REQUEST_ADAPTER: TypeAdapter[Any] = TypeAdapter(GenerationRequest)


def parse_generation_request(data: Mapping[str, Any]) -> GenerationRequest:
    """Validate ``data`` and return the matching request variant."""

    return _REQUEST_ADAPTER.validate_python(dict(data))


__all__ = [
    "GenerationRequest",
    "Imagen4Input",
    "Imagen4Request",
    "MidjourneyRequest",
    "Sora2Input",
    "Sora2Request",
    "Veo3Request",
    "parse_generation_request",
]
