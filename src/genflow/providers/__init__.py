"""Kie.ai provider integration."""

from .kie_client import KieClient, backoff_delay
from .kie_models import (
    GenerationRequest,
    Imagen4Input,
    Imagen4Request,
    MidjourneyRequest,
    Sora2Input,
    Sora2Request,
    Veo3Request,
    parse_generation_request,
)
from .kie_requests import WireRequest, create_endpoint_for, query_endpoint_for, to_wire_request
from .kie_results import IntegerFlagNormalizer, StateStringNormalizer, normalizer_for
from .kie_tasks import CreatedTask, KieTaskApi
from .kie_uploads import KieUploadApi, UploadedFile

__all__ = [
    "CreatedTask",
    "GenerationRequest",
    "Imagen4Input",
    "Imagen4Request",
    "IntegerFlagNormalizer",
    "KieClient",
    "KieTaskApi",
    "KieUploadApi",
    "MidjourneyRequest",
    "Sora2Input",
    "Sora2Request",
    "StateStringNormalizer",
    "UploadedFile",
    "Veo3Request",
    "WireRequest",
    "backoff_delay",
    "create_endpoint_for",
    "normalizer_for",
    "parse_generation_request",
    "query_endpoint_for",
    "to_wire_request",
]
