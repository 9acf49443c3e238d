"""Dependencies resolving services stored on the application state."""

from __future__ import annotations

from fastapi import Request

from ...providers.kie_uploads import KieUploadApi
from ...services.generation_service import GenerationService


def get_generation_service(request: Request) -> GenerationService:
    return request.app.state.generation_service


def get_upload_api(request: Request) -> KieUploadApi:
    return request.app.state.upload_api
