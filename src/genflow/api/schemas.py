"""Pydantic request and response bodies of the generation API."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..domain.models import GenerationModel, GenerationService, GenerationTask, TaskStatus
from ..providers.kie_models import GenerationRequest
from ..providers.kie_uploads import UploadedFile


class CreateTaskRequest(BaseModel):
    """Body of ``POST /api/generation/tasks``."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    prompt_id: Optional[str] = Field(default=None, alias="promptId", max_length=64)
    provider_params: GenerationRequest = Field(alias="providerParams")


class TaskResponse(BaseModel):
    """Snapshot of a generation task."""

    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    id: str
    prompt_id: Optional[str] = Field(default=None, alias="promptId")
    service: GenerationService
    model: GenerationModel
    external_task_id: str = Field(alias="externalTaskId")
    status: TaskStatus
    provider_params: dict[str, Any] = Field(alias="providerParams")
    result_json: Optional[dict[str, Any]] = Field(default=None, alias="resultJson")
    result_urls: List[str] = Field(default_factory=list, alias="resultUrls")
    fail_code: Optional[str] = Field(default=None, alias="failCode")
    fail_msg: Optional[str] = Field(default=None, alias="failMsg")
    created_at: datetime = Field(alias="createdAt")
    completed_at: Optional[datetime] = Field(default=None, alias="completedAt")

    @classmethod
    def from_domain(cls, task: GenerationTask) -> "TaskResponse":
        return cls(
            id=task.id,
            prompt_id=task.prompt_id,
            service=task.service,
            model=task.model,
            external_task_id=task.external_task_id,
            status=task.status,
            provider_params=dict(task.provider_params),
            result_json=json.loads(task.result_payload) if task.result_payload else None,
            result_urls=task.result_urls,
            fail_code=task.failure_code,
            fail_msg=task.failure_message,
            created_at=task.created_at,
            completed_at=task.completed_at,
        )


class UploadResponse(BaseModel):
    """File stored on Kie.ai; the URL expires at ``expiresAt``."""

    model_config = ConfigDict(populate_by_name=True)

    download_url: str = Field(alias="downloadUrl")
    file_name: str = Field(alias="fileName")
    file_size: int = Field(alias="fileSize")
    mime_type: str = Field(alias="mimeType")
    expires_at: datetime = Field(alias="expiresAt")

    @classmethod
    def from_domain(cls, uploaded: UploadedFile) -> "UploadResponse":
        return cls(
            download_url=uploaded.download_url,
            file_name=uploaded.file_name,
            file_size=uploaded.file_size,
            mime_type=uploaded.mime_type,
            expires_at=uploaded.expires_at,
        )


__all__ = ["CreateTaskRequest", "TaskResponse", "UploadResponse"]
