"""Uploads to the Kie.ai temporary file storage.

Uploaded files are deleted by Kie.ai three days after ``uploadedAt``. The
returned ``download_url`` is what Veo3 ``imageUrls`` and Midjourney
``fileUrls`` expect.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..exceptions import KieResponseError
from .kie_client import KieClient

logger = logging.getLogger(__name__)

DEFAULT_UPLOAD_URL = "https://kieai.redpandaai.co/api/file-stream-upload"
DEFAULT_UPLOAD_PATH = "user-uploads"
UPLOAD_RETENTION = timedelta(days=3)


class _UploadData(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    file_name: str = Field(alias="fileName")
    download_url: str = Field(alias="downloadUrl", min_length=1)
    file_size: int = Field(alias="fileSize", ge=0)
    mime_type: str = Field(alias="mimeType")
    uploaded_at: datetime = Field(alias="uploadedAt")


@dataclass(frozen=True, slots=True)
class UploadedFile:
    download_url: str
    file_name: str
    file_size: int
    mime_type: str
    expires_at: datetime


class KieUploadApi:
    """Stream files to Kie.ai storage through :class:`KieClient`."""

    def __init__(self, client: KieClient, *, upload_url: str = DEFAULT_UPLOAD_URL) -> None:
        self._client = client
        self.upload_url = upload_url

    async def upload_file(
        self,
        content: bytes,
        *,
        filename: str,
        content_type: str = "application/octet-stream",
        upload_path: str = DEFAULT_UPLOAD_PATH,
    ) -> UploadedFile:
        """Upload ``content`` and return its download URL and expiry.

        Transport errors propagate unchanged. A success envelope without a
        usable ``data`` object raises :class:`KieResponseError`.
        """

        if not upload_path or not upload_path.strip():
            raise ValueError("Upload path cannot be empty")
        envelope = await self._client.upload(
            self.upload_url,
            files={"file": (filename, content, content_type)},
            data={"uploadPath": upload_path.strip()},
        )
        try:
            data = _UploadData.model_validate(envelope.get("data"))
        except ValidationError as exc:
            raise KieResponseError(
                f"Kie.ai upload response is missing file details: {exc.error_count()} invalid field(s)"
            ) from exc

        uploaded_at = data.uploaded_at
        if uploaded_at.tzinfo is None:
            uploaded_at = uploaded_at.replace(tzinfo=timezone.utc)
        logger.info(
            "kie.file.uploaded",
            extra={"file_name": data.file_name, "file_size": data.file_size, "upload_path": upload_path},
        )
        return UploadedFile(
            download_url=data.download_url,
            file_name=data.file_name,
            file_size=data.file_size,
            mime_type=data.mime_type,
            expires_at=uploaded_at + UPLOAD_RETENTION,
        )


__all__ = [
    "DEFAULT_UPLOAD_PATH",
    "DEFAULT_UPLOAD_URL",
    "KieUploadApi",
    "UPLOAD_RETENTION",
    "UploadedFile",
]
