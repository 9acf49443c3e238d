"""File upload router proxying to Kie.ai temporary storage."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from ...exceptions import KieError
from ...providers.kie_uploads import DEFAULT_UPLOAD_PATH, KieUploadApi
from ..errors import ApiError, provider_error
from ..schemas import UploadResponse
from .dependencies import get_upload_api

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/generation", tags=["Generation"])


@router.post(
    "/uploads",
    response_model=UploadResponse,
    status_code=status.HTTP_201_CREATED,
)
async def upload_file(
    file: Annotated[UploadFile, File()],
    upload_api: Annotated[KieUploadApi, Depends(get_upload_api)],
    upload_path: Annotated[str, Form(alias="uploadPath", max_length=128)] = DEFAULT_UPLOAD_PATH,
) -> UploadResponse:
    """Store a reference file on Kie.ai and return its download URL."""

    try:
        if not upload_path.strip():
            raise ApiError(
                status.HTTP_400_BAD_REQUEST, "invalid_upload_path", "Upload path cannot be empty"
            )
        content = await file.read()
        if not content:
            raise ApiError(status.HTTP_400_BAD_REQUEST, "empty_file", "File is required")
        uploaded = await upload_api.upload_file(
            content,
            filename=file.filename or "upload",
            content_type=file.content_type or "application/octet-stream",
            upload_path=upload_path,
        )
    except KieError as exc:
        logger.warning(
            "api.upload.failed",
            extra={"file_name": file.filename, "error": str(exc)},
        )
        raise provider_error(exc) from exc
    finally:
        await file.close()
    return UploadResponse.from_domain(uploaded)
