"""
Upload endpoints.

1. POST /api/s3/upload - Get presigned URL and object key
2. DELETE /api/s3/delete - Delete an uploaded object

The backend never receives file bytes; clients PUT directly to storage.
"""
import logging
from typing import Any

from fastapi import APIRouter, Depends, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from ..errors import StorageError
from .schemas import (
    DeleteRequest,
    ErrorResponse,
    MessageResponse,
    PresignRequest,
    PresignResponse,
)
from .storage import S3Storage, generate_object_key

logger = logging.getLogger(__name__)

router = APIRouter()


def get_storage(request: Request) -> S3Storage:
    return request.app.state.storage


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(ErrorResponse(error=message).model_dump(), status_code=status_code)


async def _read_json(request: Request) -> Any:
    try:
        return await request.json()
    except ValueError:
        return None


@router.post(
    "/upload",
    response_model=PresignResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def presign_upload(request: Request, storage: S3Storage = Depends(get_storage)):
    """
    Generate a presigned PUT URL for a direct upload.

    Body: {filename, contentType, size}. Response: {presignedUrl, key}.
    """
    try:
        body = PresignRequest.model_validate(await _read_json(request))
    except ValidationError:
        return _error(status.HTTP_400_BAD_REQUEST, "Invalid Request Body")

    key = generate_object_key(body.filename)
    try:
        url = storage.generate_presigned_upload_url(key, body.content_type, body.size)
    except StorageError:
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to generate presigned URL")

    logger.info(f"Presigned upload for {body.filename}: key={key}, size={body.size}")
    return PresignResponse(presigned_url=url, key=key)


@router.delete(
    "/delete",
    response_model=MessageResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def delete_object(request: Request, storage: S3Storage = Depends(get_storage)):
    """
    Delete an uploaded object.

    Body: {key}. Missing or non-string keys are refused before storage is touched.
    """
    try:
        body = DeleteRequest.model_validate(await _read_json(request))
    except ValidationError:
        return _error(status.HTTP_400_BAD_REQUEST, "Missing or invalid object key.")

    try:
        await run_in_threadpool(storage.delete_object, body.key)
    except StorageError:
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to delete file.")

    return MessageResponse(message="File deleted successfully")
