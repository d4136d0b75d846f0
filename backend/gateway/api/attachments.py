"""
Attachment gateway endpoint.

A single path, dispatched on the request content type:

- OPTIONS /                          -> CORS preflight, no auth
- POST / (multipart/form-data)       -> upload: fields "file" and "noteId"
- POST / (application/json)          -> delete: body {"attachmentId": "..."}

Flow for every non-OPTIONS request:
1. Authenticate the bearer token (401 otherwise)
2. Resolve the caller's storage config (400 if missing/disabled/invalid)
3. Upload or delete, then map the outcome to a JSON response
"""
import logging

from fastapi import APIRouter, Depends, Request, Response, status
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile

from gateway.auth.dependencies import get_current_user
from gateway.database import get_db
from gateway.exceptions import ConfigError, ValidationError, StorageError, PersistenceError
from gateway.api.responses import cors_headers, json_response, error_response
from gateway.schemas.attachment import (
    AttachmentResponse,
    DeleteAttachmentRequest,
    DeleteAttachmentResponse,
)
from gateway.schemas.storage_config import StorageConfig
from gateway.services.attachment_service import AttachmentRecorder
from gateway.services.config_resolver import ConfigResolver, get_config_resolver
from gateway.storage.object_client import ObjectClient, ensure_upload_size, get_object_client

logger = logging.getLogger(__name__)

router = APIRouter()

CONFIG_MISSING_MESSAGE = (
    "Object storage configuration not found or disabled. "
    "Please configure object storage settings in your user preferences."
)
MISSING_UPLOAD_FIELDS_MESSAGE = "Missing file or noteId"
INVALID_DELETE_BODY_MESSAGE = "Invalid request body. Expected attachmentId for delete operation."


@router.options("/")
async def preflight():
    """CORS preflight. Answered before authentication."""
    return Response(status_code=status.HTTP_200_OK, headers=cors_headers())


@router.api_route("/", methods=["POST", "PUT", "PATCH", "DELETE"])
async def handle_attachment_request(
    request: Request,
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user),
    resolver: ConfigResolver = Depends(get_config_resolver),
    object_client: ObjectClient = Depends(get_object_client)
):
    """
    Upload or delete an attachment for the authenticated user.

    The HTTP method does not matter; multipart bodies are uploads and
    everything else is treated as a JSON delete request.
    """
    logger.info(f"{request.method} attachment request from user {user_id}")

    config = await resolver.resolve(db, user_id)
    if config is None:
        raise ConfigError(CONFIG_MISSING_MESSAGE)

    recorder = AttachmentRecorder(object_client)
    content_type = request.headers.get("content-type", "")

    if "multipart/form-data" in content_type:
        return await _handle_upload(request, db, recorder, config, user_id)
    return await _handle_delete(request, db, recorder, config, user_id)


async def _handle_upload(
    request: Request,
    db: AsyncSession,
    recorder: AttachmentRecorder,
    config: StorageConfig,
    user_id: str
):
    form = await request.form()
    upload = form.get("file")
    note_id = form.get("noteId")

    if not isinstance(upload, UploadFile) or not isinstance(note_id, str) or not note_id:
        raise ValidationError(MISSING_UPLOAD_FIELDS_MESSAGE)

    logger.info(f"Upload request - file: {upload.filename}, note: {note_id}")

    # Reject on the declared size before buffering the body
    ensure_upload_size(upload.size)
    data = await upload.read()

    try:
        attachment = await recorder.record_upload(
            db,
            config,
            user_id=user_id,
            note_id=note_id,
            filename=upload.filename or "",
            content_type=upload.content_type or None,
            data=data,
        )
    except (StorageError, PersistenceError) as e:
        logger.error(f"Upload process failed: {e}")
        return error_response(
            e,
            message=f"Upload failed: {e.message}",
            details=e.details if e.details is not None else str(e),
        )

    return json_response(AttachmentResponse.model_validate(attachment).model_dump(mode="json"))


async def _handle_delete(
    request: Request,
    db: AsyncSession,
    recorder: AttachmentRecorder,
    config: StorageConfig,
    user_id: str
):
    try:
        body = await request.json()
    except ValueError:
        raise ValidationError(INVALID_DELETE_BODY_MESSAGE)

    if not isinstance(body, dict):
        raise ValidationError(INVALID_DELETE_BODY_MESSAGE)

    try:
        payload = DeleteAttachmentRequest.model_validate(body)
    except PydanticValidationError:
        raise ValidationError(INVALID_DELETE_BODY_MESSAGE)

    logger.info(f"Delete request for attachment: {payload.attachment_id}")
    await recorder.remove(db, config, user_id=user_id, attachment_id=payload.attachment_id)

    return json_response(DeleteAttachmentResponse(success=True).model_dump())
