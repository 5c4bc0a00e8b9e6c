# app/api/routers/attachments.py
from fastapi import APIRouter, Depends, status
from typing import List
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import complaint_id_path, tracking_id_path
from app.core.auth import require_staff
from app.db.session import get_session
from app.schemas.attachments import AttachmentUploadRequest, AttachmentUploadResponse
from app.schemas.auth import CurrentAccount
from app.schemas.common import ApiResponse
from app.schemas.complaints import AttachmentRead
from app.services.attachment_service import attachment_service

router = APIRouter()


@router.post(
    "/public/{tracking_id}/attachments",
    response_model=ApiResponse[AttachmentUploadResponse],
    status_code=status.HTTP_201_CREATED,
)
async def request_attachment_upload(
    upload_in: AttachmentUploadRequest,
    tracking_id: str = Depends(tracking_id_path),
    session: AsyncSession = Depends(get_session),
):
    """
    Get a pre-signed S3 form to upload a file for a complaint.

    - At most two files per complaint, 5MB each.
    - Accepted types: TXT, PDF, PNG, JPG/JPEG.
    - POST the file to `upload.upload_url` with `upload.fields`.
    """
    result = await attachment_service.request_upload(tracking_id, upload_in, session)
    return ApiResponse(message="Attachment upload prepared", data=result)


@router.get("/{id}/attachments", response_model=ApiResponse[List[AttachmentRead]])
async def list_attachments(
    complaint_id: str = Depends(complaint_id_path),
    session: AsyncSession = Depends(get_session),
    current_account: CurrentAccount = Depends(require_staff),
):
    attachments = await attachment_service.list_attachments(complaint_id, session)
    return ApiResponse(data=attachments)
