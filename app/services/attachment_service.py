import asyncio
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import get_logger
from app.db.models import ComplaintAttachment, UploadedBy
from app.db.repositories.attachment_repo import AttachmentRepository, attachment_repo
from app.errors import AttachmentLimitExceeded, StorageError
from app.schemas.attachments import (
    MAX_ATTACHMENT_SIZE,
    MAX_ATTACHMENTS_PER_COMPLAINT,
    AttachmentUploadRequest,
    AttachmentUploadResponse,
    PresignedUpload,
)
from app.schemas.complaints import AttachmentRead
from app.services.complaint_service import ComplaintService, complaint_service
from app.services.media_service import MediaService, media_service

logger = get_logger(__name__)


class AttachmentService:
    def __init__(
        self,
        repository: AttachmentRepository = attachment_repo,
        complaints: ComplaintService = complaint_service,
        media: MediaService = media_service,
    ):
        self.repository = repository
        self.complaints = complaints
        self.media = media

    async def request_upload(
        self, tracking_id: str, payload: AttachmentUploadRequest, session: AsyncSession
    ) -> AttachmentUploadResponse:
        """Record an attachment for a complaint and hand back a presigned upload form."""
        complaint = await self.complaints.resolve_tracking_id(tracking_id, session)

        existing = await self.repository.count_for_complaint(session, complaint_id=complaint.id)
        if existing >= MAX_ATTACHMENTS_PER_COMPLAINT:
            raise AttachmentLimitExceeded(
                f"A complaint can have at most {MAX_ATTACHMENTS_PER_COMPLAINT} attachments"
            )

        object_key = self.media.build_object_key(complaint.id, payload.file_name)
        upload = await asyncio.to_thread(
            self.media.generate_presigned_upload, object_key, payload.mime_type, MAX_ATTACHMENT_SIZE
        )
        if upload is None:
            raise StorageError("Could not prepare attachment upload")

        attachment = ComplaintAttachment(
            complaint_id=complaint.id,
            file_name=object_key.rsplit("/", 1)[-1],
            original_name=payload.file_name,
            mime_type=payload.mime_type,
            file_size=payload.file_size,
            file_path=object_key,
            uploaded_by=UploadedBy.CLIENT,
        )
        created = await self.repository.create(session, obj_in=attachment)
        logger.info(f"Attachment {created.id} registered for complaint {complaint.tracking_id}")

        return AttachmentUploadResponse(
            attachment=AttachmentRead.model_validate(created),
            upload=PresignedUpload(**upload),
        )

    async def list_attachments(self, complaint_id: str, session: AsyncSession) -> List[AttachmentRead]:
        complaint = await self.complaints.get_or_404(complaint_id, session)
        attachments = await self.repository.get_attachments_for_complaint(session, complaint_id=complaint.id)
        return [AttachmentRead.model_validate(attachment) for attachment in attachments]


attachment_service = AttachmentService()
