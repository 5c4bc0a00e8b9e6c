import asyncio
import math
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import get_logger
from app.db.models import (
    AdminStatus,
    Complaint,
    ComplaintStatus,
    generate_uuid,
    tracking_id_for,
)
from app.db.repositories.attachment_repo import attachment_repo
from app.db.repositories.comment_repo import comment_repo
from app.db.repositories.complaint_repo import ComplaintRepository, complaint_repo
from app.errors import ComplaintNotFound
from app.schemas.common import Pagination
from app.schemas.complaints import (
    AttachmentRead,
    CommentRead,
    ComplaintCreate,
    ComplaintDetail,
    ComplaintListItem,
    ComplaintPage,
    ComplaintRead,
    ComplaintSubmitted,
    PublicCommentRead,
    PublicComplaint,
)
from app.services.media_service import MediaService, media_service
from app.utils.markdown import render_markdown

logger = get_logger(__name__)

TRACKING_NOT_FOUND = "Complaint not found with the provided tracking ID"

# Never shown to unauthenticated callers
PRIVATE_FIELDS = {"id", "email", "client_ip", "user_agent"}


class ComplaintService:
    def __init__(self, repository: ComplaintRepository = complaint_repo, media: MediaService = media_service):
        self.repository = repository
        self.media = media

    async def submit(
        self,
        payload: ComplaintCreate,
        session: AsyncSession,
        *,
        client_ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> ComplaintSubmitted:
        """Store a new public complaint; status always starts as Pending."""
        complaint_id = generate_uuid()
        complaint = Complaint(
            id=complaint_id,
            tracking_id=tracking_id_for(complaint_id),
            name=payload.name,
            email=payload.email,
            complaint=payload.complaint,
            complaint_html=render_markdown(payload.complaint),
            complaint_type=payload.complaint_type,
            status=ComplaintStatus.PENDING,
            client_ip=client_ip,
            user_agent=user_agent or "",
        )
        created = await self.repository.create(session, obj_in=complaint)
        logger.info(f"Complaint {created.tracking_id} submitted")
        return ComplaintSubmitted(id=created.id, trackingId=created.tracking_id)

    async def list_complaints(
        self,
        session: AsyncSession,
        *,
        page: int,
        limit: int,
        status: Optional[ComplaintStatus] = None,
    ) -> ComplaintPage:
        rows = await self.repository.get_page(
            session, status=status, skip=(page - 1) * limit, limit=limit
        )
        total = await self.repository.count(session, status=status)
        complaints = [
            ComplaintListItem(
                **ComplaintRead.model_validate(complaint).model_dump(),
                comment_count=comment_count,
            )
            for complaint, comment_count in rows
        ]
        return ComplaintPage(
            complaints=complaints,
            pagination=Pagination(
                page=page,
                limit=limit,
                total=total,
                pages=math.ceil(total / limit),
            ),
        )

    async def get_or_404(self, complaint_id: str, session: AsyncSession) -> Complaint:
        complaint = await self.repository.get(session, id=complaint_id)
        if complaint is None:
            raise ComplaintNotFound()
        return complaint

    async def get_detail(self, complaint_id: str, session: AsyncSession) -> ComplaintDetail:
        """Full complaint for staff, including internal comments and attachments."""
        complaint = await self.get_or_404(complaint_id, session)
        comments = await comment_repo.get_comments_for_complaint(session, complaint_id=complaint.id)
        attachments = await attachment_repo.get_attachments_for_complaint(session, complaint_id=complaint.id)
        return ComplaintDetail(
            **ComplaintRead.model_validate(complaint).model_dump(),
            comments=[CommentRead.model_validate(comment) for comment in comments],
            attachments=[AttachmentRead.model_validate(attachment) for attachment in attachments],
        )

    async def resolve_tracking_id(self, tracking_id: str, session: AsyncSession) -> Complaint:
        matches = await self.repository.get_by_tracking_id(session, tracking_id=tracking_id)
        if not matches:
            raise ComplaintNotFound(TRACKING_NOT_FOUND)
        if len(matches) > 1:
            logger.warning(f"Tracking id {tracking_id.upper()} matched {len(matches)} complaints; using the oldest")
        return matches[0]

    async def _public_view(self, complaint: Complaint, session: AsyncSession) -> PublicComplaint:
        comments = await comment_repo.get_comments_for_complaint(
            session, complaint_id=complaint.id, include_internal=False
        )
        return PublicComplaint(
            **ComplaintRead.model_validate(complaint).model_dump(exclude=PRIVATE_FIELDS),
            comments=[PublicCommentRead.model_validate(comment) for comment in comments],
        )

    async def get_public(self, tracking_id: str, session: AsyncSession) -> PublicComplaint:
        complaint = await self.resolve_tracking_id(tracking_id, session)
        return await self._public_view(complaint, session)

    async def update_status(
        self, complaint_id: str, new_status: AdminStatus, session: AsyncSession
    ) -> ComplaintRead:
        """Set any admin status; no transition rules apply."""
        complaint = await self.get_or_404(complaint_id, session)
        complaint.set_status(ComplaintStatus(new_status.value))
        complaint = await self.repository.save(session, obj=complaint)
        logger.info(f"Complaint {complaint.tracking_id} set to {complaint.status.value}")
        return ComplaintRead.model_validate(complaint)

    async def withdraw(self, tracking_id: str, session: AsyncSession) -> PublicComplaint:
        """Withdraw by tracking id regardless of the current status."""
        complaint = await self.resolve_tracking_id(tracking_id, session)
        complaint.set_status(ComplaintStatus.WITHDRAWN)
        complaint = await self.repository.save(session, obj=complaint)
        logger.info(f"Complaint {complaint.tracking_id} withdrawn by submitter")
        return await self._public_view(complaint, session)

    async def delete(self, complaint_id: str, session: AsyncSession) -> None:
        complaint = await self.get_or_404(complaint_id, session)
        attachments = await attachment_repo.get_attachments_for_complaint(session, complaint_id=complaint.id)
        object_keys = [attachment.file_path for attachment in attachments]
        tracking_id = complaint.tracking_id

        await self.repository.delete_with_children(session, complaint_id=complaint.id)

        if object_keys and not await asyncio.to_thread(self.media.delete_objects, object_keys):
            logger.warning(f"Complaint {tracking_id} deleted but {len(object_keys)} stored objects remain")
        logger.info(f"Complaint {tracking_id} deleted")


complaint_service = ComplaintService()
