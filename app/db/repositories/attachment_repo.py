# app/db/repositories/attachment_repo.py
from typing import List
from sqlmodel import select
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import ComplaintAttachment
from app.db.repositories.base import BaseRepository

class AttachmentRepository(BaseRepository[ComplaintAttachment]):
    async def get_attachments_for_complaint(
        self, session: AsyncSession, *, complaint_id: str
    ) -> List[ComplaintAttachment]:
        statement = (
            select(ComplaintAttachment)
            .where(ComplaintAttachment.complaint_id == complaint_id)
            .order_by(ComplaintAttachment.created_at.asc())
        )
        result = await session.execute(statement)
        return result.scalars().all()

    async def count_for_complaint(self, session: AsyncSession, *, complaint_id: str) -> int:
        statement = select(func.count()).select_from(ComplaintAttachment).where(
            ComplaintAttachment.complaint_id == complaint_id
        )
        result = await session.execute(statement)
        return result.scalar_one()

attachment_repo = AttachmentRepository(ComplaintAttachment)
