# app/db/repositories/complaint_repo.py
from typing import List, Optional, Tuple
from sqlmodel import select
from sqlalchemy import delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import Complaint, ComplaintAttachment, ComplaintComment, ComplaintStatus
from app.db.repositories.base import BaseRepository

class ComplaintRepository(BaseRepository[Complaint]):
    async def get_page(
        self,
        session: AsyncSession,
        *,
        status: Optional[ComplaintStatus] = None,
        skip: int = 0,
        limit: int = 10,
    ) -> List[Tuple[Complaint, int]]:
        """Newest-first page of complaints, each paired with its comment count."""
        comment_counts = (
            select(
                ComplaintComment.complaint_id,
                func.count(ComplaintComment.id).label("comment_count"),
            )
            .group_by(ComplaintComment.complaint_id)
            .subquery()
        )
        statement = (
            select(Complaint, func.coalesce(comment_counts.c.comment_count, 0))
            .outerjoin(comment_counts, comment_counts.c.complaint_id == Complaint.id)
            .order_by(Complaint.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        if status is not None:
            statement = statement.where(Complaint.status == status)
        result = await session.execute(statement)
        return [(complaint, int(count)) for complaint, count in result.all()]

    async def count(self, session: AsyncSession, *, status: Optional[ComplaintStatus] = None) -> int:
        statement = select(func.count()).select_from(Complaint)
        if status is not None:
            statement = statement.where(Complaint.status == status)
        result = await session.execute(statement)
        return result.scalar_one()

    async def get_by_tracking_id(self, session: AsyncSession, *, tracking_id: str) -> List[Complaint]:
        statement = (
            select(Complaint)
            .where(Complaint.tracking_id == tracking_id.upper())
            .order_by(Complaint.created_at.asc())
        )
        result = await session.execute(statement)
        return result.scalars().all()

    async def delete_with_children(self, session: AsyncSession, *, complaint_id: str) -> None:
        """Remove a complaint together with its comments and attachment rows."""
        await session.execute(delete(ComplaintComment).where(ComplaintComment.complaint_id == complaint_id))
        await session.execute(delete(ComplaintAttachment).where(ComplaintAttachment.complaint_id == complaint_id))
        await session.execute(delete(Complaint).where(Complaint.id == complaint_id))
        await session.commit()

complaint_repo = ComplaintRepository(Complaint)
