# app/db/repositories/comment_repo.py
from typing import List
from sqlmodel import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import ComplaintComment
from app.db.repositories.base import BaseRepository

class CommentRepository(BaseRepository[ComplaintComment]):
    async def get_comments_for_complaint(
        self, session: AsyncSession, *, complaint_id: str, include_internal: bool = True
    ) -> List[ComplaintComment]:
        statement = (
            select(ComplaintComment)
            .where(ComplaintComment.complaint_id == complaint_id)
            .order_by(ComplaintComment.created_at.asc())
        )
        if not include_internal:
            statement = statement.where(ComplaintComment.is_internal == False)  # noqa: E712
        result = await session.execute(statement)
        return result.scalars().all()

comment_repo = CommentRepository(ComplaintComment)
