from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import get_logger
from app.db.models import ComplaintComment
from app.db.repositories.account_repo import account_repo
from app.db.repositories.comment_repo import CommentRepository, comment_repo
from app.db.repositories.complaint_repo import complaint_repo
from app.errors import AccountNotFound, ComplaintNotFound
from app.schemas.auth import CurrentAccount
from app.schemas.complaints import CommentCreate, CommentRead
from app.utils.markdown import render_markdown

logger = get_logger(__name__)


class CommentService:
    def __init__(self, repository: CommentRepository = comment_repo):
        self.repository = repository

    async def _ensure_complaint(self, complaint_id: str, session: AsyncSession) -> None:
        if await complaint_repo.get(session, id=complaint_id) is None:
            raise ComplaintNotFound()

    async def add_comment(
        self,
        complaint_id: str,
        payload: CommentCreate,
        author: CurrentAccount,
        session: AsyncSession,
    ) -> CommentRead:
        await self._ensure_complaint(complaint_id, session)

        account = await account_repo.get(session, id=author.id)
        if account is None:
            raise AccountNotFound()

        comment = ComplaintComment(
            complaint_id=complaint_id,
            author_id=account.id,
            author_name=account.name,
            comment_text=payload.comment_text,
            comment_html=render_markdown(payload.comment_text),
            is_internal=payload.is_internal,
        )
        created = await self.repository.create(session, obj_in=comment)
        logger.info(
            f"{'Internal' if created.is_internal else 'Public'} comment added to complaint {complaint_id} by {account.id}"
        )
        return CommentRead.model_validate(created)

    async def list_comments(self, complaint_id: str, session: AsyncSession) -> List[CommentRead]:
        await self._ensure_complaint(complaint_id, session)
        comments = await self.repository.get_comments_for_complaint(session, complaint_id=complaint_id)
        return [CommentRead.model_validate(comment) for comment in comments]


comment_service = CommentService()
