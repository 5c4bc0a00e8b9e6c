# app/api/routers/comments.py
from fastapi import APIRouter, Depends, status
from typing import List
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import complaint_id_path
from app.core.auth import require_staff
from app.db.session import get_session
from app.schemas.auth import CurrentAccount
from app.schemas.common import ApiResponse
from app.schemas.complaints import CommentCreate, CommentRead
from app.services.comment_service import comment_service

router = APIRouter()

@router.post("", response_model=ApiResponse[CommentRead], status_code=status.HTTP_201_CREATED)
async def create_comment(
    comment_in: CommentCreate,
    complaint_id: str = Depends(complaint_id_path),
    session: AsyncSession = Depends(get_session),
    current_account: CurrentAccount = Depends(require_staff),
):
    """(Admin, agent) Add a comment; `is_internal` hides it from the public tracker."""
    comment = await comment_service.add_comment(complaint_id, comment_in, current_account, session)
    return ApiResponse(message="Comment created successfully", data=comment)


@router.get("", response_model=ApiResponse[List[CommentRead]])
async def read_comments(
    complaint_id: str = Depends(complaint_id_path),
    session: AsyncSession = Depends(get_session),
    current_account: CurrentAccount = Depends(require_staff),
):
    comments = await comment_service.list_comments(complaint_id, session)
    return ApiResponse(data=comments)
