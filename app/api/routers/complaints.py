# app/api/routers/complaints.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import (
    ComplaintFilterParams,
    PaginationParams,
    client_metadata,
    complaint_id_path,
    tracking_id_path,
)
from app.core.auth import require_admin, require_staff
from app.db.session import get_session
from app.schemas.auth import CurrentAccount
from app.schemas.common import ApiResponse, MessageResponse
from app.schemas.complaints import (
    ComplaintCreate,
    ComplaintDetail,
    ComplaintPage,
    ComplaintRead,
    ComplaintStatusUpdate,
    ComplaintSubmitted,
    PublicComplaint,
)
from app.services.complaint_service import complaint_service

router = APIRouter()


# ==============================
# PUBLIC ENDPOINTS
# ==============================
@router.post("", response_model=ApiResponse[ComplaintSubmitted], status_code=status.HTTP_201_CREATED)
async def submit_complaint(
    complaint_in: ComplaintCreate,
    metadata: dict = Depends(client_metadata),
    session: AsyncSession = Depends(get_session),
):
    """
    Submit a complaint. No authentication required.

    Any `status` sent in the body is ignored; new complaints always start as
    Pending. The response carries the short tracking id the submitter uses
    to follow up.
    """
    submitted = await complaint_service.submit(complaint_in, session, **metadata)
    return ApiResponse(message="Complaint submitted successfully", data=submitted)


@router.get("/public/{tracking_id}", response_model=ApiResponse[PublicComplaint])
async def track_complaint(
    tracking_id: str = Depends(tracking_id_path),
    session: AsyncSession = Depends(get_session),
):
    """Look up a complaint by tracking id. Internal comments are never included."""
    complaint = await complaint_service.get_public(tracking_id, session)
    return ApiResponse(data=complaint)


@router.patch("/public/{tracking_id}/withdraw", response_model=ApiResponse[PublicComplaint])
async def withdraw_complaint(
    tracking_id: str = Depends(tracking_id_path),
    session: AsyncSession = Depends(get_session),
):
    """Withdraw a complaint by tracking id, whatever its current status."""
    complaint = await complaint_service.withdraw(tracking_id, session)
    return ApiResponse(message="Complaint withdrawn successfully", data=complaint)


# ==============================
# STAFF ENDPOINTS
# ==============================
@router.get("", response_model=ApiResponse[ComplaintPage])
async def list_complaints(
    pagination: PaginationParams = Depends(),
    filters: ComplaintFilterParams = Depends(),
    session: AsyncSession = Depends(get_session),
    current_account: CurrentAccount = Depends(require_staff),
):
    """(Admin, agent) Newest-first page of complaints."""
    page = await complaint_service.list_complaints(
        session, page=pagination.page, limit=pagination.limit, status=filters.status
    )
    return ApiResponse(data=page)


@router.get("/{id}", response_model=ApiResponse[ComplaintDetail])
async def get_complaint(
    complaint_id: str = Depends(complaint_id_path),
    session: AsyncSession = Depends(get_session),
    current_account: CurrentAccount = Depends(require_staff),
):
    """(Admin, agent) Full complaint with every comment and attachment."""
    complaint = await complaint_service.get_detail(complaint_id, session)
    return ApiResponse(data=complaint)


@router.patch("/{id}", response_model=ApiResponse[ComplaintRead])
async def update_complaint_status(
    status_in: ComplaintStatusUpdate,
    complaint_id: str = Depends(complaint_id_path),
    session: AsyncSession = Depends(get_session),
    current_account: CurrentAccount = Depends(require_staff),
):
    """(Admin, agent) Set status to Pending or Resolved."""
    complaint = await complaint_service.update_status(complaint_id, status_in.status, session)
    return ApiResponse(message="Complaint updated successfully", data=complaint)


@router.delete("/{id}", response_model=MessageResponse)
async def delete_complaint(
    complaint_id: str = Depends(complaint_id_path),
    session: AsyncSession = Depends(get_session),
    current_account: CurrentAccount = Depends(require_admin),
):
    """(Admin only) Delete a complaint with its comments and attachments."""
    await complaint_service.delete(complaint_id, session)
    return MessageResponse(message="Complaint deleted successfully")
