# app/api/deps.py
import uuid
from typing import Optional

from fastapi import Path, Query, Request

from app.core.rate_limit import extract_client_ip
from app.db.models import ComplaintStatus


class PaginationParams:
    def __init__(
        self,
        page: int = Query(1, ge=1, description="Page number, starting at 1"),
        limit: int = Query(10, ge=1, le=100, description="Items per page"),
    ):
        self.page = page
        self.limit = limit


class ComplaintFilterParams:
    def __init__(self, status: Optional[ComplaintStatus] = Query(None, description="Only complaints in this status")):
        self.status = status


def complaint_id_path(id: uuid.UUID = Path(..., description="Complaint id")) -> str:
    return str(id)


def tracking_id_path(
    tracking_id: str = Path(
        ...,
        min_length=1,
        max_length=36,
        pattern=r"^[0-9A-Za-z-]+$",
        description="Public tracking id (case-insensitive)",
    ),
) -> str:
    return tracking_id


def client_metadata(request: Request) -> dict:
    """Submitter network/client details captured alongside a complaint."""
    return {
        "client_ip": extract_client_ip(request),
        "user_agent": request.headers.get("User-Agent", ""),
    }
