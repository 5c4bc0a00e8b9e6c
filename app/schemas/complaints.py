import html
from typing import Annotated, List, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints, field_validator

from app.db.models import AdminStatus, ComplaintStatus, ComplaintType, UploadedBy
from app.schemas.common import Pagination


NAME_MAX_LENGTH = 255

NameStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=NAME_MAX_LENGTH)]
ComplaintText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=10, max_length=10_000)]
CommentText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=5_000)]


# --- Complaint Schemas ---
class ComplaintCreate(BaseModel):
    name: NameStr
    email: EmailStr
    complaint: ComplaintText
    complaint_type: ComplaintType = ComplaintType.GENERAL

    model_config = {
        "json_schema_extra": {
            "example": {
                "name": "Ann",
                "email": "ann@example.com",
                "complaint": "My order arrived **damaged** and support never replied.",
                "complaint_type": "Product",
            }
        }
    }

    @field_validator("name")
    @classmethod
    def escape_name(cls, value: str) -> str:
        escaped = html.escape(value)
        if len(escaped) > NAME_MAX_LENGTH:
            raise ValueError(f"Name is too long once HTML characters are escaped (max {NAME_MAX_LENGTH})")
        return escaped

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class ComplaintStatusUpdate(BaseModel):
    status: AdminStatus


class ComplaintSubmitted(BaseModel):
    id: str
    trackingId: str


class CommentRead(BaseModel):
    id: str
    complaint_id: str
    author_id: str
    author_name: str
    comment_text: str
    comment_html: Optional[str] = None
    is_internal: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PublicCommentRead(BaseModel):
    author_name: str
    comment_text: str
    comment_html: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AttachmentRead(BaseModel):
    id: str
    complaint_id: str
    file_name: str
    original_name: str
    mime_type: str
    file_size: int
    file_path: str
    uploaded_by: UploadedBy
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ComplaintRead(BaseModel):
    id: str
    tracking_id: str
    name: str
    email: str
    complaint: str
    complaint_html: Optional[str] = None
    complaint_type: ComplaintType
    status: ComplaintStatus
    created_at: datetime
    updated_at: datetime
    resolved_at: Optional[datetime] = None
    client_ip: Optional[str] = None
    user_agent: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ComplaintListItem(ComplaintRead):
    comment_count: int = 0


class ComplaintDetail(ComplaintRead):
    comments: List[CommentRead] = Field(default_factory=list)
    attachments: List[AttachmentRead] = Field(default_factory=list)


class PublicComplaint(BaseModel):
    """What a submitter sees when tracking a complaint."""
    tracking_id: str
    name: str
    complaint: str
    complaint_html: Optional[str] = None
    complaint_type: ComplaintType
    status: ComplaintStatus
    created_at: datetime
    updated_at: datetime
    resolved_at: Optional[datetime] = None
    comments: List[PublicCommentRead] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class ComplaintPage(BaseModel):
    complaints: List[ComplaintListItem]
    pagination: Pagination


# --- Comment Schemas ---
class CommentCreate(BaseModel):
    comment_text: CommentText
    is_internal: bool = False

    model_config = {
        "json_schema_extra": {
            "example": {
                "comment_text": "Escalated to billing, refund expected within 5 days.",
                "is_internal": False,
            }
        }
    }
