import uuid
import enum
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import Column, Enum, DateTime, Text
from sqlmodel import Field, Relationship, SQLModel


class AccountRole(str, enum.Enum):
    ADMIN = "admin"
    AGENT = "agent"


class ComplaintStatus(str, enum.Enum):
    PENDING = "Pending"
    RESOLVED = "Resolved"
    WITHDRAWN = "Withdrawn"


class AdminStatus(str, enum.Enum):
    """Statuses an admin or agent may set directly."""
    PENDING = "Pending"
    RESOLVED = "Resolved"


class ComplaintType(str, enum.Enum):
    TECHNICAL = "Technical"
    BILLING = "Billing"
    SERVICE = "Service"
    GENERAL = "General"
    PRODUCT = "Product"
    ACCOUNT = "Account"
    OTHER = "Other"


class UploadedBy(str, enum.Enum):
    CLIENT = "client"
    ADMIN = "admin"


def generate_uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def tracking_id_for(complaint_id: str) -> str:
    """Public handle for a complaint: the first segment of its id, upper-cased."""
    return complaint_id.split("-")[0].upper()


class AdminUser(SQLModel, table=True):
    __tablename__ = "admin_users"

    id: str = Field(default_factory=generate_uuid, primary_key=True, index=True)
    email: str = Field(unique=True, index=True, max_length=255)
    password_hash: str
    name: str = Field(max_length=255)
    role: AccountRole = Field(sa_column=Column(Enum(AccountRole), nullable=False), default=AccountRole.ADMIN)
    is_active: bool = Field(default=True, index=True)

    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True))
    )
    last_login: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True)
    )

    comments: List["ComplaintComment"] = Relationship(back_populates="author")


class Complaint(SQLModel, table=True):
    __tablename__ = "complaints"

    id: str = Field(default_factory=generate_uuid, primary_key=True)
    tracking_id: str = Field(index=True, max_length=36)
    name: str = Field(max_length=255)
    email: str = Field(index=True, max_length=255)
    complaint: str = Field(sa_column=Column(Text, nullable=False))
    complaint_html: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    complaint_type: ComplaintType = Field(
        sa_column=Column(Enum(ComplaintType), nullable=False, index=True),
        default=ComplaintType.GENERAL,
    )
    status: ComplaintStatus = Field(
        sa_column=Column(Enum(ComplaintStatus), nullable=False, index=True),
        default=ComplaintStatus.PENDING,
    )

    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), index=True)
    )
    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True))
    )
    resolved_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True)
    )

    client_ip: Optional[str] = Field(default=None, max_length=64)
    user_agent: Optional[str] = None

    comments: List["ComplaintComment"] = Relationship(
        back_populates="complaint",
        sa_relationship_kwargs={"cascade": "all, delete-orphan", "order_by": "ComplaintComment.created_at"},
    )
    attachments: List["ComplaintAttachment"] = Relationship(
        back_populates="complaint",
        sa_relationship_kwargs={"cascade": "all, delete-orphan", "order_by": "ComplaintAttachment.created_at"},
    )

    def set_status(self, new_status: ComplaintStatus) -> None:
        """Apply a status and keep resolved_at in step with it."""
        now = utcnow()
        self.status = new_status
        self.updated_at = now
        self.resolved_at = now if new_status == ComplaintStatus.RESOLVED else None


class ComplaintComment(SQLModel, table=True):
    __tablename__ = "complaint_comments"

    id: str = Field(default_factory=generate_uuid, primary_key=True)
    complaint_id: str = Field(foreign_key="complaints.id", index=True, ondelete="CASCADE")
    author_id: str = Field(foreign_key="admin_users.id", index=True)
    author_name: str = Field(max_length=255)
    comment_text: str = Field(sa_column=Column(Text, nullable=False))
    comment_html: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    is_internal: bool = Field(default=False)

    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), index=True)
    )
    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True))
    )

    complaint: Complaint = Relationship(back_populates="comments")
    author: AdminUser = Relationship(back_populates="comments")


class ComplaintAttachment(SQLModel, table=True):
    __tablename__ = "complaint_attachments"

    id: str = Field(default_factory=generate_uuid, primary_key=True)
    complaint_id: str = Field(foreign_key="complaints.id", index=True, ondelete="CASCADE")
    file_name: str = Field(max_length=255)
    original_name: str = Field(max_length=255)
    mime_type: str = Field(max_length=100)
    file_size: int
    file_path: str
    uploaded_by: UploadedBy = Field(sa_column=Column(Enum(UploadedBy), nullable=False), default=UploadedBy.CLIENT)

    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), index=True)
    )

    complaint: Complaint = Relationship(back_populates="attachments")
