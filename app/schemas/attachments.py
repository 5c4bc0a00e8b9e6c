from typing import Annotated, Dict, Literal
from pydantic import BaseModel, Field, StringConstraints

from app.schemas.complaints import AttachmentRead

MAX_ATTACHMENT_SIZE = 5 * 1024 * 1024  # 5MB
MAX_ATTACHMENTS_PER_COMPLAINT = 2

AllowedMimeType = Literal[
    "text/plain",
    "application/pdf",
    "image/png",
    "image/jpeg",
    "image/jpg",
]


class AttachmentUploadRequest(BaseModel):
    file_name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]
    mime_type: AllowedMimeType
    file_size: int = Field(gt=0, le=MAX_ATTACHMENT_SIZE)

    model_config = {
        "json_schema_extra": {
            "example": {
                "file_name": "receipt.pdf",
                "mime_type": "application/pdf",
                "file_size": 48213,
            }
        }
    }


class PresignedUpload(BaseModel):
    upload_url: str
    fields: Dict[str, str]
    file_key: str


class AttachmentUploadResponse(BaseModel):
    attachment: AttachmentRead
    upload: PresignedUpload
