# app/services/media_service.py
import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError
import re
import uuid
from typing import Optional

from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def safe_file_name(file_name: str) -> str:
    cleaned = _UNSAFE_CHARS.sub("_", file_name).strip("._")
    return cleaned or "file"


class MediaService:
    def __init__(self, client=None, bucket: str = settings.S3_BUCKET_NAME):
        self._client = client
        self.bucket = bucket

    @property
    def s3_client(self):
        if self._client is None:
            self._client = boto3.client(
                "s3",
                endpoint_url=settings.S3_ENDPOINT_URL,
                aws_access_key_id=settings.S3_ACCESS_KEY_ID,
                aws_secret_access_key=settings.S3_SECRET_ACCESS_KEY,
                region_name=settings.S3_REGION_NAME,
                config=Config(signature_version="s3v4"),
            )
        return self._client

    def build_object_key(self, complaint_id: str, file_name: str) -> str:
        return f"complaints/{complaint_id}/{uuid.uuid4()}-{safe_file_name(file_name)}"

    def generate_presigned_upload(self, object_key: str, file_type: str, max_size: int) -> Optional[dict]:
        try:
            response = self.s3_client.generate_presigned_post(
                Bucket=self.bucket,
                Key=object_key,
                Fields={"Content-Type": file_type},
                Conditions=[
                    {"Content-Type": file_type},
                    ["content-length-range", 1, max_size],
                ],
                ExpiresIn=settings.S3_PRESIGNED_URL_EXPIRATION,
            )
            return {"upload_url": response["url"], "fields": response["fields"], "file_key": object_key}
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error generating presigned URL: {e}")
            return None

    def delete_objects(self, object_keys: list[str]) -> bool:
        """Remove stored objects; failures are logged and reported, not raised."""
        if not object_keys:
            return True
        try:
            self.s3_client.delete_objects(
                Bucket=self.bucket,
                Delete={"Objects": [{"Key": key} for key in object_keys], "Quiet": True},
            )
            return True
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error deleting attachment objects {object_keys}: {e}")
            return False

media_service = MediaService()
