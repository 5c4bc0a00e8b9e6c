# app/core/config.py
from pydantic_settings import BaseSettings
from pydantic import ConfigDict
from typing import List, Optional

class Settings(BaseSettings):
    PROJECT_NAME: str = "Complaint Desk API"
    API_PREFIX: str = "/api"
    ENVIRONMENT: str = "development"

    # Security
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 # 24 hours

    # Database
    DATABASE_URL_ASYNC: str = "sqlite+aiosqlite:///./complaints.db"
    DATABASE_ECHO: bool = False

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    # Rate Limiting
    REDIS_URL: str = "redis://localhost:6379/0"
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_REQUESTS: int = 100
    RATE_LIMIT_WINDOW_SECONDS: int = 15 * 60 # 15 minutes

    # S3 Attachment Storage
    S3_ENDPOINT_URL: Optional[str] = None
    S3_ACCESS_KEY_ID: Optional[str] = None
    S3_SECRET_ACCESS_KEY: Optional[str] = None
    S3_REGION_NAME: str = "us-east-1"
    S3_BUCKET_NAME: str = "complaint-attachments"
    S3_PRESIGNED_URL_EXPIRATION: int = 3600 # 1 hour

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = "app.log"

    model_config = ConfigDict(
        case_sensitive=True,
        env_file=".env",
        extra="ignore",
        frozen=True,
    )

settings = Settings()
