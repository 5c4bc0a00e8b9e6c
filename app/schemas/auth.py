from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, ConfigDict, Field, field_validator
from app.db.models import AccountRole


class CurrentAccount(BaseModel):
    """The authenticated caller, as re-read from the account store."""
    id: str
    email: EmailStr
    name: str
    role: AccountRole


class UserLoginModel(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)

    model_config = {
        "json_schema_extra": {
            "example": {
                "email": "admin@demo.com",
                "password": "admin123",
            }
        }
    }

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class UserPublic(BaseModel):
    id: str
    email: EmailStr
    name: str
    role: AccountRole

    model_config = ConfigDict(from_attributes=True)


class UserProfile(UserPublic):
    created_at: datetime
    last_login: Optional[datetime] = None


class LoginData(BaseModel):
    token: str
    user: UserPublic
