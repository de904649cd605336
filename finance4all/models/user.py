from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import date, datetime
from uuid import UUID
import re

from finance4all.db.core import UserRole


EMAIL_PATTERN = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
URL_PATTERN = r'^https?://[^\s/$.?#].[^\s]*$'


def _check_photo_url(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    if not re.match(URL_PATTERN, v):
        raise ValueError('Invalid photo URL')
    return v


# ===== USER PYDANTIC MODELS =====

class UserCreate(BaseModel):
    """Registration payload; the Firebase UID comes from the verified token"""
    email: str = Field(..., description="User's email address")
    display_name: Optional[str] = Field(None, max_length=100)
    photo_url: Optional[str] = Field(None, max_length=500)
    date_of_birth: Optional[date] = Field(None, description="Date of birth, used for projections")

    @field_validator('email')
    @classmethod
    def validate_email(cls, v: str) -> str:
        if not re.match(EMAIL_PATTERN, v.strip()):
            raise ValueError('Invalid email address')
        return v.lower().strip()

    @field_validator('photo_url')
    @classmethod
    def validate_photo_url(cls, v: Optional[str]) -> Optional[str]:
        return _check_photo_url(v)


class UserUpdate(BaseModel):
    """Update user profile - all fields optional"""
    display_name: Optional[str] = Field(None, max_length=100)
    photo_url: Optional[str] = Field(None, max_length=500)
    date_of_birth: Optional[date] = None

    @field_validator('photo_url')
    @classmethod
    def validate_photo_url(cls, v: Optional[str]) -> Optional[str]:
        return _check_photo_url(v)


class UserResponse(BaseModel):
    """User data returned to client"""
    id: UUID
    firebase_uid: str
    email: str
    display_name: Optional[str]
    photo_url: Optional[str]
    date_of_birth: Optional[date]
    role: UserRole
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
