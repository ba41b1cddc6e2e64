# myclinics/schemas/users/user.py
from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
import re

from ...application.ports.user_repo import UserDto

PHONE_RE = re.compile(r"^\+?\d{7,15}$")


def clean_phone(v: Optional[str]) -> Optional[str]:
    if v is None or not v.strip():
        return None
    phone_clean = re.sub(r"[\s\-()]", "", v)
    if not PHONE_RE.match(phone_clean):
        raise ValueError("رقم الهاتف غير صالح")
    return phone_clean


class UserOut(BaseModel):
    id: str
    name: str
    email: str
    role: str
    phone: Optional[str] = None
    address: Optional[str] = None
    dateOfBirth: Optional[str] = None
    isEmailVerified: bool = False
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    @classmethod
    def from_dto(cls, user: UserDto) -> "UserOut":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            role=user.role,
            phone=user.phone,
            address=user.address,
            dateOfBirth=user.date_of_birth.isoformat() if user.date_of_birth else None,
            isEmailVerified=user.is_email_verified,
            createdAt=user.created_at,
            updatedAt=user.updated_at,
        )


class UpdateProfileRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    phone: Optional[str] = None
    address: Optional[str] = Field(None, max_length=255)
    dateOfBirth: Optional[str] = Field(None, description="YYYY-MM-DD")

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return clean_phone(v)
