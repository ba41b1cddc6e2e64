# myclinics/schemas/auth/auth.py
from pydantic import BaseModel, Field, field_validator
from typing import Optional
import re

from ..users.user import UserOut, clean_phone

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _check_email(v: str) -> str:
    v = v.strip()
    if not EMAIL_RE.match(v):
        raise ValueError("البريد الإلكتروني غير صالح")
    return v


class RegisterRequest(BaseModel):
    email: str
    password: str = Field(..., min_length=1)
    name: str = Field(..., min_length=2, max_length=100)
    phone: Optional[str] = None
    role: str = "patient"
    address: Optional[str] = Field(None, max_length=255)
    dateOfBirth: Optional[str] = Field(None, description="YYYY-MM-DD")
    # Doctor accounts only
    specialty: Optional[str] = None
    location: Optional[str] = None
    fee: Optional[float] = Field(None, ge=0)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return _check_email(v)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return clean_phone(v)

    @field_validator("role")
    @classmethod
    def validate_role(cls, v):
        if v not in ("patient", "doctor", "admin"):
            raise ValueError("نوع الحساب غير صالح")
        return v


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return _check_email(v)


class VerifyOTPRequest(BaseModel):
    userId: str
    otp: str = Field(..., min_length=4, max_length=10)


class ResendOTPRequest(BaseModel):
    userId: str


class RefreshTokenRequest(BaseModel):
    refreshToken: str


class EmailRequest(BaseModel):
    email: str

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return _check_email(v)


class ResetPasswordRequest(BaseModel):
    userId: str
    otp: str
    newPassword: str


class ChangePasswordRequest(BaseModel):
    currentPassword: str
    newPassword: str
    confirmPassword: str


class OTPIssuedResponse(BaseModel):
    success: bool = True
    message: str
    userId: str
    emailSent: Optional[bool] = None
    otp: Optional[str] = None
    devMessage: Optional[str] = None


class VerifyResetResponse(BaseModel):
    success: bool = True
    message: str
    canResetPassword: bool


class AuthResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    token: str
    refreshToken: str
    user: UserOut


class ExistsOut(BaseModel):
    exists: bool


class TokenStatusOut(BaseModel):
    valid: bool
    user: Optional[UserOut] = None
