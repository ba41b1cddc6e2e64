# myclinics/db/models/auth/otp.py
from sqlmodel import SQLModel, Field
from datetime import datetime
import uuid

from ....utils import utc_now

class OTPCode(SQLModel, table=True):
    __tablename__ = "otp_codes"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    otp: str = Field(max_length=10)
    purpose: str = Field(max_length=20)  # email_verification, password_reset
    attempts: int = Field(default=0)
    is_used: bool = Field(default=False)
    expires_at: datetime
    created_at: datetime = Field(default_factory=utc_now)

class RevokedToken(SQLModel, table=True):
    __tablename__ = "revoked_tokens"
    jti: str = Field(primary_key=True, max_length=64)
    user_id: str = Field(index=True)
    expires_at: datetime
    revoked_at: datetime = Field(default_factory=utc_now)
