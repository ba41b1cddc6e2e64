# myclinics/db/models/users/user.py
from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime, date
import uuid

from ....utils import utc_now

class User(SQLModel, table=True):
    __tablename__ = "users"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    name: str = Field(max_length=100)
    email: str = Field(max_length=254, unique=True, index=True)
    password_hash: str = Field(max_length=255)
    phone: Optional[str] = Field(max_length=20, default=None, unique=True, index=True)
    role: str = Field(default="patient", max_length=10, index=True)  # patient, doctor, admin
    address: Optional[str] = Field(max_length=255, default=None)
    date_of_birth: Optional[date] = Field(default=None)
    is_email_verified: bool = Field(default=False)
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
