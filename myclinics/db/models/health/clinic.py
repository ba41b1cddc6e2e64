# myclinics/db/models/health/clinic.py
from typing import Optional, List
from sqlmodel import SQLModel, Field, Column, JSON
from datetime import datetime
import uuid

from ....utils import utc_now

class Clinic(SQLModel, table=True):
    __tablename__ = "clinics"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    doctor_id: str = Field(foreign_key="doctors.id", unique=True, index=True)
    name: str
    address: str
    phone: str = Field(max_length=20)
    description: str = Field(default="")
    images: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    status: str = Field(default="pending", index=True)  # pending, approved, rejected
    submitted_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
