# myclinics/db/models/health/doctor.py
from typing import Optional, List, Dict, Any
from sqlmodel import SQLModel, Field, Column, JSON
from datetime import datetime
import uuid

from ....utils import utc_now

class Doctor(SQLModel, table=True):
    __tablename__ = "doctors"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    user_id: str = Field(foreign_key="users.id", unique=True, index=True)
    specialty: str = Field(index=True)
    location: str
    fee: float = Field(default=0.0)
    photo: Optional[str] = None
    rating: float = Field(default=0.0)
    reviews_count: int = Field(default=0)
    biography: Optional[str] = None
    experience: Optional[str] = None
    education: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

class DoctorSchedule(SQLModel, table=True):
    __tablename__ = "doctor_schedules"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    doctor_id: str = Field(foreign_key="doctors.id", index=True)
    day_of_week: int  # 0-6, Sunday=0
    slots: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))
    is_available: bool = Field(default=True)
    updated_at: datetime = Field(default_factory=utc_now)
