# myclinics/db/models/health/appointment.py
from typing import Optional
from sqlalchemy import Index, text
from sqlmodel import SQLModel, Field
from datetime import datetime, date
import uuid

from ....utils import utc_now

ACTIVE_SLOT_CLAUSE = "status IN ('pending', 'confirmed')"


class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"
    # One pending or confirmed appointment per doctor, date and slot
    __table_args__ = (
        Index(
            "uq_active_slot", "doctor_id", "appointment_date", "time_slot",
            unique=True,
            sqlite_where=text(ACTIVE_SLOT_CLAUSE),
            postgresql_where=text(ACTIVE_SLOT_CLAUSE),
        ),
    )
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    patient_id: str = Field(foreign_key="users.id", index=True)
    doctor_id: str = Field(foreign_key="doctors.id", index=True)
    appointment_date: date = Field(index=True)
    time_slot: str = Field(max_length=5)
    status: str = Field(default="pending")  # pending, confirmed, completed, cancelled
    amount: float = Field(default=0.0)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

class Review(SQLModel, table=True):
    __tablename__ = "reviews"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    appointment_id: str = Field(foreign_key="appointments.id", unique=True)
    doctor_id: str = Field(foreign_key="doctors.id", index=True)
    patient_id: str = Field(foreign_key="users.id")
    rating: int
    comment: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
