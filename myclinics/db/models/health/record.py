# myclinics/db/models/health/record.py
from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime
import uuid

from ....utils import utc_now

class MedicalRecord(SQLModel, table=True):
    __tablename__ = "medical_records"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    patient_id: str = Field(foreign_key="users.id", index=True)
    doctor_id: str = Field(foreign_key="doctors.id", index=True)
    appointment_id: str = Field(foreign_key="appointments.id")
    diagnosis: str
    prescription: str
    notes: Optional[str] = None
    visit_date: datetime = Field(default_factory=utc_now)

class MedicalReport(SQLModel, table=True):
    __tablename__ = "medical_reports"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    patient_id: str = Field(foreign_key="users.id", index=True)
    appointment_id: Optional[str] = Field(default=None, foreign_key="appointments.id")
    report_type: str
    description: str
    file_url: str
    uploaded_by: str = Field(foreign_key="doctors.id")
    upload_date: datetime = Field(default_factory=utc_now)
