# myclinics/schemas/records/record.py
from pydantic import Field
from typing import List, Optional
from datetime import datetime

from ..common.common import APIModel
from ...application.ports.records_repo import MedicalRecordDto, MedicalReportDto


class MedicalRecordRequest(APIModel):
    appointmentId: str
    diagnosis: str = Field(..., min_length=1)
    prescription: str = ""
    notes: Optional[str] = None


class MedicalRecordOut(APIModel):
    id: str = Field(..., alias="_id")
    patientId: str
    appointmentId: str
    diagnosis: str
    prescription: str
    notes: Optional[str] = None
    visitDate: datetime

    @classmethod
    def from_dto(cls, record: MedicalRecordDto) -> "MedicalRecordOut":
        return cls(
            id=record.id,
            patientId=record.patient_id,
            appointmentId=record.appointment_id,
            diagnosis=record.diagnosis,
            prescription=record.prescription,
            notes=record.notes,
            visitDate=record.visit_date,
        )


class RecordDoctorUser(APIModel):
    name: str


class RecordDoctorOut(APIModel):
    id: str = Field(..., alias="_id")
    userId: Optional[RecordDoctorUser] = None
    specialty: str


class MedicalHistoryRecordOut(MedicalRecordOut):
    doctorId: Optional[RecordDoctorOut] = None

    @classmethod
    def from_view(cls, view) -> "MedicalHistoryRecordOut":
        doctor = view.doctor
        base = MedicalRecordOut.from_dto(view.record)
        return cls(
            doctorId=RecordDoctorOut(
                id=doctor.id,
                userId=RecordDoctorUser(name=doctor.name) if doctor.user else None,
                specialty=doctor.specialty,
            ) if doctor else None,
            **base.model_dump(),
        )


class MedicalReportOut(APIModel):
    id: str = Field(..., alias="_id")
    patientId: str
    appointmentId: Optional[str] = None
    reportType: str
    description: str
    fileUrl: str
    uploadedBy: str
    uploadDate: datetime

    @classmethod
    def from_dto(cls, report: MedicalReportDto) -> "MedicalReportOut":
        return cls(
            id=report.id,
            patientId=report.patient_id,
            appointmentId=report.appointment_id,
            reportType=report.report_type,
            description=report.description,
            fileUrl=report.file_url,
            uploadedBy=report.uploaded_by,
            uploadDate=report.upload_date,
        )


class MedicalHistoryOut(APIModel):
    medicalRecords: List[MedicalHistoryRecordOut] = []
    reports: List[MedicalReportOut] = []
