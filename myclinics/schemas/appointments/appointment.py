# myclinics/schemas/appointments/appointment.py
from pydantic import Field
from typing import Optional
from datetime import datetime

from ..common.common import APIModel
from ..doctors.doctor import DoctorOut
from ...application.ports.appointments_repo import AppointmentDto, ReviewDto
from ...application.ports.user_repo import UserDto


class BookAppointmentRequest(APIModel):
    doctorId: str
    appointmentDate: str = Field(..., description="YYYY-MM-DD")
    timeSlot: str = Field(..., description="HH:MM")


class UpdateAppointmentRequest(BookAppointmentRequest):
    pass


class AppointmentStatusRequest(APIModel):
    status: str


class ReviewRequest(APIModel):
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=1000)


def _base_fields(appt: AppointmentDto) -> dict:
    return {
        "id": appt.id,
        "appointmentDate": appt.appointment_date.isoformat(),
        "timeSlot": appt.time_slot,
        "status": appt.status,
        "amount": appt.amount,
        "createdAt": appt.created_at,
        "updatedAt": appt.updated_at,
    }


class AppointmentOut(APIModel):
    id: str = Field(..., alias="_id")
    patientId: str
    doctorId: str
    appointmentDate: str
    timeSlot: str
    status: str
    amount: float
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    @classmethod
    def from_dto(cls, appt: AppointmentDto) -> "AppointmentOut":
        return cls(patientId=appt.patient_id, doctorId=appt.doctor_id, **_base_fields(appt))


class PatientAppointmentOut(APIModel):
    id: str = Field(..., alias="_id")
    patientId: str
    doctorId: Optional[DoctorOut] = None
    appointmentDate: str
    timeSlot: str
    status: str
    amount: float
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    @classmethod
    def from_view(cls, view) -> "PatientAppointmentOut":
        appt = view.appointment
        return cls(
            patientId=appt.patient_id,
            doctorId=DoctorOut.from_dto(view.doctor) if view.doctor else None,
            **_base_fields(appt),
        )


class PatientUserOut(APIModel):
    name: str
    email: str
    phone: Optional[str] = None


class PatientSummaryOut(APIModel):
    id: str = Field(..., alias="_id")
    userId: PatientUserOut
    address: Optional[str] = None
    dateOfBirth: Optional[str] = None

    @classmethod
    def from_dto(cls, user: UserDto) -> "PatientSummaryOut":
        return cls(
            id=user.id,
            userId=PatientUserOut(name=user.name, email=user.email, phone=user.phone),
            address=user.address,
            dateOfBirth=user.date_of_birth.isoformat() if user.date_of_birth else None,
        )


class DoctorAppointmentOut(APIModel):
    id: str = Field(..., alias="_id")
    patientId: Optional[PatientSummaryOut] = None
    doctorId: str
    appointmentDate: str
    timeSlot: str
    status: str
    amount: float
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    @classmethod
    def from_view(cls, view) -> "DoctorAppointmentOut":
        appt = view.appointment
        return cls(
            patientId=PatientSummaryOut.from_dto(view.patient) if view.patient else None,
            doctorId=appt.doctor_id,
            **_base_fields(appt),
        )


class ReviewOut(APIModel):
    id: str = Field(..., alias="_id")
    appointmentId: str
    doctorId: str
    patientId: str
    rating: int
    comment: Optional[str] = None
    createdAt: datetime

    @classmethod
    def from_dto(cls, review: ReviewDto) -> "ReviewOut":
        return cls(
            id=review.id,
            appointmentId=review.appointment_id,
            doctorId=review.doctor_id,
            patientId=review.patient_id,
            rating=review.rating,
            comment=review.comment,
            createdAt=review.created_at,
        )
