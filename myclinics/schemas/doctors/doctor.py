# myclinics/schemas/doctors/doctor.py
from pydantic import Field
from typing import List, Optional
from datetime import datetime

from ..common.common import APIModel
from ...application.ports.doctor_repo import DoctorDto, ClinicDto, ScheduleDto


class DoctorUserOut(APIModel):
    id: str = Field(..., alias="_id")
    name: str
    email: str
    phone: Optional[str] = None


class ClinicInfoOut(APIModel):
    id: str = Field(..., alias="_id")
    name: str
    address: str
    phone: str
    description: str
    images: List[str] = []
    status: str
    submittedAt: Optional[datetime] = None
    reviewedAt: Optional[datetime] = None
    rejectionReason: Optional[str] = None

    @classmethod
    def from_dto(cls, clinic: ClinicDto) -> "ClinicInfoOut":
        return cls(
            id=clinic.id,
            name=clinic.name,
            address=clinic.address,
            phone=clinic.phone,
            description=clinic.description,
            images=clinic.images,
            status=clinic.status,
            submittedAt=clinic.submitted_at,
            reviewedAt=clinic.reviewed_at,
            rejectionReason=clinic.rejection_reason,
        )


class DoctorOut(APIModel):
    id: str = Field(..., alias="_id")
    userId: Optional[DoctorUserOut] = None
    specialty: str
    location: str
    fee: float
    photo: Optional[str] = None
    rating: float = 0.0
    reviewsCount: int = 0
    biography: Optional[str] = None
    experience: Optional[str] = None
    education: Optional[str] = None
    clinic: Optional[ClinicInfoOut] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    @classmethod
    def from_dto(cls, doctor: DoctorDto) -> "DoctorOut":
        user = doctor.user
        return cls(
            id=doctor.id,
            userId=DoctorUserOut(id=user.id, name=user.name, email=user.email, phone=user.phone) if user else None,
            specialty=doctor.specialty,
            location=doctor.location,
            fee=doctor.fee,
            photo=doctor.photo,
            rating=doctor.rating,
            reviewsCount=doctor.reviews_count,
            biography=doctor.biography,
            experience=doctor.experience,
            education=doctor.education,
            clinic=ClinicInfoOut.from_dto(doctor.clinic) if doctor.clinic else None,
            createdAt=doctor.created_at,
            updatedAt=doctor.updated_at,
        )


class ScheduleRange(APIModel):
    startTime: str
    endTime: str
    isAvailable: bool = True


class ScheduleDayRequest(APIModel):
    dayOfWeek: int
    slots: List[ScheduleRange] = []
    isAvailable: bool = True


class ScheduleDayOut(APIModel):
    id: Optional[str] = Field(None, alias="_id")
    doctorId: str
    dayOfWeek: int
    slots: List[ScheduleRange] = []
    isAvailable: bool

    @classmethod
    def from_dto(cls, day: ScheduleDto) -> "ScheduleDayOut":
        return cls(
            id=day.id or None,
            doctorId=day.doctor_id,
            dayOfWeek=day.day_of_week,
            slots=[ScheduleRange(**s) for s in day.slots],
            isAvailable=day.is_available,
        )


class DaySlotsOut(APIModel):
    date: str
    availableSlots: List[str]
    bookedSlots: List[str]


class StatisticsOut(APIModel):
    totalAppointments: int
    completedAppointments: int
    cancelledAppointments: int
    pendingAppointments: int
    totalRevenue: float


class DashboardOut(APIModel):
    totalPatients: int
    upcomingAppointments: int
    todayAppointments: int
