from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Dict, Any
from datetime import datetime


@dataclass
class DoctorUserDto:
    id: str
    name: str
    email: str
    phone: Optional[str]


@dataclass
class ClinicDto:
    id: str
    doctor_id: str
    name: str
    address: str
    phone: str
    description: str
    images: List[str]
    status: str
    submitted_at: Optional[datetime]
    reviewed_at: Optional[datetime]
    rejection_reason: Optional[str]


@dataclass
class DoctorDto:
    id: str
    user_id: str
    specialty: str
    location: str
    fee: float
    photo: Optional[str]
    rating: float
    reviews_count: int
    biography: Optional[str]
    experience: Optional[str]
    education: Optional[str]
    created_at: datetime
    updated_at: datetime
    user: Optional[DoctorUserDto] = None
    clinic: Optional[ClinicDto] = None

    @property
    def name(self) -> str:
        return self.user.name if self.user else ""


@dataclass
class ScheduleDto:
    id: str
    doctor_id: str
    day_of_week: int
    slots: List[Dict[str, Any]] = field(default_factory=list)
    is_available: bool = True


class DoctorRepository(Protocol):
    def create(self, user_id: str, specialty: str, location: str, fee: float) -> DoctorDto:
        ...

    def get_by_id(self, doctor_id: str) -> Optional[DoctorDto]:
        ...

    def get_active(self, doctor_id: str) -> Optional[DoctorDto]:
        """Like get_by_id, but only when the doctor's account is active."""
        ...

    def get_by_user_id(self, user_id: str) -> Optional[DoctorDto]:
        ...

    def search(self, specialty: Optional[str] = None, location: Optional[str] = None,
               clinic_name: Optional[str] = None, name: Optional[str] = None) -> List[DoctorDto]:
        ...

    def list_active(self) -> List[DoctorDto]:
        ...

    def update_profile(self, doctor_id: str, fields: Dict[str, Any]) -> Optional[DoctorDto]:
        ...

    def update_rating(self, doctor_id: str, rating: float, reviews_count: int) -> None:
        ...

    def get_schedule(self, doctor_id: str) -> List[ScheduleDto]:
        ...

    def get_schedule_day(self, doctor_id: str, day_of_week: int) -> Optional[ScheduleDto]:
        ...

    def upsert_schedule_day(self, doctor_id: str, day_of_week: int, slots: List[Dict[str, Any]], is_available: bool) -> ScheduleDto:
        ...
