from dataclasses import dataclass
from typing import List, Optional, Protocol, Dict, Any
from datetime import datetime, date


ACTIVE_STATUSES = ("pending", "confirmed")


class SlotTakenError(Exception):
    """Another active appointment already holds the doctor's date and time slot."""


@dataclass
class AppointmentDto:
    id: str
    patient_id: str
    doctor_id: str
    appointment_date: date
    time_slot: str
    status: str
    amount: float
    created_at: datetime
    updated_at: datetime


class AppointmentsRepository(Protocol):
    def create(self, patient_id: str, doctor_id: str, appointment_date: date, time_slot: str, amount: float) -> AppointmentDto:
        ...

    def get_by_id(self, appointment_id: str) -> Optional[AppointmentDto]:
        ...

    def list_for_patient(self, patient_id: str) -> List[AppointmentDto]:
        ...

    def list_for_doctor(self, doctor_id: str, appointment_date: Optional[date] = None, status: Optional[str] = None) -> List[AppointmentDto]:
        ...

    def list_for_doctor_between(self, doctor_id: str, start: date, end: date) -> List[AppointmentDto]:
        ...

    def booked_slots(self, doctor_id: str, appointment_date: date, exclude_id: Optional[str] = None) -> List[str]:
        ...

    def update(self, appointment_id: str, fields: Dict[str, Any]) -> Optional[AppointmentDto]:
        ...

    def has_patient(self, doctor_id: str, patient_id: str) -> bool:
        ...


@dataclass
class ReviewDto:
    id: str
    appointment_id: str
    doctor_id: str
    patient_id: str
    rating: int
    comment: Optional[str]
    created_at: datetime


class ReviewRepository(Protocol):
    def get_by_appointment(self, appointment_id: str) -> Optional[ReviewDto]:
        ...

    def create(self, appointment_id: str, doctor_id: str, patient_id: str, rating: int, comment: Optional[str]) -> ReviewDto:
        ...

    def ratings_for_doctor(self, doctor_id: str) -> List[int]:
        ...
