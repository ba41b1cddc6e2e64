from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional
from datetime import date
import logging

from ...exceptions import APIException
from ... import messages
from .. import slots as slot_utils
from ..ports.doctor_repo import DoctorRepository, DoctorDto, ScheduleDto
from ..ports.appointments_repo import AppointmentsRepository, AppointmentDto, ACTIVE_STATUSES
from ..ports.user_repo import UserRepository, UserDto
from .appointments_service import parse_date

logger = logging.getLogger(__name__)

# Status changes a doctor may apply
TRANSITIONS = {
    "pending": {"confirmed", "cancelled"},
    "confirmed": {"completed", "cancelled"},
}


@dataclass
class DoctorAppointmentView:
    appointment: AppointmentDto
    patient: Optional[UserDto]


@dataclass
class DoctorStatistics:
    total_appointments: int
    completed_appointments: int
    cancelled_appointments: int
    pending_appointments: int
    total_revenue: float


@dataclass
class DoctorService:
    doctor_repo: DoctorRepository
    appointments_repo: AppointmentsRepository
    user_repo: UserRepository
    today: Callable[[], date] = date.today

    # ------------------------
    # Profile
    # ------------------------
    def get_profile(self, user_id: str) -> DoctorDto:
        doctor = self.doctor_repo.get_by_user_id(user_id)
        if not doctor:
            raise APIException(404, messages.DOCTOR_PROFILE_NOT_FOUND)
        return doctor

    def update_profile(self, user_id: str, specialty: str, location: str, fee: float,
                       biography: Optional[str] = None, experience: Optional[str] = None,
                       education: Optional[str] = None, photo_url: Optional[str] = None) -> DoctorDto:
        doctor = self.get_profile(user_id)
        if fee < 0:
            raise APIException(400, errors={"fee": [messages.status_message(422)]})
        fields: Dict[str, Any] = {
            "specialty": specialty.strip(),
            "location": location.strip(),
            "fee": fee,
        }
        for key, value in (("biography", biography), ("experience", experience), ("education", education)):
            if value is not None:
                fields[key] = value
        if photo_url:
            fields["photo"] = photo_url
        return self.doctor_repo.update_profile(doctor.id, fields)

    # ------------------------
    # Weekly schedule
    # ------------------------
    def get_schedule(self, user_id: str) -> List[ScheduleDto]:
        doctor = self.get_profile(user_id)
        stored = {s.day_of_week: s for s in self.doctor_repo.get_schedule(doctor.id)}
        return [
            stored.get(day) or ScheduleDto(id="", doctor_id=doctor.id, day_of_week=day, slots=[], is_available=False)
            for day in range(7)
        ]

    def update_schedule(self, user_id: str, day_of_week: int, slots: List[Dict[str, Any]], is_available: bool) -> ScheduleDto:
        doctor = self.get_profile(user_id)
        if day_of_week < 0 or day_of_week > 6:
            raise APIException(400, messages.SCHEDULE_INVALID_DAY, errors={"dayOfWeek": [messages.SCHEDULE_INVALID_DAY]})

        cleaned = []
        for rng in slots:
            try:
                start = slot_utils.normalize_slot(rng["startTime"])
                end = slot_utils.normalize_slot(rng["endTime"])
            except (KeyError, ValueError):
                raise APIException(400, messages.INVALID_TIME, errors={"slots": [messages.INVALID_TIME]})
            if slot_utils.to_minutes(start) >= slot_utils.to_minutes(end):
                raise APIException(400, messages.SCHEDULE_INVALID_RANGE, errors={"slots": [messages.SCHEDULE_INVALID_RANGE]})
            cleaned.append({"startTime": start, "endTime": end, "isAvailable": bool(rng.get("isAvailable", True))})

        if slot_utils.ranges_overlap(cleaned):
            raise APIException(400, messages.SCHEDULE_OVERLAP, errors={"slots": [messages.SCHEDULE_OVERLAP]})

        cleaned.sort(key=lambda r: slot_utils.to_minutes(r["startTime"]))
        return self.doctor_repo.upsert_schedule_day(doctor.id, day_of_week, cleaned if is_available else [], is_available)

    # ------------------------
    # Appointments
    # ------------------------
    def list_appointments(self, user_id: str, date_str: Optional[str] = None, status: Optional[str] = None) -> List[DoctorAppointmentView]:
        doctor = self.get_profile(user_id)
        day = parse_date(date_str, "date") if date_str else None
        views = []
        patients: Dict[str, Optional[UserDto]] = {}
        for appt in self.appointments_repo.list_for_doctor(doctor.id, day, status or None):
            if appt.patient_id not in patients:
                patients[appt.patient_id] = self.user_repo.get_by_id(appt.patient_id)
            views.append(DoctorAppointmentView(appointment=appt, patient=patients[appt.patient_id]))
        return views

    def update_appointment_status(self, user_id: str, appointment_id: str, status: str) -> AppointmentDto:
        doctor = self.get_profile(user_id)
        appt = self.appointments_repo.get_by_id(appointment_id)
        if not appt or appt.doctor_id != doctor.id:
            raise APIException(404, messages.APPOINTMENT_NOT_FOUND)
        if status not in TRANSITIONS.get(appt.status, set()):
            raise APIException(400, messages.INVALID_STATUS_TRANSITION)
        logger.info(f"Doctor {doctor.id} moved appointment {appt.id} from {appt.status} to {status}")
        return self.appointments_repo.update(appt.id, {"status": status})

    def statistics(self, user_id: str, start_date: str, end_date: str) -> DoctorStatistics:
        doctor = self.get_profile(user_id)
        start = parse_date(start_date, "startDate")
        end = parse_date(end_date, "endDate")
        if start > end:
            raise APIException(400, messages.INVALID_DATE_RANGE)
        appts = self.appointments_repo.list_for_doctor_between(doctor.id, start, end)
        completed = [a for a in appts if a.status == "completed"]
        return DoctorStatistics(
            total_appointments=len(appts),
            completed_appointments=len(completed),
            cancelled_appointments=sum(1 for a in appts if a.status == "cancelled"),
            pending_appointments=sum(1 for a in appts if a.status in ACTIVE_STATUSES),
            total_revenue=float(sum(a.amount for a in completed)),
        )

    def dashboard(self, user_id: str) -> Dict[str, int]:
        doctor = self.get_profile(user_id)
        today = self.today()
        appts = self.appointments_repo.list_for_doctor(doctor.id)
        return {
            "totalPatients": len({a.patient_id for a in appts if a.status != "cancelled"}),
            "upcomingAppointments": sum(1 for a in appts if a.status in ACTIVE_STATUSES and a.appointment_date >= today),
            "todayAppointments": sum(1 for a in appts if a.status != "cancelled" and a.appointment_date == today),
        }
