from dataclasses import dataclass
from typing import Callable, Dict, List, Optional
from datetime import datetime, date
import logging

from ...exceptions import APIException
from ... import messages
from .. import slots as slot_utils
from ..ports.appointments_repo import AppointmentsRepository, AppointmentDto, ReviewRepository, ReviewDto, ACTIVE_STATUSES, SlotTakenError
from ..ports.doctor_repo import DoctorRepository, DoctorDto

logger = logging.getLogger(__name__)


def parse_date(value: Optional[str], field: str = "appointmentDate") -> date:
    try:
        return datetime.strptime(value or "", "%Y-%m-%d").date()
    except ValueError:
        raise APIException(400, messages.INVALID_DATE, errors={field: [messages.INVALID_DATE]})


def parse_slot(value: str, field: str = "timeSlot") -> str:
    try:
        return slot_utils.normalize_slot(value or "")
    except ValueError:
        raise APIException(400, messages.INVALID_TIME, errors={field: [messages.INVALID_TIME]})


@dataclass
class PatientAppointmentView:
    appointment: AppointmentDto
    doctor: Optional[DoctorDto]


@dataclass
class AppointmentsService:
    repo: AppointmentsRepository
    doctor_repo: DoctorRepository
    review_repo: ReviewRepository
    slot_minutes: int = 30
    now: Callable[[], datetime] = datetime.now

    # ------------------------
    # Availability
    # ------------------------
    def schedule_for(self, doctor_id: str, date_str: Optional[str] = None, exclude_id: Optional[str] = None) -> Dict[str, object]:
        self._require_doctor(doctor_id)
        current = self.now()
        day = parse_date(date_str, "date") if date_str else current.date()
        template = self.doctor_repo.get_schedule_day(doctor_id, slot_utils.weekday_index(day))
        all_slots = slot_utils.day_slots(template, self.slot_minutes)
        booked = self.repo.booked_slots(doctor_id, day, exclude_id=exclude_id)
        split = slot_utils.split_slots(all_slots, booked, day, current)
        if day < current.date():
            split["availableSlots"] = []
        return {"date": day.isoformat(), **split}

    # ------------------------
    # Patient operations
    # ------------------------
    def book(self, patient_id: str, doctor_id: str, appointment_date: str, time_slot: str) -> AppointmentDto:
        day = self._future_date(appointment_date)
        slot = parse_slot(time_slot)
        doctor = self._require_doctor(doctor_id)
        self._ensure_available(doctor_id, day, slot)
        try:
            appt = self.repo.create(patient_id, doctor_id, day, slot, doctor.fee)
        except SlotTakenError:
            logger.warning(f"Slot {day} {slot} with doctor {doctor_id} was taken concurrently")
            raise APIException(409, code=messages.SLOT_UNAVAILABLE)
        logger.info(f"Appointment {appt.id} booked with doctor {doctor_id} on {day} {slot}")
        return appt

    def list_for_patient(self, patient_id: str) -> List[PatientAppointmentView]:
        views = []
        doctors: Dict[str, Optional[DoctorDto]] = {}
        for appt in self.repo.list_for_patient(patient_id):
            if appt.doctor_id not in doctors:
                doctors[appt.doctor_id] = self.doctor_repo.get_by_id(appt.doctor_id)
            views.append(PatientAppointmentView(appointment=appt, doctor=doctors[appt.doctor_id]))
        return views

    def cancel(self, patient_id: str, appointment_id: str) -> AppointmentDto:
        appt = self._own_appointment(patient_id, appointment_id)
        if appt.status == "cancelled":
            raise APIException(400, messages.APPOINTMENT_ALREADY_CANCELLED)
        if appt.status == "completed":
            raise APIException(400, messages.APPOINTMENT_COMPLETED)
        if appt.appointment_date < self.now().date():
            raise APIException(400, messages.APPOINTMENT_IN_PAST)
        return self.repo.update(appt.id, {"status": "cancelled"})

    def update(self, patient_id: str, appointment_id: str, doctor_id: str, appointment_date: str, time_slot: str) -> PatientAppointmentView:
        appt = self._own_appointment(patient_id, appointment_id)
        if appt.status not in ACTIVE_STATUSES:
            if appt.status == "cancelled":
                raise APIException(400, messages.APPOINTMENT_ALREADY_CANCELLED)
            raise APIException(400, messages.APPOINTMENT_COMPLETED)
        if appt.appointment_date < self.now().date():
            raise APIException(400, messages.APPOINTMENT_IN_PAST)

        day = self._future_date(appointment_date)
        slot = parse_slot(time_slot)
        doctor = self._require_doctor(doctor_id)
        exclude = appt.id if doctor_id == appt.doctor_id else None
        self._ensure_available(doctor_id, day, slot, exclude_id=exclude)

        try:
            updated = self.repo.update(appt.id, {
                "doctor_id": doctor_id,
                "appointment_date": day,
                "time_slot": slot,
                "status": "pending",
                "amount": doctor.fee,
            })
        except SlotTakenError:
            raise APIException(409, code=messages.SLOT_UNAVAILABLE)
        return PatientAppointmentView(appointment=updated, doctor=doctor)

    def review(self, patient_id: str, appointment_id: str, rating: int, comment: Optional[str] = None) -> ReviewDto:
        appt = self._own_appointment(patient_id, appointment_id)
        if appt.status != "completed":
            raise APIException(400, messages.REVIEW_NOT_ALLOWED)
        if self.review_repo.get_by_appointment(appt.id):
            raise APIException(409, messages.REVIEW_EXISTS)
        review = self.review_repo.create(appt.id, appt.doctor_id, patient_id, rating, (comment or "").strip() or None)
        ratings = self.review_repo.ratings_for_doctor(appt.doctor_id)
        average = round(sum(ratings) / len(ratings), 1) if ratings else 0.0
        self.doctor_repo.update_rating(appt.doctor_id, average, len(ratings))
        return review

    # ------------------------
    # Helpers
    # ------------------------
    def _require_doctor(self, doctor_id: str) -> DoctorDto:
        doctor = self.doctor_repo.get_active(doctor_id)
        if not doctor:
            raise APIException(404, messages.DOCTOR_NOT_FOUND)
        return doctor

    def _own_appointment(self, patient_id: str, appointment_id: str) -> AppointmentDto:
        appt = self.repo.get_by_id(appointment_id)
        if not appt or appt.patient_id != patient_id:
            raise APIException(404, messages.APPOINTMENT_NOT_FOUND)
        return appt

    def _future_date(self, value: str) -> date:
        day = parse_date(value)
        if day < self.now().date():
            raise APIException(400, messages.DATE_IN_PAST, errors={"appointmentDate": [messages.DATE_IN_PAST]})
        return day

    def _ensure_available(self, doctor_id: str, day: date, slot: str, exclude_id: Optional[str] = None) -> None:
        schedule = self.schedule_for(doctor_id, day.isoformat(), exclude_id=exclude_id)
        if slot not in schedule["availableSlots"]:
            raise APIException(409, code=messages.SLOT_UNAVAILABLE)
