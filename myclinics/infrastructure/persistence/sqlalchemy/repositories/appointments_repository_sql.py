from typing import Any, Dict, List, Optional
from datetime import date
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select, col

from .....utils import utc_now
from .....db.models import Appointment, Review
from .....application.ports.appointments_repo import (
    AppointmentsRepository,
    AppointmentDto,
    ReviewRepository,
    ReviewDto,
    ACTIVE_STATUSES,
    SlotTakenError,
)


class SqlAppointmentsRepository(AppointmentsRepository):
    def __init__(self, session: Session):
        self.session = session

    def _save(self, appt: Appointment) -> AppointmentDto:
        slot_key = f"{appt.doctor_id} {appt.appointment_date} {appt.time_slot}"
        self.session.add(appt)
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            raise SlotTakenError(slot_key) from e
        self.session.refresh(appt)
        return self._appt_to_dto(appt)

    def _appt_to_dto(self, a: Appointment) -> AppointmentDto:
        return AppointmentDto(
            id=a.id,
            patient_id=a.patient_id,
            doctor_id=a.doctor_id,
            appointment_date=a.appointment_date,
            time_slot=a.time_slot,
            status=a.status,
            amount=float(a.amount or 0),
            created_at=a.created_at,
            updated_at=a.updated_at,
        )

    def create(self, patient_id: str, doctor_id: str, appointment_date: date, time_slot: str, amount: float) -> AppointmentDto:
        appt = Appointment(
            patient_id=patient_id,
            doctor_id=doctor_id,
            appointment_date=appointment_date,
            time_slot=time_slot,
            status="pending",
            amount=amount,
        )
        return self._save(appt)

    def get_by_id(self, appointment_id: str) -> Optional[AppointmentDto]:
        a = self.session.get(Appointment, appointment_id)
        return self._appt_to_dto(a) if a else None

    def list_for_patient(self, patient_id: str) -> List[AppointmentDto]:
        rows = self.session.exec(
            select(Appointment)
            .where(Appointment.patient_id == patient_id)
            .order_by(col(Appointment.appointment_date).desc(), col(Appointment.time_slot).desc())
        ).all()
        return [self._appt_to_dto(r) for r in rows]

    def list_for_doctor(self, doctor_id: str, appointment_date: Optional[date] = None, status: Optional[str] = None) -> List[AppointmentDto]:
        statement = select(Appointment).where(Appointment.doctor_id == doctor_id)
        if appointment_date:
            statement = statement.where(Appointment.appointment_date == appointment_date)
        if status:
            statement = statement.where(Appointment.status == status)
        rows = self.session.exec(statement.order_by(Appointment.appointment_date, Appointment.time_slot)).all()
        return [self._appt_to_dto(r) for r in rows]

    def list_for_doctor_between(self, doctor_id: str, start: date, end: date) -> List[AppointmentDto]:
        rows = self.session.exec(
            select(Appointment)
            .where(Appointment.doctor_id == doctor_id)
            .where(Appointment.appointment_date >= start)
            .where(Appointment.appointment_date <= end)
            .order_by(Appointment.appointment_date, Appointment.time_slot)
        ).all()
        return [self._appt_to_dto(r) for r in rows]

    def booked_slots(self, doctor_id: str, appointment_date: date, exclude_id: Optional[str] = None) -> List[str]:
        statement = (
            select(Appointment)
            .where(Appointment.doctor_id == doctor_id)
            .where(Appointment.appointment_date == appointment_date)
            .where(col(Appointment.status).in_(ACTIVE_STATUSES))
        )
        if exclude_id:
            statement = statement.where(Appointment.id != exclude_id)
        return sorted({a.time_slot for a in self.session.exec(statement).all()})

    def update(self, appointment_id: str, fields: Dict[str, Any]) -> Optional[AppointmentDto]:
        a = self.session.get(Appointment, appointment_id)
        if not a:
            return None
        for key, value in fields.items():
            setattr(a, key, value)
        a.updated_at = utc_now()
        return self._save(a)

    def has_patient(self, doctor_id: str, patient_id: str) -> bool:
        existing = self.session.exec(
            select(Appointment)
            .where(Appointment.doctor_id == doctor_id)
            .where(Appointment.patient_id == patient_id)
        ).first()
        return existing is not None


class SqlReviewRepository(ReviewRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, r: Review) -> ReviewDto:
        return ReviewDto(
            id=r.id,
            appointment_id=r.appointment_id,
            doctor_id=r.doctor_id,
            patient_id=r.patient_id,
            rating=r.rating,
            comment=r.comment,
            created_at=r.created_at,
        )

    def get_by_appointment(self, appointment_id: str) -> Optional[ReviewDto]:
        r = self.session.exec(select(Review).where(Review.appointment_id == appointment_id)).first()
        return self._to_dto(r) if r else None

    def create(self, appointment_id: str, doctor_id: str, patient_id: str, rating: int, comment: Optional[str]) -> ReviewDto:
        r = Review(appointment_id=appointment_id, doctor_id=doctor_id, patient_id=patient_id, rating=rating, comment=comment)
        self.session.add(r)
        self.session.commit()
        self.session.refresh(r)
        return self._to_dto(r)

    def ratings_for_doctor(self, doctor_id: str) -> List[int]:
        rows = self.session.exec(select(Review).where(Review.doctor_id == doctor_id)).all()
        return [r.rating for r in rows]
