from typing import Any, Dict, List, Optional
from sqlmodel import Session, select, col

from .....utils import utc_now
from .....db.models import Doctor, DoctorSchedule, User, Clinic
from .....application.ports.doctor_repo import (
    DoctorRepository,
    DoctorDto,
    DoctorUserDto,
    ClinicDto,
    ScheduleDto,
)


def contains(column, needle: str):
    """Case-insensitive substring match with the LIKE wildcards in ``needle`` taken literally."""
    escaped = needle.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return col(column).ilike(f"%{escaped}%", escape="\\")


def clinic_to_dto(c: Clinic) -> ClinicDto:
    return ClinicDto(
        id=c.id,
        doctor_id=c.doctor_id,
        name=c.name,
        address=c.address,
        phone=c.phone,
        description=c.description,
        images=list(c.images or []),
        status=c.status,
        submitted_at=c.submitted_at,
        reviewed_at=c.reviewed_at,
        rejection_reason=c.rejection_reason,
    )


class SqlDoctorRepository(DoctorRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, d: Doctor, user: Optional[User] = None, clinic: Optional[Clinic] = None) -> DoctorDto:
        return DoctorDto(
            id=d.id,
            user_id=d.user_id,
            specialty=d.specialty,
            location=d.location,
            fee=float(d.fee or 0),
            photo=d.photo,
            rating=float(d.rating or 0),
            reviews_count=d.reviews_count or 0,
            biography=d.biography,
            experience=d.experience,
            education=d.education,
            created_at=d.created_at,
            updated_at=d.updated_at,
            user=DoctorUserDto(id=user.id, name=user.name, email=user.email, phone=user.phone) if user else None,
            clinic=clinic_to_dto(clinic) if clinic else None,
        )

    def _schedule_to_dto(self, s: DoctorSchedule) -> ScheduleDto:
        return ScheduleDto(
            id=s.id,
            doctor_id=s.doctor_id,
            day_of_week=s.day_of_week,
            slots=list(s.slots or []),
            is_available=bool(s.is_available),
        )

    def _joined(self):
        return (
            select(Doctor, User, Clinic)
            .join(User, User.id == Doctor.user_id)
            .join(Clinic, Clinic.doctor_id == Doctor.id, isouter=True)
        )

    def _first(self, statement) -> Optional[DoctorDto]:
        row = self.session.exec(statement).first()
        if not row:
            return None
        doctor, user, clinic = row
        return self._to_dto(doctor, user, clinic)

    def create(self, user_id: str, specialty: str, location: str, fee: float) -> DoctorDto:
        doctor = Doctor(user_id=user_id, specialty=specialty, location=location, fee=fee)
        self.session.add(doctor)
        self.session.commit()
        self.session.refresh(doctor)
        return self._to_dto(doctor)

    def get_by_id(self, doctor_id: str) -> Optional[DoctorDto]:
        return self._first(self._joined().where(Doctor.id == doctor_id))

    def get_active(self, doctor_id: str) -> Optional[DoctorDto]:
        return self._first(self._joined().where(Doctor.id == doctor_id).where(User.is_active == True))  # noqa: E712

    def get_by_user_id(self, user_id: str) -> Optional[DoctorDto]:
        return self._first(self._joined().where(Doctor.user_id == user_id))

    def search(self, specialty: Optional[str] = None, location: Optional[str] = None,
               clinic_name: Optional[str] = None, name: Optional[str] = None) -> List[DoctorDto]:
        statement = self._joined().where(User.is_active == True)  # noqa: E712
        if specialty:
            statement = statement.where(contains(Doctor.specialty, specialty))
        if location:
            statement = statement.where(contains(Doctor.location, location))
        if clinic_name:
            statement = statement.where(contains(Clinic.name, clinic_name))
        if name:
            statement = statement.where(contains(User.name, name))
        statement = statement.order_by(col(Doctor.rating).desc(), User.name)
        return [self._to_dto(d, u, c) for d, u, c in self.session.exec(statement).all()]

    def list_active(self) -> List[DoctorDto]:
        return self.search()

    def update_profile(self, doctor_id: str, fields: Dict[str, Any]) -> Optional[DoctorDto]:
        doctor = self.session.get(Doctor, doctor_id)
        if not doctor:
            return None
        for key, value in fields.items():
            setattr(doctor, key, value)
        doctor.updated_at = utc_now()
        self.session.add(doctor)
        self.session.commit()
        return self.get_by_id(doctor_id)

    def update_rating(self, doctor_id: str, rating: float, reviews_count: int) -> None:
        doctor = self.session.get(Doctor, doctor_id)
        if not doctor:
            return
        doctor.rating = rating
        doctor.reviews_count = reviews_count
        self.session.add(doctor)
        self.session.commit()

    def get_schedule(self, doctor_id: str) -> List[ScheduleDto]:
        rows = self.session.exec(
            select(DoctorSchedule)
            .where(DoctorSchedule.doctor_id == doctor_id)
            .order_by(DoctorSchedule.day_of_week)
        ).all()
        return [self._schedule_to_dto(r) for r in rows]

    def get_schedule_day(self, doctor_id: str, day_of_week: int) -> Optional[ScheduleDto]:
        row = self.session.exec(
            select(DoctorSchedule)
            .where(DoctorSchedule.doctor_id == doctor_id)
            .where(DoctorSchedule.day_of_week == day_of_week)
        ).first()
        return self._schedule_to_dto(row) if row else None

    def upsert_schedule_day(self, doctor_id: str, day_of_week: int, slots: List[Dict[str, Any]], is_available: bool) -> ScheduleDto:
        row = self.session.exec(
            select(DoctorSchedule)
            .where(DoctorSchedule.doctor_id == doctor_id)
            .where(DoctorSchedule.day_of_week == day_of_week)
        ).first()
        if not row:
            row = DoctorSchedule(doctor_id=doctor_id, day_of_week=day_of_week)
        # Reassign the JSON column so the change is flushed
        row.slots = [dict(s) for s in slots]
        row.is_available = is_available
        row.updated_at = utc_now()
        self.session.add(row)
        self.session.commit()
        self.session.refresh(row)
        return self._schedule_to_dto(row)
