from typing import Any, Dict, List, Optional
from sqlmodel import Session, select, col

from .....db.models import Clinic
from .....application.ports.clinic_repo import ClinicRepository
from .....application.ports.doctor_repo import ClinicDto
from .doctor_repository_sql import clinic_to_dto


class SqlClinicRepository(ClinicRepository):
    def __init__(self, session: Session):
        self.session = session

    def get_by_doctor(self, doctor_id: str) -> Optional[ClinicDto]:
        c = self.session.exec(select(Clinic).where(Clinic.doctor_id == doctor_id)).first()
        return clinic_to_dto(c) if c else None

    def get_by_id(self, clinic_id: str) -> Optional[ClinicDto]:
        c = self.session.get(Clinic, clinic_id)
        return clinic_to_dto(c) if c else None

    def upsert(self, doctor_id: str, fields: Dict[str, Any]) -> ClinicDto:
        c = self.session.exec(select(Clinic).where(Clinic.doctor_id == doctor_id)).first()
        if not c:
            c = Clinic(doctor_id=doctor_id, name=fields.get("name", ""), address=fields.get("address", ""),
                       phone=fields.get("phone", ""))
        return self._apply(c, fields)

    def update(self, clinic_id: str, fields: Dict[str, Any]) -> ClinicDto:
        c = self.session.get(Clinic, clinic_id)
        if not c:
            raise LookupError(f"clinic {clinic_id} not found")
        return self._apply(c, fields)

    def list_by_status(self, status: Optional[str] = None) -> List[ClinicDto]:
        statement = select(Clinic)
        if status:
            statement = statement.where(Clinic.status == status)
        statement = statement.order_by(col(Clinic.submitted_at).desc(), col(Clinic.created_at).desc())
        return [clinic_to_dto(c) for c in self.session.exec(statement).all()]

    def _apply(self, c: Clinic, fields: Dict[str, Any]) -> ClinicDto:
        for key, value in fields.items():
            setattr(c, key, list(value) if key == "images" else value)
        self.session.add(c)
        self.session.commit()
        self.session.refresh(c)
        return clinic_to_dto(c)
