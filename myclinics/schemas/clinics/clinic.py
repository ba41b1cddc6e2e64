# myclinics/schemas/clinics/clinic.py
from pydantic import Field
from typing import Optional

from ..common.common import APIModel
from ..doctors.doctor import ClinicInfoOut
from ...application.ports.doctor_repo import ClinicDto


class ClinicReviewOut(ClinicInfoOut):
    doctorId: str

    @classmethod
    def from_dto(cls, clinic: ClinicDto) -> "ClinicReviewOut":
        base = ClinicInfoOut.from_dto(clinic)
        return cls(doctorId=clinic.doctor_id, **base.model_dump())


class RejectClinicRequest(APIModel):
    reason: Optional[str] = Field(None, max_length=500)
