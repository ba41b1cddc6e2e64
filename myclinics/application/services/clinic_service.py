from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import logging

from ...exceptions import APIException
from ... import messages, utils
from ..ports.clinic_repo import ClinicRepository
from ..ports.doctor_repo import DoctorRepository, ClinicDto

logger = logging.getLogger(__name__)

CLINIC_STATUSES = ("pending", "approved", "rejected")


@dataclass
class ClinicForm:
    name: str
    address: str
    phone: str
    description: str


@dataclass
class ClinicService:
    clinic_repo: ClinicRepository
    doctor_repo: DoctorRepository

    def status(self, user_id: str) -> ClinicDto:
        doctor_id = self._doctor_id(user_id)
        clinic = self.clinic_repo.get_by_doctor(doctor_id)
        if not clinic:
            raise APIException(404, messages.CLINIC_NOT_FOUND)
        return clinic

    def update(self, user_id: str, form: ClinicForm, images: Optional[List[str]] = None) -> ClinicDto:
        """Save clinic details without changing the review state of an existing clinic."""
        doctor_id = self._doctor_id(user_id)
        fields = self._form_fields(form, images)
        if not self.clinic_repo.get_by_doctor(doctor_id):
            fields["status"] = "pending"
        return self.clinic_repo.upsert(doctor_id, fields)

    def gallery(self, user_id: str) -> List[str]:
        clinic = self.clinic_repo.get_by_doctor(self._doctor_id(user_id))
        return list(clinic.images) if clinic else []

    def ensure_can_submit(self, user_id: str) -> str:
        doctor_id = self._doctor_id(user_id)
        existing = self.clinic_repo.get_by_doctor(doctor_id)
        if existing and existing.status == "pending" and existing.submitted_at is not None:
            raise APIException(409, messages.CLINIC_ALREADY_PENDING)
        return doctor_id

    def submit(self, user_id: str, form: ClinicForm, images: Optional[List[str]] = None) -> ClinicDto:
        doctor_id = self.ensure_can_submit(user_id)
        fields = self._form_fields(form, images)
        fields.update({
            "status": "pending",
            "submitted_at": utils.utc_now(),
            "reviewed_at": None,
            "rejection_reason": None,
        })
        clinic = self.clinic_repo.upsert(doctor_id, fields)
        logger.info(f"Clinic {clinic.id} submitted for review by doctor {doctor_id}")
        return clinic

    # ------------------------
    # Admin review
    # ------------------------
    def list_for_review(self, status: Optional[str] = None) -> List[ClinicDto]:
        if status and status not in CLINIC_STATUSES:
            raise APIException(400, errors={"status": [messages.status_message(422)]})
        return self.clinic_repo.list_by_status(status)

    def approve(self, clinic_id: str) -> ClinicDto:
        clinic = self._pending(clinic_id)
        return self.clinic_repo.update(clinic.id, {
            "status": "approved",
            "reviewed_at": utils.utc_now(),
            "rejection_reason": None,
        })

    def reject(self, clinic_id: str, reason: str) -> ClinicDto:
        if not reason or not reason.strip():
            raise APIException(400, messages.REJECTION_REASON_REQUIRED, errors={"reason": [messages.REJECTION_REASON_REQUIRED]})
        clinic = self._pending(clinic_id)
        return self.clinic_repo.update(clinic.id, {
            "status": "rejected",
            "reviewed_at": utils.utc_now(),
            "rejection_reason": reason.strip(),
        })

    def _pending(self, clinic_id: str) -> ClinicDto:
        clinic = self.clinic_repo.get_by_id(clinic_id)
        if not clinic:
            raise APIException(404, messages.CLINIC_NOT_FOUND)
        if clinic.status != "pending":
            raise APIException(409, messages.CLINIC_NOT_PENDING)
        return clinic

    def _doctor_id(self, user_id: str) -> str:
        doctor = self.doctor_repo.get_by_user_id(user_id)
        if not doctor:
            raise APIException(404, messages.DOCTOR_PROFILE_NOT_FOUND)
        return doctor.id

    @staticmethod
    def _form_fields(form: ClinicForm, images: Optional[List[str]]) -> Dict[str, Any]:
        fields: Dict[str, Any] = {
            "name": form.name.strip(),
            "address": form.address.strip(),
            "phone": form.phone.strip(),
            "description": form.description.strip(),
            "updated_at": utils.utc_now(),
        }
        # New uploads replace the gallery; no upload keeps it
        if images:
            fields["images"] = list(images)
        return fields
