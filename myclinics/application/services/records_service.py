from dataclasses import dataclass
from typing import Dict, List, Optional
import logging

from ...exceptions import APIException
from ... import messages
from ..ports.records_repo import RecordsRepository, MedicalRecordDto, MedicalReportDto
from ..ports.appointments_repo import AppointmentsRepository
from ..ports.doctor_repo import DoctorRepository, DoctorDto

logger = logging.getLogger(__name__)


@dataclass
class RecordView:
    record: MedicalRecordDto
    doctor: Optional[DoctorDto]


@dataclass
class MedicalHistory:
    records: List[RecordView]
    reports: List[MedicalReportDto]


@dataclass
class RecordsService:
    repo: RecordsRepository
    appointments_repo: AppointmentsRepository
    doctor_repo: DoctorRepository

    def add_record(self, user_id: str, appointment_id: str, diagnosis: str, prescription: str,
                   notes: Optional[str] = None) -> MedicalRecordDto:
        doctor = self._doctor(user_id)
        appt = self.appointments_repo.get_by_id(appointment_id)
        if not appt or appt.doctor_id != doctor.id:
            raise APIException(404, messages.APPOINTMENT_NOT_FOUND)
        if appt.status == "cancelled":
            raise APIException(400, messages.RECORD_CANCELLED_APPOINTMENT)
        if not diagnosis.strip():
            raise APIException(400, errors={"diagnosis": [messages.status_message(422)]})
        record = self.repo.add_record(appt.patient_id, doctor.id, appt.id, diagnosis.strip(),
                                      prescription.strip(), (notes or "").strip() or None)
        logger.info(f"Medical record {record.id} added for appointment {appt.id}")
        return record

    def upload_report(self, user_id: str, patient_id: str, report_type: str, description: str,
                      file_url: str, appointment_id: Optional[str] = None) -> MedicalReportDto:
        doctor = self._doctor(user_id)
        if not self.appointments_repo.has_patient(doctor.id, patient_id):
            raise APIException(403, messages.PATIENT_NOT_LINKED)
        if appointment_id:
            appt = self.appointments_repo.get_by_id(appointment_id)
            if not appt or appt.doctor_id != doctor.id or appt.patient_id != patient_id:
                raise APIException(404, messages.APPOINTMENT_NOT_FOUND)
        return self.repo.add_report(patient_id, appointment_id or None, report_type.strip(),
                                    description.strip(), file_url, doctor.id)

    def ensure_patient_linked(self, user_id: str, patient_id: str) -> None:
        doctor = self._doctor(user_id)
        if not self.appointments_repo.has_patient(doctor.id, patient_id):
            raise APIException(403, messages.PATIENT_NOT_LINKED)

    def medical_history(self, patient_id: str) -> MedicalHistory:
        doctors: Dict[str, Optional[DoctorDto]] = {}
        views = []
        for record in self.repo.records_for_patient(patient_id):
            if record.doctor_id not in doctors:
                doctors[record.doctor_id] = self.doctor_repo.get_by_id(record.doctor_id)
            views.append(RecordView(record=record, doctor=doctors[record.doctor_id]))
        return MedicalHistory(records=views, reports=self.repo.reports_for_patient(patient_id))

    def _doctor(self, user_id: str) -> DoctorDto:
        doctor = self.doctor_repo.get_by_user_id(user_id)
        if not doctor:
            raise APIException(404, messages.DOCTOR_PROFILE_NOT_FOUND)
        return doctor
