from dataclasses import dataclass
from typing import List, Optional, Protocol
from datetime import datetime


@dataclass
class MedicalRecordDto:
    id: str
    patient_id: str
    doctor_id: str
    appointment_id: str
    diagnosis: str
    prescription: str
    notes: Optional[str]
    visit_date: datetime


@dataclass
class MedicalReportDto:
    id: str
    patient_id: str
    appointment_id: Optional[str]
    report_type: str
    description: str
    file_url: str
    uploaded_by: str
    upload_date: datetime


class RecordsRepository(Protocol):
    def add_record(self, patient_id: str, doctor_id: str, appointment_id: str, diagnosis: str,
                   prescription: str, notes: Optional[str]) -> MedicalRecordDto:
        ...

    def add_report(self, patient_id: str, appointment_id: Optional[str], report_type: str,
                   description: str, file_url: str, uploaded_by: str) -> MedicalReportDto:
        ...

    def records_for_patient(self, patient_id: str) -> List[MedicalRecordDto]:
        ...

    def reports_for_patient(self, patient_id: str) -> List[MedicalReportDto]:
        ...
