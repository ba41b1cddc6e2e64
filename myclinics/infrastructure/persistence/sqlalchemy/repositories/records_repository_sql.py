from typing import List, Optional
from sqlmodel import Session, select, col

from .....db.models import MedicalRecord, MedicalReport
from .....application.ports.records_repo import RecordsRepository, MedicalRecordDto, MedicalReportDto


class SqlRecordsRepository(RecordsRepository):
    def __init__(self, session: Session):
        self.session = session

    def _record_to_dto(self, r: MedicalRecord) -> MedicalRecordDto:
        return MedicalRecordDto(
            id=r.id,
            patient_id=r.patient_id,
            doctor_id=r.doctor_id,
            appointment_id=r.appointment_id,
            diagnosis=r.diagnosis,
            prescription=r.prescription,
            notes=r.notes,
            visit_date=r.visit_date,
        )

    def _report_to_dto(self, r: MedicalReport) -> MedicalReportDto:
        return MedicalReportDto(
            id=r.id,
            patient_id=r.patient_id,
            appointment_id=r.appointment_id,
            report_type=r.report_type,
            description=r.description,
            file_url=r.file_url,
            uploaded_by=r.uploaded_by,
            upload_date=r.upload_date,
        )

    def add_record(self, patient_id: str, doctor_id: str, appointment_id: str, diagnosis: str,
                   prescription: str, notes: Optional[str]) -> MedicalRecordDto:
        record = MedicalRecord(
            patient_id=patient_id,
            doctor_id=doctor_id,
            appointment_id=appointment_id,
            diagnosis=diagnosis,
            prescription=prescription,
            notes=notes,
        )
        self.session.add(record)
        self.session.commit()
        self.session.refresh(record)
        return self._record_to_dto(record)

    def add_report(self, patient_id: str, appointment_id: Optional[str], report_type: str,
                   description: str, file_url: str, uploaded_by: str) -> MedicalReportDto:
        report = MedicalReport(
            patient_id=patient_id,
            appointment_id=appointment_id,
            report_type=report_type,
            description=description,
            file_url=file_url,
            uploaded_by=uploaded_by,
        )
        self.session.add(report)
        self.session.commit()
        self.session.refresh(report)
        return self._report_to_dto(report)

    def records_for_patient(self, patient_id: str) -> List[MedicalRecordDto]:
        rows = self.session.exec(
            select(MedicalRecord)
            .where(MedicalRecord.patient_id == patient_id)
            .order_by(col(MedicalRecord.visit_date).desc())
        ).all()
        return [self._record_to_dto(r) for r in rows]

    def reports_for_patient(self, patient_id: str) -> List[MedicalReportDto]:
        rows = self.session.exec(
            select(MedicalReport)
            .where(MedicalReport.patient_id == patient_id)
            .order_by(col(MedicalReport.upload_date).desc())
        ).all()
        return [self._report_to_dto(r) for r in rows]
