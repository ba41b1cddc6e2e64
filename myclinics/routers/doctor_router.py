import logging
from typing import Callable, List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from ..core.config import settings
from .. import messages
from ..application.ports.user_repo import UserDto
from ..application.ports.doctor_repo import ClinicDto
from ..application.services.doctor_service import DoctorService
from ..application.services.clinic_service import ClinicService, ClinicForm
from ..application.services.records_service import RecordsService
from ..application.services.upload_service import UploadService, UploadedFile
from ..dependencies import (
    get_doctor_service,
    get_clinic_service,
    get_records_service,
    get_upload_service,
    require_doctor,
)
from ..schemas import (
    Envelope, DoctorOut, ClinicInfoOut, DoctorAppointmentOut, AppointmentOut, AppointmentStatusRequest,
    StatisticsOut, DashboardOut, MedicalRecordRequest, MedicalRecordOut, MedicalReportOut,
    ScheduleDayRequest, ScheduleDayOut,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/doctor", tags=["Doctor"])


def _read_upload(upload: UploadFile) -> UploadedFile:
    # Sync handlers run in the threadpool, so the spooled file is read directly
    upload.file.seek(0)
    return UploadedFile(
        filename=upload.filename or "upload",
        content_type=upload.content_type or "application/octet-stream",
        data=upload.file.read(),
    )


# ------------------------
# Profile
# ------------------------
@router.get("/profile", response_model=Envelope[DoctorOut])
def get_profile(
    current_user: UserDto = Depends(require_doctor),
    doctor_service: DoctorService = Depends(get_doctor_service),
):
    return Envelope(data=DoctorOut.from_dto(doctor_service.get_profile(current_user.id)))


@router.put("/profile", response_model=Envelope[DoctorOut])
def update_profile(
    specialty: str = Form(...),
    location: str = Form(...),
    fee: float = Form(...),
    biography: Optional[str] = Form(None),
    experience: Optional[str] = Form(None),
    education: Optional[str] = Form(None),
    doctorPhoto: Optional[UploadFile] = File(None),
    current_user: UserDto = Depends(require_doctor),
    doctor_service: DoctorService = Depends(get_doctor_service),
    uploads: UploadService = Depends(get_upload_service),
):
    previous = doctor_service.get_profile(current_user.id).photo
    photo_url = None
    if doctorPhoto is not None and doctorPhoto.filename:
        photo_url = uploads.save_image("doctors", _read_upload(doctorPhoto))
    try:
        doctor = doctor_service.update_profile(
            current_user.id,
            specialty=specialty,
            location=location,
            fee=fee,
            biography=biography,
            experience=experience,
            education=education,
            photo_url=photo_url,
        )
    except Exception:
        if photo_url:
            uploads.discard([photo_url])
        raise
    if photo_url and previous and previous != photo_url:
        uploads.discard([previous])
    return Envelope(data=DoctorOut.from_dto(doctor), message=messages.DOCTOR_PROFILE_UPDATED)


# ------------------------
# Clinic
# ------------------------
@router.get("/clinic/status", response_model=Envelope[ClinicInfoOut])
def get_clinic_status(
    current_user: UserDto = Depends(require_doctor),
    clinic_service: ClinicService = Depends(get_clinic_service),
):
    return Envelope(data=ClinicInfoOut.from_dto(clinic_service.status(current_user.id)))


def _save_clinic(
    save: Callable[[str, ClinicForm, List[str]], ClinicDto],
    user_id: str,
    form: ClinicForm,
    files: Optional[List[UploadFile]],
    clinic_service: ClinicService,
    uploads: UploadService,
) -> ClinicDto:
    """Store the new gallery, run ``save`` and clean up whichever set of images lost."""
    files = [f for f in (files or []) if f.filename]
    previous = clinic_service.gallery(user_id)
    images = uploads.save_images("clinics", [_read_upload(f) for f in files], settings.MAX_CLINIC_IMAGES) if files else []
    try:
        clinic = save(user_id, form, images)
    except Exception:
        uploads.discard(images, thumbnails=True)
        raise
    if images:
        uploads.discard([url for url in previous if url not in clinic.images], thumbnails=True)
    return clinic


@router.put("/clinic", response_model=Envelope[ClinicInfoOut])
def update_clinic(
    name: str = Form(...),
    address: str = Form(...),
    phone: str = Form(...),
    description: str = Form(""),
    clinicImages: Optional[List[UploadFile]] = File(None),
    current_user: UserDto = Depends(require_doctor),
    clinic_service: ClinicService = Depends(get_clinic_service),
    uploads: UploadService = Depends(get_upload_service),
):
    form = ClinicForm(name=name, address=address, phone=phone, description=description)
    clinic = _save_clinic(clinic_service.update, current_user.id, form, clinicImages, clinic_service, uploads)
    return Envelope(data=ClinicInfoOut.from_dto(clinic), message=messages.CLINIC_UPDATED)


@router.post("/clinic/submit", response_model=Envelope[ClinicInfoOut])
def submit_clinic(
    name: str = Form(...),
    address: str = Form(...),
    phone: str = Form(...),
    description: str = Form(""),
    clinicImages: Optional[List[UploadFile]] = File(None),
    current_user: UserDto = Depends(require_doctor),
    clinic_service: ClinicService = Depends(get_clinic_service),
    uploads: UploadService = Depends(get_upload_service),
):
    # Reject a duplicate submission before touching storage
    clinic_service.ensure_can_submit(current_user.id)
    form = ClinicForm(name=name, address=address, phone=phone, description=description)
    clinic = _save_clinic(clinic_service.submit, current_user.id, form, clinicImages, clinic_service, uploads)
    return Envelope(data=ClinicInfoOut.from_dto(clinic), message=messages.CLINIC_SUBMITTED)


# ------------------------
# Appointments
# ------------------------
@router.get("/appointments", response_model=Envelope[List[DoctorAppointmentOut]])
def get_appointments(
    date: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    current_user: UserDto = Depends(require_doctor),
    doctor_service: DoctorService = Depends(get_doctor_service),
):
    views = doctor_service.list_appointments(current_user.id, date, status)
    return Envelope(data=[DoctorAppointmentOut.from_view(v) for v in views])


@router.put("/appointments/{appointment_id}/status", response_model=Envelope[AppointmentOut])
def update_appointment_status(
    appointment_id: str,
    data: AppointmentStatusRequest,
    current_user: UserDto = Depends(require_doctor),
    doctor_service: DoctorService = Depends(get_doctor_service),
):
    appt = doctor_service.update_appointment_status(current_user.id, appointment_id, data.status)
    return Envelope(data=AppointmentOut.from_dto(appt), message=messages.APPOINTMENT_STATUS_UPDATED)


@router.get("/statistics", response_model=Envelope[StatisticsOut])
def get_statistics(
    startDate: str = Query(...),
    endDate: str = Query(...),
    current_user: UserDto = Depends(require_doctor),
    doctor_service: DoctorService = Depends(get_doctor_service),
):
    stats = doctor_service.statistics(current_user.id, startDate, endDate)
    return Envelope(data=StatisticsOut(
        totalAppointments=stats.total_appointments,
        completedAppointments=stats.completed_appointments,
        cancelledAppointments=stats.cancelled_appointments,
        pendingAppointments=stats.pending_appointments,
        totalRevenue=stats.total_revenue,
    ))


@router.get("/dashboard", response_model=Envelope[DashboardOut])
def get_dashboard(
    current_user: UserDto = Depends(require_doctor),
    doctor_service: DoctorService = Depends(get_doctor_service),
):
    return Envelope(data=DashboardOut(**doctor_service.dashboard(current_user.id)))


# ------------------------
# Medical records & reports
# ------------------------
@router.post("/medical-records", response_model=Envelope[MedicalRecordOut], status_code=201)
def add_medical_record(
    data: MedicalRecordRequest,
    current_user: UserDto = Depends(require_doctor),
    records_service: RecordsService = Depends(get_records_service),
):
    record = records_service.add_record(current_user.id, data.appointmentId, data.diagnosis, data.prescription, data.notes)
    return Envelope(data=MedicalRecordOut.from_dto(record), message=messages.RECORD_ADDED)


@router.post("/reports/upload", response_model=Envelope[MedicalReportOut], status_code=201)
def upload_report(
    patientId: str = Form(...),
    reportType: str = Form(...),
    description: str = Form(...),
    appointmentId: Optional[str] = Form(None),
    medicalReport: UploadFile = File(...),
    current_user: UserDto = Depends(require_doctor),
    records_service: RecordsService = Depends(get_records_service),
    uploads: UploadService = Depends(get_upload_service),
):
    records_service.ensure_patient_linked(current_user.id, patientId)
    file_url = uploads.save_report(_read_upload(medicalReport))
    try:
        report = records_service.upload_report(
            current_user.id,
            patient_id=patientId,
            report_type=reportType,
            description=description,
            file_url=file_url,
            appointment_id=appointmentId,
        )
    except Exception:
        uploads.discard([file_url])
        raise
    return Envelope(data=MedicalReportOut.from_dto(report), message=messages.REPORT_UPLOADED)


# ------------------------
# Weekly schedule
# ------------------------
@router.get("/schedule", response_model=Envelope[List[ScheduleDayOut]])
def get_schedule(
    current_user: UserDto = Depends(require_doctor),
    doctor_service: DoctorService = Depends(get_doctor_service),
):
    return Envelope(data=[ScheduleDayOut.from_dto(d) for d in doctor_service.get_schedule(current_user.id)])


@router.post("/schedule", response_model=Envelope[ScheduleDayOut])
def update_schedule(
    data: ScheduleDayRequest,
    current_user: UserDto = Depends(require_doctor),
    doctor_service: DoctorService = Depends(get_doctor_service),
):
    day = doctor_service.update_schedule(
        current_user.id,
        data.dayOfWeek,
        [s.model_dump() for s in data.slots],
        data.isAvailable,
    )
    return Envelope(data=ScheduleDayOut.from_dto(day), message=messages.SCHEDULE_UPDATED)
