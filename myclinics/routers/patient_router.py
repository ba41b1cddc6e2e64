import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from .. import messages
from ..application.ports.user_repo import UserDto
from ..application.services.appointments_service import AppointmentsService
from ..application.services.records_service import RecordsService
from ..application.services.catalog_service import CatalogService
from ..dependencies import (
    get_appointments_service,
    get_records_service,
    get_catalog_service,
    require_patient,
)
from ..schemas import (
    Envelope, DoctorOut, DaySlotsOut, BookAppointmentRequest, UpdateAppointmentRequest,
    AppointmentOut, PatientAppointmentOut, ReviewRequest, ReviewOut, MedicalHistoryOut,
    MedicalHistoryRecordOut, MedicalReportOut,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/patient", tags=["Patient"])


# ------------------------
# Doctors directory
# ------------------------
@router.get("/doctors/search", response_model=Envelope[List[DoctorOut]])
def search_doctors(
    specialty: Optional[str] = Query(None),
    location: Optional[str] = Query(None),
    clinicType: Optional[str] = Query(None),
    name: Optional[str] = Query(None),
    current_user: UserDto = Depends(require_patient),
    catalog: CatalogService = Depends(get_catalog_service),
):
    doctors = catalog.search(specialty=specialty, location=location, clinic_name=clinicType, name=name)
    return Envelope(data=[DoctorOut.from_dto(d) for d in doctors])


@router.get("/doctors/{doctor_id}", response_model=Envelope[DoctorOut])
def get_doctor(
    doctor_id: str,
    current_user: UserDto = Depends(require_patient),
    catalog: CatalogService = Depends(get_catalog_service),
):
    return Envelope(data=DoctorOut.from_dto(catalog.get_doctor(doctor_id)))


@router.get("/doctors/{doctor_id}/schedule", response_model=Envelope[DaySlotsOut])
def get_doctor_schedule(
    doctor_id: str,
    date: Optional[str] = Query(None, description="YYYY-MM-DD, defaults to today"),
    current_user: UserDto = Depends(require_patient),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    return Envelope(data=DaySlotsOut(**appt_service.schedule_for(doctor_id, date)))


# ------------------------
# Appointments
# ------------------------
@router.post("/appointments/book", response_model=Envelope[AppointmentOut], status_code=201)
def book_appointment(
    data: BookAppointmentRequest,
    current_user: UserDto = Depends(require_patient),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    appt = appt_service.book(current_user.id, data.doctorId, data.appointmentDate, data.timeSlot)
    return Envelope(data=AppointmentOut.from_dto(appt), message=messages.APPOINTMENT_BOOKED)


@router.get("/appointments", response_model=Envelope[List[PatientAppointmentOut]])
def get_my_appointments(
    current_user: UserDto = Depends(require_patient),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    views = appt_service.list_for_patient(current_user.id)
    return Envelope(data=[PatientAppointmentOut.from_view(v) for v in views])


@router.put("/appointments/{appointment_id}/cancel", response_model=Envelope[AppointmentOut])
def cancel_appointment(
    appointment_id: str,
    current_user: UserDto = Depends(require_patient),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    appt = appt_service.cancel(current_user.id, appointment_id)
    logger.info(f"Patient {current_user.id} cancelled appointment {appointment_id}")
    return Envelope(data=AppointmentOut.from_dto(appt), message=messages.APPOINTMENT_CANCELLED)


@router.put("/appointments/{appointment_id}/update", response_model=Envelope[PatientAppointmentOut])
def update_appointment(
    appointment_id: str,
    data: UpdateAppointmentRequest,
    current_user: UserDto = Depends(require_patient),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    view = appt_service.update(current_user.id, appointment_id, data.doctorId, data.appointmentDate, data.timeSlot)
    return Envelope(data=PatientAppointmentOut.from_view(view), message=messages.APPOINTMENT_UPDATED)


@router.post("/appointments/{appointment_id}/review", response_model=Envelope[ReviewOut], status_code=201)
def review_appointment(
    appointment_id: str,
    data: ReviewRequest,
    current_user: UserDto = Depends(require_patient),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    review = appt_service.review(current_user.id, appointment_id, data.rating, data.comment)
    return Envelope(data=ReviewOut.from_dto(review), message=messages.REVIEW_ADDED)


@router.get("/medical-history", response_model=Envelope[MedicalHistoryOut])
def get_medical_history(
    current_user: UserDto = Depends(require_patient),
    records_service: RecordsService = Depends(get_records_service),
):
    history = records_service.medical_history(current_user.id)
    return Envelope(data=MedicalHistoryOut(
        medicalRecords=[MedicalHistoryRecordOut.from_view(v) for v in history.records],
        reports=[MedicalReportOut.from_dto(r) for r in history.reports],
    ))
