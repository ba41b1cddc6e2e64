# Models package (re-export feature modules for stable imports)
from .users.user import User
from .auth.otp import OTPCode, RevokedToken
from .health.doctor import Doctor, DoctorSchedule
from .health.clinic import Clinic
from .health.appointment import Appointment, Review
from .health.record import MedicalRecord, MedicalReport

__all__ = [
    "User",
    "OTPCode",
    "RevokedToken",
    "Doctor",
    "DoctorSchedule",
    "Clinic",
    "Appointment",
    "Review",
    "MedicalRecord",
    "MedicalReport",
]
