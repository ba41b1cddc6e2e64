"""Arabic user-facing messages.

The web client shows ``message`` from error envelopes verbatim, so every
text a user can read is kept here.
"""
from typing import Optional

DEFAULT_ERROR = "حدث خطأ غير متوقع."

STATUS_MESSAGES = {
    400: "طلب غير صحيح. يرجى التحقق من البيانات المدخلة.",
    401: "غير مصرح لك بالوصول. يرجى تسجيل الدخول.",
    403: "ممنوع الوصول. ليس لديك صلاحية لهذا الإجراء.",
    404: "الصفحة أو البيانات المطلوبة غير موجودة.",
    409: "تضارب في البيانات. قد تكون البيانات موجودة مسبقاً.",
    413: "حجم الملف أو الطلب كبير جداً.",
    415: "نوع الملف غير مدعوم.",
    422: "البيانات المدخلة غير صحيحة.",
    429: "تم تجاوز الحد المسموح من الطلبات. يرجى المحاولة لاحقاً.",
    500: "خطأ في الخادم. يرجى المحاولة لاحقاً.",
    502: "خطأ في الاتصال بالخادم.",
    503: "الخدمة غير متوفرة حالياً.",
    504: "انتهت مهلة الاتصال بالخادم.",
}

# Machine codes returned next to the message
INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
EMAIL_NOT_VERIFIED = "EMAIL_NOT_VERIFIED"
ACCOUNT_SUSPENDED = "ACCOUNT_SUSPENDED"
EMAIL_EXISTS = "EMAIL_EXISTS"
PHONE_EXISTS = "PHONE_EXISTS"
SLOT_UNAVAILABLE = "SLOT_UNAVAILABLE"
VALIDATION_ERROR = "VALIDATION_ERROR"
RATE_LIMITED = "RATE_LIMITED"

CODE_MESSAGES = {
    INVALID_CREDENTIALS: "البريد الإلكتروني أو كلمة المرور غير صحيحة.",
    EMAIL_NOT_VERIFIED: "يرجى تفعيل حسابك من خلال البريد الإلكتروني.",
    ACCOUNT_SUSPENDED: "تم تعليق حسابك. يرجى التواصل مع الدعم الفني.",
    EMAIL_EXISTS: "البريد الإلكتروني مُستخدم مسبقاً.",
    PHONE_EXISTS: "رقم الهاتف مُستخدم مسبقاً.",
    SLOT_UNAVAILABLE: "الموعد المختار غير متاح. يرجى اختيار موعد آخر.",
    RATE_LIMITED: STATUS_MESSAGES[429],
}

# Auth
REGISTERED = "تم إنشاء الحساب بنجاح. تم إرسال رمز التحقق."
EMAIL_VERIFIED = "تم تفعيل البريد الإلكتروني بنجاح."
EMAIL_ALREADY_VERIFIED = "البريد الإلكتروني مفعل مسبقاً."
OTP_SENT = "تم إرسال رمز التحقق."
OTP_INVALID = "رمز التحقق غير صحيح."
OTP_EXPIRED = "انتهت صلاحية رمز التحقق. يرجى طلب رمز جديد."
OTP_TOO_MANY_ATTEMPTS = "تم تجاوز عدد المحاولات المسموح. يرجى طلب رمز جديد."
OTP_VALID = "رمز التحقق صحيح."
LOGIN_SUCCESS = "تم تسجيل الدخول بنجاح."
LOGOUT_SUCCESS = "تم تسجيل الخروج بنجاح."
TOKEN_INVALID = "الجلسة غير صالحة أو منتهية. يرجى تسجيل الدخول مجدداً."
ADMIN_SIGNUP_FORBIDDEN = "لا يمكن إنشاء حساب مدير من خلال التسجيل."
DOCTOR_FIELDS_REQUIRED = "التخصص والموقع وسعر الكشف مطلوبة لحساب الطبيب."
USER_NOT_FOUND = "المستخدم غير موجود."
EMAIL_NOT_FOUND = "لا يوجد حساب مرتبط بهذا البريد الإلكتروني."
PASSWORD_MISMATCH = "كلمتا المرور غير متطابقتين."
PASSWORD_WRONG = "كلمة المرور الحالية غير صحيحة."
PASSWORD_WEAK = "يجب أن تتكون كلمة المرور من 8 أحرف على الأقل وتحتوي على حرف ورقم."
PASSWORD_CHANGED = "تم تغيير كلمة المرور بنجاح."
PASSWORD_RESET = "تم إعادة تعيين كلمة المرور بنجاح."
PROFILE_UPDATED = "تم تحديث الملف الشخصي بنجاح."

# Booking
DOCTOR_NOT_FOUND = "الطبيب غير موجود."
APPOINTMENT_NOT_FOUND = "الموعد غير موجود."
APPOINTMENT_BOOKED = "تم حجز الموعد بنجاح!"
APPOINTMENT_CANCELLED = "تم إلغاء الموعد بنجاح."
APPOINTMENT_UPDATED = "تم تعديل الموعد بنجاح."
APPOINTMENT_STATUS_UPDATED = "تم تحديث حالة الموعد."
APPOINTMENT_ALREADY_CANCELLED = "الموعد ملغى مسبقاً."
APPOINTMENT_COMPLETED = "لا يمكن تعديل موعد مكتمل."
APPOINTMENT_IN_PAST = "لا يمكن تعديل أو إلغاء موعد سابق."
INVALID_DATE = "صيغة التاريخ غير صحيحة. استخدم YYYY-MM-DD."
DATE_IN_PAST = "لا يمكن الحجز في تاريخ سابق."
INVALID_TIME = "صيغة الوقت غير صحيحة. استخدم HH:MM."
INVALID_STATUS_TRANSITION = "لا يمكن تغيير حالة الموعد إلى الحالة المطلوبة."
INVALID_DATE_RANGE = "تاريخ البداية يجب أن يكون قبل تاريخ النهاية."

# Reviews
REVIEW_ADDED = "شكراً لتقييمك!"
REVIEW_EXISTS = "لقد قمت بتقييم هذا الموعد مسبقاً."
REVIEW_NOT_ALLOWED = "يمكن تقييم المواعيد المكتملة فقط."

# Doctor dashboard
SCHEDULE_UPDATED = "تم تحديث جدول المواعيد بنجاح."
SCHEDULE_INVALID_DAY = "يوم الأسبوع يجب أن يكون بين 0 و 6."
SCHEDULE_INVALID_RANGE = "وقت البداية يجب أن يكون قبل وقت النهاية."
SCHEDULE_OVERLAP = "الفترات الزمنية لنفس اليوم متداخلة."
DOCTOR_PROFILE_NOT_FOUND = "لم يتم العثور على ملف الطبيب."
DOCTOR_PROFILE_UPDATED = "تم تحديث ملف الطبيب بنجاح."
CLINIC_NOT_FOUND = "لم يتم تسجيل عيادة بعد."
CLINIC_UPDATED = "تم تحديث معلومات العيادة بنجاح."
CLINIC_SUBMITTED = "تم إرسال العيادة للمراجعة."
CLINIC_ALREADY_PENDING = "العيادة قيد المراجعة بالفعل."
CLINIC_NOT_PENDING = "يمكن مراجعة العيادات قيد الانتظار فقط."
CLINIC_APPROVED = "تمت الموافقة على العيادة."
CLINIC_REJECTED = "تم رفض العيادة."
REJECTION_REASON_REQUIRED = "سبب الرفض مطلوب."
TOO_MANY_IMAGES = "عدد الصور يتجاوز الحد المسموح."
RECORD_ADDED = "تم إضافة السجل الطبي بنجاح."
RECORD_CANCELLED_APPOINTMENT = "لا يمكن إضافة سجل طبي لموعد ملغى."
REPORT_UPLOADED = "تم رفع التقرير بنجاح."
PATIENT_NOT_LINKED = "لا يوجد مواعيد بين هذا المريض والطبيب."

# Uploads
FILE_TOO_LARGE = "حجم الملف كبير جداً."
FILE_TYPE_NOT_ALLOWED = "نوع الملف غير مدعوم."
FILE_INVALID = "الملف تالف أو غير صالح."

# Request validation, keyed by pydantic error type
VALIDATION_MESSAGES = {
    "missing": "هذا الحقل مطلوب.",
    "string_type": "يجب أن تكون القيمة نصاً.",
    "string_too_short": "يجب ألا يقل طول النص عن {min_length} أحرف.",
    "string_too_long": "يجب ألا يزيد طول النص عن {max_length} حرفاً.",
    "int_type": "يجب أن تكون القيمة عدداً صحيحاً.",
    "int_parsing": "يجب أن تكون القيمة عدداً صحيحاً.",
    "float_type": "يجب أن تكون القيمة رقماً.",
    "float_parsing": "يجب أن تكون القيمة رقماً.",
    "bool_type": "يجب أن تكون القيمة صحيحة أو خاطئة.",
    "bool_parsing": "يجب أن تكون القيمة صحيحة أو خاطئة.",
    "greater_than": "يجب أن تكون القيمة أكبر من {gt}.",
    "greater_than_equal": "يجب أن تكون القيمة أكبر من أو تساوي {ge}.",
    "less_than": "يجب أن تكون القيمة أصغر من {lt}.",
    "less_than_equal": "يجب أن تكون القيمة أصغر من أو تساوي {le}.",
    "literal_error": "القيمة غير مسموح بها.",
    "enum": "القيمة غير مسموح بها.",
    "list_type": "يجب أن تكون القيمة قائمة.",
    "model_attributes_type": "صيغة البيانات غير صحيحة.",
    "dict_type": "صيغة البيانات غير صحيحة.",
    "json_invalid": "صيغة JSON غير صحيحة.",
    "date_parsing": INVALID_DATE,
    "date_from_datetime_parsing": INVALID_DATE,
    "time_parsing": INVALID_TIME,
}


def status_message(status_code: int) -> str:
    return STATUS_MESSAGES.get(status_code, DEFAULT_ERROR)


def validation_message(error_type: Optional[str], ctx: Optional[dict] = None) -> str:
    template = VALIDATION_MESSAGES.get(error_type or "")
    if not template:
        return status_message(422)
    try:
        return template.format(**(ctx or {}))
    except (KeyError, IndexError):
        return status_message(422)


def message_for(status_code: int, code: Optional[str] = None) -> str:
    """Pick the most specific message for a status/code pair."""
    if code and code in CODE_MESSAGES:
        return CODE_MESSAGES[code]
    return status_message(status_code)
