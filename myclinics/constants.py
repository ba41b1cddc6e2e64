APP_INFO = {
    "name": "عياداتي",
    "description": "منصة حجز المواعيد الطبية",
    "version": "1.0.0",
    "currency": "دينار اردني",
    "defaultLanguage": "ar",
}

MEDICAL_SPECIALTIES = [
    {"id": "dentistry", "name": "Dentistry", "nameAr": "اسنان", "icon": "🦷"},
    {"id": "gynecology", "name": "Gynecology", "nameAr": "اخصائي نسائية", "icon": "👩‍⚕️"},
    {"id": "dermatology", "name": "Dermatology", "nameAr": "جلدية", "icon": "🔬"},
    {"id": "cardiology", "name": "Cardiology", "nameAr": "قلب", "icon": "❤️"},
    {"id": "orthopedics", "name": "Orthopedics", "nameAr": "عظام", "icon": "🦴"},
    {"id": "pediatrics", "name": "Pediatrics", "nameAr": "اطفال", "icon": "👶"},
    {"id": "neurology", "name": "Neurology", "nameAr": "اعصاب", "icon": "🧠"},
    {"id": "ophthalmology", "name": "Ophthalmology", "nameAr": "عيون", "icon": "👁️"},
]

# Duplicates are removed when served
CITIES = [
    "عمان",
    "الزرقاء",
    "اربد",
    "السلط",
    "الكرك",
    "العقبة",
    "الطفيلة",
    "معان",
    "البلقاء",
    "الطفيلة",
]
