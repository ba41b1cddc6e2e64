# Schemas package (re-export feature modules for stable imports)
from .common.common import *
from .users.user import *
from .auth.auth import *
from .doctors.doctor import *
from .appointments.appointment import *
from .clinics.clinic import *
from .records.record import *
from .catalog.catalog import *
