"""
Domain entities package.
"""

from .doctor_status import DoctorStatus
from .patient import Patient
from .specialist import Specialist
from .tenant import Tenant
from .token import Appointment, Token

__all__ = [
    "Appointment",
    "DoctorStatus",
    "Patient",
    "Specialist",
    "Tenant",
    "Token",
]
