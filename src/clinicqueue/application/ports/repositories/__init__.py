"""
Repository ports consumed by the queue engine.
"""

from .doctor_status_repo import DoctorStatusRepository
from .patient_repo import PatientRepository
from .specialist_repo import SpecialistRepository
from .tenant_repo import TenantRepository
from .token_repo import TokenRepository

__all__ = [
    "DoctorStatusRepository",
    "PatientRepository",
    "SpecialistRepository",
    "TenantRepository",
    "TokenRepository",
]
