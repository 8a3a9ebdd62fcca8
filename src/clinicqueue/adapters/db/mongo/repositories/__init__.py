"""
MongoDB repository implementations.
"""

from .doctor_status_repository import MongoDoctorStatusRepository
from .patient_repository import MongoPatientRepository
from .specialist_repository import MongoSpecialistRepository
from .tenant_repository import MongoTenantRepository
from .token_repository import MongoTokenRepository

__all__ = [
    "MongoDoctorStatusRepository",
    "MongoPatientRepository",
    "MongoSpecialistRepository",
    "MongoTenantRepository",
    "MongoTokenRepository",
]
