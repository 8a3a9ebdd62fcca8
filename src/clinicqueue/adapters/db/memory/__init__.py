"""
In-memory repository implementations.
"""

from .repositories import (
    InMemoryDoctorStatusRepository,
    InMemoryPatientRepository,
    InMemorySpecialistRepository,
    InMemoryStore,
    InMemoryTenantRepository,
    InMemoryTokenRepository,
)

__all__ = [
    "InMemoryDoctorStatusRepository",
    "InMemoryPatientRepository",
    "InMemorySpecialistRepository",
    "InMemoryStore",
    "InMemoryTenantRepository",
    "InMemoryTokenRepository",
]
