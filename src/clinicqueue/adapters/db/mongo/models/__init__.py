"""
Beanie document models.
"""

from .queue_m import (
    DOCUMENT_MODELS,
    AppointmentMongo,
    DoctorStatusMongo,
    PatientMongo,
    SpecialistMongo,
    TenantMongo,
    TokenMongo,
)

__all__ = [
    "DOCUMENT_MODELS",
    "AppointmentMongo",
    "DoctorStatusMongo",
    "PatientMongo",
    "SpecialistMongo",
    "TenantMongo",
    "TokenMongo",
]
