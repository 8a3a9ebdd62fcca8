"""
Application DTOs.
"""

from .queue_dto import ClinicStatus, DoctorBoardEntry, QueueStats
from .token_dto import (
    CreateTokenRequest,
    LocationInput,
    PatientIntake,
    parse_create_token_request,
)

__all__ = [
    "ClinicStatus",
    "CreateTokenRequest",
    "DoctorBoardEntry",
    "LocationInput",
    "PatientIntake",
    "QueueStats",
    "parse_create_token_request",
]
