"""
Utility functions package for ClinicQueue application.
"""

from .datetime_utils import (
    Clock,
    clinic_today,
    end_of_clinic_day,
    ensure_utc,
    get_current_timestamp,
)

__all__ = [
    "Clock",
    "clinic_today",
    "end_of_clinic_day",
    "ensure_utc",
    "get_current_timestamp",
]
