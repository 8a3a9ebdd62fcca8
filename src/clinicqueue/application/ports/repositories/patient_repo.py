"""
Patient repository interface: the public identity resolver's storage.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ....domain.entities.patient import Patient


class PatientRepository(ABC):
    """Abstract repository for patient data access."""

    @abstractmethod
    async def find_by_phone(self, tenant_id: str, phone: str) -> Optional[Patient]:
        """Find a patient of the tenant by exact phone match."""
        pass

    @abstractmethod
    async def find_by_ids(self, tenant_id: str, patient_ids: List[str]) -> List[Patient]:
        """Bulk lookup used to populate queue listings."""
        pass

    @abstractmethod
    async def create(self, patient: Patient) -> Patient:
        """Persist a new patient."""
        pass
