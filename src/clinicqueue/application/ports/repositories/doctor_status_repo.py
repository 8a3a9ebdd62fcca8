"""
Doctor status repository interface.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional

from ....domain.entities.doctor_status import DoctorStatus
from ....domain.enums.token_status import DoctorStatusType


class DoctorStatusRepository(ABC):
    """Abstract repository for daily IN/OUT records."""

    @abstractmethod
    async def find(
        self, tenant_id: str, specialist_id: Optional[str], day: date
    ) -> Optional[DoctorStatus]:
        """Record for the exact key; ``specialist_id=None`` is the general record."""
        pass

    @abstractmethod
    async def list_for_day(self, tenant_id: str, day: date) -> List[DoctorStatus]:
        """All records of the tenant for the day, general record included."""
        pass

    @abstractmethod
    async def upsert(
        self,
        tenant_id: str,
        specialist_id: Optional[str],
        day: date,
        status: DoctorStatusType,
        set_by: str,
    ) -> DoctorStatus:
        """Create or overwrite the unique record for the key."""
        pass
