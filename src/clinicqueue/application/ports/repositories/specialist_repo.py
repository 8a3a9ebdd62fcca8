"""
Specialist repository interface for data access abstraction.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ....domain.entities.specialist import Specialist


class SpecialistRepository(ABC):
    """Abstract repository for specialists."""

    @abstractmethod
    async def find_by_id(self, specialist_id: str, tenant_id: str) -> Optional[Specialist]:
        """Find a specialist of the tenant by id (active or not)."""
        pass

    @abstractmethod
    async def list_active(self, tenant_id: str) -> List[Specialist]:
        """Active specialists of the tenant ordered by name."""
        pass

    @abstractmethod
    async def get_or_create(self, tenant_id: str, name: str, specialty: str) -> Specialist:
        """Return the active specialist with this name and specialty, creating it if absent."""
        pass

    @abstractmethod
    async def save(self, specialist: Specialist) -> Specialist:
        """Insert or replace a specialist."""
        pass
