"""
Tenant repository interface for data access abstraction.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ....domain.entities.tenant import Tenant


class TenantRepository(ABC):
    """Abstract repository for clinic lookup."""

    @abstractmethod
    async def find_by_id(self, tenant_id: str) -> Optional[Tenant]:
        """Find a tenant by internal id."""
        pass

    @abstractmethod
    async def find_by_slug(self, slug: str) -> Optional[Tenant]:
        """Find a tenant by its public slug."""
        pass

    @abstractmethod
    async def save(self, tenant: Tenant) -> Tenant:
        """Insert or replace a tenant."""
        pass
