"""
MongoDB implementation of TenantRepository.
"""

from typing import Optional

from clinicqueue.application.ports.repositories.tenant_repo import TenantRepository
from clinicqueue.domain.entities.tenant import Tenant

from ..models.queue_m import TenantMongo


class MongoTenantRepository(TenantRepository):
    """MongoDB implementation of TenantRepository."""

    async def find_by_id(self, tenant_id: str) -> Optional[Tenant]:
        tenant_mongo = await TenantMongo.find_one(TenantMongo.tenant_id == tenant_id)
        return self._mongo_to_domain(tenant_mongo) if tenant_mongo else None

    async def find_by_slug(self, slug: str) -> Optional[Tenant]:
        tenant_mongo = await TenantMongo.find_one(TenantMongo.slug == slug)
        return self._mongo_to_domain(tenant_mongo) if tenant_mongo else None

    async def save(self, tenant: Tenant) -> Tenant:
        """Save a tenant, replacing any existing document with the same ID."""
        existing = await TenantMongo.find_one(TenantMongo.tenant_id == tenant.id)
        tenant_mongo = TenantMongo(
            tenant_id=tenant.id,
            slug=tenant.slug,
            name=tenant.name,
            qr_active=tenant.qr_active,
            geo_lat=tenant.geo_lat,
            geo_lng=tenant.geo_lng,
            location_radius_m=tenant.location_radius_m,
            address=tenant.address,
        )
        if existing:
            tenant_mongo.id = existing.id
        await tenant_mongo.save()
        return self._mongo_to_domain(tenant_mongo)

    def _mongo_to_domain(self, tenant_mongo: TenantMongo) -> Tenant:
        return Tenant(
            id=tenant_mongo.tenant_id,
            slug=tenant_mongo.slug,
            name=tenant_mongo.name,
            qr_active=tenant_mongo.qr_active,
            geo_lat=tenant_mongo.geo_lat,
            geo_lng=tenant_mongo.geo_lng,
            location_radius_m=tenant_mongo.location_radius_m,
            address=tenant_mongo.address,
        )
