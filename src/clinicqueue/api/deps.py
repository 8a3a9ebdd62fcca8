"""FastAPI dependency providers.

Repositories are chosen by ``DATABASE_BACKEND``; the engine is one instance
per process so its partition locks are shared by every request.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Path, Request

from ..adapters.db.memory import (
    InMemoryDoctorStatusRepository,
    InMemoryPatientRepository,
    InMemorySpecialistRepository,
    InMemoryStore,
    InMemoryTenantRepository,
    InMemoryTokenRepository,
)
from ..adapters.db.mongo.repositories import (
    MongoDoctorStatusRepository,
    MongoPatientRepository,
    MongoSpecialistRepository,
    MongoTenantRepository,
    MongoTokenRepository,
)
from ..application.ports.repositories import (
    DoctorStatusRepository,
    PatientRepository,
    SpecialistRepository,
    TenantRepository,
    TokenRepository,
)
from ..application.services.queue_engine import QueueEngine
from ..core.config import get_settings
from ..domain.entities.tenant import Tenant
from .errors import ForbiddenError, UnauthorizedError


@lru_cache()
def get_memory_store() -> InMemoryStore:
    """Process-wide store for the memory backend."""
    return InMemoryStore()


def _use_memory() -> bool:
    return get_settings().uses_memory_backend


@lru_cache()
def get_tenant_repository() -> TenantRepository:
    if _use_memory():
        return InMemoryTenantRepository(get_memory_store())
    return MongoTenantRepository()


@lru_cache()
def get_specialist_repository() -> SpecialistRepository:
    if _use_memory():
        return InMemorySpecialistRepository(get_memory_store())
    return MongoSpecialistRepository()


@lru_cache()
def get_patient_repository() -> PatientRepository:
    if _use_memory():
        return InMemoryPatientRepository(get_memory_store())
    return MongoPatientRepository()


@lru_cache()
def get_token_repository() -> TokenRepository:
    if _use_memory():
        return InMemoryTokenRepository(get_memory_store())
    return MongoTokenRepository()


@lru_cache()
def get_doctor_status_repository() -> DoctorStatusRepository:
    if _use_memory():
        return InMemoryDoctorStatusRepository(get_memory_store())
    return MongoDoctorStatusRepository()


@lru_cache()
def get_queue_engine() -> QueueEngine:
    """Get the queue engine instance."""
    return QueueEngine(
        tenant_repository=get_tenant_repository(),
        specialist_repository=get_specialist_repository(),
        patient_repository=get_patient_repository(),
        token_repository=get_token_repository(),
        doctor_status_repository=get_doctor_status_repository(),
        settings=get_settings().queue,
    )


def reset_dependencies() -> None:
    """Drop cached providers so the next request rebuilds them from settings."""
    for provider in (
        get_memory_store,
        get_tenant_repository,
        get_specialist_repository,
        get_patient_repository,
        get_token_repository,
        get_doctor_status_repository,
        get_queue_engine,
    ):
        provider.cache_clear()


QueueEngineDep = Annotated[QueueEngine, Depends(get_queue_engine)]


def get_staff_id(request: Request) -> str:
    """Staff member id bound by ``StaffMiddleware``."""
    staff_id = getattr(request.state, "staff_id", None)
    if not staff_id:
        raise UnauthorizedError("Staff identity missing")
    return staff_id


async def get_staff_tenant(
    request: Request,
    engine: QueueEngineDep,
    slug: str = Path(..., description="Clinic slug"),
) -> Tenant:
    """Resolve the clinic by slug and check it matches the caller's tenant claim."""
    tenant = await engine.get_tenant_by_slug(slug)
    claimed = getattr(request.state, "tenant_id", None)
    if claimed != tenant.id:
        raise ForbiddenError("Unauthorized", {"slug": slug})
    return tenant


StaffIdDep = Annotated[str, Depends(get_staff_id)]
StaffTenantDep = Annotated[Tenant, Depends(get_staff_tenant)]
