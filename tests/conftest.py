"""
Shared fixtures: an in-memory clinic with two tenants, a controllable clock
and a queue engine wired to the memory repositories.
"""

import os

os.environ["DATABASE_BACKEND"] = "memory"
os.environ["APP_ENV"] = "testing"
os.environ["EXPIRY_SWEEPER_ENABLED"] = "false"

from datetime import date, datetime, timedelta, timezone  # noqa: E402
from typing import Optional  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from clinicqueue.adapters.db.memory import (  # noqa: E402
    InMemoryDoctorStatusRepository,
    InMemoryPatientRepository,
    InMemorySpecialistRepository,
    InMemoryStore,
    InMemoryTenantRepository,
    InMemoryTokenRepository,
)
from clinicqueue.api.deps import get_queue_engine  # noqa: E402
from clinicqueue.app import create_app  # noqa: E402
from clinicqueue.application.services.queue_engine import QueueEngine  # noqa: E402
from clinicqueue.core.config import QueueSettings  # noqa: E402
from clinicqueue.domain.entities import DoctorStatus, Specialist, Tenant  # noqa: E402
from clinicqueue.domain.enums.token_status import DoctorStatusType  # noqa: E402

CLINIC_LAT = 28.6139
CLINIC_LNG = 77.2090

TENANT_ID = "tenant-demo"
OTHER_TENANT_ID = "tenant-other"
EMPTY_TENANT_ID = "tenant-empty"

GP_ID = "6f1c2d3e-4a5b-4c6d-8e7f-901a2b3c4d5e"
DERM_ID = "0b9e8d7c-6a5f-4e3d-9c2b-1a0f9e8d7c6b"
RETIRED_ID = "3c4d5e6f-7a8b-4c9d-8e0f-1a2b3c4d5e6f"
OTHER_SPECIALIST_ID = "9a8b7c6d-5e4f-4a3b-9c2d-1e0f9a8b7c6d"

STAFF_HEADERS = {"X-Tenant-ID": TENANT_ID, "X-Staff-ID": "staff-reception-1"}


class FakeClock:
    """Callable clock the tests can move forward."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def seed_clinics(store: InMemoryStore) -> None:
    store.tenants[TENANT_ID] = Tenant(
        id=TENANT_ID,
        slug="demo-clinic",
        name="Demo Clinic",
        geo_lat=CLINIC_LAT,
        geo_lng=CLINIC_LNG,
        location_radius_m=100,
    )
    store.tenants[OTHER_TENANT_ID] = Tenant(
        id=OTHER_TENANT_ID, slug="other-clinic", name="Other Clinic"
    )
    store.tenants[EMPTY_TENANT_ID] = Tenant(
        id=EMPTY_TENANT_ID, slug="empty-clinic", name="Empty Clinic"
    )

    for specialist in (
        Specialist(id=GP_ID, tenant_id=TENANT_ID, name="Dr. Asha Rao", specialty="General Medicine"),
        Specialist(
            id=DERM_ID,
            tenant_id=TENANT_ID,
            name="Dr. Vikram Mehta",
            specialty="Dermatology",
            max_tokens_per_day=3,
        ),
        Specialist(
            id=RETIRED_ID,
            tenant_id=TENANT_ID,
            name="Dr. Old Timer",
            specialty="Cardiology",
            is_active=False,
        ),
        Specialist(
            id=OTHER_SPECIALIST_ID,
            tenant_id=OTHER_TENANT_ID,
            name="Dr. Neha Singh",
            specialty="Pediatrics",
        ),
    ):
        store.specialists[specialist.id] = specialist


def set_doctor_status(
    store: InMemoryStore,
    tenant_id: str,
    specialist_id: Optional[str],
    day: date,
    status: DoctorStatusType,
) -> None:
    store.doctor_statuses[(tenant_id, specialist_id, day)] = DoctorStatus(
        id=f"status-{tenant_id}-{specialist_id}-{day.isoformat()}",
        tenant_id=tenant_id,
        specialist_id=specialist_id,
        day=day,
        status=status,
        set_by="seed",
    )


def token_payload(
    specialist_id: Optional[str] = GP_ID,
    phone: str = "9876543210",
    name: str = "Ravi Kumar",
    lat: float = CLINIC_LAT,
    lng: float = CLINIC_LNG,
    **patient_fields,
) -> dict:
    patient = {"name": name, "dob": "1990-05-17", "phone": phone}
    patient.update(patient_fields)
    payload = {"patient": patient, "location": {"lat": lat, "lng": lng}}
    if specialist_id is not None:
        payload["specialistId"] = specialist_id
    return payload


@pytest.fixture
def clock() -> FakeClock:
    # 10:00 in Asia/Kolkata
    return FakeClock(datetime(2026, 3, 10, 4, 30, tzinfo=timezone.utc))


@pytest.fixture
def queue_settings() -> QueueSettings:
    return QueueSettings(timezone="Asia/Kolkata", default_max_tokens_per_day=50)


@pytest.fixture
def store() -> InMemoryStore:
    store = InMemoryStore()
    seed_clinics(store)
    return store


@pytest.fixture
def tenant_repository(store):
    return InMemoryTenantRepository(store)


@pytest.fixture
def specialist_repository(store):
    return InMemorySpecialistRepository(store)


@pytest.fixture
def patient_repository(store):
    return InMemoryPatientRepository(store)


@pytest.fixture
def token_repository(store):
    return InMemoryTokenRepository(store)


@pytest.fixture
def doctor_status_repository(store):
    return InMemoryDoctorStatusRepository(store)


@pytest.fixture
def engine(
    tenant_repository,
    specialist_repository,
    patient_repository,
    token_repository,
    doctor_status_repository,
    queue_settings,
    clock,
) -> QueueEngine:
    return QueueEngine(
        tenant_repository=tenant_repository,
        specialist_repository=specialist_repository,
        patient_repository=patient_repository,
        token_repository=token_repository,
        doctor_status_repository=doctor_status_repository,
        settings=queue_settings,
        clock=clock,
    )


@pytest.fixture
def today(engine) -> date:
    return engine.today()


@pytest.fixture
def open_clinic(store, today):
    """Every clinic's general record is IN for today."""
    for tenant_id in (TENANT_ID, OTHER_TENANT_ID, EMPTY_TENANT_ID):
        set_doctor_status(store, tenant_id, None, today, DoctorStatusType.IN)
    return store


@pytest.fixture
def client(engine):
    app = create_app()
    app.dependency_overrides[get_queue_engine] = lambda: engine
    with TestClient(app) as test_client:
        yield test_client
