"""
In-memory repository implementations.

Used with ``DATABASE_BACKEND=memory`` and by the test suite. They enforce the
same unique keys as the MongoDB indexes and yield to the event loop on every
call, so interleavings look like a real driver's. Entities are copied in and
out, so callers never share state with the store.
"""

import asyncio
import copy
import uuid
from dataclasses import replace
from datetime import date, datetime
from typing import Dict, List, Optional, Tuple

from clinicqueue.application.ports.repositories.doctor_status_repo import DoctorStatusRepository
from clinicqueue.application.ports.repositories.patient_repo import PatientRepository
from clinicqueue.application.ports.repositories.specialist_repo import SpecialistRepository
from clinicqueue.application.ports.repositories.tenant_repo import TenantRepository
from clinicqueue.application.ports.repositories.token_repo import TokenRepository
from clinicqueue.core.utils.datetime_utils import get_current_timestamp
from clinicqueue.domain.entities.doctor_status import DoctorStatus
from clinicqueue.domain.entities.patient import Patient
from clinicqueue.domain.entities.specialist import Specialist
from clinicqueue.domain.entities.tenant import Tenant
from clinicqueue.domain.entities.token import Token
from clinicqueue.domain.enums.token_status import (
    OPEN_TOKEN_STATUSES,
    AppointmentStatus,
    DoctorStatusType,
    TokenStatus,
)
from clinicqueue.domain.errors import TokenWriteConflictError
from clinicqueue.domain.value_objects.queue_partition import QueuePartition


async def _yield() -> None:
    await asyncio.sleep(0)


class InMemoryStore:
    """Shared tables for one in-memory database."""

    def __init__(self) -> None:
        self.tenants: Dict[str, Tenant] = {}
        self.specialists: Dict[str, Specialist] = {}
        self.patients: Dict[str, Patient] = {}
        self.tokens: Dict[str, Token] = {}
        self.token_numbers: Dict[Tuple[str, str, date, int], str] = {}
        self.public_ids: Dict[str, str] = {}
        self.doctor_statuses: Dict[Tuple[str, Optional[str], date], DoctorStatus] = {}

    def clear(self) -> None:
        self.__init__()


def _detached(token: Token) -> Token:
    # Populated relations are never stored.
    return copy.deepcopy(replace(token, specialist=None, patient=None))


class InMemoryTenantRepository(TenantRepository):
    def __init__(self, store: InMemoryStore):
        self._store = store

    async def find_by_id(self, tenant_id: str) -> Optional[Tenant]:
        await _yield()
        tenant = self._store.tenants.get(tenant_id)
        return copy.deepcopy(tenant) if tenant else None

    async def find_by_slug(self, slug: str) -> Optional[Tenant]:
        await _yield()
        for tenant in self._store.tenants.values():
            if tenant.slug == slug:
                return copy.deepcopy(tenant)
        return None

    async def save(self, tenant: Tenant) -> Tenant:
        await _yield()
        for other in self._store.tenants.values():
            if other.slug == tenant.slug and other.id != tenant.id:
                raise ValueError(f"Tenant slug already in use: {tenant.slug}")
        self._store.tenants[tenant.id] = copy.deepcopy(tenant)
        return copy.deepcopy(tenant)


class InMemorySpecialistRepository(SpecialistRepository):
    def __init__(self, store: InMemoryStore):
        self._store = store

    async def find_by_id(self, specialist_id: str, tenant_id: str) -> Optional[Specialist]:
        await _yield()
        specialist = self._store.specialists.get(specialist_id)
        if specialist is None or specialist.tenant_id != tenant_id:
            return None
        return copy.deepcopy(specialist)

    async def list_active(self, tenant_id: str) -> List[Specialist]:
        await _yield()
        active = [
            s for s in self._store.specialists.values()
            if s.tenant_id == tenant_id and s.is_active
        ]
        return [copy.deepcopy(s) for s in sorted(active, key=lambda s: (s.name, s.id))]

    async def get_or_create(self, tenant_id: str, name: str, specialty: str) -> Specialist:
        await _yield()
        # No await between lookup and insert: atomic on the event loop.
        for s in self._store.specialists.values():
            if s.tenant_id == tenant_id and s.name == name and s.specialty == specialty and s.is_active:
                return copy.deepcopy(s)
        specialist = Specialist(
            id=str(uuid.uuid4()), tenant_id=tenant_id, name=name, specialty=specialty
        )
        self._store.specialists[specialist.id] = specialist
        return copy.deepcopy(specialist)

    async def save(self, specialist: Specialist) -> Specialist:
        await _yield()
        self._store.specialists[specialist.id] = copy.deepcopy(specialist)
        return copy.deepcopy(specialist)


class InMemoryPatientRepository(PatientRepository):
    def __init__(self, store: InMemoryStore):
        self._store = store

    async def find_by_phone(self, tenant_id: str, phone: str) -> Optional[Patient]:
        await _yield()
        matches = [
            p for p in self._store.patients.values()
            if p.tenant_id == tenant_id and p.phone == phone
        ]
        if not matches:
            return None
        return copy.deepcopy(min(matches, key=lambda p: p.created_at))

    async def find_by_ids(self, tenant_id: str, patient_ids: List[str]) -> List[Patient]:
        await _yield()
        wanted = set(patient_ids)
        return [
            copy.deepcopy(p) for p in self._store.patients.values()
            if p.tenant_id == tenant_id and p.id in wanted
        ]

    async def create(self, patient: Patient) -> Patient:
        await _yield()
        if patient.id in self._store.patients:
            raise ValueError(f"Patient already exists: {patient.id}")
        self._store.patients[patient.id] = copy.deepcopy(patient)
        return copy.deepcopy(patient)


class InMemoryTokenRepository(TokenRepository):
    def __init__(self, store: InMemoryStore):
        self._store = store

    async def max_token_number(self, partition: QueuePartition) -> int:
        await _yield()
        numbers = [
            t.token_number for t in self._store.tokens.values()
            if t.partition == partition
        ]
        return max(numbers, default=0)

    async def insert(self, token: Token) -> Token:
        await _yield()
        number_key = (token.tenant_id, token.specialist_id, token.day, token.token_number)
        if number_key in self._store.token_numbers:
            raise TokenWriteConflictError("token_number")
        if token.public_id in self._store.public_ids:
            raise TokenWriteConflictError("public_id")
        if token.id in self._store.tokens:
            raise TokenWriteConflictError("token_id")
        stored = _detached(token)
        self._store.tokens[token.id] = stored
        self._store.token_numbers[number_key] = token.id
        self._store.public_ids[token.public_id] = token.id
        return copy.deepcopy(stored)

    async def find_by_id(self, tenant_id: str, token_id: str) -> Optional[Token]:
        await _yield()
        token = self._store.tokens.get(token_id)
        if token is None or token.tenant_id != tenant_id:
            return None
        return copy.deepcopy(token)

    async def find_by_public_id(self, tenant_id: str, public_id: str) -> Optional[Token]:
        await _yield()
        token_id = self._store.public_ids.get(public_id)
        token = self._store.tokens.get(token_id) if token_id else None
        if token is None or token.tenant_id != tenant_id:
            return None
        return copy.deepcopy(token)

    async def list_by_status(
        self,
        tenant_id: str,
        day: date,
        status: TokenStatus,
        specialist_id: Optional[str] = None,
    ) -> List[Token]:
        await _yield()
        tokens = [
            t for t in self._store.tokens.values()
            if t.tenant_id == tenant_id
            and t.day == day
            and t.status == status
            and (not specialist_id or t.specialist_id == specialist_id)
        ]
        tokens.sort(key=lambda t: (t.token_number, t.created_at))
        return [copy.deepcopy(t) for t in tokens]

    async def count(
        self,
        tenant_id: str,
        day: date,
        specialist_id: Optional[str] = None,
        status: Optional[TokenStatus] = None,
    ) -> int:
        await _yield()
        return sum(
            1 for t in self._store.tokens.values()
            if t.tenant_id == tenant_id
            and t.day == day
            and (not specialist_id or t.specialist_id == specialist_id)
            and (status is None or t.status == status)
        )

    async def compare_and_set_status(
        self,
        tenant_id: str,
        token_id: str,
        expected: TokenStatus,
        new_status: TokenStatus,
        appointment_status: Optional[AppointmentStatus] = None,
    ) -> Optional[Token]:
        await _yield()
        token = self._store.tokens.get(token_id)
        if token is None or token.tenant_id != tenant_id or token.status != expected:
            return None
        now = get_current_timestamp()
        token.status = TokenStatus(new_status)
        token.updated_at = now
        if appointment_status is not None and token.appointment is not None:
            token.appointment.status = AppointmentStatus(appointment_status)
            token.appointment.updated_at = now
        return copy.deepcopy(token)

    async def find_open_expired(self, now: datetime, limit: int = 500) -> List[Token]:
        await _yield()
        stale = [
            t for t in self._store.tokens.values()
            if t.status in OPEN_TOKEN_STATUSES
            and t.expires_at is not None
            and t.expires_at <= now
        ]
        stale.sort(key=lambda t: t.expires_at)
        return [copy.deepcopy(t) for t in stale[:limit]]


class InMemoryDoctorStatusRepository(DoctorStatusRepository):
    def __init__(self, store: InMemoryStore):
        self._store = store

    async def find(
        self, tenant_id: str, specialist_id: Optional[str], day: date
    ) -> Optional[DoctorStatus]:
        await _yield()
        record = self._store.doctor_statuses.get((tenant_id, specialist_id, day))
        return copy.deepcopy(record) if record else None

    async def list_for_day(self, tenant_id: str, day: date) -> List[DoctorStatus]:
        await _yield()
        return [
            copy.deepcopy(r) for (t, _, d), r in self._store.doctor_statuses.items()
            if t == tenant_id and d == day
        ]

    async def upsert(
        self,
        tenant_id: str,
        specialist_id: Optional[str],
        day: date,
        status: DoctorStatusType,
        set_by: str,
    ) -> DoctorStatus:
        await _yield()
        key = (tenant_id, specialist_id, day)
        record = self._store.doctor_statuses.get(key)
        if record is None:
            record = DoctorStatus(
                id=str(uuid.uuid4()),
                tenant_id=tenant_id,
                specialist_id=specialist_id,
                day=day,
                status=DoctorStatusType(status),
                set_by=set_by,
            )
            self._store.doctor_statuses[key] = record
        else:
            record.status = DoctorStatusType(status)
            record.set_by = set_by
            record.updated_at = get_current_timestamp()
        return copy.deepcopy(record)
