"""
Availability gate: decides whether a specialist is taking patients today.

Each clinic day has at most one general record (``specialist_id=None``) and
one record per specialist. Resolution order:

1. general record IN -> IN for every specialist
2. specialist record, if present
3. general record (necessarily OUT at this point), if present
4. OUT
"""

from datetime import date
from typing import Dict, List, Optional

from ...core.structured_logger import get_logger
from ...domain.entities.doctor_status import DoctorStatus
from ...domain.entities.specialist import (
    DEFAULT_SPECIALIST_NAME,
    DEFAULT_SPECIALTY,
    Specialist,
)
from ...domain.enums.token_status import DoctorStatusType
from ..dto.queue_dto import DoctorBoardEntry
from ..ports.repositories.doctor_status_repo import DoctorStatusRepository

logger = get_logger(__name__)


def resolve_status(
    general: Optional[DoctorStatus], specific: Optional[DoctorStatus]
) -> DoctorStatusType:
    if general is not None and general.status == DoctorStatusType.IN:
        return DoctorStatusType.IN
    if specific is not None:
        return specific.status
    if general is not None:
        return general.status
    return DoctorStatusType.OUT


class AvailabilityGate:
    """Reads and writes daily IN/OUT records."""

    def __init__(self, doctor_status_repository: DoctorStatusRepository):
        self._doctor_status_repository = doctor_status_repository

    async def current_status(
        self, tenant_id: str, specialist_id: Optional[str], day: date
    ) -> DoctorStatusType:
        general = await self._doctor_status_repository.find(tenant_id, None, day)
        if specialist_id is None:
            return resolve_status(general, None)
        if general is not None and general.status == DoctorStatusType.IN:
            return DoctorStatusType.IN
        specific = await self._doctor_status_repository.find(tenant_id, specialist_id, day)
        return resolve_status(general, specific)

    async def is_accepting(
        self, tenant_id: str, specialist_id: Optional[str], day: date
    ) -> bool:
        status = await self.current_status(tenant_id, specialist_id, day)
        return status == DoctorStatusType.IN

    async def set_status(
        self,
        tenant_id: str,
        specialist_id: Optional[str],
        day: date,
        status: DoctorStatusType,
        set_by: str,
    ) -> DoctorStatus:
        record = await self._doctor_status_repository.upsert(
            tenant_id, specialist_id, day, DoctorStatusType(status), set_by
        )
        logger.info(
            "Doctor status set",
            tenant_id=tenant_id,
            specialist_id=specialist_id,
            date=day.isoformat(),
            status=record.status.value,
            set_by=set_by,
        )
        return record

    async def clinic_board(
        self, tenant_id: str, specialists: List[Specialist], day: date
    ) -> List[DoctorBoardEntry]:
        """Resolved status of every specialist for the day.

        With no specialists configured a single virtual General Practitioner
        entry is returned, driven only by the general record.
        """
        records = await self._doctor_status_repository.list_for_day(tenant_id, day)
        general: Optional[DoctorStatus] = None
        by_specialist: Dict[str, DoctorStatus] = {}
        for record in records:
            if record.is_general:
                general = record
            else:
                by_specialist[record.specialist_id] = record

        if not specialists:
            return [
                DoctorBoardEntry(
                    specialist_id=None,
                    name=DEFAULT_SPECIALIST_NAME,
                    specialty=DEFAULT_SPECIALTY,
                    status=resolve_status(general, None),
                )
            ]

        return [
            DoctorBoardEntry(
                specialist_id=s.id,
                name=s.name,
                specialty=s.specialty,
                status=resolve_status(general, by_specialist.get(s.id)),
            )
            for s in specialists
        ]
