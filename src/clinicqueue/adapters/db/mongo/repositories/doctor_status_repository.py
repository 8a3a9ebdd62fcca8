"""
MongoDB implementation of DoctorStatusRepository.
"""

import uuid
from datetime import date
from typing import List, Optional

from pymongo import ReturnDocument

from clinicqueue.application.ports.repositories.doctor_status_repo import DoctorStatusRepository
from clinicqueue.core.utils.datetime_utils import ensure_utc, get_current_timestamp
from clinicqueue.domain.entities.doctor_status import DoctorStatus
from clinicqueue.domain.enums.token_status import DoctorStatusType

from ..models.queue_m import DoctorStatusMongo


class MongoDoctorStatusRepository(DoctorStatusRepository):
    """MongoDB implementation of DoctorStatusRepository."""

    async def find(
        self, tenant_id: str, specialist_id: Optional[str], day: date
    ) -> Optional[DoctorStatus]:
        status_mongo = await DoctorStatusMongo.find_one(
            {"tenant_id": tenant_id, "specialist_id": specialist_id, "day": day.isoformat()}
        )
        return self._mongo_to_domain(status_mongo) if status_mongo else None

    async def list_for_day(self, tenant_id: str, day: date) -> List[DoctorStatus]:
        statuses_mongo = await DoctorStatusMongo.find(
            DoctorStatusMongo.tenant_id == tenant_id,
            DoctorStatusMongo.day == day.isoformat(),
        ).to_list()
        return [self._mongo_to_domain(s) for s in statuses_mongo]

    async def upsert(
        self,
        tenant_id: str,
        specialist_id: Optional[str],
        day: date,
        status: DoctorStatusType,
        set_by: str,
    ) -> DoctorStatus:
        raw = await DoctorStatusMongo.get_motor_collection().find_one_and_update(
            {"tenant_id": tenant_id, "specialist_id": specialist_id, "day": day.isoformat()},
            {
                "$set": {
                    "status": DoctorStatusType(status).value,
                    "set_by": set_by,
                    "updated_at": get_current_timestamp(),
                },
                "$setOnInsert": {"status_id": str(uuid.uuid4())},
            },
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        raw.pop("_id", None)
        return self._mongo_to_domain(DoctorStatusMongo.model_validate(raw))

    def _mongo_to_domain(self, status_mongo: DoctorStatusMongo) -> DoctorStatus:
        return DoctorStatus(
            id=status_mongo.status_id,
            tenant_id=status_mongo.tenant_id,
            specialist_id=status_mongo.specialist_id,
            day=date.fromisoformat(status_mongo.day),
            status=DoctorStatusType(status_mongo.status),
            set_by=status_mongo.set_by,
            updated_at=ensure_utc(status_mongo.updated_at),
        )
