"""
MongoDB implementation of SpecialistRepository.
"""

import uuid
from typing import List, Optional

from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from clinicqueue.application.ports.repositories.specialist_repo import SpecialistRepository
from clinicqueue.domain.entities.specialist import Specialist

from ..models.queue_m import SpecialistMongo


class MongoSpecialistRepository(SpecialistRepository):
    """MongoDB implementation of SpecialistRepository."""

    async def find_by_id(self, specialist_id: str, tenant_id: str) -> Optional[Specialist]:
        specialist_mongo = await SpecialistMongo.find_one(
            SpecialistMongo.specialist_id == specialist_id,
            SpecialistMongo.tenant_id == tenant_id,
        )
        return self._mongo_to_domain(specialist_mongo) if specialist_mongo else None

    async def list_active(self, tenant_id: str) -> List[Specialist]:
        specialists_mongo = await SpecialistMongo.find(
            SpecialistMongo.tenant_id == tenant_id,
            SpecialistMongo.is_active == True,  # noqa: E712
        ).sort([("name", 1), ("specialist_id", 1)]).to_list()
        return [self._mongo_to_domain(s) for s in specialists_mongo]

    async def get_or_create(self, tenant_id: str, name: str, specialty: str) -> Specialist:
        """Upsert on (tenant, name, specialty, active) so concurrent callers converge on one document."""
        collection = SpecialistMongo.get_motor_collection()
        query = {"tenant_id": tenant_id, "name": name, "specialty": specialty, "is_active": True}
        try:
            raw = await collection.find_one_and_update(
                query,
                {
                    "$setOnInsert": {
                        "specialist_id": str(uuid.uuid4()),
                        "max_tokens_per_day": None,
                        "practitioner_id": None,
                    }
                },
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            # a concurrent upsert inserted first; read its document
            raw = await collection.find_one(query)
        return self._raw_to_domain(raw)

    async def save(self, specialist: Specialist) -> Specialist:
        existing = await SpecialistMongo.find_one(
            SpecialistMongo.specialist_id == specialist.id
        )
        specialist_mongo = SpecialistMongo(
            specialist_id=specialist.id,
            tenant_id=specialist.tenant_id,
            name=specialist.name,
            specialty=specialist.specialty,
            is_active=specialist.is_active,
            max_tokens_per_day=specialist.max_tokens_per_day,
            practitioner_id=specialist.practitioner_id,
        )
        if existing:
            specialist_mongo.id = existing.id
        await specialist_mongo.save()
        return self._mongo_to_domain(specialist_mongo)

    def _mongo_to_domain(self, specialist_mongo: SpecialistMongo) -> Specialist:
        return Specialist(
            id=specialist_mongo.specialist_id,
            tenant_id=specialist_mongo.tenant_id,
            name=specialist_mongo.name,
            specialty=specialist_mongo.specialty,
            is_active=specialist_mongo.is_active,
            max_tokens_per_day=specialist_mongo.max_tokens_per_day,
            practitioner_id=specialist_mongo.practitioner_id,
        )

    def _raw_to_domain(self, raw: dict) -> Specialist:
        return Specialist(
            id=raw["specialist_id"],
            tenant_id=raw["tenant_id"],
            name=raw["name"],
            specialty=raw["specialty"],
            is_active=raw.get("is_active", True),
            max_tokens_per_day=raw.get("max_tokens_per_day"),
            practitioner_id=raw.get("practitioner_id"),
        )
