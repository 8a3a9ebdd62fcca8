"""
MongoDB implementation of PatientRepository.
"""

from datetime import date
from typing import List, Optional

from clinicqueue.application.ports.repositories.patient_repo import PatientRepository
from clinicqueue.core.utils.datetime_utils import ensure_utc
from clinicqueue.domain.entities.patient import Patient

from ..models.queue_m import PatientMongo


class MongoPatientRepository(PatientRepository):
    """MongoDB implementation of PatientRepository."""

    async def find_by_phone(self, tenant_id: str, phone: str) -> Optional[Patient]:
        """Find the earliest patient registered with this phone in the tenant."""
        patients_mongo = await PatientMongo.find(
            PatientMongo.tenant_id == tenant_id,
            PatientMongo.phone == phone,
        ).sort([("created_at", 1)]).limit(1).to_list()
        return self._mongo_to_domain(patients_mongo[0]) if patients_mongo else None

    async def find_by_ids(self, tenant_id: str, patient_ids: List[str]) -> List[Patient]:
        if not patient_ids:
            return []
        patients_mongo = await PatientMongo.find(
            {"tenant_id": tenant_id, "patient_id": {"$in": list(patient_ids)}}
        ).to_list()
        return [self._mongo_to_domain(p) for p in patients_mongo]

    async def create(self, patient: Patient) -> Patient:
        patient_mongo = PatientMongo(
            patient_id=patient.id,
            tenant_id=patient.tenant_id,
            name=patient.name,
            dob=patient.dob.isoformat(),
            phone=patient.phone,
            address=patient.address,
            email=patient.email,
            gender=patient.gender,
            created_at=patient.created_at,
            updated_at=patient.updated_at,
        )
        await patient_mongo.insert()
        return self._mongo_to_domain(patient_mongo)

    def _mongo_to_domain(self, patient_mongo: PatientMongo) -> Patient:
        return Patient(
            id=patient_mongo.patient_id,
            tenant_id=patient_mongo.tenant_id,
            name=patient_mongo.name,
            dob=date.fromisoformat(patient_mongo.dob),
            phone=patient_mongo.phone,
            address=patient_mongo.address,
            email=patient_mongo.email,
            gender=patient_mongo.gender,
            created_at=ensure_utc(patient_mongo.created_at),
            updated_at=ensure_utc(patient_mongo.updated_at),
        )
