"""
MongoDB implementation of TokenRepository.

The appointment is embedded in the token document, so inserts and status
changes touch a single document and are atomic without transactions.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from clinicqueue.application.ports.repositories.token_repo import TokenRepository
from clinicqueue.core.utils.datetime_utils import ensure_utc, get_current_timestamp
from clinicqueue.domain.entities.token import Appointment, Token
from clinicqueue.domain.enums.token_status import (
    OPEN_TOKEN_STATUSES,
    AppointmentStatus,
    TokenStatus,
)
from clinicqueue.domain.errors import TokenWriteConflictError
from clinicqueue.domain.value_objects.queue_partition import QueuePartition

from ..models.queue_m import AppointmentMongo, TokenMongo


class MongoTokenRepository(TokenRepository):
    """MongoDB implementation of TokenRepository."""

    async def max_token_number(self, partition: QueuePartition) -> int:
        latest = await TokenMongo.find(
            TokenMongo.tenant_id == partition.tenant_id,
            TokenMongo.specialist_id == partition.specialist_id,
            TokenMongo.day == partition.day.isoformat(),
        ).sort([("token_number", -1)]).limit(1).to_list()
        return latest[0].token_number if latest else 0

    async def insert(self, token: Token) -> Token:
        token_mongo = self._domain_to_mongo(token)
        try:
            await token_mongo.insert()
        except DuplicateKeyError as exc:
            key_pattern = (exc.details or {}).get("keyPattern") or {}
            key = "public_id" if "public_id" in key_pattern else "token_number"
            raise TokenWriteConflictError(key) from exc
        return self._mongo_to_domain(token_mongo)

    async def find_by_id(self, tenant_id: str, token_id: str) -> Optional[Token]:
        token_mongo = await TokenMongo.find_one(
            TokenMongo.token_id == token_id, TokenMongo.tenant_id == tenant_id
        )
        return self._mongo_to_domain(token_mongo) if token_mongo else None

    async def find_by_public_id(self, tenant_id: str, public_id: str) -> Optional[Token]:
        token_mongo = await TokenMongo.find_one(
            TokenMongo.public_id == public_id, TokenMongo.tenant_id == tenant_id
        )
        return self._mongo_to_domain(token_mongo) if token_mongo else None

    async def list_by_status(
        self,
        tenant_id: str,
        day: date,
        status: TokenStatus,
        specialist_id: Optional[str] = None,
    ) -> List[Token]:
        query: Dict[str, Any] = {
            "tenant_id": tenant_id,
            "day": day.isoformat(),
            "status": TokenStatus(status).value,
        }
        if specialist_id:
            query["specialist_id"] = specialist_id
        tokens_mongo = await TokenMongo.find(query).sort(
            [("token_number", 1), ("created_at", 1)]
        ).to_list()
        return [self._mongo_to_domain(t) for t in tokens_mongo]

    async def count(
        self,
        tenant_id: str,
        day: date,
        specialist_id: Optional[str] = None,
        status: Optional[TokenStatus] = None,
    ) -> int:
        query: Dict[str, Any] = {"tenant_id": tenant_id, "day": day.isoformat()}
        if specialist_id:
            query["specialist_id"] = specialist_id
        if status is not None:
            query["status"] = TokenStatus(status).value
        return await TokenMongo.find(query).count()

    async def compare_and_set_status(
        self,
        tenant_id: str,
        token_id: str,
        expected: TokenStatus,
        new_status: TokenStatus,
        appointment_status: Optional[AppointmentStatus] = None,
    ) -> Optional[Token]:
        now = get_current_timestamp()
        changes: Dict[str, Any] = {"status": TokenStatus(new_status).value, "updated_at": now}
        query: Dict[str, Any] = {
            "tenant_id": tenant_id,
            "token_id": token_id,
            "status": TokenStatus(expected).value,
        }
        if appointment_status is not None:
            changes["appointment.status"] = AppointmentStatus(appointment_status).value
            changes["appointment.updated_at"] = now

        raw = await TokenMongo.get_motor_collection().find_one_and_update(
            query,
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )
        if raw is None:
            return None
        raw.pop("_id", None)
        return self._mongo_to_domain(TokenMongo.model_validate(raw))

    async def find_open_expired(self, now: datetime, limit: int = 500) -> List[Token]:
        tokens_mongo = await TokenMongo.find(
            {
                "status": {"$in": sorted(s.value for s in OPEN_TOKEN_STATUSES)},
                "expires_at": {"$lte": now},
            }
        ).sort([("expires_at", 1)]).limit(limit).to_list()
        return [self._mongo_to_domain(t) for t in tokens_mongo]

    def _domain_to_mongo(self, token: Token) -> TokenMongo:
        appointment = None
        if token.appointment is not None:
            a = token.appointment
            appointment = AppointmentMongo(
                appointment_id=a.id,
                patient_id=a.patient_id,
                visit_date=a.visit_date.isoformat(),
                status=a.status.value,
                diagnosis=a.diagnosis,
                prescription=a.prescription,
                notes=a.notes,
                created_at=a.created_at,
                updated_at=a.updated_at,
            )
        return TokenMongo(
            token_id=token.id,
            public_id=token.public_id,
            tenant_id=token.tenant_id,
            specialist_id=token.specialist_id,
            day=token.day.isoformat(),
            token_number=token.token_number,
            status=token.status.value,
            patient_id=token.patient_id,
            created_lat=token.created_lat,
            created_lng=token.created_lng,
            expires_at=token.expires_at,
            source=token.source,
            created_at=token.created_at,
            updated_at=token.updated_at,
            appointment=appointment,
        )

    def _mongo_to_domain(self, token_mongo: TokenMongo) -> Token:
        appointment = None
        if token_mongo.appointment is not None:
            a = token_mongo.appointment
            appointment = Appointment(
                id=a.appointment_id,
                tenant_id=token_mongo.tenant_id,
                specialist_id=token_mongo.specialist_id,
                token_id=token_mongo.token_id,
                visit_date=date.fromisoformat(a.visit_date),
                patient_id=a.patient_id,
                status=AppointmentStatus(a.status),
                diagnosis=a.diagnosis,
                prescription=a.prescription,
                notes=a.notes,
                created_at=ensure_utc(a.created_at),
                updated_at=ensure_utc(a.updated_at),
            )
        return Token(
            id=token_mongo.token_id,
            public_id=token_mongo.public_id,
            tenant_id=token_mongo.tenant_id,
            specialist_id=token_mongo.specialist_id,
            day=date.fromisoformat(token_mongo.day),
            token_number=token_mongo.token_number,
            status=TokenStatus(token_mongo.status),
            patient_id=token_mongo.patient_id,
            created_lat=token_mongo.created_lat,
            created_lng=token_mongo.created_lng,
            expires_at=ensure_utc(token_mongo.expires_at),
            source=token_mongo.source,
            created_at=ensure_utc(token_mongo.created_at),
            updated_at=ensure_utc(token_mongo.updated_at),
            appointment=appointment,
        )
