"""
Queue engine: token issuance and queue advancement.

Public intake runs the checks in a fixed order: tenant, specialist, QR
switch, doctor availability, geofence, daily cap. Only then is the patient
resolved and a number allocated. Staff operations read and write the same
{tenant, specialist, day} partitions through conditional status updates.
"""

import asyncio
import uuid
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Union

from ...core.config import QueueSettings
from ...core.structured_logger import get_logger
from ...core.utils.datetime_utils import Clock, clinic_today, end_of_clinic_day, get_current_timestamp
from ...domain.entities.doctor_status import DoctorStatus
from ...domain.entities.patient import Patient
from ...domain.entities.specialist import DEFAULT_SPECIALIST_NAME, DEFAULT_SPECIALTY, Specialist
from ...domain.entities.tenant import Tenant
from ...domain.entities.token import Appointment, Token
from ...domain.enums.token_status import (
    STAFF_FORBIDDEN_TRANSITIONS,
    AppointmentStatus,
    DoctorStatusType,
    TokenStatus,
    appointment_status_for,
    can_transition,
)
from ...domain.errors import (
    DailyLimitReachedError,
    DoctorOutError,
    IllegalStatusTransitionError,
    IntakeForbiddenError,
    OutsideGeofenceError,
    QrInactiveError,
    SpecialistNotFoundError,
    TenantNotFoundError,
    TokenNotFoundError,
    TokenStatusChangedError,
)
from ...domain.services import geofence
from ...domain.value_objects.geo_point import GeoPoint
from ...domain.value_objects.public_id import PublicId
from ...domain.value_objects.queue_partition import QueuePartition
from ..dto.queue_dto import ClinicStatus, QueueStats
from ..dto.token_dto import CreateTokenRequest, parse_create_token_request
from ..ports.repositories.doctor_status_repo import DoctorStatusRepository
from ..ports.repositories.patient_repo import PatientRepository
from ..ports.repositories.specialist_repo import SpecialistRepository
from ..ports.repositories.tenant_repo import TenantRepository
from ..ports.repositories.token_repo import TokenRepository
from .availability_gate import AvailabilityGate
from .sequence_allocator import SequenceAllocator

logger = get_logger(__name__)


def _queue_order(token: Token):
    return (token.token_number, token.created_at, token.specialist_id)


class QueueEngine:
    """Orchestrates intake checks, numbering and staff queue operations."""

    def __init__(
        self,
        tenant_repository: TenantRepository,
        specialist_repository: SpecialistRepository,
        patient_repository: PatientRepository,
        token_repository: TokenRepository,
        doctor_status_repository: DoctorStatusRepository,
        settings: Optional[QueueSettings] = None,
        clock: Clock = get_current_timestamp,
    ):
        self._tenant_repository = tenant_repository
        self._specialist_repository = specialist_repository
        self._patient_repository = patient_repository
        self._token_repository = token_repository
        self._settings = settings or QueueSettings()
        self._clock = clock
        self.gate = AvailabilityGate(doctor_status_repository)
        self.allocator = SequenceAllocator(
            token_repository, max_attempts=self._settings.allocation_retries
        )

    @property
    def settings(self) -> QueueSettings:
        return self._settings

    def today(self) -> date:
        """Current clinic day in the configured timezone."""
        return clinic_today(self._clock(), self._settings.tzinfo)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def get_tenant(self, tenant_id: str) -> Tenant:
        tenant = await self._tenant_repository.find_by_id(tenant_id)
        if tenant is None:
            raise TenantNotFoundError(tenant_id)
        return tenant

    async def get_tenant_by_slug(self, slug: str) -> Tenant:
        tenant = await self._tenant_repository.find_by_slug(slug)
        if tenant is None:
            raise TenantNotFoundError(slug)
        return tenant

    async def ensure_default_specialist(self, tenant_id: str) -> Specialist:
        """Return the tenant's General Practitioner, creating it if needed. Idempotent."""
        specialist = await self._specialist_repository.get_or_create(
            tenant_id, DEFAULT_SPECIALIST_NAME, DEFAULT_SPECIALTY
        )
        logger.debug("Default specialist ensured", tenant_id=tenant_id, specialist_id=specialist.id)
        return specialist

    async def resolve_specialist(
        self, tenant_id: str, specialist_id: Optional[str] = None
    ) -> Specialist:
        """Explicit id must be an active specialist of the tenant.

        Without an id the first active specialist by name is used, and a
        tenant with none gets the default General Practitioner.
        """
        if specialist_id:
            specialist = await self._specialist_repository.find_by_id(specialist_id, tenant_id)
            if specialist is None or not specialist.is_active:
                raise SpecialistNotFoundError(specialist_id)
            return specialist

        specialists = await self._specialist_repository.list_active(tenant_id)
        if specialists:
            return specialists[0]
        return await self.ensure_default_specialist(tenant_id)

    # ------------------------------------------------------------------
    # Public intake
    # ------------------------------------------------------------------

    async def create_token(
        self,
        tenant_id: str,
        request: Union[CreateTokenRequest, Mapping[str, Any]],
    ) -> Token:
        """Issue a token for a walk-in patient.

        Raises ``TokenRequestValidationError`` for a malformed form, a
        ``NotFoundError`` for unknown tenant or specialist, an
        ``IntakeForbiddenError`` when the clinic is not accepting the request
        and ``SequenceConflictError`` if numbering kept colliding.
        """
        today = self.today()
        if not isinstance(request, CreateTokenRequest):
            request = parse_create_token_request(request, today=today)

        tenant = await self.get_tenant(tenant_id)
        specialist = await self.resolve_specialist(tenant.id, request.specialist_id)
        daily_cap = specialist.daily_cap(self._settings.default_max_tokens_per_day)

        try:
            await self._check_intake(tenant, specialist, request, today, daily_cap)
        except IntakeForbiddenError as exc:
            logger.info(
                "Token request rejected",
                tenant_id=tenant.id,
                specialist_id=specialist.id,
                reason=exc.error_code,
            )
            raise

        patient = await self._resolve_patient(tenant.id, request)
        partition = QueuePartition(tenant.id, specialist.id, today)
        expires_at = end_of_clinic_day(today, self._settings.tzinfo)

        def build_token(token_number: int) -> Token:
            now = self._clock()
            token_id = str(uuid.uuid4())
            return Token(
                id=token_id,
                public_id=PublicId.generate(self._settings.public_id_length).value,
                tenant_id=tenant.id,
                specialist_id=specialist.id,
                day=today,
                token_number=token_number,
                status=TokenStatus.WAITING,
                patient_id=patient.id,
                created_lat=request.location.lat,
                created_lng=request.location.lng,
                expires_at=expires_at,
                source=self._settings.token_source,
                created_at=now,
                updated_at=now,
                appointment=Appointment(
                    id=str(uuid.uuid4()),
                    tenant_id=tenant.id,
                    specialist_id=specialist.id,
                    token_id=token_id,
                    visit_date=today,
                    patient_id=patient.id,
                    status=AppointmentStatus.WAITING,
                    created_at=now,
                    updated_at=now,
                ),
            )

        try:
            token = await self.allocator.allocate_and_persist(partition, build_token, daily_cap)
        except IntakeForbiddenError as exc:
            logger.info(
                "Token request rejected",
                tenant_id=tenant.id,
                specialist_id=specialist.id,
                reason=exc.error_code,
            )
            raise

        token.specialist = specialist
        token.patient = patient
        logger.info(
            "Token issued",
            tenant_id=tenant.id,
            specialist_id=specialist.id,
            token_id=token.id,
            token_number=token.token_number,
            date=today.isoformat(),
        )
        return token

    async def _check_intake(
        self,
        tenant: Tenant,
        specialist: Specialist,
        request: CreateTokenRequest,
        today: date,
        daily_cap: int,
    ) -> None:
        if not tenant.qr_active:
            raise QrInactiveError(tenant.id)

        if not await self.gate.is_accepting(tenant.id, specialist.id, today):
            raise DoctorOutError(specialist.id)

        result = geofence.validate(
            tenant.geofence_center,
            tenant.location_radius_m,
            GeoPoint(request.location.lat, request.location.lng),
            default_radius_m=self._settings.default_geofence_radius_m,
        )
        if result.skipped:
            logger.warning(
                "Clinic location not configured, skipping geofence", tenant_id=tenant.id
            )
        elif not result.accepted:
            raise OutsideGeofenceError(result.distance_m, result.radius_m)

        issued = await self._token_repository.count(tenant.id, today, specialist.id)
        if issued >= daily_cap:
            raise DailyLimitReachedError(specialist.id, daily_cap)

    async def _resolve_patient(self, tenant_id: str, request: CreateTokenRequest) -> Patient:
        """Find the patient by phone within the tenant, or register them."""
        intake = request.patient
        patient = await self._patient_repository.find_by_phone(tenant_id, intake.phone)
        if patient is not None:
            return patient

        now = self._clock()
        patient = Patient(
            id=str(uuid.uuid4()),
            tenant_id=tenant_id,
            name=intake.name,
            dob=intake.dob,
            phone=intake.phone,
            address=intake.address,
            email=intake.email,
            gender=intake.gender,
            created_at=now,
            updated_at=now,
        )
        patient = await self._patient_repository.create(patient)
        logger.info("Patient registered from intake", tenant_id=tenant_id, patient_id=patient.id)
        return patient

    async def get_token_by_public_id(self, tenant_id: str, public_id: str) -> Token:
        token = await self._token_repository.find_by_public_id(tenant_id, public_id)
        if token is None:
            raise TokenNotFoundError(public_id)
        await self._populate(tenant_id, [token])
        return token

    async def position_in_queue(self, token: Token) -> Optional[int]:
        """1-based position among the WAITING tokens of the token's partition."""
        if token.status != TokenStatus.WAITING:
            return None
        queue = await self._waiting(token.tenant_id, token.day, token.specialist_id)
        for index, queued in enumerate(queue, start=1):
            if queued.id == token.id:
                return index
        return None

    async def get_clinic_status(self, tenant_id: str) -> ClinicStatus:
        """Public clinic board for today."""
        tenant = await self.get_tenant(tenant_id)
        today = self.today()
        specialists = await self._specialist_repository.list_active(tenant.id)
        board = await self.gate.clinic_board(tenant.id, specialists, today)

        for entry in board:
            if entry.specialist_id is not None:
                entry.waiting_count = await self._token_repository.count(
                    tenant.id, today, entry.specialist_id, TokenStatus.WAITING
                )

        default_cap = self._settings.default_max_tokens_per_day
        max_tokens = sum(s.daily_cap(default_cap) for s in specialists) if specialists else default_cap
        issued = await self._token_repository.count(tenant.id, today)

        return ClinicStatus(
            clinic_name=tenant.name,
            qr_active=tenant.qr_active,
            max_tokens_per_day=max_tokens,
            tokens_issued_today=issued,
            doctors=board,
        )

    # ------------------------------------------------------------------
    # Staff operations
    # ------------------------------------------------------------------

    async def _waiting(
        self, tenant_id: str, day: date, specialist_id: Optional[str] = None
    ) -> List[Token]:
        tokens = await self._token_repository.list_by_status(
            tenant_id, day, TokenStatus.WAITING, specialist_id
        )
        return sorted(tokens, key=_queue_order)

    async def get_queue(
        self,
        tenant_id: str,
        specialist_id: Optional[str] = None,
        day: Optional[date] = None,
    ) -> List[Token]:
        """WAITING tokens in call order, with specialist and patient populated."""
        queue = await self._waiting(tenant_id, day or self.today(), specialist_id)
        await self._populate(tenant_id, queue)
        return queue

    async def call_next_token(
        self, tenant_id: str, specialist_id: Optional[str] = None
    ) -> Optional[Token]:
        """Move the head of today's queue to CALLED. Returns ``None`` when the queue is empty."""
        today = self.today()
        while True:
            queue = await self._waiting(tenant_id, today, specialist_id)
            if not queue:
                logger.debug("Call-next on empty queue", tenant_id=tenant_id, specialist_id=specialist_id)
                return None

            for candidate in queue:
                called = await self._token_repository.compare_and_set_status(
                    tenant_id,
                    candidate.id,
                    TokenStatus.WAITING,
                    TokenStatus.CALLED,
                    appointment_status_for(TokenStatus.CALLED),
                )
                if called is not None:
                    await self._populate(tenant_id, [called])
                    logger.info(
                        "Token called",
                        tenant_id=tenant_id,
                        specialist_id=called.specialist_id,
                        token_id=called.id,
                        token_number=called.token_number,
                    )
                    return called
                logger.debug("Queue head taken concurrently", tenant_id=tenant_id, token_id=candidate.id)

    async def update_token_status(
        self, tenant_id: str, token_id: str, new_status: Union[TokenStatus, str]
    ) -> Token:
        """Staff status change, validated against the transition table."""
        token = await self._token_repository.find_by_id(tenant_id, token_id)
        if token is None:
            raise TokenNotFoundError(token_id)

        current = token.status
        try:
            new_status = TokenStatus(new_status)
        except ValueError:
            raise IllegalStatusTransitionError(token_id, current.value, str(new_status)) from None
        if (current, new_status) in STAFF_FORBIDDEN_TRANSITIONS or not can_transition(current, new_status):
            raise IllegalStatusTransitionError(token_id, current.value, new_status.value)

        updated = await self._token_repository.compare_and_set_status(
            tenant_id, token_id, current, new_status, appointment_status_for(new_status)
        )
        if updated is None:
            raise TokenStatusChangedError(token_id, current.value)

        logger.info(
            "Token status changed",
            tenant_id=tenant_id,
            token_id=token_id,
            from_status=current.value,
            to_status=new_status.value,
        )
        return updated

    async def get_today_stats(
        self, tenant_id: str, specialist_id: Optional[str] = None
    ) -> QueueStats:
        today = self.today()
        count = self._token_repository.count
        total, waiting, completed, expired = await asyncio.gather(
            count(tenant_id, today, specialist_id),
            count(tenant_id, today, specialist_id, TokenStatus.WAITING),
            count(tenant_id, today, specialist_id, TokenStatus.COMPLETED),
            count(tenant_id, today, specialist_id, TokenStatus.EXPIRED),
        )
        return QueueStats(total=total, waiting=waiting, completed=completed, expired=expired)

    async def set_doctor_status(
        self,
        tenant_id: str,
        specialist_id: Optional[str],
        status: Union[DoctorStatusType, str],
        set_by: str,
    ) -> DoctorStatus:
        """Set today's IN/OUT for a specialist, or the general record when ``specialist_id`` is None."""
        if specialist_id is not None:
            specialist = await self._specialist_repository.find_by_id(specialist_id, tenant_id)
            if specialist is None or not specialist.is_active:
                raise SpecialistNotFoundError(specialist_id)
        return await self.gate.set_status(
            tenant_id, specialist_id, self.today(), DoctorStatusType(status), set_by
        )

    async def _populate(self, tenant_id: str, tokens: List[Token]) -> None:
        if not tokens:
            return
        specialists: Dict[str, Optional[Specialist]] = {}
        for specialist_id in {t.specialist_id for t in tokens}:
            specialists[specialist_id] = await self._specialist_repository.find_by_id(
                specialist_id, tenant_id
            )
        patient_ids = sorted({t.patient_id for t in tokens if t.patient_id})
        patients = {
            p.id: p for p in await self._patient_repository.find_by_ids(tenant_id, patient_ids)
        }
        for token in tokens:
            token.specialist = specialists.get(token.specialist_id)
            token.patient = patients.get(token.patient_id) if token.patient_id else None
