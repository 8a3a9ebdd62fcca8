"""Queue token and its appointment shadow."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ...core.utils.datetime_utils import get_current_timestamp
from ..enums.token_status import AppointmentStatus, TokenStatus
from ..value_objects.queue_partition import QueuePartition
from .patient import Patient
from .specialist import Specialist


@dataclass
class Appointment:
    """Clinical record created 1:1 with a token and kept in sync on terminal transitions."""

    id: str
    tenant_id: str
    specialist_id: str
    token_id: str
    visit_date: date
    patient_id: Optional[str] = None
    status: AppointmentStatus = AppointmentStatus.WAITING
    diagnosis: Optional[str] = None
    prescription: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime = field(default_factory=get_current_timestamp)
    updated_at: datetime = field(default_factory=get_current_timestamp)


@dataclass
class Token:
    """A position in a {tenant, specialist, day} queue.

    ``token_number`` is unique and gapless within the partition.
    ``expires_at`` is advisory; only the expiry sweeper or staff move a token
    to EXPIRED.
    """

    id: str
    public_id: str
    tenant_id: str
    specialist_id: str
    day: date
    token_number: int
    status: TokenStatus = TokenStatus.WAITING
    patient_id: Optional[str] = None
    created_lat: Optional[float] = None
    created_lng: Optional[float] = None
    expires_at: Optional[datetime] = None
    source: str = "QR_WEB"
    created_at: datetime = field(default_factory=get_current_timestamp)
    updated_at: datetime = field(default_factory=get_current_timestamp)
    appointment: Optional[Appointment] = None

    # Populated on read paths; not persisted with the token.
    specialist: Optional[Specialist] = field(default=None, compare=False, repr=False)
    patient: Optional[Patient] = field(default=None, compare=False, repr=False)

    @property
    def partition(self) -> QueuePartition:
        return QueuePartition(self.tenant_id, self.specialist_id, self.day)
