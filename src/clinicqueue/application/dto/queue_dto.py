"""Read models returned by the queue engine."""

from dataclasses import dataclass, field
from typing import List, Optional

from ...domain.enums.token_status import DoctorStatusType


@dataclass
class QueueStats:
    """Today's counters for a clinic or a single specialist."""

    total: int
    waiting: int
    completed: int
    expired: int


@dataclass
class DoctorBoardEntry:
    """One row of the public clinic board.

    ``specialist_id`` is ``None`` for the virtual General Practitioner shown
    when a clinic has no specialists configured.
    """

    specialist_id: Optional[str]
    name: str
    specialty: str
    status: DoctorStatusType
    waiting_count: int = 0


@dataclass
class ClinicStatus:
    """Public clinic board: intake switch, doctors and today's usage."""

    clinic_name: str
    qr_active: bool
    max_tokens_per_day: int
    tokens_issued_today: int
    doctors: List[DoctorBoardEntry] = field(default_factory=list)
