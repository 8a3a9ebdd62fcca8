"""
Token, appointment and doctor availability status enums.
"""

from enum import Enum
from typing import Dict, FrozenSet, Optional


class TokenStatus(str, Enum):
    """Lifecycle of a queue token."""
    WAITING = "WAITING"
    CALLED = "CALLED"
    IN_CONSULTATION = "IN_CONSULTATION"
    COMPLETED = "COMPLETED"
    EXPIRED = "EXPIRED"
    NO_SHOW = "NO_SHOW"


class AppointmentStatus(str, Enum):
    """Coarser clinical status mirrored on the appointment shadow of a token."""
    WAITING = "WAITING"
    IN_CONSULTATION = "IN_CONSULTATION"
    COMPLETED = "COMPLETED"
    NO_SHOW = "NO_SHOW"
    CANCELLED = "CANCELLED"


class DoctorStatusType(str, Enum):
    """Daily availability of a specialist (or the whole clinic)."""
    IN = "IN"
    OUT = "OUT"


TOKEN_TRANSITIONS: Dict[TokenStatus, FrozenSet[TokenStatus]] = {
    TokenStatus.WAITING: frozenset({TokenStatus.CALLED, TokenStatus.EXPIRED}),
    TokenStatus.CALLED: frozenset(
        {TokenStatus.IN_CONSULTATION, TokenStatus.NO_SHOW, TokenStatus.EXPIRED}
    ),
    TokenStatus.IN_CONSULTATION: frozenset(
        {TokenStatus.COMPLETED, TokenStatus.NO_SHOW, TokenStatus.EXPIRED}
    ),
    TokenStatus.COMPLETED: frozenset(),
    TokenStatus.NO_SHOW: frozenset(),
    TokenStatus.EXPIRED: frozenset(),
}

# Staff cannot pop tokens out of order; WAITING -> CALLED only happens via call-next.
STAFF_FORBIDDEN_TRANSITIONS: FrozenSet = frozenset({(TokenStatus.WAITING, TokenStatus.CALLED)})

OPEN_TOKEN_STATUSES: FrozenSet[TokenStatus] = frozenset(
    {TokenStatus.WAITING, TokenStatus.CALLED, TokenStatus.IN_CONSULTATION}
)

# Token statuses that are mirrored onto the appointment shadow.
APPOINTMENT_CASCADE: Dict[TokenStatus, AppointmentStatus] = {
    TokenStatus.CALLED: AppointmentStatus.IN_CONSULTATION,
    TokenStatus.COMPLETED: AppointmentStatus.COMPLETED,
    TokenStatus.NO_SHOW: AppointmentStatus.NO_SHOW,
}


def can_transition(current: TokenStatus, target: TokenStatus) -> bool:
    """Whether the transition table allows ``current -> target``."""
    return target in TOKEN_TRANSITIONS[current]


def is_terminal(status: TokenStatus) -> bool:
    return not TOKEN_TRANSITIONS[status]


def appointment_status_for(status: TokenStatus) -> Optional[AppointmentStatus]:
    return APPOINTMENT_CASCADE.get(status)
