"""
Token repository interface.

A token and its appointment shadow are one aggregate: every write below
persists both or neither.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import List, Optional

from ....domain.entities.token import Token
from ....domain.enums.token_status import AppointmentStatus, TokenStatus
from ....domain.value_objects.queue_partition import QueuePartition


class TokenRepository(ABC):
    """Abstract repository for queue tokens."""

    @abstractmethod
    async def max_token_number(self, partition: QueuePartition) -> int:
        """Highest token number in the partition, or 0 when it is empty."""
        pass

    @abstractmethod
    async def insert(self, token: Token) -> Token:
        """Insert a token together with its appointment.

        Raises ``TokenWriteConflictError`` when the partition already holds
        ``token.token_number`` or the public id is taken.
        """
        pass

    @abstractmethod
    async def find_by_id(self, tenant_id: str, token_id: str) -> Optional[Token]:
        pass

    @abstractmethod
    async def find_by_public_id(self, tenant_id: str, public_id: str) -> Optional[Token]:
        pass

    @abstractmethod
    async def list_by_status(
        self,
        tenant_id: str,
        day: date,
        status: TokenStatus,
        specialist_id: Optional[str] = None,
    ) -> List[Token]:
        """Tokens of the day in ``status`` ordered by token number, then creation time."""
        pass

    @abstractmethod
    async def count(
        self,
        tenant_id: str,
        day: date,
        specialist_id: Optional[str] = None,
        status: Optional[TokenStatus] = None,
    ) -> int:
        pass

    @abstractmethod
    async def compare_and_set_status(
        self,
        tenant_id: str,
        token_id: str,
        expected: TokenStatus,
        new_status: TokenStatus,
        appointment_status: Optional[AppointmentStatus] = None,
    ) -> Optional[Token]:
        """Move the token to ``new_status`` only if it is still ``expected``.

        The appointment status is updated in the same write when given.
        Returns the updated token, or ``None`` if the status had changed.
        """
        pass

    @abstractmethod
    async def find_open_expired(self, now: datetime, limit: int = 500) -> List[Token]:
        """Non-terminal tokens whose ``expires_at`` is at or before ``now``."""
        pass
