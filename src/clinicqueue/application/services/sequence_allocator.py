"""
Per-partition token number allocation.

Numbers are ``max + 1`` within a {tenant, specialist, day} partition. Reading
the max and inserting the token happen under one ``asyncio.Lock`` per
partition, so callers in this process never race. Writers in other processes
are caught by the store's unique (tenant, specialist, day, token_number)
index and retried with a fresh number.
"""

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, Callable, Dict, Optional

from ...core.structured_logger import get_logger
from ...domain.entities.token import Token
from ...domain.errors import (
    DailyLimitReachedError,
    SequenceConflictError,
    TokenWriteConflictError,
)
from ...domain.value_objects.queue_partition import QueuePartition
from ..ports.repositories.token_repo import TokenRepository

logger = get_logger(__name__)

TokenFactory = Callable[[int], Token]


@dataclass
class _PartitionLock:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    holders: int = 0


class SequenceAllocator:
    """Allocates gapless token numbers and persists the token in the same unit of work."""

    def __init__(self, token_repository: TokenRepository, max_attempts: int = 3):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._token_repository = token_repository
        self._max_attempts = max_attempts
        self._locks: Dict[str, _PartitionLock] = {}

    @asynccontextmanager
    async def _partition_lock(self, partition: QueuePartition) -> AsyncIterator[None]:
        # Entries are dropped once idle so the registry only holds busy partitions.
        key = partition.key
        entry = self._locks.get(key)
        if entry is None:
            entry = self._locks[key] = _PartitionLock()
        entry.holders += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.holders -= 1
            if entry.holders == 0 and self._locks.get(key) is entry:
                del self._locks[key]

    async def next_number(self, partition: QueuePartition) -> int:
        """Number the next token of the partition would get (1 for an empty partition)."""
        return await self._token_repository.max_token_number(partition) + 1

    async def allocate_and_persist(
        self,
        partition: QueuePartition,
        build_token: TokenFactory,
        daily_cap: Optional[int] = None,
    ) -> Token:
        """Allocate the next number, build the token with it and insert it.

        ``build_token`` is called once per attempt so that every retry also
        gets a fresh public id. ``daily_cap`` is enforced against the number
        being allocated, which equals the partition's token count plus one.
        """
        for attempt in range(1, self._max_attempts + 1):
            async with self._partition_lock(partition):
                number = await self.next_number(partition)
                if daily_cap is not None and number > daily_cap:
                    raise DailyLimitReachedError(partition.specialist_id, daily_cap)
                token = build_token(number)
                try:
                    return await self._token_repository.insert(token)
                except TokenWriteConflictError as exc:
                    logger.warning(
                        "Token insert conflict, retrying allocation",
                        partition=partition.key,
                        token_number=number,
                        conflict_key=exc.key,
                        attempt=attempt,
                    )

        logger.error(
            "Token number allocation exhausted retries",
            partition=partition.key,
            attempts=self._max_attempts,
        )
        raise SequenceConflictError(
            partition.tenant_id,
            partition.specialist_id,
            partition.day.isoformat(),
            self._max_attempts,
        )
