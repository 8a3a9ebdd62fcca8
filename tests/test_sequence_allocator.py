"""
Token number allocation tests: gapless numbering under concurrency and
conflict retries.
"""

import asyncio
import uuid
from datetime import date

import pytest

from clinicqueue.adapters.db.memory import InMemoryStore, InMemoryTokenRepository
from clinicqueue.application.services.sequence_allocator import SequenceAllocator
from clinicqueue.domain.entities import Token
from clinicqueue.domain.errors import (
    DailyLimitReachedError,
    SequenceConflictError,
    TokenWriteConflictError,
)
from clinicqueue.domain.value_objects import PublicId, QueuePartition

from conftest import DERM_ID, GP_ID, TENANT_ID

DAY = date(2026, 3, 10)


def _builder(partition: QueuePartition, calls=None):
    def build(number: int) -> Token:
        if calls is not None:
            calls.append(number)
        return Token(
            id=str(uuid.uuid4()),
            public_id=PublicId.generate().value,
            tenant_id=partition.tenant_id,
            specialist_id=partition.specialist_id,
            day=partition.day,
            token_number=number,
        )
    return build


class ConflictingTokenRepository(InMemoryTokenRepository):
    """Fails the first ``conflicts`` inserts as if another process took the number."""

    def __init__(self, store, conflicts: int):
        super().__init__(store)
        self.conflicts = conflicts
        self.inserts = 0

    async def insert(self, token):
        self.inserts += 1
        if self.inserts <= self.conflicts:
            raise TokenWriteConflictError("token_number")
        return await super().insert(token)


@pytest.fixture
def partition():
    return QueuePartition(TENANT_ID, GP_ID, DAY)


@pytest.mark.asyncio
async def test_first_number_is_one(token_repository, partition):
    allocator = SequenceAllocator(token_repository)
    assert await allocator.next_number(partition) == 1

    token = await allocator.allocate_and_persist(partition, _builder(partition))
    assert token.token_number == 1
    assert await allocator.next_number(partition) == 2


@pytest.mark.asyncio
async def test_concurrent_allocations_are_gapless(token_repository, partition):
    allocator = SequenceAllocator(token_repository)
    build = _builder(partition)

    tokens = await asyncio.gather(
        *[allocator.allocate_and_persist(partition, build) for _ in range(60)]
    )

    assert sorted(t.token_number for t in tokens) == list(range(1, 61))
    assert len({t.public_id for t in tokens}) == 60


@pytest.mark.asyncio
async def test_partitions_number_independently(token_repository, partition):
    allocator = SequenceAllocator(token_repository)
    other_specialist = QueuePartition(TENANT_ID, DERM_ID, DAY)
    next_day = QueuePartition(TENANT_ID, GP_ID, date(2026, 3, 11))

    first = await allocator.allocate_and_persist(partition, _builder(partition))
    second = await allocator.allocate_and_persist(partition, _builder(partition))
    derm = await allocator.allocate_and_persist(other_specialist, _builder(other_specialist))
    tomorrow = await allocator.allocate_and_persist(next_day, _builder(next_day))

    assert (first.token_number, second.token_number) == (1, 2)
    assert derm.token_number == 1
    assert tomorrow.token_number == 1


@pytest.mark.asyncio
async def test_daily_cap_checked_inside_allocation(token_repository, partition):
    allocator = SequenceAllocator(token_repository)
    build = _builder(partition)

    results = await asyncio.gather(
        *[allocator.allocate_and_persist(partition, build, daily_cap=5) for _ in range(8)],
        return_exceptions=True,
    )

    issued = [r for r in results if isinstance(r, Token)]
    rejected = [r for r in results if isinstance(r, DailyLimitReachedError)]
    assert sorted(t.token_number for t in issued) == [1, 2, 3, 4, 5]
    assert len(rejected) == 3


@pytest.mark.asyncio
async def test_conflict_is_retried_with_fresh_token(partition):
    repo = ConflictingTokenRepository(InMemoryStore(), conflicts=2)
    allocator = SequenceAllocator(repo, max_attempts=3)
    calls = []

    token = await allocator.allocate_and_persist(partition, _builder(partition, calls))

    assert token.token_number == 1
    assert repo.inserts == 3
    assert calls == [1, 1, 1]


@pytest.mark.asyncio
async def test_conflicts_exhaust_retries(partition):
    repo = ConflictingTokenRepository(InMemoryStore(), conflicts=10)
    allocator = SequenceAllocator(repo, max_attempts=3)

    with pytest.raises(SequenceConflictError) as exc_info:
        await allocator.allocate_and_persist(partition, _builder(partition))

    assert repo.inserts == 3
    assert exc_info.value.error_code == "SEQUENCE_CONFLICT"
    assert exc_info.value.details["attempts"] == 3
    assert exc_info.value.details["retryable"] is True


@pytest.mark.asyncio
async def test_idle_partition_locks_are_released(token_repository, partition):
    allocator = SequenceAllocator(token_repository)
    build = _builder(partition)

    await asyncio.gather(*[allocator.allocate_and_persist(partition, build) for _ in range(10)])

    assert allocator._locks == {}


@pytest.mark.asyncio
async def test_store_rejects_duplicate_number(token_repository, partition):
    build = _builder(partition)
    await token_repository.insert(build(1))

    with pytest.raises(TokenWriteConflictError) as exc_info:
        await token_repository.insert(build(1))
    assert exc_info.value.key == "token_number"


def test_allocator_needs_at_least_one_attempt(token_repository):
    with pytest.raises(ValueError):
        SequenceAllocator(token_repository, max_attempts=0)
