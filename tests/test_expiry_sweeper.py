"""
Token expiry use case and sweeper tests.
"""

import pytest

from clinicqueue.application.use_cases.expire_stale_tokens import (
    ExpireStaleTokensRequest,
    ExpireStaleTokensUseCase,
)
from clinicqueue.core.config import ExpirySweeperSettings
from clinicqueue.domain.enums.token_status import TokenStatus
from clinicqueue.workers.token_expiry_sweeper import run_expiry_sweeper_forever, sweep_once

from conftest import DERM_ID, GP_ID, TENANT_ID, token_payload


def _phone(i: int) -> str:
    return f"91234{i:05d}"


async def _issue(engine, count, specialist_id=GP_ID):
    return [
        await engine.create_token(TENANT_ID, token_payload(specialist_id, phone=_phone(i)))
        for i in range(count)
    ]


@pytest.mark.asyncio
async def test_nothing_expires_during_the_day(engine, open_clinic, token_repository, clock):
    await _issue(engine, 2)
    use_case = ExpireStaleTokensUseCase(token_repository, clock=clock)

    result = await use_case.execute()

    assert (result.examined, result.expired, result.skipped) == (0, 0, 0)


@pytest.mark.asyncio
async def test_open_tokens_expire_after_clinic_day(engine, open_clinic, token_repository, store, clock):
    first, second, done = await _issue(engine, 3)
    await engine.call_next_token(TENANT_ID, GP_ID)
    await engine.call_next_token(TENANT_ID, GP_ID)
    await engine.update_token_status(TENANT_ID, second.id, TokenStatus.IN_CONSULTATION)
    await engine.call_next_token(TENANT_ID, GP_ID)
    await engine.update_token_status(TENANT_ID, done.id, TokenStatus.IN_CONSULTATION)
    await engine.update_token_status(TENANT_ID, done.id, TokenStatus.COMPLETED)

    clock.advance(days=1)
    result = await ExpireStaleTokensUseCase(token_repository, clock=clock).execute()

    assert (result.examined, result.expired) == (2, 2)
    assert store.tokens[first.id].status == TokenStatus.EXPIRED
    assert store.tokens[second.id].status == TokenStatus.EXPIRED
    assert store.tokens[done.id].status == TokenStatus.COMPLETED


@pytest.mark.asyncio
async def test_explicit_now_and_limit(engine, open_clinic, token_repository, clock):
    tokens = await _issue(engine, 3)

    use_case = ExpireStaleTokensUseCase(token_repository)
    result = await use_case.execute(
        ExpireStaleTokensRequest(now=tokens[0].expires_at, limit=2)
    )

    assert (result.examined, result.expired) == (2, 2)


@pytest.mark.asyncio
async def test_staff_change_wins_over_sweeper(engine, open_clinic, token_repository, monkeypatch, clock):
    await _issue(engine, 1)
    clock.advance(days=1)

    async def changed_meanwhile(*args, **kwargs):
        return None

    monkeypatch.setattr(token_repository, "compare_and_set_status", changed_meanwhile)
    result = await ExpireStaleTokensUseCase(token_repository, clock=clock).execute()

    assert (result.examined, result.expired, result.skipped) == (1, 0, 1)


@pytest.mark.asyncio
async def test_sweep_once_drains_in_batches(engine, open_clinic, token_repository, store, clock):
    await _issue(engine, 3, GP_ID)
    await _issue(engine, 2, DERM_ID)
    clock.advance(days=2)

    result = await sweep_once(ExpireStaleTokensUseCase(token_repository, clock=clock), batch_size=2)

    assert result.expired == 5
    assert all(t.status == TokenStatus.EXPIRED for t in store.tokens.values())


@pytest.mark.asyncio
async def test_disabled_sweeper_returns(token_repository):
    use_case = ExpireStaleTokensUseCase(token_repository)
    await run_expiry_sweeper_forever(use_case, ExpirySweeperSettings(enabled=False))
