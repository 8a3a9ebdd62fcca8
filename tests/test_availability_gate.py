"""
Doctor availability resolution and board tests.
"""

from datetime import timedelta

import pytest

from clinicqueue.application.services.availability_gate import AvailabilityGate, resolve_status
from clinicqueue.domain.entities import DoctorStatus
from clinicqueue.domain.enums.token_status import DoctorStatusType

from conftest import DERM_ID, GP_ID, TENANT_ID, set_doctor_status

IN = DoctorStatusType.IN
OUT = DoctorStatusType.OUT


def _record(specialist_id, status):
    return DoctorStatus(
        id="r", tenant_id=TENANT_ID, specialist_id=specialist_id,
        day=None, status=status, set_by="staff",
    )


@pytest.mark.parametrize(
    "general, specific, expected",
    [
        (None, None, OUT),
        (IN, None, IN),
        (IN, OUT, IN),
        (OUT, IN, IN),
        (OUT, OUT, OUT),
        (OUT, None, OUT),
        (None, IN, IN),
        (None, OUT, OUT),
    ],
)
def test_resolve_status_precedence(general, specific, expected):
    general_record = _record(None, general) if general else None
    specific_record = _record(GP_ID, specific) if specific else None
    assert resolve_status(general_record, specific_record) == expected


@pytest.mark.asyncio
async def test_no_records_means_out(doctor_status_repository, today):
    gate = AvailabilityGate(doctor_status_repository)
    assert await gate.current_status(TENANT_ID, GP_ID, today) == OUT
    assert not await gate.is_accepting(TENANT_ID, GP_ID, today)


@pytest.mark.asyncio
async def test_general_in_opens_every_specialist(store, doctor_status_repository, today):
    set_doctor_status(store, TENANT_ID, None, today, IN)
    set_doctor_status(store, TENANT_ID, DERM_ID, today, OUT)
    gate = AvailabilityGate(doctor_status_repository)

    assert await gate.is_accepting(TENANT_ID, GP_ID, today)
    assert await gate.is_accepting(TENANT_ID, DERM_ID, today)


@pytest.mark.asyncio
async def test_specialist_in_overrides_general_out(store, doctor_status_repository, today):
    set_doctor_status(store, TENANT_ID, None, today, OUT)
    set_doctor_status(store, TENANT_ID, DERM_ID, today, IN)
    gate = AvailabilityGate(doctor_status_repository)

    assert await gate.is_accepting(TENANT_ID, DERM_ID, today)
    assert not await gate.is_accepting(TENANT_ID, GP_ID, today)


@pytest.mark.asyncio
async def test_status_is_per_day(store, doctor_status_repository, today):
    set_doctor_status(store, TENANT_ID, None, today, IN)
    gate = AvailabilityGate(doctor_status_repository)

    assert not await gate.is_accepting(TENANT_ID, GP_ID, today + timedelta(days=1))


@pytest.mark.asyncio
async def test_set_status_upserts_one_record(store, doctor_status_repository, today):
    gate = AvailabilityGate(doctor_status_repository)

    first = await gate.set_status(TENANT_ID, GP_ID, today, IN, "staff-a")
    second = await gate.set_status(TENANT_ID, GP_ID, today, OUT, "staff-b")

    assert first.id == second.id
    assert second.status == OUT
    assert second.set_by == "staff-b"
    records = await doctor_status_repository.list_for_day(TENANT_ID, today)
    assert len(records) == 1


@pytest.mark.asyncio
async def test_set_status_is_idempotent(doctor_status_repository, today):
    gate = AvailabilityGate(doctor_status_repository)

    await gate.set_status(TENANT_ID, None, today, IN, "staff-a")
    await gate.set_status(TENANT_ID, None, today, IN, "staff-a")

    records = await doctor_status_repository.list_for_day(TENANT_ID, today)
    assert [(r.specialist_id, r.status) for r in records] == [(None, IN)]


@pytest.mark.asyncio
async def test_board_resolves_each_specialist(store, doctor_status_repository, specialist_repository, today):
    set_doctor_status(store, TENANT_ID, DERM_ID, today, IN)
    gate = AvailabilityGate(doctor_status_repository)
    specialists = await specialist_repository.list_active(TENANT_ID)

    board = await gate.clinic_board(TENANT_ID, specialists, today)

    assert {entry.specialist_id: entry.status for entry in board} == {GP_ID: OUT, DERM_ID: IN}


@pytest.mark.asyncio
async def test_board_without_specialists_shows_virtual_practitioner(store, doctor_status_repository, today):
    set_doctor_status(store, TENANT_ID, None, today, IN)
    gate = AvailabilityGate(doctor_status_repository)

    board = await gate.clinic_board(TENANT_ID, [], today)

    assert len(board) == 1
    assert board[0].specialist_id is None
    assert board[0].name == "General Practitioner"
    assert board[0].status == IN
