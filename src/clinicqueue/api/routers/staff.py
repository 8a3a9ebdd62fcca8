"""
Staff queue endpoints.

Callers are authenticated upstream; ``StaffMiddleware`` binds the tenant
claim and staff id, and every route checks the claim against the slug.
"""

from typing import List, Optional

from fastapi import APIRouter, Body, Query, Request

from ...domain.entities.token import Token
from ..deps import QueueEngineDep, StaffIdDep, StaffTenantDep
from ..schemas.common import ApiResponse
from ..schemas.tokens import (
    CalledTokenResponse,
    CallNextRequest,
    DoctorStatusRequest,
    DoctorStatusResponse,
    PatientDetails,
    PatientRef,
    QueueStatsResponse,
    QueueTokenResponse,
    SpecialistRef,
    TokenStatusResponse,
    UpdateTokenStatusRequest,
)
from ..utils.responses import ok

router = APIRouter(prefix="/tenants", tags=["staff"])


def _specialist(token: Token) -> Optional[SpecialistRef]:
    if token.specialist is None:
        return None
    return SpecialistRef(id=token.specialist.id, name=token.specialist.name)


@router.get("/{slug}/queue", response_model=ApiResponse[List[QueueTokenResponse]])
async def get_queue(
    request: Request,
    tenant: StaffTenantDep,
    engine: QueueEngineDep,
    specialist_id: Optional[str] = Query(None, alias="specialistId"),
):
    """Today's WAITING tokens in call order."""
    queue = await engine.get_queue(tenant.id, specialist_id)
    return ok(request, data=[
        QueueTokenResponse(
            id=t.id,
            public_id=t.public_id,
            token_number=t.token_number,
            status=t.status,
            patient=PatientRef(id=t.patient.id, name=t.patient.name, phone=t.patient.phone)
            if t.patient else None,
            specialist=_specialist(t),
            created_at=t.created_at,
        )
        for t in queue
    ])


@router.post("/{slug}/queue/call-next", response_model=ApiResponse[Optional[CalledTokenResponse]])
async def call_next_token(
    request: Request,
    tenant: StaffTenantDep,
    engine: QueueEngineDep,
    body: Optional[CallNextRequest] = Body(None),
):
    """Call the head of the queue. An empty queue returns ``data: null``."""
    specialist_id = body.specialist_id if body else None
    token = await engine.call_next_token(tenant.id, specialist_id)
    if token is None:
        return ok(request, data=None, message="No tokens in queue")

    patient = None
    if token.patient is not None:
        p = token.patient
        patient = PatientDetails(
            id=p.id,
            name=p.name,
            phone=p.phone,
            dob=p.dob.isoformat(),
            address=p.address,
            email=p.email,
            gender=p.gender,
        )
    return ok(request, data=CalledTokenResponse(
        id=token.id,
        token_number=token.token_number,
        status=token.status,
        specialist=_specialist(token),
        patient=patient,
    ), message="Token called")


@router.put("/{slug}/tokens/{token_id}/status", response_model=ApiResponse[TokenStatusResponse])
async def update_token_status(
    request: Request,
    token_id: str,
    payload: UpdateTokenStatusRequest,
    tenant: StaffTenantDep,
    engine: QueueEngineDep,
):
    token = await engine.update_token_status(tenant.id, token_id, payload.status)
    return ok(request, data=TokenStatusResponse(
        id=token.id,
        token_number=token.token_number,
        status=token.status,
        updated_at=token.updated_at,
    ), message="Token status updated")


@router.get("/{slug}/stats", response_model=ApiResponse[QueueStatsResponse])
async def get_stats(
    request: Request,
    tenant: StaffTenantDep,
    engine: QueueEngineDep,
    specialist_id: Optional[str] = Query(None, alias="specialistId"),
):
    stats = await engine.get_today_stats(tenant.id, specialist_id)
    return ok(request, data=QueueStatsResponse(
        total=stats.total,
        waiting=stats.waiting,
        completed=stats.completed,
        expired=stats.expired,
    ))


@router.put("/{slug}/doctor-status", response_model=ApiResponse[DoctorStatusResponse])
async def set_doctor_status(
    request: Request,
    payload: DoctorStatusRequest,
    tenant: StaffTenantDep,
    staff_id: StaffIdDep,
    engine: QueueEngineDep,
):
    """Set today's IN/OUT for a specialist, or the clinic-wide record when no specialist is given."""
    record = await engine.set_doctor_status(tenant.id, payload.specialist_id, payload.status, staff_id)
    return ok(request, data=DoctorStatusResponse(
        specialist_id=record.specialist_id,
        date=record.day.isoformat(),
        status=record.status,
        set_by=record.set_by,
        updated_at=record.updated_at,
    ), message="Doctor status updated")
