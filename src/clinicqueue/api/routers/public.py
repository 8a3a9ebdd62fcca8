"""
Public endpoints reached from the clinic QR code: clinic board, token
issuance and token lookup. No authentication.
"""

from typing import Any, Dict

from fastapi import APIRouter, Body, Request, status

from ...domain.entities.token import Token
from ..deps import QueueEngineDep
from ..schemas.common import ApiResponse
from ..schemas.tokens import (
    ClinicStatusResponse,
    CreateTokenResponse,
    DoctorBoardResponse,
    PublicTokenResponse,
    SpecialistRef,
)
from ..utils.responses import ok

router = APIRouter(prefix="/public", tags=["public"])


def _specialist_ref(token: Token) -> SpecialistRef:
    name = token.specialist.name if token.specialist else "Unknown"
    return SpecialistRef(id=token.specialist_id, name=name)


@router.get("/{slug}/status", response_model=ApiResponse[ClinicStatusResponse])
async def get_clinic_status(request: Request, slug: str, engine: QueueEngineDep):
    """Clinic board: intake switch, doctors with availability and waiting counts."""
    tenant = await engine.get_tenant_by_slug(slug)
    clinic = await engine.get_clinic_status(tenant.id)
    return ok(request, data=ClinicStatusResponse(
        clinic_name=clinic.clinic_name,
        qr_active=clinic.qr_active,
        doctors=[
            DoctorBoardResponse(
                id=d.specialist_id,
                name=d.name,
                specialty=d.specialty,
                status=d.status,
                waiting_count=d.waiting_count,
            )
            for d in clinic.doctors
        ],
        max_tokens_per_day=clinic.max_tokens_per_day,
        tokens_issued_today=clinic.tokens_issued_today,
    ))


@router.post(
    "/{slug}/tokens",
    response_model=ApiResponse[CreateTokenResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_token(
    request: Request,
    slug: str,
    engine: QueueEngineDep,
    payload: Dict[str, Any] = Body(..., description="Token form: specialistId, patient, location"),
):
    """
    Issue a queue token.

    The form is validated field by field; failures come back as 422 with
    ``details.errors`` listing ``{field, message}`` pairs.
    """
    tenant = await engine.get_tenant_by_slug(slug)
    token = await engine.create_token(tenant.id, payload)
    position = await engine.position_in_queue(token)
    return ok(request, data=CreateTokenResponse(
        token_id=token.id,
        token_public_id=token.public_id,
        token_number=token.token_number,
        status=token.status,
        position_in_queue=position,
        specialist=_specialist_ref(token),
        expires_at=token.expires_at,
    ), message="Token issued")


@router.get("/{slug}/tokens/{public_id}", response_model=ApiResponse[PublicTokenResponse])
async def get_public_token(request: Request, slug: str, public_id: str, engine: QueueEngineDep):
    tenant = await engine.get_tenant_by_slug(slug)
    token = await engine.get_token_by_public_id(tenant.id, public_id)
    position = await engine.position_in_queue(token)
    return ok(request, data=PublicTokenResponse(
        token_number=token.token_number,
        status=token.status,
        position_in_queue=position,
        specialist=_specialist_ref(token),
        updated_at=token.updated_at,
    ))
