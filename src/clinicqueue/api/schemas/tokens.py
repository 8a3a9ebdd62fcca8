"""
Pydantic schemas for the public intake and staff queue endpoints.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ...domain.enums.token_status import DoctorStatusType, TokenStatus


class SpecialistRef(BaseModel):
    id: Optional[str] = Field(None, description="Specialist ID")
    name: str = Field(..., description="Specialist display name")


class PatientRef(BaseModel):
    id: str
    name: str
    phone: str


class PatientDetails(PatientRef):
    dob: str = Field(..., description="Date of birth (YYYY-MM-DD)")
    address: Optional[str] = None
    email: Optional[str] = None
    gender: Optional[str] = None


# ----------------------------------------------------------------------------
# Public
# ----------------------------------------------------------------------------


class DoctorBoardResponse(BaseModel):
    id: Optional[str] = Field(None, description="Specialist ID, null for the virtual General Practitioner")
    name: str
    specialty: str
    status: DoctorStatusType
    waiting_count: int


class ClinicStatusResponse(BaseModel):
    """Public clinic board."""

    clinic_name: str
    qr_active: bool
    doctors: List[DoctorBoardResponse]
    max_tokens_per_day: int
    tokens_issued_today: int


class CreateTokenResponse(BaseModel):
    """Response schema for a newly issued token."""

    token_id: str = Field(..., description="Internal token ID")
    token_public_id: str = Field(..., description="Patient-facing token ID")
    token_number: int = Field(..., description="Number within today's queue")
    status: TokenStatus
    position_in_queue: Optional[int] = Field(None, description="1-based position among waiting tokens")
    specialist: SpecialistRef
    expires_at: Optional[datetime] = None


class PublicTokenResponse(BaseModel):
    token_number: int
    status: TokenStatus
    position_in_queue: Optional[int] = None
    specialist: SpecialistRef
    updated_at: datetime


# ----------------------------------------------------------------------------
# Staff
# ----------------------------------------------------------------------------


class QueueTokenResponse(BaseModel):
    id: str
    public_id: str
    token_number: int
    status: TokenStatus
    patient: Optional[PatientRef] = None
    specialist: Optional[SpecialistRef] = None
    created_at: datetime


class CallNextRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    specialist_id: Optional[str] = Field(None, alias="specialistId", description="Restrict to one specialist")


class CalledTokenResponse(BaseModel):
    id: str
    token_number: int
    status: TokenStatus
    specialist: Optional[SpecialistRef] = None
    patient: Optional[PatientDetails] = None


class UpdateTokenStatusRequest(BaseModel):
    status: TokenStatus = Field(..., description="Target status")


class TokenStatusResponse(BaseModel):
    id: str
    token_number: int
    status: TokenStatus
    updated_at: datetime


class QueueStatsResponse(BaseModel):
    total: int
    waiting: int
    completed: int
    expired: int


class DoctorStatusRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    specialist_id: Optional[str] = Field(
        None, alias="specialistId", description="Specialist ID, omit for the general record"
    )
    status: DoctorStatusType


class DoctorStatusResponse(BaseModel):
    specialist_id: Optional[str] = None
    date: str
    status: DoctorStatusType
    set_by: str
    updated_at: datetime
