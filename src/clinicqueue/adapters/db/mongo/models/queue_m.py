"""
MongoDB Beanie models used by the persistence layer.

Calendar dates are stored as ISO ``YYYY-MM-DD`` strings so they compare and
index exactly; instants are stored as UTC datetimes.
"""

from datetime import datetime
from typing import Optional

import pymongo
from beanie import Document
from pydantic import BaseModel, Field
from pymongo import IndexModel

from clinicqueue.core.utils.datetime_utils import get_current_timestamp
from clinicqueue.domain.entities.specialist import DEFAULT_SPECIALIST_NAME, DEFAULT_SPECIALTY


class TenantMongo(Document):
    """MongoDB model for a clinic."""

    tenant_id: str = Field(..., description="Tenant ID")
    slug: str = Field(..., description="Public URL slug")
    name: str = Field(..., description="Clinic display name")
    qr_active: bool = Field(default=True, description="Public intake switch")
    geo_lat: Optional[float] = Field(None, description="Geofence center latitude")
    geo_lng: Optional[float] = Field(None, description="Geofence center longitude")
    location_radius_m: Optional[float] = Field(None, description="Geofence radius in meters")
    address: Optional[str] = Field(None, description="Clinic address")

    class Settings:
        name = "tenants"
        indexes = [
            IndexModel([("tenant_id", pymongo.ASCENDING)], unique=True),
            IndexModel([("slug", pymongo.ASCENDING)], unique=True),
        ]


class SpecialistMongo(Document):
    """MongoDB model for a specialist."""

    specialist_id: str = Field(..., description="Specialist ID")
    tenant_id: str = Field(..., description="Owning tenant")
    name: str = Field(..., description="Display name")
    specialty: str = Field(..., description="Specialty")
    is_active: bool = Field(default=True)
    max_tokens_per_day: Optional[int] = Field(None, description="Daily token cap")
    practitioner_id: Optional[str] = Field(None, description="Linked practitioner")

    class Settings:
        name = "specialists"
        indexes = [
            IndexModel([("specialist_id", pymongo.ASCENDING)], unique=True),
            [("tenant_id", 1), ("is_active", 1), ("name", 1)],
            # one active default specialist per tenant
            IndexModel(
                [("tenant_id", pymongo.ASCENDING), ("name", pymongo.ASCENDING), ("specialty", pymongo.ASCENDING)],
                unique=True,
                name="uniq_default_specialist",
                partialFilterExpression={
                    "name": DEFAULT_SPECIALIST_NAME,
                    "specialty": DEFAULT_SPECIALTY,
                    "is_active": True,
                },
            ),
        ]


class PatientMongo(Document):
    """MongoDB model for a patient registered through intake."""

    patient_id: str = Field(..., description="Patient ID")
    tenant_id: str = Field(..., description="Owning tenant")
    name: str = Field(..., description="Patient name")
    dob: str = Field(..., description="Date of birth (YYYY-MM-DD)")
    phone: str = Field(..., description="10 digit phone number")
    address: Optional[str] = None
    email: Optional[str] = None
    gender: Optional[str] = None
    created_at: datetime = Field(default_factory=get_current_timestamp)
    updated_at: datetime = Field(default_factory=get_current_timestamp)

    class Settings:
        name = "patients"
        indexes = [
            IndexModel([("patient_id", pymongo.ASCENDING)], unique=True),
            [("tenant_id", 1), ("phone", 1)],
        ]


class AppointmentMongo(BaseModel):
    """Embedded appointment shadow of a token."""

    appointment_id: str = Field(..., description="Appointment ID")
    patient_id: Optional[str] = None
    visit_date: str = Field(..., description="Visit date (YYYY-MM-DD)")
    status: str = Field(default="WAITING")
    diagnosis: Optional[str] = None
    prescription: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=get_current_timestamp)
    updated_at: datetime = Field(default_factory=get_current_timestamp)


class TokenMongo(Document):
    """MongoDB model for a queue token with its appointment embedded."""

    token_id: str = Field(..., description="Token ID")
    public_id: str = Field(..., description="Patient-facing token ID")
    tenant_id: str = Field(..., description="Owning tenant")
    specialist_id: str = Field(..., description="Queue specialist")
    day: str = Field(..., description="Clinic day (YYYY-MM-DD)")
    token_number: int = Field(..., description="Number within the partition")
    status: str = Field(default="WAITING")
    patient_id: Optional[str] = None
    created_lat: Optional[float] = None
    created_lng: Optional[float] = None
    expires_at: Optional[datetime] = None
    source: str = Field(default="QR_WEB")
    created_at: datetime = Field(default_factory=get_current_timestamp)
    updated_at: datetime = Field(default_factory=get_current_timestamp)
    appointment: Optional[AppointmentMongo] = None

    class Settings:
        name = "tokens"
        indexes = [
            IndexModel([("token_id", pymongo.ASCENDING)], unique=True),
            IndexModel([("public_id", pymongo.ASCENDING)], unique=True),
            IndexModel(
                [
                    ("tenant_id", pymongo.ASCENDING),
                    ("specialist_id", pymongo.ASCENDING),
                    ("day", pymongo.ASCENDING),
                    ("token_number", pymongo.ASCENDING),
                ],
                unique=True,
                name="partition_token_number_unique",
            ),
            [("tenant_id", 1), ("day", 1), ("status", 1), ("token_number", 1)],
            [("status", 1), ("expires_at", 1)],
        ]


class DoctorStatusMongo(Document):
    """MongoDB model for daily IN/OUT records; ``specialist_id=None`` is the general record."""

    status_id: str = Field(..., description="Record ID")
    tenant_id: str = Field(..., description="Owning tenant")
    specialist_id: Optional[str] = Field(None, description="Specialist, or None for general")
    day: str = Field(..., description="Clinic day (YYYY-MM-DD)")
    status: str = Field(default="OUT")
    set_by: str = Field(..., description="Staff member who set the status")
    updated_at: datetime = Field(default_factory=get_current_timestamp)

    class Settings:
        name = "doctor_status"
        indexes = [
            IndexModel(
                [
                    ("tenant_id", pymongo.ASCENDING),
                    ("specialist_id", pymongo.ASCENDING),
                    ("day", pymongo.ASCENDING),
                ],
                unique=True,
                name="doctor_status_key_unique",
            ),
        ]


DOCUMENT_MODELS = [TenantMongo, SpecialistMongo, PatientMongo, TokenMongo, DoctorStatusMongo]
