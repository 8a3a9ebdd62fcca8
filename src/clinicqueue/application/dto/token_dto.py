"""Token intake DTOs.

The public form is validated here, before any repository is touched, so that
every offending field is reported at once.
"""

import re
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError

from ...domain.errors import TokenRequestValidationError

MIN_DOB = date(1900, 1, 1)
GENDERS = ("male", "female", "other", "prefer-not-to-say")

_NAME_PATTERN = re.compile(r"^[a-zA-Z\s'-]+$")
_DOB_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_PHONE_PATTERN = re.compile(r"^[0-9]{10}$")
_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_UUID_PATTERN = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)


def _invalid(message: str) -> PydanticCustomError:
    return PydanticCustomError("invalid_field", message)


class PatientIntake(BaseModel):
    """Patient block of the public token form."""

    model_config = ConfigDict(extra="ignore")

    name: str
    dob: date
    phone: str
    address: Optional[str] = None
    email: Optional[str] = None
    gender: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise _invalid("Name must be at least 2 characters")
        if len(v) > 100:
            raise _invalid("Name must be less than 100 characters")
        if not _NAME_PATTERN.match(v):
            raise _invalid("Name can only contain letters, spaces, hyphens, and apostrophes")
        return v

    @field_validator("dob", mode="before")
    @classmethod
    def validate_dob(cls, v: Any, info: ValidationInfo) -> date:
        if isinstance(v, datetime):
            parsed = v.date()
        elif isinstance(v, date):
            parsed = v
        else:
            if not isinstance(v, str) or not _DOB_PATTERN.match(v):
                raise _invalid("Date must be in YYYY-MM-DD format")
            try:
                parsed = date.fromisoformat(v)
            except ValueError:
                raise _invalid("Date must be in YYYY-MM-DD format")
        today = (info.context or {}).get("today") or date.today()
        if not MIN_DOB <= parsed <= today:
            raise _invalid("Date of birth must be between 1900-01-01 and today")
        return parsed

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        if not _PHONE_PATTERN.match(v):
            raise _invalid("Phone number must be exactly 10 digits")
        if len(set(v)) == 1:
            raise _invalid("Phone number cannot be all the same digit")
        return v

    @field_validator("address")
    @classmethod
    def validate_address(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and len(v) > 500:
            raise _invalid("Address must be less than 500 characters")
        return v

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        if not v:
            return None
        if len(v) > 255:
            raise _invalid("Email must be less than 255 characters")
        if not _EMAIL_PATTERN.match(v):
            raise _invalid("Invalid email format")
        return v

    @field_validator("gender")
    @classmethod
    def validate_gender(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in GENDERS:
            raise _invalid(f"Gender must be one of: {', '.join(GENDERS)}")
        return v


class LocationInput(BaseModel):
    """Coordinates reported by the patient's device."""

    lat: float
    lng: float

    @field_validator("lat")
    @classmethod
    def validate_lat(cls, v: float) -> float:
        if not -90 <= v <= 90:
            raise _invalid("Latitude must be between -90 and 90")
        return v

    @field_validator("lng")
    @classmethod
    def validate_lng(cls, v: float) -> float:
        if not -180 <= v <= 180:
            raise _invalid("Longitude must be between -180 and 180")
        return v


class CreateTokenRequest(BaseModel):
    """Public token creation request."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    specialist_id: Optional[str] = Field(default=None, alias="specialistId")
    patient: PatientIntake
    location: LocationInput

    @field_validator("specialist_id")
    @classmethod
    def validate_specialist_id(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not _UUID_PATTERN.match(v):
            raise _invalid("Invalid specialist ID format")
        return v


def _field_errors(exc: ValidationError) -> List[Dict[str, str]]:
    errors = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err["loc"]) or "body"
        errors.append({"field": field, "message": err["msg"]})
    return errors


def parse_create_token_request(
    payload: Mapping[str, Any], today: Optional[date] = None
) -> CreateTokenRequest:
    """Validate a raw token form.

    Raises ``TokenRequestValidationError`` listing each failing field as
    ``{"field": "patient.phone", "message": ...}``.
    """
    if not isinstance(payload, Mapping):
        raise TokenRequestValidationError(
            [{"field": "body", "message": "Request body must be a JSON object"}]
        )
    try:
        return CreateTokenRequest.model_validate(payload, context={"today": today})
    except ValidationError as exc:
        raise TokenRequestValidationError(_field_errors(exc)) from exc
