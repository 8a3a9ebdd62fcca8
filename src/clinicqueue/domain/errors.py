"""
Domain-specific error types for business rule violations.
"""

from typing import Any, Dict, List, Optional


class DomainError(Exception):
    """Base domain error."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


# ---------------------------------------------------------------------------
# Not found
# ---------------------------------------------------------------------------


class NotFoundError(DomainError):
    """A referenced tenant, specialist or token does not exist for the tenant."""


class TenantNotFoundError(NotFoundError):
    """Clinic not found."""

    def __init__(self, tenant_ref: str) -> None:
        super().__init__("Clinic not found", "TENANT_NOT_FOUND", {"tenant": tenant_ref})


class SpecialistNotFoundError(NotFoundError):
    """Specialist not found, inactive, or owned by another clinic."""

    def __init__(self, specialist_id: Optional[str]) -> None:
        super().__init__(
            "Specialist not found",
            "SPECIALIST_NOT_FOUND",
            {"specialist_id": specialist_id},
        )


class TokenNotFoundError(NotFoundError):
    """Token not found for the tenant."""

    def __init__(self, token_ref: str) -> None:
        super().__init__("Token not found", "TOKEN_NOT_FOUND", {"token": token_ref})


# ---------------------------------------------------------------------------
# Forbidden (business rule rejections at intake)
# ---------------------------------------------------------------------------


class IntakeForbiddenError(DomainError):
    """The clinic is not accepting this token request."""


class QrInactiveError(IntakeForbiddenError):
    def __init__(self, tenant_id: str) -> None:
        super().__init__(
            "QR code is not active for this clinic",
            "QR_INACTIVE",
            {"tenant_id": tenant_id},
        )


class DoctorOutError(IntakeForbiddenError):
    def __init__(self, specialist_id: Optional[str]) -> None:
        super().__init__(
            "Doctor is currently OUT",
            "DOCTOR_OUT",
            {"specialist_id": specialist_id},
        )


class OutsideGeofenceError(IntakeForbiddenError):
    def __init__(self, distance_m: int, radius_m: float) -> None:
        radius_display = int(radius_m) if float(radius_m).is_integer() else radius_m
        message = (
            f"You must be within {radius_display}m of the clinic to get a token. "
            f"Current distance: {distance_m}m"
        )
        super().__init__(
            message,
            "OUTSIDE_GEOFENCE",
            {"distance_m": distance_m, "radius_m": radius_m},
        )
        self.distance_m = distance_m
        self.radius_m = radius_m


class DailyLimitReachedError(IntakeForbiddenError):
    def __init__(self, specialist_id: str, max_tokens: int) -> None:
        super().__init__(
            "Daily token limit reached",
            "DAILY_LIMIT_REACHED",
            {"specialist_id": specialist_id, "max_tokens_per_day": max_tokens},
        )


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class TokenRequestValidationError(DomainError):
    """Malformed token request; every offending field is listed."""

    def __init__(self, errors: List[Dict[str, str]]) -> None:
        super().__init__("Validation failed", "VALIDATION_FAILED", {"errors": errors})
        self.errors = errors


class IllegalStatusTransitionError(DomainError):
    """Requested token status change is not allowed from the current status."""

    def __init__(self, token_id: str, current: str, requested: str) -> None:
        message = f"Cannot move token from {current} to {requested}"
        super().__init__(
            message,
            "ILLEGAL_STATUS_TRANSITION",
            {"token_id": token_id, "current_status": current, "requested_status": requested},
        )


# ---------------------------------------------------------------------------
# Conflict
# ---------------------------------------------------------------------------


class SequenceConflictError(DomainError):
    """Token number allocation kept colliding with concurrent writers; safe to retry."""

    def __init__(self, tenant_id: str, specialist_id: str, day: str, attempts: int) -> None:
        super().__init__(
            "Queue is busy, please retry",
            "SEQUENCE_CONFLICT",
            {
                "tenant_id": tenant_id,
                "specialist_id": specialist_id,
                "date": day,
                "attempts": attempts,
                "retryable": True,
            },
        )


class TokenWriteConflictError(Exception):
    """Raised by repositories when a token insert hits a unique key (partition number or public id)."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Token insert conflicts on {key}")
        self.key = key


class TokenStatusChangedError(DomainError):
    """Token status changed between read and write (another staff action won)."""

    def __init__(self, token_id: str, expected: str) -> None:
        super().__init__(
            "Token was updated by another request, reload and retry",
            "TOKEN_STATUS_CHANGED",
            {"token_id": token_id, "expected_status": expected, "retryable": True},
        )
