"""
Infrastructure-level exceptions for ClinicQueue.

Business rule violations live in ``clinicqueue.domain.errors``; the classes
here cover configuration failures.
"""

from typing import Any, Dict, Optional


class ClinicQueueException(Exception):
    """Base exception class for ClinicQueue infrastructure errors."""

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


class ConfigurationError(ClinicQueueException):
    """Raised when there's a configuration error."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, "CONFIG_ERROR", details)
