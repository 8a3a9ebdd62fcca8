"""
Public token identifier value object.

Public ids are shown in patient-facing URLs. They are drawn from the
``secrets`` CSPRNG so they carry no information about the internal id or the
token number.
"""

import re
import secrets
from dataclasses import dataclass

_PUBLIC_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{8,32}$")


@dataclass(frozen=True)
class PublicId:
    """Immutable, URL-safe public token identifier."""

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not _PUBLIC_ID_PATTERN.match(self.value):
            raise ValueError("Public id must be 8-32 URL-safe characters")

    def __str__(self) -> str:
        return self.value

    @classmethod
    def generate(cls, length: int = 12) -> "PublicId":
        """Generate a new random public id of ``length`` characters."""
        # token_urlsafe(n) yields ~1.3 chars per byte
        return cls(secrets.token_urlsafe(length)[:length])
