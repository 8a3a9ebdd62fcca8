"""Specialist domain entity: the doctor slot a queue is organized around."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

DEFAULT_SPECIALIST_NAME = "General Practitioner"
DEFAULT_SPECIALTY = "General"


@dataclass
class Specialist:
    """Specialist domain entity."""

    id: str
    tenant_id: str
    name: str
    specialty: str
    is_active: bool = True
    max_tokens_per_day: Optional[int] = None
    practitioner_id: Optional[str] = None

    def daily_cap(self, default: int) -> int:
        """Tokens allowed per day; unset or zero falls back to ``default``."""
        return self.max_tokens_per_day or default
