"""Patient domain entity as seen by the queue (identity resolved by phone)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ...core.utils.datetime_utils import get_current_timestamp


@dataclass
class Patient:
    """Patient domain entity."""

    id: str
    tenant_id: str
    name: str
    dob: date
    phone: str
    address: Optional[str] = None
    email: Optional[str] = None
    gender: Optional[str] = None
    created_at: datetime = field(default_factory=get_current_timestamp)
    updated_at: datetime = field(default_factory=get_current_timestamp)
