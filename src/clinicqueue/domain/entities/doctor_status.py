"""Daily doctor availability record."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ...core.utils.datetime_utils import get_current_timestamp
from ..enums.token_status import DoctorStatusType


@dataclass
class DoctorStatus:
    """IN/OUT record keyed by {tenant, specialist-or-None, date}.

    A ``specialist_id`` of ``None`` is the clinic-wide general record.
    """

    id: str
    tenant_id: str
    specialist_id: Optional[str]
    day: date
    status: DoctorStatusType
    set_by: str
    updated_at: datetime = field(default_factory=get_current_timestamp)

    @property
    def is_general(self) -> bool:
        return self.specialist_id is None
