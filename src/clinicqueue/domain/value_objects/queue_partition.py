"""
Queue partition value object: the {tenant, specialist, date} triple that
scopes token numbers and queue ordering.
"""

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class QueuePartition:
    """Immutable partition key for token numbering."""

    tenant_id: str
    specialist_id: str
    day: date

    def __post_init__(self) -> None:
        if not self.tenant_id:
            raise ValueError("Partition tenant_id cannot be empty")
        if not self.specialist_id:
            raise ValueError("Partition specialist_id cannot be empty")

    @property
    def key(self) -> str:
        """Stable string form, used for lock registries and counter documents."""
        return f"{self.tenant_id}:{self.specialist_id}:{self.day.isoformat()}"

    def __str__(self) -> str:
        return self.key
