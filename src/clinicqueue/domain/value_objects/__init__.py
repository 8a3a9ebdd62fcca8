"""
Value objects package for domain layer.
"""

from .geo_point import GeoPoint
from .public_id import PublicId
from .queue_partition import QueuePartition

__all__ = [
    "GeoPoint",
    "PublicId",
    "QueuePartition",
]
