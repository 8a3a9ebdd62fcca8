"""
Application services: availability gate, sequence allocator and queue engine.
"""

from .availability_gate import AvailabilityGate
from .queue_engine import QueueEngine
from .sequence_allocator import SequenceAllocator

__all__ = ["AvailabilityGate", "QueueEngine", "SequenceAllocator"]
