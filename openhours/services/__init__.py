"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .availability import AvailabilityService, ScheduleStoreProtocol

__all__ = ["AvailabilityService", "ScheduleStoreProtocol"]
