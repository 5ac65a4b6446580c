"""
Adapters layer - Schedule persistence.
"""

from .schedule_store import InMemoryScheduleStore, YamlScheduleStore

__all__ = ["InMemoryScheduleStore", "YamlScheduleStore"]
