"""
Domain layer - Pure scheduling logic without external dependencies.
"""

from .exceptions import (
    InvalidSessionDurationError,
    MalformedTimeSlotError,
    ScheduleStoreError,
    ScheduleValidationError,
    SchedulerError,
)
from .models import (
    AvailabilitySlot,
    DaySchedule,
    EffectiveSchedule,
    OverrideTier,
    RecurringHoliday,
    ScheduleConfig,
    SeasonalSchedule,
    SpecialDate,
    SpecialDateType,
    TimeSlot,
    Weekday,
    WeeklySchedule,
)
from .override_resolver import OverrideResolver, resolve_effective_schedule
from .slot_generator import SlotGenerator, generate_slots, is_slot_available

__all__ = [
    "AvailabilitySlot",
    "DaySchedule",
    "EffectiveSchedule",
    "InvalidSessionDurationError",
    "MalformedTimeSlotError",
    "OverrideResolver",
    "OverrideTier",
    "RecurringHoliday",
    "ScheduleConfig",
    "ScheduleStoreError",
    "ScheduleValidationError",
    "SchedulerError",
    "SeasonalSchedule",
    "SlotGenerator",
    "SpecialDate",
    "SpecialDateType",
    "TimeSlot",
    "Weekday",
    "WeeklySchedule",
    "generate_slots",
    "is_slot_available",
    "resolve_effective_schedule",
]
