"""
Application service answering availability queries and schedule updates.

The service loads one schedule snapshot per call from a store adapter and
delegates the actual resolution to the domain-level ``OverrideResolver`` and
``SlotGenerator``. The store is reached through a small protocol, so the YAML
store, the in-memory store or any other persistence can be plugged in.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional, Protocol, Tuple

import pendulum

from ..config import SchedulePayload, collect_data_quality_warnings
from ..domain.exceptions import ScheduleValidationError
from ..domain.models import (
    DEFAULT_TIMEZONE,
    AvailabilitySlot,
    EffectiveSchedule,
    ScheduleConfig,
)
from ..domain.override_resolver import DateLike
from ..domain.slot_generator import SlotGenerator

logger = logging.getLogger(__name__)


class ScheduleStoreProtocol(Protocol):
    """Protocol describing the persistence behaviour needed by the service."""

    def load(self) -> ScheduleConfig:
        """Return the stored schedule, creating the default one if missing."""

    def replace(self, config: ScheduleConfig) -> None:
        """Replace the whole stored schedule."""


class AvailabilityService:
    """
    Orchestrates schedule loading, resolution and slot generation.

    Every query works on a single snapshot returned by the store, so a
    concurrent update never mixes two schedule versions in one answer.
    """

    def __init__(
        self,
        store: ScheduleStoreProtocol,
        timezone: str = DEFAULT_TIMEZONE,
        slot_generator: Optional[SlotGenerator] = None,
    ) -> None:
        self._store = store
        self.timezone = timezone
        self._slot_generator = slot_generator or SlotGenerator(timezone=timezone)

    def get_schedule(self) -> ScheduleConfig:
        """Return the current schedule snapshot."""
        return self._store.load()

    def effective_schedule(self, day: DateLike) -> EffectiveSchedule:
        """Resolve which tier governs ``day`` and its opening windows."""
        return self._slot_generator.resolver.resolve(day, self._store.load())

    def available_slots(
        self,
        day: DateLike,
        session_duration_minutes: Optional[int] = None,
    ) -> List[AvailabilitySlot]:
        """Bookable slots of ``day``; duration defaults to the stored session length."""
        return self._slot_generator.generate_slots(
            day,
            self._store.load(),
            session_duration_minutes,
        )

    def slots_for_range(
        self,
        start_date: DateLike,
        end_date: DateLike,
        session_duration_minutes: Optional[int] = None,
    ) -> Dict[date, List[AvailabilitySlot]]:
        """Bookable slots for each day of an inclusive date range."""
        return self._slot_generator.generate_slots_for_range(
            start_date,
            end_date,
            self._store.load(),
            session_duration_minutes,
        )

    def range_overview(
        self,
        start_date: DateLike,
        end_date: DateLike,
        session_duration_minutes: Optional[int] = None,
    ) -> Dict[date, Tuple[EffectiveSchedule, List[AvailabilitySlot]]]:
        """Effective schedule and bookable slots for each day of an inclusive date range."""
        config = self._store.load()
        per_day = self._slot_generator.generate_slots_for_range(
            start_date,
            end_date,
            config,
            session_duration_minutes,
        )
        return {
            day: (self._slot_generator.resolver.resolve(day, config), slots)
            for day, slots in per_day.items()
        }

    def is_slot_available(self, start: datetime, end: datetime) -> bool:
        """Check whether [start, end] lies inside an opening window."""
        return self._slot_generator.is_slot_available(start, end, self._store.load())

    def update_schedule(self, payload: Mapping[str, Any]) -> Tuple[ScheduleConfig, List[str]]:
        """
        Validate a full schedule payload and replace the stored schedule.

        Args:
            payload: camelCase document with ``schedule``, ``sessionDuration``,
                ``specialDates``, ``recurringHolidays`` and ``seasonalSchedules``

        Returns:
            The stored schedule and the data-quality warnings found in it

        Raises:
            ScheduleValidationError: If the payload is rejected
            ScheduleStoreError: If the store cannot persist the schedule
        """
        try:
            parsed = SchedulePayload.parse_payload(payload)
        except ScheduleValidationError as exc:
            logger.warning("Rejected schedule update: %s", "; ".join(exc.errors) or exc)
            raise

        config = parsed.to_domain().touched(pendulum.now(self.timezone))
        warnings = collect_data_quality_warnings(config)
        for warning in warnings:
            logger.warning("Schedule data quality: %s", warning)

        self._store.replace(config)
        logger.info(
            "Schedule updated: %d special date(s), %d recurring holiday(s), %d season(s)",
            len(config.special_dates),
            len(config.recurring_holidays),
            len(config.seasonal_schedules),
        )

        return config, warnings
