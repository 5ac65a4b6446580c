"""
Expansion of effective opening hours into bookable session slots.

This is pure domain logic without any external dependencies (no database,
no I/O). Windows come from the OverrideResolver; the generator only anchors
them to a date and cuts them into sessions.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional

import pendulum
from pendulum import DateTime

from .models import (
    DEFAULT_TIMEZONE,
    AvailabilitySlot,
    ScheduleConfig,
    validate_session_duration,
)
from .override_resolver import DateLike, OverrideResolver, to_calendar_date

logger = logging.getLogger(__name__)


class SlotGenerator:
    """
    Generates fixed-length bookable slots for a date.

    Algorithm:
    1. Resolve the effective schedule; a closed date yields no slots
    2. Anchor every window to the date in the configured timezone
    3. From the window start, cut consecutive sessions of the requested length,
       keeping only those that end at or before the window end
    4. Concatenate in window order (no sorting, no merging of overlaps)
    """

    def __init__(self, timezone: str = DEFAULT_TIMEZONE, resolver: Optional[OverrideResolver] = None):
        self.timezone = timezone
        self.resolver = resolver or OverrideResolver(timezone=timezone)

    def generate_slots(
        self,
        day: DateLike,
        config: ScheduleConfig,
        session_duration_minutes: Optional[int] = None,
    ) -> List[AvailabilitySlot]:
        """
        Generate all bookable slots for a date.

        Args:
            day: Target calendar date (datetimes are reduced to their local date)
            config: Schedule snapshot
            session_duration_minutes: Slot length; defaults to the config's
                session duration

        Returns:
            List of AvailabilitySlot objects in window order

        Raises:
            InvalidSessionDurationError: If the duration is not a positive int
        """
        duration = validate_session_duration(
            config.session_duration if session_duration_minutes is None else session_duration_minutes
        )

        slots: List[AvailabilitySlot] = []
        for window in self.available_windows(day, config):
            slots.extend(self._split_window(window, duration))

        return slots

    def generate_slots_for_range(
        self,
        start_date: DateLike,
        end_date: DateLike,
        config: ScheduleConfig,
        session_duration_minutes: Optional[int] = None,
    ) -> Dict[date, List[AvailabilitySlot]]:
        """
        Generate slots for every calendar day in an inclusive date range.

        Closed days are present with an empty list.
        """
        current = to_calendar_date(start_date, self.timezone)
        last = to_calendar_date(end_date, self.timezone)

        result: Dict[date, List[AvailabilitySlot]] = {}
        while current <= last:
            result[current] = self.generate_slots(current, config, session_duration_minutes)
            current += timedelta(days=1)

        return result

    def available_windows(self, day: DateLike, config: ScheduleConfig) -> List[AvailabilitySlot]:
        """
        Effective opening windows of a date, anchored to concrete instants.

        A window that lies entirely inside a DST gap has no real instants and
        is skipped.
        """
        effective = self.resolver.resolve(day, config)

        windows: List[AvailabilitySlot] = []
        for slot in effective.windows:
            start, end = slot.instants(effective.date, self.timezone)
            if start.timestamp() >= end.timestamp():
                logger.debug(
                    "Skipping window %s on %s: no wall-clock time exists in %s",
                    slot, effective.date, self.timezone,
                )
                continue
            windows.append(AvailabilitySlot(start=start, end=end))

        return windows

    def is_slot_available(
        self,
        candidate_start: datetime,
        candidate_end: datetime,
        config: ScheduleConfig,
    ) -> bool:
        """
        Check whether a candidate interval fits inside an opening window.

        The candidate does not need to line up with the session grid; it only
        has to lie fully inside one effective window of its start date.
        Naive datetimes are taken as local wall-clock time. An empty or
        reversed interval is never available.
        """
        start = self._localize(candidate_start)
        end = self._localize(candidate_end)
        if end.timestamp() <= start.timestamp():
            return False

        return any(
            window.contains(start, end)
            for window in self.available_windows(start, config)
        )

    @staticmethod
    def _split_window(window: AvailabilitySlot, duration: int) -> List[AvailabilitySlot]:
        """
        Cut a window into consecutive sessions; a trailing partial session is dropped.

        Example (60 minutes):
        Window: 08:00 - 10:30
        Result: [08:00-09:00, 09:00-10:00]
        """
        sessions: List[AvailabilitySlot] = []
        cursor = window.start

        while True:
            session_end = cursor.add(minutes=duration)
            if session_end.timestamp() > window.end.timestamp():
                break
            sessions.append(AvailabilitySlot(start=cursor, end=session_end))
            cursor = session_end

        return sessions

    def _localize(self, value: datetime) -> DateTime:
        if value.tzinfo is None:
            return pendulum.instance(value, tz=self.timezone)
        return pendulum.instance(value)


def generate_slots(
    day: DateLike,
    session_duration_minutes: Optional[int],
    config: ScheduleConfig,
    timezone: str = DEFAULT_TIMEZONE,
) -> List[AvailabilitySlot]:
    """Generate bookable slots for ``day`` (see SlotGenerator)."""
    return SlotGenerator(timezone=timezone).generate_slots(day, config, session_duration_minutes)


def is_slot_available(
    candidate_start: datetime,
    candidate_end: datetime,
    config: ScheduleConfig,
    timezone: str = DEFAULT_TIMEZONE,
) -> bool:
    """Containment check of a candidate interval (see SlotGenerator)."""
    return SlotGenerator(timezone=timezone).is_slot_available(candidate_start, candidate_end, config)
