"""
Resolution of the opening hours that govern a single calendar date.

Pure domain logic: the resolver works on an in-memory ScheduleConfig
snapshot and performs no I/O.
"""

import logging
from datetime import date, datetime
from typing import Iterable, Optional, TypeVar, Union

import pendulum

from .models import (
    DEFAULT_TIMEZONE,
    EffectiveSchedule,
    OverrideTier,
    ScheduleConfig,
)

logger = logging.getLogger(__name__)

DateLike = Union[date, datetime]

_Entry = TypeVar("_Entry")


def to_calendar_date(value: DateLike, timezone: str = DEFAULT_TIMEZONE) -> date:
    """
    Reduce a date or datetime to the calendar date it falls on locally.

    Aware datetimes are converted to ``timezone`` first, so an instant just
    after midnight UTC still lands on the local date. Naive datetimes are
    taken as local wall-clock time.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return date(value.year, value.month, value.day)
        local = pendulum.instance(value).in_timezone(timezone)
        return date(local.year, local.month, local.day)
    return date(value.year, value.month, value.day)


class OverrideResolver:
    """
    Determines the effective opening hours for a date.

    Algorithm (strict precedence, first match wins, tiers never merge):
    1. Special date on exactly this calendar date
    2. Recurring holiday on this month/day, in any year
    3. Seasonal schedule whose inclusive date range contains the date
    4. Default weekly schedule for the date's weekday

    Within one tier the first entry in stored order wins.
    """

    def __init__(self, timezone: str = DEFAULT_TIMEZONE):
        self.timezone = timezone

    def resolve(self, day: DateLike, config: ScheduleConfig) -> EffectiveSchedule:
        """
        Resolve the effective schedule for a date.

        Args:
            day: Calendar date, or a datetime normalized to the local date
            config: Schedule snapshot to resolve against

        Returns:
            EffectiveSchedule describing the governing tier and its windows
        """
        target = to_calendar_date(day, self.timezone)

        special = self._first_match(
            (entry for entry in config.special_dates if entry.matches(target))
        )
        if special is not None:
            return EffectiveSchedule(
                date=target,
                tier=OverrideTier.SPECIAL_DATE,
                closed=special.is_full_day_off,
                time_slots=special.time_slots,
                description=special.description,
            )

        holiday = self._first_match(
            (entry for entry in config.recurring_holidays if entry.matches(target))
        )
        if holiday is not None:
            return EffectiveSchedule(
                date=target,
                tier=OverrideTier.RECURRING_HOLIDAY,
                closed=holiday.is_full_day_off,
                time_slots=holiday.time_slots,
                description=holiday.description,
            )

        season = self._first_match(
            (entry for entry in config.seasonal_schedules if entry.contains(target))
        )
        if season is not None:
            if season.is_full_period_off:
                return EffectiveSchedule(
                    date=target,
                    tier=OverrideTier.SEASONAL,
                    closed=True,
                    description=season.description,
                )
            if season.schedule is not None:
                day_schedule = season.schedule.for_date(target)
                return EffectiveSchedule(
                    date=target,
                    tier=OverrideTier.SEASONAL,
                    closed=not day_schedule.enabled,
                    time_slots=day_schedule.time_slots,
                    description=season.description,
                )
            logger.debug(
                "Season %r has no weekly hours of its own; using default hours for %s",
                season.description,
                target,
            )

        day_schedule = config.weekly.for_date(target)
        return EffectiveSchedule(
            date=target,
            tier=OverrideTier.WEEKLY,
            closed=not day_schedule.enabled,
            time_slots=day_schedule.time_slots,
        )

    @staticmethod
    def _first_match(matches: Iterable[_Entry]) -> Optional[_Entry]:
        return next(iter(matches), None)


def resolve_effective_schedule(
    day: DateLike,
    config: ScheduleConfig,
    timezone: str = DEFAULT_TIMEZONE,
) -> EffectiveSchedule:
    """Resolve the effective schedule for ``day`` (see OverrideResolver)."""
    return OverrideResolver(timezone=timezone).resolve(day, config)
