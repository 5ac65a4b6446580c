"""
Domain models for opening hours, schedule overrides and bookable slots.
"""

import calendar
import re
from dataclasses import dataclass, field, replace
from datetime import date, datetime, time
from enum import Enum
from typing import Dict, Mapping, Optional, Tuple

import pendulum
from pendulum import DateTime

from .exceptions import InvalidSessionDurationError, MalformedTimeSlotError

_CLOCK_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")

DEFAULT_TIMEZONE = "Europe/Berlin"
DEFAULT_SESSION_DURATION = 60
DEFAULT_OPENING = "08:00"
DEFAULT_CLOSING = "17:00"


class Weekday(str, Enum):
    """Named weekday keys used by weekly schedules (Monday first)."""
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @classmethod
    def from_date(cls, day: date) -> "Weekday":
        """Return the weekday of a calendar date."""
        return list(cls)[day.weekday()]


class SpecialDateType(str, Enum):
    """Kinds of one-off special dates."""
    HOLIDAY = "holiday"
    MODIFIED_HOURS = "modified_hours"
    VACATION = "vacation"


class OverrideTier(str, Enum):
    """Precedence tier that produced an effective schedule, highest first."""
    SPECIAL_DATE = "special_date"
    RECURRING_HOLIDAY = "recurring_holiday"
    SEASONAL = "seasonal"
    WEEKLY = "weekly"


def parse_clock_time(value: str) -> time:
    """
    Parse an ``HH:MM`` wall-clock string.

    Raises:
        MalformedTimeSlotError: If the text is not a valid 24h clock time
    """
    match = _CLOCK_PATTERN.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise MalformedTimeSlotError(f"Expected HH:MM clock time, got {value!r}")

    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise MalformedTimeSlotError(f"Clock time out of range: {value!r}")

    return time(hour=hour, minute=minute)


def format_clock_time(value: time) -> str:
    """Format a clock time as ``HH:MM``."""
    return f"{value.hour:02d}:{value.minute:02d}"


def validate_session_duration(minutes) -> int:
    """Ensure a session duration is a positive whole number of minutes."""
    if isinstance(minutes, bool) or not isinstance(minutes, int) or minutes <= 0:
        raise InvalidSessionDurationError(
            f"Session duration must be a positive number of minutes, got {minutes!r}"
        )
    return minutes


@dataclass(frozen=True)
class AvailabilitySlot:
    """
    A concrete, timezone-aware interval on a specific calendar date.

    Invariant: start must be before end.

    Instants are ordered by POSIX timestamp, so the repeated hour of a DST
    fall-back orders correctly.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start.timestamp() >= self.end.timestamp():
            raise ValueError(f"Start time {self.start} must be before end time {self.end}")

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end.timestamp() - self.start.timestamp()) / 60)

    def contains(self, start: datetime, end: datetime) -> bool:
        """Check if the interval [start, end] lies fully inside this slot."""
        return (
            start.timestamp() >= self.start.timestamp()
            and end.timestamp() <= self.end.timestamp()
        )

    def __str__(self) -> str:
        return f"{self.start.format('DD.MM.YYYY HH:mm')} - {self.end.format('HH:mm')}"


@dataclass(frozen=True)
class TimeSlot:
    """
    A wall-clock window within a single day, without timezone.

    Invariant: start must be before end.
    """
    start: time
    end: time

    def __post_init__(self):
        if self.start >= self.end:
            raise MalformedTimeSlotError(
                f"Start time {format_clock_time(self.start)} must be before "
                f"end time {format_clock_time(self.end)}"
            )

    @classmethod
    def parse(cls, start_time: str, end_time: str) -> "TimeSlot":
        """Build a slot from two ``HH:MM`` strings."""
        return cls(start=parse_clock_time(start_time), end=parse_clock_time(end_time))

    @property
    def start_time(self) -> str:
        return format_clock_time(self.start)

    @property
    def end_time(self) -> str:
        return format_clock_time(self.end)

    def overlaps(self, other: "TimeSlot") -> bool:
        """Check if this window overlaps with another."""
        return self.start < other.end and self.end > other.start

    def instants(self, day: date, timezone: str) -> Tuple[DateTime, DateTime]:
        """
        Start and end of this window on a calendar date in the given timezone.

        Wall-clock times inside a DST gap are shifted forward by pendulum, so
        the start is not guaranteed to be before the end.
        """
        start = pendulum.datetime(
            day.year, day.month, day.day, self.start.hour, self.start.minute, tz=timezone
        )
        end = pendulum.datetime(
            day.year, day.month, day.day, self.end.hour, self.end.minute, tz=timezone
        )
        return start, end

    def anchor(self, day: date, timezone: str) -> AvailabilitySlot:
        """Resolve this window against a calendar date in the given timezone."""
        start, end = self.instants(day, timezone)
        return AvailabilitySlot(start=start, end=end)

    def __str__(self) -> str:
        return f"{self.start_time}-{self.end_time}"


@dataclass(frozen=True)
class DaySchedule:
    """Opening hours of one weekday."""
    enabled: bool = True
    time_slots: Tuple[TimeSlot, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "time_slots", tuple(self.time_slots))

    def open_slots(self) -> Tuple[TimeSlot, ...]:
        """Slots that count for availability; none when the day is disabled."""
        return self.time_slots if self.enabled else ()


@dataclass(frozen=True)
class WeeklySchedule:
    """
    One DaySchedule per weekday.

    Keys may be given as Weekday members or their names; exactly the seven
    weekdays must be present.
    """
    days: Mapping[Weekday, DaySchedule]

    def __post_init__(self):
        normalized: Dict[Weekday, DaySchedule] = {}
        for key, day_schedule in self.days.items():
            try:
                weekday = Weekday(key)
            except ValueError:
                raise ValueError(f"Unknown weekday: {key!r}") from None
            if weekday in normalized:
                raise ValueError(f"Duplicate weekday: {weekday.value}")
            normalized[weekday] = day_schedule

        missing = [weekday.value for weekday in Weekday if weekday not in normalized]
        if missing:
            raise ValueError(f"Weekly schedule is missing: {', '.join(missing)}")

        object.__setattr__(self, "days", {weekday: normalized[weekday] for weekday in Weekday})

    @classmethod
    def default(cls) -> "WeeklySchedule":
        """Mon-Fri 08:00-17:00 enabled; weekend hours stored but disabled."""
        hours = (TimeSlot.parse(DEFAULT_OPENING, DEFAULT_CLOSING),)
        return cls(days={
            weekday: DaySchedule(
                enabled=weekday not in (Weekday.SATURDAY, Weekday.SUNDAY),
                time_slots=hours,
            )
            for weekday in Weekday
        })

    def for_weekday(self, weekday: Weekday) -> DaySchedule:
        return self.days[weekday]

    def for_date(self, day: date) -> DaySchedule:
        return self.days[Weekday.from_date(day)]


@dataclass(frozen=True)
class SpecialDate:
    """A one-off override for an exact calendar date."""
    date: date
    type: SpecialDateType
    description: str
    is_full_day_off: bool = True
    time_slots: Tuple[TimeSlot, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "type", SpecialDateType(self.type))
        object.__setattr__(self, "time_slots", tuple(self.time_slots))

    def matches(self, day: date) -> bool:
        return self.date == day


@dataclass(frozen=True)
class RecurringHoliday:
    """
    An override repeating every year on the same month and day.

    The day is not checked against the month's length, so e.g. February 30
    can be stored; such an entry never matches.
    """
    month: int
    day: int
    description: str
    is_full_day_off: bool = True
    time_slots: Tuple[TimeSlot, ...] = ()

    def __post_init__(self):
        if not 1 <= self.month <= 12:
            raise ValueError(f"Month must be between 1 and 12, got {self.month}")
        if not 1 <= self.day <= 31:
            raise ValueError(f"Day must be between 1 and 31, got {self.day}")
        object.__setattr__(self, "time_slots", tuple(self.time_slots))

    def matches(self, day: date) -> bool:
        return self.month == day.month and self.day == day.day

    def occurs_in_calendar(self) -> bool:
        """False for dates that exist in no year (e.g. April 31)."""
        # 2000 is a leap year, so February 29 counts as possible.
        return self.day <= calendar.monthrange(2000, self.month)[1]


@dataclass(frozen=True)
class SeasonalSchedule:
    """A date range (inclusive) that replaces or closes the weekly hours."""
    start_date: date
    end_date: date
    description: str
    is_full_period_off: bool = False
    schedule: Optional[WeeklySchedule] = None

    def __post_init__(self):
        if self.start_date > self.end_date:
            raise ValueError(
                f"Season start {self.start_date} must not be after its end {self.end_date}"
            )

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    def overlaps(self, other: "SeasonalSchedule") -> bool:
        return self.start_date <= other.end_date and other.start_date <= self.end_date


@dataclass(frozen=True)
class ScheduleConfig:
    """
    Root aggregate: default weekly hours, session length and all overrides.

    Instances are immutable snapshots; updates replace the whole aggregate.
    """
    weekly: WeeklySchedule = field(default_factory=WeeklySchedule.default)
    session_duration: int = DEFAULT_SESSION_DURATION
    special_dates: Tuple[SpecialDate, ...] = ()
    recurring_holidays: Tuple[RecurringHoliday, ...] = ()
    seasonal_schedules: Tuple[SeasonalSchedule, ...] = ()
    last_updated: Optional[DateTime] = None

    def __post_init__(self):
        validate_session_duration(self.session_duration)
        object.__setattr__(self, "special_dates", tuple(self.special_dates))
        object.__setattr__(self, "recurring_holidays", tuple(self.recurring_holidays))
        object.__setattr__(self, "seasonal_schedules", tuple(self.seasonal_schedules))

    @classmethod
    def default(cls) -> "ScheduleConfig":
        """Configuration used when no schedule has been stored yet."""
        return cls()

    def touched(self, when: DateTime) -> "ScheduleConfig":
        """Return a copy stamped with a new last-updated time."""
        return replace(self, last_updated=when)


@dataclass(frozen=True)
class EffectiveSchedule:
    """
    Resolved opening hours for one calendar date.

    ``closed`` is True when the governing tier closes the date outright;
    an open date may still carry no windows if none were configured.
    """
    date: date
    tier: OverrideTier
    closed: bool
    time_slots: Tuple[TimeSlot, ...] = ()
    description: str = ""

    @property
    def windows(self) -> Tuple[TimeSlot, ...]:
        """Windows that may be booked; empty when closed."""
        return () if self.closed else self.time_slots

    def format_display(self) -> str:
        """
        Format for display.
        Format: Weekday, YYYY-MM-DD | 09:00-12:00, 13:00-17:00 (tier)
        """
        weekday = Weekday.from_date(self.date).value.capitalize()
        if self.closed:
            hours = "closed"
        elif not self.time_slots:
            hours = "no hours configured"
        else:
            hours = ", ".join(str(slot) for slot in self.time_slots)
        label = self.tier.value.replace("_", " ")
        if self.description:
            label = f"{label}: {self.description}"
        return f"{weekday}, {self.date.isoformat()} | {hours} ({label})"
