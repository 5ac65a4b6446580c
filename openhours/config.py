"""
Configuration management using Pydantic models.

Two kinds of configuration live here:

* ``SchedulePayload`` - the administrative schedule document (weekly hours,
  session duration and all overrides). It validates full-replace updates and
  converts between the stored camelCase document and the domain aggregate.
* ``AppConfig`` - deployment settings (timezone, schedule file, logging)
  loaded from ``config.yaml``.
"""

import datetime as dt
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import pendulum
import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictInt,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from .domain.exceptions import ScheduleValidationError
from .domain.models import (
    DEFAULT_TIMEZONE,
    DaySchedule,
    RecurringHoliday,
    ScheduleConfig,
    SeasonalSchedule,
    SpecialDate,
    SpecialDateType,
    TimeSlot,
    Weekday,
    WeeklySchedule,
    format_clock_time,
    parse_clock_time,
)

logger = logging.getLogger(__name__)


class PayloadModel(BaseModel):
    """Base for schedule documents: camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TimeSlotPayload(PayloadModel):
    """An ``HH:MM`` window as stored in the schedule document."""
    start_time: str
    end_time: str

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_clock(cls, value: str) -> str:
        """Validate and normalize to zero-padded HH:MM."""
        return format_clock_time(parse_clock_time(value))

    @model_validator(mode="after")
    def validate_order(self) -> "TimeSlotPayload":
        """Ensure the window opens before it closes."""
        if self.start_time >= self.end_time:
            raise ValueError(
                f"startTime {self.start_time} must be before endTime {self.end_time}"
            )
        return self

    def to_domain(self) -> TimeSlot:
        return TimeSlot.parse(self.start_time, self.end_time)

    @classmethod
    def from_domain(cls, slot: TimeSlot) -> "TimeSlotPayload":
        return cls(start_time=slot.start_time, end_time=slot.end_time)


def _slots_to_domain(slots: Optional[List[TimeSlotPayload]]) -> tuple:
    return tuple(slot.to_domain() for slot in slots or [])


def _slots_from_domain(slots) -> List[TimeSlotPayload]:
    return [TimeSlotPayload.from_domain(slot) for slot in slots]


class DaySchedulePayload(PayloadModel):
    enabled: bool = True
    time_slots: List[TimeSlotPayload] = Field(default_factory=list)

    def to_domain(self) -> DaySchedule:
        return DaySchedule(enabled=self.enabled, time_slots=_slots_to_domain(self.time_slots))

    @classmethod
    def from_domain(cls, day: DaySchedule) -> "DaySchedulePayload":
        return cls(enabled=day.enabled, time_slots=_slots_from_domain(day.time_slots))


class WeeklySchedulePayload(PayloadModel):
    """One entry per weekday; every day is required."""
    monday: DaySchedulePayload
    tuesday: DaySchedulePayload
    wednesday: DaySchedulePayload
    thursday: DaySchedulePayload
    friday: DaySchedulePayload
    saturday: DaySchedulePayload
    sunday: DaySchedulePayload

    def to_domain(self) -> WeeklySchedule:
        return WeeklySchedule(days={
            weekday: getattr(self, weekday.value).to_domain() for weekday in Weekday
        })

    @classmethod
    def from_domain(cls, weekly: WeeklySchedule) -> "WeeklySchedulePayload":
        return cls(**{
            weekday.value: DaySchedulePayload.from_domain(weekly.for_weekday(weekday))
            for weekday in Weekday
        })


class SpecialDatePayload(PayloadModel):
    date: dt.date
    type: SpecialDateType
    description: str = Field(min_length=1)
    is_full_day_off: bool = True
    time_slots: Optional[List[TimeSlotPayload]] = None

    def to_domain(self) -> SpecialDate:
        return SpecialDate(
            date=self.date,
            type=self.type,
            description=self.description,
            is_full_day_off=self.is_full_day_off,
            time_slots=_slots_to_domain(self.time_slots),
        )

    @classmethod
    def from_domain(cls, special: SpecialDate) -> "SpecialDatePayload":
        return cls(
            date=special.date,
            type=special.type,
            description=special.description,
            is_full_day_off=special.is_full_day_off,
            time_slots=None if special.is_full_day_off else _slots_from_domain(special.time_slots),
        )


class RecurringHolidayPayload(PayloadModel):
    month: int = Field(ge=1, le=12)
    day: int = Field(ge=1, le=31)
    description: str = Field(min_length=1)
    is_full_day_off: bool = True
    time_slots: Optional[List[TimeSlotPayload]] = None

    def to_domain(self) -> RecurringHoliday:
        return RecurringHoliday(
            month=self.month,
            day=self.day,
            description=self.description,
            is_full_day_off=self.is_full_day_off,
            time_slots=_slots_to_domain(self.time_slots),
        )

    @classmethod
    def from_domain(cls, holiday: RecurringHoliday) -> "RecurringHolidayPayload":
        return cls(
            month=holiday.month,
            day=holiday.day,
            description=holiday.description,
            is_full_day_off=holiday.is_full_day_off,
            time_slots=None if holiday.is_full_day_off else _slots_from_domain(holiday.time_slots),
        )


class SeasonalSchedulePayload(PayloadModel):
    start_date: dt.date
    end_date: dt.date
    description: str = Field(min_length=1)
    is_full_period_off: bool = False
    schedule: Optional[WeeklySchedulePayload] = None

    @model_validator(mode="after")
    def validate_range(self) -> "SeasonalSchedulePayload":
        """Ensure the season does not end before it starts."""
        if self.start_date > self.end_date:
            raise ValueError(
                f"startDate {self.start_date} must not be after endDate {self.end_date}"
            )
        return self

    def to_domain(self) -> SeasonalSchedule:
        return SeasonalSchedule(
            start_date=self.start_date,
            end_date=self.end_date,
            description=self.description,
            is_full_period_off=self.is_full_period_off,
            schedule=self.schedule.to_domain() if self.schedule is not None else None,
        )

    @classmethod
    def from_domain(cls, season: SeasonalSchedule) -> "SeasonalSchedulePayload":
        return cls(
            start_date=season.start_date,
            end_date=season.end_date,
            description=season.description,
            is_full_period_off=season.is_full_period_off,
            schedule=(
                WeeklySchedulePayload.from_domain(season.schedule)
                if season.schedule is not None else None
            ),
        )


class SchedulePayload(PayloadModel):
    """
    Full schedule document, as accepted by the administrative update.

    Updates always replace the whole document; there is no partial patching.
    """
    schedule: WeeklySchedulePayload
    session_duration: StrictInt = Field(gt=0)
    special_dates: List[SpecialDatePayload] = Field(default_factory=list)
    recurring_holidays: List[RecurringHolidayPayload] = Field(default_factory=list)
    seasonal_schedules: List[SeasonalSchedulePayload] = Field(default_factory=list)
    last_updated: Optional[dt.datetime] = None

    @classmethod
    def parse_payload(cls, data: Any) -> "SchedulePayload":
        """
        Validate a raw payload mapping.

        Raises:
            ScheduleValidationError: With one message per invalid field
        """
        if not isinstance(data, dict):
            raise ScheduleValidationError("Schedule payload must be a mapping.")

        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            errors = [
                f"{'.'.join(str(part) for part in error['loc']) or 'payload'}: {error['msg']}"
                for error in exc.errors()
            ]
            raise ScheduleValidationError("Invalid schedule data", errors) from exc

    def to_domain(self) -> ScheduleConfig:
        return ScheduleConfig(
            weekly=self.schedule.to_domain(),
            session_duration=self.session_duration,
            special_dates=tuple(entry.to_domain() for entry in self.special_dates),
            recurring_holidays=tuple(entry.to_domain() for entry in self.recurring_holidays),
            seasonal_schedules=tuple(entry.to_domain() for entry in self.seasonal_schedules),
            last_updated=pendulum.instance(self.last_updated) if self.last_updated else None,
        )

    @classmethod
    def from_domain(cls, config: ScheduleConfig) -> "SchedulePayload":
        return cls(
            schedule=WeeklySchedulePayload.from_domain(config.weekly),
            session_duration=config.session_duration,
            special_dates=[SpecialDatePayload.from_domain(entry) for entry in config.special_dates],
            recurring_holidays=[
                RecurringHolidayPayload.from_domain(entry) for entry in config.recurring_holidays
            ],
            seasonal_schedules=[
                SeasonalSchedulePayload.from_domain(entry) for entry in config.seasonal_schedules
            ],
            last_updated=config.last_updated,
        )

    def to_document(self) -> Dict[str, Any]:
        """Serialize to the camelCase, JSON-compatible document layout."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)

    def data_quality_warnings(self) -> List[str]:
        """Anomalies that are accepted but resolved by first-match ordering."""
        return collect_data_quality_warnings(self.to_domain())


def _overlapping_slot_pairs(slots) -> List[str]:
    pairs = []
    for index, slot in enumerate(slots):
        for other in slots[index + 1:]:
            if slot.overlaps(other):
                pairs.append(f"{slot} / {other}")
    return pairs


def collect_data_quality_warnings(config: ScheduleConfig) -> List[str]:
    """
    Flag schedule anomalies that are not hard errors.

    Duplicates are resolved by stored order (the first entry wins) and
    overlapping windows produce overlapping slots, so both are worth a warning.
    """
    warnings: List[str] = []

    def check_day(label: str, day: DaySchedule) -> None:
        if day.enabled and not day.time_slots:
            warnings.append(f"{label} is enabled but has no time slots")
        for pair in _overlapping_slot_pairs(day.time_slots):
            warnings.append(f"{label} has overlapping time slots: {pair}")

    for weekday in Weekday:
        check_day(weekday.value, config.weekly.for_weekday(weekday))

    seen_dates: Dict[dt.date, str] = {}
    for special in config.special_dates:
        if special.date in seen_dates:
            warnings.append(
                f"Special date {special.date} is defined more than once; "
                f"'{seen_dates[special.date]}' takes precedence"
            )
        else:
            seen_dates[special.date] = special.description
        if not special.is_full_day_off and not special.time_slots:
            warnings.append(f"Special date {special.date} is open but has no time slots")
        for pair in _overlapping_slot_pairs(special.time_slots):
            warnings.append(f"Special date {special.date} has overlapping time slots: {pair}")

    seen_holidays: Dict[tuple, str] = {}
    for holiday in config.recurring_holidays:
        key = (holiday.month, holiday.day)
        label = f"{holiday.month:02d}-{holiday.day:02d}"
        if key in seen_holidays:
            warnings.append(
                f"Recurring holiday {label} is defined more than once; "
                f"'{seen_holidays[key]}' takes precedence"
            )
        else:
            seen_holidays[key] = holiday.description
        if not holiday.occurs_in_calendar():
            warnings.append(f"Recurring holiday {label} ({holiday.description}) never occurs")
        if not holiday.is_full_day_off and not holiday.time_slots:
            warnings.append(f"Recurring holiday {label} is open but has no time slots")
        for pair in _overlapping_slot_pairs(holiday.time_slots):
            warnings.append(f"Recurring holiday {label} has overlapping time slots: {pair}")

    seasons = config.seasonal_schedules
    for index, season in enumerate(seasons):
        for other in seasons[index + 1:]:
            if season.overlaps(other):
                warnings.append(
                    f"Seasonal schedules '{season.description}' and '{other.description}' "
                    f"overlap; '{season.description}' takes precedence"
                )
        if season.schedule is not None:
            for weekday in Weekday:
                check_day(
                    f"Season '{season.description}' {weekday.value}",
                    season.schedule.for_weekday(weekday),
                )

    return warnings


class AppConfig(BaseModel):
    """Deployment settings."""
    timezone: str = DEFAULT_TIMEZONE
    schedule_file: Path = Path("schedule.yaml")
    log_level: str = "WARNING"
    week_days: int = 7

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Ensure the timezone is a known IANA name."""
        try:
            pendulum.timezone(value)
        except Exception as exc:
            raise ValueError(f"Unknown timezone: {value!r}") from exc
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Normalize and validate the logging level name."""
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {value!r}")
        return level

    @field_validator("week_days")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("value must be greater than zero")
        return value

    def resolve_schedule_file(self, base_dir: Path) -> Path:
        """Return the schedule file path, relative paths taken from ``base_dir``."""
        if self.schedule_file.is_absolute():
            return self.schedule_file
        return base_dir / self.schedule_file

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        logger.debug("Loaded settings from %s", config_path)
        return cls(**data)


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
