"""
Tests for domain models.
"""

from datetime import date, time

import pendulum
import pytest

from openhours.domain.exceptions import InvalidSessionDurationError, MalformedTimeSlotError
from openhours.domain.models import (
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
    parse_clock_time,
)


class TestClockTimes:
    """Tests for HH:MM parsing."""

    def test_parse_valid_times(self):
        assert parse_clock_time("08:00") == time(8, 0)
        assert parse_clock_time("9:30") == time(9, 30)
        assert parse_clock_time("23:59") == time(23, 59)

    @pytest.mark.parametrize("value", ["24:00", "12:60", "8am", "", "08-00", "08:0", None])
    def test_parse_invalid_times(self, value):
        with pytest.raises(MalformedTimeSlotError):
            parse_clock_time(value)

    def test_malformed_time_is_value_error(self):
        """Callers that only know ValueError still catch it."""
        with pytest.raises(ValueError):
            parse_clock_time("noon")


class TestTimeSlot:
    """Tests for TimeSlot model."""

    def test_create_valid_time_slot(self):
        slot = TimeSlot.parse("09:00", "17:00")

        assert slot.start == time(9, 0)
        assert slot.end == time(17, 0)
        assert slot.start_time == "09:00"
        assert str(slot) == "09:00-17:00"

    def test_invalid_order_raises_error(self):
        with pytest.raises(MalformedTimeSlotError, match="must be before"):
            TimeSlot.parse("17:00", "09:00")

        with pytest.raises(MalformedTimeSlotError):
            TimeSlot.parse("09:00", "09:00")

    def test_overlaps(self):
        morning = TimeSlot.parse("09:00", "12:00")
        late_morning = TimeSlot.parse("11:00", "14:00")
        afternoon = TimeSlot.parse("12:00", "17:00")

        assert morning.overlaps(late_morning)
        assert late_morning.overlaps(morning)
        assert not morning.overlaps(afternoon)

    def test_anchor(self):
        slot = TimeSlot.parse("09:30", "11:00")

        anchored = slot.anchor(date(2024, 11, 25), "Europe/Berlin")

        assert anchored.start == pendulum.parse("2024-11-25 09:30", tz="Europe/Berlin")
        assert anchored.end == pendulum.parse("2024-11-25 11:00", tz="Europe/Berlin")
        assert anchored.duration_minutes() == 90


class TestAvailabilitySlot:
    """Tests for AvailabilitySlot model."""

    def test_invalid_range_raises_error(self):
        start = pendulum.parse("2024-11-25 17:00", tz="Europe/Berlin")
        end = pendulum.parse("2024-11-25 09:00", tz="Europe/Berlin")

        with pytest.raises(ValueError, match="Start time .* must be before end time"):
            AvailabilitySlot(start=start, end=end)

    def test_contains(self):
        slot = AvailabilitySlot(
            start=pendulum.parse("2024-11-25 09:00", tz="Europe/Berlin"),
            end=pendulum.parse("2024-11-25 12:00", tz="Europe/Berlin"),
        )

        assert slot.contains(slot.start, slot.end)
        assert slot.contains(slot.start.add(minutes=10), slot.end.subtract(minutes=10))
        assert not slot.contains(slot.start.subtract(minutes=1), slot.end)


class TestWeeklySchedule:
    """Tests for WeeklySchedule model."""

    def test_default_schedule(self):
        weekly = WeeklySchedule.default()

        assert weekly.for_weekday(Weekday.MONDAY).enabled
        assert weekly.for_weekday(Weekday.FRIDAY).enabled
        assert not weekly.for_weekday(Weekday.SATURDAY).enabled
        assert not weekly.for_weekday(Weekday.SUNDAY).enabled
        # Weekend hours are stored even though the days are disabled
        assert weekly.for_weekday(Weekday.SUNDAY).time_slots == (TimeSlot.parse("08:00", "17:00"),)

    def test_weekday_names_are_accepted(self):
        weekly = WeeklySchedule(days={weekday.value: DaySchedule() for weekday in Weekday})

        assert set(weekly.days) == set(Weekday)

    def test_missing_day_raises_error(self):
        days = {weekday: DaySchedule() for weekday in Weekday if weekday != Weekday.SUNDAY}

        with pytest.raises(ValueError, match="sunday"):
            WeeklySchedule(days=days)

    def test_unknown_day_raises_error(self):
        days = {weekday.value: DaySchedule() for weekday in Weekday}
        days["funday"] = DaySchedule()

        with pytest.raises(ValueError, match="Unknown weekday"):
            WeeklySchedule(days=days)

    def test_for_date(self):
        weekly = WeeklySchedule.default()

        assert weekly.for_date(date(2024, 11, 25)) is weekly.for_weekday(Weekday.MONDAY)
        assert Weekday.from_date(date(2024, 11, 24)) == Weekday.SUNDAY

    def test_disabled_day_has_no_open_slots(self):
        day = DaySchedule(enabled=False, time_slots=[TimeSlot.parse("08:00", "17:00")])

        assert day.time_slots == (TimeSlot.parse("08:00", "17:00"),)
        assert day.open_slots() == ()


class TestOverrides:
    """Tests for special dates, recurring holidays and seasons."""

    def test_special_date_type_is_closed_set(self):
        assert SpecialDate(date=date(2024, 1, 5), type="vacation", description="x").type == SpecialDateType.VACATION

        with pytest.raises(ValueError):
            SpecialDate(date=date(2024, 1, 5), type="closed", description="x")

    def test_recurring_holiday_matches_any_year(self):
        holiday = RecurringHoliday(month=1, day=1, description="New Year")

        assert holiday.matches(date(1999, 1, 1))
        assert holiday.matches(date(2031, 1, 1))
        assert not holiday.matches(date(2024, 1, 2))

    def test_recurring_holiday_ranges(self):
        with pytest.raises(ValueError):
            RecurringHoliday(month=13, day=1, description="x")
        with pytest.raises(ValueError):
            RecurringHoliday(month=1, day=32, description="x")

    def test_impossible_holiday_is_representable(self):
        """February 30 can be stored, it just never occurs."""
        february_30 = RecurringHoliday(month=2, day=30, description="Never")

        assert not february_30.occurs_in_calendar()
        assert RecurringHoliday(month=2, day=29, description="Leap day").occurs_in_calendar()

    def test_season_range(self):
        season = SeasonalSchedule(start_date=date(2024, 6, 1), end_date=date(2024, 6, 1), description="One day")

        assert season.contains(date(2024, 6, 1))
        assert not season.contains(date(2024, 6, 2))

        with pytest.raises(ValueError):
            SeasonalSchedule(start_date=date(2024, 6, 2), end_date=date(2024, 6, 1), description="Backwards")


class TestScheduleConfig:
    """Tests for the schedule aggregate."""

    def test_default_config(self):
        config = ScheduleConfig.default()

        assert config.session_duration == 60
        assert config.special_dates == ()
        assert config.recurring_holidays == ()
        assert config.seasonal_schedules == ()
        assert config.last_updated is None

    @pytest.mark.parametrize("duration", [0, -30, 45.0])
    def test_invalid_session_duration(self, duration):
        with pytest.raises(InvalidSessionDurationError):
            ScheduleConfig(session_duration=duration)

    def test_touched_returns_copy(self):
        config = ScheduleConfig.default()
        stamp = pendulum.datetime(2024, 5, 1, 12, tz="UTC")

        touched = config.touched(stamp)

        assert touched.last_updated == stamp
        assert config.last_updated is None


class TestEffectiveSchedule:
    """Tests for the resolver result."""

    def test_format_display_closed(self):
        effective = EffectiveSchedule(date=date(2024, 11, 23), tier=OverrideTier.WEEKLY, closed=True)

        assert effective.format_display() == "Saturday, 2024-11-23 | closed (weekly)"

    def test_format_display_open(self):
        effective = EffectiveSchedule(
            date=date(2024, 7, 4),
            tier=OverrideTier.SPECIAL_DATE,
            closed=False,
            time_slots=(TimeSlot.parse("09:00", "12:00"),),
            description="Short day",
        )

        assert effective.format_display() == "Thursday, 2024-07-04 | 09:00-12:00 (special date: Short day)"
