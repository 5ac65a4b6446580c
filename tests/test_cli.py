"""
Tests for the command line interface.
"""

from pathlib import Path

import yaml
from typer.testing import CliRunner

from openhours.cli.app import app

runner = CliRunner()


def _write_config(tmp_path: Path) -> Path:
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        yaml.safe_dump({"timezone": "Europe/Berlin", "schedule_file": "schedule.yaml"}),
        encoding="utf-8",
    )
    return config_path


def _write_payload(tmp_path: Path, **overrides) -> Path:
    day = {"enabled": True, "timeSlots": [{"startTime": "09:00", "endTime": "12:00"}]}
    closed = {"enabled": False, "timeSlots": []}
    payload = {
        "schedule": {
            "monday": day,
            "tuesday": day,
            "wednesday": day,
            "thursday": day,
            "friday": day,
            "saturday": closed,
            "sunday": closed,
        },
        "sessionDuration": 60,
        "specialDates": [],
        "recurringHolidays": [{"month": 1, "day": 1, "description": "New Year"}],
        "seasonalSchedules": [],
    }
    payload.update(overrides)
    payload_path = tmp_path / "payload.yaml"
    payload_path.write_text(yaml.safe_dump(payload), encoding="utf-8")
    return payload_path


def test_init_creates_schedule(tmp_path: Path):
    config_path = _write_config(tmp_path)

    result = runner.invoke(app, ["init", "--config", str(config_path)])

    assert result.exit_code == 0
    assert (tmp_path / "schedule.yaml").exists()

    again = runner.invoke(app, ["init", "--config", str(config_path)])
    assert again.exit_code == 0
    assert "already exists" in again.output


def test_slots_for_weekday(tmp_path: Path):
    config_path = _write_config(tmp_path)

    result = runner.invoke(app, ["slots", "2024-11-27", "--config", str(config_path)])

    assert result.exit_code == 0
    assert "9 slot(s)" in result.output
    assert "08:00" in result.output


def test_slots_for_closed_day(tmp_path: Path):
    config_path = _write_config(tmp_path)

    result = runner.invoke(app, ["slots", "2024-11-23", "--config", str(config_path)])

    assert result.exit_code == 0
    assert "No bookable slots" in result.output


def test_slots_with_invalid_duration(tmp_path: Path):
    config_path = _write_config(tmp_path)

    result = runner.invoke(app, ["slots", "2024-11-27", "-d", "0", "--config", str(config_path)])

    assert result.exit_code == 1
    assert "Session duration" in result.output


def test_invalid_date(tmp_path: Path):
    config_path = _write_config(tmp_path)

    result = runner.invoke(app, ["day", "27.11.2024", "--config", str(config_path)])

    assert result.exit_code == 1


def test_update_then_query(tmp_path: Path):
    config_path = _write_config(tmp_path)
    payload_path = _write_payload(tmp_path)

    update = runner.invoke(app, ["update", str(payload_path), "--config", str(config_path)])
    assert update.exit_code == 0
    assert "Schedule saved" in update.output

    slots = runner.invoke(app, ["slots", "2024-11-27", "--config", str(config_path)])
    assert "3 slot(s)" in slots.output

    holiday = runner.invoke(app, ["day", "2025-01-01", "--config", str(config_path)])
    assert holiday.exit_code == 0
    assert "closed" in holiday.output
    assert "recurring holiday" in holiday.output


def test_update_rejects_invalid_payload(tmp_path: Path):
    config_path = _write_config(tmp_path)
    payload_path = _write_payload(tmp_path, sessionDuration=-5)

    result = runner.invoke(app, ["update", str(payload_path), "--config", str(config_path)])

    assert result.exit_code == 1
    assert "Invalid schedule data" in result.output
    assert not (tmp_path / "schedule.yaml").exists()


def test_check(tmp_path: Path):
    config_path = _write_config(tmp_path)

    inside = runner.invoke(app, ["check", "2024-11-27 09:00", "2024-11-27 10:30", "--config", str(config_path)])
    outside = runner.invoke(app, ["check", "2024-11-27 16:30", "2024-11-27 17:30", "--config", str(config_path)])

    assert inside.exit_code == 0
    assert "Available" in inside.output
    assert outside.exit_code == 2


def test_check_reversed_interval(tmp_path: Path):
    config_path = _write_config(tmp_path)

    result = runner.invoke(app, ["check", "2024-11-27 10:00", "2024-11-27 09:00", "--config", str(config_path)])

    assert result.exit_code == 2
    assert "Not available" in result.output


def test_week(tmp_path: Path):
    config_path = _write_config(tmp_path)

    result = runner.invoke(
        app, ["week", "--start", "2024-11-25", "--days", "3", "--config", str(config_path)]
    )

    assert result.exit_code == 0
    assert "2024-11-25" in result.output
    assert "2024-11-27" in result.output
    assert "2024-11-28" not in result.output


def test_missing_config_file(tmp_path: Path):
    result = runner.invoke(app, ["show", "--config", str(tmp_path / "missing.yaml")])

    assert result.exit_code == 1
    assert "Config file not found" in result.output
