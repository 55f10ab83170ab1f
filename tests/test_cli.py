"""
Tests for the Typer command line.
"""

import pytest
from typer.testing import CliRunner

from mentorbook.cli.app import app

runner = CliRunner()


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        f"""
database_url: "sqlite:///{tmp_path / 'cli.db'}"
timezone: "Europe/Berlin"
users:
  - id: ada
    name: Ada Lovelace
    role: mentor
    email: ada@example.com
  - id: grace
    name: Grace Hopper
    role: mentee
""",
        encoding="utf-8",
    )
    return str(path)


def _invoke(*args):
    return runner.invoke(app, list(args))


def test_booking_flow(config_file):
    """Window, slots, booking and session listing through the CLI."""
    result = _invoke("init-db", "-c", config_file)
    assert result.exit_code == 0, result.output

    result = _invoke("add-window", "ada", "monday", "09:00", "10:00", "-c", config_file)
    assert result.exit_code == 0, result.output
    assert "09:00, 09:30" in result.output

    result = _invoke("slots", "ada", "--date", "2024-11-25", "-c", config_file)
    assert result.exit_code == 0, result.output
    assert "2 free slot(s)" in result.output

    result = _invoke("book", "ada", "--mentee", "grace", "--date", "2024-11-25", "--slot", "09:00", "-c", config_file)
    assert result.exit_code == 0, result.output
    assert "Session 1 created" in result.output

    result = _invoke("book", "ada", "--mentee", "grace", "--date", "2024-11-25", "--slot", "09:00", "-c", config_file)
    assert result.exit_code == 1
    assert "not available for the selected time" in result.output

    result = _invoke("sessions", "grace", "--role", "mentee", "-c", config_file)
    assert result.exit_code == 0, result.output
    assert "09:00" in result.output

    result = _invoke("set-status", "1", "confirmed", "-c", config_file)
    assert result.exit_code == 0, result.output
    assert "successfully confirmed" in result.output


def test_not_available_this_day(config_file):
    _invoke("add-window", "ada", "0", "09:00", "10:00", "-c", config_file)

    result = _invoke("slots", "ada", "--date", "2024-11-24", "-c", config_file)

    assert result.exit_code == 0
    assert "not available this day of the week" in result.output


def test_schedule_and_update(config_file):
    _invoke("add-window", "ada", "tuesday", "09:00", "10:00", "-c", config_file)

    result = _invoke("update-window", "1", "14:00", "15:00", "-c", config_file)
    assert result.exit_code == 0, result.output

    result = _invoke("schedule", "ada", "-c", config_file)
    assert result.exit_code == 0, result.output
    assert "Tuesday" in result.output
    assert "14:00 - 15:00" in result.output


def test_invalid_range(config_file):
    result = _invoke("add-window", "ada", "monday", "10:00", "09:00", "-c", config_file)

    assert result.exit_code == 1
    assert "must be before end time" in result.output


def test_unknown_mentor(config_file):
    result = _invoke("slots", "nobody", "--date", "2024-11-25", "-c", config_file)

    assert result.exit_code == 1
    assert "Mentor not found" in result.output


def test_mentors(config_file):
    result = _invoke("mentors", "-c", config_file)

    assert result.exit_code == 0
    assert "Ada Lovelace" in result.output
    assert "Grace Hopper" not in result.output


def test_missing_config(tmp_path):
    result = _invoke("mentors", "-c", str(tmp_path / "missing.yaml"))

    assert result.exit_code == 1
    assert "Config file not found" in result.output


def test_session_for_participant(config_file):
    """A session is shown to its mentee and hidden from everyone else."""
    _invoke("add-window", "ada", "monday", "23:00", "24:00", "-c", config_file)
    _invoke("book", "ada", "--mentee", "grace", "--date", "2024-11-25", "--slot", "23:30", "--note", "late call", "-c", config_file)

    result = _invoke("session", "1", "--user", "grace", "--role", "mentee", "-c", config_file)
    assert result.exit_code == 0, result.output
    assert "Monday, 2024-11-25 | 23:30 (requested)" in result.output
    assert "late call" in result.output

    result = _invoke("session", "1", "--user", "ada", "--role", "mentee", "-c", config_file)
    assert result.exit_code == 1
    assert "Session 1 not found" in result.output

    result = _invoke("schedule", "ada", "-c", config_file)
    assert "23:00 - 24:00" in result.output
