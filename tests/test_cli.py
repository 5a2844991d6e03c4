"""
Tests for the command line interface.
"""

import pytest
from typer.testing import CliRunner

from repeatbooker import __version__
from repeatbooker.cli.app import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def no_config(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.delenv("SUPABASE_SERVICE_ROLE_KEY", raising=False)


def test_preview_marks_days_off():
    result = runner.invoke(app, ["preview", "--date", "2024-03-01", "--repeat", "daily", "--until", "2024-03-08"])

    assert result.exit_code == 0
    assert result.output.count("day off") == 2
    assert result.output.count("candidate") == 5


def test_preview_rejects_unknown_repeat():
    result = runner.invoke(app, ["preview", "--date", "2024-03-01", "--repeat", "yearly"])

    assert result.exit_code != 0


def test_expand_mock_weekly():
    result = runner.invoke(app, [
        "expand", "--mock",
        "--room", "R1",
        "--date", "2024-01-01",
        "--start", "10:00",
        "--end", "11:00",
        "--user", "u1",
        "--repeat", "weekly",
        "--until", "2024-01-22",
    ])

    assert result.exit_code == 0
    assert "2 repeated booking(s) stored" in result.output
    assert "Conflicts: 1" in result.output


def test_expand_disabled_room_fails():
    result = runner.invoke(app, [
        "expand", "--mock",
        "--room", "R3",
        "--date", "2024-01-01",
        "--start", "10:00",
        "--end", "11:00",
        "--user", "u1",
    ])

    assert result.exit_code == 1
    assert "not enabled" in result.output


def test_version():
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert __version__ in result.output
