"""
Integration tests for the meetwatch command line.

Commands run against the sample .ics file with the coordinator clock pinned
to 2024-03-15 10:00 UTC.
"""

import argparse
import json
from datetime import datetime, timezone
from unittest.mock import patch

import pytest
import structlog
from pydantic import ValidationError

from meetwatch.calendar.coordinator import SyncCoordinator
from meetwatch.cli import _load, build_parser, main


pytestmark = pytest.mark.integration


FIXED_NOW = datetime(2024, 3, 15, 10, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def pinned_environment():
    """Pin the clock and route log events through stdlib so stdout holds only command output."""
    structlog.configure(
        processors=[structlog.processors.KeyValueRenderer()],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
    )
    with patch.object(SyncCoordinator, "_default_clock", lambda self: FIXED_NOW), patch(
        "meetwatch.cli.setup_logging_from_config"
    ):
        yield
    structlog.reset_defaults()


class TestListCommand:
    """Tests for `meetwatch list`."""

    def test_today(self, config_file, capsys):
        main(["--config", str(config_file), "list"])

        out = capsys.readouterr().out
        assert "Today:" in out
        assert "Standup (moved)" in out
        assert "https://zoom.us/j/5551234567?pwd=secret" in out
        assert "Design Review" not in out

    def test_all_days_json(self, config_file, capsys):
        main(["--config", str(config_file), "list", "--all", "--json"])

        payload = json.loads(capsys.readouterr().out)
        assert list(payload) == ["yesterday", "today", "tomorrow"]
        assert [m["title"] for m in payload["yesterday"]] == ["Standup"]
        assert [m["title"] for m in payload["today"]] == ["Standup (moved)"]
        assert payload["tomorrow"][0]["platform"] == "googleMeet"

    def test_ics_flag_overrides_config(self, tmp_path, ics_file, capsys):
        main(["--config", str(tmp_path / "none.yaml"), "list", "--ics", str(ics_file), "--json"])

        payload = json.loads(capsys.readouterr().out)
        assert [m["title"] for m in payload["today"]] == ["Standup (moved)"]

    def test_missing_calendar_exits_1(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["list", "--ics", str(tmp_path / "missing.ics")])

        assert exc_info.value.code == 1
        err = capsys.readouterr().err
        assert "Calendar access not granted" in err
        assert "Grant calendar access" in err

    def test_unreadable_calendar_exits_1(self, tmp_path, capsys):
        broken = tmp_path / "broken.ics"
        broken.write_text("not a calendar")

        with pytest.raises(SystemExit) as exc_info:
            main(["list", "--ics", str(broken)])

        assert exc_info.value.code == 1
        err = capsys.readouterr().err
        assert "Failed to fetch calendar events" in err
        assert "try again" in err


class TestClassifyCommand:
    """Tests for `meetwatch classify`."""

    def test_classify(self, capsys):
        main(["classify", "https://company.zoom.us/j/1", "https://meet.google.com/", "https://example.com"])

        lines = capsys.readouterr().out.splitlines()
        assert lines[0].startswith("Zoom")
        assert "ok" in lines[0]
        assert lines[1].startswith("Unknown")
        assert lines[2].startswith("Unknown")
        assert "no meeting link" in lines[2]


class TestParser:
    """Tests for argument parsing and top-level flags."""

    def test_version(self, capsys):
        main(["--version"])

        assert capsys.readouterr().out.startswith("meetwatch version")

    def test_no_command_prints_help(self, capsys):
        main([])

        assert "usage: meetwatch" in capsys.readouterr().out

    def test_watch_interval(self):
        args = build_parser().parse_args(["watch", "--interval", "30"])

        assert args.interval == 30.0
        assert args.func.__name__ == "cmd_watch"

    @pytest.mark.parametrize("value", ["0", "-5", "nan", "soon"])
    def test_watch_interval_must_be_positive(self, value, capsys):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["watch", "--interval", value])

        assert exc_info.value.code == 2
        assert "--interval" in capsys.readouterr().err


class TestLoad:
    """Tests for command-line overrides applied to the loaded config."""

    def test_interval_override(self, tmp_path):
        args = argparse.Namespace(config=str(tmp_path / "none.yaml"), ics=None, interval=30.0)

        config = _load(args)

        assert config.refresh.interval_seconds == 30.0
        assert config.refresh.wake_refresh_delay_seconds == 2.0

    @pytest.mark.parametrize("interval", [0.0, -5.0])
    def test_non_positive_interval_rejected(self, tmp_path, interval):
        """Overrides go through the same validation as the YAML file."""
        args = argparse.Namespace(config=str(tmp_path / "none.yaml"), ics=None, interval=interval)

        with pytest.raises(ValidationError):
            _load(args)
