"""Tests for the alrm command line."""

import io
import logging
from datetime import datetime, timedelta

import pytest
from typer.testing import CliRunner

from alrm import __version__, app as app_module
from alrm.app import app
from alrm.terminal import Terminal, TerminalConsole

runner = CliRunner()


@pytest.fixture
def clock(monkeypatch):
    """Freeze the CLI clock; sleeping advances it."""
    monkeypatch.delenv("FORCE_COLOR", raising=False)
    state = {"now": datetime(2024, 3, 14, 8, 0), "sleeps": 0}

    def fake_now():
        return state["now"]

    def fake_sleep(seconds):
        state["sleeps"] += 1
        state["now"] += timedelta(seconds=seconds)

    monkeypatch.setattr(app_module, "_now", fake_now)
    monkeypatch.setattr(app_module, "_sleep", fake_sleep)
    return state


@pytest.fixture
def alrm_logger():
    """Put the alrm logger back the way it was after -v installs a handler."""
    log = logging.getLogger("alrm")
    handlers, level = list(log.handlers), log.level
    yield log
    log.handlers[:] = handlers
    log.setLevel(level)


def test_prints_time_left_once(clock):
    """Test the default mode prints one line and exits 0."""
    result = runner.invoke(app, ["9"])
    assert result.exit_code == 0
    assert result.output == "01:00:00 until 9:00am today\n"
    assert clock["sleeps"] == 0


def test_words_are_joined(clock):
    """Test a marker given as its own word is understood."""
    clock["now"] = datetime(2024, 3, 14, 21, 0)
    result = runner.invoke(app, ["9:30", "pm"])
    assert result.exit_code == 0
    assert result.output == "00:30:00 until 9:30pm today\n"


def test_already_passed_counts_to_tomorrow(clock):
    """Test a past time counts down to tomorrow."""
    clock["now"] = datetime(2024, 3, 14, 9, 30)
    result = runner.invoke(app, ["9"])
    assert result.exit_code == 0
    assert "9:00am tomorrow" in result.output


def test_human_flag(clock):
    """Test --human prints the remaining time in words."""
    result = runner.invoke(app, ["9:15", "--human"])
    assert result.exit_code == 0
    assert result.output == "1 hour 15 minutes until 9:15am today\n"


def test_update_counts_down_to_zero(clock):
    """Test -u keeps updating until the time is reached, then exits 0."""
    clock["now"] = datetime(2024, 3, 14, 8, 59, 58)
    result = runner.invoke(app, ["9", "-u"])
    assert result.exit_code == 0
    assert clock["sleeps"] == 2
    assert "00:00:02 until 9:00am today" in result.output
    assert "00:00:01 until 9:00am today" in result.output
    assert result.output.endswith("Time's up! It is 9:00am.\n")


def test_parse_error_exits_non_zero(clock):
    """Test bad input reports the input and exits 1 without a countdown."""
    result = runner.invoke(app, ["abc"])
    assert result.exit_code == 1
    assert "Invalid format" in result.output
    assert "abc" in result.output
    assert "until" not in result.output


@pytest.mark.parametrize("text", ["24:00", "9:60", "18:30pm"])
def test_out_of_range_exits_non_zero(clock, text):
    """Test out-of-range and overconstrained input exit 1."""
    result = runner.invoke(app, [text])
    assert result.exit_code == 1
    assert text in result.output


def test_write_failure_exits_with_io_error(clock, monkeypatch):
    """Test a terminal write failure exits 74."""

    def broken(self, text):
        raise BrokenPipeError(32, "Broken pipe")

    monkeypatch.setattr("alrm.terminal.Terminal.write_line", broken)
    result = runner.invoke(app, ["9"])
    assert result.exit_code == 74


def test_version():
    """Test --version prints the version."""
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert result.output.strip() == f"alrm {__version__}"


class PipeFile(io.StringIO):
    def write(self, text):
        raise BrokenPipeError(32, "Broken pipe")


def test_closed_stdout_exits_with_io_error(clock, monkeypatch):
    """Test a closed stdout pipe exits 74 rather than the parse-error code."""
    monkeypatch.setattr(app_module, "Terminal", lambda: Terminal(TerminalConsole(file=PipeFile())))
    result = runner.invoke(app, ["9"])
    assert result.exit_code == 74
    assert "could not write to terminal" in result.output


def test_verbose_logs_debug_to_stderr(clock, alrm_logger):
    """Test -v logs how the time was resolved."""
    result = runner.invoke(app, ["9", "-v"])
    assert result.exit_code == 0
    assert "resolved '9'" in result.output
    assert "01:00:00 until 9:00am today" in result.output


def test_quiet_without_verbose(clock, alrm_logger):
    """Test without -v the only output is the countdown line."""
    result = runner.invoke(app, ["9"])
    assert result.exit_code == 0
    assert result.output == "01:00:00 until 9:00am today\n"
    assert alrm_logger.handlers == []


def test_missing_time_is_usage_error(clock):
    """Test running without a time exits with the usage error code."""
    result = runner.invoke(app, [])
    assert result.exit_code == 2
