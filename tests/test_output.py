"""Tests for the output formatting system.

Covers:
- OutputFormat resolution (auto -> rich/plain based on TTY)
- NO_COLOR / TERM=dumb color disabling
- stdout vs stderr discipline
- Quiet and verbose modes
- print_table in JSON and plain modes
- Logging routed through Rich
- Global instance management
"""

from __future__ import annotations

import json
import logging

import pytest

from specgen.output import (
    OutputFormat,
    OutputManager,
    _should_disable_color,
    configure_logging,
    get_output,
    reset_output,
    set_output,
)
from specgen import output as output_module


# ------------------------------------------------------------------ #
# Fixtures
# ------------------------------------------------------------------ #


@pytest.fixture()
def non_tty(monkeypatch):
    monkeypatch.setattr("specgen.output._is_tty", lambda: False)


@pytest.fixture()
def tty(monkeypatch):
    monkeypatch.setattr("specgen.output._is_tty", lambda: True)
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.delenv("TERM", raising=False)


@pytest.fixture()
def _restore_specgen_logger():
    logger = logging.getLogger("specgen")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate


# ------------------------------------------------------------------ #
# Format resolution
# ------------------------------------------------------------------ #


class TestOutputFormatResolution:
    def test_auto_plain_when_not_tty(self, non_tty):
        assert OutputManager().format == OutputFormat.PLAIN

    def test_auto_rich_when_tty(self, tty):
        assert OutputManager().format == OutputFormat.RICH

    def test_auto_plain_when_no_color(self, tty):
        assert OutputManager(no_color=True).format == OutputFormat.PLAIN

    def test_explicit_json(self, tty):
        assert OutputManager(format=OutputFormat.JSON).format == OutputFormat.JSON


class TestColorDisabling:
    def test_no_color_env(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "")
        assert _should_disable_color() is True

    def test_term_dumb(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        assert _should_disable_color() is True

    def test_enabled_by_default(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        assert _should_disable_color() is False


# ------------------------------------------------------------------ #
# stdout / stderr discipline
# ------------------------------------------------------------------ #


class TestStreams:
    def test_data_goes_to_stdout(self, capsys, non_tty):
        OutputManager(no_color=True).print_data("payload")
        captured = capsys.readouterr()
        assert captured.out == "payload\n"
        assert captured.err == ""

    def test_diagnostics_go_to_stderr(self, capsys, non_tty):
        mgr = OutputManager(no_color=True)
        mgr.info("working")
        mgr.warning("careful")
        mgr.error("broken")
        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err.splitlines() == ["working", "Warning: careful", "Error: broken"]

    def test_quiet_suppresses_info_not_errors(self, capsys, non_tty):
        mgr = OutputManager(no_color=True, quiet=True)
        mgr.info("hidden")
        mgr.success("hidden too")
        mgr.error("shown")
        assert capsys.readouterr().err == "Error: shown\n"

    def test_debug_only_when_verbose(self, capsys, non_tty):
        OutputManager(no_color=True).debug("nope")
        OutputManager(no_color=True, verbose=True).debug("yes")
        assert capsys.readouterr().err == "[debug] yes\n"


class TestPrintTable:
    def test_plain(self, capsys, non_tty):
        OutputManager(format=OutputFormat.PLAIN).print_table(
            ["Module", "File"], [["Widget", "lib/widget"], ["User", "lib/user"]]
        )
        assert capsys.readouterr().out == "Module\tFile\nWidget\tlib/widget\nUser\tlib/user\n"

    def test_json(self, capsys, non_tty):
        OutputManager(format=OutputFormat.JSON).print_table(
            ["Module", "File"], [["Widget", "lib/widget"]]
        )
        assert json.loads(capsys.readouterr().out) == [{"Module": "Widget", "File": "lib/widget"}]

    def test_rich_includes_cells(self, capsys, tty):
        OutputManager(format=OutputFormat.RICH).print_table(
            ["Module"], [["Widget"]], title="Files"
        )
        out = capsys.readouterr().out
        assert "Widget" in out and "Files" in out


# ------------------------------------------------------------------ #
# Logging
# ------------------------------------------------------------------ #


class TestConfigureLogging:
    def test_verbose_enables_debug(self, non_tty, _restore_specgen_logger):
        configure_logging(OutputManager(verbose=True))
        logger = logging.getLogger("specgen")
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert logger.propagate is False

    def test_default_is_warning(self, non_tty, _restore_specgen_logger):
        configure_logging(OutputManager())
        assert logging.getLogger("specgen").level == logging.WARNING

    def test_reconfigure_replaces_handler(self, non_tty, _restore_specgen_logger):
        configure_logging(OutputManager())
        configure_logging(OutputManager(verbose=True))
        assert len(logging.getLogger("specgen").handlers) == 1


# ------------------------------------------------------------------ #
# Global instance
# ------------------------------------------------------------------ #


class TestGlobalInstance:
    def test_lazy_default(self):
        reset_output()
        assert isinstance(get_output(), OutputManager)
        assert get_output() is get_output()

    def test_set_and_reset(self):
        mgr = OutputManager(quiet=True)
        set_output(mgr)
        assert get_output() is mgr
        reset_output()
        assert get_output() is not mgr

    def test_module_helpers_delegate(self, capsys, non_tty):
        set_output(OutputManager(no_color=True))
        output_module.info("via helper")
        output_module.error("also via helper")
        assert capsys.readouterr().err == "via helper\nError: also via helper\n"
