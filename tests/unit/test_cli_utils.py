"""
Unit tests for CLI utility functions.

Tests for RichProgressSink, export_progress, configure_logging, and
QuietConsole.
"""

from __future__ import annotations

import io
import logging

import pytest
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress

from clustermatrix.cli.utils import (
    QuietConsole,
    RichProgressSink,
    configure_logging,
    export_progress,
)


@pytest.fixture
def console() -> Console:
    return Console(file=io.StringIO(), force_terminal=False, width=100)


class TestRichProgressSink:
    """Tests for RichProgressSink."""

    def test_reset_creates_task(self, console: Console) -> None:
        with Progress(console=console) as progress:
            sink = RichProgressSink(progress)
            sink.reset("Saving clusters", 10)
            sink.increment()
            sink.increment(2)

            task = progress.tasks[0]
            assert task.description == "Saving clusters"
            assert task.total == 10
            assert task.completed == 3
        assert sink.completed == 3

    def test_second_reset_reuses_task(self, console: Console) -> None:
        with Progress(console=console) as progress:
            sink = RichProgressSink(progress)
            sink.reset("first", 5)
            sink.increment(5)
            sink.reset("second", 7)

            assert len(progress.tasks) == 1
            assert progress.tasks[0].total == 7
            assert progress.tasks[0].completed == 0
        assert sink.completed == 0

    def test_increment_before_reset(self, console: Console) -> None:
        with Progress(console=console) as progress:
            sink = RichProgressSink(progress)
            sink.increment()
            assert progress.tasks == []
        assert sink.completed == 1


class TestExportProgress:
    def test_yields_sink(self, console: Console) -> None:
        with export_progress(console) as sink:
            sink.reset("Saving clusters", 2)
            sink.increment(2)
        assert sink.total == 2
        assert sink.completed == 2

    def test_quiet_still_counts(self, console: Console) -> None:
        with export_progress(console, quiet=True) as sink:
            sink.reset("Saving clusters", 1)
            sink.increment()
        assert sink.completed == 1
        assert console.file.getvalue() == ""


class TestConfigureLogging:
    """Tests for configure_logging."""

    @pytest.fixture(autouse=True)
    def _restore_logger(self):
        logger = logging.getLogger("clustermatrix")
        handlers, level = list(logger.handlers), logger.level
        yield
        logger.handlers[:] = handlers
        logger.setLevel(level)

    @pytest.mark.parametrize(
        ("verbose", "quiet", "expected"),
        [
            (False, False, logging.WARNING),
            (True, False, logging.DEBUG),
            (False, True, logging.ERROR),
            (True, True, logging.ERROR),
        ],
    )
    def test_levels(self, console: Console, verbose: bool, quiet: bool, expected: int) -> None:
        configure_logging(console, verbose=verbose, quiet=quiet)
        assert logging.getLogger("clustermatrix").level == expected

    def test_single_rich_handler(self, console: Console) -> None:
        configure_logging(console)
        configure_logging(console)
        handlers = logging.getLogger("clustermatrix").handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0], RichHandler)

    def test_records_reach_console(self, console: Console) -> None:
        configure_logging(console)
        logging.getLogger("clustermatrix.core.partition").warning("last partition is empty")
        assert "last partition is empty" in console.file.getvalue()


class TestQuietConsole:
    """Tests for QuietConsole wrapper class."""

    def test_print_when_not_quiet(self, console: Console) -> None:
        qc = QuietConsole(console, quiet=False)
        qc.print("Hello")
        assert "Hello" in console.file.getvalue()

    def test_print_suppressed_when_quiet(self, console: Console) -> None:
        qc = QuietConsole(console, quiet=True)
        qc.print("Hello")
        assert console.file.getvalue() == ""

    def test_delegates_attributes(self, console: Console) -> None:
        qc = QuietConsole(console, quiet=True)
        assert qc.width == console.width
        assert qc.console is console
