"""
Shared CLI utilities for clustermatrix commands.

Provides common functionality used across CLI modules.
"""

from __future__ import annotations

import logging
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)

from clustermatrix.export.exporter import ProgressCounter


class RichProgressSink(ProgressCounter):
    """Progress counter that mirrors its state on a Rich progress bar."""

    def __init__(self, progress: Progress) -> None:
        super().__init__()
        self._progress = progress
        self._task: TaskID | None = None

    def reset(self, description: str, total: int) -> None:
        super().reset(description, total)
        if self._task is None:
            self._task = self._progress.add_task(description, total=total)
        else:
            self._progress.reset(self._task, total=total, description=description)

    def increment(self, amount: int = 1) -> None:
        super().increment(amount)
        if self._task is not None:
            self._progress.advance(self._task, amount)


@contextmanager
def export_progress(
    console: Console | None = None,
    quiet: bool = False,
) -> Generator[RichProgressSink, None, None]:
    """Context manager for the export progress bar.

    The bar is hidden when quiet mode is enabled, while the returned sink
    still counts progress.

    Args:
        console: Rich Console instance.
        quiet: If True, suppress the progress display entirely.

    Yields:
        RichProgressSink to hand to the exporter.
    """
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=console,
        disable=quiet,
    ) as progress:
        yield RichProgressSink(progress)


def configure_logging(console: Console, verbose: bool = False, quiet: bool = False) -> None:
    """Route library log records to the console through Rich.

    Args:
        console: Console that receives log output.
        verbose: Show DEBUG records.
        quiet: Show only errors.
    """
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    logger = logging.getLogger("clustermatrix")
    logger.handlers.clear()
    logger.addHandler(RichHandler(console=console, show_path=False, markup=False))
    logger.setLevel(level)


class QuietConsole:
    """Console wrapper that suppresses output in quiet mode.

    This class wraps a Rich Console instance and conditionally suppresses
    print output when quiet mode is enabled. All other console methods
    are delegated to the wrapped instance.

    Example:
        >>> console = Console()
        >>> qc = QuietConsole(console, quiet=True)
        >>> qc.print("This won't be shown")  # Suppressed
    """

    def __init__(self, console: Console, quiet: bool = False):
        self._console = console
        self._quiet = quiet

    @property
    def console(self) -> Console:
        """Access the underlying Rich Console instance."""
        return self._console

    def print(self, *args: Any, **kwargs: Any) -> None:
        """Print to console unless quiet mode is enabled."""
        if not self._quiet:
            self._console.print(*args, **kwargs)

    def __getattr__(self, name: str) -> Any:
        return getattr(self._console, name)
