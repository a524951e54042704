"""
Main CLI entry point for clustermatrix.

Provides subcommands:
- export: Write the correlation heatmap of a clustering run
- config: Manage export configuration files
"""

from __future__ import annotations

import typer
from rich import print as rprint
from rich.console import Console

from clustermatrix import __version__

app = typer.Typer(
    name="clustermatrix",
    help="Correlation heatmaps for clustered DNA matches",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        rprint(f"clustermatrix version {__version__}")
        raise typer.Exit


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """
    Clustermatrix: correlation heatmaps for clustered DNA matches.

    Renders the output of a hierarchical clustering run as a partitioned,
    color-coded correlation matrix for spreadsheet inspection.
    """


# Import subcommands
from clustermatrix.cli import config, export

# Register subcommands
app.add_typer(export.app, name="export")
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
