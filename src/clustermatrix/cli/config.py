"""
Config command for managing export configuration files.

Provides subcommands:
- init: Write a YAML file holding the default export configuration
- show: Print the effective configuration of a YAML file
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.syntax import Syntax

from clustermatrix.models.config import ExportConfig

app = typer.Typer(
    name="config",
    help="Manage export configuration files",
    no_args_is_help=True,
)

console = Console()


@app.command(name="init")
def init_config(
    output: Path = typer.Option(
        ...,
        "--output",
        "-o",
        help="Output YAML file",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Overwrite an existing file",
    ),
) -> None:
    """
    Write the default export configuration to a YAML file.

    Example:

        clustermatrix config init --output export.yaml
    """
    if output.exists() and not force:
        console.print(f"[red]Error: {output} already exists (use --force to overwrite)[/red]")
        raise typer.Exit(code=1) from None

    output.parent.mkdir(parents=True, exist_ok=True)
    ExportConfig().to_yaml(output)
    console.print(f"[bold green]Wrote default configuration to {output}[/bold green]")


@app.command(name="show")
def show_config(
    config_path: Path = typer.Argument(
        ...,
        help="YAML export configuration",
        exists=True,
        dir_okay=False,
    ),
) -> None:
    """Print the effective configuration, with defaults filled in."""
    try:
        config = ExportConfig.from_yaml(config_path)
    except ValueError as e:
        console.print(f"[red]Invalid configuration: {e}[/red]")
        raise typer.Exit(code=1) from None

    console.print(Syntax(config.to_yaml_str(), "yaml"))
