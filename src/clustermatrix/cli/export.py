"""
Export command for writing correlation heatmaps.

Provides subcommands:
- heatmap: Write the clustered correlation matrix to Excel or delimited text
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from clustermatrix.cli.utils import QuietConsole, configure_logging, export_progress
from clustermatrix.core.exceptions import (
    ClusterMatrixError,
    ConfigurationError,
    MatchDataError,
    PersistenceError,
    TreeError,
)
from clustermatrix.export.exporter import RetryDecision
from clustermatrix.models.config import ExportConfig

app = typer.Typer(
    name="export",
    help="Export clustered correlation matrices",
    no_args_is_help=True,
)

console = Console()


def _prompt_retry(error: PersistenceError) -> RetryDecision:
    """Ask the user whether a failed save should be retried."""
    console.print(f"\n[yellow]An error occurred while saving {error.path}:[/yellow]")
    console.print(f"[yellow]{error.cause}[/yellow]\n")
    if typer.confirm("Try again?", default=True):
        return RetryDecision.RETRY
    return RetryDecision.ABORT


def _never_retry(error: PersistenceError) -> RetryDecision:
    return RetryDecision.ABORT


@app.command(name="heatmap")
def heatmap(
    tree: Path = typer.Option(
        ...,
        "--tree",
        "-t",
        help="Clustering tree in Newick format; tip labels are match indices",
        exists=True,
        dir_okay=False,
    ),
    matches: Path = typer.Option(
        ...,
        "--matches",
        "-m",
        help="Matches table (index, name, test_id, shared_centimorgans, ...)",
        exists=True,
        dir_okay=False,
    ),
    correlations: Path = typer.Option(
        ...,
        "--correlations",
        "-c",
        help="Correlations table in long form (index, other_index, value)",
        exists=True,
        dir_okay=False,
    ),
    clusters: Path = typer.Option(
        ...,
        "--clusters",
        "-k",
        help="Cluster assignment table (index, cluster_number)",
        exists=True,
        dir_okay=False,
    ),
    output: Path = typer.Option(
        ...,
        "--output",
        "-o",
        help="Output file (.xlsx, .csv or .tsv); wide matrices add -2, -3, ... files",
    ),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        help="YAML export configuration",
        exists=True,
        dir_okay=False,
    ),
    link_base_url: str | None = typer.Option(
        None,
        "--link-base-url",
        help="Base URL of match pages; adds a Link column",
    ),
    test_taker_id: str | None = typer.Option(
        None,
        "--test-taker-id",
        help="Ancestry test taker ID; adds a Link column to Ancestry match pages",
    ),
    max_columns: int | None = typer.Option(
        None,
        "--max-columns",
        help="Largest number of heatmap columns in one file",
        min=1,
    ),
    max_columns_per_split: int | None = typer.Option(
        None,
        "--max-columns-per-split",
        help="Heatmap columns per file when splitting",
        min=1,
    ),
    no_prompt: bool = typer.Option(
        False,
        "--no-prompt",
        help="Abort instead of asking to retry when a file cannot be saved",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress progress output",
    ),
) -> None:
    """
    Export the correlation heatmap of a clustering run.

    Every match in the tree becomes a row. Matches dense enough to act as
    correlation anchors also become columns, in tree order.

    Examples:

        # Excel heatmap with links to Ancestry match pages
        clustermatrix export heatmap -t tree.nwk -m matches.csv \\
            -c correlations.csv -k clusters.csv -o clusters.xlsx \\
            --test-taker-id 0123-ABCD

        # Plain CSV
        clustermatrix export heatmap -t tree.nwk -m matches.csv \\
            -c correlations.csv -k clusters.csv -o clusters.csv
    """
    from clustermatrix.core.io_utils import (
        load_cluster_assignment,
        load_correlations,
        load_matches,
    )
    from clustermatrix.core.tree import load_cluster_tree
    from clustermatrix.export.exporter import CorrelationExporter
    from clustermatrix.export.sinks import sink_for_path

    out = QuietConsole(console, quiet=quiet)
    configure_logging(console, verbose=verbose, quiet=quiet)

    if link_base_url and test_taker_id:
        console.print("[red]Error: use either --link-base-url or --test-taker-id, not both[/red]")
        raise typer.Exit(code=1) from None
    if test_taker_id:
        link_base_url = ExportConfig.ancestry_link_base(test_taker_id)

    out.print("\n[bold blue]Clustermatrix Heatmap Export[/bold blue]\n")

    try:
        config = ExportConfig.from_yaml(config_path) if config_path else ExportConfig()
        config = config.with_overrides(
            link_base_url=link_base_url,
            max_columns=max_columns,
            max_columns_per_split=max_columns_per_split,
        )
        sink = sink_for_path(output)
    except (ValueError, ConfigurationError) as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(code=1) from None

    try:
        out.print(f"[bold]Matches:[/bold] {matches}")
        matches_by_index = load_matches(matches)
        out.print(f"[bold]Correlations:[/bold] {correlations}")
        coords = load_correlations(correlations)
        out.print(f"[bold]Clusters:[/bold] {clusters}")
        assignment = load_cluster_assignment(clusters)
        out.print(f"[bold]Tree:[/bold] {tree}")
        cluster_tree = load_cluster_tree(tree, coords)
    except MatchDataError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1) from None
    except TreeError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1) from None
    except ValueError as e:
        console.print(f"[red]Error reading input: {e}[/red]")
        if verbose:
            console.print_exception()
        raise typer.Exit(code=1) from None

    output.parent.mkdir(parents=True, exist_ok=True)

    try:
        with export_progress(console, quiet) as progress:
            exporter = CorrelationExporter(
                output,
                config=config,
                sink=sink,
                progress=progress,
                on_error=_never_retry if no_prompt else _prompt_retry,
            )
            result = exporter.export(cluster_tree, matches_by_index, assignment)
    except PersistenceError as e:
        console.print(f"\n[red]Export aborted: {e.message}[/red]")
        raise typer.Exit(code=1) from None
    except ClusterMatrixError as e:
        console.print(f"\n[red]Error: {e}[/red]")
        if verbose:
            console.print_exception()
        raise typer.Exit(code=1) from None

    if not result.paths:
        out.print("[yellow]Nothing to export: the clustering tree has no leaves.[/yellow]")
        return

    out.print("\n[bold green]Export complete![/bold green]")
    out.print(f"[bold]Rows:[/bold] {result.num_rows:,}")
    out.print(f"[bold]Columns:[/bold] {result.num_columns:,}")
    out.print(f"[bold]Clusterable threshold:[/bold] {result.threshold:.1f} cM")
    for path in result.paths:
        out.print(f"[bold]Output:[/bold] {path}")
    out.print()
