"""
I/O utilities for the upstream clustering outputs.

Reads the match, correlation, and cluster assignment tables produced by the
clustering stage. Tables may be CSV, TSV, or Parquet.
"""

from __future__ import annotations

import logging
from pathlib import Path

import polars as pl

from clustermatrix.core.exceptions import DuplicateMatchIndexError, MissingColumnsError
from clustermatrix.models.match import Match, TreeType

logger = logging.getLogger(__name__)

MATCH_REQUIRED_COLUMNS = ["index", "name", "test_id", "shared_centimorgans"]
MATCH_OPTIONAL_DEFAULTS: dict[str, object] = {
    "shared_segments": 0,
    "longest_block": 0.0,
    "tree_type": TreeType.UNDETERMINED.value,
    "tree_size": 0,
    "starred": False,
    "has_hint": False,
    "note": "",
}
CORRELATION_COLUMNS = ["index", "other_index", "value"]
CLUSTER_COLUMNS = ["index", "cluster_number"]


def read_dataframe(path: Path) -> pl.DataFrame:
    """
    Read DataFrame from file, auto-detecting format from extension.

    Supports: .csv, .tsv, .parquet, .csv.gz, .tsv.gz

    Args:
        path: Input file path.

    Returns:
        Polars DataFrame.

    Raises:
        ValueError: If file extension is not recognized.
    """
    suffix = path.suffix.lower()
    name = path.name.lower()

    if suffix == ".parquet":
        return pl.read_parquet(path)
    if suffix == ".csv" or name.endswith(".csv.gz"):
        return pl.read_csv(path)
    if suffix == ".tsv" or name.endswith(".tsv.gz"):
        return pl.read_csv(path, separator="\t")
    msg = f"Unrecognized file format: {path}"
    raise ValueError(msg)


def _require_columns(df: pl.DataFrame, path: Path, required: list[str]) -> None:
    missing = [col for col in required if col not in df.columns]
    if missing:
        raise MissingColumnsError(str(path), missing, required)


def load_matches(path: Path) -> dict[int, Match]:
    """
    Load match details keyed by match index.

    Optional columns that are absent, and null cells, take the Match
    defaults (0, False, empty string, or Undetermined tree type).

    Args:
        path: Matches table.

    Returns:
        Dict of match index to Match.

    Raises:
        MissingColumnsError: If a required column is absent.
        DuplicateMatchIndexError: If an index appears on more than one row.
    """
    df = read_dataframe(path)
    _require_columns(df, path, MATCH_REQUIRED_COLUMNS)

    absent = [col for col in MATCH_OPTIONAL_DEFAULTS if col not in df.columns]
    if absent:
        df = df.with_columns([pl.lit(MATCH_OPTIONAL_DEFAULTS[col]).alias(col) for col in absent])
    df = df.with_columns(
        pl.col("index").cast(pl.Int64),
        pl.col("name").cast(pl.Utf8).fill_null(""),
        pl.col("test_id").cast(pl.Utf8).fill_null(""),
        pl.col("shared_centimorgans").cast(pl.Float64),
        pl.col("shared_segments").cast(pl.Int64).fill_null(0),
        pl.col("longest_block").cast(pl.Float64).fill_null(0.0),
        pl.col("tree_type").cast(pl.Utf8).fill_null(TreeType.UNDETERMINED.value),
        pl.col("tree_size").cast(pl.Int64).fill_null(0),
        pl.col("starred").cast(pl.Boolean).fill_null(False),
        pl.col("has_hint").cast(pl.Boolean).fill_null(False),
        pl.col("note").cast(pl.Utf8).fill_null(""),
    )

    duplicated = df.filter(pl.col("index").is_duplicated())["index"].unique().sort().to_list()
    if duplicated:
        raise DuplicateMatchIndexError(str(path), duplicated)

    fields = MATCH_REQUIRED_COLUMNS + list(MATCH_OPTIONAL_DEFAULTS)
    matches = {
        row["index"]: Match(**{key: row[key] for key in fields})
        for row in df.iter_rows(named=True)
    }
    logger.info(f"Loaded {len(matches)} matches from {path}")
    return matches


def load_correlations(path: Path) -> dict[int, dict[int, float]]:
    """
    Load sparse correlation coordinates.

    The table is in long form, one row per (index, other_index) pair.
    Zero values are dropped so the coordinates stay sparse.

    Args:
        path: Correlations table with index, other_index, value columns.

    Returns:
        Nested dict {index: {other_index: value}}.
    """
    df = read_dataframe(path)
    _require_columns(df, path, CORRELATION_COLUMNS)

    df = df.select(
        pl.col("index").cast(pl.Int64),
        pl.col("other_index").cast(pl.Int64),
        pl.col("value").cast(pl.Float64),
    ).filter(pl.col("value").is_not_null() & (pl.col("value") != 0))

    coords: dict[int, dict[int, float]] = {}
    for index, other_index, value in df.iter_rows():
        coords.setdefault(index, {})[other_index] = value

    logger.info(f"Loaded {df.height} correlations for {len(coords)} matches from {path}")
    return coords


def load_cluster_assignment(path: Path) -> dict[int, int]:
    """
    Load cluster numbers keyed by match index.

    Rows with a null or non-positive cluster number are unassigned and
    left out of the mapping.
    """
    df = read_dataframe(path)
    _require_columns(df, path, CLUSTER_COLUMNS)

    df = df.select(
        pl.col("index").cast(pl.Int64),
        pl.col("cluster_number").cast(pl.Int64),
    ).filter(pl.col("cluster_number").is_not_null() & (pl.col("cluster_number") > 0))

    assignment = dict(df.iter_rows())
    logger.info(f"Loaded cluster numbers for {len(assignment)} matches from {path}")
    return assignment
