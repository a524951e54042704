"""
Layout of one exported correlation matrix.

Builds a format-independent TabularDocument for an output partition: the
header row, one row per tree leaf, and the formatting hints (color scale,
number formats, column widths, frozen panes) that a tabular sink applies.

Column order:
    Cluster Number, Name, Test ID, [Link], Shared Centimorgans,
    [Shared Segments], [Longest Block], [Tree Type], [Tree Size], [Starred],
    [Shared Ancestor Hint], Correlated Clusters, Note, then one column per
    heatmap match.

Bracketed columns appear only when enabled: Link needs a link base URL, the
others need at least one match with a non-default value.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass

from clustermatrix.core.correlation import CorrelatedClusterResolver
from clustermatrix.core.partition import OutputPartition
from clustermatrix.core.tree import Leaf
from clustermatrix.models.config import ExportConfig
from clustermatrix.models.match import Match, TreeType

CellValue = str | int | float | None

# Header row plus one row per leaf; data starts on the second row
HEADER_ROW = 1
FIRST_DATA_ROW = HEADER_ROW + 1


@dataclass(frozen=True)
class ColumnCapabilities:
    """Which optional match columns have any data worth showing.

    Computed once per export from every match that has a row, so all
    partitions of a run share the same fixed columns.
    """

    shared_segments: bool = False
    longest_block: bool = False
    tree_type: bool = False
    tree_size: bool = False
    starred: bool = False
    shared_ancestor_hint: bool = False

    @classmethod
    def from_matches(cls, matches: Sequence[Match]) -> ColumnCapabilities:
        return cls(
            shared_segments=any(m.shared_segments > 0 for m in matches),
            longest_block=any(m.longest_block > 0 for m in matches),
            tree_type=any(m.tree_type != TreeType.UNDETERMINED for m in matches),
            tree_size=any(m.tree_size > 0 for m in matches),
            starred=any(m.starred for m in matches),
            shared_ancestor_hint=any(m.has_hint for m in matches),
        )


@dataclass(frozen=True)
class CellRange:
    """Rectangular block of cells, 1-based and inclusive."""

    first_row: int
    first_column: int
    last_row: int
    last_column: int


@dataclass(frozen=True)
class ColorScale:
    """Three-point color scale applied to a block of cells."""

    cells: CellRange
    low_value: float
    low_color: str
    mid_value: float
    mid_color: str
    high_value: float
    high_color: str


@dataclass(frozen=True)
class FormatHints:
    """Formatting a sink may apply; column numbers are 1-based."""

    color_scale: ColorScale | None
    decimal_columns: tuple[int, ...]
    decimal_format: str
    autofit_columns: tuple[int, ...]
    column_widths: Mapping[int, float]
    default_column_width: float
    rotated_header_columns: tuple[int, ...]
    hyperlink_columns: tuple[int, ...]
    freeze_row: int
    freeze_column: int


@dataclass
class TabularDocument:
    """A fully assembled sheet, ready for a tabular sink."""

    sheet_name: str
    headers: list[str]
    rows: list[list[CellValue]]
    hints: FormatHints
    file_suffix: int = 1
    num_fixed_columns: int = 0

    @property
    def num_matrix_columns(self) -> int:
        return len(self.headers) - self.num_fixed_columns


@dataclass
class _FixedColumn:
    header: str
    value: Callable[[Leaf, Match | None], CellValue]
    width: float | None = None
    autofit: bool = False
    decimal: bool = False
    rotate: bool = True
    hyperlink: bool = False


def _star(flag: bool) -> str | None:
    return "*" if flag else None


def _fixed_columns(
    capabilities: ColumnCapabilities,
    assignment: Mapping[int, int],
    resolver: CorrelatedClusterResolver,
    config: ExportConfig,
) -> list[_FixedColumn]:
    """Fixed leading columns, in display order."""
    style = config.heatmap
    columns: list[_FixedColumn] = []

    columns.append(_FixedColumn(
        "Cluster Number",
        lambda leaf, match: assignment.get(leaf.index),
        width=style.cluster_number_width,
    ))
    columns.append(_FixedColumn(
        "Name",
        lambda leaf, match: match.name if match else None,
        width=style.name_width,
        rotate=False,
    ))
    columns.append(_FixedColumn(
        "Test ID",
        lambda leaf, match: match.test_id if match else None,
        width=style.test_id_width,
        rotate=False,
    ))
    if config.link_base_url:
        columns.append(_FixedColumn(
            "Link",
            lambda leaf, match: config.link_for(match.test_id) if match else None,
            autofit=True,
            rotate=False,
            hyperlink=True,
        ))
    columns.append(_FixedColumn(
        "Shared Centimorgans",
        lambda leaf, match: match.shared_centimorgans if match else None,
        autofit=True,
        decimal=True,
    ))
    if capabilities.shared_segments:
        columns.append(_FixedColumn(
            "Shared Segments",
            lambda leaf, match: match.shared_segments if match else None,
            autofit=True,
        ))
    if capabilities.longest_block:
        columns.append(_FixedColumn(
            "Longest Block",
            lambda leaf, match: match.longest_block if match else None,
            autofit=True,
            decimal=True,
        ))
    if capabilities.tree_type:
        columns.append(_FixedColumn(
            "Tree Type",
            lambda leaf, match: match.tree_type.value if match else None,
            autofit=True,
        ))
    if capabilities.tree_size:
        columns.append(_FixedColumn(
            "Tree Size",
            lambda leaf, match: match.tree_size if match else None,
            autofit=True,
        ))
    if capabilities.starred:
        columns.append(_FixedColumn(
            "Starred",
            lambda leaf, match: _star(match.starred) if match else None,
            autofit=True,
        ))
    if capabilities.shared_ancestor_hint:
        columns.append(_FixedColumn(
            "Shared Ancestor Hint",
            lambda leaf, match: _star(match.has_hint) if match else None,
            autofit=True,
        ))
    columns.append(_FixedColumn(
        "Correlated Clusters",
        lambda leaf, match: ", ".join(str(n) for n in resolver.resolve(leaf)) or None,
        width=style.correlated_clusters_width,
    ))
    columns.append(_FixedColumn(
        "Note",
        lambda leaf, match: (match.note or None) if match else None,
        width=style.note_width,
        rotate=False,
    ))
    return columns


def _format_hints(
    fixed: list[_FixedColumn],
    num_rows: int,
    num_matrix_columns: int,
    config: ExportConfig,
) -> FormatHints:
    style = config.heatmap
    first_matrix_column = len(fixed) + 1

    color_scale = None
    if num_rows and num_matrix_columns:
        color_scale = ColorScale(
            cells=CellRange(
                first_row=FIRST_DATA_ROW,
                first_column=first_matrix_column,
                last_row=FIRST_DATA_ROW + num_rows - 1,
                last_column=first_matrix_column + num_matrix_columns - 1,
            ),
            low_value=style.low_value,
            low_color=style.low_color,
            mid_value=style.mid_value,
            mid_color=style.mid_color,
            high_value=style.high_value,
            high_color=style.high_color,
        )

    numbered = list(enumerate(fixed, start=1))
    return FormatHints(
        color_scale=color_scale,
        decimal_columns=tuple(i for i, col in numbered if col.decimal),
        decimal_format=style.decimal_format,
        autofit_columns=tuple(i for i, col in numbered if col.autofit),
        column_widths={i: col.width for i, col in numbered if col.width is not None},
        default_column_width=style.default_column_width,
        rotated_header_columns=tuple(i for i, col in numbered if col.rotate)
        + tuple(range(first_matrix_column, first_matrix_column + num_matrix_columns)),
        hyperlink_columns=tuple(i for i, col in numbered if col.hyperlink),
        freeze_row=FIRST_DATA_ROW,
        freeze_column=first_matrix_column,
    )


def assemble_document(
    partition: OutputPartition,
    matches_by_index: Mapping[int, Match],
    assignment: Mapping[int, int],
    resolver: CorrelatedClusterResolver,
    capabilities: ColumnCapabilities,
    config: ExportConfig,
    on_row: Callable[[], None] | None = None,
) -> TabularDocument:
    """
    Assemble the sheet for one output partition.

    Args:
        partition: Rows and heatmap columns to write.
        matches_by_index: Match details; leaves without a match get blank
            detail cells.
        assignment: Cluster number per leaf index.
        resolver: Correlated cluster lookup for the run.
        capabilities: Optional columns to include.
        config: Export configuration.
        on_row: Called once after each row is assembled.

    Returns:
        TabularDocument with one header row and one row per leaf. Zero or
        absent correlation values are left blank.
    """
    fixed = _fixed_columns(capabilities, assignment, resolver, config)
    column_indexes = [match.index for match in partition.columns]

    headers = [col.header for col in fixed] + [match.name for match in partition.columns]

    rows: list[list[CellValue]] = []
    for leaf in partition.rows:
        match = matches_by_index.get(leaf.index)
        row: list[CellValue] = [col.value(leaf, match) for col in fixed]
        for index in column_indexes:
            value = leaf.coord(index)
            row.append(float(value) if value else None)
        rows.append(row)
        if on_row is not None:
            on_row()

    return TabularDocument(
        sheet_name=config.sheet_name,
        headers=headers,
        rows=rows,
        hints=_format_hints(fixed, len(rows), len(column_indexes), config),
        file_suffix=partition.file_suffix,
        num_fixed_columns=len(fixed),
    )
