"""
Tabular sinks that persist an assembled TabularDocument.

- ExcelSink: .xlsx workbook via openpyxl, applying every formatting hint
  (color scale, number formats, widths, rotated headers, hyperlinks, frozen
  panes).
- CsvSink: plain .csv or .tsv via polars; formatting hints are ignored.

Sinks report any failure to write as PersistenceError so the exporter can
offer a retry.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

import polars as pl

from clustermatrix.core.constants import LINK_DISPLAY_TEXT
from clustermatrix.core.exceptions import PersistenceError, UnsupportedOutputFormatError
from clustermatrix.export.layout import FIRST_DATA_ROW, HEADER_ROW, TabularDocument

logger = logging.getLogger(__name__)

# Padding added to the longest value when auto-fitting a column
_AUTOFIT_PADDING = 2.0


class TabularSink(Protocol):
    """Anything that can persist a TabularDocument to a path."""

    def write(self, document: TabularDocument, path: Path) -> None: ...


class ExcelSink:
    """Write a document as an Excel workbook with heatmap formatting."""

    def write(self, document: TabularDocument, path: Path) -> None:
        from openpyxl import Workbook

        workbook = Workbook()
        worksheet = workbook.active
        worksheet.title = document.sheet_name

        _append_text_safe(worksheet, HEADER_ROW, document.headers)
        for offset, row in enumerate(document.rows):
            _append_text_safe(worksheet, FIRST_DATA_ROW + offset, row)

        self._apply_hints(worksheet, document)

        try:
            workbook.save(path)
        except OSError as e:
            raise PersistenceError(path, e) from e
        logger.debug(f"Wrote {len(document.rows)} rows x {len(document.headers)} columns to {path}")

    def _apply_hints(self, worksheet, document: TabularDocument) -> None:
        from openpyxl.formatting.rule import ColorScaleRule
        from openpyxl.styles import Alignment
        from openpyxl.utils import get_column_letter

        hints = document.hints
        last_row = HEADER_ROW + len(document.rows)

        for column in hints.rotated_header_columns:
            worksheet.cell(row=HEADER_ROW, column=column).alignment = Alignment(text_rotation=90)

        for column in hints.hyperlink_columns:
            for row in range(FIRST_DATA_ROW, last_row + 1):
                cell = worksheet.cell(row=row, column=column)
                if cell.value:
                    cell.hyperlink = cell.value
                    cell.value = LINK_DISPLAY_TEXT
                    cell.style = "Hyperlink"

        for column in hints.decimal_columns:
            for row in range(FIRST_DATA_ROW, last_row + 1):
                worksheet.cell(row=row, column=column).number_format = hints.decimal_format

        if hints.color_scale is not None:
            scale = hints.color_scale
            cells = scale.cells
            cell_range = (
                f"{get_column_letter(cells.first_column)}{cells.first_row}:"
                f"{get_column_letter(cells.last_column)}{cells.last_row}"
            )
            worksheet.conditional_formatting.add(
                cell_range,
                ColorScaleRule(
                    start_type="num",
                    start_value=scale.low_value,
                    start_color=scale.low_color,
                    mid_type="num",
                    mid_value=scale.mid_value,
                    mid_color=scale.mid_color,
                    end_type="num",
                    end_value=scale.high_value,
                    end_color=scale.high_color,
                ),
            )

        worksheet.sheet_format.defaultColWidth = hints.default_column_width
        for column, width in hints.column_widths.items():
            worksheet.column_dimensions[get_column_letter(column)].width = width
        for column in hints.autofit_columns:
            worksheet.column_dimensions[get_column_letter(column)].width = _fit_width(
                worksheet, column, last_row
            )

        worksheet.freeze_panes = worksheet.cell(row=hints.freeze_row, column=hints.freeze_column)


def _append_text_safe(worksheet, row: int, values: list) -> None:
    """
    Append one row, keeping user text as plain text.

    Control characters that worksheets cannot store are dropped, and text
    starting with "=" (a name such as "=Bob" or a note such as
    "=== maternal side ===") is stored as a string rather than a formula.
    """
    from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE

    cleaned = [ILLEGAL_CHARACTERS_RE.sub("", v) if isinstance(v, str) else v for v in values]
    worksheet.append(cleaned)
    for column, value in enumerate(cleaned, start=1):
        if isinstance(value, str) and value.startswith("="):
            worksheet.cell(row=row, column=column).data_type = "s"


def _fit_width(worksheet, column: int, last_row: int) -> float:
    """Width that fits the longest rendered value in a column."""
    longest = 0
    for row in range(HEADER_ROW, last_row + 1):
        value = worksheet.cell(row=row, column=column).value
        if value is not None:
            longest = max(longest, len(str(value)))
    return longest + _AUTOFIT_PADDING


class CsvSink:
    """Write a document as delimited text.

    Args:
        separator: Field separator, "," for CSV or "\\t" for TSV.
    """

    def __init__(self, separator: str = ",") -> None:
        self.separator = separator

    def write(self, document: TabularDocument, path: Path) -> None:
        # Match names are not unique, so columns are keyed by position
        keys = [f"column_{i}" for i in range(len(document.headers))]
        header = pl.DataFrame([document.headers], schema=keys, orient="row")
        body = pl.DataFrame(
            document.rows,
            schema=keys,
            orient="row",
            infer_schema_length=None,
        )

        try:
            with path.open("w", newline="") as f:
                f.write(header.write_csv(include_header=False, separator=self.separator))
                f.write(body.write_csv(include_header=False, separator=self.separator))
        except OSError as e:
            raise PersistenceError(path, e) from e
        logger.debug(f"Wrote {body.height} rows x {body.width} columns to {path}")


SINKS_BY_SUFFIX = {
    ".xlsx": ExcelSink,
    ".csv": lambda: CsvSink(","),
    ".tsv": lambda: CsvSink("\t"),
}


def sink_for_path(path: Path) -> TabularSink:
    """
    Choose a sink from the output file extension.

    Args:
        path: Output path.

    Returns:
        A new sink instance.

    Raises:
        UnsupportedOutputFormatError: If the extension is not supported.
    """
    factory = SINKS_BY_SUFFIX.get(path.suffix.lower())
    if factory is None:
        raise UnsupportedOutputFormatError(path, sorted(SINKS_BY_SUFFIX))
    return factory()
