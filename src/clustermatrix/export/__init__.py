"""
Correlation matrix export.

Assembles format-independent sheets for each output partition and persists
them through tabular sinks (Excel or delimited text).
"""

from clustermatrix.export.exporter import (
    CorrelationExporter,
    ExportResult,
    ProgressCounter,
    RetryDecision,
    abort_on_error,
)
from clustermatrix.export.layout import ColumnCapabilities, TabularDocument, assemble_document
from clustermatrix.export.sinks import CsvSink, ExcelSink, TabularSink, sink_for_path

__all__ = [
    "ColumnCapabilities",
    "CorrelationExporter",
    "CsvSink",
    "ExcelSink",
    "ExportResult",
    "ProgressCounter",
    "RetryDecision",
    "TabularDocument",
    "TabularSink",
    "abort_on_error",
    "assemble_document",
    "sink_for_path",
]
