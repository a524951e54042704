"""
Custom exceptions with actionable guidance.

Provides specific error types for common failure scenarios,
each with helpful suggestions for resolution.
"""

from __future__ import annotations

from pathlib import Path


class ClusterMatrixError(Exception):
    """Base exception for clustermatrix errors."""

    def __init__(self, message: str, suggestion: str | None = None):
        self.message = message
        self.suggestion = suggestion
        super().__init__(self.full_message)

    @property
    def full_message(self) -> str:
        if self.suggestion:
            return f"{self.message}\n\nSuggestion: {self.suggestion}"
        return self.message


class TreeError(ClusterMatrixError):
    """Base class for clustering tree errors."""



class MalformedTreeError(TreeError):
    """Raised when the clustering tree violates its structural invariants."""

    def __init__(self, reason: str):
        super().__init__(
            message=f"Malformed clustering tree: {reason}",
            suggestion=(
                "Every leaf must appear exactly once and every node must have a "
                "single parent. Re-run the clustering step to regenerate the tree."
            ),
        )
        self.reason = reason


class MatchDataError(ClusterMatrixError):
    """Base class for match data errors."""



class NoClusterableMatchesError(MatchDataError):
    """Raised when no match is ever referenced as a correlation anchor."""

    def __init__(self, num_matches: int):
        super().__init__(
            message=(
                f"None of the {num_matches} matches correlates with another match; "
                "cannot derive the clusterable shared-centimorgan threshold"
            ),
            suggestion=(
                "Check that the correlations table was produced for the same match "
                "set and that its 'index' and 'other_index' columns refer to match indices."
            ),
        )
        self.num_matches = num_matches


class MissingColumnsError(MatchDataError):
    """Raised when an input table lacks required columns."""

    def __init__(self, path: str, missing: list[str], required: list[str]):
        super().__init__(
            message=f"Input table '{path}' is missing columns: {', '.join(missing)}",
            suggestion=f"Required columns are: {', '.join(required)}",
        )
        self.missing = missing


class DuplicateMatchIndexError(MatchDataError):
    """Raised when the matches table lists the same index more than once."""

    def __init__(self, path: str, indexes: list[int]):
        shown = ", ".join(str(i) for i in indexes[:10])
        if len(indexes) > 10:
            shown += f", ... ({len(indexes)} in total)"
        super().__init__(
            message=f"Matches table '{path}' repeats match indexes: {shown}",
            suggestion="Each match must appear on exactly one row",
        )
        self.indexes = indexes


class PersistenceError(ClusterMatrixError):
    """Raised when a tabular artifact cannot be written."""

    def __init__(self, path: Path, cause: BaseException):
        super().__init__(
            message=f"An error occurred while saving {path}: {cause}",
            suggestion=(
                "Close the file if it is open in a spreadsheet application, "
                "and check that the output directory exists and is writable."
            ),
        )
        self.path = path
        self.cause = cause


class ConfigurationError(ClusterMatrixError):
    """Raised when configuration is invalid."""



class InvalidPartitionSizeError(ConfigurationError):
    """Raised when the column partition limits are inconsistent."""

    def __init__(self, max_columns: int, max_columns_per_split: int):
        super().__init__(
            message=(
                f"max_columns_per_split = {max_columns_per_split} must be between 1 "
                f"and max_columns = {max_columns}"
            ),
            suggestion="Lower max_columns_per_split or raise max_columns.",
        )
        self.max_columns = max_columns
        self.max_columns_per_split = max_columns_per_split


class UnsupportedOutputFormatError(ConfigurationError):
    """Raised when the output file extension has no matching sink."""

    def __init__(self, path: Path, supported: list[str]):
        super().__init__(
            message=f"Unsupported output format for '{path}'",
            suggestion=f"Use one of the supported extensions: {', '.join(supported)}",
        )
        self.path = path
