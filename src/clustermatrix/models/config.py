"""
Pydantic configuration models for clustermatrix.

These models define configuration for the correlation matrix export,
including partition limits, correlation thresholds, hyperlinks, and heatmap
styling. Configuration can be loaded from YAML files or CLI arguments.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Self

from pydantic import BaseModel, Field, model_validator

from clustermatrix.core.constants import (
    ANCESTRY_MATCH_URL_TEMPLATE,
    CLUSTER_NUMBER_COLUMN_WIDTH,
    COLOR_SCALE_HIGH_COLOR,
    COLOR_SCALE_HIGH_VALUE,
    COLOR_SCALE_LOW_COLOR,
    COLOR_SCALE_LOW_VALUE,
    COLOR_SCALE_MID_COLOR,
    COLOR_SCALE_MID_VALUE,
    CORRELATED_CLUSTERS_COLUMN_WIDTH,
    CORRELATION_MIN,
    DECIMAL_NUMBER_FORMAT,
    DEFAULT_COLUMN_WIDTH,
    DEFAULT_SHEET_NAME,
    IMMEDIATE_FAMILY_MIN_CM,
    MAX_COLUMNS,
    MAX_COLUMNS_PER_SPLIT,
    MAX_FIXED_COLUMNS,
    NAME_COLUMN_WIDTH,
    NOTE_COLUMN_WIDTH,
    SPREADSHEET_MAX_COLUMNS,
    TEST_ID_COLUMN_WIDTH,
)

logger = logging.getLogger(__name__)

_HEX_COLOR_PATTERN = r"^[0-9A-Fa-f]{6}$"


class HeatmapStyle(BaseModel):
    """Styling of the exported heatmap."""

    low_value: float = Field(default=COLOR_SCALE_LOW_VALUE, description="Color scale minimum")
    mid_value: float = Field(default=COLOR_SCALE_MID_VALUE, description="Color scale midpoint")
    high_value: float = Field(default=COLOR_SCALE_HIGH_VALUE, description="Color scale maximum")
    low_color: str = Field(
        default=COLOR_SCALE_LOW_COLOR,
        pattern=_HEX_COLOR_PATTERN,
        description="RGB hex color at the minimum",
    )
    mid_color: str = Field(
        default=COLOR_SCALE_MID_COLOR,
        pattern=_HEX_COLOR_PATTERN,
        description="RGB hex color at the midpoint",
    )
    high_color: str = Field(
        default=COLOR_SCALE_HIGH_COLOR,
        pattern=_HEX_COLOR_PATTERN,
        description="RGB hex color at the maximum",
    )
    default_column_width: float = Field(
        default=DEFAULT_COLUMN_WIDTH,
        gt=0,
        description="Width of the correlation columns",
    )
    cluster_number_width: float = Field(default=CLUSTER_NUMBER_COLUMN_WIDTH, gt=0)
    name_width: float = Field(default=NAME_COLUMN_WIDTH, gt=0)
    test_id_width: float = Field(default=TEST_ID_COLUMN_WIDTH, gt=0)
    correlated_clusters_width: float = Field(default=CORRELATED_CLUSTERS_COLUMN_WIDTH, gt=0)
    note_width: float = Field(default=NOTE_COLUMN_WIDTH, gt=0)
    decimal_format: str = Field(
        default=DECIMAL_NUMBER_FORMAT,
        description="Number format for centimorgan columns",
    )

    @model_validator(mode="after")
    def validate_scale_order(self) -> Self:
        """Color scale points must be strictly ascending."""
        if not self.low_value < self.mid_value < self.high_value:
            msg = (
                "Color scale values must be ascending: "
                f"low={self.low_value}, mid={self.mid_value}, high={self.high_value}"
            )
            raise ValueError(msg)
        return self

    model_config = {"frozen": True}


class ExportConfig(BaseModel):
    """
    Configuration for exporting a clustered correlation matrix.

    Partitioning:
        Matrices with more than max_columns heatmap columns are split into
        files of at most max_columns_per_split columns.

    Correlation:
        Matches sharing more than immediate_family_min_cm are left out of
        the correlated cluster lists. Coordinates of at least
        correlation_min count as a correlation.

    Links:
        When link_base_url is set, a Link column points at
        <link_base_url>/<test_id> for every match.
    """

    max_columns: int = Field(
        default=MAX_COLUMNS,
        ge=1,
        le=SPREADSHEET_MAX_COLUMNS - MAX_FIXED_COLUMNS,
        description="Largest number of heatmap columns written to one file",
    )
    max_columns_per_split: int = Field(
        default=MAX_COLUMNS_PER_SPLIT,
        ge=1,
        description="Heatmap columns per file once max_columns is exceeded",
    )
    immediate_family_min_cm: float = Field(
        default=IMMEDIATE_FAMILY_MIN_CM,
        ge=0,
        description="Matches sharing more cM than this are immediate family",
    )
    correlation_min: float = Field(
        default=CORRELATION_MIN,
        gt=0,
        description="Smallest coordinate value counted as a correlation",
    )
    link_base_url: str | None = Field(
        default=None,
        description="Base URL of match pages; enables the Link column",
    )
    sheet_name: str = Field(
        default=DEFAULT_SHEET_NAME,
        min_length=1,
        max_length=31,
        description="Worksheet name",
    )
    heatmap: HeatmapStyle = Field(default_factory=HeatmapStyle)

    @model_validator(mode="after")
    def validate_split_size(self) -> Self:
        """A split must fit within the single-file limit."""
        if self.max_columns_per_split > self.max_columns:
            msg = (
                f"max_columns_per_split ({self.max_columns_per_split}) must not exceed "
                f"max_columns ({self.max_columns})"
            )
            raise ValueError(msg)
        return self

    def link_for(self, test_id: str) -> str | None:
        """Match page URL for a test identifier, or None without a base URL."""
        if not self.link_base_url or not test_id:
            return None
        return f"{self.link_base_url.rstrip('/')}/{test_id}"

    def with_overrides(self, **overrides: Any) -> ExportConfig:
        """Copy of this config with the non-None overrides applied."""
        values = {key: value for key, value in overrides.items() if value is not None}
        if not values:
            return self
        return type(self).model_validate({**self.model_dump(), **values})

    @staticmethod
    def ancestry_link_base(test_taker_id: str) -> str:
        """Base URL of Ancestry match pages for a test taker."""
        return ANCESTRY_MATCH_URL_TEMPLATE.format(test_taker_id=test_taker_id)

    @classmethod
    def from_yaml(cls, path: Path) -> ExportConfig:
        """
        Load export configuration from a YAML file.

        The YAML file uses a nested structure (partitioning, correlation,
        links, heatmap) that is flattened to match model fields. Unknown keys
        are ignored.

        Args:
            path: Path to YAML configuration file.

        Returns:
            ExportConfig populated from YAML values merged with defaults.

        Raises:
            FileNotFoundError: If YAML file does not exist.
            ValueError: If the file is not valid YAML or contains invalid values.
        """
        import yaml

        try:
            raw = yaml.safe_load(path.read_text())
        except yaml.YAMLError as e:
            msg = f"Could not parse YAML config {path}: {e}"
            raise ValueError(msg) from e
        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            msg = f"YAML config must be a mapping, got {type(raw).__name__}"
            raise ValueError(msg)

        return cls(**_flatten_yaml_config(raw))

    def to_yaml(self, path: Path) -> None:
        """Write export configuration to a YAML file."""
        path.write_text(self.to_yaml_str())

    def to_yaml_str(self) -> str:
        """
        Serialize export configuration to a YAML string.

        Returns:
            YAML-formatted string with nested structure.
        """
        import yaml

        data = _build_yaml_structure(self)
        return yaml.dump(data, default_flow_style=False, sort_keys=False)

    model_config = {"frozen": True}


def _flatten_yaml_config(raw: dict[str, Any]) -> dict[str, Any]:
    """
    Flatten nested YAML config structure into ExportConfig keyword arguments.

    Maps the documented nested YAML structure:
        partitioning.max_columns -> max_columns
        correlation.immediate_family_min_cm -> immediate_family_min_cm
        links.base_url -> link_base_url
        heatmap.* -> heatmap (nested HeatmapStyle)
    """
    flat: dict[str, Any] = {}

    if "sheet_name" in raw:
        flat["sheet_name"] = raw["sheet_name"]

    partitioning = raw.get("partitioning") or {}
    _map_if_present(partitioning, "max_columns", flat, "max_columns")
    _map_if_present(partitioning, "max_columns_per_split", flat, "max_columns_per_split")

    correlation = raw.get("correlation") or {}
    _map_if_present(correlation, "immediate_family_min_cm", flat, "immediate_family_min_cm")
    _map_if_present(correlation, "min_value", flat, "correlation_min")

    links = raw.get("links") or {}
    _map_if_present(links, "base_url", flat, "link_base_url")
    if "base_url" not in links and links.get("test_taker_id"):
        flat["link_base_url"] = ExportConfig.ancestry_link_base(str(links["test_taker_id"]))

    heatmap_raw = raw.get("heatmap") or {}
    if heatmap_raw:
        style: dict[str, Any] = {}
        scale = heatmap_raw.get("color_scale") or {}
        for point in ("low", "mid", "high"):
            point_raw = scale.get(point) or {}
            _map_if_present(point_raw, "value", style, f"{point}_value")
            _map_if_present(point_raw, "color", style, f"{point}_color")
        widths = heatmap_raw.get("column_widths") or {}
        _map_if_present(widths, "default", style, "default_column_width")
        for name in ("cluster_number", "name", "test_id", "correlated_clusters", "note"):
            _map_if_present(widths, name, style, f"{name}_width")
        _map_if_present(heatmap_raw, "decimal_format", style, "decimal_format")
        flat["heatmap"] = HeatmapStyle(**style)

    return flat


def _map_if_present(
    source: dict[str, Any],
    source_key: str,
    target: dict[str, Any],
    target_key: str,
) -> None:
    """Copy value from source dict to target dict if key exists."""
    if source_key in source and source[source_key] is not None:
        target[target_key] = source[source_key]


def _build_yaml_structure(config: ExportConfig) -> dict[str, Any]:
    """Build nested YAML dict from an ExportConfig instance."""
    style = config.heatmap
    return {
        "sheet_name": config.sheet_name,
        "partitioning": {
            "max_columns": config.max_columns,
            "max_columns_per_split": config.max_columns_per_split,
        },
        "correlation": {
            "immediate_family_min_cm": config.immediate_family_min_cm,
            "min_value": config.correlation_min,
        },
        "links": {
            "base_url": config.link_base_url,
        },
        "heatmap": {
            "color_scale": {
                "low": {"value": style.low_value, "color": style.low_color},
                "mid": {"value": style.mid_value, "color": style.mid_color},
                "high": {"value": style.high_value, "color": style.high_color},
            },
            "column_widths": {
                "default": style.default_column_width,
                "cluster_number": style.cluster_number_width,
                "name": style.name_width,
                "test_id": style.test_id_width,
                "correlated_clusters": style.correlated_clusters_width,
                "note": style.note_width,
            },
            "decimal_format": style.decimal_format,
        },
    }
