"""
Pydantic data models for clustermatrix.

Provides type-safe models for DNA matches and export configuration.
"""

from clustermatrix.models.config import ExportConfig, HeatmapStyle
from clustermatrix.models.match import Match, TreeType

__all__ = [
    "ExportConfig",
    "HeatmapStyle",
    "Match",
    "TreeType",
]
