"""
Constants used throughout the clustermatrix package.

Centralizes default limits, thresholds, and heatmap styling values
to improve maintainability and consistency.
"""

from __future__ import annotations

# =============================================================================
# Matrix Partitioning
#
# Spreadsheet applications cap a worksheet at 16,384 columns. Matrices wider
# than MAX_COLUMNS are split into files holding at most MAX_COLUMNS_PER_SPLIT
# match columns each.
# =============================================================================

SPREADSHEET_MAX_COLUMNS = 16384

# Cluster Number, Name, Test ID, Link, Shared Centimorgans, six optional match
# detail columns, Correlated Clusters and Note
MAX_FIXED_COLUMNS = 13

MAX_COLUMNS = 16000
MAX_COLUMNS_PER_SPLIT = 10000

# =============================================================================
# Correlation Thresholds
# =============================================================================

# Matches sharing more than this many centimorgans are close relatives that
# correlate with nearly every cluster; they are ignored when listing the
# clusters a match is correlated with.
IMMEDIATE_FAMILY_MIN_CM = 200.0

# Minimum coordinate value that counts as a correlation between two matches
CORRELATION_MIN = 1.0

# =============================================================================
# Heatmap Styling
# =============================================================================

DEFAULT_SHEET_NAME = "heatmap"

# Three-point color scale over the correlation values
COLOR_SCALE_LOW_VALUE = 0.0
COLOR_SCALE_MID_VALUE = 1.0
COLOR_SCALE_HIGH_VALUE = 2.0
COLOR_SCALE_LOW_COLOR = "DCDCDC"  # gainsboro
COLOR_SCALE_MID_COLOR = "FFF8DC"  # cornsilk
COLOR_SCALE_HIGH_COLOR = "8B0000"  # dark red

# Column widths in spreadsheet character units
DEFAULT_COLUMN_WIDTH = 19.0 / 7
CLUSTER_NUMBER_COLUMN_WIDTH = 26.0 / 7
NAME_COLUMN_WIDTH = 15.0
TEST_ID_COLUMN_WIDTH = 10.0
CORRELATED_CLUSTERS_COLUMN_WIDTH = 15.0
NOTE_COLUMN_WIDTH = 15.0

DECIMAL_NUMBER_FORMAT = "0.0"

# =============================================================================
# Links
# =============================================================================

# Match pages for a test taker live under this template
ANCESTRY_MATCH_URL_TEMPLATE = "https://www.ancestry.com/dna/tests/{test_taker_id}/match"

LINK_DISPLAY_TEXT = "Link"
