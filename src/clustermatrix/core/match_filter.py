"""
Selection of the matches that become heatmap columns.

The testing service only reports shared matches above a minimum amount of
shared DNA, so matches below that amount never act as anchors in another
match's correlations. Those distant matches still get a row in the heatmap
but no column, which makes the matrix rectangular (tall and narrow) rather
than square.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from clustermatrix.core.constants import IMMEDIATE_FAMILY_MIN_CM
from clustermatrix.core.exceptions import NoClusterableMatchesError
from clustermatrix.core.tree import Leaf
from clustermatrix.models.match import Match

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ColumnSelection:
    """Result of selecting the heatmap columns.

    Attributes:
        threshold: Lowest shared centimorgans of any correlation anchor.
        columns: Non-distant matches in leaf order.
        matches: All matches that have a leaf, in leaf order.
    """

    threshold: float
    columns: list[Match]
    matches: list[Match]


def ordered_matches(
    leaves: Sequence[Leaf],
    matches_by_index: Mapping[int, Match],
) -> list[Match]:
    """Matches for the given leaves in leaf order, skipping leaves without one."""
    return [matches_by_index[leaf.index] for leaf in leaves if leaf.index in matches_by_index]


def clusterable_threshold(
    leaves: Sequence[Leaf],
    matches_by_index: Mapping[int, Match],
) -> float:
    """
    Lowest shared centimorgans among matches used as a correlation anchor.

    A match is an anchor when its index appears as a non-self coordinate of
    some leaf that has a match. Coordinates pointing at indices without a
    match are ignored.

    Raises:
        NoClusterableMatchesError: If no match is ever an anchor.
    """
    anchors = {
        coord
        for leaf in leaves
        if leaf.index in matches_by_index
        for coord in leaf.coords
        if coord != leaf.index and coord in matches_by_index
    }
    if not anchors:
        raise NoClusterableMatchesError(len(matches_by_index))
    return min(matches_by_index[index].shared_centimorgans for index in anchors)


def select_columns(
    leaves: Sequence[Leaf],
    matches_by_index: Mapping[int, Match],
) -> ColumnSelection:
    """
    Determine which matches become heatmap columns.

    Args:
        leaves: Ordered tree leaves.
        matches_by_index: Match lookup keyed by leaf index.

    Returns:
        ColumnSelection with the derived threshold and the non-distant
        matches (shared centimorgans >= threshold) in leaf order.

    Raises:
        NoClusterableMatchesError: If no match acts as a correlation anchor.
    """
    matches = ordered_matches(leaves, matches_by_index)

    missing = len(leaves) - len(matches)
    if missing:
        logger.warning(f"{missing} tree leaves have no match data; they will have blank details")

    threshold = clusterable_threshold(leaves, matches_by_index)
    columns = [match for match in matches if match.shared_centimorgans >= threshold]

    logger.info(
        f"Clusterable threshold {threshold:.1f} cM: "
        f"{len(columns)} of {len(matches)} matches become columns"
    )
    return ColumnSelection(threshold=threshold, columns=columns, matches=matches)


def immediate_family_indexes(
    matches_by_index: Mapping[int, Match],
    min_centimorgans: float = IMMEDIATE_FAMILY_MIN_CM,
) -> frozenset[int]:
    """
    Indices of close relatives excluded from correlated cluster lists.

    Very strong matches correlate with so many clusters that including them
    hides the edges of the clusters.

    Args:
        matches_by_index: All matches.
        min_centimorgans: Matches sharing strictly more than this are family.

    Returns:
        Frozen set of match indices.
    """
    return frozenset(
        match.index
        for match in matches_by_index.values()
        if match.shared_centimorgans > min_centimorgans
    )
