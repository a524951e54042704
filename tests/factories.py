"""
Test data factories for clustermatrix tests.

Provides deterministic, seeded generation of clustered DNA match data: match
details, sparse correlations, cluster assignments, and the clustering tree
(both as a ClusterTree and as Newick text).
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from pathlib import Path

import polars as pl

from clustermatrix.core.tree import ClusterTree
from clustermatrix.models.match import Match, TreeType


@dataclass
class ClusterDataset:
    """A generated clustering run.

    Attributes:
        matches: Match details keyed by index.
        coords: Sparse correlations keyed by index.
        assignment: Cluster number per clustered index.
        groups: Leaf indices per top-level subtree, in tree order.
        distant: Indices of matches below the clusterable threshold.
        family: Indices of immediate family matches.
    """

    matches: dict[int, Match]
    coords: dict[int, dict[int, float]]
    assignment: dict[int, int]
    groups: list[list[int]]
    distant: list[int] = field(default_factory=list)
    family: list[int] = field(default_factory=list)

    @property
    def leaf_order(self) -> list[int]:
        return [index for group in self.groups for index in group]

    def tree(self) -> ClusterTree:
        """Build the clustering tree: one subtree per group under the root."""
        tree = ClusterTree()
        group_ids = []
        for group in self.groups:
            leaf_ids = [tree.add_leaf(index, self.coords.get(index, {})) for index in group]
            group_ids.append(leaf_ids[0] if len(leaf_ids) == 1 else tree.add_internal(leaf_ids))
        tree.add_internal(group_ids)
        return tree

    def newick(self) -> str:
        parts = []
        for group in self.groups:
            if len(group) == 1:
                parts.append(str(group[0]))
            else:
                parts.append("(" + ",".join(str(index) for index in group) + ")")
        return "(" + ",".join(parts) + ");"

    def write(self, directory: Path) -> dict[str, Path]:
        """Write matches, correlations, clusters, and tree files."""
        directory.mkdir(parents=True, exist_ok=True)
        paths = {
            "matches": directory / "matches.csv",
            "correlations": directory / "correlations.csv",
            "clusters": directory / "clusters.csv",
            "tree": directory / "tree.nwk",
        }

        pl.DataFrame(
            [
                {**match.model_dump(), "tree_type": match.tree_type.value}
                for match in self.matches.values()
            ]
        ).write_csv(paths["matches"])

        pl.DataFrame(
            {
                "index": [i for i, row in self.coords.items() for _ in row],
                "other_index": [j for row in self.coords.values() for j in row],
                "value": [v for row in self.coords.values() for v in row.values()],
            },
            schema={"index": pl.Int64, "other_index": pl.Int64, "value": pl.Float64},
        ).write_csv(paths["correlations"])

        pl.DataFrame(
            {
                "index": list(self.matches),
                "cluster_number": [self.assignment.get(i) for i in self.matches],
            },
            schema={"index": pl.Int64, "cluster_number": pl.Int64},
        ).write_csv(paths["clusters"])

        paths["tree"].write_text(self.newick() + "\n")
        return paths


class ClusterDataFactory:
    """
    Factory for generating clustered match data with controlled structure.

    Produces:
    - Clusters whose members correlate strongly (2.0) with each other
    - A weak link (1.0) from the first member of each cluster to the first
      member of the next cluster, and a sub-threshold link (0.5) beyond it
    - Distant matches (< 20 cM) that correlate with cluster members but are
      never correlated with, so they become rows but not columns
    - Optionally one immediate family match (> 200 cM) that everyone in the
      first cluster correlates with

    All data generation is seeded for reproducibility.
    """

    def __init__(self, seed: int = 42):
        self._rng = random.Random(seed)

    def _match(self, index: int, shared_centimorgans: float, **extra) -> Match:
        return Match(
            index=index,
            name=f"Match {index}",
            test_id=f"TEST-{index:04d}",
            shared_centimorgans=shared_centimorgans,
            **extra,
        )

    def create(
        self,
        num_clusters: int = 3,
        cluster_size: int = 4,
        num_distant: int = 2,
        with_family: bool = True,
        with_details: bool = False,
    ) -> ClusterDataset:
        """
        Create a clustering run.

        Args:
            num_clusters: Number of clusters.
            cluster_size: Members per cluster.
            num_distant: Distant matches appended after the clusters.
            with_family: Add one immediate family match.
            with_details: Fill the optional match fields (segments, tree
                data, star, hint, note) for the first match.

        Returns:
            ClusterDataset.
        """
        matches: dict[int, Match] = {}
        coords: dict[int, dict[int, float]] = {}
        assignment: dict[int, int] = {}
        groups: list[list[int]] = []

        index = 0
        for cluster in range(1, num_clusters + 1):
            members = list(range(index, index + cluster_size))
            for member in members:
                cm = round(self._rng.uniform(25.0, 150.0), 1)
                matches[member] = self._match(member, cm)
                assignment[member] = cluster
                coords[member] = {other: 2.0 for other in members}
            groups.append(members)
            index += cluster_size

        for cluster in range(num_clusters):
            first = groups[cluster][0]
            if cluster + 1 < num_clusters:
                coords[first][groups[cluster + 1][0]] = 1.0
            if cluster + 2 < num_clusters:
                coords[first][groups[cluster + 2][0]] = 0.5

        distant = []
        for _ in range(num_distant):
            cm = round(self._rng.uniform(8.0, 19.9), 1)
            matches[index] = self._match(index, cm)
            coords[index] = {groups[0][0]: 1.0}
            distant.append(index)
            groups.append([index])
            index += 1

        family = []
        if with_family:
            matches[index] = self._match(index, 320.0)
            assignment[index] = 1
            coords[index] = {member: 1.0 for member in groups[0]}
            for member in groups[0]:
                coords[member][index] = 2.0
            family.append(index)
            groups.append([index])

        if with_details:
            first = groups[0][0]
            matches[first] = matches[first].model_copy(
                update={
                    "shared_segments": 5,
                    "longest_block": 31.5,
                    "tree_type": TreeType.PUBLIC,
                    "tree_size": 120,
                    "starred": True,
                    "has_hint": True,
                    "note": "maternal side",
                }
            )

        return ClusterDataset(
            matches=matches,
            coords=coords,
            assignment=assignment,
            groups=groups,
            distant=distant,
            family=family,
        )
