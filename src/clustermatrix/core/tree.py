"""
Clustering tree storage and leaf ordering.

The hierarchical clustering step produces a rooted tree whose leaves are
individual DNA matches. The tree is stored as an arena: every node lives in a
flat list and refers to its children by integer node id, so traversal never
recurses and a malformed tree (shared or cyclic nodes) is detected rather than
looping forever.

Trees produced upstream are exchanged as Newick files whose tip labels are
match indices; load_cluster_tree() converts them into the arena form.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from clustermatrix.core.exceptions import MalformedTreeError

if TYPE_CHECKING:
    from Bio.Phylo.BaseTree import Clade

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Leaf:
    """A terminal node of the clustering tree.

    Attributes:
        index: Match index this leaf stands for.
        coords: Sparse correlation values keyed by other match index. May
            contain the leaf's own index.
    """

    index: int
    coords: Mapping[int, float] = field(default_factory=dict)

    def coord(self, other_index: int) -> float:
        """Correlation value against another match, 0 when absent."""
        return self.coords.get(other_index, 0.0)


@dataclass(frozen=True)
class _Node:
    leaf: Leaf | None = None
    children: tuple[int, ...] = ()


class ClusterTree:
    """Rooted clustering tree stored as an arena of nodes.

    Nodes are added bottom-up: leaves first, then internal nodes listing
    the ids of their children in display order. The root defaults to the
    most recently added node.

    Example:
        >>> tree = ClusterTree()
        >>> a = tree.add_leaf(1, {2: 1.5})
        >>> b = tree.add_leaf(2, {1: 1.5})
        >>> root = tree.add_internal([a, b])
        >>> [leaf.index for leaf in resolve_leaf_order(tree)]
        [1, 2]
    """

    def __init__(self) -> None:
        self._nodes: list[_Node] = []
        self._root: int | None = None

    def __len__(self) -> int:
        return len(self._nodes)

    @property
    def root(self) -> int | None:
        """Node id of the root, or None for an empty tree."""
        return self._root

    def set_root(self, node_id: int) -> None:
        self._check_node_id(node_id)
        self._root = node_id

    def add_leaf(self, index: int, coords: Mapping[int, float] | None = None) -> int:
        """Add a leaf node and return its node id."""
        node_id = len(self._nodes)
        self._nodes.append(_Node(leaf=Leaf(index=index, coords=dict(coords or {}))))
        self._root = node_id
        return node_id

    def add_internal(self, children: list[int]) -> int:
        """Add an internal node over existing nodes and return its node id."""
        if not children:
            raise MalformedTreeError("internal node has no children")
        node_id = len(self._nodes)
        self._nodes.append(_Node(children=tuple(children)))
        self._root = node_id
        return node_id

    def node_leaf(self, node_id: int) -> Leaf | None:
        self._check_node_id(node_id)
        return self._nodes[node_id].leaf

    def node_children(self, node_id: int) -> tuple[int, ...]:
        self._check_node_id(node_id)
        return self._nodes[node_id].children

    def _check_node_id(self, node_id: int) -> None:
        if not 0 <= node_id < len(self._nodes):
            raise MalformedTreeError(f"reference to unknown node id {node_id}")

    @classmethod
    def from_leaves(cls, leaves: list[Leaf]) -> ClusterTree:
        """Build a flat tree with every leaf directly under the root."""
        tree = cls()
        if not leaves:
            return tree
        ids = [tree.add_leaf(leaf.index, leaf.coords) for leaf in leaves]
        if len(ids) > 1:
            tree.add_internal(ids)
        return tree


def resolve_leaf_order(tree: ClusterTree) -> list[Leaf]:
    """Flatten a clustering tree into its ordered leaves.

    Depth-first, children visited left to right, using an explicit stack.
    The result depends only on the tree structure.

    Args:
        tree: Clustering tree to flatten.

    Returns:
        Leaves in visitation order. Empty for an empty tree.

    Raises:
        MalformedTreeError: If a node is reachable more than once (cycle or
            shared subtree), a child id is unknown, or a leaf index repeats.
    """
    if tree.root is None:
        return []

    leaves: list[Leaf] = []
    visited: set[int] = set()
    seen_indexes: set[int] = set()
    stack = [tree.root]

    while stack:
        node_id = stack.pop()
        if node_id in visited:
            raise MalformedTreeError(f"node {node_id} is reachable more than once")
        visited.add(node_id)

        leaf = tree.node_leaf(node_id)
        if leaf is not None:
            if leaf.index in seen_indexes:
                raise MalformedTreeError(f"leaf index {leaf.index} appears more than once")
            seen_indexes.add(leaf.index)
            leaves.append(leaf)
            continue

        # Reversed so the leftmost child is popped first
        stack.extend(reversed(tree.node_children(node_id)))

    logger.debug(f"Resolved {len(leaves)} leaves from {len(visited)} reachable nodes")
    return leaves


def _tip_index(clade: Clade) -> int:
    try:
        return int(str(clade.name).strip())
    except ValueError:
        raise MalformedTreeError(
            f"tip label {clade.name!r} is not an integer match index"
        ) from None


def tree_from_phylo(
    phylo_tree,
    coords_by_index: Mapping[int, Mapping[int, float]],
) -> ClusterTree:
    """Convert a Biopython tree into a ClusterTree.

    Clades are converted children-first (post-order, iteratively) so every
    internal node is added after the nodes it refers to.

    Args:
        phylo_tree: Bio.Phylo tree whose tips are labelled with match indices.
        coords_by_index: Correlation values for each match index. Tips
            missing from this mapping get empty coordinates.

    Returns:
        Equivalent ClusterTree with the same child order.
    """
    tree = ClusterTree()
    node_ids: dict[int, int] = {}
    stack: list[tuple[Clade, bool]] = [(phylo_tree.root, False)]

    while stack:
        clade, expanded = stack.pop()
        if clade.is_terminal():
            index = _tip_index(clade)
            node_ids[id(clade)] = tree.add_leaf(index, coords_by_index.get(index, {}))
        elif expanded:
            node_ids[id(clade)] = tree.add_internal(
                [node_ids[id(child)] for child in clade.clades]
            )
        else:
            stack.append((clade, True))
            stack.extend((child, False) for child in reversed(clade.clades))

    tree.set_root(node_ids[id(phylo_tree.root)])
    return tree


def load_cluster_tree(
    newick_path: Path,
    coords_by_index: Mapping[int, Mapping[int, float]],
) -> ClusterTree:
    """Load the clustering tree from a Newick file.

    Args:
        newick_path: Newick file whose tip labels are match indices.
        coords_by_index: Correlation values for each match index.

    Returns:
        ClusterTree in arena form.

    Raises:
        FileNotFoundError: If newick_path does not exist.
        MalformedTreeError: If the file cannot be parsed or a tip label is
            not an integer.
    """
    from Bio import Phylo
    from Bio.Phylo.NewickIO import NewickError

    if not newick_path.exists():
        raise FileNotFoundError(f"Tree file not found: {newick_path}")

    try:
        phylo_tree = Phylo.read(newick_path, "newick")
    except (NewickError, ValueError) as e:
        raise MalformedTreeError(f"cannot parse {newick_path}: {e}") from e
    tree = tree_from_phylo(phylo_tree, coords_by_index)

    tip_count = len(phylo_tree.get_terminals())
    missing = sum(
        1 for tip in phylo_tree.get_terminals() if _tip_index(tip) not in coords_by_index
    )
    if missing:
        logger.warning(f"{missing} of {tip_count} tree tips have no correlation values")

    logger.info(f"Loaded clustering tree with {tip_count} leaves from {newick_path}")
    return tree
