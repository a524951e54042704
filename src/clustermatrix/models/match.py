"""
Data models for DNA matches.

A Match holds what the testing service reports about one DNA match of the
test taker: the shared DNA amount, the family tree metadata, and the user's
own annotations (star, note).
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class TreeType(str, Enum):
    """Family tree status reported for a match."""

    UNDETERMINED = "Undetermined"
    NONE = "None"
    UNLINKED = "Unlinked"
    PUBLIC = "Public"
    PRIVATE = "Private"


class Match(BaseModel):
    """One DNA match, keyed by the index used in the clustering tree.

    Attributes:
        index: Unique match index, equal to the Leaf index in the tree.
        name: Display name of the match.
        test_id: Identifier of the match's DNA test on the testing service.
        shared_centimorgans: Total shared DNA in centimorgans.
        shared_segments: Number of shared segments (0 when unknown).
        longest_block: Longest shared segment in centimorgans (0 when unknown).
        tree_type: Family tree status.
        tree_size: Number of people in the match's tree (0 when unknown).
        starred: Whether the user starred the match.
        has_hint: Whether the service shows a shared ancestor hint.
        note: Free-text user note.
    """

    index: int = Field(description="Match index (tree leaf index)")
    name: str = Field(default="", description="Display name")
    test_id: str = Field(default="", description="Testing service identifier")
    shared_centimorgans: float = Field(ge=0, description="Shared DNA in cM")
    shared_segments: int = Field(default=0, ge=0, description="Shared segment count")
    longest_block: float = Field(default=0.0, ge=0, description="Longest segment in cM")
    tree_type: TreeType = Field(default=TreeType.UNDETERMINED, description="Tree status")
    tree_size: int = Field(default=0, ge=0, description="People in the match's tree")
    starred: bool = Field(default=False, description="Starred by the user")
    has_hint: bool = Field(default=False, description="Shared ancestor hint shown")
    note: str = Field(default="", description="User note")

    model_config = {"frozen": True}
