"""
Partial snapshot construction.

Turns a list of differences back into two sparse documents holding only
the differing paths. Values are re-read from the roots rather than taken
from the differences.
"""

from dataclasses import dataclass
from typing import Any, Iterable, Optional, Union

from .models import ChangeRecord, PropertyDifference, Segment
from .paths import get_value_at_path


@dataclass(frozen=True)
class Leaf:
    """A value stored in a snapshot, opaque to the tree."""

    value: Any


class SnapshotNode:
    """
    Sparse document tree.

    Children are keyed by path segment: field names for record fields,
    integers for sequence positions. Each child is either a nested node
    or a Leaf, so a leaf that happens to hold a dict is never mistaken
    for structure.
    """

    __slots__ = ("children",)

    def __init__(self) -> None:
        self.children: dict[Segment, Union["SnapshotNode", Leaf]] = {}

    def set(self, path: tuple[Segment, ...], value: Any) -> None:
        """Store a value at a path, creating intermediate nodes."""
        if not path:
            raise ValueError("Cannot set the root of a snapshot")

        current = self
        for segment in path[:-1]:
            child = current.children.get(segment)
            if not isinstance(child, SnapshotNode):
                child = SnapshotNode()
                current.children[segment] = child
            current = child

        current.children[path[-1]] = Leaf(value)

    def to_document(self) -> dict[Segment, Any]:
        """Render as plain nested dicts."""
        return {
            segment: (
                child.to_document() if isinstance(child, SnapshotNode)
                else child.value
            )
            for segment, child in self.children.items()
        }

    def __len__(self) -> int:
        return len(self.children)


def build_snapshot(
    root: Any,
    differences: Iterable[PropertyDifference]
) -> Optional[Any]:
    """
    Build one side's partial snapshot.

    An absent root has no snapshot. A difference at the root path means
    the whole root changed, so the root itself is the snapshot.
    """
    if root is None:
        return None

    differences = list(differences)
    if any(not d.segments for d in differences):
        return root

    node = SnapshotNode()
    for difference in differences:
        node.set(difference.segments, get_value_at_path(root, difference.segments))
    return node.to_document()


def build_change(
    old_root: Any,
    new_root: Any,
    differences: list[PropertyDifference]
) -> Optional[ChangeRecord]:
    """
    Assemble a ChangeRecord from recorded differences.

    Returns:
        ChangeRecord with old/new partial snapshots, or None when there
        are no differences
    """
    if not differences:
        return None

    return ChangeRecord(
        old_value=build_snapshot(old_root, differences),
        new_value=build_snapshot(new_root, differences),
        differences=differences,
    )
