"""
Collection alignment.

Pairs the elements of two collections before they are compared:
by position for sequences nested inside a compared object, by an
identity key for top-level collection comparisons.
"""

from typing import Any, Callable, Iterable, Optional

from .errors import ConfigurationError
from .models import ChangeKind, Segment


Visit = Callable[[Any, Any, tuple[Segment, ...]], None]


def pair_by_position(
    old_items: Iterable[Any],
    new_items: Iterable[Any]
) -> list[tuple[int, Any, Any]]:
    """
    Pair two sequences index by index.

    The shorter side is padded with None, so trailing elements show up
    as added or removed.

    Example:
        >>> pair_by_position(["a", "b"], ["a"])
        [(0, 'a', 'a'), (1, 'b', None)]
    """
    old_list = list(old_items or [])
    new_list = list(new_items or [])
    max_len = max(len(old_list), len(new_list))

    pairs = []
    for i in range(max_len):
        old_item = old_list[i] if i < len(old_list) else None
        new_item = new_list[i] if i < len(new_list) else None
        pairs.append((i, old_item, new_item))
    return pairs


def align_by_position(
    old_seq: Any,
    new_seq: Any,
    base: tuple[Segment, ...],
    visit: Visit
) -> None:
    """Compare element i of each side at path ``base[i]``."""
    for i, old_item, new_item in pair_by_position(old_seq, new_seq):
        visit(old_item, new_item, base + (i,))


def _index_by_key(
    items: Iterable[Any],
    key_selector: Callable[[Any], Any],
    side: str
) -> dict[Any, Any]:
    indexed: dict[Any, Any] = {}
    for position, item in enumerate(items or []):
        key = key_selector(item)
        try:
            duplicate = key in indexed
        except TypeError as e:
            raise ConfigurationError(
                f"Key selector returned an unhashable key on the {side} side "
                f"at position {position}: {e}",
                meta={"side": side, "position": position},
            ) from e
        if duplicate:
            raise ConfigurationError(
                f"Duplicate key {key!r} on the {side} side "
                f"at position {position}",
                meta={"side": side, "position": position, "key": repr(key)},
            )
        indexed[key] = item
    return indexed


def pair_by_key(
    old_items: Iterable[Any],
    new_items: Iterable[Any],
    key_selector: Optional[Callable[[Any], Any]]
) -> list[tuple[Any, Any, Any]]:
    """
    Pair two collections by identity key.

    Args:
        old_items: Items of the old collection
        new_items: Items of the new collection
        key_selector: Maps an item to its key

    Returns:
        (key, old_item, new_item) triples; old keys in their original
        order, then keys only the new side has. A missing side is None.

    Raises:
        ConfigurationError: If no selector is given or a side has
            duplicate keys
    """
    if key_selector is None:
        raise ConfigurationError(
            "Keyed comparison requires a key_selector"
        )

    old_by_key = _index_by_key(old_items, key_selector, "old")
    new_by_key = _index_by_key(new_items, key_selector, "new")

    pairs = [
        (key, old_item, new_by_key.get(key))
        for key, old_item in old_by_key.items()
    ]
    pairs.extend(
        (key, None, new_item)
        for key, new_item in new_by_key.items()
        if key not in old_by_key
    )
    return pairs


def classify(old_item: Any, new_item: Any) -> ChangeKind:
    """Classify a changed pair."""
    if old_item is None:
        return ChangeKind.ADDED
    if new_item is None:
        return ChangeKind.REMOVED
    return ChangeKind.MODIFIED
