"""
Change detection service.

Main entry point for comparing objects and collections. Produces sparse
before/after snapshots so callers can report what changed without
re-sending whole objects.
"""

import logging
from typing import Any, Iterable, Optional

from .alignment import classify, pair_by_key, pair_by_position
from .builder import build_change
from .models import (
    ChangeEntry,
    ChangeKind,
    ChangeRecord,
    ChangeSet,
    ComparisonConfig,
    PropertyDifference,
)
from .paths import RuleSet, rules_for
from .traversal import Traversal

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = ComparisonConfig()


def find_differences(
    old: Any,
    new: Any,
    config: Optional[ComparisonConfig] = None
) -> list[PropertyDifference]:
    """
    List the differences between two values.

    Always-included fields are folded in according to
    ``config.include_unchanged_always_included``.

    Args:
        old: The old value
        new: The new value
        config: Comparison rules (defaults to no rules)

    Returns:
        Differences in traversal order (empty if nothing qualifies)
    """
    config = config or DEFAULT_CONFIG
    result = Traversal(rules_for(config)).run(old, new)
    return result.fold(config.include_unchanged_always_included)


def compare_objects(
    old: Any,
    new: Any,
    config: Optional[ComparisonConfig] = None
) -> Optional[ChangeRecord]:
    """
    Compare two objects of the same shape.

    Args:
        old: The old object state
        new: The new object state
        config: Ignore/always-include rules

    Returns:
        ChangeRecord holding partial snapshots of both sides, or None
        when nothing changed

    Raises:
        TypeMismatchError: If the two sides have incompatible shapes
        FieldAccessError: If a field cannot be read

    Example:
        >>> old = {"Name": "Alice", "Role": "Admin"}
        >>> new = {"Name": "Alicia", "Role": "Admin"}
        >>> config = ComparisonConfig(always_include_properties={"Role"})
        >>> change = compare_objects(old, new, config)
        >>> change.new_value
        {'Name': 'Alicia', 'Role': 'Admin'}
    """
    differences = find_differences(old, new, config)
    logger.debug(
        "Compared objects | type=%s differences=%d",
        type(old if old is not None else new).__name__,
        len(differences),
    )
    return build_change(old, new, differences)


def has_changes(
    old: Any,
    new: Any,
    config: Optional[ComparisonConfig] = None
) -> bool:
    """Whether compare_objects would return a record."""
    return bool(find_differences(old, new, config))


def _compare_item(
    key: Any,
    old_item: Any,
    new_item: Any,
    rules: RuleSet
) -> Optional[ChangeEntry]:
    if old_item is None and new_item is None:
        return None

    kind = classify(old_item, new_item)
    if kind is not ChangeKind.MODIFIED:
        return ChangeEntry(
            key=key,
            kind=kind,
            old_value=old_item,
            new_value=new_item,
        )

    # Each item is its own comparison root; it counts as modified only
    # when something other than an always-included field differs.
    result = Traversal(rules).run(old_item, new_item)
    if not result.has_real_changes:
        return None

    record = build_change(old_item, new_item, result.differences)
    return ChangeEntry(
        key=key,
        kind=kind,
        old_value=record.old_value,
        new_value=record.new_value,
        differences=record.differences,
    )


def _build_change_set(
    pairs: list[tuple[Any, Any, Any]],
    config: ComparisonConfig
) -> ChangeSet:
    rules = rules_for(config)
    entries = []
    for key, old_item, new_item in pairs:
        entry = _compare_item(key, old_item, new_item, rules)
        if entry is not None:
            entries.append(entry)

    change_set = ChangeSet(entries=entries)
    logger.debug(
        "Compared collections | pairs=%d added=%d removed=%d modified=%d",
        len(pairs),
        len(change_set.added),
        len(change_set.removed),
        len(change_set.modified),
    )
    return change_set


def compare_keyed(
    old_items: Optional[Iterable[Any]],
    new_items: Optional[Iterable[Any]],
    config: ComparisonConfig
) -> ChangeSet:
    """
    Compare two collections, pairing items by ``config.key_selector``.

    Keys only in the new collection are added, keys only in the old
    collection are removed, and keys in both are modified when the
    paired items differ. Unchanged items are omitted.

    Raises:
        ConfigurationError: If no key selector is configured or a side
            has duplicate keys
    """
    pairs = pair_by_key(old_items, new_items, config.key_selector)
    return _build_change_set(pairs, config)


def compare_lists(
    old_items: Optional[Iterable[Any]],
    new_items: Optional[Iterable[Any]],
    config: Optional[ComparisonConfig] = None
) -> ChangeSet:
    """
    Compare two collections of objects.

    Items are paired by key when ``config.key_selector`` is set and by
    position otherwise; positional pairing pads the shorter side with
    absent items. A missing collection is treated as empty.

    Example:
        >>> config = ComparisonConfig(key_selector=lambda u: u["id"])
        >>> changes = compare_lists(
        ...     [{"id": 1, "name": "a"}],
        ...     [{"id": 1, "name": "b"}, {"id": 2, "name": "c"}],
        ...     config,
        ... )
        >>> [(e.key, e.kind.value) for e in changes.entries]
        [(1, 'modified'), (2, 'added')]
    """
    config = config or DEFAULT_CONFIG
    if config.key_selector is not None:
        return compare_keyed(old_items, new_items, config)

    return _build_change_set(pair_by_position(old_items, new_items), config)
