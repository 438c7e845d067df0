"""
Recursive comparison of two values.

Walks records field by field and sequences index by index, consulting
the ignore/always-include rules at every path. Only leaf-level
differences are recorded; a changed record is implied by its changed
fields.

Rules applied at each path, in order:
    1. Ignored path -> stop, nothing recorded
    2. Always-included path -> record as forced, stop
    3. Both sides absent -> stop
    4. One side absent -> record the raw values, stop
    5. Record / sequence -> descend; scalar -> compare by value
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic_core import PydanticSerializationError, to_jsonable_python

from .alignment import align_by_position
from .errors import TypeMismatchError
from .fields import (
    descriptor_for,
    is_record,
    is_sequence,
    merged_field_names,
    read_field,
)
from .models import PropertyDifference, Segment
from .paths import Rule, RuleSet, format_path


class Shape(str, Enum):
    """Structural category of a value."""

    RECORD = "record"
    SEQUENCE = "sequence"
    SCALAR = "scalar"


@dataclass
class TraversalResult:
    """Differences found under one comparison root, in traversal order."""

    differences: list[PropertyDifference] = field(default_factory=list)

    @property
    def real(self) -> list[PropertyDifference]:
        return [d for d in self.differences if not d.forced]

    @property
    def forced(self) -> list[PropertyDifference]:
        return [d for d in self.differences if d.forced]

    @property
    def has_real_changes(self) -> bool:
        return any(not d.forced for d in self.differences)

    def fold(self, include_unchanged_always_included: bool) -> list[PropertyDifference]:
        """
        Differences to report for this root.

        Forced differences are surfaced on their own only when unchanged
        always-included fields are wanted; otherwise they ride along
        with at least one real difference.
        """
        if not include_unchanged_always_included and not self.has_real_changes:
            return []
        return list(self.differences)


def shape_of(value: Any) -> Shape:
    if is_record(value):
        return Shape.RECORD
    if is_sequence(value):
        return Shape.SEQUENCE
    return Shape.SCALAR


def _canonical(value: Any) -> Any:
    try:
        return to_jsonable_python(value)
    except PydanticSerializationError:
        return value


def values_equal(old: Any, new: Any) -> bool:
    """
    Leaf equality.

    Plain equality first. An enum on one side is compared by its value.
    Values of the same type that still differ are compared by their
    canonical JSON-able form; values of different types are never
    converted, so bytes never equal text and a datetime never equals
    its ISO string. Booleans never equal numbers.
    """
    if old is new:
        return True
    if (type(old) is bool) != (type(new) is bool):
        return False
    if old == new:
        return True

    old_is_enum = isinstance(old, Enum)
    new_is_enum = isinstance(new, Enum)
    if old_is_enum != new_is_enum:
        return values_equal(
            old.value if old_is_enum else old,
            new.value if new_is_enum else new,
        )

    if type(old) is not type(new):
        return False
    return _canonical(old) == _canonical(new)


class Traversal:
    """One comparison walk over a pair of roots."""

    def __init__(self, rules: RuleSet):
        self.rules = rules
        self.result = TraversalResult()
        self._visited: set[tuple[int, int]] = set()

    def run(self, old: Any, new: Any, path: tuple[Segment, ...] = ()) -> TraversalResult:
        self.visit(old, new, path)
        return self.result

    def visit(self, old: Any, new: Any, path: tuple[Segment, ...]) -> None:
        if path:
            rule = self.rules.resolve(path)
            if rule is Rule.IGNORE:
                return
            if rule is Rule.ALWAYS_INCLUDE:
                self._record(path, old, new, forced=True)
                return

        if old is None and new is None:
            return
        if old is None or new is None:
            self._record(path, old, new)
            return

        old_shape = shape_of(old)
        new_shape = shape_of(new)
        if old_shape is not new_shape:
            raise TypeMismatchError(
                f"Cannot compare {old_shape.value} {type(old).__name__} "
                f"with {new_shape.value} {type(new).__name__}",
                path=format_path(path),
            )

        if old_shape is Shape.SCALAR:
            if not values_equal(old, new):
                self._record(path, old, new)
            return

        # Pairs already being compared higher up this branch are cyclic
        # references; treat them as unchanged.
        key = (id(old), id(new))
        if key in self._visited:
            return
        self._visited.add(key)
        try:
            if old_shape is Shape.RECORD:
                self._visit_record(old, new, path)
            else:
                align_by_position(old, new, path, self.visit)
        finally:
            self._visited.discard(key)

    def _visit_record(self, old: Any, new: Any, path: tuple[Segment, ...]) -> None:
        old_fields = descriptor_for(type(old))
        new_fields = descriptor_for(type(new))
        if (
            old_fields is not None
            and new_fields is not None
            and set(old_fields) != set(new_fields)
        ):
            raise TypeMismatchError(
                f"{type(old).__name__} and {type(new).__name__} "
                "declare different fields",
                path=format_path(path),
                meta={
                    "old_fields": list(old_fields),
                    "new_fields": list(new_fields),
                },
            )

        for name in merged_field_names(old, new):
            child = path + (name,)
            text = format_path(child)
            self.visit(
                read_field(old, name, text),
                read_field(new, name, text),
                child,
            )

    def _record(
        self,
        path: tuple[Segment, ...],
        old: Any,
        new: Any,
        forced: bool = False,
    ) -> None:
        difference = PropertyDifference(
            path=format_path(path),
            segments=path,
            old_value=old,
            new_value=new,
            forced=forced,
        )
        self.result.differences.append(difference)
