"""
Pydantic models for change detection.

Configuration is immutable once built so a single config can be shared
across any number of comparison calls.
"""

from enum import Enum
from typing import Any, Callable, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


Segment = Union[str, int]


class ComparisonConfig(BaseModel):
    """
    Rules applied while comparing two values.

    Patterns use dotted field names and bracketed indices
    (``Address.Street``, ``PhoneNumbers[0]``). An empty bracket pair
    (``PhoneNumbers[]``) matches any index. A bare field name
    (``Street``) matches that field at any depth, with lower precedence
    than a fully qualified pattern. Matching is case-insensitive.

    Examples:
        Ignore identifiers, always report the status:
            ComparisonConfig(
                ignore_properties={"Id"},
                always_include_properties={"Status"},
            )

        Pair list items by their ``Id`` field:
            ComparisonConfig(key_selector=lambda user: user.Id)
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    ignore_properties: frozenset[str] = Field(
        default_factory=frozenset,
        description="Path patterns that are never compared or reported"
    )
    always_include_properties: frozenset[str] = Field(
        default_factory=frozenset,
        description="Path patterns reported regardless of value equality"
    )
    include_unchanged_always_included: bool = Field(
        default=True,
        description=(
            "Surface always-included fields even when nothing else changed"
        )
    )
    key_selector: Optional[Callable[[Any], Any]] = Field(
        default=None,
        description="Maps a collection item to its identity key"
    )

    @field_validator(
        "ignore_properties", "always_include_properties", mode="before"
    )
    @classmethod
    def coerce_patterns(cls, v: Any) -> Any:
        """Accept any iterable of patterns; a bare string is one pattern."""
        if v is None:
            return frozenset()
        if isinstance(v, str):
            return frozenset([v])
        return frozenset(v)

    @field_validator("ignore_properties", "always_include_properties")
    @classmethod
    def validate_patterns(cls, v: frozenset[str]) -> frozenset[str]:
        """Patterns must be non-blank."""
        for pattern in v:
            if not pattern.strip():
                raise ValueError("path patterns cannot be blank")
        return frozenset(pattern.strip() for pattern in v)


class PropertyDifference(BaseModel):
    """A single path-qualified difference between two values."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    path: str = Field(description="Dotted/indexed path, '' for the root")
    segments: tuple[Segment, ...] = Field(
        default=(),
        description="Structured form of the path"
    )
    old_value: Any = Field(default=None, description="Value on the old side")
    new_value: Any = Field(default=None, description="Value on the new side")
    forced: bool = Field(
        default=False,
        description="Recorded by an always-include rule, not by inequality"
    )


class ChangeRecord(BaseModel):
    """
    Result of comparing a single pair of objects.

    ``old_value`` and ``new_value`` are partial snapshots: nested dicts
    holding only the paths listed in ``differences``. A side that is
    absent as a whole is ``None``.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    old_value: Any = Field(default=None, description="Old partial snapshot")
    new_value: Any = Field(default=None, description="New partial snapshot")
    differences: list[PropertyDifference] = Field(
        default_factory=list,
        description="Differences the snapshots were built from"
    )

    @property
    def paths(self) -> list[str]:
        """Paths of all recorded differences, in traversal order."""
        return [difference.path for difference in self.differences]


class ChangeKind(str, Enum):
    """Classification of an item in a collection comparison."""

    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"


class ChangeEntry(BaseModel):
    """One changed item of a collection comparison."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    key: Any = Field(
        description="Selector key (keyed mode) or index (positional mode)"
    )
    kind: ChangeKind = Field(description="How the item changed")
    old_value: Any = Field(default=None, description="Old side of the item")
    new_value: Any = Field(default=None, description="New side of the item")
    differences: list[PropertyDifference] = Field(
        default_factory=list,
        description="Differences behind a 'modified' classification"
    )


class ChangeSet(BaseModel):
    """
    Result of comparing two collections.

    Entries follow alignment order: index order for positional
    comparison, old keys then new-only keys for keyed comparison.
    Unchanged items are omitted.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    entries: list[ChangeEntry] = Field(
        default_factory=list,
        description="Changed items in alignment order"
    )

    @property
    def has_changes(self) -> bool:
        return bool(self.entries)

    @property
    def added(self) -> list[ChangeEntry]:
        return self._of_kind(ChangeKind.ADDED)

    @property
    def removed(self) -> list[ChangeEntry]:
        return self._of_kind(ChangeKind.REMOVED)

    @property
    def modified(self) -> list[ChangeEntry]:
        return self._of_kind(ChangeKind.MODIFIED)

    @property
    def old_values(self) -> list[Any]:
        """Old sides of removed and modified entries, in order."""
        return [
            entry.old_value for entry in self.entries
            if entry.kind != ChangeKind.ADDED
        ]

    @property
    def new_values(self) -> list[Any]:
        """New sides of added and modified entries, in order."""
        return [
            entry.new_value for entry in self.entries
            if entry.kind != ChangeKind.REMOVED
        ]

    def _of_kind(self, kind: ChangeKind) -> list[ChangeEntry]:
        return [entry for entry in self.entries if entry.kind == kind]
