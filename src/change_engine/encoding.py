"""
JSON-ready rendering of comparison results.

Enums are written as their values, records with a field descriptor as
objects of their declared fields, and absent sides are left out.
"""

from typing import Any, Optional

from pydantic_core import to_jsonable_python

from .fields import descriptor_for, read_field
from .models import ChangeEntry, ChangeRecord, ChangeSet


def _fallback(value: Any) -> Any:
    names = descriptor_for(type(value))
    if names is not None:
        return {name: read_field(value, name) for name in names}
    return str(value)


def to_document(value: Any) -> Any:
    """Convert any compared value or snapshot to JSON-compatible data."""
    return to_jsonable_python(value, fallback=_fallback)


def _sides(old_value: Any, new_value: Any) -> dict[str, Any]:
    sides: dict[str, Any] = {}
    if old_value is not None:
        sides["old_value"] = to_document(old_value)
    if new_value is not None:
        sides["new_value"] = to_document(new_value)
    return sides


def encode_record(record: Optional[ChangeRecord]) -> Optional[dict[str, Any]]:
    """Encode a ChangeRecord; no record stays None."""
    if record is None:
        return None
    return {
        **_sides(record.old_value, record.new_value),
        "paths": record.paths,
    }


def encode_entry(entry: ChangeEntry) -> dict[str, Any]:
    return {
        "key": to_document(entry.key),
        "kind": entry.kind.value,
        **_sides(entry.old_value, entry.new_value),
        "paths": [d.path for d in entry.differences],
    }


def encode_change_set(change_set: ChangeSet) -> dict[str, Any]:
    """Encode a ChangeSet with per-kind counts."""
    return {
        "entries": [encode_entry(entry) for entry in change_set.entries],
        "added": len(change_set.added),
        "removed": len(change_set.removed),
        "modified": len(change_set.modified),
    }
