"""
Change Detection Engine

Computes minimal, path-qualified differences between two objects or two
collections of objects, honoring ignore and always-include rules.
Results carry sparse before/after snapshots for audit trails and
change notifications.
"""

__version__ = "0.1.0"
__engine_version__ = "CHG-DIFF-0.1.0"

from .errors import (
    ChangeEngineError,
    ConfigurationError,
    FieldAccessError,
    TypeMismatchError,
)
from .fields import diffable, register_fields
from .models import (
    ChangeEntry,
    ChangeKind,
    ChangeRecord,
    ChangeSet,
    ComparisonConfig,
    PropertyDifference,
)
from .service import (
    compare_keyed,
    compare_lists,
    compare_objects,
    find_differences,
    has_changes,
)

__all__ = [
    "__version__",
    "__engine_version__",
    "ChangeEngineError",
    "ConfigurationError",
    "FieldAccessError",
    "TypeMismatchError",
    "diffable",
    "register_fields",
    "ChangeEntry",
    "ChangeKind",
    "ChangeRecord",
    "ChangeSet",
    "ComparisonConfig",
    "PropertyDifference",
    "compare_keyed",
    "compare_lists",
    "compare_objects",
    "find_differences",
    "has_changes",
]
