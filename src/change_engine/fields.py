"""
Field descriptors for record-like values.

A type is comparable field by field when its field list is known up
front: registered explicitly, declared through ``__diff_fields__``, or
derived once from a pydantic model or dataclass definition. Mappings
are record-like as well; their keys are their fields.
"""

import dataclasses
from collections.abc import Mapping, Sequence
from typing import Any, Callable, Iterable, Optional

from pydantic import BaseModel

from .errors import FieldAccessError


_REGISTRY: dict[type, tuple[str, ...]] = {}
_CACHE: dict[type, Optional[tuple[str, ...]]] = {}


def register_fields(cls: type, names: Iterable[str]) -> None:
    """
    Declare the comparable fields of a type.

    Registration takes precedence over every other descriptor source,
    so it can also narrow the field list of a dataclass or model.
    """
    names = tuple(names)
    if not names:
        raise ValueError(f"{cls.__name__} must declare at least one field")
    _REGISTRY[cls] = names
    _CACHE.clear()


def diffable(*names: str) -> Callable[[type], type]:
    """
    Class decorator form of :func:`register_fields`.

    Example:
        >>> @diffable("street", "city")
        ... class Address:
        ...     def __init__(self, street, city):
        ...         self.street = street
        ...         self.city = city
    """
    def decorate(cls: type) -> type:
        register_fields(cls, names)
        return cls

    return decorate


def descriptor_for(cls: type) -> Optional[tuple[str, ...]]:
    """Return the declared field names of a type, or None if it has none."""
    if cls in _CACHE:
        return _CACHE[cls]

    names: Optional[tuple[str, ...]] = None
    if cls in _REGISTRY:
        names = _REGISTRY[cls]
    elif getattr(cls, "__diff_fields__", None):
        names = tuple(cls.__diff_fields__)
    elif isinstance(cls, type) and issubclass(cls, BaseModel):
        names = tuple(cls.model_fields)
    elif dataclasses.is_dataclass(cls):
        names = tuple(f.name for f in dataclasses.fields(cls))

    _CACHE[cls] = names
    return names


def is_record(value: Any) -> bool:
    """Whether a value is compared field by field."""
    if isinstance(value, Mapping):
        return True
    return descriptor_for(type(value)) is not None


def is_sequence(value: Any) -> bool:
    """Ordered, indexable collections other than text."""
    return isinstance(value, Sequence) and not isinstance(
        value, (str, bytes, bytearray)
    )


def field_names(value: Any) -> tuple[str, ...]:
    """Field names of a record-like value."""
    if isinstance(value, Mapping):
        return tuple(str(key) for key in value.keys())
    names = descriptor_for(type(value))
    if names is None:
        raise TypeError(f"{type(value).__name__} has no field descriptor")
    return names


def merged_field_names(old: Any, new: Any) -> tuple[str, ...]:
    """Old fields in order, then fields only the new side has."""
    names = list(field_names(old))
    seen = set(names)
    for name in field_names(new):
        if name not in seen:
            names.append(name)
            seen.add(name)
    return tuple(names)


def read_field(value: Any, name: str, path: str = "") -> Any:
    """
    Read a single field.

    A key missing from a mapping reads as absent. Any failure while
    reading a declared field is raised as FieldAccessError.
    """
    if isinstance(value, Mapping):
        if name in value:
            return value[name]
        for key in value.keys():
            if str(key) == name:
                return value[key]
        return None

    try:
        return getattr(value, name)
    except Exception as e:
        raise FieldAccessError(
            f"Cannot read field '{name}' of {type(value).__name__}: {e}",
            path=path or name,
        ) from e
