"""
Typed errors raised by the change engine.

Every error carries a stable ``code`` so the API layer can map it to a
response without inspecting messages. Absent (``None``) values are never
errors; they are valid comparison inputs.
"""

from typing import Any, Optional


class ChangeEngineError(Exception):
    """Base error for comparison failures."""

    code = "comparison.error"

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        meta: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.path = path
        self.meta = dict(meta or {})

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.code, "message": self.message}
        if self.path is not None:
            payload["path"] = self.path
        if self.meta:
            payload["meta"] = self.meta
        return payload


class TypeMismatchError(ChangeEngineError, TypeError):
    """Old and new values have incompatible shapes at the same path."""

    code = "comparison.type_mismatch"


class FieldAccessError(ChangeEngineError):
    """A field exists but could not be read from one side."""

    code = "comparison.field_access"


class ConfigurationError(ChangeEngineError, ValueError):
    """The comparison cannot run with the given configuration."""

    code = "comparison.configuration"
