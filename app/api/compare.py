"""
Compare endpoints.

Expose the change engine for JSON documents. Stateless: nothing is
persisted between requests.
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.config import settings
from src.change_engine import (
    ChangeEngineError,
    ComparisonConfig,
    __engine_version__,
    compare_lists,
    compare_objects,
)
from src.change_engine.encoding import encode_change_set, encode_record
from src.change_engine.paths import get_value_at_path, parse_path

logger = logging.getLogger(__name__)

router = APIRouter()


# --- Request/Response Models ---

class CompareOptions(BaseModel):
    """Rules shared by every compare request."""

    ignore_properties: list[str] = Field(
        default_factory=list,
        description="Path patterns to skip (e.g. 'Id', 'Address.City', 'Phones[]')"
    )
    always_include_properties: list[str] = Field(
        default_factory=list,
        description="Path patterns reported regardless of equality"
    )
    include_unchanged_always_included: Optional[bool] = Field(
        default=None,
        description="Report always-included fields when nothing else changed"
    )

    def to_config(self, **extra: Any) -> ComparisonConfig:
        include_unchanged = self.include_unchanged_always_included
        if include_unchanged is None:
            include_unchanged = settings.include_unchanged_always_included
        return ComparisonConfig(
            ignore_properties=set(self.ignore_properties)
            | settings.default_ignore_properties,
            always_include_properties=set(self.always_include_properties),
            include_unchanged_always_included=include_unchanged,
            **extra,
        )


class CompareObjectsRequest(CompareOptions):
    """Request body for comparing two documents."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "old": {"Name": "Alice", "Role": "Admin"},
                "new": {"Name": "Alicia", "Role": "Admin"},
                "always_include_properties": ["Role"]
            }
        }
    )

    old: Any = Field(default=None, description="Old document")
    new: Any = Field(default=None, description="New document")


class CompareListsRequest(CompareOptions):
    """Request body for comparing two lists of documents."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "old": [{"Id": 1, "Name": "Alice"}, {"Id": 2, "Name": "Bob"}],
                "new": [{"Id": 1, "Name": "Alicia"}, {"Id": 3, "Name": "Cy"}],
                "key_path": "Id"
            }
        }
    )

    old: Optional[list[Any]] = Field(default=None, description="Old items")
    new: Optional[list[Any]] = Field(default=None, description="New items")
    key_path: Optional[str] = Field(
        default=None,
        description="Path to each item's identity key; positional when unset"
    )

    @field_validator("key_path")
    @classmethod
    def validate_key_path(cls, v: Optional[str]) -> Optional[str]:
        """Key path must be a well-formed, non-empty path."""
        if v is not None and not parse_path(v):
            raise ValueError("key_path cannot be empty")
        return v


class CompareObjectsResponse(BaseModel):
    """Result of comparing two documents."""

    engine_version: str = Field(description="Change engine version")
    changed: bool = Field(description="Whether any qualifying change exists")
    old_value: Any = Field(default=None, description="Old partial snapshot")
    new_value: Any = Field(default=None, description="New partial snapshot")
    paths: list[str] = Field(
        default_factory=list,
        description="Paths present in the snapshots"
    )


class ChangeEntryResponse(BaseModel):
    """One changed list item."""

    key: Any = Field(description="Item key, or index for positional comparison")
    kind: str = Field(description="added, removed or modified")
    old_value: Any = Field(default=None, description="Old side of the item")
    new_value: Any = Field(default=None, description="New side of the item")
    paths: list[str] = Field(default_factory=list, description="Changed paths")


class CompareListsResponse(BaseModel):
    """Result of comparing two lists."""

    engine_version: str = Field(description="Change engine version")
    entries: list[ChangeEntryResponse] = Field(
        default_factory=list,
        description="Changed items in alignment order"
    )
    added: int = Field(description="Number of added items")
    removed: int = Field(description="Number of removed items")
    modified: int = Field(description="Number of modified items")


def _domain_error(e: ChangeEngineError) -> HTTPException:
    logger.error("Comparison error: %s", e.message)
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail=e.to_dict(),
    )


# --- Endpoints ---

@router.post(
    "/objects",
    response_model=CompareObjectsResponse,
    summary="Compare two documents",
)
async def compare_documents(request: CompareObjectsRequest) -> CompareObjectsResponse:
    """
    Compare two documents and return sparse before/after snapshots.

    `changed` is false (and both snapshots null) when no qualifying
    difference exists.
    """
    logger.info(
        "Comparing documents | ignore=%d always_include=%d",
        len(request.ignore_properties),
        len(request.always_include_properties),
    )

    try:
        record = compare_objects(request.old, request.new, request.to_config())
    except ChangeEngineError as e:
        raise _domain_error(e)
    except ValueError as e:
        logger.error("Validation error: %s", str(e))
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"error": "validation_error", "message": str(e)},
        )
    except Exception as e:
        logger.exception("Comparison failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "computation_error", "message": str(e)},
        )

    encoded = encode_record(record) or {}
    logger.info("Comparison complete | paths=%d", len(encoded.get("paths", [])))

    return CompareObjectsResponse(
        engine_version=__engine_version__,
        changed=record is not None,
        **encoded,
    )


@router.post(
    "/lists",
    response_model=CompareListsResponse,
    summary="Compare two lists of documents",
)
async def compare_document_lists(request: CompareListsRequest) -> CompareListsResponse:
    """
    Compare two lists and classify each changed item.

    With `key_path`, items are paired by the value at that path;
    otherwise they are paired by position.
    """
    logger.info(
        "Comparing lists | old=%d new=%d key_path=%s",
        len(request.old or []),
        len(request.new or []),
        request.key_path,
    )

    extra: dict[str, Any] = {}
    if request.key_path is not None:
        key_segments = parse_path(request.key_path)
        extra["key_selector"] = lambda item: get_value_at_path(item, key_segments)

    try:
        change_set = compare_lists(request.old, request.new, request.to_config(**extra))
    except ChangeEngineError as e:
        raise _domain_error(e)
    except ValueError as e:
        logger.error("Validation error: %s", str(e))
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"error": "validation_error", "message": str(e)},
        )
    except Exception as e:
        logger.exception("Comparison failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "computation_error", "message": str(e)},
        )

    encoded = encode_change_set(change_set)
    logger.info(
        "Comparison complete | added=%d removed=%d modified=%d",
        encoded["added"],
        encoded["removed"],
        encoded["modified"],
    )

    return CompareListsResponse(engine_version=__engine_version__, **encoded)
