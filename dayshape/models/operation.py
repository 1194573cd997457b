"""Operation and Change data models for dayshape."""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, field_serializer, field_validator

from dayshape.models.clock import coerce_minutes, format_time


class OperationKind(str, Enum):
    """Primitive edit kinds."""
    MOVE = "move"
    RESIZE = "resize"
    DELETE = "delete"
    SPLIT = "split"


class ChangeKind(str, Enum):
    """What happened to a block when an operation was applied."""
    MOVED = "moved"
    RESIZED = "resized"
    REMOVED = "removed"
    SPLIT = "split"
    PENDING = "pending"  # Not applied; informational only


class OperationParams(BaseModel):
    """Kind-specific operation parameters."""

    shift_minutes: Optional[int] = Field(None, alias="shiftMinutes", description="Signed shift for move")
    duration_minutes: Optional[int] = Field(None, alias="durationMinutes", description="New duration for resize")
    split_after_minutes: Optional[int] = Field(
        None, alias="splitAfterMinutes", description="Offset from block start at which to split"
    )

    class Config:
        """Pydantic configuration."""
        populate_by_name = True


class Operation(BaseModel):
    """A primitive edit request targeting one block.

    The camelCase aliases match the payloads returned by the remote
    negotiation service so they can be parsed as-is.
    """

    kind: OperationKind = Field(..., alias="type", description="Edit kind")
    target_block_id: str = Field(..., alias="targetBlockId", description="Block id (or title) to edit")
    target_block_title: Optional[str] = Field(None, alias="targetBlockTitle", description="Title hint")
    original_start: Optional[str] = Field(None, alias="originalStart", description="HH:MM start hint")
    original_end: Optional[str] = Field(None, alias="originalEnd", description="HH:MM end hint")
    params: Optional[OperationParams] = Field(None, description="Kind-specific parameters")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True
        populate_by_name = True


class Change(BaseModel):
    """Human-readable record of one applied (or attempted) operation."""

    kind: ChangeKind = Field(..., description="What happened")
    block_id: str = Field(..., description="Affected block id")
    block_title: str = Field(..., description="Affected block title")
    old_start: Optional[int] = Field(None, description="Start before the edit")
    old_end: Optional[int] = Field(None, description="End before the edit")
    new_start: Optional[int] = Field(None, description="Start after the edit")
    new_end: Optional[int] = Field(None, description="End after the edit")
    reason: str = Field(..., description="Why the change was made (or not)")
    fuzzy_match: bool = Field(False, description="Target was resolved by title substring")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True

    @field_validator("old_start", "old_end", "new_start", "new_end", mode="before")
    @classmethod
    def _parse_time(cls, v):
        if v is None:
            return None
        return coerce_minutes(v, allow_end_of_day=True)

    @field_serializer("old_start", "old_end", "new_start", "new_end")
    def _serialize_time(self, value: Optional[int]) -> Optional[str]:
        return format_time(value) if value is not None else None
