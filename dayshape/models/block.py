"""Block data model for dayshape."""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, field_serializer, field_validator, model_validator

from dayshape.models.clock import coerce_minutes, format_time


class BlockKind(str, Enum):
    """Block kind enumeration."""
    DEEP = "deep"  # Deep focus work
    MEETING = "meeting"
    ADMIN = "admin"
    ERRAND = "errand"
    BUFFER = "buffer"
    MICRO_BREAK = "micro-break"
    CALENDAR = "calendar"  # Imported from a synced calendar
    TRAVEL = "travel"
    PREP = "prep"
    DEBRIEF = "debrief"


class EnergyLevel(str, Enum):
    """Energy level enumeration."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Priority(str, Enum):
    """Priority enumeration."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Block(BaseModel):
    """A single scheduled interval on one day.

    `start` and `end` are minute-of-day integers. Inputs may also be given as
    "HH:MM" strings; outputs are serialized back to "HH:MM".
    """

    id: str = Field(..., min_length=1, description="Unique block identifier, stable across edits")
    title: str = Field(..., description="Block title")
    kind: BlockKind = Field(..., description="Block kind")
    start: int = Field(..., description="Start, minute of day")
    end: int = Field(..., description="End, minute of day (1440 = midnight)")
    location: Optional[str] = Field(None, description="Optional location")
    energy: Optional[EnergyLevel] = Field(None, description="Energy level the block demands")
    priority: Optional[Priority] = Field(None, description="Block priority")
    is_pinned: bool = Field(False, description="Excluded from automatic edits")
    is_read_only: bool = Field(False, description="Externally sourced; never mutated")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True

    @field_validator("start", mode="before")
    @classmethod
    def _parse_start(cls, v):
        return coerce_minutes(v)

    @field_validator("end", mode="before")
    @classmethod
    def _parse_end(cls, v):
        return coerce_minutes(v, allow_end_of_day=True)

    @model_validator(mode="after")
    def _check_interval(self):
        if self.start >= self.end:
            raise ValueError(
                f"Block '{self.id}' must start before it ends "
                f"({format_time(self.start)} >= {format_time(self.end)})"
            )
        return self

    @field_serializer("start", "end")
    def _serialize_time(self, value: int) -> str:
        return format_time(value)

    @property
    def duration_minutes(self) -> int:
        return self.end - self.start

    @property
    def is_locked(self) -> bool:
        """Pinned and read-only blocks are never edited by the engine."""
        return self.is_pinned or self.is_read_only

    def with_times(self, start: int, end: int) -> "Block":
        """Return a validated copy with new start/end."""
        return Block(**{**self.model_dump(), "start": start, "end": end})
