"""Strategy and free-slot data models for dayshape."""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field, field_serializer, field_validator

from dayshape.models.block import Block
from dayshape.models.clock import coerce_minutes, format_time
from dayshape.models.operation import Change, Operation


class StrategySource(str, Enum):
    """Where a strategy came from."""
    LOCAL = "local"
    NEGOTIATED = "negotiated"


class Strategy(BaseModel):
    """A named bundle of operations plus their effect on the schedule.

    Strategies are recomputed on every resolution pass; `id` names the
    heuristic so a caller can remember which one the user picked.
    """

    id: str = Field(..., description="Stable heuristic name (e.g. 'protect_focus')")
    title: str = Field(..., description="Display title")
    description: str = Field("", description="One-sentence explanation")
    action: Optional[str] = Field(None, description="Dominant action tag (move/resize/delete)")
    operations: List[Operation] = Field(default_factory=list)
    changes: List[Change] = Field(default_factory=list)
    new_blocks: List[Block] = Field(default_factory=list)
    tradeoffs: List[str] = Field(default_factory=list)
    source: StrategySource = Field(StrategySource.LOCAL, description="Local heuristic or remote negotiation")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True


class FreeSlot(BaseModel):
    """A gap in the schedule."""

    start: int
    end: int
    duration_minutes: int

    @field_validator("start", "end", mode="before")
    @classmethod
    def _parse_time(cls, v):
        return coerce_minutes(v, allow_end_of_day=True)

    @field_serializer("start", "end")
    def _serialize_time(self, value: int) -> str:
        return format_time(value)
