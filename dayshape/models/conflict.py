"""Conflict data model for dayshape."""

from enum import Enum
from typing import List
from pydantic import BaseModel, Field

from dayshape.models.block import Block


class ConflictKind(str, Enum):
    """Conflict kind enumeration."""
    OVERLAP = "overlap"
    BUFFER_INSUFFICIENT = "buffer_insufficient"
    WORKING_HOURS_OVERRUN = "working_hours_overrun"
    ENERGY_MISMATCH = "energy_mismatch"
    OVERSIZED_FOCUS_BLOCK = "oversized_focus_block"


class Severity(str, Enum):
    """Conflict severity enumeration."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Conflict(BaseModel):
    """A computed scheduling problem. Never persisted."""

    kind: ConflictKind = Field(..., description="Conflict kind")
    severity: Severity = Field(..., description="Conflict severity")
    affected_blocks: List[Block] = Field(..., min_length=1, max_length=2, description="One or two affected blocks")
    description: str = Field(..., description="Human-readable explanation")
    estimated_delay: int = Field(0, ge=0, description="Minutes of delay (0 when not time-quantifiable)")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True
