"""FastAPI web application for dayshape.

Stateless HTTP wrapper around the engine: every request carries the blocks it
operates on, and nothing is stored between requests.
"""

from typing import Dict, List, Optional
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from dayshape import __version__
from dayshape.models.block import Block
from dayshape.models.conflict import Conflict
from dayshape.models.operation import Change, Operation
from dayshape.models.strategy import FreeSlot, Strategy
from dayshape.models.clock import format_time
from dayshape.engine.validation import MalformedScheduleError
from dayshape.engine.conflicts import detect_conflicts, ConflictDetectionOptions
from dayshape.engine.layout import calculate_layout, LayoutPosition
from dayshape.engine.free_slot import find_free_slot, list_free_slots
from dayshape.engine.operations import apply_operations
from dayshape.engine.strategies import StrategyConfig, preferred_strategy_id
from dayshape.engine.messages import compose_reschedule_message
from dayshape.integrations.negotiator import resolve_strategies

# Initialize FastAPI app
app = FastAPI(
    title="dayshape API",
    description="Detects conflicts in a planned day and proposes reversible fixes",
    version=__version__,
)


# Request models
class BlocksRequest(BaseModel):
    """Request carrying a day's blocks."""
    blocks: List[Block]


class ConflictsRequest(BlocksRequest):
    """Request for conflict detection."""
    options: Optional[ConflictDetectionOptions] = None


class FreeSlotRequest(BlocksRequest):
    """Request for the next free slot."""
    duration_minutes: int = Field(..., gt=0)
    anchor: str = Field(..., description="HH:MM to search from")
    day_end: str = Field("22:00", description="HH:MM search boundary")


class FreeSlotsRequest(BlocksRequest):
    """Request for all free slots in a window."""
    window_start: str = "00:00"
    window_end: str = "24:00"
    min_duration: int = Field(15, gt=0)


class ApplyOperationsRequest(BlocksRequest):
    """Request to apply operations."""
    operations: List[Operation]
    allow_fuzzy_match: bool = True


class StrategiesRequest(BlocksRequest):
    """Request for resolution strategies."""
    conflicts: Optional[List[Conflict]] = Field(None, description="Detected on the fly if omitted")
    options: Optional[ConflictDetectionOptions] = None
    config: Optional[StrategyConfig] = None
    alert_id: Optional[str] = Field(None, description="Schedule alert to negotiate remotely")
    user_id: Optional[str] = None
    timezone: str = "UTC"
    resolution_style: Optional[str] = Field(None, description="Stored preference, e.g. 'conservative'")


class RescheduleMessageRequest(BaseModel):
    """Request for a reschedule heads-up message."""
    strategy: Optional[Strategy] = None


# Response models
class ConflictsResponse(BaseModel):
    conflicts: List[Conflict]


class LayoutResponse(BaseModel):
    layout: Dict[str, LayoutPosition]


class FreeSlotResponse(BaseModel):
    start: Optional[str]


class FreeSlotsResponse(BaseModel):
    slots: List[FreeSlot]


class ApplyOperationsResponse(BaseModel):
    changes: List[Change]
    blocks: List[Block]


class StrategiesResponse(BaseModel):
    strategies: List[Strategy]
    preferred: Optional[str] = None


class RescheduleMessageResponse(BaseModel):
    message: str


def _bad_schedule(e: MalformedScheduleError) -> HTTPException:
    return HTTPException(status_code=400, detail=f"Malformed schedule: {str(e)}")


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}


@app.post("/conflicts", response_model=ConflictsResponse)
async def conflicts(request: ConflictsRequest):
    """Detect conflicts in the given blocks."""
    try:
        return ConflictsResponse(conflicts=detect_conflicts(request.blocks, request.options))
    except MalformedScheduleError as e:
        raise _bad_schedule(e)


@app.post("/layout", response_model=LayoutResponse)
async def layout(request: BlocksRequest):
    """Compute side-by-side display columns."""
    try:
        return LayoutResponse(layout=calculate_layout(request.blocks))
    except MalformedScheduleError as e:
        raise _bad_schedule(e)


@app.post("/free-slot", response_model=FreeSlotResponse)
async def free_slot(request: FreeSlotRequest):
    """Find the next free slot of a given length."""
    try:
        start = find_free_slot(request.blocks, request.duration_minutes, request.anchor, request.day_end)
    except MalformedScheduleError as e:
        raise _bad_schedule(e)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return FreeSlotResponse(start=format_time(start) if start is not None else None)


@app.post("/free-slots", response_model=FreeSlotsResponse)
async def free_slots(request: FreeSlotsRequest):
    """List free slots inside a window."""
    try:
        slots = list_free_slots(request.blocks, request.window_start, request.window_end, request.min_duration)
    except MalformedScheduleError as e:
        raise _bad_schedule(e)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return FreeSlotsResponse(slots=slots)


@app.post("/operations/apply", response_model=ApplyOperationsResponse)
async def operations_apply(request: ApplyOperationsRequest):
    """Apply operations and return the change log plus new blocks."""
    try:
        result = apply_operations(
            request.blocks,
            request.operations,
            allow_fuzzy_match=request.allow_fuzzy_match,
        )
    except MalformedScheduleError as e:
        raise _bad_schedule(e)
    return ApplyOperationsResponse(changes=result.changes, blocks=result.blocks)


@app.post("/strategies", response_model=StrategiesResponse)
def strategies(request: StrategiesRequest):
    """Propose resolution strategies.

    Runs as a sync endpoint because the optional negotiation call blocks.
    """
    try:
        found = request.conflicts
        if found is None:
            found = detect_conflicts(request.blocks, request.options)
        preferred = preferred_strategy_id(request.resolution_style)
        result = resolve_strategies(
            request.blocks,
            found,
            alert_id=request.alert_id,
            user_id=request.user_id,
            timezone=request.timezone,
            config=request.config,
            preferred=preferred,
        )
    except MalformedScheduleError as e:
        raise _bad_schedule(e)
    return StrategiesResponse(strategies=result, preferred=preferred)


@app.post("/reschedule-message", response_model=RescheduleMessageResponse)
async def reschedule_message(request: RescheduleMessageRequest):
    """Compose a heads-up message for a chosen strategy."""
    return RescheduleMessageResponse(message=compose_reschedule_message(request.strategy))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
