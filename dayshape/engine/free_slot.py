"""Free-slot search for dayshape."""

from typing import List, Optional, Sequence, Union

from dayshape.models.block import Block
from dayshape.models.clock import MINUTES_PER_DAY, coerce_minutes
from dayshape.models.constants import DEFAULT_DAY_END, MIN_FREE_SLOT_MINUTES
from dayshape.models.strategy import FreeSlot
from dayshape.engine.validation import validate_blocks


TimeLike = Union[int, str]


def find_free_slot(
    blocks: Sequence[Block],
    duration_minutes: int,
    anchor: TimeLike,
    day_end: TimeLike = DEFAULT_DAY_END,
) -> Optional[int]:
    """Find the earliest gap of the required length at or after an anchor.

    Greedy search: whenever the candidate window overlaps a block, jump the
    candidate straight to that block's end. The number of iterations is
    bounded by the number of blocks.

    Args:
        blocks: Existing blocks
        duration_minutes: Required gap length (must be positive)
        anchor: Earliest acceptable start (minute of day or "HH:MM")
        day_end: The gap must end by this time (defaults to 22:00)

    Returns:
        Start of the gap as minute of day, or None if nothing fits
    """
    if duration_minutes <= 0:
        raise ValueError(f"duration_minutes must be positive, got {duration_minutes}")
    validate_blocks(blocks)

    candidate = coerce_minutes(anchor, allow_end_of_day=True)
    boundary = coerce_minutes(day_end, allow_end_of_day=True)
    sorted_blocks = sorted(blocks, key=lambda b: b.start)

    while candidate + duration_minutes <= boundary:
        window_end = candidate + duration_minutes
        blocker = next(
            (b for b in sorted_blocks if max(candidate, b.start) < min(window_end, b.end)),
            None,
        )
        if blocker is None:
            return candidate
        candidate = blocker.end

    return None


def list_free_slots(
    blocks: Sequence[Block],
    window_start: TimeLike = 0,
    window_end: TimeLike = MINUTES_PER_DAY,
    min_duration: int = MIN_FREE_SLOT_MINUTES,
) -> List[FreeSlot]:
    """List the gaps between busy intervals inside a window.

    Busy intervals are merged first, so overlapping or touching blocks form
    one busy stretch. Gaps shorter than `min_duration` are dropped.

    Args:
        blocks: Existing blocks
        window_start: Start of the window (default 00:00)
        window_end: End of the window (default 24:00)
        min_duration: Smallest gap worth reporting, in minutes

    Returns:
        Free slots in chronological order
    """
    validate_blocks(blocks)
    cursor = coerce_minutes(window_start, allow_end_of_day=True)
    limit = coerce_minutes(window_end, allow_end_of_day=True)

    merged: List[List[int]] = []
    for block in sorted(blocks, key=lambda b: b.start):
        if merged and block.start <= merged[-1][1]:
            merged[-1][1] = max(merged[-1][1], block.end)
        else:
            merged.append([block.start, block.end])

    slots: List[FreeSlot] = []
    for busy_start, busy_end in merged:
        if busy_start >= limit:
            break
        if busy_start > cursor:
            slots.append(FreeSlot(start=cursor, end=busy_start, duration_minutes=busy_start - cursor))
        cursor = max(cursor, busy_end)

    if cursor < limit:
        slots.append(FreeSlot(start=cursor, end=limit, duration_minutes=limit - cursor))

    return [slot for slot in slots if slot.duration_minutes >= min_duration]
