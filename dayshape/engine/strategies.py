"""Resolution strategy generation for dayshape.

Turns detected conflicts into named, deterministic strategies:
- protect_focus: move whatever collides with deep work to the next free slot
- hit_deadlines: compress the lowest-ranked block in each conflict
- reschedule_later: push the lowest-ranked block in each conflict to late afternoon

Each heuristic builds a list of operations, then replays it through the
operation applier to get the change log and resulting blocks.
"""

import os
import logging
from enum import Enum
from math import floor
from typing import Callable, Dict, List, Optional, Sequence, Set
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from dayshape.models.block import Block, BlockKind
from dayshape.models.clock import coerce_minutes
from dayshape.models.conflict import Conflict, ConflictKind
from dayshape.models.constants import (
    DEFAULT_DAY_END,
    ADMIN_FALLBACK_START,
    ADMIN_FALLBACK_STEP_MINUTES,
    RESCHEDULE_TARGET,
    MIN_BLOCK_DURATION_MINUTES,
    OVERLAP_COMPRESSION,
    OVERRUN_COMPRESSION,
    PROTECT_FOCUS,
    HIT_DEADLINES,
    RESCHEDULE_LATER,
)
from dayshape.models.operation import Operation, OperationKind, OperationParams
from dayshape.models.strategy import Strategy, StrategySource
from dayshape.engine.free_slot import find_free_slot
from dayshape.engine.operations import apply_operations
from dayshape.engine.ranking import rank_blocks
from dayshape.engine.validation import validate_blocks

load_dotenv()

logger = logging.getLogger(__name__)


class StrategyVersion(str, Enum):
    """Strategy engine revisions."""
    V1 = "v1"  # protect_focus + hit_deadlines
    V2 = "v2"  # adds reschedule_later


def strategy_version_from_env() -> str:
    """Read DAYSHAPE_STRATEGY_VERSION, falling back to v2 when unset or unknown."""
    raw = os.getenv("DAYSHAPE_STRATEGY_VERSION", StrategyVersion.V2.value)
    try:
        return StrategyVersion(raw.strip().lower()).value
    except ValueError:
        logger.warning(f"Unknown DAYSHAPE_STRATEGY_VERSION '{raw}'. Using {StrategyVersion.V2.value}.")
        return StrategyVersion.V2.value


DEFAULT_STRATEGY_VERSION = strategy_version_from_env()

# Conflict kinds treated as "running over" by hit_deadlines
OVERRUN_KINDS = {ConflictKind.WORKING_HOURS_OVERRUN.value, ConflictKind.OVERSIZED_FOCUS_BLOCK.value}

# Stored conflict-resolution style -> strategy to pre-select
RESOLUTION_STYLE_STRATEGIES = {
    "conservative": PROTECT_FOCUS,
    "aggressive": HIT_DEADLINES,
    "deferring": RESCHEDULE_LATER,
}


class StrategyConfig(BaseModel):
    """Tunable knobs for the strategy heuristics. Times accept ints or "HH:MM"."""

    version: StrategyVersion = Field(DEFAULT_STRATEGY_VERSION, description="Which heuristics to run")
    day_end: int = Field(DEFAULT_DAY_END, description="Free-slot search boundary")
    admin_fallback_start: int = Field(ADMIN_FALLBACK_START, description="Where protect_focus stacks admin blocks")
    admin_fallback_step: int = Field(ADMIN_FALLBACK_STEP_MINUTES, gt=0)
    reschedule_target: int = Field(RESCHEDULE_TARGET, description="Where reschedule_later moves blocks")
    min_block_duration: int = Field(MIN_BLOCK_DURATION_MINUTES, ge=MIN_BLOCK_DURATION_MINUTES)
    overlap_compression: float = Field(OVERLAP_COMPRESSION, gt=0.0, le=1.0)
    overrun_compression: float = Field(OVERRUN_COMPRESSION, gt=0.0, le=1.0)

    @field_validator("day_end", "admin_fallback_start", "reschedule_target", mode="before")
    @classmethod
    def _parse_time(cls, v):
        return coerce_minutes(v, allow_end_of_day=True)


def preferred_strategy_id(resolution_style: Optional[str]) -> Optional[str]:
    """Map a stored conflict-resolution style to the strategy to pre-select."""
    if not resolution_style:
        return None
    return RESOLUTION_STYLE_STRATEGIES.get(resolution_style.strip().lower())


def generate_strategies(
    blocks: Sequence[Block],
    conflicts: Sequence[Conflict],
    config: Optional[StrategyConfig] = None,
    preferred: Optional[str] = None,
) -> List[Strategy]:
    """Generate resolution strategies for the detected conflicts.

    Deterministic: identical inputs always give identical strategies.

    Args:
        blocks: Current blocks
        conflicts: Conflicts detected on those blocks
        config: Heuristic settings (defaults if None)
        preferred: Strategy id to list first (e.g. the user's usual choice)

    Returns:
        Strategies in display order (empty when there are no conflicts)
    """
    config = config or StrategyConfig()
    blocks = validate_blocks(blocks)
    if not conflicts:
        return []

    strategy_ids = [PROTECT_FOCUS, HIT_DEADLINES]
    if StrategyVersion(config.version) == StrategyVersion.V2:
        strategy_ids.append(RESCHEDULE_LATER)

    strategies = [STRATEGY_BUILDERS[sid](blocks, conflicts, config) for sid in strategy_ids]
    if preferred:
        # Stable sort keeps the remaining order
        strategies.sort(key=lambda s: s.id != preferred)
    return strategies


def _editable(conflict: Conflict) -> List[Block]:
    return [b for b in conflict.affected_blocks if not b.is_locked]


def _compressed(duration: int, keep: float, floor_minutes: int) -> int:
    return max(floor_minutes, floor(duration * keep))


def _build(
    strategy_id: str,
    title: str,
    description: str,
    action: OperationKind,
    tradeoffs: List[str],
    blocks: List[Block],
    operations: List[Operation],
    reason: str,
    config: StrategyConfig,
) -> Strategy:
    result = apply_operations(
        blocks,
        operations,
        reason=reason,
        min_block_duration=config.min_block_duration,
    )
    logger.debug(f"Strategy {strategy_id}: {len(operations)} operations, {len(result.changes)} changes")
    return Strategy(
        id=strategy_id,
        title=title,
        description=description,
        action=action.value,
        operations=operations,
        changes=result.changes,
        new_blocks=result.blocks,
        tradeoffs=tradeoffs,
        source=StrategySource.LOCAL,
    )


def _move(block: Block, shift: int) -> Operation:
    return Operation(
        kind=OperationKind.MOVE,
        target_block_id=block.id,
        target_block_title=block.title,
        params=OperationParams(shift_minutes=shift),
    )


def _resize(block: Block, duration: int) -> Operation:
    return Operation(
        kind=OperationKind.RESIZE,
        target_block_id=block.id,
        target_block_title=block.title,
        params=OperationParams(duration_minutes=duration),
    )


def protect_focus_strategy(
    blocks: List[Block],
    conflicts: Sequence[Conflict],
    config: StrategyConfig,
) -> Strategy:
    """Keep deep work in place; relocate the blocks that collide with it.

    For each conflict involving a deep block, the co-affected non-deep block
    moves to the next free slot at or after its own end. With nothing to move,
    admin blocks are stacked from the fallback start in fixed steps.
    """
    operations: List[Operation] = []
    processed: Set[str] = set()

    for conflict in conflicts:
        if not any(b.kind == BlockKind.DEEP for b in conflict.affected_blocks):
            continue
        block = next((b for b in _editable(conflict) if b.kind != BlockKind.DEEP), None)
        if block is None or block.id in processed:
            continue
        processed.add(block.id)

        slot = find_free_slot(blocks, block.duration_minutes, block.end, config.day_end)
        if slot is None:
            logger.debug(f"No free slot for '{block.id}' before day end")
            continue
        operations.append(_move(block, slot - block.start))

    if not operations:
        admin_blocks = [b for b in blocks if b.kind == BlockKind.ADMIN and not b.is_locked]
        for position, block in enumerate(admin_blocks):
            target = config.admin_fallback_start + position * config.admin_fallback_step
            if target != block.start:
                operations.append(_move(block, target - block.start))

    return _build(
        PROTECT_FOCUS,
        "Protect Focus",
        "Preserve deep work blocks by moving conflicting tasks to free slots",
        OperationKind.MOVE,
        [
            "Conflicting tasks moved to next available slot",
            "Deep work energy preserved",
            "Schedule extended",
        ],
        blocks,
        operations,
        "Moved to protect focus time",
        config,
    )


def hit_deadlines_strategy(
    blocks: List[Block],
    conflicts: Sequence[Conflict],
    config: StrategyConfig,
) -> Strategy:
    """Compress lower-ranked blocks so everything still fits.

    Overlaps shrink the lowest-ranked block; overruns shrink the latest
    affected block. Durations never drop below the configured floor.
    """
    operations: List[Operation] = []
    processed: Set[str] = set()

    for conflict in conflicts:
        candidates = _editable(conflict)
        if not candidates:
            continue

        if conflict.kind == ConflictKind.OVERLAP:
            block = rank_blocks(candidates)[-1]
            keep = config.overlap_compression
        elif conflict.kind in OVERRUN_KINDS:
            block = max(candidates, key=lambda b: b.start)
            keep = config.overrun_compression
        else:
            continue

        if block.id in processed:
            continue
        processed.add(block.id)

        duration = _compressed(block.duration_minutes, keep, config.min_block_duration)
        if duration < block.duration_minutes:
            operations.append(_resize(block, duration))

    if not operations:
        for block in blocks:
            if block.kind != BlockKind.ADMIN or block.is_locked:
                continue
            duration = _compressed(block.duration_minutes, config.overlap_compression, config.min_block_duration)
            if duration < block.duration_minutes:
                operations.append(_resize(block, duration))

    return _build(
        HIT_DEADLINES,
        "Hit Deadlines",
        "Compress lower priority tasks to resolve conflicts and meet deadlines",
        OperationKind.RESIZE,
        [
            "Tasks compressed to fit",
            "Less buffer time",
            "Deadlines prioritized",
        ],
        blocks,
        operations,
        "Compressed to meet deadlines",
        config,
    )


def reschedule_later_strategy(
    blocks: List[Block],
    conflicts: Sequence[Conflict],
    config: StrategyConfig,
) -> Strategy:
    """Defer the lowest-ranked block of each conflict to the reschedule target.

    Only forward shifts are proposed; blocks already at or past the target
    stay where they are.
    """
    operations: List[Operation] = []
    processed: Set[str] = set()

    for conflict in conflicts:
        candidates = _editable(conflict)
        if not candidates:
            continue
        block = rank_blocks(candidates)[-1]
        if block.id in processed:
            continue
        processed.add(block.id)

        if block.start < config.reschedule_target:
            operations.append(_move(block, config.reschedule_target - block.start))

    return _build(
        RESCHEDULE_LATER,
        "Defer to Later",
        "Push lower priority tasks to the end of the day",
        OperationKind.MOVE,
        [
            "Lower priority tasks pushed to late afternoon",
            "Morning commitments stay intact",
            "Day may run longer",
        ],
        blocks,
        operations,
        "Deferred to later in the day",
        config,
    )


STRATEGY_BUILDERS: Dict[str, Callable[[List[Block], Sequence[Conflict], StrategyConfig], Strategy]] = {
    PROTECT_FOCUS: protect_focus_strategy,
    HIT_DEADLINES: hit_deadlines_strategy,
    RESCHEDULE_LATER: reschedule_later_strategy,
}
