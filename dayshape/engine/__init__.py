"""Scheduling engine for dayshape."""

from dayshape.engine.validation import validate_blocks, MalformedScheduleError
from dayshape.engine.ranking import block_score, rank_blocks
from dayshape.engine.conflicts import detect_conflicts, ConflictDetectionOptions
from dayshape.engine.layout import calculate_layout, LayoutPosition
from dayshape.engine.free_slot import find_free_slot, list_free_slots
from dayshape.engine.operations import apply_operations, OperationResult
from dayshape.engine.strategies import generate_strategies, preferred_strategy_id, StrategyConfig, StrategyVersion
from dayshape.engine.messages import compose_reschedule_message

__all__ = [
    "validate_blocks",
    "MalformedScheduleError",
    "block_score",
    "rank_blocks",
    "detect_conflicts",
    "ConflictDetectionOptions",
    "calculate_layout",
    "LayoutPosition",
    "find_free_slot",
    "list_free_slots",
    "apply_operations",
    "OperationResult",
    "generate_strategies",
    "preferred_strategy_id",
    "StrategyConfig",
    "StrategyVersion",
    "compose_reschedule_message",
]
