"""Block ranking for dayshape.

Scores blocks by priority, then by kind, so heuristics can decide which block
gives way in a conflict. Deterministic: same inputs always produce same outputs.
"""

from typing import List, Sequence

from dayshape.models.block import Block, BlockKind, Priority


PRIORITY_WEIGHTS = {
    Priority.HIGH: 3,
    Priority.MEDIUM: 2,
    Priority.LOW: 1,
}

KIND_WEIGHTS = {
    BlockKind.DEEP: 3,
    BlockKind.MEETING: 2,
    BlockKind.CALENDAR: 2,
    BlockKind.ADMIN: 1,
    BlockKind.TRAVEL: 1,
    BlockKind.PREP: 1,
    BlockKind.DEBRIEF: 1,
    BlockKind.ERRAND: 0,
    BlockKind.BUFFER: 0,
    BlockKind.MICRO_BREAK: 0,
}


def _check_exhaustive() -> None:
    missing_kinds = set(BlockKind) - set(KIND_WEIGHTS)
    missing_priorities = set(Priority) - set(PRIORITY_WEIGHTS)
    if missing_kinds or missing_priorities:
        raise RuntimeError(
            f"Weight tables incomplete: kinds={sorted(k.value for k in missing_kinds)}, "
            f"priorities={sorted(p.value for p in missing_priorities)}"
        )


_check_exhaustive()


def priority_weight(block: Block) -> int:
    """Weight of a block's priority; 0 when the block has none."""
    if block.priority is None:
        return 0
    return PRIORITY_WEIGHTS[Priority(block.priority)]


def kind_weight(block: Block) -> int:
    return KIND_WEIGHTS[BlockKind(block.kind)]


def block_score(block: Block) -> int:
    """Score a block: priority dominates, kind breaks ties.

    Args:
        block: Block to score

    Returns:
        priority weight * 10 + kind weight
    """
    return priority_weight(block) * 10 + kind_weight(block)


def rank_blocks(blocks: Sequence[Block]) -> List[Block]:
    """Sort blocks by score, highest first.

    Equal scores keep their input order, so the last element is the block
    that gives way.
    """
    return sorted(blocks, key=block_score, reverse=True)
