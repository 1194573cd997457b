"""Block list validation for dayshape.

Every public engine operation validates its input here before computing, so
malformed schedules are rejected up front and never clamped.
"""

from typing import List, Optional, Sequence

from dayshape.models.block import Block


class MalformedScheduleError(ValueError):
    """Raised when a block list cannot be processed as a single-day schedule."""

    def __init__(self, message: str, *, block_ids: Optional[List[str]] = None):
        super().__init__(message)
        self.block_ids = block_ids or []


def validate_blocks(blocks: Sequence[Block]) -> List[Block]:
    """Check that a block list is well formed.

    Args:
        blocks: Blocks to check

    Returns:
        The blocks as a new list

    Raises:
        MalformedScheduleError: On duplicate ids or an inverted interval
    """
    seen = set()
    duplicates: List[str] = []
    for block in blocks:
        if not isinstance(block, Block):
            raise MalformedScheduleError(f"Expected Block, got {type(block).__name__}")
        # Blocks built with model_construct() skip validation
        if block.start >= block.end:
            raise MalformedScheduleError(
                f"Block '{block.id}' must start before it ends", block_ids=[block.id]
            )
        if block.id in seen:
            duplicates.append(block.id)
        seen.add(block.id)

    if duplicates:
        raise MalformedScheduleError(
            f"Duplicate block ids: {', '.join(sorted(set(duplicates)))}",
            block_ids=sorted(set(duplicates)),
        )
    return list(blocks)
