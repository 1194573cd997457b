"""Operation application for dayshape.

Applies an ordered list of primitive edits (move, resize, delete, split) to a
working copy of a block list and records a human-readable change log. Each
operation sees the effects of the ones before it.
"""

import logging
from typing import List, NamedTuple, Optional, Sequence, Tuple

from dayshape.models.block import Block
from dayshape.models.clock import MINUTES_PER_DAY, InvalidTimeError, format_time, parse_time
from dayshape.models.constants import MIN_BLOCK_DURATION_MINUTES
from dayshape.models.operation import Change, ChangeKind, Operation, OperationKind
from dayshape.engine.validation import validate_blocks

logger = logging.getLogger(__name__)

# Length of an id shown in place of a missing title
TRUNCATED_ID_LENGTH = 8


class OperationResult(NamedTuple):
    """Result of applying operations: the change log and the new block list."""
    changes: List[Change]
    blocks: List[Block]


def resolve_target(
    blocks: Sequence[Block],
    target: str,
    allow_fuzzy_match: bool = True,
) -> Tuple[Optional[int], bool]:
    """Find the block an operation refers to.

    Resolution order: exact id, exact title, then case-insensitive substring
    containment in either direction between target and title.

    Args:
        blocks: Current working blocks
        target: Operation target (id or title)
        allow_fuzzy_match: Enable the substring tier

    Returns:
        Tuple of (index or None, whether the substring tier was used)
    """
    for index, block in enumerate(blocks):
        if block.id == target:
            return index, False

    for index, block in enumerate(blocks):
        if block.title == target:
            return index, False

    needle = target.strip().lower()
    if not allow_fuzzy_match or not needle:
        return None, False

    for index, block in enumerate(blocks):
        title = block.title.strip().lower()
        if title and (needle in title or title in needle):
            logger.warning(f"Operation target '{target}' matched block '{block.id}' by title substring")
            return index, True

    return None, False


def apply_operations(
    blocks: Sequence[Block],
    operations: Sequence[Operation],
    reason: Optional[str] = None,
    allow_fuzzy_match: bool = True,
    min_block_duration: int = MIN_BLOCK_DURATION_MINUTES,
) -> OperationResult:
    """Apply operations in order to a copy of the blocks.

    Never fails the whole batch: unresolvable or disallowed edits become
    pending changes, and operations missing their parameters are skipped.

    Args:
        blocks: Current blocks (not modified)
        operations: Edits to apply, in order
        reason: Reason recorded on applied changes (a default per kind if None)
        allow_fuzzy_match: Allow title-substring target resolution
        min_block_duration: Floor for resize and split results, in minutes
            (never below 15)

    Returns:
        OperationResult with the change log and the new block list

    Raises:
        MalformedScheduleError: If the input block list is malformed
    """
    working = validate_blocks(blocks)
    min_block_duration = max(MIN_BLOCK_DURATION_MINUTES, min_block_duration)
    changes: List[Change] = []

    for operation in operations:
        index, fuzzy = resolve_target(working, operation.target_block_id, allow_fuzzy_match)
        if index is None and operation.target_block_title:
            # Stale id; fall back to the title hint and flag the match
            index, _ = resolve_target(working, operation.target_block_title, allow_fuzzy_match)
            fuzzy = index is not None
        if index is None:
            changes.append(_pending_not_found(operation, min_block_duration))
            continue

        block = working[index]
        if block.is_locked:
            lock = "read-only" if block.is_read_only else "pinned"
            changes.append(_pending(block, f"Block is {lock} and cannot be edited", fuzzy))
            continue

        kind = OperationKind(operation.kind)
        if kind == OperationKind.MOVE:
            change = _apply_move(working, index, operation, reason)
        elif kind == OperationKind.RESIZE:
            change = _apply_resize(working, index, operation, reason, min_block_duration)
        elif kind == OperationKind.DELETE:
            change = _apply_delete(working, index, reason)
        else:
            change = _apply_split(working, index, operation, reason, min_block_duration)

        if change is not None:
            change.fuzzy_match = fuzzy
            changes.append(change)

    return OperationResult(changes=changes, blocks=working)


def _pending(block: Block, reason: str, fuzzy: bool = False) -> Change:
    return Change(
        kind=ChangeKind.PENDING,
        block_id=block.id,
        block_title=block.title,
        old_start=block.start,
        old_end=block.end,
        reason=reason,
        fuzzy_match=fuzzy,
    )


def _parse_hint(value: Optional[str], end: bool = False) -> Optional[int]:
    if not value:
        return None
    try:
        return parse_time(value, allow_end_of_day=end)
    except InvalidTimeError:
        logger.debug(f"Ignoring unparsable time hint '{value}'")
        return None


def _pending_not_found(operation: Operation, min_block_duration: int) -> Change:
    """Build an informational change for an operation whose block is gone.

    When the caller supplied original start/end hints, a plausible before and
    after pair is synthesized for display.
    """
    title = operation.target_block_title or operation.target_block_id[:TRUNCATED_ID_LENGTH]
    old_start = _parse_hint(operation.original_start)
    old_end = _parse_hint(operation.original_end, end=True)
    new_start = new_end = None

    if old_start is not None and old_end is not None and old_start < old_end:
        params = operation.params
        kind = OperationKind(operation.kind)
        if kind == OperationKind.MOVE and params and params.shift_minutes is not None:
            new_start, new_end = old_start + params.shift_minutes, old_end + params.shift_minutes
        elif kind == OperationKind.RESIZE and params and params.duration_minutes is not None:
            new_start, new_end = old_start, old_start + max(min_block_duration, params.duration_minutes)
        if new_start is not None and (new_start < 0 or new_end > MINUTES_PER_DAY):
            new_start = new_end = None
        reason = f"Block not found in current schedule; proposed {OperationKind(operation.kind).value} shown from original times"
    else:
        old_start = old_end = None
        reason = "Block not found in current schedule; will be rescheduled"

    return Change(
        kind=ChangeKind.PENDING,
        block_id=operation.target_block_id,
        block_title=title,
        old_start=old_start,
        old_end=old_end,
        new_start=new_start,
        new_end=new_end,
        reason=reason,
    )


def _fits_in_day(start: int, end: int) -> bool:
    return 0 <= start < end <= MINUTES_PER_DAY


def _apply_move(working: List[Block], index: int, operation: Operation, reason: Optional[str]) -> Optional[Change]:
    block = working[index]
    shift = operation.params.shift_minutes if operation.params else None
    if not shift:
        logger.debug(f"Skipping move of '{block.id}' without a shift")
        return None

    new_start, new_end = block.start + shift, block.end + shift
    if not _fits_in_day(new_start, new_end):
        return _pending(block, f"Moving by {shift:+d} minutes would leave the day")

    working[index] = block.with_times(new_start, new_end)
    return Change(
        kind=ChangeKind.MOVED,
        block_id=block.id,
        block_title=block.title,
        old_start=block.start,
        old_end=block.end,
        new_start=new_start,
        new_end=new_end,
        reason=reason or f"Moved {shift:+d} minutes",
    )


def _apply_resize(
    working: List[Block],
    index: int,
    operation: Operation,
    reason: Optional[str],
    min_block_duration: int,
) -> Optional[Change]:
    block = working[index]
    duration = operation.params.duration_minutes if operation.params else None
    if duration is None:
        logger.debug(f"Skipping resize of '{block.id}' without a duration")
        return None

    duration = max(min_block_duration, duration)
    new_end = block.start + duration
    if not _fits_in_day(block.start, new_end):
        return _pending(block, f"Resizing to {duration} minutes would run past midnight")

    working[index] = block.with_times(block.start, new_end)
    return Change(
        kind=ChangeKind.RESIZED,
        block_id=block.id,
        block_title=block.title,
        old_start=block.start,
        old_end=block.end,
        new_start=block.start,
        new_end=new_end,
        reason=reason or f"Resized from {block.duration_minutes} to {duration} minutes",
    )


def _apply_delete(working: List[Block], index: int, reason: Optional[str]) -> Change:
    block = working.pop(index)
    return Change(
        kind=ChangeKind.REMOVED,
        block_id=block.id,
        block_title=block.title,
        old_start=block.start,
        old_end=block.end,
        reason=reason or "Removed from schedule",
    )


def _split_id(working: List[Block], block_id: str) -> str:
    taken = {b.id for b in working}
    suffix = 2
    while f"{block_id}-{suffix}" in taken:
        suffix += 1
    return f"{block_id}-{suffix}"


def _apply_split(
    working: List[Block],
    index: int,
    operation: Operation,
    reason: Optional[str],
    min_block_duration: int,
) -> Change:
    """Split a block in two at an offset from its start (midpoint by default)."""
    block = working[index]
    offset = operation.params.split_after_minutes if operation.params else None
    if offset is None:
        offset = block.duration_minutes // 2

    split_at = block.start + offset
    if offset < min_block_duration or block.end - split_at < min_block_duration:
        return _pending(
            block,
            f"Cannot split at {offset} minutes: both parts must be at least {min_block_duration} minutes",
        )

    first = block.with_times(block.start, split_at)
    second = Block(**{**block.model_dump(), "id": _split_id(working, block.id), "start": split_at})
    working[index:index + 1] = [first, second]

    return Change(
        kind=ChangeKind.SPLIT,
        block_id=block.id,
        block_title=block.title,
        old_start=block.start,
        old_end=block.end,
        new_start=first.start,
        new_end=first.end,
        reason=reason or f"Split at {format_time(split_at)} into '{first.id}' and '{second.id}'",
    )
