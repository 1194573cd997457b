"""Conflict detection for dayshape.

Scans a day's blocks (sorted by start time) with five independent passes:
overlaps, meeting buffers, working-hours overruns, energy mismatches and
oversized focus blocks. Pure function of its inputs; no I/O.
"""

import logging
from typing import List, Optional, Sequence, Tuple
from pydantic import BaseModel, Field, field_validator, model_validator

from dayshape.models.block import Block, BlockKind, EnergyLevel
from dayshape.models.clock import coerce_minutes, format_time
from dayshape.models.conflict import Conflict, ConflictKind, Severity
from dayshape.models.constants import (
    DEFAULT_WORKING_HOURS_START,
    DEFAULT_WORKING_HOURS_END,
    DEFAULT_MINIMUM_BUFFER_MINUTES,
    DEFAULT_MAX_FOCUS_DURATION_MINUTES,
    HIGH_ENERGY_WINDOW,
    LOW_ENERGY_WINDOW,
)
from dayshape.engine.validation import validate_blocks

logger = logging.getLogger(__name__)


class ConflictDetectionOptions(BaseModel):
    """Tunable thresholds for conflict detection.

    Times accept minute-of-day ints or "HH:MM" strings.
    """

    working_hours_start: int = Field(DEFAULT_WORKING_HOURS_START, description="Start of the working day")
    working_hours_end: int = Field(DEFAULT_WORKING_HOURS_END, description="End of the working day")
    minimum_buffer_between_meetings: int = Field(DEFAULT_MINIMUM_BUFFER_MINUTES, ge=0)
    max_focus_duration: int = Field(DEFAULT_MAX_FOCUS_DURATION_MINUTES, gt=0)
    consider_energy_levels: bool = Field(True, description="Enable energy-mismatch checks")
    high_energy_window: Tuple[int, int] = Field(HIGH_ENERGY_WINDOW, description="Prime focus hours")
    low_energy_window: Tuple[int, int] = Field(LOW_ENERGY_WINDOW, description="Typical energy dip")
    detect_nested_overlaps: bool = Field(
        False,
        description="Check every intersecting pair instead of start-order neighbours only",
    )

    @field_validator("working_hours_start", mode="before")
    @classmethod
    def _parse_start(cls, v):
        return coerce_minutes(v)

    @field_validator("working_hours_end", mode="before")
    @classmethod
    def _parse_end(cls, v):
        return coerce_minutes(v, allow_end_of_day=True)

    @field_validator("high_energy_window", "low_energy_window", mode="before")
    @classmethod
    def _parse_window(cls, v):
        if not isinstance(v, (list, tuple)) or len(v) != 2:
            raise ValueError("Energy window must be a [start, end] pair")
        start, end = v
        start, end = coerce_minutes(start), coerce_minutes(end, allow_end_of_day=True)
        if start >= end:
            raise ValueError("Energy window must start before it ends")
        return (start, end)

    @model_validator(mode="after")
    def _check_working_hours(self):
        if self.working_hours_start >= self.working_hours_end:
            raise ValueError("Working hours must start before they end")
        return self


def detect_conflicts(
    blocks: Sequence[Block],
    options: Optional[ConflictDetectionOptions] = None,
) -> List[Conflict]:
    """Detect scheduling conflicts in a day's blocks.

    The input need not be sorted. Passes run in a fixed order (overlaps,
    buffers, working hours, energy, oversized focus), so identical input
    yields identical output.

    Args:
        blocks: The day's blocks
        options: Detection thresholds (defaults if None)

    Returns:
        List of conflicts (empty if none)

    Raises:
        MalformedScheduleError: If the block list is malformed
    """
    options = options or ConflictDetectionOptions()
    validate_blocks(blocks)

    # Stable sort: blocks starting together keep their input order
    sorted_blocks = sorted(blocks, key=lambda b: b.start)

    conflicts: List[Conflict] = []
    if options.detect_nested_overlaps:
        conflicts.extend(_detect_all_overlaps(sorted_blocks))
    else:
        conflicts.extend(_detect_adjacent_overlaps(sorted_blocks))
    conflicts.extend(_detect_insufficient_buffers(sorted_blocks, options))
    conflicts.extend(_detect_working_hours_overruns(sorted_blocks, options))
    if options.consider_energy_levels:
        conflicts.extend(_detect_energy_mismatches(sorted_blocks, options))
    conflicts.extend(_detect_oversized_focus_blocks(sorted_blocks, options))

    logger.debug(f"Detected {len(conflicts)} conflicts across {len(sorted_blocks)} blocks")
    return conflicts


def _overlap_severity(minutes: int) -> Severity:
    if minutes > 30:
        return Severity.HIGH
    if minutes > 15:
        return Severity.MEDIUM
    return Severity.LOW


def _overlap_conflict(first: Block, second: Block) -> Conflict:
    # Intersection length; equals first.end - second.start unless second is nested in first
    overlap_minutes = min(first.end, second.end) - second.start
    return Conflict(
        kind=ConflictKind.OVERLAP,
        severity=_overlap_severity(overlap_minutes),
        affected_blocks=[first, second],
        description=f"{first.title} overlaps with {second.title} by {overlap_minutes} minutes",
        estimated_delay=overlap_minutes,
    )


def _detect_adjacent_overlaps(blocks: List[Block]) -> List[Conflict]:
    """Compare each block with its successor in start order only.

    A short block nested under an earlier long block is missed when a third
    block starts between them.
    """
    conflicts = []
    for current, following in zip(blocks, blocks[1:]):
        if current.end > following.start:
            conflicts.append(_overlap_conflict(current, following))
    return conflicts


def _detect_all_overlaps(blocks: List[Block]) -> List[Conflict]:
    """Sweep over start-sorted blocks and report every intersecting pair once."""
    conflicts = []
    for i, current in enumerate(blocks):
        for following in blocks[i + 1:]:
            if following.start >= current.end:
                break
            conflicts.append(_overlap_conflict(current, following))
    return conflicts


def _detect_insufficient_buffers(blocks: List[Block], options: ConflictDetectionOptions) -> List[Conflict]:
    conflicts = []
    minimum = options.minimum_buffer_between_meetings
    meetings = [b for b in blocks if b.kind == BlockKind.MEETING]

    for current, following in zip(meetings, meetings[1:]):
        gap = following.start - current.end
        if gap < minimum:
            missing = minimum - gap
            if missing > 15:
                severity = Severity.HIGH
            elif missing > 5:
                severity = Severity.MEDIUM
            else:
                severity = Severity.LOW
            conflicts.append(Conflict(
                kind=ConflictKind.BUFFER_INSUFFICIENT,
                severity=severity,
                affected_blocks=[current, following],
                description=f"Only {gap} minutes between meetings ({minimum} minutes recommended)",
                estimated_delay=missing,
            ))
    return conflicts


def _overrun_severity(minutes: int) -> Severity:
    if minutes > 60:
        return Severity.HIGH
    if minutes > 30:
        return Severity.MEDIUM
    return Severity.LOW


def _detect_working_hours_overruns(blocks: List[Block], options: ConflictDetectionOptions) -> List[Conflict]:
    conflicts = []
    day_start = options.working_hours_start
    day_end = options.working_hours_end

    for block in blocks:
        if block.start < day_start:
            early = day_start - block.start
            conflicts.append(Conflict(
                kind=ConflictKind.WORKING_HOURS_OVERRUN,
                severity=_overrun_severity(early),
                affected_blocks=[block],
                description=f"{block.title} starts {early} minutes before working hours ({format_time(day_start)})",
                estimated_delay=early,
            ))
        if block.end > day_end:
            late = block.end - day_end
            conflicts.append(Conflict(
                kind=ConflictKind.WORKING_HOURS_OVERRUN,
                severity=_overrun_severity(late),
                affected_blocks=[block],
                description=f"{block.title} extends {late} minutes beyond working hours ({format_time(day_end)})",
                estimated_delay=late,
            ))
    return conflicts


def _detect_energy_mismatches(blocks: List[Block], options: ConflictDetectionOptions) -> List[Conflict]:
    conflicts = []
    high_start, high_end = options.high_energy_window
    low_start, low_end = options.low_energy_window

    for block in blocks:
        if block.kind == BlockKind.DEEP and block.energy == EnergyLevel.HIGH:
            if low_start <= block.start < low_end:
                conflicts.append(Conflict(
                    kind=ConflictKind.ENERGY_MISMATCH,
                    severity=Severity.MEDIUM,
                    affected_blocks=[block],
                    description=f'High-energy task "{block.title}" scheduled during typical low-energy period',
                    estimated_delay=0,
                ))
        if block.kind == BlockKind.ADMIN:
            if high_start <= block.start < high_end:
                conflicts.append(Conflict(
                    kind=ConflictKind.ENERGY_MISMATCH,
                    severity=Severity.LOW,
                    affected_blocks=[block],
                    description=f'Administrative task "{block.title}" scheduled during prime focus hours',
                    estimated_delay=0,
                ))
    return conflicts


def _detect_oversized_focus_blocks(blocks: List[Block], options: ConflictDetectionOptions) -> List[Conflict]:
    conflicts = []
    maximum = options.max_focus_duration

    for block in blocks:
        if block.kind != BlockKind.DEEP:
            continue
        excess = block.duration_minutes - maximum
        if excess > 0:
            conflicts.append(Conflict(
                kind=ConflictKind.OVERSIZED_FOCUS_BLOCK,
                severity=Severity.HIGH if excess > 60 else Severity.MEDIUM,
                affected_blocks=[block],
                description=(
                    f'Deep work block "{block.title}" is {excess} minutes longer than '
                    f"recommended maximum ({maximum} minutes)"
                ),
                estimated_delay=0,
            ))
    return conflicts
