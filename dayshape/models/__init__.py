"""Data models for dayshape."""

from dayshape.models.block import Block, BlockKind, EnergyLevel, Priority
from dayshape.models.clock import InvalidTimeError, parse_time, format_time
from dayshape.models.conflict import Conflict, ConflictKind, Severity
from dayshape.models.operation import Operation, OperationKind, OperationParams, Change, ChangeKind
from dayshape.models.strategy import Strategy, StrategySource, FreeSlot

__all__ = [
    "Block",
    "BlockKind",
    "EnergyLevel",
    "Priority",
    "InvalidTimeError",
    "parse_time",
    "format_time",
    "Conflict",
    "ConflictKind",
    "Severity",
    "Operation",
    "OperationKind",
    "OperationParams",
    "Change",
    "ChangeKind",
    "Strategy",
    "StrategySource",
    "FreeSlot",
]
