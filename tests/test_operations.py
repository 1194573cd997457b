"""Tests for the operation applier."""

import logging

import pytest

from dayshape.engine.operations import apply_operations, resolve_target
from dayshape.engine.validation import MalformedScheduleError
from dayshape.models.operation import Change, ChangeKind, Operation, OperationKind, OperationParams


def _op(kind, target, **params):
    return Operation(
        kind=kind,
        target_block_id=target,
        params=OperationParams(**params) if params else None,
    )


class TestResolveTarget:
    """Test three-tier target resolution."""

    def test_by_id(self, make_block):
        blocks = [make_block("a", "09:00", "10:00", title="Standup")]
        assert resolve_target(blocks, "a") == (0, False)

    def test_by_exact_title(self, make_block):
        blocks = [make_block("a", "09:00", "10:00", title="Standup")]
        assert resolve_target(blocks, "Standup") == (0, False)

    def test_id_wins_over_title(self, make_block):
        blocks = [
            make_block("x", "09:00", "10:00", title="b"),
            make_block("b", "10:00", "11:00", title="Other"),
        ]
        assert resolve_target(blocks, "b") == (1, False)

    def test_substring_match_is_flagged(self, make_block, caplog):
        blocks = [make_block("a", "09:00", "10:00", title="Weekly Planning Session")]
        with caplog.at_level(logging.WARNING):
            assert resolve_target(blocks, "planning") == (0, True)
        assert "substring" in caplog.text

    def test_target_containing_title(self, make_block):
        blocks = [make_block("a", "09:00", "10:00", title="Lunch")]
        assert resolve_target(blocks, "Lunch with Sam") == (0, True)

    def test_fuzzy_disabled(self, make_block):
        blocks = [make_block("a", "09:00", "10:00", title="Weekly Planning Session")]
        assert resolve_target(blocks, "planning", allow_fuzzy_match=False) == (None, False)

    def test_blank_target_never_matches(self, make_block):
        blocks = [make_block("a", "09:00", "10:00", title="Standup")]
        assert resolve_target(blocks, "  ") == (None, False)


class TestMove:
    """Test move operations."""

    def test_move_forward(self, make_block):
        blocks = [make_block("a", "09:00", "10:00", title="Standup")]
        result = apply_operations(blocks, [_op(OperationKind.MOVE, "a", shift_minutes=30)])

        assert (result.blocks[0].start, result.blocks[0].end) == (570, 630)
        change = result.changes[0]
        assert change.kind == ChangeKind.MOVED
        assert (change.old_start, change.old_end, change.new_start, change.new_end) == (540, 600, 570, 630)
        assert change.reason == "Moved +30 minutes"
        assert change.fuzzy_match is False

    def test_move_there_and_back(self, make_block):
        blocks = [make_block("a", "09:00", "10:00")]
        result = apply_operations(blocks, [
            _op(OperationKind.MOVE, "a", shift_minutes=30),
            _op(OperationKind.MOVE, "a", shift_minutes=-30),
        ])

        assert (result.blocks[0].start, result.blocks[0].end) == (540, 600)
        assert [c.kind for c in result.changes] == [ChangeKind.MOVED, ChangeKind.MOVED]

    def test_input_not_modified(self, make_block):
        blocks = [make_block("a", "09:00", "10:00")]
        apply_operations(blocks, [_op(OperationKind.MOVE, "a", shift_minutes=30)])
        assert blocks[0].start == 540

    def test_move_off_the_day_is_pending(self, make_block):
        blocks = [make_block("a", "23:00", "23:45")]
        result = apply_operations(blocks, [_op(OperationKind.MOVE, "a", shift_minutes=30)])

        assert result.changes[0].kind == ChangeKind.PENDING
        assert result.blocks == blocks

    def test_missing_shift_is_skipped(self, make_block):
        blocks = [make_block("a", "09:00", "10:00")]
        result = apply_operations(blocks, [_op(OperationKind.MOVE, "a")])

        assert result.changes == []
        assert result.blocks == blocks

    def test_custom_reason(self, make_block):
        blocks = [make_block("a", "09:00", "10:00")]
        result = apply_operations(blocks, [_op(OperationKind.MOVE, "a", shift_minutes=15)], reason="Because")
        assert result.changes[0].reason == "Because"


class TestResize:
    """Test resize operations."""

    def test_resize_keeps_start(self, make_block):
        blocks = [make_block("a", "09:00", "10:00")]
        result = apply_operations(blocks, [_op(OperationKind.RESIZE, "a", duration_minutes=45)])

        assert (result.blocks[0].start, result.blocks[0].end) == (540, 585)
        assert result.changes[0].kind == ChangeKind.RESIZED
        assert result.changes[0].reason == "Resized from 60 to 45 minutes"

    @pytest.mark.parametrize("requested", [14, 5, 0, -30])
    def test_resize_floor(self, make_block, requested):
        blocks = [make_block("a", "09:00", "10:00")]
        result = apply_operations(blocks, [_op(OperationKind.RESIZE, "a", duration_minutes=requested)])
        assert result.blocks[0].duration_minutes == 15

    def test_floor_cannot_be_lowered(self, make_block):
        blocks = [make_block("a", "09:00", "10:00")]
        result = apply_operations(
            blocks, [_op(OperationKind.RESIZE, "a", duration_minutes=5)], min_block_duration=5
        )
        assert result.blocks[0].duration_minutes == 15

    def test_resize_past_midnight_is_pending(self, make_block):
        blocks = [make_block("a", "23:00", "23:30")]
        result = apply_operations(blocks, [_op(OperationKind.RESIZE, "a", duration_minutes=90)])

        assert result.changes[0].kind == ChangeKind.PENDING
        assert result.blocks[0].end == 1410


class TestDelete:
    """Test delete operations."""

    def test_delete(self, make_block):
        blocks = [make_block("a", "09:00", "10:00"), make_block("b", "11:00", "12:00")]
        result = apply_operations(blocks, [_op(OperationKind.DELETE, "a")])

        assert [b.id for b in result.blocks] == ["b"]
        assert result.changes[0].kind == ChangeKind.REMOVED
        assert result.changes[0].reason == "Removed from schedule"

    def test_later_operation_sees_deletion(self, make_block):
        blocks = [make_block("a", "09:00", "10:00")]
        result = apply_operations(blocks, [
            _op(OperationKind.DELETE, "a"),
            _op(OperationKind.MOVE, "a", shift_minutes=30),
        ])

        assert result.blocks == []
        assert [c.kind for c in result.changes] == [ChangeKind.REMOVED, ChangeKind.PENDING]


class TestSplit:
    """Test split operations."""

    def test_split_at_midpoint(self, make_block):
        blocks = [make_block("x", "09:00", "10:00"), make_block("y", "11:00", "12:00")]
        result = apply_operations(blocks, [_op(OperationKind.SPLIT, "x")])

        assert [(b.id, b.start, b.end) for b in result.blocks] == [
            ("x", 540, 570),
            ("x-2", 570, 600),
            ("y", 660, 720),
        ]
        assert result.changes[0].kind == ChangeKind.SPLIT
        assert result.changes[0].reason == "Split at 09:30 into 'x' and 'x-2'"

    def test_split_at_offset(self, make_block):
        blocks = [make_block("x", "09:00", "10:00")]
        result = apply_operations(blocks, [_op(OperationKind.SPLIT, "x", split_after_minutes=20)])
        assert [(b.start, b.end) for b in result.blocks] == [(540, 560), (560, 600)]

    def test_split_id_avoids_collision(self, make_block):
        blocks = [make_block("x", "09:00", "10:00"), make_block("x-2", "11:00", "12:00")]
        result = apply_operations(blocks, [_op(OperationKind.SPLIT, "x")])
        assert [b.id for b in result.blocks] == ["x", "x-3", "x-2"]

    def test_split_too_short_is_pending(self, make_block):
        blocks = [make_block("x", "09:00", "09:20")]
        result = apply_operations(blocks, [_op(OperationKind.SPLIT, "x")])

        assert result.changes[0].kind == ChangeKind.PENDING
        assert result.blocks == blocks


class TestPending:
    """Test edits that can't be applied."""

    def test_unknown_target(self, make_block):
        blocks = [make_block("a", "09:00", "10:00", title="Standup")]
        result = apply_operations(blocks, [_op(OperationKind.MOVE, "zzz", shift_minutes=30)])

        assert result.blocks == blocks
        assert len(result.changes) == 1
        change = result.changes[0]
        assert change.kind == ChangeKind.PENDING
        assert "not found" in change.reason
        assert change.old_start is None

    def test_unknown_target_truncates_id(self):
        op = _op(OperationKind.DELETE, "0123456789abcdef")
        change = apply_operations([], [op]).changes[0]
        assert change.block_title == "01234567"
        assert change.block_id == "0123456789abcdef"

    def test_unknown_target_uses_title_hint(self):
        op = Operation(kind=OperationKind.DELETE, target_block_id="gone", target_block_title="Dentist")
        assert apply_operations([], [op]).changes[0].block_title == "Dentist"

    def test_unknown_target_with_original_times(self):
        op = Operation(
            kind=OperationKind.MOVE,
            target_block_id="gone",
            original_start="14:00",
            original_end="15:00",
            params=OperationParams(shift_minutes=60),
        )
        change = apply_operations([], [op]).changes[0]

        assert change.kind == ChangeKind.PENDING
        assert (change.old_start, change.old_end, change.new_start, change.new_end) == (840, 900, 900, 960)
        assert "proposed move" in change.reason

    def test_unknown_target_resize_hint_respects_floor(self):
        op = Operation(
            kind=OperationKind.RESIZE,
            target_block_id="gone",
            original_start="14:00",
            original_end="15:00",
            params=OperationParams(duration_minutes=5),
        )
        change = apply_operations([], [op]).changes[0]
        assert (change.new_start, change.new_end) == (840, 855)

    def test_unknown_target_resize_hint_uses_configured_floor(self):
        op = Operation(
            kind=OperationKind.RESIZE,
            target_block_id="gone",
            original_start="14:00",
            original_end="15:00",
            params=OperationParams(duration_minutes=5),
        )
        change = apply_operations([], [op], min_block_duration=30).changes[0]
        assert (change.new_start, change.new_end) == (840, 870)

    def test_stale_id_resolved_by_title_hint(self, make_block):
        blocks = [make_block("fresh-id", "09:00", "10:00", title="Dentist")]
        op = Operation(
            kind=OperationKind.MOVE,
            target_block_id="stale-id",
            target_block_title="Dentist",
            params=OperationParams(shift_minutes=30),
        )
        result = apply_operations(blocks, [op])

        assert result.changes[0].kind == ChangeKind.MOVED
        assert result.changes[0].block_id == "fresh-id"
        assert result.changes[0].fuzzy_match is True
        assert result.blocks[0].start == 570

    @pytest.mark.parametrize("flag", ["is_pinned", "is_read_only"])
    def test_locked_block(self, make_block, flag):
        blocks = [make_block("a", "09:00", "10:00", **{flag: True})]
        result = apply_operations(blocks, [_op(OperationKind.DELETE, "a")])

        assert result.blocks == blocks
        assert result.changes[0].kind == ChangeKind.PENDING
        assert "cannot be edited" in result.changes[0].reason

    def test_fuzzy_marker_on_change(self, make_block):
        blocks = [make_block("a", "09:00", "10:00", title="Team Standup")]
        result = apply_operations(blocks, [_op(OperationKind.MOVE, "standup", shift_minutes=15)])

        assert result.changes[0].kind == ChangeKind.MOVED
        assert result.changes[0].fuzzy_match is True

    def test_rejects_malformed_schedule(self, make_block):
        blocks = [make_block("a", "09:00", "10:00"), make_block("a", "10:00", "11:00")]
        with pytest.raises(MalformedScheduleError):
            apply_operations(blocks, [])


class TestOperationModels:
    """Test wire aliases of Operation and Change."""

    def test_camel_case_payload(self):
        op = Operation.model_validate({
            "type": "move",
            "targetBlockId": "abc",
            "targetBlockTitle": "Gym",
            "params": {"shiftMinutes": -15},
        })
        assert op.kind == OperationKind.MOVE
        assert op.params.shift_minutes == -15

    def test_change_serializes_times(self):
        change = Change(kind=ChangeKind.MOVED, block_id="a", block_title="A", old_start=540, new_start="09:30", reason="r")
        data = change.model_dump()
        assert data["old_start"] == "09:00"
        assert data["new_start"] == "09:30"
        assert data["old_end"] is None
