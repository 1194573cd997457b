"""Tests for block ranking (deterministic behavior)."""

from dayshape.engine.ranking import (
    KIND_WEIGHTS,
    PRIORITY_WEIGHTS,
    block_score,
    kind_weight,
    priority_weight,
    rank_blocks,
)
from dayshape.models.block import BlockKind, Priority


class TestWeights:
    """Test weight tables."""

    def test_every_kind_has_a_weight(self):
        assert set(KIND_WEIGHTS) == set(BlockKind)

    def test_every_priority_has_a_weight(self):
        assert set(PRIORITY_WEIGHTS) == set(Priority)

    def test_kind_weight(self, make_block):
        assert kind_weight(make_block("d", "09:00", "10:00", kind=BlockKind.DEEP)) == 3
        assert kind_weight(make_block("m", "09:00", "10:00", kind=BlockKind.MEETING)) == 2
        assert kind_weight(make_block("p", "09:00", "10:00", kind=BlockKind.PREP)) == 1
        assert kind_weight(make_block("b", "09:00", "10:00", kind=BlockKind.MICRO_BREAK)) == 0

    def test_missing_priority_weighs_zero(self, make_block):
        assert priority_weight(make_block("m", "09:00", "10:00")) == 0

    def test_priority_dominates_kind(self, make_block):
        low_deep = make_block("d", "09:00", "10:00", kind=BlockKind.DEEP, priority=Priority.LOW)
        medium_errand = make_block("e", "09:00", "10:00", kind=BlockKind.ERRAND, priority=Priority.MEDIUM)
        assert block_score(low_deep) == 13
        assert block_score(medium_errand) == 20


class TestRankBlocks:
    """Test rank_blocks()."""

    def test_highest_first(self, make_block):
        blocks = [
            make_block("e", "09:00", "10:00", kind=BlockKind.ERRAND),
            make_block("d", "09:00", "10:00", kind=BlockKind.DEEP),
            make_block("m", "09:00", "10:00", kind=BlockKind.MEETING),
        ]
        assert [b.id for b in rank_blocks(blocks)] == ["d", "m", "e"]

    def test_ties_keep_input_order(self, make_block):
        blocks = [
            make_block("m1", "09:00", "10:00"),
            make_block("m2", "09:00", "10:00"),
        ]
        assert [b.id for b in rank_blocks(blocks)] == ["m1", "m2"]
        assert [b.id for b in rank_blocks(list(reversed(blocks)))] == ["m2", "m1"]
