"""Tests for free-slot search."""

import pytest

from dayshape.engine.free_slot import find_free_slot, list_free_slots
from dayshape.models.clock import InvalidTimeError


class TestFindFreeSlot:
    """Test find_free_slot()."""

    def test_anchor_itself_is_free(self, make_block):
        """A block at 09:00-10:00 doesn't touch a 30 minute slot at 08:00."""
        assert find_free_slot([make_block("a", "09:00", "10:00")], 30, "08:00") == 480

    def test_empty_schedule(self):
        assert find_free_slot([], 60, 600) == 600

    def test_jumps_past_back_to_back_blocks(self, make_block):
        blocks = [make_block("a", "09:00", "10:00"), make_block("b", "10:00", "11:00")]
        assert find_free_slot(blocks, 60, "09:00") == 660

    def test_skips_gap_too_small(self, make_block):
        blocks = [make_block("a", "09:00", "10:00"), make_block("b", "10:20", "12:00")]
        assert find_free_slot(blocks, 30, "09:00") == 720

    def test_uses_gap_big_enough(self, make_block):
        blocks = [make_block("a", "09:00", "10:00"), make_block("b", "10:30", "12:00")]
        assert find_free_slot(blocks, 30, "09:00") == 600

    def test_slot_ending_at_day_end(self):
        assert find_free_slot([], 30, "21:30") == 1290

    def test_nothing_fits_before_day_end(self, make_block):
        blocks = [make_block("late", "20:00", "22:00")]
        assert find_free_slot(blocks, 30, "20:00") is None

    def test_custom_day_end(self, make_block):
        blocks = [make_block("late", "20:00", "22:00")]
        assert find_free_slot(blocks, 30, "20:00", day_end="24:00") == 1320

    def test_unsorted_blocks(self, make_block):
        blocks = [make_block("b", "10:00", "11:00"), make_block("a", "09:00", "10:00")]
        assert find_free_slot(blocks, 15, "09:30") == 660

    @pytest.mark.parametrize("duration", [0, -15])
    def test_rejects_non_positive_duration(self, duration):
        with pytest.raises(ValueError):
            find_free_slot([], duration, "09:00")

    def test_rejects_bad_anchor(self):
        with pytest.raises(InvalidTimeError):
            find_free_slot([], 30, "nine")


class TestListFreeSlots:
    """Test list_free_slots()."""

    def test_gaps_between_merged_blocks(self, make_block):
        blocks = [
            make_block("a", "09:00", "10:00"),
            make_block("b", "09:30", "11:00"),
            make_block("c", "12:00", "12:10"),
        ]
        slots = list_free_slots(blocks, "08:00", "13:00")

        assert [(s.start, s.end, s.duration_minutes) for s in slots] == [
            (480, 540, 60),
            (660, 720, 60),
            (730, 780, 50),
        ]

    def test_drops_short_gaps(self, make_block):
        blocks = [make_block("a", "09:00", "10:00"), make_block("b", "10:10", "11:00")]
        slots = list_free_slots(blocks, "09:00", "11:00")
        assert slots == []

    def test_min_duration(self, make_block):
        blocks = [make_block("a", "09:00", "10:00"), make_block("b", "10:10", "11:00")]
        slots = list_free_slots(blocks, "09:00", "11:00", min_duration=5)
        assert [(s.start, s.end) for s in slots] == [(600, 610)]

    def test_empty_day(self):
        slots = list_free_slots([])
        assert len(slots) == 1
        assert slots[0].model_dump() == {"start": "00:00", "end": "24:00", "duration_minutes": 1440}

    def test_blocks_outside_window_ignored(self, make_block):
        blocks = [make_block("early", "07:00", "08:30"), make_block("late", "18:00", "19:00")]
        slots = list_free_slots(blocks, "09:00", "17:00")
        assert [(s.start, s.end) for s in slots] == [(540, 1020)]
