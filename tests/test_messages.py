"""Tests for reschedule message templates."""

from dayshape.engine.messages import compose_reschedule_message
from dayshape.models.operation import Change, ChangeKind
from dayshape.models.strategy import Strategy


def _strategy(*kinds):
    changes = [
        Change(kind=kind, block_id=f"b{i}", block_title=f"B{i}", reason="r")
        for i, kind in enumerate(kinds)
    ]
    return Strategy(id="s", title="S", changes=changes)


def test_no_strategy():
    message = compose_reschedule_message(None)
    assert "I'll work around the current commitments." in message
    assert message.startswith("Hi!")


def test_one_move():
    message = compose_reschedule_message(_strategy(ChangeKind.MOVED, ChangeKind.RESIZED))
    assert "I'll need to move 1 item to accommodate the changes." in message


def test_several_moves():
    message = compose_reschedule_message(_strategy(ChangeKind.MOVED, ChangeKind.MOVED, ChangeKind.PENDING))
    assert "move 2 items" in message


def test_only_pending_changes():
    message = compose_reschedule_message(_strategy(ChangeKind.PENDING))
    assert "work around" in message
