"""Pytest fixtures and configuration for dayshape tests."""

import pytest
from fastapi.testclient import TestClient

from dayshape.models.block import Block, BlockKind, EnergyLevel, Priority
from dayshape.engine.conflicts import ConflictDetectionOptions


@pytest.fixture
def sample_block_base():
    """Base block data for creating test blocks.

    Returns a dict with default block attributes that can be overridden.
    """
    return {
        "id": "block-1",
        "title": "Test Block",
        "kind": BlockKind.MEETING,
        "start": "09:00",
        "end": "10:00",
        "location": None,
        "energy": None,
        "priority": None,
        "is_pinned": False,
        "is_read_only": False,
    }


@pytest.fixture
def make_block(sample_block_base):
    """Factory for blocks: make_block(id, start, end, **overrides).

    The title defaults to the id.
    """
    def _make(block_id: str, start, end, **overrides) -> Block:
        data = {**sample_block_base, "id": block_id, "title": block_id, "start": start, "end": end}
        data.update(overrides)
        return Block(**data)
    return _make


@pytest.fixture
def overlapping_meetings(make_block):
    """Meeting A 09:00-10:00 and meeting B 09:30-10:15."""
    return [
        make_block("a", "09:00", "10:00", title="Meeting A"),
        make_block("b", "09:30", "10:15", title="Meeting B"),
    ]


@pytest.fixture
def focus_collision(make_block):
    """Deep work 09:00-11:00 colliding with a client call 10:30-11:00."""
    return [
        make_block("d1", "09:00", "11:00", kind=BlockKind.DEEP, title="Deep Work"),
        make_block("m1", "10:30", "11:00", kind=BlockKind.MEETING, title="Client Call"),
    ]


@pytest.fixture
def high_energy_deep_block(make_block):
    """High-energy deep work block starting in the afternoon dip."""
    return make_block("deep-pm", "13:30", "14:30", kind=BlockKind.DEEP, energy=EnergyLevel.HIGH)


@pytest.fixture
def high_priority_meeting(make_block):
    return make_block("vip", "10:30", "11:00", priority=Priority.HIGH, title="Board Call")


@pytest.fixture
def all_day_options():
    """Options with a 24h working window and no energy checks.

    Isolates overlap, buffer and oversized-focus checks from the others.
    """
    return ConflictDetectionOptions(
        working_hours_start="00:00",
        working_hours_end="24:00",
        consider_energy_levels=False,
    )


@pytest.fixture
def test_client():
    """Create a FastAPI test client."""
    from dayshape.api.app import app

    with TestClient(app) as client:
        yield client
