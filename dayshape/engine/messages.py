"""Reschedule message templates for dayshape.

Used when no message-writing service is available to tell other attendees
about a chosen strategy.
"""

from typing import Optional

from dayshape.models.operation import ChangeKind
from dayshape.models.strategy import Strategy


def compose_reschedule_message(strategy: Optional[Strategy]) -> str:
    """Compose a short, polite heads-up message for a chosen strategy.

    Args:
        strategy: The strategy the user picked (None if nothing was picked)

    Returns:
        Message text mentioning how many items will move
    """
    moved = 0
    if strategy is not None:
        moved = sum(1 for change in strategy.changes if change.kind == ChangeKind.MOVED)

    if moved > 0:
        plural = "s" if moved > 1 else ""
        middle = f"I'll need to move {moved} item{plural} to accommodate the changes."
    else:
        middle = "I'll work around the current commitments."

    return (
        "Hi! I need to make a quick schedule adjustment due to some conflicts that came up. "
        f"{middle} I'll send updated times shortly. Thanks for your flexibility!"
    )
