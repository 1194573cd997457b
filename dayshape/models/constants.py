"""Constants for dayshape.

This module centralizes default values used throughout the engine.
All times are minute-of-day.
"""

# Working hours
DEFAULT_WORKING_HOURS_START = 9 * 60
DEFAULT_WORKING_HOURS_END = 17 * 60

# Conflict detection
DEFAULT_MINIMUM_BUFFER_MINUTES = 15
DEFAULT_MAX_FOCUS_DURATION_MINUTES = 120
HIGH_ENERGY_WINDOW = (9 * 60, 11 * 60)  # Prime focus hours
LOW_ENERGY_WINDOW = (13 * 60, 15 * 60)  # Post-lunch dip

# Free-slot search
DEFAULT_DAY_END = 22 * 60
MIN_FREE_SLOT_MINUTES = 15

# Strategy heuristics
MIN_BLOCK_DURATION_MINUTES = 15
ADMIN_FALLBACK_START = 16 * 60
ADMIN_FALLBACK_STEP_MINUTES = 30
RESCHEDULE_TARGET = 17 * 60
OVERLAP_COMPRESSION = 0.75  # Keep 75% of the duration
OVERRUN_COMPRESSION = 0.8  # Keep 80% of the duration

# Strategy ids
PROTECT_FOCUS = "protect_focus"
HIT_DEADLINES = "hit_deadlines"
RESCHEDULE_LATER = "reschedule_later"
