"""Length unit conversion.

Documents store lengths in decimal feet, the host's internal unit.
Configuration and user input are in millimetres.
"""

from __future__ import annotations

MM_PER_FOOT = 304.8
M_PER_FOOT = 0.3048


def mm_to_internal(value: float) -> float:
    """Millimetres to internal length units (feet)."""
    return value / MM_PER_FOOT


def internal_to_mm(value: float) -> float:
    """Internal length units (feet) to millimetres."""
    return value * MM_PER_FOOT


def internal_to_m(value: float) -> float:
    """Internal length units (feet) to metres."""
    return value * M_PER_FOOT
