"""IFC GlobalId generation.

Every element carries a 22-character compressed GUID next to its integer
document id, so the same element can be traced into the exported IFC file.
"""

from __future__ import annotations

import uuid

import ifcopenshell.guid


def generate_ifc_id() -> str:
    """Generate a new IFC-compatible GlobalId (22 characters)."""
    return ifcopenshell.guid.compress(uuid.uuid4().hex)


def is_valid_ifc_id(value: str) -> bool:
    """Check if a string is a valid 22-character IFC GlobalId."""
    return isinstance(value, str) and len(value) == 22
