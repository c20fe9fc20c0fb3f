"""Document data models."""

from shell_builder.models.ifc_id import generate_ifc_id
from shell_builder.models.geometry import XYZ, Line
from shell_builder.models.elements import (
    BuiltInCategory,
    BuiltInParameter,
    Element,
    ExtrusionRoof,
    FamilyInstance,
    FamilySymbol,
    Level,
    ReferencePlane,
    RoofType,
    Wall,
    WallType,
)
from shell_builder.models.document import ModelDocument

__all__ = [
    "generate_ifc_id",
    "XYZ",
    "Line",
    "BuiltInCategory",
    "BuiltInParameter",
    "Element",
    "ExtrusionRoof",
    "FamilyInstance",
    "FamilySymbol",
    "Level",
    "ReferencePlane",
    "RoofType",
    "Wall",
    "WallType",
    "ModelDocument",
]
