"""Document elements: levels, types, walls, openings, roofs.

Each element has an integer ``id`` assigned by the owning document (the
host's element id) and an IFC GlobalId used by the IFC exporter. Element
parameters are stored in a table keyed by ``BuiltInParameter``.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal, Union

from pydantic import BaseModel, Field, model_validator

from shell_builder.models.geometry import XYZ, Line
from shell_builder.models.ifc_id import generate_ifc_id


class BuiltInParameter(str, Enum):
    """Built-in parameters read or written by the generator."""

    LEVEL_ELEV = "LEVEL_ELEV"
    WALL_HEIGHT_TYPE = "WALL_HEIGHT_TYPE"
    INSTANCE_SILL_HEIGHT_PARAM = "INSTANCE_SILL_HEIGHT_PARAM"


class BuiltInCategory(str, Enum):
    """Categories of family types."""

    DOORS = "doors"
    WINDOWS = "windows"


ParameterValue = Union[float, int, str]


class Element(BaseModel):
    """Base for everything stored in a document."""

    id: int = Field(default=-1, description="Document element id, assigned on insertion")
    global_id: str = Field(default_factory=generate_ifc_id, description="IFC GlobalId")
    name: str = ""
    parameters: dict[BuiltInParameter, ParameterValue] = Field(default_factory=dict)


class Level(Element):
    """A named horizontal elevation reference."""

    kind: Literal["level"] = "level"
    elevation: float = Field(default=0.0, description="Elevation in feet")


class WallType(Element):
    """Wall type; its width is the thickness of every wall of the type."""

    kind: Literal["wall_type"] = "wall_type"
    width: float = Field(gt=0, description="Wall thickness in feet")


class FamilySymbol(Element):
    """An instantiable family type (a specific door or window product).

    ``name`` is the type name, ``family_name`` the owning family.
    A symbol must be activated before its first instance is placed.
    """

    kind: Literal["family_symbol"] = "family_symbol"
    category: BuiltInCategory
    family_name: str
    width: float = Field(gt=0, description="Opening width in feet")
    height: float = Field(gt=0, description="Opening height in feet")
    is_active: bool = False


class RoofType(Element):
    """Roof type; ``thickness`` is the build-up depth of the roof."""

    kind: Literal["roof_type"] = "roof_type"
    family_name: str
    thickness: float = Field(gt=0, description="Roof thickness in feet")


class Wall(Element):
    """A straight wall along its location line, based on a level.

    The top constraint is the ``WALL_HEIGHT_TYPE`` parameter (a level id).
    Without it the wall uses ``unconnected_height``.
    """

    kind: Literal["wall"] = "wall"
    location: Line
    level_id: int
    wall_type_id: int
    width: float = Field(gt=0, description="Wall thickness in feet")
    unconnected_height: float = Field(default=10.0, gt=0)
    structural: bool = False

    @property
    def length(self) -> float:
        """Centerline length."""
        return self.location.length

    @property
    def top_level_id(self) -> int | None:
        value = self.parameters.get(BuiltInParameter.WALL_HEIGHT_TYPE)
        return int(value) if value is not None else None


class FamilyInstance(Element):
    """A door or window placed in a host wall."""

    kind: Literal["family_instance"] = "family_instance"
    symbol_id: int
    category: BuiltInCategory
    host_id: int
    level_id: int
    location: XYZ
    structural: bool = False

    @property
    def sill_height(self) -> float | None:
        value = self.parameters.get(BuiltInParameter.INSTANCE_SILL_HEIGHT_PARAM)
        return float(value) if value is not None else None


class ReferencePlane(Element):
    """A work plane through ``bubble_end`` and ``free_end``.

    ``cut_vector`` is a third point fixing the plane's orientation.
    """

    kind: Literal["reference_plane"] = "reference_plane"
    bubble_end: XYZ
    free_end: XYZ
    cut_vector: XYZ

    @model_validator(mode="after")
    def not_degenerate(self) -> ReferencePlane:
        if self.bubble_end == self.free_end:
            raise ValueError("Reference plane ends must be different")
        if (self.free_end - self.bubble_end).cross(self.cut_vector - self.bubble_end).length < 1e-9:
            raise ValueError("Reference plane points must not be collinear")
        return self

    @property
    def normal(self) -> XYZ:
        """Unit normal, (free_end - bubble_end) x (cut_vector - bubble_end)."""
        return (self.free_end - self.bubble_end).cross(self.cut_vector - self.bubble_end).normalize()


class ExtrusionRoof(Element):
    """A roof extruded from an open profile along its plane normal."""

    kind: Literal["extrusion_roof"] = "extrusion_roof"
    profile: list[Line] = Field(min_length=1)
    reference_plane_id: int
    level_id: int
    roof_type_id: int
    extrusion_start: float = 0.0
    extrusion_end: float

    @model_validator(mode="after")
    def profile_is_continuous(self) -> ExtrusionRoof:
        for prev, cur in zip(self.profile, self.profile[1:]):
            if prev.end != cur.start:
                raise ValueError("Roof profile segments must be connected end to start")
        if self.extrusion_end <= self.extrusion_start:
            raise ValueError("Roof extrusion end must be greater than its start")
        return self

    @property
    def extrusion_depth(self) -> float:
        return self.extrusion_end - self.extrusion_start


AnyElement = Union[
    Level,
    WallType,
    FamilySymbol,
    RoofType,
    Wall,
    FamilyInstance,
    ReferencePlane,
    ExtrusionRoof,
]
