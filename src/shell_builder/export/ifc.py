"""IFC export via ifcopenshell.

Converts a ModelDocument to IFC 2x3: one storey per level, walls as swept
solids, doors and windows filling openings in their host walls, and the
extrusion roof as a roof slab. Internal lengths (feet) become metres.
"""

from __future__ import annotations

from pathlib import Path

import ifcopenshell
import numpy as np

from shell_builder.models.document import ModelDocument
from shell_builder.models.elements import (
    BuiltInCategory,
    ExtrusionRoof,
    FamilyInstance,
    FamilySymbol,
    Level,
    ReferencePlane,
    RoofType,
    Wall,
)
from shell_builder.models.ifc_id import generate_ifc_id
from shell_builder.units import internal_to_m

# Openings are cut slightly thicker than the wall for a clean boolean.
_OPENING_CLEARANCE = 0.01


def _new_guid() -> str:
    """Generate a new IFC GlobalId for IFC-only entities (relationships, openings)."""
    return generate_ifc_id()


def _wall_direction(wall: Wall) -> tuple[float, float]:
    """Unit direction vector of a wall in plan."""
    d = wall.location.direction
    return (d.x, d.y)


def _wall_normal(wall: Wall) -> tuple[float, float]:
    """Left-hand normal of wall direction (for thickness offset)."""
    dx, dy = _wall_direction(wall)
    return (-dy, dx)


class IFCExporter:
    """Export a ModelDocument to an IFC file."""

    def __init__(self, document: ModelDocument):
        self.document = document
        self.file = ifcopenshell.file(schema="IFC2X3")
        self._setup_header()
        self._context: ifcopenshell.entity_instance | None = None
        self._body_context: ifcopenshell.entity_instance | None = None

    def _setup_header(self) -> None:
        """Set IFC file header metadata."""
        file_name = self.file.header.file_name
        file_name.name = f"{self.document.name}.ifc"
        file_name.author = ("shell-builder",)
        file_name.organization = ("",)

    def export(self, output_path: str | Path) -> Path:
        """Export the document to an IFC file. Returns the output path."""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        self._create_contexts()

        # IFC hierarchy: Project → Site → Building → Storeys
        ifc_project = self._create_project()
        ifc_site = self._create_site(ifc_project)
        ifc_building = self._create_building(ifc_site)

        for level in sorted(self.document.levels(), key=lambda lv: lv.elevation):
            self._export_level(level, ifc_building)

        self.file.write(str(output_path))
        return output_path

    def _create_contexts(self) -> None:
        """Create geometric representation contexts."""
        self._context = self.file.createIfcGeometricRepresentationContext(
            ContextIdentifier="3D",
            ContextType="Model",
            CoordinateSpaceDimension=3,
            Precision=1e-5,
            WorldCoordinateSystem=self.file.createIfcAxis2Placement3D(
                Location=self.file.createIfcCartesianPoint((0.0, 0.0, 0.0)),
            ),
            TrueNorth=self.file.createIfcDirection((0.0, 1.0)),
        )
        self._body_context = self.file.createIfcGeometricRepresentationSubContext(
            ContextIdentifier="Body",
            ContextType="Model",
            ParentContext=self._context,
            TargetView="MODEL_VIEW",
        )

    def _create_project(self) -> ifcopenshell.entity_instance:
        """Create IfcProject with SI units."""
        units = [
            self.file.createIfcSIUnit(UnitType="LENGTHUNIT", Name="METRE"),
            self.file.createIfcSIUnit(UnitType="AREAUNIT", Name="SQUARE_METRE"),
            self.file.createIfcSIUnit(UnitType="VOLUMEUNIT", Name="CUBIC_METRE"),
            self.file.createIfcSIUnit(UnitType="PLANEANGLEUNIT", Name="RADIAN"),
        ]
        return self.file.createIfcProject(
            GlobalId=_new_guid(),
            Name=self.document.name,
            UnitsInContext=self.file.createIfcUnitAssignment(Units=units),
            RepresentationContexts=[self._context],
        )

    def _create_site(
        self, project: ifcopenshell.entity_instance
    ) -> ifcopenshell.entity_instance:
        """Create IfcSite and attach to project."""
        site = self.file.createIfcSite(
            GlobalId=_new_guid(),
            Name="Default Site",
            CompositionType="ELEMENT",
        )
        self.file.createIfcRelAggregates(
            GlobalId=_new_guid(),
            RelatingObject=project,
            RelatedObjects=[site],
        )
        return site

    def _create_building(
        self, site: ifcopenshell.entity_instance
    ) -> ifcopenshell.entity_instance:
        """Create IfcBuilding and attach to site."""
        ifc_building = self.file.createIfcBuilding(
            GlobalId=_new_guid(),
            Name=self.document.name,
            CompositionType="ELEMENT",
        )
        self.file.createIfcRelAggregates(
            GlobalId=_new_guid(),
            RelatingObject=site,
            RelatedObjects=[ifc_building],
        )
        return ifc_building

    def _export_level(
        self,
        level: Level,
        ifc_building: ifcopenshell.entity_instance,
    ) -> None:
        """Export a level as a storey with the elements based on it."""
        elevation = internal_to_m(level.elevation)
        ifc_storey = self.file.createIfcBuildingStorey(
            GlobalId=level.global_id,
            Name=level.name,
            CompositionType="ELEMENT",
            Elevation=elevation,
        )
        self.file.createIfcRelAggregates(
            GlobalId=_new_guid(),
            RelatingObject=ifc_building,
            RelatedObjects=[ifc_storey],
        )

        products: list[ifcopenshell.entity_instance] = []

        wall_map: dict[int, ifcopenshell.entity_instance] = {}
        for wall in self.document.walls():
            if wall.level_id != level.id:
                continue
            ifc_wall = self._create_wall(wall, elevation)
            wall_map[wall.id] = ifc_wall
            products.append(ifc_wall)

        # IfcOpeningElements are not contained in the storey; they link to
        # their host wall through IfcRelVoidsElement only.
        for instance in self.document.family_instances():
            if instance.level_id != level.id:
                continue
            wall = self.document.get_element(instance.host_id)
            symbol = self.document.get_element(instance.symbol_id)
            if not isinstance(wall, Wall) or not isinstance(symbol, FamilySymbol):
                continue
            ifc_filling, opening = self._create_filling(instance, symbol, wall, elevation)
            ifc_wall_host = wall_map.get(wall.id)
            if ifc_wall_host:
                self.file.createIfcRelVoidsElement(
                    GlobalId=_new_guid(),
                    RelatingBuildingElement=ifc_wall_host,
                    RelatedOpeningElement=opening,
                )
                self.file.createIfcRelFillsElement(
                    GlobalId=_new_guid(),
                    RelatingOpeningElement=opening,
                    RelatedBuildingElement=ifc_filling,
                )
            products.append(ifc_filling)

        for roof in self.document.roofs():
            if roof.level_id != level.id:
                continue
            plane = self.document.get_element(roof.reference_plane_id)
            roof_type = self.document.get_element(roof.roof_type_id)
            if isinstance(plane, ReferencePlane) and isinstance(roof_type, RoofType):
                products.append(self._create_roof(roof, plane, roof_type))

        if products:
            self.file.createIfcRelContainedInSpatialStructure(
                GlobalId=_new_guid(),
                RelatingStructure=ifc_storey,
                RelatedElements=products,
            )

    def _extruded_box(
        self, x_dim: float, y_dim: float, depth: float
    ) -> ifcopenshell.entity_instance:
        """Body representation: an x_dim by y_dim rectangle extruded up by depth."""
        profile = self.file.createIfcRectangleProfileDef(
            ProfileType="AREA",
            XDim=x_dim,
            YDim=y_dim,
            Position=self.file.createIfcAxis2Placement2D(
                Location=self.file.createIfcCartesianPoint((x_dim / 2, y_dim / 2)),
            ),
        )
        solid = self.file.createIfcExtrudedAreaSolid(
            SweptArea=profile,
            Position=self.file.createIfcAxis2Placement3D(
                Location=self.file.createIfcCartesianPoint((0.0, 0.0, 0.0)),
            ),
            ExtrudedDirection=self.file.createIfcDirection((0.0, 0.0, 1.0)),
            Depth=depth,
        )
        return self._body(solid)

    def _body(self, solid: ifcopenshell.entity_instance) -> ifcopenshell.entity_instance:
        shape = self.file.createIfcShapeRepresentation(
            ContextOfItems=self._body_context,
            RepresentationIdentifier="Body",
            RepresentationType="SweptSolid",
            Items=[solid],
        )
        return self.file.createIfcProductDefinitionShape(Representations=[shape])

    def _wall_placement(
        self, wall: Wall, offset: float, z: float, extra_thickness: float = 0.0
    ) -> ifcopenshell.entity_instance:
        """Placement on the wall's outer face, ``offset`` metres from its start."""
        dx, dy = _wall_direction(wall)
        nx, ny = _wall_normal(wall)
        half = (internal_to_m(wall.width) + extra_thickness) / 2
        start = wall.location.start
        ox = internal_to_m(start.x) + dx * offset - nx * half
        oy = internal_to_m(start.y) + dy * offset - ny * half
        return self._create_local_placement(
            origin=(ox, oy, z),
            z_dir=(0.0, 0.0, 1.0),
            x_dir=(dx, dy, 0.0),
        )

    def _create_wall(
        self, wall: Wall, elevation: float
    ) -> ifcopenshell.entity_instance:
        """Create an IfcWallStandardCase with extruded geometry."""
        length = internal_to_m(wall.length)
        thickness = internal_to_m(wall.width)
        height = internal_to_m(self.document.wall_height(wall))

        ifc_wall = self.file.createIfcWallStandardCase(
            GlobalId=wall.global_id,
            Name=wall.name or "Wall",
            ObjectPlacement=self._wall_placement(wall, 0.0, elevation),
            Representation=self._extruded_box(length, thickness, height),
        )

        props = [
            self.file.createIfcPropertySingleValue(
                Name="LoadBearing",
                NominalValue=self.file.create_entity("IfcBoolean", wall.structural),
            ),
            self.file.createIfcPropertySingleValue(
                Name="IsExternal",
                NominalValue=self.file.create_entity("IfcBoolean", True),
            ),
        ]
        pset = self.file.createIfcPropertySet(
            GlobalId=_new_guid(),
            Name="Pset_WallCommon",
            HasProperties=props,
        )
        self.file.createIfcRelDefinesByProperties(
            GlobalId=_new_guid(),
            RelatedObjects=[ifc_wall],
            RelatingPropertyDefinition=pset,
        )
        return ifc_wall

    def _create_filling(
        self,
        instance: FamilyInstance,
        symbol: FamilySymbol,
        wall: Wall,
        elevation: float,
    ) -> tuple[ifcopenshell.entity_instance, ifcopenshell.entity_instance]:
        """Create an IfcDoor or IfcWindow and the opening it fills.

        The instance location is the opening's center on the wall line.
        """
        width = internal_to_m(symbol.width)
        height = internal_to_m(symbol.height)
        thickness = internal_to_m(wall.width)
        offset = internal_to_m(wall.location.start.distance_to(instance.location)) - width / 2
        z = elevation + internal_to_m(instance.sill_height or 0.0)
        is_door = instance.category == BuiltInCategory.DOORS

        create = self.file.createIfcDoor if is_door else self.file.createIfcWindow
        ifc_filling = create(
            GlobalId=instance.global_id,
            Name=f"{symbol.family_name}: {symbol.name}",
            ObjectPlacement=self._wall_placement(wall, offset, z),
            Representation=self._extruded_box(width, thickness, height),
            OverallHeight=height,
            OverallWidth=width,
        )

        opening = self.file.createIfcOpeningElement(
            GlobalId=_new_guid(),
            Name="Door Opening" if is_door else "Window Opening",
            ObjectPlacement=self._wall_placement(wall, offset, z, _OPENING_CLEARANCE),
            Representation=self._extruded_box(width, thickness + _OPENING_CLEARANCE, height),
        )
        return ifc_filling, opening

    def _create_roof(
        self,
        roof: ExtrusionRoof,
        plane: ReferencePlane,
        roof_type: RoofType,
    ) -> ifcopenshell.entity_instance:
        """Create an IfcSlab with ROOF type from the extrusion roof.

        The open ridge profile is thickened downwards by the roof type's
        thickness into a closed profile in the reference plane, then swept
        along the plane normal from extrusion start to end.
        """
        origin = np.array(plane.bubble_end.as_tuple()) * internal_to_m(1.0)
        axis = np.array(plane.normal.as_tuple())
        ref = np.array((plane.cut_vector - plane.bubble_end).normalize().as_tuple())
        up = np.cross(axis, ref)

        def local(point) -> tuple[float, float]:
            v = np.array(point.as_tuple()) * internal_to_m(1.0) - origin
            return (float(np.dot(v, ref)), float(np.dot(v, up)))

        top = [local(roof.profile[0].start)] + [local(seg.end) for seg in roof.profile]
        thickness = internal_to_m(roof_type.thickness)
        bottom = [(u, v - thickness) for u, v in reversed(top)]
        ifc_points = [self.file.createIfcCartesianPoint(p) for p in top + bottom]
        ifc_points.append(ifc_points[0])

        profile = self.file.createIfcArbitraryClosedProfileDef(
            ProfileType="AREA",
            OuterCurve=self.file.createIfcPolyline(Points=ifc_points),
        )
        solid = self.file.createIfcExtrudedAreaSolid(
            SweptArea=profile,
            Position=self.file.createIfcAxis2Placement3D(
                Location=self.file.createIfcCartesianPoint(
                    (0.0, 0.0, internal_to_m(roof.extrusion_start))
                ),
            ),
            ExtrudedDirection=self.file.createIfcDirection((0.0, 0.0, 1.0)),
            Depth=internal_to_m(roof.extrusion_depth),
        )
        placement = self._create_local_placement(
            origin=tuple(float(c) for c in origin),
            z_dir=tuple(float(c) for c in axis),
            x_dir=tuple(float(c) for c in ref),
        )
        return self.file.createIfcSlab(
            GlobalId=roof.global_id,
            Name=f"{roof_type.family_name}: {roof_type.name}",
            ObjectPlacement=placement,
            Representation=self._body(solid),
            PredefinedType="ROOF",
        )

    def _create_local_placement(
        self,
        origin: tuple[float, float, float] = (0.0, 0.0, 0.0),
        z_dir: tuple[float, float, float] = (0.0, 0.0, 1.0),
        x_dir: tuple[float, float, float] = (1.0, 0.0, 0.0),
    ) -> ifcopenshell.entity_instance:
        """Create an IfcLocalPlacement."""
        axis2 = self.file.createIfcAxis2Placement3D(
            Location=self.file.createIfcCartesianPoint(origin),
            Axis=self.file.createIfcDirection(z_dir),
            RefDirection=self.file.createIfcDirection(x_dir),
        )
        return self.file.createIfcLocalPlacement(
            RelativePlacement=axis2,
        )
