"""Revit adapter.

``RevitDocument`` implements ``HostDocument`` on top of a live Revit
document. Native Revit elements are wrapped into the package's models on
the way out and looked up by element id on the way in. The Revit API
modules are imported when the adapter is created, so this module can be
imported outside Revit; pass ``db``/``structure`` explicitly to run it
against another implementation of the same API.
"""

from __future__ import annotations

import logging
from typing import Any

from shell_builder.errors import TransactionError
from shell_builder.host.transaction import Transaction
from shell_builder.models.elements import (
    BuiltInCategory,
    BuiltInParameter,
    Element,
    ExtrusionRoof,
    FamilyInstance,
    FamilySymbol,
    Level,
    ParameterValue,
    ReferencePlane,
    RoofType,
    Wall,
)
from shell_builder.models.geometry import XYZ, Line

logger = logging.getLogger(__name__)

_CATEGORIES = {
    BuiltInCategory.DOORS: "OST_Doors",
    BuiltInCategory.WINDOWS: "OST_Windows",
}

# Used when a type carries no usable size parameter.
_FALLBACK_SIZE = 1.0


def _id_value(element_id: Any) -> int:
    """Integer value of an ElementId (``Value`` from Revit 2024 on)."""
    value = getattr(element_id, "Value", None)
    if value is None:
        value = element_id.IntegerValue
    return int(value)


class RevitDocument:
    """``HostDocument`` backed by an ``Autodesk.Revit.DB.Document``."""

    def __init__(self, document: Any, db: Any = None, structure: Any = None):
        if db is None:
            import Autodesk.Revit.DB as db
        if structure is None:
            import Autodesk.Revit.DB.Structure as structure
        self.document = document
        self.db = db
        self.structure = structure
        self._native: dict[int, Any] = {}
        self._transactions: dict[int, Any] = {}
        self._active: Transaction | None = None
        # (element, parameter, previous value) written in the open transaction
        self._written: list[tuple[Element, BuiltInParameter, ParameterValue | None]] = []

    # ── Conversion ────────────────────────────────────────────────────

    def _track(self, native: Any) -> int:
        element_id = _id_value(native.Id)
        self._native[element_id] = native
        return element_id

    def _lookup(self, element: Element) -> Any:
        native = self._native.get(element.id)
        if native is None:
            native = self.document.GetElement(self.db.ElementId(element.id))
            if native is None:
                raise ValueError(f"Element {element.id} is not part of the Revit document")
            self._native[element.id] = native
        return native

    def _xyz(self, point: XYZ) -> Any:
        return self.db.XYZ(point.x, point.y, point.z)

    @staticmethod
    def _point(native_xyz: Any) -> XYZ:
        return XYZ(x=native_xyz.X, y=native_xyz.Y, z=native_xyz.Z)

    def _line(self, line: Line) -> Any:
        return self.db.Line.CreateBound(self._xyz(line.start), self._xyz(line.end))

    def _size(self, native: Any, parameter_name: str) -> float:
        parameter = native.get_Parameter(getattr(self.db.BuiltInParameter, parameter_name))
        if parameter is None:
            return _FALLBACK_SIZE
        value = parameter.AsDouble()
        return value if value > 0 else _FALLBACK_SIZE

    def _to_level(self, native: Any) -> Level:
        return Level(id=self._track(native), name=native.Name, elevation=native.Elevation)

    def _to_wall(self, native: Any) -> Wall:
        curve = native.Location.Curve
        wall = Wall(
            id=self._track(native),
            location=Line(start=self._point(curve.GetEndPoint(0)), end=self._point(curve.GetEndPoint(1))),
            level_id=_id_value(native.LevelId),
            wall_type_id=_id_value(native.GetTypeId()),
            width=native.Width,
        )
        top = native.get_Parameter(self.db.BuiltInParameter.WALL_HEIGHT_TYPE)
        if top is not None:
            top_id = _id_value(top.AsElementId())
            if top_id > 0:
                wall.parameters[BuiltInParameter.WALL_HEIGHT_TYPE] = top_id
        return wall

    def _to_symbol(self, native: Any, category: BuiltInCategory) -> FamilySymbol:
        return FamilySymbol(
            id=self._track(native),
            name=native.Name,
            family_name=native.FamilyName,
            category=category,
            width=self._size(native, "FAMILY_WIDTH_PARAM"),
            height=self._size(native, "FAMILY_HEIGHT_PARAM"),
            is_active=native.IsActive,
        )

    def _to_roof_type(self, native: Any) -> RoofType:
        return RoofType(
            id=self._track(native),
            name=native.Name,
            family_name=native.FamilyName,
            thickness=self._size(native, "ROOF_ATTR_DEFAULT_THICKNESS_PARAM"),
        )

    def _collect(self, cls: Any) -> Any:
        return self.db.FilteredElementCollector(self.document).OfClass(cls)

    # ── Collection queries ────────────────────────────────────────────

    def levels(self) -> list[Level]:
        return [self._to_level(lv) for lv in self._collect(self.db.Level)]

    def walls(self) -> list[Wall]:
        return [self._to_wall(w) for w in self._collect(self.db.Wall)]

    def family_symbols(self, category: BuiltInCategory) -> list[FamilySymbol]:
        native_category = getattr(self.db.BuiltInCategory, _CATEGORIES[category])
        collector = self._collect(self.db.FamilySymbol).OfCategory(native_category)
        return [self._to_symbol(s, category) for s in collector]

    def roof_types(self) -> list[RoofType]:
        return [self._to_roof_type(r) for r in self._collect(self.db.RoofType)]

    # ── Transactions ──────────────────────────────────────────────────

    def transaction(self, name: str) -> Transaction:
        return Transaction(self, name)

    def _start_transaction(self, transaction: Transaction) -> None:
        if self._active is not None:
            raise TransactionError(
                f"Cannot start '{transaction.name}': "
                f"transaction '{self._active.name}' is already open"
            )
        native = self.db.Transaction(self.document, transaction.name)
        native.Start()
        self._transactions[id(transaction)] = native
        self._active = transaction

    def _commit_transaction(self, transaction: Transaction) -> None:
        self._check_owner(transaction)
        self._transactions.pop(id(transaction)).Commit()
        self._active = None
        self._written.clear()

    def _rollback_transaction(self, transaction: Transaction) -> None:
        self._check_owner(transaction)
        self._transactions.pop(id(transaction)).RollBack()
        self._active = None
        self._native.clear()
        for element, parameter, previous in reversed(self._written):
            if previous is None:
                element.parameters.pop(parameter, None)
            else:
                element.parameters[parameter] = previous
        self._written.clear()

    def _check_owner(self, transaction: Transaction) -> None:
        if self._active is not transaction:
            raise TransactionError(f"Transaction '{transaction.name}' is not open on this document")

    def _require_transaction(self, operation: str) -> None:
        if self._active is None:
            raise TransactionError(
                f"Cannot {operation}: the document can only be modified inside a transaction"
            )

    # ── Parameters ────────────────────────────────────────────────────

    def get_parameter(
        self, element: Element, parameter: BuiltInParameter
    ) -> ParameterValue | None:
        native = self._lookup(element).get_Parameter(
            getattr(self.db.BuiltInParameter, parameter.value)
        )
        if native is None:
            return None
        if parameter == BuiltInParameter.WALL_HEIGHT_TYPE:
            return _id_value(native.AsElementId())
        return native.AsDouble()

    def set_parameter(
        self, element: Element, parameter: BuiltInParameter, value: ParameterValue
    ) -> None:
        self._require_transaction(f"set {parameter.value}")
        native = self._lookup(element).get_Parameter(
            getattr(self.db.BuiltInParameter, parameter.value)
        )
        if native is None:
            raise ValueError(f"Element {element.id} has no parameter {parameter.value}")
        if parameter == BuiltInParameter.WALL_HEIGHT_TYPE:
            native.Set(self.db.ElementId(int(value)))
        else:
            native.Set(float(value))
        self._written.append((element, parameter, element.parameters.get(parameter)))
        element.parameters[parameter] = value

    # ── Creation ──────────────────────────────────────────────────────

    def create_wall(self, line: Line, level: Level) -> Wall:
        self._require_transaction("create a wall")
        native = self.db.Wall.Create(
            self.document, self._line(line), self._lookup(level).Id, False
        )
        return self._to_wall(native)

    def activate_symbol(self, symbol: FamilySymbol) -> None:
        self._require_transaction("activate a family symbol")
        native = self._lookup(symbol)
        if not native.IsActive:
            native.Activate()
            self.document.Regenerate()
        symbol.is_active = True

    def create_family_instance(
        self, point: XYZ, symbol: FamilySymbol, host: Wall, level: Level
    ) -> FamilyInstance:
        self._require_transaction("create a family instance")
        native = self.document.Create.NewFamilyInstance(
            self._xyz(point),
            self._lookup(symbol),
            self._lookup(host),
            self._lookup(level),
            self.structure.StructuralType.NonStructural,
        )
        return FamilyInstance(
            id=self._track(native),
            name=symbol.name,
            symbol_id=symbol.id,
            category=symbol.category,
            host_id=host.id,
            level_id=level.id,
            location=point,
        )

    def create_reference_plane(
        self, bubble_end: XYZ, free_end: XYZ, cut_vector: XYZ
    ) -> ReferencePlane:
        self._require_transaction("create a reference plane")
        native = self.document.Create.NewReferencePlane2(
            self._xyz(bubble_end),
            self._xyz(free_end),
            self._xyz(cut_vector),
            self.document.ActiveView,
        )
        return ReferencePlane(
            id=self._track(native),
            bubble_end=bubble_end,
            free_end=free_end,
            cut_vector=cut_vector,
        )

    def create_extrusion_roof(
        self,
        profile: list[Line],
        plane: ReferencePlane,
        level: Level,
        roof_type: RoofType,
        extrusion_start: float,
        extrusion_end: float,
    ) -> ExtrusionRoof:
        self._require_transaction("create an extrusion roof")
        curves = self.db.CurveArray()
        for segment in profile:
            curves.Append(self._line(segment))
        native = self.document.Create.NewExtrusionRoof(
            curves,
            self._lookup(plane),
            self._lookup(level),
            self._lookup(roof_type),
            extrusion_start,
            extrusion_end,
        )
        return ExtrusionRoof(
            id=self._track(native),
            name=roof_type.name,
            profile=profile,
            reference_plane_id=plane.id,
            level_id=level.id,
            roof_type_id=roof_type.id,
            extrusion_start=extrusion_start,
            extrusion_end=extrusion_end,
        )
