"""In-memory host document.

``ModelDocument`` implements the ``HostDocument`` capability set with the
semantics of the host application: integer element ids, a type catalog,
built-in parameters, and transactions that either commit or restore the
document exactly as it was when they started. Documents persist as JSON.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, TypeVar

from pydantic import BaseModel, Field, PrivateAttr

from shell_builder.errors import TransactionError
from shell_builder.host.transaction import Transaction
from shell_builder.models.elements import (
    AnyElement,
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
    WallType,
)
from shell_builder.models.geometry import XYZ, Line
from shell_builder.units import mm_to_internal

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Element)


class ModelDocument(BaseModel):
    """A BIM document held in memory.

    Elements live in ``elements`` in insertion order. Every mutation goes
    through a ``Transaction``; modifying the document without an active
    transaction raises ``TransactionError``.
    """

    name: str = Field(default="Untitled", description="Document title")
    elements: list[Annotated[AnyElement, Field(discriminator="kind")]] = Field(
        default_factory=list
    )
    next_id: int = Field(default=1, description="Next element id to assign")
    default_wall_type_id: int | None = None

    _active: Transaction | None = PrivateAttr(default=None)
    _snapshot: tuple[list, int] | None = PrivateAttr(default=None)
    _history: list[str] = PrivateAttr(default_factory=list)

    # ── Construction ──────────────────────────────────────────────────

    @classmethod
    def template(
        cls,
        name: str = "Untitled",
        levels: list[tuple[str, float]] | None = None,
    ) -> ModelDocument:
        """Create a document seeded like the host's metric project template.

        Levels are given as (name, elevation in mm). The catalog holds one
        wall type (the default), two door types, two window types and two
        roof types.
        """
        if levels is None:
            levels = [("Уровень 1", 0.0), ("Уровень 2", 4000.0)]
        doc = cls(name=name)
        for level_name, elevation_mm in levels:
            doc.seed(Level(name=level_name, elevation=mm_to_internal(elevation_mm)))

        wall_type = doc.seed(WallType(name="Типовой - 200мм", width=mm_to_internal(200)))
        doc.default_wall_type_id = wall_type.id

        for family, type_name, width, height in [
            ("Одиночные-Щитовые", "0915 x 2134 мм", 915, 2134),
            ("Одиночные-Щитовые", "0762 x 2032 мм", 762, 2032),
        ]:
            doc.seed(FamilySymbol(
                name=type_name, family_name=family, category=BuiltInCategory.DOORS,
                width=mm_to_internal(width), height=mm_to_internal(height),
            ))
        for family, type_name, width, height in [
            ("Фиксированные", "0406 x 0610 мм", 406, 610),
            ("Фиксированные", "0610 x 1220 мм", 610, 1220),
        ]:
            doc.seed(FamilySymbol(
                name=type_name, family_name=family, category=BuiltInCategory.WINDOWS,
                width=mm_to_internal(width), height=mm_to_internal(height),
            ))
        for family, type_name, thickness in [
            ("Базовая крыша", "Типовой - 400мм", 400),
            ("Базовая крыша", "Типовой - 125мм", 125),
        ]:
            doc.seed(RoofType(
                name=type_name, family_name=family, thickness=mm_to_internal(thickness),
            ))
        return doc

    def seed(self, element: E) -> E:
        """Insert an element without a transaction.

        Only for preparing template content (levels, types) before the
        document is handed to a command.
        """
        return self._insert(element)

    # ── File I/O ──────────────────────────────────────────────────────

    @classmethod
    def load(cls, path: str | Path) -> ModelDocument:
        """Load a document from a JSON file."""
        path = Path(path)
        return cls.model_validate_json(path.read_text(encoding="utf-8"))

    def save(self, path: str | Path) -> Path:
        """Save the document to a JSON file. Creates parent dirs if needed."""
        if self._active is not None:
            raise TransactionError(
                f"Cannot save while transaction '{self._active.name}' is open"
            )
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return path

    # ── Queries ───────────────────────────────────────────────────────

    def get_element(self, element_id: int) -> AnyElement | None:
        """Find an element by id."""
        return next((e for e in self.elements if e.id == element_id), None)

    def elements_of(self, cls: type[E]) -> list[E]:
        """All elements of a class, in insertion order."""
        return [e for e in self.elements if isinstance(e, cls)]

    def levels(self) -> list[Level]:
        return self.elements_of(Level)

    def walls(self) -> list[Wall]:
        return self.elements_of(Wall)

    def family_symbols(self, category: BuiltInCategory) -> list[FamilySymbol]:
        return [s for s in self.elements_of(FamilySymbol) if s.category == category]

    def family_instances(self, category: BuiltInCategory | None = None) -> list[FamilyInstance]:
        return [
            i for i in self.elements_of(FamilyInstance)
            if category is None or i.category == category
        ]

    def roof_types(self) -> list[RoofType]:
        return self.elements_of(RoofType)

    def roofs(self) -> list[ExtrusionRoof]:
        return self.elements_of(ExtrusionRoof)

    # ── Transactions ──────────────────────────────────────────────────

    @property
    def active_transaction(self) -> Transaction | None:
        return self._active

    @property
    def committed_transactions(self) -> list[str]:
        """Names of transactions committed since the document was opened."""
        return list(self._history)

    def transaction(self, name: str) -> Transaction:
        return Transaction(self, name)

    def _start_transaction(self, transaction: Transaction) -> None:
        if self._active is not None:
            raise TransactionError(
                f"Cannot start '{transaction.name}': "
                f"transaction '{self._active.name}' is already open"
            )
        self._snapshot = (
            [e.model_copy(deep=True) for e in self.elements],
            self.next_id,
        )
        self._active = transaction

    def _commit_transaction(self, transaction: Transaction) -> None:
        self._check_owner(transaction)
        self._history.append(transaction.name)
        self._active = None
        self._snapshot = None

    def _rollback_transaction(self, transaction: Transaction) -> None:
        self._check_owner(transaction)
        self.elements, self.next_id = self._snapshot
        self._active = None
        self._snapshot = None

    def _check_owner(self, transaction: Transaction) -> None:
        if self._active is not transaction:
            raise TransactionError(f"Transaction '{transaction.name}' is not open on this document")

    def _require_transaction(self, operation: str) -> None:
        if self._active is None:
            raise TransactionError(
                f"Cannot {operation}: the document can only be modified inside a transaction"
            )

    def _insert(self, element: E) -> E:
        element.id = self.next_id
        self.next_id += 1
        self.elements.append(element)
        return element

    def _require(self, ref: Element | int, cls: type[E]) -> E:
        """Resolve an element handle or id to the instance stored in this document."""
        element_id = ref if isinstance(ref, int) else ref.id
        stored = self.get_element(element_id)
        if not isinstance(stored, cls):
            raise ValueError(f"{cls.__name__} {element_id} is not part of document '{self.name}'")
        return stored

    # ── Parameters ────────────────────────────────────────────────────

    def get_parameter(
        self, element: Element, parameter: BuiltInParameter
    ) -> ParameterValue | None:
        """Read a built-in parameter. ``LEVEL_ELEV`` reads a level's elevation."""
        stored = self._require(element, Element)
        if isinstance(stored, Level) and parameter == BuiltInParameter.LEVEL_ELEV:
            return stored.elevation
        return stored.parameters.get(parameter)

    def set_parameter(
        self, element: Element, parameter: BuiltInParameter, value: ParameterValue
    ) -> None:
        """Write a built-in parameter."""
        self._require_transaction(f"set {parameter.value}")
        stored = self._require(element, Element)
        if isinstance(stored, Level) and parameter == BuiltInParameter.LEVEL_ELEV:
            stored.elevation = float(value)
            return
        if parameter == BuiltInParameter.WALL_HEIGHT_TYPE:
            if not isinstance(stored, Wall):
                raise ValueError(f"{parameter.value} only applies to walls")
            self._require(int(value), Level)
            value = int(value)
        elif parameter == BuiltInParameter.INSTANCE_SILL_HEIGHT_PARAM:
            if not isinstance(stored, FamilyInstance):
                raise ValueError(f"{parameter.value} only applies to family instances")
            value = float(value)
        stored.parameters[parameter] = value

    # ── Creation ──────────────────────────────────────────────────────

    def create_wall(self, line: Line, level: Level) -> Wall:
        """Create a wall of the default type along ``line``, based on ``level``."""
        self._require_transaction("create a wall")
        level = self._require(level, Level)
        if self.default_wall_type_id is None:
            raise ValueError(f"Document '{self.name}' has no default wall type")
        wall_type = self._require(self.default_wall_type_id, WallType)
        wall = Wall(
            location=line,
            level_id=level.id,
            wall_type_id=wall_type.id,
            width=wall_type.width,
        )
        return self._insert(wall)

    def activate_symbol(self, symbol: FamilySymbol) -> None:
        self._require_transaction("activate a family symbol")
        stored = self._require(symbol, FamilySymbol)
        stored.is_active = True
        symbol.is_active = True

    def create_family_instance(
        self, point: XYZ, symbol: FamilySymbol, host: Wall, level: Level
    ) -> FamilyInstance:
        """Place a non-structural instance of ``symbol`` in the ``host`` wall."""
        self._require_transaction("create a family instance")
        symbol = self._require(symbol, FamilySymbol)
        host = self._require(host, Wall)
        level = self._require(level, Level)
        if not symbol.is_active:
            raise ValueError(
                f"Family symbol '{symbol.family_name}: {symbol.name}' is not active"
            )
        instance = FamilyInstance(
            name=symbol.name,
            symbol_id=symbol.id,
            category=symbol.category,
            host_id=host.id,
            level_id=level.id,
            location=point,
        )
        return self._insert(instance)

    def create_reference_plane(
        self, bubble_end: XYZ, free_end: XYZ, cut_vector: XYZ
    ) -> ReferencePlane:
        self._require_transaction("create a reference plane")
        plane = ReferencePlane(bubble_end=bubble_end, free_end=free_end, cut_vector=cut_vector)
        return self._insert(plane)

    def create_extrusion_roof(
        self,
        profile: list[Line],
        plane: ReferencePlane,
        level: Level,
        roof_type: RoofType,
        extrusion_start: float,
        extrusion_end: float,
    ) -> ExtrusionRoof:
        """Extrude an open profile lying in ``plane`` along the plane normal."""
        self._require_transaction("create an extrusion roof")
        plane = self._require(plane, ReferencePlane)
        level = self._require(level, Level)
        roof_type = self._require(roof_type, RoofType)
        normal = plane.normal
        for segment in profile:
            for point in (segment.start, segment.end):
                if abs((point - plane.bubble_end).dot(normal)) > 1e-6:
                    raise ValueError("Roof profile must lie in the reference plane")
        roof = ExtrusionRoof(
            name=roof_type.name,
            profile=profile,
            reference_plane_id=plane.id,
            level_id=level.id,
            roof_type_id=roof_type.id,
            extrusion_start=extrusion_start,
            extrusion_end=extrusion_end,
        )
        return self._insert(roof)

    # ── Query helpers ─────────────────────────────────────────────────

    def wall_height(self, wall: Wall) -> float:
        """Wall height: to its top level if constrained, else unconnected."""
        base = self._require(wall.level_id, Level)
        if wall.top_level_id is not None:
            top = self._require(wall.top_level_id, Level)
            return top.elevation - base.elevation
        return wall.unconnected_height

    def summary(self) -> str:
        """Human-readable summary of the document."""
        lines = [f"🏗️ {self.name}"]
        for level in sorted(self.levels(), key=lambda lv: lv.elevation):
            walls = [w for w in self.walls() if w.level_id == level.id]
            doors = [
                i for i in self.family_instances(BuiltInCategory.DOORS)
                if i.level_id == level.id
            ]
            windows = [
                i for i in self.family_instances(BuiltInCategory.WINDOWS)
                if i.level_id == level.id
            ]
            roofs = [r for r in self.roofs() if r.level_id == level.id]
            lines.append(f"   📐 {level.name} (elev {level.elevation:.3f} ft)")
            lines.append(
                f"      Walls: {len(walls)}, Doors: {len(doors)}, "
                f"Windows: {len(windows)}, Roofs: {len(roofs)}"
            )
        return "\n".join(lines)
