"""The capability set the generator needs from a host document.

Any object implementing ``HostDocument`` can be passed to the generators:
the in-memory ``ModelDocument`` or the ``RevitDocument`` adapter.
All mutating operations require an active transaction.
"""

from __future__ import annotations

from typing import Protocol

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


class HostDocument(Protocol):
    # Collection queries
    def levels(self) -> list[Level]: ...

    def walls(self) -> list[Wall]: ...

    def family_symbols(self, category: BuiltInCategory) -> list[FamilySymbol]: ...

    def roof_types(self) -> list[RoofType]: ...

    # Edit scopes
    def transaction(self, name: str) -> Transaction: ...

    def _start_transaction(self, transaction: Transaction) -> None: ...

    def _commit_transaction(self, transaction: Transaction) -> None: ...

    def _rollback_transaction(self, transaction: Transaction) -> None: ...

    # Parameters
    def get_parameter(self, element: Element, parameter: BuiltInParameter) -> ParameterValue | None: ...

    def set_parameter(self, element: Element, parameter: BuiltInParameter, value: ParameterValue) -> None: ...

    # Creation
    def create_wall(self, line: Line, level: Level) -> Wall: ...

    def activate_symbol(self, symbol: FamilySymbol) -> None: ...

    def create_family_instance(
        self, point: XYZ, symbol: FamilySymbol, host: Wall, level: Level
    ) -> FamilyInstance: ...

    def create_reference_plane(
        self, bubble_end: XYZ, free_end: XYZ, cut_vector: XYZ
    ) -> ReferencePlane: ...

    def create_extrusion_roof(
        self,
        profile: list[Line],
        plane: ReferencePlane,
        level: Level,
        roof_type: RoofType,
        extrusion_start: float,
        extrusion_end: float,
    ) -> ExtrusionRoof: ...
