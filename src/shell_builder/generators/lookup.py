"""Resolving levels and types in a host document.

Element ids are the stable way to reference a level. Display names are a
convenience: they must match exactly, and a miss raises an error listing
what the document does contain.
"""

from __future__ import annotations

from shell_builder.errors import FamilyTypeNotFoundError, LevelNotFoundError
from shell_builder.host.protocol import HostDocument
from shell_builder.models.elements import BuiltInCategory, FamilySymbol, Level, RoofType


def get_levels(document: HostDocument) -> list[Level]:
    """All levels of the document."""
    return list(document.levels())


def find_level(levels: list[Level], ref: int | str) -> Level:
    """Find a level by element id (int) or exact display name (str)."""
    if isinstance(ref, int):
        level = next((lv for lv in levels if lv.id == ref), None)
    else:
        level = next((lv for lv in levels if lv.name == ref), None)
    if level is None:
        raise LevelNotFoundError(ref, [lv.name for lv in levels])
    return level


def resolve_levels(
    document: HostDocument, base: int | str, top: int | str
) -> tuple[Level, Level]:
    """Resolve the base and top constraint levels of the shell."""
    levels = get_levels(document)
    return find_level(levels, base), find_level(levels, top)


def find_family_symbol(
    document: HostDocument,
    category: BuiltInCategory,
    family_name: str,
    type_name: str,
) -> FamilySymbol:
    """Find a family type of ``category`` by family name and type name."""
    symbols = document.family_symbols(category)
    symbol = next(
        (s for s in symbols if s.name == type_name and s.family_name == family_name),
        None,
    )
    if symbol is None:
        raise FamilyTypeNotFoundError(
            category.value, family_name, type_name,
            [f"{s.family_name}: {s.name}" for s in symbols],
        )
    return symbol


def find_roof_type(document: HostDocument, family_name: str, type_name: str) -> RoofType:
    """Find a roof type by family name and type name."""
    roof_types = document.roof_types()
    roof_type = next(
        (r for r in roof_types if r.name == type_name and r.family_name == family_name),
        None,
    )
    if roof_type is None:
        raise FamilyTypeNotFoundError(
            "roof", family_name, type_name,
            [f"{r.family_name}: {r.name}" for r in roof_types],
        )
    return roof_type
