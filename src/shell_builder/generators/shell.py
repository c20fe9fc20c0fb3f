"""Building shell generator.

Given a rectangular footprint and two levels, generates:
- A closed rectangular loop of points centered at the origin
- 4 walls on the base level, constrained to the top level
- A door in wall 0 and windows in walls 1-3, at the wall midpoints
- An extrusion roof spanning the footprint, hosted on the top level

Builders never open their own edit scope: each takes the active
``Transaction`` from its caller. ``build_shell`` decides the grouping,
one transaction per feature or a single one for the whole shell.
"""

from __future__ import annotations

import logging
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, field
from typing import Iterator

from shell_builder.config import ShellConfig
from shell_builder.errors import DuplicateShellError
from shell_builder.generators.lookup import find_family_symbol, find_roof_type, resolve_levels
from shell_builder.host.protocol import HostDocument
from shell_builder.host.transaction import Transaction
from shell_builder.models.elements import (
    BuiltInCategory,
    BuiltInParameter,
    ExtrusionRoof,
    FamilyInstance,
    FamilySymbol,
    Level,
    ReferencePlane,
    RoofType,
    Wall,
)
from shell_builder.models.geometry import XYZ, Line

logger = logging.getLogger(__name__)

CREATE_WALLS = "Create walls"
INSERT_DOOR = "Insert door"
INSERT_WINDOWS = "Insert windows"
CREATE_ROOF = "Create roof"
BUILD_SHELL = "Build shell"

DOOR_WALL_INDEX = 0
WINDOW_WALL_INDICES = (1, 2, 3)

# Length of the extrusion roof's reference plane legs (feet).
_PLANE_LEG = 1.0


@dataclass
class ShellResult:
    """Everything ``build_shell`` created."""

    points: list[XYZ]
    walls: list[Wall] = field(default_factory=list)
    door: FamilyInstance | None = None
    windows: list[FamilyInstance] = field(default_factory=list)
    reference_plane: ReferencePlane | None = None
    roof: ExtrusionRoof | None = None


def generate_points(width: float, depth: float) -> list[XYZ]:
    """Closed rectangle centered at the origin, first point repeated last.

    Corners run counter-clockwise from (-w/2, -d/2): south-west,
    south-east, north-east, north-west.
    """
    if width <= 0 or depth <= 0:
        raise ValueError(f"Width and depth must be positive, got {width} x {depth}")
    dx = width / 2
    dy = depth / 2
    return [
        XYZ(x=-dx, y=-dy, z=0.0),
        XYZ(x=dx, y=-dy, z=0.0),
        XYZ(x=dx, y=dy, z=0.0),
        XYZ(x=-dx, y=dy, z=0.0),
        XYZ(x=-dx, y=-dy, z=0.0),
    ]


def loop_segments(points: list[XYZ]) -> list[Line]:
    """Bounded lines between consecutive points of a closed loop."""
    return [Line.create_bound(points[i], points[i + 1]) for i in range(len(points) - 1)]


def wall_midpoint(wall: Wall) -> XYZ:
    """Midpoint of a wall's location line."""
    curve = wall.location
    return (curve.end_point(0) + curve.end_point(1)) / 2


def create_walls(
    document: HostDocument,
    points: list[XYZ],
    base_level: Level,
    top_level: Level,
    transaction: Transaction,
) -> list[Wall]:
    """Create one wall per consecutive point pair, spanning base to top level."""
    transaction.require_active()
    walls: list[Wall] = []
    for line in loop_segments(points):
        wall = document.create_wall(line, base_level)
        document.set_parameter(wall, BuiltInParameter.WALL_HEIGHT_TYPE, top_level.id)
        logger.debug("Wall %s from %s to %s", wall.id, line.start.as_tuple(), line.end.as_tuple())
        walls.append(wall)
    return walls


def _ensure_active(document: HostDocument, symbol: FamilySymbol) -> None:
    if not symbol.is_active:
        document.activate_symbol(symbol)


def add_door(
    document: HostDocument,
    wall: Wall,
    level: Level,
    symbol: FamilySymbol,
    transaction: Transaction,
) -> FamilyInstance:
    """Place a door at the midpoint of ``wall``."""
    transaction.require_active()
    _ensure_active(document, symbol)
    door = document.create_family_instance(wall_midpoint(wall), symbol, wall, level)
    logger.debug("Door %s in wall %s", door.id, wall.id)
    return door


def add_windows(
    document: HostDocument,
    walls: list[Wall],
    level: Level,
    symbol: FamilySymbol,
    sill_height: float,
    transaction: Transaction,
) -> list[FamilyInstance]:
    """Place one window at the midpoint of each of walls 1, 2 and 3."""
    transaction.require_active()
    _ensure_active(document, symbol)
    windows: list[FamilyInstance] = []
    for index in WINDOW_WALL_INDICES:
        wall = walls[index]
        window = document.create_family_instance(wall_midpoint(wall), symbol, wall, level)
        document.set_parameter(window, BuiltInParameter.INSTANCE_SILL_HEIGHT_PARAM, sill_height)
        logger.debug("Window %s in wall %s", window.id, wall.id)
        windows.append(window)
    return windows


def roof_profile(walls: list[Wall], elevation: float, rise: float) -> tuple[XYZ, list[Line], float]:
    """Ridge profile of the extrusion roof.

    Returns the profile origin, the two profile lines, and the extrusion
    length. The origin is wall 0's start point pushed out by half the wall
    thickness in X and Y and lifted to ``elevation``. The profile rises by
    ``rise`` over half the span along Y and falls back to the eaves.
    """
    half_thickness = walls[0].width / 2
    offset = XYZ(x=-half_thickness, y=-half_thickness, z=elevation)
    origin = walls[0].location.end_point(0) + offset
    length = walls[0].length + half_thickness * 2
    half_span = walls[1].length / 2 + half_thickness
    ridge = origin + XYZ(x=0.0, y=half_span, z=rise)
    eaves = origin + XYZ(x=0.0, y=half_span * 2, z=0.0)
    profile = [Line.create_bound(origin, ridge), Line.create_bound(ridge, eaves)]
    return origin, profile, length


def add_roof(
    document: HostDocument,
    walls: list[Wall],
    level: Level,
    roof_type: RoofType,
    transaction: Transaction,
    rise: float = 5.0,
) -> tuple[ReferencePlane, ExtrusionRoof]:
    """Extrude a ridge profile over the walls, hosted on ``level``."""
    transaction.require_active()
    elevation = float(document.get_parameter(level, BuiltInParameter.LEVEL_ELEV))
    origin, profile, length = roof_profile(walls, elevation, rise)
    plane = document.create_reference_plane(
        origin,
        origin - XYZ.basis_z() * _PLANE_LEG,
        origin + XYZ.basis_y() * _PLANE_LEG,
    )
    roof = document.create_extrusion_roof(profile, plane, level, roof_type, 0.0, length)
    logger.debug("Roof %s on plane %s, length %.3f", roof.id, plane.id, length)
    return plane, roof


def find_existing_shell(document: HostDocument, points: list[XYZ], base_level: Level) -> list[Wall]:
    """Walls on ``base_level`` that already lie on the generated footprint."""
    segments = {
        frozenset((line.start, line.end)) for line in loop_segments(points)
    }
    return [
        w for w in document.walls()
        if w.level_id == base_level.id
        and frozenset((w.location.start, w.location.end)) in segments
    ]


@contextmanager
def _scope(document: HostDocument, shared: Transaction | None, name: str) -> Iterator[Transaction]:
    if shared is not None:
        yield shared
        return
    with document.transaction(name) as transaction:
        yield transaction
    logger.info("Committed '%s'", name)


def build_shell(
    document: HostDocument,
    config: ShellConfig | None = None,
    single_transaction: bool = False,
    allow_duplicates: bool = False,
) -> ShellResult:
    """Build the complete shell: walls, door, windows and roof.

    All levels and types are resolved before the document is touched, so
    a missing level or type leaves the document unchanged.

    Args:
        document: Host document to modify.
        config: Shell parameters (defaults to ``ShellConfig()``).
        single_transaction: Group all stages into one ``Build shell``
            transaction instead of one transaction per feature.
        allow_duplicates: Build even if the base level already carries
            walls on the generated footprint.

    Returns:
        ShellResult with all created elements.
    """
    config = config or ShellConfig()
    base_level, top_level = resolve_levels(document, config.base_level, config.top_level)
    door_symbol = find_family_symbol(
        document, BuiltInCategory.DOORS, config.door_family, config.door_type
    )
    window_symbol = find_family_symbol(
        document, BuiltInCategory.WINDOWS, config.window_family, config.window_type
    )
    roof_type = find_roof_type(document, config.roof_family, config.roof_type)

    points = generate_points(config.width, config.depth)

    if not allow_duplicates:
        existing = find_existing_shell(document, points, base_level)
        if existing:
            raise DuplicateShellError(
                f"Level '{base_level.name}' already has {len(existing)} wall(s) on the "
                f"{config.width_mm:g} x {config.depth_mm:g} mm footprint"
            )

    result = ShellResult(points=points)
    with ExitStack() as stack:
        shared = None
        if single_transaction:
            shared = stack.enter_context(document.transaction(BUILD_SHELL))

        with _scope(document, shared, CREATE_WALLS) as tx:
            result.walls = create_walls(document, points, base_level, top_level, tx)
        with _scope(document, shared, INSERT_DOOR) as tx:
            result.door = add_door(
                document, result.walls[DOOR_WALL_INDEX], base_level, door_symbol, tx
            )
        with _scope(document, shared, INSERT_WINDOWS) as tx:
            result.windows = add_windows(
                document, result.walls, base_level, window_symbol, config.sill_height, tx
            )
        with _scope(document, shared, CREATE_ROOF) as tx:
            result.reference_plane, result.roof = add_roof(
                document, result.walls, top_level, roof_type, tx, rise=config.roof_rise
            )

    logger.info(
        "Built %g x %g mm shell between '%s' and '%s'",
        config.width_mm, config.depth_mm, base_level.name, top_level.name,
    )
    return result
