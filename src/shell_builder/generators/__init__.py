"""Shell generation tools.

Functions that create the building shell in a host document:
- Lookup: levels by id or name, family and roof types by name
- Points: the closed rectangular wall loop
- Builders: walls, door, windows, roof (each inside a caller's transaction)
- Orchestration: build_shell
"""

from shell_builder.generators.lookup import (
    find_family_symbol,
    find_level,
    find_roof_type,
    get_levels,
    resolve_levels,
)
from shell_builder.generators.shell import (
    ShellResult,
    add_door,
    add_roof,
    add_windows,
    build_shell,
    create_walls,
    generate_points,
    wall_midpoint,
)

__all__ = [
    "find_family_symbol",
    "find_level",
    "find_roof_type",
    "get_levels",
    "resolve_levels",
    "ShellResult",
    "add_door",
    "add_roof",
    "add_windows",
    "build_shell",
    "create_walls",
    "generate_points",
    "wall_midpoint",
]
