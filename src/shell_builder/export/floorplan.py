"""2D plan rendering using matplotlib.

Generates a top-down view of a ModelDocument:
- Walls as filled bands (centerline ± half thickness)
- Doors shown as swing arcs, windows as double lines
- Roof footprint as a dashed outline
- Wall lengths in millimetres
"""

from __future__ import annotations

from pathlib import Path

import matplotlib
matplotlib.use("Agg")  # headless rendering
import matplotlib.pyplot as plt
from matplotlib.patches import Arc, Polygon
import numpy as np

from shell_builder.models.document import ModelDocument
from shell_builder.models.elements import (
    BuiltInCategory,
    ExtrusionRoof,
    FamilyInstance,
    FamilySymbol,
    ReferencePlane,
    Wall,
)
from shell_builder.units import internal_to_mm

_WALL_COLOR = "#424242"
_DOOR_COLOR = "#8D6E63"
_WINDOW_COLOR = "#1E88E5"
_ROOF_COLOR = "#C62828"


def _wall_frame(wall: Wall) -> tuple[np.ndarray, np.ndarray]:
    """Unit direction and left-hand normal of a wall in plan."""
    d = wall.location.direction
    direction = np.array([d.x, d.y])
    return direction, np.array([-direction[1], direction[0]])


def _wall_outline(wall: Wall) -> np.ndarray:
    start = np.array([wall.location.start.x, wall.location.start.y])
    end = np.array([wall.location.end.x, wall.location.end.y])
    _, normal = _wall_frame(wall)
    half = normal * wall.width / 2
    return np.array([start - half, end - half, end + half, start + half])


def _draw_wall(ax, wall: Wall, show_dimensions: bool) -> None:
    ax.add_patch(Polygon(_wall_outline(wall), closed=True, facecolor=_WALL_COLOR,
                         edgecolor="black", linewidth=0.8, zorder=3))
    if show_dimensions:
        mid = wall.location.midpoint
        _, normal = _wall_frame(wall)
        label_at = np.array([mid.x, mid.y]) - normal * (wall.width + 1.0)
        ax.text(label_at[0], label_at[1], f"{internal_to_mm(wall.length):.0f}",
                fontsize=8, ha="center", va="center", color="#616161", zorder=6)


def _draw_opening(ax, instance: FamilyInstance, symbol: FamilySymbol, wall: Wall) -> None:
    direction, normal = _wall_frame(wall)
    center = np.array([instance.location.x, instance.location.y])
    half = direction * symbol.width / 2
    a, b = center - half, center + half
    # Clear the wall band under the opening
    band = normal * wall.width / 2
    ax.add_patch(Polygon(np.array([a - band, b - band, b + band, a + band]), closed=True,
                         facecolor="white", edgecolor="none", zorder=4))
    if instance.category == BuiltInCategory.DOORS:
        # Leaf hinged at ``a``, swinging inwards (left of the wall direction)
        leaf_end = a + normal * symbol.width
        ax.plot([a[0], leaf_end[0]], [a[1], leaf_end[1]], color=_DOOR_COLOR,
                linewidth=1.5, zorder=5)
        start_angle = float(np.degrees(np.arctan2(direction[1], direction[0])))
        ax.add_patch(Arc(a, 2 * symbol.width, 2 * symbol.width, theta1=start_angle,
                         theta2=start_angle + 90, color=_DOOR_COLOR, linewidth=1.0, zorder=5))
    else:
        for side in (-0.25, 0.25):
            offset = normal * wall.width * side
            ax.plot([a[0] + offset[0], b[0] + offset[0]], [a[1] + offset[1], b[1] + offset[1]],
                    color=_WINDOW_COLOR, linewidth=1.5, zorder=5)


def _roof_footprint(roof: ExtrusionRoof, plane: ReferencePlane) -> np.ndarray:
    """Plan projection of the roof's bounding rectangle."""
    normal = plane.normal
    n = np.array([normal.x, normal.y])
    points = [roof.profile[0].start] + [seg.end for seg in roof.profile]
    xy = np.array([[p.x, p.y] for p in points])
    near = xy + n * roof.extrusion_start
    far = xy + n * roof.extrusion_end
    return np.array([near[0], near[-1], far[-1], far[0]])


def render_floorplan(
    document: ModelDocument,
    output_path: str | Path,
    title: str | None = None,
    dpi: int = 150,
    show_dimensions: bool = True,
    show_roof: bool = True,
) -> Path:
    """Render a plan of the document's walls, openings and roof to PNG.

    Args:
        document: The document to render.
        output_path: Output image path.
        title: Plot title (defaults to the document name).
        dpi: Image resolution.
        show_dimensions: Label walls with their length in millimetres.
        show_roof: Outline the roof footprint.

    Returns:
        Path to the output image.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig, ax = plt.subplots(1, 1, figsize=(12, 8))
    ax.set_aspect("equal")
    ax.set_facecolor("#FAFAFA")

    for wall in document.walls():
        _draw_wall(ax, wall, show_dimensions)

    for instance in document.family_instances():
        wall = document.get_element(instance.host_id)
        symbol = document.get_element(instance.symbol_id)
        if isinstance(wall, Wall) and isinstance(symbol, FamilySymbol):
            _draw_opening(ax, instance, symbol, wall)

    if show_roof:
        for roof in document.roofs():
            plane = document.get_element(roof.reference_plane_id)
            if isinstance(plane, ReferencePlane):
                ax.add_patch(Polygon(_roof_footprint(roof, plane), closed=True, fill=False,
                                     edgecolor=_ROOF_COLOR, linestyle="--", linewidth=1.2,
                                     zorder=2))

    ax.autoscale_view()
    ax.margins(0.1)
    ax.set_xlabel("x (ft)")
    ax.set_ylabel("y (ft)")
    ax.set_title(title or document.name)
    fig.savefig(output_path, dpi=dpi, bbox_inches="tight")
    plt.close(fig)
    return output_path
