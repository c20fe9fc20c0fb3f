"""Geometric primitives in internal units (feet)."""

from __future__ import annotations

import math

from pydantic import BaseModel, model_validator

_TOL = 1e-9


class XYZ(BaseModel):
    """3D point or vector."""

    x: float
    y: float
    z: float = 0.0

    @classmethod
    def zero(cls) -> XYZ:
        return cls(x=0.0, y=0.0, z=0.0)

    @classmethod
    def basis_x(cls) -> XYZ:
        return cls(x=1.0, y=0.0, z=0.0)

    @classmethod
    def basis_y(cls) -> XYZ:
        return cls(x=0.0, y=1.0, z=0.0)

    @classmethod
    def basis_z(cls) -> XYZ:
        return cls(x=0.0, y=0.0, z=1.0)

    def __add__(self, other: XYZ) -> XYZ:
        return XYZ(x=self.x + other.x, y=self.y + other.y, z=self.z + other.z)

    def __sub__(self, other: XYZ) -> XYZ:
        return XYZ(x=self.x - other.x, y=self.y - other.y, z=self.z - other.z)

    def __mul__(self, factor: float) -> XYZ:
        return XYZ(x=self.x * factor, y=self.y * factor, z=self.z * factor)

    __rmul__ = __mul__

    def __truediv__(self, divisor: float) -> XYZ:
        return XYZ(x=self.x / divisor, y=self.y / divisor, z=self.z / divisor)

    def __neg__(self) -> XYZ:
        return XYZ(x=-self.x, y=-self.y, z=-self.z)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, XYZ):
            return NotImplemented
        return (
            math.isclose(self.x, other.x, abs_tol=1e-6)
            and math.isclose(self.y, other.y, abs_tol=1e-6)
            and math.isclose(self.z, other.z, abs_tol=1e-6)
        )

    def __hash__(self) -> int:
        return hash((round(self.x, 6), round(self.y, 6), round(self.z, 6)))

    @property
    def length(self) -> float:
        return math.sqrt(self.x ** 2 + self.y ** 2 + self.z ** 2)

    def distance_to(self, other: XYZ) -> float:
        """Euclidean distance to another point."""
        return (self - other).length

    def normalize(self) -> XYZ:
        """Unit vector in the same direction."""
        length = self.length
        if length < _TOL:
            raise ValueError("Cannot normalize a zero-length vector")
        return self / length

    def dot(self, other: XYZ) -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: XYZ) -> XYZ:
        return XYZ(
            x=self.y * other.z - self.z * other.y,
            y=self.z * other.x - self.x * other.z,
            z=self.x * other.y - self.y * other.x,
        )

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)


class Line(BaseModel):
    """Bounded straight segment between two points."""

    start: XYZ
    end: XYZ

    @model_validator(mode="after")
    def start_and_end_differ(self) -> Line:
        if self.start == self.end:
            raise ValueError("Line start and end points must be different")
        return self

    @classmethod
    def create_bound(cls, start: XYZ, end: XYZ) -> Line:
        return cls(start=start, end=end)

    @property
    def length(self) -> float:
        return self.start.distance_to(self.end)

    @property
    def midpoint(self) -> XYZ:
        return (self.start + self.end) / 2

    @property
    def direction(self) -> XYZ:
        """Unit vector from start to end."""
        return (self.end - self.start).normalize()

    def end_point(self, index: int) -> XYZ:
        """Start (0) or end (1) point."""
        if index == 0:
            return self.start
        if index == 1:
            return self.end
        raise IndexError(f"Line end point index must be 0 or 1, got {index}")
