"""Tests for geometric primitives and unit conversion."""

import math

import pytest

from shell_builder.models import XYZ, Line
from shell_builder.units import internal_to_m, internal_to_mm, mm_to_internal


class TestXYZ:
    def test_arithmetic(self):
        a = XYZ(x=1, y=2, z=3)
        b = XYZ(x=4, y=5, z=6)
        assert a + b == XYZ(x=5, y=7, z=9)
        assert b - a == XYZ(x=3, y=3, z=3)
        assert a * 2 == XYZ(x=2, y=4, z=6)
        assert 2 * a == XYZ(x=2, y=4, z=6)
        assert (a + b) / 2 == XYZ(x=2.5, y=3.5, z=4.5)
        assert -a == XYZ(x=-1, y=-2, z=-3)

    def test_z_defaults_to_zero(self):
        assert XYZ(x=1, y=1).z == 0.0

    def test_tolerant_equality(self):
        assert XYZ(x=1.0, y=0, z=0) == XYZ(x=1.0 + 1e-9, y=0, z=0)
        assert XYZ(x=1.0, y=0, z=0) != XYZ(x=1.1, y=0, z=0)

    def test_length_and_distance(self):
        assert XYZ(x=3, y=4, z=0).length == 5.0
        assert XYZ(x=1, y=1, z=1).distance_to(XYZ(x=1, y=1, z=3)) == 2.0

    def test_normalize(self):
        assert XYZ(x=0, y=0, z=7).normalize() == XYZ.basis_z()

    def test_normalize_zero_rejected(self):
        with pytest.raises(ValueError, match="zero-length"):
            XYZ.zero().normalize()

    def test_cross_and_dot(self):
        assert XYZ.basis_x().cross(XYZ.basis_y()) == XYZ.basis_z()
        assert XYZ.basis_z().cross(XYZ.basis_y()) == -XYZ.basis_x()
        assert XYZ.basis_x().dot(XYZ.basis_y()) == 0.0
        assert XYZ(x=1, y=2, z=3).dot(XYZ(x=1, y=2, z=3)) == 14.0

    def test_hashable(self):
        assert len({XYZ(x=1, y=2), XYZ(x=1, y=2), XYZ(x=2, y=1)}) == 2


class TestLine:
    def test_length_and_midpoint(self):
        line = Line.create_bound(XYZ(x=0, y=0), XYZ(x=6, y=8))
        assert line.length == 10.0
        assert line.midpoint == XYZ(x=3, y=4)

    def test_direction(self):
        line = Line.create_bound(XYZ(x=2, y=0), XYZ(x=-3, y=0))
        assert line.direction == -XYZ.basis_x()

    def test_end_points(self):
        line = Line.create_bound(XYZ(x=0, y=0), XYZ(x=1, y=0))
        assert line.end_point(0) == XYZ(x=0, y=0)
        assert line.end_point(1) == XYZ(x=1, y=0)
        with pytest.raises(IndexError):
            line.end_point(2)

    def test_zero_length_rejected(self):
        with pytest.raises(ValueError, match="must be different"):
            Line.create_bound(XYZ(x=1, y=1), XYZ(x=1, y=1))


class TestUnits:
    def test_foot_is_304_8_mm(self):
        assert mm_to_internal(304.8) == pytest.approx(1.0)
        assert internal_to_mm(1.0) == pytest.approx(304.8)

    def test_metres(self):
        assert internal_to_m(mm_to_internal(10000)) == pytest.approx(10.0)

    def test_round_trip(self):
        assert internal_to_mm(mm_to_internal(850)) == pytest.approx(850)

    def test_default_footprint_sizes(self):
        assert mm_to_internal(10000) == pytest.approx(32.808399, rel=1e-6)
        assert math.isclose(mm_to_internal(5000), 16.4041995, rel_tol=1e-6)
