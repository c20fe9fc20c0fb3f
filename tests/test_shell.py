"""Tests for the shell generator."""

import pytest

from shell_builder.config import ShellConfig
from shell_builder.errors import (
    DuplicateShellError,
    FamilyTypeNotFoundError,
    LevelNotFoundError,
    TransactionError,
)
from shell_builder.generators import (
    add_door,
    add_roof,
    add_windows,
    build_shell,
    create_walls,
    generate_points,
    wall_midpoint,
)
from shell_builder.generators.shell import roof_profile
from shell_builder.models import XYZ, BuiltInCategory, ModelDocument, ReferencePlane
from shell_builder.units import mm_to_internal

W = mm_to_internal(10000)
D = mm_to_internal(5000)
T = mm_to_internal(200)
TOP = mm_to_internal(4000)


class FailingRoofDocument(ModelDocument):
    def create_extrusion_roof(self, *args, **kwargs):
        raise RuntimeError("Roof could not be created")


@pytest.fixture
def doc():
    return ModelDocument.template()


class TestGeneratePoints:
    def test_closed_loop(self):
        pts = generate_points(10.0, 5.0)
        assert len(pts) == 5
        assert pts[0] == pts[-1]

    def test_corners(self):
        pts = generate_points(10.0, 5.0)
        assert pts[:4] == [
            XYZ(x=-5, y=-2.5), XYZ(x=5, y=-2.5), XYZ(x=5, y=2.5), XYZ(x=-5, y=2.5),
        ]

    def test_centered_on_origin(self):
        pts = generate_points(W, D)[:4]
        assert sum(p.x for p in pts) == pytest.approx(0.0)
        assert sum(p.y for p in pts) == pytest.approx(0.0)
        assert all(p.z == 0.0 for p in pts)

    def test_side_lengths(self):
        pts = generate_points(W, D)
        sides = [pts[i].distance_to(pts[i + 1]) for i in range(4)]
        assert sides == pytest.approx([W, D, W, D])

    @pytest.mark.parametrize("width,depth", [(0, 5), (10, 0), (-1, 5)])
    def test_non_positive_rejected(self, width, depth):
        with pytest.raises(ValueError, match="must be positive"):
            generate_points(width, depth)


class TestBuilders:
    def test_builders_require_active_transaction(self, doc):
        base, top = doc.levels()
        tx = doc.transaction("Create walls")
        with pytest.raises(TransactionError, match="not active"):
            create_walls(doc, generate_points(W, D), base, top, tx)
        assert doc.walls() == []

    def test_walls(self, doc):
        base, top = doc.levels()
        with doc.transaction("Create walls") as tx:
            walls = create_walls(doc, generate_points(W, D), base, top, tx)
        assert len(walls) == 4
        assert all(w.level_id == base.id and w.top_level_id == top.id for w in walls)
        assert walls[0].location.start == XYZ(x=-W / 2, y=-D / 2)
        assert walls[3].location.end == walls[0].location.start
        for i in range(4):
            assert walls[i].location.end == walls[(i + 1) % 4].location.start

    def test_door_and_windows(self, doc):
        base, top = doc.levels()
        door_symbol = doc.family_symbols(BuiltInCategory.DOORS)[0]
        window_symbol = doc.family_symbols(BuiltInCategory.WINDOWS)[0]
        with doc.transaction("Shell") as tx:
            walls = create_walls(doc, generate_points(W, D), base, top, tx)
            door = add_door(doc, walls[0], base, door_symbol, tx)
            windows = add_windows(doc, walls, base, window_symbol, 2.0, tx)
        assert door.host_id == walls[0].id
        assert door.location == XYZ(x=0, y=-D / 2)
        assert [w.host_id for w in windows] == [walls[1].id, walls[2].id, walls[3].id]
        assert all(w.sill_height == 2.0 for w in windows)
        assert doc.family_symbols(BuiltInCategory.DOORS)[0].is_active

    def test_wall_midpoint(self, doc):
        base, top = doc.levels()
        with doc.transaction("Create walls") as tx:
            walls = create_walls(doc, generate_points(W, D), base, top, tx)
        assert wall_midpoint(walls[1]) == XYZ(x=W / 2, y=0)
        assert wall_midpoint(walls[2]) == XYZ(x=0, y=D / 2)

    def test_roof_profile(self, doc):
        base, top = doc.levels()
        with doc.transaction("Create walls") as tx:
            walls = create_walls(doc, generate_points(W, D), base, top, tx)
        origin, profile, length = roof_profile(walls, TOP, 5.0)
        assert origin == XYZ(x=-W / 2 - T / 2, y=-D / 2 - T / 2, z=TOP)
        assert length == pytest.approx(W + T)
        assert profile[0].start == origin
        assert profile[0].end == origin + XYZ(x=0, y=D / 2 + T / 2, z=5.0)
        assert profile[1].end == origin + XYZ(x=0, y=D + T, z=0)

    def test_add_roof(self, doc):
        base, top = doc.levels()
        roof_type = doc.roof_types()[0]
        with doc.transaction("Shell") as tx:
            walls = create_walls(doc, generate_points(W, D), base, top, tx)
            plane, roof = add_roof(doc, walls, top, roof_type, tx, rise=5.0)
        assert plane.normal == XYZ.basis_x()
        assert roof.level_id == top.id
        assert roof.roof_type_id == roof_type.id
        assert roof.extrusion_start == 0.0
        assert roof.extrusion_end == pytest.approx(W + T)


class TestBuildShell:
    def test_default_shell(self, doc):
        result = build_shell(doc)
        base, top = doc.levels()
        assert len(result.points) == 5
        assert len(doc.walls()) == 4
        assert all(w.level_id == base.id and w.top_level_id == top.id for w in doc.walls())
        assert all(doc.wall_height(w) == pytest.approx(TOP) for w in doc.walls())

        doors = doc.family_instances(BuiltInCategory.DOORS)
        windows = doc.family_instances(BuiltInCategory.WINDOWS)
        assert len(doors) == 1 and doors[0].host_id == result.walls[0].id
        assert [w.host_id for w in windows] == [w.id for w in result.walls[1:]]
        assert all(w.sill_height == pytest.approx(mm_to_internal(850)) for w in windows)
        assert all(i.level_id == base.id for i in doors + windows)

        assert len(doc.roofs()) == 1
        roof = doc.roofs()[0]
        assert roof.level_id == top.id
        assert doc.get_element(roof.roof_type_id).name == "Типовой - 400мм"
        assert isinstance(doc.get_element(roof.reference_plane_id), ReferencePlane)
        assert roof.extrusion_end == pytest.approx(W + T)

    def test_door_and_window_types(self, doc):
        build_shell(doc)
        door = doc.family_instances(BuiltInCategory.DOORS)[0]
        window = doc.family_instances(BuiltInCategory.WINDOWS)[0]
        assert doc.get_element(door.symbol_id).name == "0915 x 2134 мм"
        assert doc.get_element(window.symbol_id).name == "0406 x 0610 мм"

    def test_one_transaction_per_feature(self, doc):
        build_shell(doc)
        assert doc.committed_transactions == [
            "Create walls", "Insert door", "Insert windows", "Create roof",
        ]

    def test_single_transaction(self, doc):
        build_shell(doc, single_transaction=True)
        assert doc.committed_transactions == ["Build shell"]
        assert len(doc.walls()) == 4

    def test_custom_config(self, doc):
        config = ShellConfig(
            width_mm=6000, depth_mm=4000, base_level=doc.levels()[0].id,
            window_type="0610 x 1220 мм", sill_height_mm=900,
        )
        result = build_shell(doc, config)
        assert result.walls[0].length == pytest.approx(mm_to_internal(6000))
        assert result.walls[1].length == pytest.approx(mm_to_internal(4000))
        assert result.windows[0].sill_height == pytest.approx(mm_to_internal(900))

    def test_missing_level_leaves_document_unchanged(self, doc):
        before = doc.model_dump()
        with pytest.raises(LevelNotFoundError):
            build_shell(doc, ShellConfig(top_level="Уровень 3"))
        assert doc.model_dump() == before
        assert doc.committed_transactions == []

    def test_missing_type_leaves_document_unchanged(self, doc):
        before = doc.model_dump()
        with pytest.raises(FamilyTypeNotFoundError):
            build_shell(doc, ShellConfig(roof_type="Типовой - 999мм"))
        assert doc.model_dump() == before

    def test_failure_rolls_back_only_failing_feature(self):
        doc = FailingRoofDocument.template()
        with pytest.raises(RuntimeError, match="Roof could not be created"):
            build_shell(doc)
        assert doc.committed_transactions == ["Create walls", "Insert door", "Insert windows"]
        assert len(doc.walls()) == 4
        assert len(doc.family_instances()) == 4
        assert doc.elements_of(ReferencePlane) == []
        assert doc.active_transaction is None

    def test_failure_in_single_transaction_rolls_back_everything(self):
        doc = FailingRoofDocument.template()
        before = doc.model_dump()
        with pytest.raises(RuntimeError):
            build_shell(doc, single_transaction=True)
        assert doc.model_dump() == before
        assert doc.committed_transactions == []

    def test_second_run_is_rejected(self, doc):
        build_shell(doc)
        with pytest.raises(DuplicateShellError, match="already has 4 wall"):
            build_shell(doc)
        assert len(doc.walls()) == 4

    def test_allow_duplicates(self, doc):
        build_shell(doc)
        build_shell(doc, allow_duplicates=True)
        assert len(doc.walls()) == 8
        assert len(doc.roofs()) == 2

    def test_other_footprint_is_not_a_duplicate(self, doc):
        build_shell(doc)
        build_shell(doc, ShellConfig(width_mm=20000))
        assert len(doc.walls()) == 8
