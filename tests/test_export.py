"""Tests for IFC export."""

from pathlib import Path

import ifcopenshell
import pytest

from shell_builder.export.ifc import IFCExporter
from shell_builder.generators import build_shell
from shell_builder.models import ModelDocument


@pytest.fixture
def shell_doc() -> ModelDocument:
    doc = ModelDocument.template(name="Test Shell")
    build_shell(doc)
    return doc


def _export(doc: ModelDocument, tmp_path: Path) -> ifcopenshell.file:
    path = IFCExporter(doc).export(tmp_path / "out" / "shell.ifc")
    assert path.exists()
    return ifcopenshell.open(str(path))


class TestIFCExport:
    def test_hierarchy(self, shell_doc, tmp_path):
        ifc = _export(shell_doc, tmp_path)
        assert ifc.schema == "IFC2X3"
        assert len(ifc.by_type("IfcProject")) == 1
        assert ifc.by_type("IfcProject")[0].Name == "Test Shell"
        assert len(ifc.by_type("IfcSite")) == 1
        assert len(ifc.by_type("IfcBuilding")) == 1
        storeys = ifc.by_type("IfcBuildingStorey")
        assert [s.Name for s in storeys] == ["Уровень 1", "Уровень 2"]
        assert storeys[1].Elevation == pytest.approx(4.0)

    def test_elements(self, shell_doc, tmp_path):
        ifc = _export(shell_doc, tmp_path)
        assert len(ifc.by_type("IfcWallStandardCase")) == 4
        assert len(ifc.by_type("IfcDoor")) == 1
        assert len(ifc.by_type("IfcWindow")) == 3
        assert len(ifc.by_type("IfcOpeningElement")) == 4
        assert len(ifc.by_type("IfcRelVoidsElement")) == 4
        assert len(ifc.by_type("IfcRelFillsElement")) == 4
        slabs = ifc.by_type("IfcSlab")
        assert len(slabs) == 1
        assert slabs[0].PredefinedType == "ROOF"
        assert slabs[0].Name == "Базовая крыша: Типовой - 400мм"

    def test_global_ids_preserved(self, shell_doc, tmp_path):
        ifc = _export(shell_doc, tmp_path)
        wall_ids = {w.GlobalId for w in ifc.by_type("IfcWallStandardCase")}
        assert wall_ids == {w.global_id for w in shell_doc.walls()}
        assert ifc.by_type("IfcSlab")[0].GlobalId == shell_doc.roofs()[0].global_id

    def test_dimensions_in_metres(self, shell_doc, tmp_path):
        ifc = _export(shell_doc, tmp_path)
        door = ifc.by_type("IfcDoor")[0]
        assert door.OverallWidth == pytest.approx(0.915)
        assert door.OverallHeight == pytest.approx(2.134)
        window = ifc.by_type("IfcWindow")[0]
        assert window.OverallWidth == pytest.approx(0.406)

    def test_elements_contained_in_storeys(self, shell_doc, tmp_path):
        ifc = _export(shell_doc, tmp_path)
        contained = {
            rel.RelatingStructure.Name: {e.is_a() for e in rel.RelatedElements}
            for rel in ifc.by_type("IfcRelContainedInSpatialStructure")
        }
        assert contained["Уровень 1"] == {"IfcWallStandardCase", "IfcDoor", "IfcWindow"}
        assert contained["Уровень 2"] == {"IfcSlab"}

    def test_header(self, shell_doc, tmp_path):
        ifc = _export(shell_doc, tmp_path)
        file_name = ifc.header.file_name
        assert file_name.name == "Test Shell.ifc"
        assert tuple(file_name.author) == ("shell-builder",)

    def test_empty_document(self, tmp_path):
        ifc = _export(ModelDocument.template(), tmp_path)
        assert len(ifc.by_type("IfcBuildingStorey")) == 2
        assert ifc.by_type("IfcWallStandardCase") == []
