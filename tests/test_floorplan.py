"""Tests for plan rendering."""

from shell_builder.export.floorplan import render_floorplan
from shell_builder.generators import build_shell
from shell_builder.models import ModelDocument

PNG_MAGIC = b"\x89PNG"


class TestRenderFloorplan:
    def test_renders_png(self, tmp_path):
        doc = ModelDocument.template(name="Plan")
        build_shell(doc)
        out = render_floorplan(doc, tmp_path / "plans" / "shell.png")
        assert out.exists()
        assert out.read_bytes()[:4] == PNG_MAGIC

    def test_options(self, tmp_path):
        doc = ModelDocument.template()
        build_shell(doc)
        out = render_floorplan(
            doc, str(tmp_path / "bare.png"), title="Bare", dpi=72,
            show_dimensions=False, show_roof=False,
        )
        assert out.stat().st_size > 0

    def test_empty_document(self, tmp_path):
        out = render_floorplan(ModelDocument.template(), tmp_path / "empty.png")
        assert out.exists()
