"""Shell Builder CLI.

Usage:
    python -m shell_builder <command> [options]

Documents are ModelDocument JSON files. ``generate`` builds the shell in
a fresh template document (or an existing one) and saves it; the other
commands read a saved document. All commands print JSON to stdout.
"""
from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import typer

from shell_builder.command import ShellCommand
from shell_builder.config import ShellConfig
from shell_builder.generators.shell import generate_points
from shell_builder.models.document import ModelDocument
from shell_builder.models.elements import BuiltInCategory
from shell_builder.units import internal_to_mm, mm_to_internal

app = typer.Typer(
    name="shell_builder",
    help="Shell Builder: generate a rectangular building shell in a BIM document.",
    no_args_is_help=True,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _output(data: dict) -> None:
    """Print JSON output to stdout."""
    typer.echo(json.dumps(data, indent=2, ensure_ascii=False))


def _fail(error: str) -> None:
    _output({"ok": False, "error": error})
    raise typer.Exit(1)


def _load_document(path: str) -> ModelDocument:
    """Load a document JSON file."""
    doc_path = Path(path)
    if not doc_path.exists():
        _fail(f"Document not found: {doc_path}")
    try:
        return ModelDocument.load(doc_path)
    except ValueError as e:
        _fail(f"Invalid document {doc_path}: {e}")


def _load_config(path: Optional[str]) -> ShellConfig:
    if path is None:
        return ShellConfig()
    config_path = Path(path)
    if not config_path.exists():
        _fail(f"Config not found: {config_path}")
    try:
        return ShellConfig.load(config_path)
    except ValueError as e:
        _fail(f"Invalid config {config_path}: {e}")


def _counts(document: ModelDocument) -> dict:
    return {
        "levels": len(document.levels()),
        "walls": len(document.walls()),
        "doors": len(document.family_instances(BuiltInCategory.DOORS)),
        "windows": len(document.family_instances(BuiltInCategory.WINDOWS)),
        "roofs": len(document.roofs()),
    }


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log progress to stderr"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@app.command()
def version() -> None:
    """Show version."""
    from shell_builder import __version__

    _output({"ok": True, "version": __version__})


@app.command()
def points(
    width_mm: float = typer.Option(10000.0, "--width", "-w", help="Footprint width (mm)"),
    depth_mm: float = typer.Option(5000.0, "--depth", "-d", help="Footprint depth (mm)"),
):
    """Print the closed rectangular wall loop."""
    try:
        loop = generate_points(mm_to_internal(width_mm), mm_to_internal(depth_mm))
    except ValueError as e:
        _fail(str(e))
    _output({
        "ok": True,
        "points_ft": [list(p.as_tuple()) for p in loop],
        "points_mm": [[round(internal_to_mm(c), 3) for c in p.as_tuple()] for p in loop],
    })


@app.command()
def generate(
    output: str = typer.Argument(..., help="Where to save the document JSON"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="ShellConfig JSON file"),
    document: Optional[str] = typer.Option(
        None, "--document", help="Existing document JSON (default: new template document)"
    ),
    name: str = typer.Option("Shell", "--name", "-n", help="Name of a new template document"),
    single_transaction: bool = typer.Option(
        False, "--single-transaction", help="Build in one transaction instead of one per feature"
    ),
    allow_duplicates: bool = typer.Option(
        False, "--allow-duplicates", help="Build even if the footprint already has walls"
    ),
):
    """Build the shell in a document and save it."""
    shell_config = _load_config(config)
    doc = _load_document(document) if document else ModelDocument.template(name=name)

    try:
        result = ShellCommand(
            shell_config,
            single_transaction=single_transaction,
            allow_duplicates=allow_duplicates,
        ).execute(doc)
        if result.ok:
            saved = doc.save(output)
    except (ValueError, OSError) as e:
        _fail(str(e))

    if not result.ok:
        _output({"ok": False, "status": result.status.value, "error": result.message})
        raise typer.Exit(1)

    _output({
        "ok": True,
        "status": result.status.value,
        "message": result.message,
        "document": str(saved),
        "transactions": doc.committed_transactions,
        "counts": _counts(doc),
    })


@app.command()
def summary(document: str = typer.Argument(..., help="Document JSON file")):
    """Element counts per category and a readable summary."""
    doc = _load_document(document)
    _output({"ok": True, "name": doc.name, "counts": _counts(doc), "summary": doc.summary()})


@app.command("export")
def export_cmd(
    document: str = typer.Argument(..., help="Document JSON file"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="IFC output path"),
):
    """Export a document to IFC."""
    from shell_builder.export.ifc import IFCExporter

    doc = _load_document(document)
    out = Path(output) if output else Path(document).with_suffix(".ifc")
    IFCExporter(doc).export(out)
    _output({"ok": True, "exported": str(out), "format": "ifc"})


@app.command()
def render(
    document: str = typer.Argument(..., help="Document JSON file"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="PNG output path"),
    no_roof: bool = typer.Option(False, "--no-roof", help="Do not outline the roof"),
):
    """Render a plan of the document to PNG."""
    from shell_builder.export.floorplan import render_floorplan

    doc = _load_document(document)
    out = Path(output) if output else Path(document).with_suffix(".png")
    render_floorplan(doc, out, show_roof=not no_roof)
    _output({"ok": True, "rendered": str(out)})


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    app()
