"""Shell generator configuration.

All lengths are in millimetres. Levels can be referenced by element id
(stable) or by display name (convenience, exact match). Family and roof
types are referenced by family name plus type name.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

from shell_builder.units import mm_to_internal


class ShellConfig(BaseModel):
    """Parameters of the generated building shell."""

    width_mm: float = Field(default=10000.0, gt=0, description="Footprint width along X")
    depth_mm: float = Field(default=5000.0, gt=0, description="Footprint depth along Y")
    base_level: int | str = Field(default="Уровень 1", description="Base level id or name")
    top_level: int | str = Field(default="Уровень 2", description="Top constraint level id or name")
    door_family: str = "Одиночные-Щитовые"
    door_type: str = "0915 x 2134 мм"
    window_family: str = "Фиксированные"
    window_type: str = "0406 x 0610 мм"
    roof_family: str = "Базовая крыша"
    roof_type: str = "Типовой - 400мм"
    sill_height_mm: float = Field(default=850.0, ge=0, description="Window sill height")
    roof_rise_mm: float = Field(default=1524.0, gt=0, description="Ridge height above the eaves")

    @property
    def width(self) -> float:
        """Footprint width in internal units."""
        return mm_to_internal(self.width_mm)

    @property
    def depth(self) -> float:
        """Footprint depth in internal units."""
        return mm_to_internal(self.depth_mm)

    @property
    def sill_height(self) -> float:
        return mm_to_internal(self.sill_height_mm)

    @property
    def roof_rise(self) -> float:
        return mm_to_internal(self.roof_rise_mm)

    @classmethod
    def load(cls, path: str | Path) -> ShellConfig:
        """Load a configuration from a JSON file."""
        path = Path(path)
        return cls.model_validate_json(path.read_text(encoding="utf-8"))

    def save(self, path: str | Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return path
