"""Exporters: IFC files and plan images."""
