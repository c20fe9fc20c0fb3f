"""Procedural building-shell generator for BIM documents."""

__version__ = "0.1.0"
