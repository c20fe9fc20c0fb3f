"""Exceptions raised while building a shell."""

from __future__ import annotations


class ShellBuilderError(Exception):
    """Base class for all shell builder errors."""


class LevelNotFoundError(ShellBuilderError):
    """No level matches the requested id or name."""

    def __init__(self, ref: int | str, available: list[str]):
        self.ref = ref
        self.available = available
        super().__init__(f"Level {ref!r} not found. Available: {available}")


class FamilyTypeNotFoundError(ShellBuilderError):
    """No family type matches the requested family and type names."""

    def __init__(self, category: str, family_name: str, type_name: str, available: list[str]):
        self.category = category
        self.family_name = family_name
        self.type_name = type_name
        self.available = available
        super().__init__(
            f"{category.capitalize()} type '{family_name}: {type_name}' not found. "
            f"Available: {available}"
        )


class DuplicateShellError(ShellBuilderError):
    """The base level already carries walls on the generated footprint."""


class TransactionError(ShellBuilderError):
    """Document modified outside a transaction, or transactions misused."""


class CommandCancelled(ShellBuilderError):
    """The user cancelled the command."""
