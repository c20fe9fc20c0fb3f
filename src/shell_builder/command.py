"""Host command entry point.

``ShellCommand.execute`` is what the host invokes: it builds the shell in
the active document and reports a status plus an optional message.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from shell_builder.config import ShellConfig
from shell_builder.errors import CommandCancelled, ShellBuilderError
from shell_builder.generators.shell import ShellResult, build_shell
from shell_builder.host.protocol import HostDocument

logger = logging.getLogger(__name__)


class Result(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class CommandResult:
    status: Result
    message: str = ""
    shell: ShellResult | None = None

    @property
    def ok(self) -> bool:
        return self.status == Result.SUCCEEDED


class ShellCommand:
    """Build a rectangular building shell in the active document."""

    def __init__(
        self,
        config: ShellConfig | None = None,
        single_transaction: bool = False,
        allow_duplicates: bool = False,
    ):
        self.config = config or ShellConfig()
        self.single_transaction = single_transaction
        self.allow_duplicates = allow_duplicates

    def execute(self, document: HostDocument) -> CommandResult:
        try:
            shell = build_shell(
                document,
                self.config,
                single_transaction=self.single_transaction,
                allow_duplicates=self.allow_duplicates,
            )
        except CommandCancelled as e:
            logger.info("Shell command cancelled: %s", e)
            return CommandResult(Result.CANCELLED, str(e))
        except ShellBuilderError as e:
            logger.error("Shell command failed: %s", e)
            return CommandResult(Result.FAILED, str(e))

        message = (
            f"Created {len(shell.walls)} walls, {1 if shell.door else 0} door, "
            f"{len(shell.windows)} windows and {1 if shell.roof else 0} roof"
        )
        return CommandResult(Result.SUCCEEDED, message, shell)
