"""Edit scopes.

A ``Transaction`` groups document modifications into one atomic unit that
is committed or rolled back as a whole. Documents implement the three
hooks ``_start_transaction``, ``_commit_transaction`` and
``_rollback_transaction``; this class only tracks the state machine.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING

from shell_builder.errors import TransactionError

if TYPE_CHECKING:
    from shell_builder.host.protocol import HostDocument

logger = logging.getLogger(__name__)


class TransactionStatus(str, Enum):
    NOT_STARTED = "not_started"
    STARTED = "started"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class Transaction:
    """A named edit scope on a document.

    Usable explicitly (``start``/``commit``/``rollback``) or as a context
    manager, which starts on entry, commits on normal exit and rolls back
    when the block raises.
    """

    def __init__(self, document: HostDocument, name: str):
        self.document = document
        self.name = name
        self.status = TransactionStatus.NOT_STARTED

    def __repr__(self) -> str:
        return f"Transaction({self.name!r}, {self.status.value})"

    @property
    def is_active(self) -> bool:
        return self.status == TransactionStatus.STARTED

    def start(self) -> Transaction:
        if self.status != TransactionStatus.NOT_STARTED:
            raise TransactionError(
                f"Transaction '{self.name}' cannot be started ({self.status.value})"
            )
        self.document._start_transaction(self)
        self.status = TransactionStatus.STARTED
        logger.debug("Started transaction '%s'", self.name)
        return self

    def commit(self) -> None:
        if not self.is_active:
            raise TransactionError(
                f"Transaction '{self.name}' cannot be committed ({self.status.value})"
            )
        self.document._commit_transaction(self)
        self.status = TransactionStatus.COMMITTED
        logger.debug("Committed transaction '%s'", self.name)

    def rollback(self) -> None:
        if not self.is_active:
            raise TransactionError(
                f"Transaction '{self.name}' cannot be rolled back ({self.status.value})"
            )
        self.document._rollback_transaction(self)
        self.status = TransactionStatus.ROLLED_BACK
        logger.warning("Rolled back transaction '%s'", self.name)

    def require_active(self) -> None:
        """Raise unless this transaction is the open edit scope."""
        if not self.is_active:
            raise TransactionError(
                f"Transaction '{self.name}' is not active ({self.status.value})"
            )

    def __enter__(self) -> Transaction:
        if self.status == TransactionStatus.NOT_STARTED:
            self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if not self.is_active:
            return
        if exc_type is None:
            self.commit()
        else:
            self.rollback()
