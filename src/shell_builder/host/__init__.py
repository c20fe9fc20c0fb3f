"""Host document abstraction: the capability set and edit scopes."""

from shell_builder.host.transaction import Transaction, TransactionStatus
from shell_builder.host.protocol import HostDocument

__all__ = ["Transaction", "TransactionStatus", "HostDocument"]
