# src/ledger_todo/core/errors.py

"""
Error taxonomy.

Every failure is local to one operation: the projection stays at its last
known-good state and the error reaches the UI as part of a discriminated result.
"""

from __future__ import annotations


class LedgerTodoError(Exception):
    """Base class for all client errors."""


# ---- read side ----


class ListNotFoundError(LedgerTodoError):
    """The account never created a list (expected; shown as a create-list prompt)."""

    def __init__(self, address: str) -> None:
        super().__init__(f"No todo list for account {address}")
        self.address = address


class TaskLookupError(LedgerTodoError, LookupError):
    """A table entry is missing for an id inside [1, task_counter]."""

    def __init__(self, handle: str, task_id: int) -> None:
        super().__init__(f"Task {task_id} not found in table {handle}")
        self.handle = handle
        self.task_id = task_id


class DecodeError(LedgerTodoError):
    """Ledger data does not match the expected schema."""


class LedgerTransportError(LedgerTodoError):
    """Network/node failure while talking to the ledger."""


class ResourceNotFoundError(LedgerTodoError):
    """Transport-level: resource (or the whole account) does not exist."""


class TableItemNotFoundError(LedgerTodoError, LookupError):
    """Transport-level: table has no item for the requested key."""


# ---- write side ----


class SubmissionError(LedgerTodoError):
    """Rejected before inclusion: user declined signing, malformed payload, etc."""


class NoAccountError(SubmissionError):
    def __init__(self) -> None:
        super().__init__("No account connected")


class TransactionFailedError(SubmissionError):
    """Committed but aborted by the VM; ledger state is unchanged."""

    def __init__(self, tx_hash: str, vm_status: str) -> None:
        super().__init__(f"Transaction {tx_hash} failed: {vm_status}")
        self.tx_hash = tx_hash
        self.vm_status = vm_status


class ConfirmationError(LedgerTodoError):
    """Submitted but not confirmed in time; ledger state is indeterminate."""

    def __init__(self, tx_hash: str, message: str | None = None) -> None:
        super().__init__(message or f"Transaction {tx_hash} was not confirmed in time")
        self.tx_hash = tx_hash


class BusyError(LedgerTodoError):
    """Another transaction is already in flight."""

    def __init__(self) -> None:
        super().__init__("A transaction is already in progress")
