# src/ledger_todo/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps the ledger transport and the wallet swappable and makes testing easier.
"""

from collections.abc import Awaitable, Mapping
from typing import Any, Protocol

JsonDict = dict[str, Any]


class LedgerReader(Protocol):
    """
    Read-only ledger access.

    - get_resource raises ResourceNotFoundError when the resource/account is missing
    - get_table_item raises TableItemNotFoundError when the key is missing
    - anything else (network, 5xx) raises LedgerTransportError
    """

    def get_resource(self, address: str, resource_type: str) -> Awaitable[JsonDict]: ...

    def get_table_item(self, handle: str, request: Mapping[str, str]) -> Awaitable[Any]: ...


class TransactionSigner(Protocol):
    """
    Wallet-side port: sign a payload as `sender` and submit it.

    Returns a mapping with at least {"hash": "..."}.
    Raises on user rejection or malformed payloads.
    """

    def sign_and_submit(self, sender: str, payload: Mapping[str, Any]) -> Awaitable[Mapping[str, Any]]: ...


class TransactionWaiter(Protocol):
    """
    Wait until a submitted transaction is committed.

    Returns the committed transaction JSON ({"success": bool, "vm_status": str, ...}).
    Raises ConfirmationError if it is not committed within `timeout` seconds.
    """

    def wait_for_transaction(self, tx_hash: str, *, timeout: float) -> Awaitable[JsonDict]: ...
