# src/ledger_todo/ledger/offline.py

from __future__ import annotations

import asyncio
import hashlib
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from ..config import ModuleNames
from ..core.errors import (
    ConfirmationError,
    ResourceNotFoundError,
    SubmissionError,
    TableItemNotFoundError,
)

logger = logging.getLogger(__name__)

# Abort codes of the todolist module.
E_NOT_INITIALIZED = 1
ETASK_DOESNT_EXIST = 2
ETASK_IS_COMPLETED = 3


@dataclass(slots=True)
class _ListState:
    handle: str
    task_counter: int = 0
    tasks: dict[int, dict[str, Any]] = field(default_factory=dict)


class OfflineLedger:
    """
    In-process ledger used when no node/wallet is configured (demos, tests).

    Implements all three ports (LedgerReader, TransactionSigner, TransactionWaiter)
    and returns JSON shaped like the fullnode REST API.

    Behavior:
    - sign_and_submit validates the payload, then executes the entry function
      atomically: an abort leaves state untouched and is reported as success=false
    - wait_for_transaction returns the committed transaction after
      `confirmation_delay` seconds; if that exceeds the timeout it raises
      ConfirmationError even though the transaction was committed
    """

    def __init__(self, modules: ModuleNames, *, confirmation_delay: float = 0.0) -> None:
        self.modules = modules
        self.confirmation_delay = float(confirmation_delay)
        self._lists: dict[str, _ListState] = {}
        self._handles: dict[str, str] = {}  # handle -> owner address
        self._transactions: dict[str, dict[str, Any]] = {}
        self._version = 0

    # ---- LedgerReader ----

    async def get_resource(self, address: str, resource_type: str) -> dict[str, Any]:
        state = self._lists.get(address)
        if state is None or resource_type != self.modules.list_resource_type:
            raise ResourceNotFoundError(f"{resource_type} not found at {address}")
        return {
            "type": resource_type,
            "data": {
                "task_counter": str(state.task_counter),
                "tasks": {"handle": state.handle},
            },
        }

    async def get_table_item(self, handle: str, request: Mapping[str, str]) -> Any:
        owner = self._handles.get(handle)
        state = self._lists.get(owner) if owner is not None else None
        try:
            key = int(request.get("key", ""))
        except ValueError:
            key = -1
        if state is None or key not in state.tasks:
            raise TableItemNotFoundError(f"key {request.get('key')} not found in {handle}")
        return dict(state.tasks[key])

    # ---- TransactionSigner ----

    async def sign_and_submit(self, sender: str, payload: Mapping[str, Any]) -> dict[str, Any]:
        function, arguments = self._validate(payload)

        self._version += 1
        version = self._version
        tx_hash = "0x" + hashlib.sha256(f"{sender}:{version}:{function}".encode()).hexdigest()

        abort_code = self._execute(sender, function, arguments)
        if abort_code is None:
            vm_status = "Executed successfully"
        else:
            module = function.rsplit("::", 1)[0]
            vm_status = f"Move abort in {module}: 0x{abort_code:x}"

        self._transactions[tx_hash] = {
            "type": "user_transaction",
            "hash": tx_hash,
            "version": str(version),
            "sender": sender,
            "success": abort_code is None,
            "vm_status": vm_status,
            "payload": dict(payload),
        }
        logger.debug("offline tx %s %s -> %s", tx_hash[:10], function, vm_status)
        return {"hash": tx_hash}

    def _validate(self, payload: Mapping[str, Any]) -> tuple[str, list[Any]]:
        if payload.get("type") != "entry_function_payload":
            raise SubmissionError(f"Unsupported payload type: {payload.get('type')!r}")
        function = payload.get("function")
        arguments = payload.get("arguments")
        if not isinstance(arguments, list):
            raise SubmissionError("Payload arguments must be a list")

        arity = {
            self.modules.create_list_function: 0,
            self.modules.create_task_function: 1,
            self.modules.complete_task_function: 1,
        }
        if function not in arity:
            raise SubmissionError(f"Unknown entry function: {function!r}")
        if len(arguments) != arity[function]:
            raise SubmissionError(f"{function} expects {arity[function]} argument(s)")
        return function, arguments

    def _execute(self, sender: str, function: str, arguments: list[Any]) -> int | None:
        """Run one entry function. Returns an abort code or None on success."""
        state = self._lists.get(sender)

        if function == self.modules.create_list_function:
            if state is not None:
                # move_to on an existing resource (RESOURCE_ALREADY_EXISTS)
                return 0x80001
            handle = "0x" + hashlib.sha256(f"tasks:{sender}".encode()).hexdigest()
            self._lists[sender] = _ListState(handle=handle)
            self._handles[handle] = sender
            return None

        if state is None:
            return E_NOT_INITIALIZED

        if function == self.modules.create_task_function:
            content = arguments[0]
            if not isinstance(content, str):
                return 0x10001
            state.task_counter += 1
            state.tasks[state.task_counter] = {
                "address": sender,
                "completed": False,
                "content": content,
                "task_id": str(state.task_counter),
            }
            return None

        try:
            task_id = int(arguments[0])
        except (TypeError, ValueError):
            return ETASK_DOESNT_EXIST
        task = state.tasks.get(task_id)
        if task is None:
            return ETASK_DOESNT_EXIST
        if task["completed"]:
            return ETASK_IS_COMPLETED
        task["completed"] = True
        return None

    # ---- TransactionWaiter ----

    async def wait_for_transaction(self, tx_hash: str, *, timeout: float) -> dict[str, Any]:
        tx = self._transactions.get(tx_hash)
        if tx is None or self.confirmation_delay > timeout:
            if timeout > 0:
                await asyncio.sleep(timeout)
            raise ConfirmationError(tx_hash)
        if self.confirmation_delay > 0:
            await asyncio.sleep(self.confirmation_delay)
        return dict(tx)
