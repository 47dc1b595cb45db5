# src/ledger_todo/core/gateway.py

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from ..config import ModuleNames
from .errors import (
    BusyError,
    ConfirmationError,
    LedgerTodoError,
    SubmissionError,
    TransactionFailedError,
)
from .models import CompleteTask, CreateList, CreateTask, Intent, TransactionResult, describe_intent
from .ports import TransactionSigner, TransactionWaiter

logger = logging.getLogger(__name__)


class TransactionGateway:
    """
    Turns a user intent into a confirmed ledger transaction.

    submit():
    - builds the entry-function payload,
    - delegates signing + submission to the wallet port,
    - waits for the transaction to be committed (bounded),
    - returns TransactionResult or raises SubmissionError / ConfirmationError.

    No retries. On any failure the ledger is unchanged (atomic transactions) except
    for ConfirmationError, where the outcome is unknown to the client.
    """

    def __init__(
        self,
        signer: TransactionSigner,
        waiter: TransactionWaiter,
        modules: ModuleNames,
        *,
        confirmation_timeout: float = 20.0,
    ) -> None:
        self._signer = signer
        self._waiter = waiter
        self._modules = modules
        self._confirmation_timeout = float(confirmation_timeout)
        self._in_flight: Intent | None = None

    @property
    def in_flight(self) -> Intent | None:
        return self._in_flight

    def build_payload(self, intent: Intent) -> dict[str, Any]:
        if isinstance(intent, CreateList):
            function, arguments = self._modules.create_list_function, []
        elif isinstance(intent, CreateTask):
            function, arguments = self._modules.create_task_function, [intent.content]
        elif isinstance(intent, CompleteTask):
            function, arguments = self._modules.complete_task_function, [str(intent.task_id)]
        else:
            raise SubmissionError(f"Unsupported intent: {intent!r}")

        return {
            "type": "entry_function_payload",
            "function": function,
            "type_arguments": [],
            "arguments": arguments,
        }

    async def submit(self, intent: Intent, *, sender: str) -> TransactionResult:
        if self._in_flight is not None:
            raise BusyError()

        self._in_flight = intent
        try:
            return await self._submit(intent, sender)
        finally:
            self._in_flight = None

    async def _submit(self, intent: Intent, sender: str) -> TransactionResult:
        label = describe_intent(intent)
        payload = self.build_payload(intent)

        try:
            response = await self._signer.sign_and_submit(sender, payload)
        except LedgerTodoError as e:
            if isinstance(e, SubmissionError):
                raise
            raise SubmissionError(str(e)) from e
        except Exception as e:
            # wallet adapters raise whatever they like (user rejection, bad payload...)
            raise SubmissionError(f"{label} rejected: {e}") from e

        tx_hash = _extract_hash(response)
        logger.info("Submitted %s sender=%s hash=%s", label, sender, tx_hash)

        try:
            tx = await asyncio.wait_for(
                self._waiter.wait_for_transaction(tx_hash, timeout=self._confirmation_timeout),
                # the waiter owns the primary deadline; this only guards a waiter that ignores it
                timeout=self._confirmation_timeout + 5.0,
            )
        except TimeoutError as e:
            raise ConfirmationError(tx_hash) from e

        if not tx.get("success", False):
            vm_status = str(tx.get("vm_status") or "unknown failure")
            logger.info("Transaction %s aborted: %s", tx_hash, vm_status)
            raise TransactionFailedError(tx_hash, vm_status)

        version = tx.get("version")
        logger.info("Confirmed %s hash=%s version=%s", label, tx_hash, version)
        return TransactionResult(
            intent=intent,
            tx_hash=tx_hash,
            version=str(version) if version is not None else None,
            vm_status=tx.get("vm_status"),
        )


def _extract_hash(response: Mapping[str, Any] | Any) -> str:
    tx_hash = response.get("hash") if isinstance(response, Mapping) else None
    if not isinstance(tx_hash, str) or not tx_hash:
        raise SubmissionError(f"Signer returned no transaction hash: {response!r}")
    return tx_hash
