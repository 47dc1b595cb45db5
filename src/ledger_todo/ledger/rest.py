# src/ledger_todo/ledger/rest.py

"""
REST transport for an Aptos-compatible fullnode.

Implements the LedgerReader and TransactionWaiter ports on top of httpx.AsyncClient:
- GET  {node}/accounts/{address}/resource/{type}
- POST {node}/tables/{handle}/item
- GET  {node}/transactions/by_hash/{hash}   (polled until no longer pending)

Error mapping follows the node's `error_code` field on 404 responses so that
"the account has no list" is never confused with a network failure.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

import httpx

from ..core.errors import (
    ConfirmationError,
    LedgerTransportError,
    ResourceNotFoundError,
    SubmissionError,
    TableItemNotFoundError,
)

logger = logging.getLogger(__name__)

_RESOURCE_MISSING = {"resource_not_found", "account_not_found"}
_TABLE_ITEM_MISSING = {"table_item_not_found"}
_TX_MISSING = {"transaction_not_found"}


def _error_code(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return ""
    if isinstance(body, dict):
        return str(body.get("error_code") or "")
    return ""


def _json_or_raise(resp: httpx.Response, what: str) -> Any:
    if resp.status_code >= 400:
        raise LedgerTransportError(
            f"{what}: HTTP {resp.status_code} ({_error_code(resp) or resp.reason_phrase})"
        )
    try:
        return resp.json()
    except ValueError as e:
        raise LedgerTransportError(f"{what}: response is not JSON") from e


class AptosRestClient:
    """
    Thin async client for the fullnode REST API.

    The httpx client is created lazily unless one is injected (tests pass a
    client built on httpx.MockTransport).
    """

    def __init__(
        self,
        node_url: str,
        *,
        http_timeout: float = 10.0,
        poll_interval: float = 0.5,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._node_url = node_url.rstrip("/")
        self._http_timeout = float(http_timeout)
        self._poll_interval = max(0.01, float(poll_interval))
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._node_url,
                timeout=httpx.Timeout(self._http_timeout, connect=min(5.0, self._http_timeout)),
                headers={"Accept": "application/json"},
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> AptosRestClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def _request(self, method: str, path: str, *, json: Any = None) -> httpx.Response:
        try:
            return await self._get_client().request(method, path, json=json)
        except httpx.HTTPError as e:
            raise LedgerTransportError(f"{method} {path}: {e.__class__.__name__}: {e}") from e

    # ---- LedgerReader ----

    async def get_resource(self, address: str, resource_type: str) -> dict[str, Any]:
        path = f"/accounts/{quote(address, safe='')}/resource/{quote(resource_type, safe=':<>,')}"
        resp = await self._request("GET", path)
        if resp.status_code == 404 and _error_code(resp) in _RESOURCE_MISSING:
            raise ResourceNotFoundError(f"{resource_type} not found at {address}")
        body = _json_or_raise(resp, f"get_resource {address}")
        if not isinstance(body, dict):
            raise LedgerTransportError(f"get_resource {address}: expected a JSON object")
        return body

    async def get_table_item(self, handle: str, request: Mapping[str, str]) -> Any:
        path = f"/tables/{quote(handle, safe='')}/item"
        resp = await self._request("POST", path, json=dict(request))
        if resp.status_code == 404 and _error_code(resp) in _TABLE_ITEM_MISSING:
            raise TableItemNotFoundError(f"key {request.get('key')} not found in {handle}")
        return _json_or_raise(resp, f"get_table_item {handle}")

    # ---- TransactionWaiter ----

    async def get_transaction(self, tx_hash: str) -> dict[str, Any] | None:
        """Return the transaction JSON, or None if the node does not know it yet."""
        resp = await self._request("GET", f"/transactions/by_hash/{quote(tx_hash, safe='')}")
        if resp.status_code == 404 and _error_code(resp) in _TX_MISSING:
            return None
        body = _json_or_raise(resp, f"get_transaction {tx_hash}")
        if not isinstance(body, dict):
            raise LedgerTransportError(f"get_transaction {tx_hash}: expected a JSON object")
        return body

    async def wait_for_transaction(self, tx_hash: str, *, timeout: float) -> dict[str, Any]:
        """
        Poll until the transaction leaves the mempool.

        Transport errors while polling are not fatal: the transaction may still be
        committed, so we keep polling until the deadline.
        """
        deadline = time.monotonic() + max(0.0, float(timeout))
        last_error: Exception | None = None

        while True:
            try:
                tx = await self.get_transaction(tx_hash)
            except LedgerTransportError as e:
                last_error = e
                logger.info("wait_for_transaction: poll failed hash=%s (%s)", tx_hash, e)
                tx = None

            if tx is not None and tx.get("type") != "pending_transaction":
                return tx

            if time.monotonic() >= deadline:
                msg = f"Transaction {tx_hash} not confirmed within {timeout:.1f}s"
                if last_error is not None:
                    msg += f" (last error: {last_error})"
                raise ConfirmationError(tx_hash, msg)

            await asyncio.sleep(self._poll_interval)


class ReadOnlySigner:
    """
    Signer used when no wallet is attached to the REST backend.

    Every submission is rejected before inclusion, so the projection never changes.
    """

    async def sign_and_submit(self, sender: str, payload: Mapping[str, Any]) -> dict[str, Any]:
        raise SubmissionError(
            "No signing capability configured (REST backend is read-only). "
            "Use LEDGER_TODO_BACKEND=offline or attach a wallet signer."
        )
