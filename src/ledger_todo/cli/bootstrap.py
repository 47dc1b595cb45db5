# src/ledger_todo/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- picks the ledger backend (offline in-process ledger or REST node),
- wires LedgerReadClient -> TaskRepository, TransactionGateway -> SyncController,
- owns shutdown of network resources.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..config import Backend, Settings, get_settings
from ..core.controller import SyncController
from ..core.gateway import TransactionGateway
from ..core.ports import LedgerReader, TransactionSigner, TransactionWaiter
from ..core.repository import TaskRepository
from ..ledger.offline import OfflineLedger
from ..ledger.read_client import LedgerReadClient
from ..ledger.rest import AptosRestClient, ReadOnlySigner

logger = logging.getLogger(__name__)


@dataclass
class AppState:
    settings: Settings
    controller: SyncController
    rest_client: AptosRestClient | None = None

    async def aclose(self) -> None:
        if self.rest_client is not None:
            await self.rest_client.aclose()


def create_app(
    *,
    settings: Settings | None = None,
    reader: LedgerReader | None = None,
    signer: TransactionSigner | None = None,
    waiter: TransactionWaiter | None = None,
) -> AppState:
    """
    Build AppState from settings.

    Any port may be injected (tests, an external wallet); missing ones come from
    the configured backend. If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    rest_client: AptosRestClient | None = None
    if reader is None or signer is None or waiter is None:
        if settings.backend == Backend.REST:
            rest_client = AptosRestClient(
                settings.node_url,
                http_timeout=settings.http_timeout_seconds,
                poll_interval=settings.poll_interval_seconds,
            )
            reader = reader or rest_client
            waiter = waiter or rest_client
            signer = signer or ReadOnlySigner()
            logger.info("Using REST backend node=%s", settings.node_url)
        else:
            ledger = OfflineLedger(settings.modules)
            reader = reader or ledger
            waiter = waiter or ledger
            signer = signer or ledger
            logger.info("Using offline in-process ledger")

    repository = TaskRepository(
        LedgerReadClient(reader, settings.modules),
        max_concurrent_reads=settings.max_concurrent_reads,
    )
    gateway = TransactionGateway(
        signer,
        waiter,
        settings.modules,
        confirmation_timeout=settings.confirmation_timeout_seconds,
    )
    controller = SyncController(repository, gateway, merge_mode=settings.merge_mode)
    return AppState(settings=settings, controller=controller, rest_client=rest_client)
