# src/ledger_todo/core/repository.py

from __future__ import annotations

import asyncio
import logging

from ..ledger.read_client import LedgerReadClient
from . import projection as proj
from .errors import ListNotFoundError
from .models import Task
from .projection import Projection

logger = logging.getLogger(__name__)


class TaskRepository:
    """
    Owns the canonical in-memory projection of the active account's list.

    - refresh() rebuilds it from the ledger (full re-read, idempotent)
    - merge_optimistic()/mark_completed_optimistic() apply locally-known changes
    - snapshot()/revert() support speculative merges

    Staleness: activate() bumps an epoch. A refresh that started under an older
    epoch finishes without touching the projection.
    """

    def __init__(self, read_client: LedgerReadClient, *, max_concurrent_reads: int = 8) -> None:
        self._read_client = read_client
        self._max_concurrent_reads = max(1, int(max_concurrent_reads))
        self._projection = Projection()

    # ---- state accessors ----

    @property
    def projection(self) -> Projection:
        return self._projection

    @property
    def address(self) -> str | None:
        return self._projection.address

    @property
    def epoch(self) -> int:
        return self._projection.epoch

    @property
    def has_list(self) -> bool:
        return self._projection.has_list

    @property
    def tasks(self) -> tuple[Task, ...]:
        return self._projection.tasks

    # ---- account switching ----

    def activate(self, address: str | None) -> int:
        """Switch the active account. Clears the projection and returns the new epoch."""
        epoch = self._projection.epoch + 1
        self._projection = proj.empty(address, epoch)
        logger.debug("Repository activated address=%s epoch=%s", address, epoch)
        return epoch

    def _is_current(self, address: str, epoch: int) -> bool:
        return self._projection.epoch == epoch and self._projection.address == address

    # ---- full sync ----

    async def refresh(self, address: str) -> list[Task] | None:
        """
        Rebuild the projection from the ledger.

        Returns the ordered tasks, [] when the account has no list, or None when
        the result was discarded because the active account changed meanwhile.
        Read errors propagate and leave the projection untouched.
        """
        if self._projection.address != address:
            self.activate(address)
        epoch = self._projection.epoch

        try:
            task_list = await self._read_client.get_list(address)
        except ListNotFoundError:
            if not self._is_current(address, epoch):
                logger.debug("Discarding stale refresh address=%s epoch=%s", address, epoch)
                return None
            self._projection = proj.empty(address, epoch)
            logger.info("No todo list for account %s", address)
            return []

        tasks = await self._fetch_tasks(task_list.handle, task_list.task_counter)

        if not self._is_current(address, epoch):
            logger.debug("Discarding stale refresh address=%s epoch=%s", address, epoch)
            return None

        self._projection = proj.from_ledger(address, epoch, tasks)
        logger.info("Synced account %s: %d task(s)", address, len(self._projection.tasks))
        return list(self._projection.tasks)

    async def _fetch_tasks(self, handle: str, counter: int) -> list[Task]:
        """
        Fetch ids 1..counter concurrently (bounded).

        gather() returns results in argument order, so the list is in id order no
        matter which read completes first; any failure cancels the rest.
        """
        if counter <= 0:
            return []

        sem = asyncio.Semaphore(self._max_concurrent_reads)

        async def fetch(task_id: int) -> Task:
            async with sem:
                return await self._read_client.get_task(handle, task_id)

        jobs = [asyncio.ensure_future(fetch(i)) for i in range(1, counter + 1)]
        try:
            return list(await asyncio.gather(*jobs))
        except BaseException:
            for job in jobs:
                job.cancel()
            raise

    # ---- incremental updates ----

    def next_id(self) -> int:
        """
        Predicted id of the next created task.

        Equals the ledger-assigned id only if nobody else writes to this list
        concurrently; the ledger remains authoritative.
        """
        return proj.next_id(self._projection)

    def mark_has_list(self) -> None:
        self._projection = proj.with_list(self._projection)

    def merge_optimistic(self, task: Task) -> None:
        self._projection = proj.with_task(self._projection, task)

    def mark_completed_optimistic(self, task_id: str) -> None:
        self._projection = proj.with_completed(self._projection, task_id)

    def snapshot(self) -> Projection:
        return self._projection

    def revert(self, snapshot: Projection) -> bool:
        """Reinstall a snapshot. Snapshots of another account/epoch are ignored."""
        if snapshot.epoch != self._projection.epoch or snapshot.address != self._projection.address:
            logger.debug("Ignoring revert to a stale snapshot (epoch=%s)", snapshot.epoch)
            return False
        self._projection = snapshot
        return True
