# src/ledger_todo/ledger/read_client.py

from __future__ import annotations

import logging

from ..config import ModuleNames
from ..core.errors import (
    DecodeError,
    ListNotFoundError,
    ResourceNotFoundError,
    TableItemNotFoundError,
    TaskLookupError,
)
from ..core.models import Task, TaskList
from ..core.ports import LedgerReader
from .decode import decode_task, decode_task_list

logger = logging.getLogger(__name__)


class LedgerReadClient:
    """
    Typed queries for the todo list on top of a raw LedgerReader.

    Stateless; safe to call concurrently.
    """

    def __init__(self, reader: LedgerReader, modules: ModuleNames) -> None:
        self._reader = reader
        self._modules = modules

    async def get_list(self, address: str) -> TaskList:
        try:
            raw = await self._reader.get_resource(address, self._modules.list_resource_type)
        except ResourceNotFoundError as e:
            raise ListNotFoundError(address) from e
        task_list = decode_task_list(raw)
        logger.debug(
            "get_list address=%s counter=%s handle=%s",
            address,
            task_list.task_counter,
            task_list.handle,
        )
        return task_list

    async def get_task(self, handle: str, task_id: int) -> Task:
        request = {
            "key_type": "u64",
            "value_type": self._modules.task_value_type,
            "key": str(task_id),
        }
        try:
            raw = await self._reader.get_table_item(handle, request)
        except TableItemNotFoundError as e:
            raise TaskLookupError(handle, task_id) from e

        task = decode_task(raw)
        if task.number != task_id:
            raise DecodeError(f"table {handle}: key {task_id} holds task_id {task.task_id}")
        return task
