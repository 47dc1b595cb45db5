# tests/test_read_client.py

from __future__ import annotations

import pytest

from ledger_todo.core.errors import (
    DecodeError,
    LedgerTransportError,
    ListNotFoundError,
    TaskLookupError,
)
from ledger_todo.ledger.read_client import LedgerReadClient

from .fakes import ALICE, HANDLE, FakeReader, task_json


@pytest.mark.asyncio
async def test_get_list_uses_configured_resource_type(modules) -> None:
    reader = FakeReader()
    reader.seed_list(ALICE, 2)
    client = LedgerReadClient(reader, modules)

    tl = await client.get_list(ALICE)

    assert tl.task_counter == 2
    assert tl.handle == HANDLE
    assert reader.resource_calls == [(ALICE, "0xcafe::todolist::TodoList")]


@pytest.mark.asyncio
async def test_get_list_missing_is_not_found(modules) -> None:
    client = LedgerReadClient(FakeReader(), modules)
    with pytest.raises(ListNotFoundError):
        await client.get_list(ALICE)


@pytest.mark.asyncio
async def test_get_task_builds_table_request(modules) -> None:
    reader = FakeReader()
    reader.seed_list(ALICE, 1)
    client = LedgerReadClient(reader, modules)

    task = await client.get_task(HANDLE, 1)

    assert task.task_id == "1"
    assert reader.item_calls == [
        (HANDLE, {"key_type": "u64", "value_type": "0xcafe::todolist::Task", "key": "1"})
    ]


@pytest.mark.asyncio
async def test_get_task_missing_is_lookup_error(modules) -> None:
    client = LedgerReadClient(FakeReader(), modules)
    with pytest.raises(LookupError) as info:
        await client.get_task(HANDLE, 5)
    assert isinstance(info.value, TaskLookupError)
    assert info.value.task_id == 5


@pytest.mark.asyncio
async def test_get_task_rejects_mismatched_id(modules) -> None:
    reader = FakeReader()
    reader.items[(HANDLE, "2")] = task_json(3)
    client = LedgerReadClient(reader, modules)
    with pytest.raises(DecodeError):
        await client.get_task(HANDLE, 2)


@pytest.mark.asyncio
async def test_transport_errors_are_not_lookup_errors(modules) -> None:
    reader = FakeReader()
    reader.seed_list(ALICE, 1)
    reader.fail_keys.add("1")
    client = LedgerReadClient(reader, modules)
    with pytest.raises(LedgerTransportError):
        await client.get_task(HANDLE, 1)
