# tests/test_gateway.py

from __future__ import annotations

import asyncio

import pytest

from ledger_todo.core.errors import (
    BusyError,
    ConfirmationError,
    SubmissionError,
    TransactionFailedError,
)
from ledger_todo.core.gateway import TransactionGateway
from ledger_todo.core.models import CompleteTask, CreateList, CreateTask

from .fakes import ALICE, GatedWaiter, HangingWaiter, NeverConfirmingWaiter, RejectingSigner


def test_build_payload_matches_entry_functions(ledger, modules) -> None:
    gw = TransactionGateway(ledger, ledger, modules)

    assert gw.build_payload(CreateList()) == {
        "type": "entry_function_payload",
        "function": "0xcafe::todolist::create_list",
        "type_arguments": [],
        "arguments": [],
    }
    assert gw.build_payload(CreateTask("buy milk"))["arguments"] == ["buy milk"]
    complete = gw.build_payload(CompleteTask("3"))
    assert complete["function"] == "0xcafe::todolist::complete_task"
    assert complete["arguments"] == ["3"]


@pytest.mark.asyncio
async def test_submit_success_returns_hash_and_mutates_ledger(ledger, modules) -> None:
    gw = TransactionGateway(ledger, ledger, modules, confirmation_timeout=1.0)

    result = await gw.submit(CreateList(), sender=ALICE)

    assert result.tx_hash.startswith("0x")
    assert result.intent == CreateList()
    assert result.version == "1"
    res = await ledger.get_resource(ALICE, modules.list_resource_type)
    assert res["data"]["task_counter"] == "0"
    assert gw.in_flight is None


@pytest.mark.asyncio
async def test_signer_rejection_is_submission_error(ledger, modules) -> None:
    signer = RejectingSigner()
    gw = TransactionGateway(signer, ledger, modules)

    with pytest.raises(SubmissionError, match="User rejected"):
        await gw.submit(CreateTask("x"), sender=ALICE)
    assert len(signer.payloads) == 1
    assert gw.in_flight is None


@pytest.mark.asyncio
async def test_malformed_signer_response_is_submission_error(ledger, modules) -> None:
    class NoHashSigner:
        async def sign_and_submit(self, sender, payload):
            return {"status": "ok"}

    gw = TransactionGateway(NoHashSigner(), ledger, modules)
    with pytest.raises(SubmissionError, match="no transaction hash"):
        await gw.submit(CreateList(), sender=ALICE)


@pytest.mark.asyncio
async def test_vm_abort_is_transaction_failed(ledger, modules) -> None:
    gw = TransactionGateway(ledger, ledger, modules)

    # no list yet -> create_task aborts with E_NOT_INITIALIZED
    with pytest.raises(TransactionFailedError) as info:
        await gw.submit(CreateTask("x"), sender=ALICE)
    assert "0x1" in info.value.vm_status
    assert isinstance(info.value, SubmissionError)


@pytest.mark.asyncio
async def test_unconfirmed_is_confirmation_error(ledger, modules) -> None:
    gw = TransactionGateway(ledger, NeverConfirmingWaiter(), modules, confirmation_timeout=0.05)

    with pytest.raises(ConfirmationError) as info:
        await gw.submit(CreateList(), sender=ALICE)
    assert info.value.tx_hash.startswith("0x")


@pytest.mark.asyncio
async def test_gateway_bounds_waiters_that_ignore_timeout(ledger, modules, monkeypatch) -> None:
    gw = TransactionGateway(ledger, HangingWaiter(), modules, confirmation_timeout=0.05)
    real_wait_for = asyncio.wait_for

    async def quick_wait_for(aw, timeout):
        return await real_wait_for(aw, timeout=0.05)

    monkeypatch.setattr("ledger_todo.core.gateway.asyncio.wait_for", quick_wait_for)

    with pytest.raises(ConfirmationError):
        await gw.submit(CreateList(), sender=ALICE)


@pytest.mark.asyncio
async def test_second_submit_while_in_flight_is_busy(ledger, modules) -> None:
    waiter = GatedWaiter(ledger)
    gw = TransactionGateway(ledger, waiter, modules)

    first = asyncio.create_task(gw.submit(CreateList(), sender=ALICE))
    await waiter.entered.wait()
    assert gw.in_flight == CreateList()

    with pytest.raises(BusyError):
        await gw.submit(CreateTask("y"), sender=ALICE)

    waiter.release()
    await first
    assert gw.in_flight is None
