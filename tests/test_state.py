# tests/test_state.py

from __future__ import annotations

from ledger_todo.core.errors import SubmissionError
from ledger_todo.core.models import CreateList, CreateTask
from ledger_todo.core.state import (
    AccountChanged,
    IntentFailed,
    IntentFinished,
    IntentStarted,
    RefreshFailed,
    RefreshFinished,
    RefreshStarted,
    SyncPhase,
    SyncState,
    can_submit,
    reduce,
)


def test_account_change_starts_sync_and_finishes_idle() -> None:
    s = reduce(SyncState(), AccountChanged(account="0xa", epoch=1))
    assert s.phase == SyncPhase.SYNCING
    assert s.account == "0xa"
    assert not can_submit(s)

    s = reduce(s, RefreshFinished(epoch=1))
    assert s.phase == SyncPhase.IDLE
    assert can_submit(s)


def test_disconnect_goes_idle_without_account() -> None:
    s = reduce(SyncState(account="0xa", epoch=1), AccountChanged(account=None, epoch=2))
    assert s.phase == SyncPhase.IDLE
    assert s.account is None
    assert not can_submit(s)


def test_stale_refresh_events_are_ignored() -> None:
    s = reduce(SyncState(), AccountChanged(account="0xa", epoch=1))
    s = reduce(s, AccountChanged(account="0xb", epoch=2))

    after = reduce(s, RefreshFinished(epoch=1))
    assert after == s

    err = SubmissionError("x")
    assert reduce(s, RefreshFailed(epoch=1, error=err)) == s


def test_refresh_failure_records_error() -> None:
    s = reduce(SyncState(), AccountChanged(account="0xa", epoch=1))
    err = SubmissionError("boom")
    s = reduce(s, RefreshFailed(epoch=1, error=err))
    assert s.phase == SyncPhase.IDLE
    assert s.last_error is err


def test_intent_cycle_and_busy_gate() -> None:
    s = SyncState(phase=SyncPhase.IDLE, account="0xa", epoch=3)
    s = reduce(s, IntentStarted(intent=CreateList()))
    assert s.phase == SyncPhase.SUBMITTING_TX
    assert s.busy
    assert s.pending_intent == CreateList()
    assert not can_submit(s)

    # a second intent does not replace the pending one
    assert reduce(s, IntentStarted(intent=CreateTask("x"))) == s
    # nor can a refresh start while a transaction is in flight
    assert reduce(s, RefreshStarted(epoch=3)) == s

    done = reduce(s, IntentFinished(epoch=3))
    assert done.phase == SyncPhase.IDLE
    assert done.pending_intent is None

    err = SubmissionError("declined")
    failed = reduce(s, IntentFailed(epoch=3, error=err))
    assert failed.phase == SyncPhase.IDLE
    assert failed.last_error is err


def test_account_change_abandons_pending_intent() -> None:
    s = SyncState(phase=SyncPhase.SUBMITTING_TX, account="0xa", epoch=1, pending_intent=CreateList())
    s = reduce(s, AccountChanged(account="0xb", epoch=2))
    assert s.pending_intent is None
    assert s.phase == SyncPhase.SYNCING

    # the old transaction resolving later does not affect the new session
    assert reduce(s, IntentFinished(epoch=1)) == s
