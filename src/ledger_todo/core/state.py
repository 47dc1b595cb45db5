# src/ledger_todo/core/state.py

"""
Sync state machine as a pure reducer.

    IDLE --AccountChanged--> SYNCING --RefreshFinished/Failed--> IDLE
    IDLE --IntentStarted---> SUBMITTING_TX --IntentFinished/Failed--> IDLE

The controller (effectful shell) dispatches events and performs I/O; this module
only decides the next state, so every transition is unit-testable without I/O.

Events carry the epoch they belong to. Events from an older epoch (an account
that is no longer active) leave the state unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum

from .errors import LedgerTodoError
from .models import Intent


class SyncPhase(StrEnum):
    IDLE = "idle"
    SYNCING = "syncing"
    SUBMITTING_TX = "submitting_tx"


@dataclass(slots=True, frozen=True)
class SyncState:
    phase: SyncPhase = SyncPhase.IDLE
    account: str | None = None
    epoch: int = 0
    pending_intent: Intent | None = None
    last_error: LedgerTodoError | None = None

    @property
    def busy(self) -> bool:
        return self.phase == SyncPhase.SUBMITTING_TX


# ---- events ----


@dataclass(slots=True, frozen=True)
class AccountChanged:
    account: str | None
    epoch: int


@dataclass(slots=True, frozen=True)
class RefreshStarted:
    epoch: int


@dataclass(slots=True, frozen=True)
class RefreshFinished:
    epoch: int


@dataclass(slots=True, frozen=True)
class RefreshFailed:
    epoch: int
    error: LedgerTodoError


@dataclass(slots=True, frozen=True)
class IntentStarted:
    intent: Intent


@dataclass(slots=True, frozen=True)
class IntentFinished:
    epoch: int


@dataclass(slots=True, frozen=True)
class IntentFailed:
    epoch: int
    error: LedgerTodoError


Event = (
    AccountChanged
    | RefreshStarted
    | RefreshFinished
    | RefreshFailed
    | IntentStarted
    | IntentFinished
    | IntentFailed
)


def can_submit(state: SyncState) -> bool:
    """
    Intents are accepted only from IDLE with a connected account.

    Only one transaction at a time; intents arriving while a transaction is in
    flight or a sync is running are rejected, not queued.
    """
    return state.phase == SyncPhase.IDLE and state.account is not None


def reduce(state: SyncState, event: Event) -> SyncState:
    if isinstance(event, AccountChanged):
        # A switch abandons whatever was in flight for the previous account.
        return SyncState(
            phase=SyncPhase.SYNCING if event.account is not None else SyncPhase.IDLE,
            account=event.account,
            epoch=event.epoch,
        )

    if isinstance(event, RefreshStarted):
        if event.epoch != state.epoch or state.phase == SyncPhase.SUBMITTING_TX:
            return state
        return replace(state, phase=SyncPhase.SYNCING)

    if isinstance(event, RefreshFinished):
        if event.epoch != state.epoch or state.phase != SyncPhase.SYNCING:
            return state
        return replace(state, phase=SyncPhase.IDLE, last_error=None)

    if isinstance(event, RefreshFailed):
        if event.epoch != state.epoch or state.phase != SyncPhase.SYNCING:
            return state
        return replace(state, phase=SyncPhase.IDLE, last_error=event.error)

    if isinstance(event, IntentStarted):
        if not can_submit(state):
            return state
        return replace(state, phase=SyncPhase.SUBMITTING_TX, pending_intent=event.intent)

    if isinstance(event, IntentFinished):
        if event.epoch != state.epoch or state.phase != SyncPhase.SUBMITTING_TX:
            return state
        return replace(state, phase=SyncPhase.IDLE, pending_intent=None, last_error=None)

    if isinstance(event, IntentFailed):
        if event.epoch != state.epoch or state.phase != SyncPhase.SUBMITTING_TX:
            return state
        return replace(state, phase=SyncPhase.IDLE, pending_intent=None, last_error=event.error)

    return state
