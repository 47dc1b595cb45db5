# src/ledger_todo/core/controller.py

"""
SyncController: the effectful shell around the pure sync reducer.

- change_account(): activate the repository for the new account and run a full refresh
- refresh():        re-read the active account's list from the ledger
- submit(intent):   gate (one tx at a time) -> gateway -> apply the confirmed change

Key invariants:
- the projection only changes after confirmation (AFTER_CONFIRMATION), or changes
  speculatively and is reverted on any failure (BEFORE_CONFIRMATION),
- results that belong to an account that is no longer active are never applied,
- errors are returned as discriminated results, never swallowed.
"""

from __future__ import annotations

import logging

from ..config import MergeMode
from .errors import BusyError, ConfirmationError, LedgerTodoError, NoAccountError, SubmissionError
from .gateway import TransactionGateway
from .models import (
    CompleteTask,
    CreateList,
    CreateTask,
    Intent,
    IntentOutcome,
    SyncResult,
    Task,
    ViewState,
    describe_intent,
)
from .repository import TaskRepository
from .state import (
    AccountChanged,
    Event,
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

logger = logging.getLogger(__name__)


class SyncController:
    def __init__(
        self,
        repository: TaskRepository,
        gateway: TransactionGateway,
        *,
        merge_mode: MergeMode = MergeMode.AFTER_CONFIRMATION,
        refresh_after_unconfirmed: bool = True,
    ) -> None:
        self._repository = repository
        self._gateway = gateway
        self._merge_mode = merge_mode
        self._refresh_after_unconfirmed = refresh_after_unconfirmed
        self._state = SyncState(epoch=repository.epoch)

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def repository(self) -> TaskRepository:
        return self._repository

    def _dispatch(self, event: Event) -> SyncState:
        before = self._state
        self._state = reduce(before, event)
        if self._state.phase != before.phase:
            logger.debug("Sync phase %s -> %s (%s)", before.phase, self._state.phase, type(event).__name__)
        return self._state

    def view(self) -> ViewState:
        return ViewState(
            account=self._state.account,
            has_list=self._repository.has_list,
            tasks=self._repository.tasks,
            busy=self._state.busy,
            phase=str(self._state.phase),
            last_error=self._state.last_error,
        )

    # ---- sync ----

    async def change_account(self, address: str | None) -> SyncResult:
        address = (address or "").strip() or None
        epoch = self._repository.activate(address)
        self._dispatch(AccountChanged(account=address, epoch=epoch))
        logger.info("Account changed -> %s", address or "(disconnected)")
        if address is None:
            return SyncResult(account=None)
        return await self._refresh(address, epoch)

    async def refresh(self) -> SyncResult:
        account = self._state.account
        if account is None:
            return SyncResult(account=None)
        # One refresh at a time; refreshes within an epoch are not ordered.
        if self._state.phase != SyncPhase.IDLE:
            logger.info("Refresh rejected: busy (%s)", self._state.phase)
            return SyncResult(account=account, error=BusyError())

        epoch = self._state.epoch
        self._dispatch(RefreshStarted(epoch=epoch))
        return await self._refresh(account, epoch)

    async def _refresh(self, address: str, epoch: int) -> SyncResult:
        try:
            tasks = await self._repository.refresh(address)
        except LedgerTodoError as e:
            stale = epoch != self._state.epoch
            self._dispatch(RefreshFailed(epoch=epoch, error=e))
            logger.info("Refresh failed for %s: %s", address, e)
            return SyncResult(account=address, error=e, stale=stale)

        if tasks is None or epoch != self._state.epoch:
            return SyncResult(account=address, stale=True)

        self._dispatch(RefreshFinished(epoch=epoch))
        return SyncResult(account=address, tasks=tuple(tasks))

    # ---- intents ----

    async def submit(self, intent: Intent) -> IntentOutcome:
        state = self._state
        account = state.account
        if account is None:
            return IntentOutcome(intent=intent, error=NoAccountError())
        if not can_submit(state):
            logger.info("Rejected %s: busy (%s)", describe_intent(intent), state.phase)
            return IntentOutcome(intent=intent, error=BusyError())

        try:
            intent = _normalize_intent(intent)
        except SubmissionError as e:
            return IntentOutcome(intent=intent, error=e)

        # Enter SUBMITTING_TX before the first await so a second intent is rejected synchronously.
        epoch = state.epoch
        self._dispatch(IntentStarted(intent=intent))

        snapshot = self._repository.snapshot()
        predicted_id = self._repository.next_id()
        speculative = self._merge_mode == MergeMode.BEFORE_CONFIRMATION
        if speculative:
            self._apply(intent, account, predicted_id)

        try:
            result = await self._gateway.submit(intent, sender=account)
        except LedgerTodoError as e:
            if speculative:
                self._repository.revert(snapshot)
            self._dispatch(IntentFailed(epoch=epoch, error=e))
            logger.info("%s failed: %s", describe_intent(intent), e)

            if (
                isinstance(e, ConfirmationError)
                and self._refresh_after_unconfirmed
                and epoch == self._state.epoch
            ):
                # Unknown outcome: only a full re-read tells us what the ledger did.
                await self.refresh()
            return IntentOutcome(intent=intent, error=e)
        except BaseException:
            if speculative:
                self._repository.revert(snapshot)
            self._dispatch(IntentFailed(epoch=epoch, error=SubmissionError("interrupted")))
            raise

        if epoch != self._state.epoch:
            logger.info("Account changed during %s; result not applied", describe_intent(intent))
            return IntentOutcome(intent=intent, result=result)

        if not speculative:
            self._apply(intent, account, predicted_id)
        self._dispatch(IntentFinished(epoch=epoch))
        return IntentOutcome(intent=intent, result=result)

    def _apply(self, intent: Intent, account: str, predicted_id: int) -> None:
        if isinstance(intent, CreateList):
            self._repository.mark_has_list()
        elif isinstance(intent, CreateTask):
            task = Task(task_id=str(predicted_id), address=account, content=intent.content, completed=False)
            self._repository.merge_optimistic(task)
        elif isinstance(intent, CompleteTask):
            self._repository.mark_completed_optimistic(intent.task_id)


def _normalize_intent(intent: Intent) -> Intent:
    """Validate an intent before signing; CompleteTask ids come back in canonical form."""
    if isinstance(intent, CreateTask):
        if not isinstance(intent.content, str):
            raise SubmissionError("Task content must be a string")
        return intent
    if isinstance(intent, CompleteTask):
        raw = str(intent.task_id).strip()
        # ASCII only: str.isdigit() also accepts digits int() refuses (e.g. superscripts)
        if not (raw.isascii() and raw.isdigit()) or int(raw) < 1:
            raise SubmissionError(f"Invalid task id: {intent.task_id!r}")
        return CompleteTask(task_id=str(int(raw)))
    if isinstance(intent, CreateList):
        return intent
    raise SubmissionError(f"Unsupported intent: {intent!r}")
