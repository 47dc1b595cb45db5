# src/ledger_todo/core/models.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .errors import LedgerTodoError


@dataclass(slots=True, frozen=True)
class Task:
    task_id: str
    address: str
    content: str
    completed: bool = False

    @property
    def number(self) -> int:
        return int(self.task_id)


@dataclass(slots=True, frozen=True)
class TaskList:
    """On-chain list header: how many tasks were ever created and where they live."""

    task_counter: int
    handle: str


# ---- intents (emitted by the UI) ----


@dataclass(slots=True, frozen=True)
class CreateList:
    pass


@dataclass(slots=True, frozen=True)
class CreateTask:
    content: str


@dataclass(slots=True, frozen=True)
class CompleteTask:
    task_id: str


Intent = CreateList | CreateTask | CompleteTask


def describe_intent(intent: Intent) -> str:
    if isinstance(intent, CreateTask):
        return f"create_task({intent.content!r})"
    if isinstance(intent, CompleteTask):
        return f"complete_task({intent.task_id})"
    return "create_list()"


@dataclass(slots=True, frozen=True)
class TransactionResult:
    intent: Intent
    tx_hash: str
    version: str | None = None
    vm_status: str | None = None


# ---- results handed to the UI ----


@dataclass(slots=True, frozen=True)
class IntentOutcome:
    """Discriminated result of a submitted intent: either `result` or `error` is set."""

    intent: Intent
    result: TransactionResult | None = None
    error: LedgerTodoError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(slots=True, frozen=True)
class SyncResult:
    """Discriminated result of a refresh. `stale` means it was superseded by an account change."""

    account: str | None
    tasks: tuple[Task, ...] = ()
    error: LedgerTodoError | None = None
    stale: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(slots=True, frozen=True)
class ViewState:
    account: str | None
    has_list: bool
    tasks: tuple[Task, ...]
    busy: bool
    phase: str
    last_error: LedgerTodoError | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "account": self.account,
            "hasList": self.has_list,
            "tasks": [
                {
                    "task_id": t.task_id,
                    "address": t.address,
                    "content": t.content,
                    "completed": t.completed,
                }
                for t in self.tasks
            ],
            "busy": self.busy,
        }
