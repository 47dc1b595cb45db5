# src/ledger_todo/cli/commands.py

from __future__ import annotations

import contextlib
import logging
from collections.abc import Awaitable, Callable

from ..core.errors import (
    BusyError,
    ConfirmationError,
    LedgerTodoError,
    NoAccountError,
    TaskLookupError,
    TransactionFailedError,
)
from ..core.models import CompleteTask, CreateList, CreateTask, Intent, IntentOutcome, Task, ViewState
from .bootstrap import AppState

CommandEmitter = Callable[[str], None]
CommandHandler = Callable[[AppState, list[str], CommandEmitter | None], Awaitable[str]]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(
        self,
        app: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        body = line[1:].lstrip()
        parts = body.split(maxsplit=1)
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        # Raw remainder: drop only the single separator after the command name.
        rest = body[len(parts[0]):]
        if rest[:1].isspace():
            rest = rest[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        # /add keeps its text verbatim (spaces included); others get split args
        args = [rest] if name in ("add", "a") else rest.split()
        return await handler(app, args, emit)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        lines.append("  /exit - Quit.")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- formatting ----


def short_address(address: str) -> str:
    if len(address) <= 12:
        return address
    return f"{address[:6]}...{address[-5:]}"


def explorer_link(explorer_url: str, address: str) -> str:
    return f"{explorer_url}/account/{address}/"


def format_task(task: Task, explorer_url: str) -> str:
    mark = "x" if task.completed else " "
    content = task.content if task.content else "(empty)"
    return (
        f"[{mark}] #{task.task_id} {content}  "
        f"({short_address(task.address)} {explorer_link(explorer_url, task.address)})"
    )


def format_view(view: ViewState, explorer_url: str) -> str:
    if view.account is None:
        return "No account connected. Use /account <address>."
    if not view.has_list:
        return f"Account {short_address(view.account)} has no list yet. Use /create-list."
    if not view.tasks:
        return "The list is empty. Use /add <text>."
    return "\n".join(format_task(t, explorer_url) for t in view.tasks)


def format_error(err: LedgerTodoError) -> str:
    if isinstance(err, BusyError):
        return "Busy: a sync or transaction is still in progress."
    if isinstance(err, NoAccountError):
        return "No account connected. Use /account <address>."
    if isinstance(err, ConfirmationError):
        return f"Not confirmed in time (hash {err.tx_hash}); the list was re-read from the ledger."
    if isinstance(err, TransactionFailedError):
        return f"Transaction failed on-chain: {err.vm_status}"
    if isinstance(err, TaskLookupError):
        return f"Ledger looks inconsistent ({err}). Try /refresh."
    return f"Error: {err}"


def _format_outcome(app: AppState, outcome: IntentOutcome, done: str) -> str:
    if outcome.error is not None:
        return format_error(outcome.error)
    tx = outcome.result.tx_hash if outcome.result is not None else "?"
    view = app.controller.view()
    return f"{done} (tx {short_address(tx)})\n{format_view(view, app.settings.explorer_url)}"


async def _submit(app: AppState, intent: Intent, emit: CommandEmitter | None) -> IntentOutcome:
    if emit:
        with contextlib.suppress(Exception):
            emit("Waiting for the transaction to be confirmed...")
    return await app.controller.submit(intent)


# ---- handlers ----


async def cmd_help(app: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    return registry.build_help()


async def cmd_status(app: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    s = app.settings
    view = app.controller.view()
    err = f"\n  Last error: {view.last_error}" if view.last_error is not None else ""
    return (
        "Status:\n"
        f"  Backend: {s.backend} ({s.node_url if s.backend == 'rest' else 'in-process'})\n"
        f"  Module: {s.module_address}::{s.module_name}\n"
        f"  Merge mode: {s.merge_mode}\n"
        f"  Account: {view.account or '(none)'}\n"
        f"  Phase: {view.phase}  Has list: {view.has_list}  Tasks: {len(view.tasks)}"
        f"{err}"
    )


async def cmd_account(app: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /account          -> show current account
    /account <addr>   -> connect and sync
    /account off      -> disconnect
    """
    if not args:
        current = app.controller.state.account
        return f"Account: {current}" if current else "No account connected."

    address = None if args[0].lower() in ("off", "none", "-") else args[0]
    result = await app.controller.change_account(address)
    if result.error is not None:
        return format_error(result.error)
    return format_view(app.controller.view(), app.settings.explorer_url)


async def cmd_refresh(app: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    result = await app.controller.refresh()
    if result.error is not None:
        return format_error(result.error)
    return format_view(app.controller.view(), app.settings.explorer_url)


async def cmd_list(app: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    return format_view(app.controller.view(), app.settings.explorer_url)


async def cmd_create_list(app: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    outcome = await _submit(app, CreateList(), emit)
    return _format_outcome(app, outcome, "List created.")


async def cmd_add(app: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    content = args[0] if args else ""
    outcome = await _submit(app, CreateTask(content=content), emit)
    return _format_outcome(app, outcome, "Task added.")


async def cmd_done(app: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if not args:
        return "Usage: /done <task id>"
    outcome = await _submit(app, CompleteTask(task_id=args[0]), emit)
    return _format_outcome(app, outcome, f"Task {args[0]} completed.")


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show backend, account and sync state.")
registry.register("account", cmd_account, help_text="Connect an account: /account <address> | off.")
registry.register("refresh", cmd_refresh, help_text="Re-read the list from the ledger.", aliases=["r"])
registry.register("list", cmd_list, help_text="Show tasks.", aliases=["ls"])
registry.register("create-list", cmd_create_list, help_text="Initialize a list for the account.")
registry.register("add", cmd_add, help_text="Create a task: /add <text>.", aliases=["a"])
registry.register("done", cmd_done, help_text="Complete a task: /done <id>.", aliases=["complete"])
