# src/ledger_todo/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from ..cli.bootstrap import AppState
from ..cli.commands import format_view
from ..cli.commands import registry as command_registry

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


def to_command_line(user_input: str) -> str:
    """Plain text becomes /add with its text untouched; commands may be indented."""
    stripped = user_input.lstrip()
    return stripped if stripped.startswith("/") else f"/add {user_input}"


async def run_console_loop(app: AppState) -> None:
    """
    Interactive REPL: the presentation layer over SyncController.

    Reads one line at a time (input() runs in a worker thread so the event loop
    stays free), routes slash commands, and prints the resulting view.
    Plain text without a leading slash is treated as /add <text>.
    """
    logger.info("Console connector started (account=%s).", app.controller.state.account)
    _print_ts("[CONSOLE] Use /help for commands. Use /exit to quit.\n")
    _print_ts(format_view(app.controller.view(), app.settings.explorer_url))

    while True:
        try:
            user_input = await asyncio.to_thread(input, ">>> ")
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        # Task text is free-form; only blank lines and command detection look past whitespace.
        if not user_input.strip():
            continue

        if user_input.strip().lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        line = to_command_line(user_input)

        try:
            response = await command_registry.handle(app, line, emit=_print_ts)
        except Exception:
            logger.exception("Command handler crashed.")
            response = "Internal error while handling a command."

        if response is not None:
            _print_ts(response)

    logger.info("Console connector finished.")
