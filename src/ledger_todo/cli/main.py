# src/ledger_todo/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, connects the configured account (if any),
then runs the console REPL until /exit, EOF or Ctrl+C.
"""

from __future__ import annotations

import asyncio
import logging

from ..cli.bootstrap import AppState, create_app
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


async def _run(app: AppState) -> None:
    try:
        if app.settings.account:
            result = await app.controller.change_account(app.settings.account)
            if result.error is not None:
                logger.warning("Initial sync failed: %s", result.error)
        await run_console_loop(app)
    finally:
        await app.aclose()


def main() -> None:
    settings = get_settings()

    level_name = str(settings.log_level).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s...", settings.app_name)

    app = create_app(settings=settings)
    try:
        asyncio.run(_run(app))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down...")
    logger.info("Bye.")


if __name__ == "__main__":
    main()
