# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from ledger_todo.cli.bootstrap import AppState, create_app
from ledger_todo.config import Backend, MergeMode, ModuleNames
from ledger_todo.core.controller import SyncController
from ledger_todo.ledger.offline import OfflineLedger

from .fakes import MODULE_ADDRESS, make_controller


@pytest.fixture()
def modules() -> ModuleNames:
    return ModuleNames.for_module(MODULE_ADDRESS)


@pytest.fixture()
def settings(tmp_path: Path, modules: ModuleNames) -> SimpleNamespace:
    """
    Minimal settings object compatible with create_app and the CLI commands.

    We intentionally use a SimpleNamespace rather than Settings.from_env(),
    to keep unit tests isolated from the developer's environment/.env.
    """
    return SimpleNamespace(
        app_name="ledger-todo-test",
        log_level="DEBUG",
        data_dir=tmp_path,
        backend=Backend.OFFLINE,
        node_url="https://node.test/v1",
        module_address=MODULE_ADDRESS,
        module_name="todolist",
        modules=modules,
        explorer_url="https://explorer.test",
        account=None,
        merge_mode=MergeMode.AFTER_CONFIRMATION,
        max_concurrent_reads=4,
        confirmation_timeout_seconds=0.2,
        poll_interval_seconds=0.01,
        http_timeout_seconds=1.0,
    )


@pytest.fixture()
def ledger(modules: ModuleNames) -> OfflineLedger:
    return OfflineLedger(modules)


@pytest.fixture()
def controller(ledger: OfflineLedger) -> SyncController:
    return make_controller(ledger)


@pytest.fixture()
def app(settings: SimpleNamespace, ledger: OfflineLedger) -> AppState:
    """AppState wired to a shared offline ledger (so tests can seed it directly)."""
    return create_app(settings=settings, reader=ledger, signer=ledger, waiter=ledger)
