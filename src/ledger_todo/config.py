# src/ledger_todo/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app, injected into components at construction.
- No secrets or network access required at import time.
- Module-qualified ledger names are derived once and passed through unparsed.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

ENV_PREFIX = "LEDGER_TODO"

DEFAULT_NODE_URL = "https://fullnode.testnet.aptoslabs.com/v1"
DEFAULT_MODULE_ADDRESS = "0x95edd3515b3d51fad6bb5eddb73e8c2ea2e522a979568d662939a98fc1269917"
DEFAULT_EXPLORER_URL = "https://explorer.aptoslabs.com"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except ImportError:
        return
    load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


class Backend(StrEnum):
    OFFLINE = "offline"
    REST = "rest"

    @classmethod
    def parse(cls, raw: str | None) -> Backend:
        try:
            return cls((raw or "").strip().lower())
        except ValueError:
            return cls.OFFLINE


class MergeMode(StrEnum):
    """
    When a confirmed intent is reflected in the local projection.

    - after_confirmation: merge strictly after the ledger confirms (no revert needed)
    - before_confirmation: merge speculatively, revert to a snapshot on any failure
    """

    AFTER_CONFIRMATION = "after_confirmation"
    BEFORE_CONFIRMATION = "before_confirmation"

    @classmethod
    def parse(cls, raw: str | None) -> MergeMode:
        try:
            return cls((raw or "").strip().lower())
        except ValueError:
            return cls.AFTER_CONFIRMATION


@dataclass(frozen=True, slots=True)
class ModuleNames:
    """Fully qualified on-chain names used by the client (opaque strings)."""

    list_resource_type: str
    task_value_type: str
    create_list_function: str
    create_task_function: str
    complete_task_function: str

    @staticmethod
    def for_module(module_address: str, module_name: str = "todolist") -> ModuleNames:
        prefix = f"{module_address}::{module_name}"
        return ModuleNames(
            list_resource_type=f"{prefix}::TodoList",
            task_value_type=f"{prefix}::Task",
            create_list_function=f"{prefix}::create_list",
            create_task_function=f"{prefix}::create_task",
            complete_task_function=f"{prefix}::complete_task",
        )


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    data_dir: Path

    # ---- Ledger ----
    backend: Backend
    node_url: str
    module_address: str
    module_name: str
    modules: ModuleNames
    explorer_url: str

    # ---- Session ----
    account: str | None
    merge_mode: MergeMode

    # ---- Tuning ----
    max_concurrent_reads: int
    confirmation_timeout_seconds: float
    poll_interval_seconds: float
    http_timeout_seconds: float

    @staticmethod
    def from_env() -> Settings:
        _load_dotenv_if_available()

        module_address = _env(_k("MODULE_ADDRESS"), DEFAULT_MODULE_ADDRESS).strip()
        module_name = _env(_k("MODULE_NAME"), "todolist").strip() or "todolist"
        account = _env(_k("ACCOUNT"), "").strip() or None

        return Settings(
            app_name=_env(_k("APP_NAME"), "ledger-todo"),
            log_level=_env(_k("LOG_LEVEL"), "INFO"),
            data_dir=_env_path(_k("DATA_DIR"), Path(".local/ledger_todo")),
            backend=Backend.parse(os.getenv(_k("BACKEND"))),
            node_url=_env(_k("NODE_URL"), DEFAULT_NODE_URL).rstrip("/"),
            module_address=module_address,
            module_name=module_name,
            modules=ModuleNames.for_module(module_address, module_name),
            explorer_url=_env(_k("EXPLORER_URL"), DEFAULT_EXPLORER_URL).rstrip("/"),
            account=account,
            merge_mode=MergeMode.parse(os.getenv(_k("MERGE_MODE"))),
            # at least one read in flight, otherwise refresh would never finish
            max_concurrent_reads=max(1, _env_int(_k("MAX_CONCURRENT_READS"), 8)),
            confirmation_timeout_seconds=max(
                0.1, _env_float(_k("CONFIRMATION_TIMEOUT_SECONDS"), 20.0)
            ),
            poll_interval_seconds=max(0.01, _env_float(_k("POLL_INTERVAL_SECONDS"), 0.5)),
            http_timeout_seconds=max(0.1, _env_float(_k("HTTP_TIMEOUT_SECONDS"), 10.0)),
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    """Load settings lazily (once per process)."""
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS
