# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "LEDGER_TODO_APP_NAME": "App display name (default: ledger-todo).",
    "LEDGER_TODO_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    "LEDGER_TODO_DATA_DIR": "Local data directory for logs (default: .local/ledger_todo).",
    # Ledger
    "LEDGER_TODO_BACKEND": "offline (in-process ledger, default) or rest (fullnode, read-only).",
    "LEDGER_TODO_NODE_URL": "Fullnode REST URL (default: https://fullnode.testnet.aptoslabs.com/v1).",
    "LEDGER_TODO_MODULE_ADDRESS": "Address that published the todolist module.",
    "LEDGER_TODO_MODULE_NAME": "Module name (default: todolist).",
    "LEDGER_TODO_EXPLORER_URL": "Explorer base URL for account links.",
    # Session
    "LEDGER_TODO_ACCOUNT": "Account address to connect at start (optional).",
    "LEDGER_TODO_MERGE_MODE": "after_confirmation (default) or before_confirmation.",
    # Tuning
    "LEDGER_TODO_MAX_CONCURRENT_READS": "Parallel table reads during refresh (default: 8).",
    "LEDGER_TODO_CONFIRMATION_TIMEOUT_SECONDS": "Max wait for a transaction to commit (default: 20).",
    "LEDGER_TODO_POLL_INTERVAL_SECONDS": "Confirmation polling interval (default: 0.5).",
    "LEDGER_TODO_HTTP_TIMEOUT_SECONDS": "Per-request HTTP timeout (default: 10).",
}
