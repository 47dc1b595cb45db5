# src/ledger_todo/ledger/decode.py

"""
Schema-validated decoding of ledger JSON.

Node responses are untyped JSON. Nothing here coerces silently: a field with the
wrong shape raises DecodeError naming the field, so a malformed Task never reaches
the projection.

u64 values arrive as decimal strings (JSON numbers lose precision above 2**53);
plain non-negative ints are accepted too.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..core.errors import DecodeError
from ..core.models import Task, TaskList

U64_MAX = 2**64 - 1


def _require_mapping(raw: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(raw, Mapping):
        raise DecodeError(f"{what}: expected an object, got {type(raw).__name__}")
    return raw


def _field(obj: Mapping[str, Any], name: str, what: str) -> Any:
    if name not in obj:
        raise DecodeError(f"{what}: missing field {name!r}")
    return obj[name]


def decode_u64(raw: Any, what: str) -> int:
    # bool is an int subclass; never accept it as a number
    if isinstance(raw, bool):
        raise DecodeError(f"{what}: expected u64, got bool")
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, str) and raw.isascii() and raw.isdigit():
        value = int(raw)
    else:
        raise DecodeError(f"{what}: expected u64, got {raw!r}")
    if not 0 <= value <= U64_MAX:
        raise DecodeError(f"{what}: u64 out of range: {value}")
    return value


def decode_task_id(raw: Any, what: str = "task.task_id") -> str:
    """Normalize a task id to its canonical decimal string (positive)."""
    value = decode_u64(raw, what)
    if value < 1:
        raise DecodeError(f"{what}: task ids start at 1, got {value}")
    return str(value)


def _decode_str(raw: Any, what: str) -> str:
    if not isinstance(raw, str):
        raise DecodeError(f"{what}: expected string, got {type(raw).__name__}")
    return raw


def _decode_bool(raw: Any, what: str) -> bool:
    if not isinstance(raw, bool):
        raise DecodeError(f"{what}: expected bool, got {type(raw).__name__}")
    return raw


def decode_task_list(resource: Any) -> TaskList:
    """
    Decode a TodoList resource:

        {"type": "...::todolist::TodoList",
         "data": {"task_counter": "3", "tasks": {"handle": "0x..."}, ...}}
    """
    res = _require_mapping(resource, "resource")
    data = _require_mapping(_field(res, "data", "resource"), "resource.data")

    counter = decode_u64(_field(data, "task_counter", "resource.data"), "resource.data.task_counter")

    tasks = _require_mapping(_field(data, "tasks", "resource.data"), "resource.data.tasks")
    handle = _decode_str(_field(tasks, "handle", "resource.data.tasks"), "resource.data.tasks.handle")
    if not handle.strip():
        raise DecodeError("resource.data.tasks.handle: empty handle")

    return TaskList(task_counter=counter, handle=handle)


def decode_task(item: Any) -> Task:
    """Decode a table item: {"address", "completed", "content", "task_id"}."""
    obj = _require_mapping(item, "task")
    return Task(
        task_id=decode_task_id(_field(obj, "task_id", "task")),
        address=_decode_str(_field(obj, "address", "task"), "task.address"),
        # empty content is valid and must round-trip unchanged
        content=_decode_str(_field(obj, "content", "task"), "task.content"),
        completed=_decode_bool(_field(obj, "completed", "task"), "task.completed"),
    )
