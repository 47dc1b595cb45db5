# src/ledger_todo/core/projection.py

"""
Local projection of one account's on-chain list.

A Projection is an immutable value; every transition returns a new one. That makes
snapshots free (keep a reference) and revert trivial (reinstall the reference).

Invariant: `tasks` is always sorted by numeric task id with no duplicate ids.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace

from .models import Task


@dataclass(slots=True, frozen=True)
class Projection:
    address: str | None = None
    has_list: bool = False
    tasks: tuple[Task, ...] = ()
    # bumped on every account activation; snapshots from an older epoch are not restorable
    epoch: int = 0


def empty(address: str | None, epoch: int) -> Projection:
    return Projection(address=address, has_list=False, tasks=(), epoch=epoch)


def from_ledger(address: str, epoch: int, tasks: Iterable[Task]) -> Projection:
    """Build a synced projection; order by id regardless of the iteration order given."""
    by_id = {t.number: t for t in tasks}
    return Projection(
        address=address,
        has_list=True,
        tasks=tuple(by_id[k] for k in sorted(by_id)),
        epoch=epoch,
    )


def next_id(p: Projection) -> int:
    if not p.tasks:
        return 1
    return max(t.number for t in p.tasks) + 1


def with_list(p: Projection) -> Projection:
    if p.has_list:
        return p
    return replace(p, has_list=True, tasks=())


def with_task(p: Projection, task: Task) -> Projection:
    """Insert (or replace by id) a task, keeping id order."""
    others = [t for t in p.tasks if t.number != task.number]
    others.append(task)
    others.sort(key=lambda t: t.number)
    return replace(p, has_list=True, tasks=tuple(others))


def with_completed(p: Projection, task_id: str) -> Projection:
    """Mark one task completed. Unknown ids and already-completed tasks are no-ops."""
    try:
        number = int(task_id)
    except ValueError:
        return p

    changed = False
    out: list[Task] = []
    for t in p.tasks:
        if t.number == number and not t.completed:
            out.append(replace(t, completed=True))
            changed = True
        else:
            out.append(t)
    if not changed:
        return p
    return replace(p, tasks=tuple(out))
