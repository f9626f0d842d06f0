"""Task hierarchy helpers.

The parent relation forms a forest. ``order`` is a global, gapless index
matching a depth-first walk of that forest, with siblings kept in their
existing relative order.
"""

from __future__ import annotations

from collections.abc import Sequence

from chartfile.domain.models import Task


def flatten_hierarchy(tasks: Sequence[Task]) -> list[Task]:
    """Return *tasks* in depth-first pre-order.

    Siblings are sorted by their current ``order`` (stable for ties).
    A task whose parent is not in *tasks* is treated as a root. Collapsed
    (``open=False``) tasks still contribute their children.
    """
    known_ids = {t.id for t in tasks}
    children: dict[str | None, list[Task]] = {}
    for task in tasks:
        parent_key = task.parent if task.parent and task.parent in known_ids else None
        children.setdefault(parent_key, []).append(task)

    for siblings in children.values():
        siblings.sort(key=lambda t: t.order)

    result: list[Task] = []
    stack: list[Task] = list(reversed(children.get(None, [])))
    while stack:
        task = stack.pop()
        result.append(task)
        stack.extend(reversed(children.get(task.id, [])))
    return result


def normalize_task_order(tasks: Sequence[Task]) -> list[Task]:
    """Rewrite ``order`` to sequential depth-first indices.

    The returned list keeps the input positions; only ``order`` values
    change. Requires an acyclic hierarchy (tasks on a cycle are unreachable
    from any root and keep their old order).
    """
    new_order = {task.id: index for index, task in enumerate(flatten_hierarchy(tasks))}
    return [
        task.model_copy(update={"order": new_order.get(task.id, task.order)}) for task in tasks
    ]
