from __future__ import annotations

import asyncio
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

from phiwire.exceptions import PhiWireCyclicDependencyError

# Context variable for in-progress constructions (works with both threads and async tasks)
# Stores (owner, stack) tuple to detect when stack needs cloning for new threads or async tasks
_resolution_stack: ContextVar[tuple[tuple[int, int | None], list[type[Any]]] | None] = ContextVar(
    "phiwire_resolution_stack",
    default=None,
)


def _get_context_id() -> tuple[int, int | None]:
    """Get an identifier for the current execution context.

    Combines the current thread with the id of the current async task, or None
    if running in a sync context.
    """
    try:
        task = asyncio.current_task()
    except RuntimeError:
        task = None
    return threading.get_ident(), (id(task) if task is not None else None)


def get_resolution_stack() -> list[type[Any]]:
    """Get the current context's resolution stack.

    When called from a different thread or async task than the one that created
    the stack, returns a cloned copy to ensure isolation during parallel resolution.
    """
    current_owner = _get_context_id()
    stored = _resolution_stack.get()

    if stored is None:
        stack: list[type[Any]] = []
        _resolution_stack.set((current_owner, stack))
        return stack

    owner, stack = stored

    if owner != current_owner:
        cloned_stack = list(stack)
        _resolution_stack.set((current_owner, cloned_stack))
        return cloned_stack

    return stack


@contextmanager
def constructing(cls: type[Any]) -> Iterator[None]:
    """Mark ``cls`` as under construction for the duration of the block.

    Raises:
        PhiWireCyclicDependencyError: If ``cls`` is already on the stack.

    """
    stack = get_resolution_stack()
    if cls in stack:
        raise PhiWireCyclicDependencyError(cls, [*stack, cls])

    stack.append(cls)
    try:
        yield
    finally:
        stack.pop()
