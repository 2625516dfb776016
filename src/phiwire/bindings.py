from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from contextlib import AbstractContextManager, nullcontext
from dataclasses import dataclass
from typing import Any, TypeAlias

from phiwire.exceptions import PhiWireInvalidBindingError
from phiwire.lock_mode import LockMode

logger = logging.getLogger(__name__)

Alias: TypeAlias = "str | type[Any]"
"""A key used to request an instance: a type name, a symbolic name, or a class."""


@dataclass(frozen=True, slots=True)
class TypeName:
    """Instantiate ``target`` (a class or the name of one) instead of the alias."""

    target: str | type[Any]


@dataclass(frozen=True, slots=True)
class Factory:
    """Call ``factory`` with the caller's arguments verbatim.

    No auto-injection happens for factory parameters.
    """

    factory: Callable[..., Any]


@dataclass(frozen=True, slots=True)
class Instance:
    """Return ``value`` on every resolution, sharing its identity."""

    value: Any


Binding: TypeAlias = TypeName | Factory | Instance


def as_binding(value: Any) -> Binding:
    """Classify a raw ``bind`` value into a binding variant.

    Strings and classes redirect to a type, other callables become factories,
    and everything else is a singleton instance. Wrap a value in ``Instance``
    to bind a string, a class or a callable object as-is.
    """
    if isinstance(value, TypeName | Factory | Instance):
        return value
    if isinstance(value, str | type):
        return TypeName(value)
    if callable(value):
        return Factory(value)
    return Instance(value)


def validate_alias(alias: Any) -> None:
    if isinstance(alias, str):
        if not alias:
            msg = "Alias must be a non-empty string."
            raise PhiWireInvalidBindingError(msg)
        return
    if not isinstance(alias, type):
        msg = f"Alias must be a string or a class, got {alias!r}."
        raise PhiWireInvalidBindingError(msg)


class BindingStore:
    """Hold the alias-to-binding map of a container."""

    __slots__ = ("_bindings", "_lock")

    def __init__(self, lock_mode: LockMode = LockMode.THREAD) -> None:
        self._bindings: dict[Alias, Binding] = {}
        self._lock: AbstractContextManager[Any] = (
            threading.RLock() if lock_mode is LockMode.THREAD else nullcontext()
        )

    def bind(self, alias: Alias, binding: Binding) -> None:
        with self._lock:
            previous = self._bindings.get(alias)
            self._bindings[alias] = binding
        if previous is not None:
            logger.debug("Rebound %r: %r -> %r", alias, previous, binding)
        else:
            logger.debug("Bound %r to %r", alias, binding)

    def lookup(self, alias: Alias) -> Binding | None:
        with self._lock:
            return self._bindings.get(alias)

    def __contains__(self, alias: object) -> bool:
        with self._lock:
            return alias in self._bindings

    def __len__(self) -> int:
        with self._lock:
            return len(self._bindings)
