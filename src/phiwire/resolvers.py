from __future__ import annotations

import logging
import threading
from contextlib import AbstractContextManager, nullcontext
from typing import Any, Protocol, runtime_checkable

from phiwire.lock_mode import LockMode

logger = logging.getLogger(__name__)


@runtime_checkable
class ResolverProtocol(Protocol):
    """Protocol for an external resolver consulted before container bindings."""

    def make(self, alias: Any, /, *args: Any, **kwargs: Any) -> Any | None:
        """Build an instance for ``alias`` or decline.

        Args:
            alias: Alias passed to ``Container.make``.
            *args: Positional arguments passed to ``Container.make``.
            **kwargs: Keyword arguments passed to ``Container.make``.

        Returns:
            The instance, or ``None`` to let the next resolver (and finally the
            container itself) handle the alias.

        """


class ResolverChain:
    """Ordered resolvers; registration order is consultation order."""

    __slots__ = ("_lock", "_resolvers")

    def __init__(self, lock_mode: LockMode = LockMode.THREAD) -> None:
        self._resolvers: list[ResolverProtocol] = []
        self._lock: AbstractContextManager[Any] = (
            threading.RLock() if lock_mode is LockMode.THREAD else nullcontext()
        )

    def add(self, resolver: ResolverProtocol) -> None:
        with self._lock:
            self._resolvers.append(resolver)

    def resolve(self, alias: Any, args: tuple[Any, ...], kwargs: dict[str, Any]) -> Any | None:
        """Return the first non-``None`` result of the chain, or ``None``.

        Arguments are unpacked into every call, so each resolver receives fresh
        containers and a declining resolver cannot alter what the next one sees.
        Exceptions raised by a resolver abort the chain.
        """
        with self._lock:
            resolvers = tuple(self._resolvers)

        for resolver in resolvers:
            instance = resolver.make(alias, *args, **kwargs)
            if instance is not None:
                logger.debug("Resolver %r provided %r", resolver, alias)
                return instance
        return None

    def __len__(self) -> int:
        with self._lock:
            return len(self._resolvers)
