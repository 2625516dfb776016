from __future__ import annotations

from enum import Enum


class LockMode(Enum):
    """Select locking behavior for binding and resolver bookkeeping.

    The lock only guards reads and writes of the binding map and the resolver
    list. Object construction always runs outside of it, so factories and
    constructors may call back into the container from any thread.
    """

    THREAD = "thread"
    """Guard bookkeeping with a re-entrant ``threading.RLock``."""

    NONE = "none"
    """Disable locking. The container is then not safe for concurrent use."""
