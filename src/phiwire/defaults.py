from typing import Any

from phiwire.lock_mode import LockMode

SCALAR_TYPES: frozenset[type[Any]] = frozenset(
    {
        type(None),
        bool,
        int,
        float,
        complex,
        str,
        bytes,
        bytearray,
    },
)
"""Value types that never take part in type-directed argument matching."""

UNTYPED_ANNOTATIONS: tuple[Any, ...] = (object, Any)
"""Annotations treated the same as a missing annotation."""

DEFAULT_LOCK_MODE = LockMode.THREAD
DEFAULT_DETECT_CYCLES = True
