from __future__ import annotations

from typing import Any


def _describe(target: Any) -> str:
    if isinstance(target, str):
        return target
    return getattr(target, "__qualname__", repr(target))


class PhiWireError(Exception):
    """Represent a base class for all phiwire-specific failures.

    Catch this type when you want to handle any resolution error path without
    matching each concrete exception class individually.
    """


class PhiWireInvalidBindingError(PhiWireError):
    """Signal an invalid alias passed to ``bind`` or ``make``.

    Aliases must be a non-empty string or a class object.
    """


class PhiWireNotInstantiableError(PhiWireError):
    """Signal that the target of ``make`` cannot be constructed.

    Raised for abstract classes, protocols, non-class objects and classes
    whose constructor signature cannot be inspected. Nothing is constructed
    when this error is raised.

    Typical fix is binding the alias to a concrete class, a factory or an
    instance with ``Container.bind``.
    """

    def __init__(self, target: Any, reason: str) -> None:
        self.target = target
        self.reason = reason
        super().__init__(f"{_describe(target)} is not an instantiable class: {reason}")


class PhiWireMissingArgumentError(PhiWireError):
    """Signal that an untyped constructor parameter received no value.

    Raised when positional arguments are exhausted while filling a parameter
    that has neither a declared class type nor a default value.

    Typical fixes include passing the value positionally, passing it by
    keyword (``make(Service, name=value)``), or giving the parameter a default.
    """

    def __init__(self, target: Any, parameter: str) -> None:
        self.target = target
        self.parameter = parameter
        super().__init__(
            f"Missing argument for parameter '{parameter}' of {_describe(target)}",
        )


class PhiWireUnresolvableTypeError(PhiWireError):
    """Signal that a type name does not name any known class.

    Raised when a string alias (or a forward-reference annotation) is neither
    registered with ``register_type`` nor importable as a dotted path.
    """

    def __init__(self, type_name: str, reason: str) -> None:
        self.type_name = type_name
        self.reason = reason
        super().__init__(f"Cannot resolve type '{type_name}': {reason}")


class PhiWireCyclicDependencyError(PhiWireError):
    """Signal that auto-injection re-entered a class still under construction.

    ``chain`` lists the classes on the resolution stack, outermost first,
    ending with the class that closed the cycle.
    """

    def __init__(self, target: Any, chain: list[Any]) -> None:
        self.target = target
        self.chain = chain
        path = " -> ".join(_describe(item) for item in chain)
        super().__init__(f"Circular dependency detected while resolving {_describe(target)}: {path}")
