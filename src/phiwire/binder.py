from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any, Final

from phiwire.defaults import SCALAR_TYPES
from phiwire.exceptions import PhiWireError, PhiWireMissingArgumentError
from phiwire.introspection import ParameterDescriptor, SignatureIntrospector

logger = logging.getLogger(__name__)


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"


_UNSET: Final[Any] = _Unset()


class ParameterBinder:
    """Match caller arguments to constructor parameters and auto-inject the rest.

    Binding runs three passes, each filling only the positions still unset:

    1. Named: every keyword argument goes to the parameter with the same name.
       A keyword that names no parameter is never used by later passes.
    2. Type: every class-typed parameter takes the first remaining positional
       argument that is an instance of its declared type. Scalars never match.
    3. Fallback: class-typed parameters are resolved through the container with
       no arguments; other parameters take the first remaining positional
       argument, then their default, and fail when neither exists.

    For example, with ``T(a: A, p2: B, p3: str, p4: B, p5: str)``::

        make(T, B(), B(), "fdsa", p5="asdf")

        after pass 1: values = [_, _, _, _, "asdf"]     remaining = [B, B, "fdsa"]
        after pass 2: values = [_, B, _, B, "asdf"]     remaining = ["fdsa"]
        after pass 3: values = [A(), B, "fdsa", B, "asdf"]

    """

    def __init__(self, introspector: SignatureIntrospector) -> None:
        self._introspector = introspector

    def bind(
        self,
        target: Any,
        parameters: Sequence[ParameterDescriptor],
        args: Sequence[Any],
        kwargs: Mapping[str, Any],
        resolve: Callable[[type[Any] | str], Any],
    ) -> list[Any]:
        """Produce one value per parameter, in declaration order.

        Args:
            target: Class being built, used in error messages.
            parameters: Constructor signature.
            args: Positional arguments, matched by type or by position.
            kwargs: Keyword arguments, matched by parameter name.
            resolve: Callback building a declared type with no arguments.

        Raises:
            PhiWireMissingArgumentError: If an untyped parameter without a
                default has no positional argument left.

        """
        values: list[Any] = [_UNSET] * len(parameters)
        remaining = list(args)

        self._bind_named(target, parameters, kwargs, values)
        self._bind_by_type(parameters, remaining, values)
        self._bind_fallback(target, parameters, remaining, values, resolve)

        if remaining:
            logger.debug(
                "Ignoring %d unused positional argument(s) for %r",
                len(remaining),
                target,
            )
        return values

    def _bind_named(
        self,
        target: Any,
        parameters: Sequence[ParameterDescriptor],
        kwargs: Mapping[str, Any],
        values: list[Any],
    ) -> None:
        for key, value in kwargs.items():
            for parameter in parameters:
                if parameter.name == key:
                    values[parameter.position] = value
                    break
            else:
                logger.warning(
                    "Keyword argument '%s' matches no parameter of %r and is ignored",
                    key,
                    target,
                )

    def _bind_by_type(
        self,
        parameters: Sequence[ParameterDescriptor],
        remaining: list[Any],
        values: list[Any],
    ) -> None:
        for parameter in parameters:
            if values[parameter.position] is not _UNSET or parameter.declared_type is None:
                continue
            declared_type = self._runtime_type(parameter.declared_type)
            if declared_type is None:
                continue
            for index, argument in enumerate(remaining):
                if self._is_instance(argument, declared_type):
                    values[parameter.position] = remaining.pop(index)
                    break

    def _bind_fallback(
        self,
        target: Any,
        parameters: Sequence[ParameterDescriptor],
        remaining: list[Any],
        values: list[Any],
        resolve: Callable[[type[Any] | str], Any],
    ) -> None:
        for parameter in parameters:
            if values[parameter.position] is not _UNSET:
                continue
            if parameter.declared_type is not None:
                values[parameter.position] = resolve(parameter.declared_type)
            elif remaining:
                values[parameter.position] = remaining.pop(0)
            elif parameter.has_default:
                values[parameter.position] = parameter.default
            else:
                raise PhiWireMissingArgumentError(target, parameter.name)

    def _runtime_type(self, declared_type: type[Any] | str) -> type[Any] | None:
        if not isinstance(declared_type, str):
            return declared_type
        try:
            return self._introspector.resolve_type(declared_type)
        except PhiWireError as error:
            # Unknown forward references match nothing; pass 3 reports them.
            logger.debug("Type matching skipped for %r: %s", declared_type, error)
            return None

    @staticmethod
    def _is_instance(argument: Any, declared_type: type[Any]) -> bool:
        if type(argument) in SCALAR_TYPES:
            return False
        try:
            return isinstance(argument, declared_type)
        except TypeError:
            # Protocols without @runtime_checkable reject isinstance checks.
            return False
