from __future__ import annotations

import importlib
import inspect
import logging
import sys
import types
from collections.abc import Sequence
from dataclasses import dataclass
from inspect import Parameter
from typing import Annotated, Any, Final, Union, get_args, get_origin, get_type_hints

from phiwire.defaults import SCALAR_TYPES, UNTYPED_ANNOTATIONS
from phiwire.exceptions import PhiWireNotInstantiableError, PhiWireUnresolvableTypeError

logger = logging.getLogger(__name__)


class _NoDefault:
    def __repr__(self) -> str:
        return "NO_DEFAULT"


NO_DEFAULT: Final[Any] = _NoDefault()


@dataclass(frozen=True, slots=True)
class ParameterDescriptor:
    """Describe one constructor parameter.

    ``declared_type`` is a class (or the unresolved name of one, for forward
    references) when the parameter is class-typed, and ``None`` for scalar or
    untyped parameters. ``position`` is the 0-based declaration index.
    """

    name: str
    declared_type: type[Any] | str | None
    position: int
    keyword_only: bool = False
    default: Any = NO_DEFAULT

    @property
    def has_default(self) -> bool:
        return self.default is not NO_DEFAULT


def is_runtime_class(candidate: object) -> bool:
    return isinstance(candidate, type) and not isinstance(candidate, types.GenericAlias)


def _unwrap_annotation(annotation: Any) -> Any:
    """Reduce ``Annotated[T, ...]``, ``Optional[T]`` and ``T | None`` to ``T``."""
    while get_origin(annotation) is Annotated:
        annotation = get_args(annotation)[0]

    if get_origin(annotation) in (Union, types.UnionType):
        members = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(members) == 1:
            return _unwrap_annotation(members[0])
    return annotation


def _is_dotted_identifier(name: str) -> bool:
    return all(part.isidentifier() for part in name.split("."))


def _forward_reference_name(annotation: str) -> str | None:
    members = [part.strip() for part in annotation.split("|")]
    members = [part for part in members if part and part != "None"]
    if len(members) != 1:
        return None
    name = members[0].strip("'\"")
    if not _is_dotted_identifier(name):
        return None
    if name in _UNTYPED_NAMES:
        return None
    return name


_UNTYPED_NAMES: Final[frozenset[str]] = frozenset(
    {cls.__name__ for cls in SCALAR_TYPES} | {"None", "object", "Any", "typing.Any"},
)


def declared_type_of(annotation: Any) -> type[Any] | str | None:
    """Map a parameter annotation to the type used for auto-injection."""
    if annotation is Parameter.empty:
        return None
    annotation = _unwrap_annotation(annotation)
    if isinstance(annotation, str):
        return _forward_reference_name(annotation)
    if any(annotation is untyped for untyped in UNTYPED_ANNOTATIONS):
        return None
    if not is_runtime_class(annotation):
        return None
    if annotation in SCALAR_TYPES:
        return None
    return annotation


class SignatureIntrospector:
    """Look up classes by name and describe their constructors.

    Type names are resolved through an explicit registration table first and
    then imported as dotted paths (``"pkg.module.Class"`` or
    ``"pkg.module:Class"``).
    """

    def __init__(self) -> None:
        self._types: dict[str, type[Any]] = {}
        self._signatures: dict[type[Any], tuple[ParameterDescriptor, ...]] = {}

    def register_type(self, cls: type[Any], name: str | None = None) -> None:
        """Make ``cls`` resolvable by ``name`` (defaults to its qualified name)."""
        self._types[name or cls.__qualname__] = cls

    def qualified_name(self, alias: str | type[Any]) -> str:
        """Return the binding key of ``alias``.

        A class, its registered names and its dotted paths (``"pkg.module.Class"``
        or ``"pkg.module:Class"``) share one key, so a binding made with any of
        them also applies when the class is auto-injected. Other strings are
        symbolic names and are returned unchanged.
        """
        if not isinstance(alias, str):
            return f"{alias.__module__}.{alias.__qualname__}"

        registered = self._types.get(alias)
        if registered is not None:
            return self.qualified_name(registered)

        module_name, separator, attribute_path = alias.partition(":")
        if separator and _is_dotted_identifier(module_name) and _is_dotted_identifier(attribute_path):
            return f"{module_name}.{attribute_path}"
        return alias

    def resolve_type(self, type_name: str | type[Any]) -> type[Any]:
        """Return the class named by ``type_name``.

        Raises:
            PhiWireUnresolvableTypeError: If the name is unknown or not importable.
            PhiWireNotInstantiableError: If the name refers to something that is
                not a class.

        """
        if not isinstance(type_name, str):
            if not is_runtime_class(type_name):
                raise PhiWireNotInstantiableError(type_name, "not a class")
            return type_name

        registered = self._types.get(type_name)
        if registered is not None:
            return registered

        resolved = self._import(type_name)
        if not is_runtime_class(resolved):
            raise PhiWireNotInstantiableError(type_name, "not a class")
        return resolved

    def _import(self, type_name: str) -> Any:
        if ":" in type_name:
            module_name, _, attribute_path = type_name.partition(":")
        else:
            module_name, _, attribute_path = type_name.rpartition(".")
        if not module_name or not attribute_path:
            raise PhiWireUnresolvableTypeError(type_name, "not registered and not a dotted path")

        try:
            value: Any = importlib.import_module(module_name)
        except ImportError as error:
            raise PhiWireUnresolvableTypeError(type_name, str(error)) from error

        for attribute in attribute_path.split("."):
            try:
                value = getattr(value, attribute)
            except AttributeError as error:
                raise PhiWireUnresolvableTypeError(type_name, str(error)) from error
        return value

    def get_constructor_signature(
        self,
        type_name: str | type[Any],
    ) -> tuple[ParameterDescriptor, ...]:
        """Describe the constructor parameters of the named class, in order.

        Raises:
            PhiWireNotInstantiableError: If the class is abstract, a protocol, or
                has no inspectable signature.
            PhiWireUnresolvableTypeError: If the name does not resolve to a class.

        """
        cls = self.resolve_type(type_name)
        cached = self._signatures.get(cls)
        if cached is not None:
            return cached

        if inspect.isabstract(cls):
            raise PhiWireNotInstantiableError(cls, "abstract class")
        if getattr(cls, "_is_protocol", False):
            raise PhiWireNotInstantiableError(cls, "protocol class")

        try:
            parameters = tuple(inspect.signature(cls).parameters.values())
        except (TypeError, ValueError) as error:
            raise PhiWireNotInstantiableError(cls, f"signature unavailable ({error})") from error

        annotations = self._resolved_type_hints(cls)
        descriptors: list[ParameterDescriptor] = []
        for parameter in parameters:
            if parameter.kind in (Parameter.VAR_POSITIONAL, Parameter.VAR_KEYWORD):
                continue
            descriptors.append(
                ParameterDescriptor(
                    name=parameter.name,
                    declared_type=declared_type_of(
                        annotations.get(parameter.name, parameter.annotation),
                    ),
                    position=len(descriptors),
                    keyword_only=parameter.kind is Parameter.KEYWORD_ONLY,
                    default=(
                        NO_DEFAULT if parameter.default is Parameter.empty else parameter.default
                    ),
                ),
            )

        result = tuple(descriptors)
        self._signatures[cls] = result
        logger.debug("Inspected %s: %s", cls.__qualname__, [d.name for d in result])
        return result

    def _resolved_type_hints(self, cls: type[Any]) -> dict[str, Any]:
        merged: dict[str, Any] = {}
        for member_name in ("__init__", "__new__"):
            member = getattr(cls, member_name, None)
            if member is None or member in (object.__init__, object.__new__):
                continue
            try:
                hints = get_type_hints(member, include_extras=True)
            except (AttributeError, NameError, TypeError) as error:
                logger.debug("Could not evaluate hints of %s.%s: %s", cls, member_name, error)
                hints = self._evaluate_each_annotation(cls, member)
            for name, hint in hints.items():
                merged.setdefault(name, hint)
        return merged

    def _evaluate_each_annotation(self, cls: type[Any], member: Any) -> dict[str, Any]:
        # Annotations that fail to evaluate stay as raw strings (forward references).
        try:
            raw_annotations = dict(getattr(member, "__annotations__", None) or {})
        except NameError:
            return {}

        module = sys.modules.get(cls.__module__)
        namespace: dict[str, Any] = dict(vars(module)) if module is not None else {}
        hints: dict[str, Any] = {}
        for name, annotation in raw_annotations.items():
            if name == "return" or not isinstance(annotation, str):
                continue
            holder = types.SimpleNamespace(__annotations__={name: annotation})
            try:
                hints.update(get_type_hints(holder, globalns=namespace, include_extras=True))
            except (AttributeError, NameError, SyntaxError, TypeError):
                hints[name] = annotation
        return hints

    def instantiate(
        self,
        cls: type[Any],
        parameters: Sequence[ParameterDescriptor],
        values: Sequence[Any],
    ) -> Any:
        """Call ``cls`` with one value per descriptor."""
        args: list[Any] = []
        kwargs: dict[str, Any] = {}
        for parameter, value in zip(parameters, values, strict=True):
            if parameter.keyword_only:
                kwargs[parameter.name] = value
            else:
                args.append(value)
        return cls(*args, **kwargs)
