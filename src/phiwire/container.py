from __future__ import annotations

import logging
import threading
from contextlib import AbstractContextManager, nullcontext
from typing import TYPE_CHECKING, Any, ClassVar, TypeVar, overload

if TYPE_CHECKING:
    from typing_extensions import Self

from phiwire.binder import ParameterBinder
from phiwire.bindings import (
    Alias,
    BindingStore,
    Factory,
    Instance,
    TypeName,
    as_binding,
    validate_alias,
)
from phiwire.defaults import DEFAULT_DETECT_CYCLES, DEFAULT_LOCK_MODE
from phiwire.introspection import SignatureIntrospector
from phiwire.lock_mode import LockMode
from phiwire.resolution_stack import constructing
from phiwire.resolvers import ResolverChain, ResolverProtocol

T = TypeVar("T")

logger = logging.getLogger(__name__)


class Container:
    """Bind aliases and build instances with constructor auto-injection.

    ``make`` consults registered resolvers first, then the alias binding
    (factory, instance or type redirect), and finally builds the target class,
    filling constructor parameters from the caller's arguments by name, then by
    type, then by position, and resolving the remaining class-typed parameters
    recursively.

    Containers are independent values; ``Container.instance()`` additionally
    exposes a lazily created process-wide container.
    """

    _shared: ClassVar[Container | None] = None
    _shared_lock: ClassVar[threading.Lock] = threading.Lock()

    __slots__ = (
        "_binder",
        "_bindings",
        "_detect_cycles",
        "_introspector",
        "_resolvers",
    )

    def __init__(
        self,
        *,
        lock_mode: LockMode = DEFAULT_LOCK_MODE,
        detect_cycles: bool = DEFAULT_DETECT_CYCLES,
        introspector: SignatureIntrospector | None = None,
    ) -> None:
        """Initialize an empty container.

        Args:
            lock_mode: ``LockMode.THREAD`` guards bindings and resolvers with a
                lock; ``LockMode.NONE`` leaves synchronization to the caller.
            detect_cycles: Raise ``PhiWireCyclicDependencyError`` when
                auto-injection re-enters a class under construction. When
                disabled, a cycle recurses until the interpreter's limit.
            introspector: Signature introspector to share type registrations
                between containers. A new one is created by default.

        """
        self._bindings = BindingStore(lock_mode)
        self._resolvers = ResolverChain(lock_mode)
        self._introspector = introspector or SignatureIntrospector()
        self._binder = ParameterBinder(self._introspector)
        self._detect_cycles = detect_cycles

    @classmethod
    def instance(cls) -> Self:
        """Return the process-wide container, creating it on first access."""
        with cls._shared_lock:
            if cls._shared is None:
                cls._shared = cls()
            return cls._shared  # type: ignore[return-value]

    @classmethod
    def set_instance(cls, container: Container | None) -> Container | None:
        """Replace the process-wide container and return the previous one.

        Passing ``None`` makes the next ``instance()`` call create a fresh
        container. Use this from a composition root that builds its own
        container, or in tests to isolate global state.
        """
        with cls._shared_lock:
            previous = cls._shared
            cls._shared = container
            return previous

    def bind(self, alias: Alias, binding: Any) -> None:
        """Bind a class, a factory or an instance to an alias.

        Re-binding an alias overwrites the previous binding. A class, its
        dotted path and its registered names are one alias, so the binding also
        replaces the class wherever it is auto-injected.

        Args:
            alias: Symbolic name (for example ``"db.helper"``), type name or
                class to be replaced by ``binding``.
            binding: One of:

                - a class or the name of one, built with auto-injection instead
                  of the alias;
                - a callable, called with the arguments passed to ``make``;
                - any other object, returned as a singleton.

                ``TypeName``, ``Factory`` and ``Instance`` select the variant
                explicitly (for example ``Instance("postgres://...")``).

        Raises:
            PhiWireInvalidBindingError: If ``alias`` is empty or not a string
                or class.

        """
        validate_alias(alias)
        self._bindings.bind(self._introspector.qualified_name(alias), as_binding(binding))

    def add_resolver(self, resolver: ResolverProtocol) -> None:
        """Append a resolver consulted before this container's own bindings."""
        self._resolvers.add(resolver)

    def has_binding(self, alias: Alias) -> bool:
        return self._introspector.qualified_name(alias) in self._bindings

    def register_type(self, cls: type[Any], name: str | None = None) -> None:
        """Make ``cls`` available to ``make`` and annotations by a short name.

        Register before binding by that name, so the binding is keyed by the class.
        """
        self._introspector.register_type(cls, name)

    @overload
    def make(self, alias: type[T], /, *args: Any, **kwargs: Any) -> T: ...

    @overload
    def make(self, alias: str, /, *args: Any, **kwargs: Any) -> Any: ...

    def make(self, alias: Alias, /, *args: Any, **kwargs: Any) -> Any:
        """Get or create an instance for ``alias``.

        Args:
            alias: Alias, type name or class to build.
            *args: Positional arguments. Factories receive them verbatim; for
                classes they are matched to parameters by type, then by order.
            **kwargs: Keyword arguments. Factories receive them verbatim; for
                classes they are matched to parameters by name.

        Returns:
            A new instance of the alias' binding, or the shared instance for
            singleton bindings.

        Raises:
            PhiWireNotInstantiableError: If the target is abstract, a protocol
                or otherwise cannot be constructed.
            PhiWireUnresolvableTypeError: If a type name cannot be found.
            PhiWireMissingArgumentError: If an untyped parameter gets no value.
            PhiWireCyclicDependencyError: If auto-injection loops.
            PhiWireInvalidBindingError: If ``alias`` is empty or not a string
                or class, so it could never have been bound.

        Examples:
            .. code-block:: python

                container.bind("db.helper", DatabaseHelper)
                helper = container.make("db.helper", dsn="sqlite://")

        """
        validate_alias(alias)

        instance = self._resolvers.resolve(alias, args, kwargs)
        if instance is not None:
            return instance

        target: Alias = alias
        binding = self._bindings.lookup(self._introspector.qualified_name(alias))
        if isinstance(binding, Factory):
            logger.debug("Calling factory bound to %r", alias)
            return binding.factory(*args, **kwargs)
        if isinstance(binding, Instance):
            return binding.value
        if isinstance(binding, TypeName):
            target = binding.target

        return self._build(target, args, kwargs)

    def _build(self, target: Alias, args: tuple[Any, ...], kwargs: dict[str, Any]) -> Any:
        cls = self._introspector.resolve_type(target)
        parameters = self._introspector.get_constructor_signature(cls)

        guard: AbstractContextManager[None] = (
            constructing(cls) if self._detect_cycles else nullcontext()
        )
        with guard:
            if not parameters:
                logger.debug("Instantiating %s", cls.__qualname__)
                return cls()

            values = self._binder.bind(cls, parameters, args, kwargs, self.make)
            logger.debug("Instantiating %s with %d argument(s)", cls.__qualname__, len(values))
            return self._introspector.instantiate(cls, parameters, values)
