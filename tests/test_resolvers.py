"""Tests for external resolvers consulted before container bindings."""

from typing import Any

import pytest

from phiwire.container import Container
from phiwire.resolvers import ResolverChain, ResolverProtocol


class Service:
    pass


class RecordingResolver:
    def __init__(self, result: Any = None) -> None:
        self.result = result
        self.calls: list[tuple[Any, tuple[Any, ...], dict[str, Any]]] = []

    def make(self, alias: Any, /, *args: Any, **kwargs: Any) -> Any | None:
        self.calls.append((alias, args, kwargs))
        return self.result


class MutatingResolver:
    def make(self, alias: Any, /, *args: Any, **kwargs: Any) -> Any | None:
        kwargs["injected"] = True
        kwargs.pop("name", None)
        return None


class FailingResolver:
    def make(self, alias: Any, /, *args: Any, **kwargs: Any) -> Any | None:
        msg = "resolver failed"
        raise LookupError(msg)


def test_resolver_satisfies_protocol() -> None:
    assert isinstance(RecordingResolver(), ResolverProtocol)


def test_resolver_short_circuits_bindings(container: Container) -> None:
    provided = Service()
    container.bind("A", Service)
    container.add_resolver(RecordingResolver(provided))

    assert container.make("A") is provided


def test_resolver_short_circuits_introspection(container: Container) -> None:
    provided = object()
    container.add_resolver(RecordingResolver(provided))

    assert container.make("does.not.Exist") is provided


def test_declining_resolver_lets_container_continue(container: Container) -> None:
    resolver = RecordingResolver()
    container.add_resolver(resolver)

    instance = container.make(Service)

    assert isinstance(instance, Service)
    assert resolver.calls == [(Service, (), {})]


def test_resolvers_are_consulted_in_registration_order(container: Container) -> None:
    first = RecordingResolver()
    second = RecordingResolver("second")
    third = RecordingResolver("third")
    for resolver in (first, second, third):
        container.add_resolver(resolver)

    assert container.make("alias", 1, name="x") == "second"
    assert first.calls == [("alias", (1,), {"name": "x"})]
    assert second.calls == [("alias", (1,), {"name": "x"})]
    assert third.calls == []


def test_each_resolver_sees_original_arguments(container: Container) -> None:
    recorder = RecordingResolver("done")
    container.add_resolver(MutatingResolver())
    container.add_resolver(recorder)

    container.make("alias", name="x")

    assert recorder.calls == [("alias", (), {"name": "x"})]


def test_same_resolver_may_be_added_twice(container: Container) -> None:
    resolver = RecordingResolver()
    container.add_resolver(resolver)
    container.add_resolver(resolver)

    container.make(Service)

    assert len(resolver.calls) == 2


def test_resolver_errors_abort_the_chain(container: Container) -> None:
    after = RecordingResolver("after")
    container.add_resolver(FailingResolver())
    container.add_resolver(after)

    with pytest.raises(LookupError, match="resolver failed"):
        container.make(Service)
    assert after.calls == []


def test_resolvers_are_consulted_for_auto_injected_dependencies(container: Container) -> None:
    class Consumer:
        def __init__(self, service: Service) -> None:
            self.service = service

    provided = Service()

    class ServiceResolver:
        def make(self, alias: Any, /, *args: Any, **kwargs: Any) -> Any | None:
            return provided if alias is Service else None

    container.add_resolver(ServiceResolver())

    assert container.make(Consumer).service is provided


def test_resolver_chain_returns_none_when_all_decline() -> None:
    chain = ResolverChain()
    chain.add(RecordingResolver())
    assert chain.resolve("alias", (), {}) is None
    assert len(chain) == 1
