import pytest

from phiwire.bindings import BindingStore, Factory, Instance, TypeName, as_binding, validate_alias
from phiwire.exceptions import PhiWireInvalidBindingError
from phiwire.lock_mode import LockMode


class Service:
    pass


class CallableService:
    def __call__(self) -> str:
        return "called"


def make_service() -> Service:
    return Service()


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (Service, TypeName(Service)),
        ("pkg.module.Service", TypeName("pkg.module.Service")),
        (make_service, Factory(make_service)),
    ],
)
def test_as_binding_classifies_raw_values(value: object, expected: object) -> None:
    assert as_binding(value) == expected


def test_as_binding_treats_plain_objects_as_instances() -> None:
    service = Service()
    binding = as_binding(service)
    assert isinstance(binding, Instance)
    assert binding.value is service


def test_as_binding_treats_callable_objects_as_factories() -> None:
    service = CallableService()
    assert as_binding(service) == Factory(service)


def test_as_binding_keeps_explicit_variants() -> None:
    explicit = Instance(make_service)
    assert as_binding(explicit) is explicit


@pytest.mark.parametrize("alias", ["", 42, None, Service()])
def test_validate_alias_rejects_invalid_aliases(alias: object) -> None:
    with pytest.raises(PhiWireInvalidBindingError):
        validate_alias(alias)


@pytest.mark.parametrize("alias", ["db.helper", Service])
def test_validate_alias_accepts_names_and_classes(alias: object) -> None:
    validate_alias(alias)


@pytest.mark.parametrize("lock_mode", [LockMode.THREAD, LockMode.NONE])
def test_binding_store_lookup(lock_mode: LockMode) -> None:
    store = BindingStore(lock_mode)
    assert store.lookup("service") is None
    assert "service" not in store

    store.bind("service", TypeName(Service))

    assert store.lookup("service") == TypeName(Service)
    assert "service" in store
    assert len(store) == 1


def test_binding_store_rebind_overwrites() -> None:
    store = BindingStore()
    store.bind("service", TypeName(Service))
    store.bind("service", Factory(make_service))

    assert store.lookup("service") == Factory(make_service)
    assert len(store) == 1


def test_binding_store_aliases_are_case_sensitive() -> None:
    store = BindingStore()
    store.bind("Service", TypeName(Service))
    assert store.lookup("service") is None
