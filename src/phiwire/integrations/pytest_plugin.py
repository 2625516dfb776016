from __future__ import annotations

from collections.abc import Iterator

import pytest

from phiwire.container import Container


@pytest.fixture()
def phiwire_container() -> Container:
    """Provide an empty container to a single test.

    Bindings, resolvers and type registrations made through it disappear
    with the test. Pair it with ``phiwire_shared_container`` when the code
    under test calls ``Container.instance()``.
    """
    return Container()


@pytest.fixture()
def phiwire_shared_container(phiwire_container: Container) -> Iterator[Container]:
    """Install ``phiwire_container`` as ``Container.instance()`` for one test.

    Code under test that reaches for the process-wide container sees the
    per-test container. The previous process-wide container is restored on
    teardown.

    Yields:
        The per-test container.

    """
    previous = Container.set_instance(phiwire_container)
    try:
        yield phiwire_container
    finally:
        Container.set_instance(previous)
