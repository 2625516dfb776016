import asyncio
import threading

import pytest

from phiwire.exceptions import PhiWireCyclicDependencyError
from phiwire.resolution_stack import constructing, get_resolution_stack


class First:
    pass


class Second:
    pass


def test_constructing_pushes_and_pops() -> None:
    with constructing(First):
        with constructing(Second):
            assert get_resolution_stack()[-2:] == [First, Second]
        assert get_resolution_stack()[-1] is First
    assert First not in get_resolution_stack()


def test_reentering_raises_with_chain() -> None:
    with constructing(First), constructing(Second):
        with pytest.raises(PhiWireCyclicDependencyError) as exc_info, constructing(First):
            pass

    assert exc_info.value.chain[-3:] == [First, Second, First]


def test_stack_is_popped_when_body_raises() -> None:
    with pytest.raises(RuntimeError), constructing(First):
        raise RuntimeError

    assert First not in get_resolution_stack()


def test_threads_have_separate_stacks() -> None:
    seen: list[list[type]] = []

    def worker() -> None:
        with constructing(Second):
            seen.append(list(get_resolution_stack()))

    with constructing(First):
        thread = threading.Thread(target=worker)
        thread.start()
        thread.join()
        assert Second not in get_resolution_stack()

    assert seen[0][-1] is Second


def test_async_tasks_get_isolated_copies() -> None:
    async def child() -> list[type]:
        stack = get_resolution_stack()
        stack.append(Second)
        return list(stack)

    async def main() -> tuple[list[type], list[type]]:
        with constructing(First):
            child_stack = await asyncio.create_task(child())
            return child_stack, list(get_resolution_stack())

    child_stack, parent_stack = asyncio.run(main())

    assert child_stack[-2:] == [First, Second]
    assert parent_stack[-1] is First
    assert Second not in parent_stack
