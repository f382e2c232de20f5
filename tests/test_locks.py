"""카테고리 잠금 레지스트리 테스트.

Category lock registry tests — a second holder of the same category waits
for the first; different categories do not block each other.
"""

import asyncio
import uuid

from catalog.utils.locks import CategoryLockRegistry


class TestCategoryLockRegistry:
    """카테고리 잠금 테스트."""

    async def test_same_category_is_serialized(self):
        registry = CategoryLockRegistry()
        category_id = uuid.uuid4()
        order: list[str] = []
        first_inside = asyncio.Event()
        release_first = asyncio.Event()

        async def first():
            async with registry.hold(category_id):
                order.append("first-in")
                first_inside.set()
                await release_first.wait()
                order.append("first-out")

        async def second():
            await first_inside.wait()
            async with registry.hold(category_id):
                order.append("second-in")

        tasks = [asyncio.create_task(first()), asyncio.create_task(second())]
        await first_inside.wait()
        await asyncio.sleep(0)
        assert registry.is_locked(category_id)
        assert order == ["first-in"]

        release_first.set()
        await asyncio.gather(*tasks)
        assert order == ["first-in", "first-out", "second-in"]
        assert not registry.is_locked(category_id)

    async def test_different_categories_do_not_block(self):
        registry = CategoryLockRegistry()
        a, b = uuid.uuid4(), uuid.uuid4()
        async with registry.hold(a):
            async with registry.hold(b):
                assert registry.is_locked(a)
                assert registry.is_locked(b)

    async def test_multiple_ids_and_duplicates(self):
        registry = CategoryLockRegistry()
        a, b = uuid.uuid4(), uuid.uuid4()
        async with registry.hold(a, b, a):
            assert registry.is_locked(a)
            assert registry.is_locked(b)
        assert not registry.is_locked(a)
        assert not registry.is_locked(b)

    async def test_empty_hold_is_noop(self):
        registry = CategoryLockRegistry()
        async with registry.hold():
            pass
