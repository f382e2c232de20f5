"""카테고리 단위 비동기 잠금 모듈.

Per-category asyncio lock registry.
Category deletion holds the lock for the source category for its whole
sequence (check, service mutation, category delete); service creation and
re-categorisation hold the lock for their target category. Within one
process this keeps a service from being attached to a category that is
being deleted. Locks are not shared across processes.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from uuid import UUID


class CategoryLockRegistry:
    """카테고리 ID별 asyncio.Lock 레지스트리.

    Registry handing out one asyncio.Lock per category id.
    Entries are dropped once no coroutine holds or waits on them.
    """

    def __init__(self) -> None:
        self._locks: dict[UUID, asyncio.Lock] = {}
        self._waiters: dict[UUID, int] = {}

    @asynccontextmanager
    async def hold(self, *category_ids: UUID) -> AsyncIterator[None]:
        """주어진 카테고리들의 잠금을 정렬된 순서로 획득합니다.

        Acquire the locks for the given categories in sorted order so two
        callers locking the same pair cannot deadlock.
        """
        ordered: list[UUID] = sorted(set(category_ids), key=str)
        acquired: list[UUID] = []
        try:
            for category_id in ordered:
                lock = self._locks.setdefault(category_id, asyncio.Lock())
                self._waiters[category_id] = self._waiters.get(category_id, 0) + 1
                try:
                    await lock.acquire()
                except BaseException:
                    self._release_waiter(category_id)
                    raise
                acquired.append(category_id)
            yield
        finally:
            for category_id in reversed(acquired):
                self._locks[category_id].release()
                self._release_waiter(category_id)

    def is_locked(self, category_id: UUID) -> bool:
        lock = self._locks.get(category_id)
        return lock is not None and lock.locked()

    def _release_waiter(self, category_id: UUID) -> None:
        remaining = self._waiters.get(category_id, 1) - 1
        if remaining <= 0:
            self._waiters.pop(category_id, None)
            self._locks.pop(category_id, None)
        else:
            self._waiters[category_id] = remaining


# 싱글턴 인스턴스 — Singleton instance
category_locks: CategoryLockRegistry = CategoryLockRegistry()
