"""동시성 테스트 — 카테고리 잠금과 이름 유일성 경합.

Concurrency tests — two sessions on a file-backed SQLite database run
operations at the same time with asyncio.gather. Covers service writes
racing a category deletion, concurrent safe deletions converging on one
fallback category, and concurrent creation of the same category name.
"""

import asyncio
from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from catalog.database import Base
from catalog.models.catalog import Category, Service, normalize_category_name
from catalog.repositories.category_repository import category_repository
from catalog.repositories.service_repository import service_repository
from catalog.schemas.catalog import CategoryCreate, CategoryUpdate, ServiceCreate, ServiceUpdate
from catalog.services.category_deletion_service import category_deletion_service
from catalog.services.category_service import category_service
from catalog.services.service_service import service_service
from catalog.utils.exceptions import DuplicateError, NotFoundError


# ---------------------------------------------------------------------------
# 파일 기반 DB — 세션마다 별도 커넥션 (One connection per session)
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def file_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    eng = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}", echo=False)
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield eng

    await eng.dispose()


@pytest_asyncio.fixture
async def factory(file_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(file_engine, class_=AsyncSession, expire_on_commit=False)


async def _seed(factory, name: str, *titles: str) -> Category:
    async with factory() as session:
        category = Category(name=name, name_key=normalize_category_name(name), tags=[])
        session.add(category)
        await session.flush()
        session.add_all(
            Service(category_id=category.id, title=t, description=f"{t} description", tags=[])
            for t in titles
        )
        await session.commit()
        return category


class TestServiceWritesAgainstDeletion:
    """서비스 생성/이동과 카테고리 삭제 경합 테스트."""

    async def test_create_service_during_cascade_leaves_no_orphans(self, factory):
        category = await _seed(factory, "Plumbing", "Leak repair", "Drain cleaning")

        async with factory() as first, factory() as second:
            outcome, created = await asyncio.gather(
                category_deletion_service.cascade_delete(first, category.id),
                service_service.create_service(
                    second,
                    ServiceCreate(category_id=str(category.id), title="Tap fitting", description="New tap"),
                ),
                return_exceptions=True,
            )

        assert outcome.mode == "cascade"
        if isinstance(created, NotFoundError):
            # 삭제가 먼저 — Deletion ran first, creation saw no category
            assert outcome.deleted_services_count == 2
        else:
            # 생성이 먼저 — Creation ran first, cascade removed it too
            assert outcome.deleted_services_count == 3

        async with factory() as check:
            assert await service_repository.get_orphaned(check) == []
            assert await service_repository.count_by_category(check, category.id) == 0

    async def test_move_service_during_cascade_leaves_no_orphans(self, factory):
        doomed = await _seed(factory, "Plumbing", "Leak repair")
        other = await _seed(factory, "Gardening", "Hedge trimming")
        async with factory() as session:
            (moving,) = await service_repository.get_by_category(session, other.id)

        async with factory() as first, factory() as second:
            outcome, moved = await asyncio.gather(
                category_deletion_service.cascade_delete(first, doomed.id),
                service_service.update_service(
                    second, moving.id, ServiceUpdate(category_id=str(doomed.id))
                ),
                return_exceptions=True,
            )

        assert outcome.mode == "cascade"
        assert isinstance(moved, NotFoundError) or outcome.deleted_services_count == 2

        async with factory() as check:
            assert await service_repository.get_orphaned(check) == []

    async def test_concurrent_safe_deletes_share_one_fallback(self, factory):
        plumbing = await _seed(factory, "Plumbing", "Leak repair", "Drain cleaning")
        gardening = await _seed(factory, "Gardening", "Hedge trimming")

        async with factory() as first, factory() as second:
            a, b = await asyncio.gather(
                category_deletion_service.safe_delete(first, plumbing.id),
                category_deletion_service.safe_delete(second, gardening.id),
            )

        assert a.target_category_id is not None
        assert a.target_category_id == b.target_category_id
        assert a.migrated_services_count + b.migrated_services_count == 3

        async with factory() as check:
            names = (await check.execute(select(Category.name))).scalars().all()
            assert names == ["Uncategorized"]
            fallback = await category_repository.get_by_name(check, "uncategorized")
            assert await service_repository.count_by_category(check, fallback.id) == 3


class TestFallbackUpsert:
    """기본 카테고리 find-or-create 테스트."""

    async def test_lost_insert_returns_existing_row(self, db, make_category, monkeypatch):
        """조회 직후 다른 호출자가 먼저 생성한 경우 → 기존 행 반환."""
        existing = await make_category("Uncategorized")
        lookup = category_repository.get_by_name
        calls: list[str] = []

        async def _stale_first_lookup(session, name, exclude_id=None):
            calls.append(name)
            if len(calls) == 1:
                return None
            return await lookup(session, name, exclude_id)

        monkeypatch.setattr(category_repository, "get_by_name", _stale_first_lookup)

        category, created = await category_repository.get_or_create_by_name(db, "Uncategorized")

        assert created is False
        assert category.id == existing.id
        assert len(calls) == 2
        total = (await db.execute(select(func.count()).select_from(Category))).scalar()
        assert total == 1


class TestCategoryNameRace:
    """대소문자만 다른 이름 동시 생성/변경 테스트."""

    async def test_concurrent_create_same_name(self, factory):
        async def _create(name: str):
            async with factory() as session:
                try:
                    result = await category_service.create_category(session, CategoryCreate(name=name))
                except DuplicateError as exc:
                    return exc
                await session.commit()
                return result

        results = await asyncio.gather(_create("Plumbing"), _create("PLUMBING"))

        assert sum(isinstance(r, DuplicateError) for r in results) == 1
        async with factory() as check:
            total = (await check.execute(select(func.count()).select_from(Category))).scalar()
            assert total == 1

    async def test_create_after_stale_name_check_is_duplicate(self, db, plumbing, monkeypatch):
        async def _no_match(session, name, exclude_id=None):
            return None

        monkeypatch.setattr(category_repository, "get_by_name", _no_match)

        with pytest.raises(DuplicateError):
            await category_service.create_category(db, CategoryCreate(name="PLUMBING"))
        total = (await db.execute(select(func.count()).select_from(Category))).scalar()
        assert total == 1

    async def test_rename_after_stale_name_check_is_duplicate(self, db, plumbing, empty_category, monkeypatch):
        cid = empty_category.id

        async def _no_match(session, name, exclude_id=None):
            return None

        monkeypatch.setattr(category_repository, "get_by_name", _no_match)

        with pytest.raises(DuplicateError):
            await category_service.update_category(db, cid, CategoryUpdate(name="plumbing"))
        name = (await db.execute(select(Category.name).where(Category.id == cid))).scalar()
        assert name == "Gardening"
