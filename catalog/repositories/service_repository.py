"""서비스 레포지토리 — 서비스 CRUD 및 카테고리 종속 쿼리.

Service Repository — CRUD and category-dependent queries for services.
The bulk operations here (delete_by_category, reassign_category) are
called only by the category deletion service.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.models.catalog import Category, Service
from catalog.repositories.base import BaseRepository


class ServiceRepository(BaseRepository[Service]):
    """서비스 테이블에 대한 데이터베이스 쿼리를 담당하는 레포지토리.

    Repository handling database queries for the services table.
    A service depends on a category when its category_id equals the
    category's id; every query here uses that same definition.
    """

    def __init__(self) -> None:
        super().__init__(Service)

    async def count_by_category(
        self,
        db: AsyncSession,
        category_id: UUID,
    ) -> int:
        """카테고리에 속한 서비스 수를 반환합니다.

        Count services whose category_id equals the given category.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            category_id: 카테고리 ID (Category UUID)

        Returns:
            int: 종속 서비스 수 (Dependent service count)
        """
        query: Select = (
            select(func.count())
            .select_from(Service)
            .where(Service.category_id == category_id)
        )
        return (await db.execute(query)).scalar() or 0

    async def get_by_category(
        self,
        db: AsyncSession,
        category_id: UUID,
        active_only: bool = False,
    ) -> Sequence[Service]:
        """카테고리에 속한 서비스 목록을 조회합니다.

        Retrieve services belonging to a category, popular first.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            category_id: 카테고리 ID (Category UUID)
            active_only: 활성 서비스만 조회 (Only active services)

        Returns:
            Sequence[Service]: 서비스 목록 (List of services)
        """
        query: Select = select(Service).where(Service.category_id == category_id)
        if active_only:
            query = query.where(Service.is_active.is_(True))
        query = query.order_by(Service.is_popular.desc(), Service.created_at)
        result = await db.execute(query)
        return result.scalars().all()

    async def delete_by_category(
        self,
        db: AsyncSession,
        category_id: UUID,
    ) -> int:
        """카테고리에 속한 모든 서비스를 삭제합니다.

        Delete every service whose category_id equals the given category.

        Returns:
            int: 삭제된 서비스 수 (Count of deleted services)
        """
        result = await db.execute(
            delete(Service).where(Service.category_id == category_id)
        )
        await db.flush()
        return result.rowcount

    async def reassign_category(
        self,
        db: AsyncSession,
        source_category_id: UUID,
        target_category_id: UUID,
    ) -> int:
        """원본 카테고리의 서비스를 대상 카테고리로 일괄 이동합니다.

        Rewrite category_id on every service of the source category.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            source_category_id: 원본 카테고리 ID (Source category UUID)
            target_category_id: 대상 카테고리 ID (Target category UUID)

        Returns:
            int: 이동된 서비스 수 (Count of migrated services)
        """
        result = await db.execute(
            update(Service)
            .where(Service.category_id == source_category_id)
            .values(category_id=target_category_id)
        )
        await db.flush()
        return result.rowcount

    async def get_orphaned(self, db: AsyncSession) -> Sequence[Service]:
        """존재하지 않는 카테고리를 가리키는 서비스를 조회합니다.

        Retrieve services whose category_id resolves to no category.
        """
        query: Select = (
            select(Service)
            .where(~select(Category.id).where(Category.id == Service.category_id).exists())
            .order_by(Service.category_id, Service.created_at)
        )
        result = await db.execute(query)
        return result.scalars().all()

    async def count_orphaned(self, db: AsyncSession) -> int:
        """끊어진 참조를 가진 서비스 수를 반환합니다."""
        query: Select = (
            select(func.count())
            .select_from(Service)
            .where(~select(Category.id).where(Category.id == Service.category_id).exists())
        )
        return (await db.execute(query)).scalar() or 0

    async def get_popular(
        self,
        db: AsyncSession,
        limit: int = 10,
    ) -> Sequence[Service]:
        """활성 상태의 인기 서비스를 최신순으로 조회합니다.

        Retrieve active popular services, newest first.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            limit: 최대 조회 수 (Maximum number of services)

        Returns:
            Sequence[Service]: 인기 서비스 목록 (Popular services)
        """
        query: Select = (
            select(Service)
            .where(Service.is_popular.is_(True), Service.is_active.is_(True))
            .order_by(Service.created_at.desc())
            .limit(limit)
        )
        result = await db.execute(query)
        return result.scalars().all()


# 싱글턴 인스턴스 — Singleton instance
service_repository: ServiceRepository = ServiceRepository()
