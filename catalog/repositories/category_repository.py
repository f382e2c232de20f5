"""카테고리 레포지토리 — 카테고리 CRUD 및 관련 쿼리.

Category Repository — CRUD and related queries for categories.
Extends BaseRepository with case-insensitive name lookup, the idempotent
find-or-create used for the fallback category, and service-count
aggregation.
"""

from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.models.catalog import Category, Service, normalize_category_name
from catalog.repositories.base import BaseRepository


class CategoryRepository(BaseRepository[Category]):
    """카테고리 테이블에 대한 데이터베이스 쿼리를 담당하는 레포지토리.

    Repository handling database queries for the categories table.
    """

    def __init__(self) -> None:
        """CategoryRepository를 초기화합니다.

        Initialize the CategoryRepository with the Category model.
        """
        super().__init__(Category)

    async def get_by_name(
        self,
        db: AsyncSession,
        name: str,
        exclude_id: UUID | None = None,
    ) -> Category | None:
        """대소문자를 무시하고 이름으로 카테고리를 조회합니다.

        Retrieve a category by name, ignoring case and surrounding whitespace.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            name: 카테고리 이름 (Category name)
            exclude_id: 제외할 카테고리 ID — 수정 시 자기 자신 제외
                        (Category to skip, used when renaming)

        Returns:
            Category | None: 조회된 카테고리 또는 None (Found category or None)
        """
        query: Select = select(Category).where(
            Category.name_key == normalize_category_name(name)
        )
        if exclude_id is not None:
            query = query.where(Category.id != exclude_id)
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def get_or_create_by_name(
        self,
        db: AsyncSession,
        name: str,
        defaults: dict[str, Any] | None = None,
    ) -> tuple[Category, bool]:
        """정규화된 이름으로 카테고리를 찾거나 없으면 생성합니다.

        Find a category by normalized name or create it.
        The insert runs inside a savepoint; if a concurrent caller won the
        race the unique name_key index rejects ours and the winner's row is
        returned, so every caller converges on one record.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            name: 카테고리 이름 (Category name)
            defaults: 생성 시 추가 필드 (Extra fields used only on creation)

        Returns:
            tuple[Category, bool]: (카테고리, 새로 생성 여부)
                                   (Category, whether it was created)
        """
        existing: Category | None = await self.get_by_name(db, name)
        if existing is not None:
            return existing, False

        obj_data: dict[str, Any] = {
            **(defaults or {}),
            "name": name.strip(),
            "name_key": normalize_category_name(name),
        }
        try:
            async with db.begin_nested():
                category: Category = await self.create(db, obj_data)
        except IntegrityError:
            winner: Category | None = await self.get_by_name(db, name)
            if winner is None:
                raise
            return winner, False
        return category, True

    async def get_existing_ids(
        self,
        db: AsyncSession,
        category_ids: set[UUID],
    ) -> set[UUID]:
        """주어진 ID 중 실제로 존재하는 카테고리 ID를 반환합니다.

        Return the subset of ids that resolve to an existing category.
        """
        if not category_ids:
            return set()
        result = await db.execute(
            select(Category.id).where(Category.id.in_(list(category_ids)))
        )
        return set(result.scalars().all())

    async def get_all_with_counts(
        self,
        db: AsyncSession,
        tag: str | None = None,
    ) -> list[tuple[Category, int]]:
        """모든 카테고리를 소속 서비스 수와 함께 조회합니다.

        Retrieve all categories with their derived service count,
        newest first.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            tag: 태그 필터 — 해당 태그가 있는 카테고리만 (Optional tag filter)

        Returns:
            list[tuple[Category, int]]: (카테고리, 서비스 수) 목록
        """
        counts = (
            select(Service.category_id, func.count(Service.id).label("service_count"))
            .group_by(Service.category_id)
            .subquery()
        )
        query: Select = (
            select(Category, func.coalesce(counts.c.service_count, 0))
            .outerjoin(counts, counts.c.category_id == Category.id)
            .order_by(Category.created_at.desc())
        )
        result = await db.execute(query)
        rows: list[tuple[Category, int]] = [(c, int(n)) for c, n in result.all()]

        # JSON 컬럼은 DB마다 포함 연산자가 달라 메모리에서 필터링
        # JSON containment differs per backend; filter in memory
        if tag:
            wanted: str = tag.strip().lower()
            rows = [(c, n) for c, n in rows if wanted in (c.tags or [])]
        return rows

    async def get_service_counts(
        self,
        db: AsyncSession,
    ) -> Sequence[tuple[UUID, str, int]]:
        """카테고리별 서비스 수 통계를 조회합니다 (많은 순).

        Retrieve (id, name, service count) per category, most services first.
        """
        query: Select = (
            select(Category.id, Category.name, func.count(Service.id).label("service_count"))
            .outerjoin(Service, Service.category_id == Category.id)
            .group_by(Category.id, Category.name)
            .order_by(func.count(Service.id).desc(), Category.name)
        )
        result = await db.execute(query)
        return [(row[0], row[1], int(row[2])) for row in result.all()]


# 싱글턴 인스턴스 — Singleton instance
category_repository: CategoryRepository = CategoryRepository()
