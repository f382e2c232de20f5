"""카테고리 삭제 저널 레포지토리.

Category deletion journal repository.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.models.deletion import STEP_COMPLETED, CategoryDeletion
from catalog.repositories.base import BaseRepository


class CategoryDeletionRepository(BaseRepository[CategoryDeletion]):
    """삭제 저널 테이블 쿼리 레포지토리.

    Repository for the category_deletions journal table.
    """

    def __init__(self) -> None:
        super().__init__(CategoryDeletion)

    async def advance(
        self,
        db: AsyncSession,
        entry: CategoryDeletion,
        step: str,
        affected_services: int | None = None,
    ) -> CategoryDeletion:
        """저널 항목의 단계를 갱신합니다.

        Move a journal entry to the given step.
        """
        entry.step = step
        if affected_services is not None:
            entry.affected_services = affected_services
        await db.flush()
        return entry

    async def get_incomplete(self, db: AsyncSession) -> Sequence[CategoryDeletion]:
        """완료되지 않은 삭제 저널 항목을 조회합니다.

        Retrieve journal entries that never reached the completed step,
        oldest first.
        """
        query: Select = (
            select(CategoryDeletion)
            .where(CategoryDeletion.step != STEP_COMPLETED)
            .order_by(CategoryDeletion.created_at)
        )
        result = await db.execute(query)
        return result.scalars().all()

    async def get_by_category(
        self,
        db: AsyncSession,
        category_id: UUID,
    ) -> Sequence[CategoryDeletion]:
        """카테고리에 대한 삭제 이력을 조회합니다.

        Retrieve the deletion history for a category id.
        """
        query: Select = (
            select(CategoryDeletion)
            .where(CategoryDeletion.category_id == category_id)
            .order_by(CategoryDeletion.created_at)
        )
        result = await db.execute(query)
        return result.scalars().all()


# 싱글턴 인스턴스 — Singleton instance
category_deletion_repository: CategoryDeletionRepository = CategoryDeletionRepository()
