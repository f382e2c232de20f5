"""카테고리 삭제 서비스 — 종속 서비스 처리 정책을 포함한 카테고리 삭제.

Category Deletion Service — Category deletion with dependent-service resolution.

Operations:
    get_deletion_info: 삭제 영향 미리보기 (Read-only deletion preview)
    delete_category: 옵션에 따른 단일 카테고리 삭제 (Delete one category)
    bulk_delete_categories: 여러 카테고리 일괄 삭제 (Delete many, isolating failures)
    simple_delete / safe_delete / cascade_delete / migrate_delete / force_delete:
        고정 옵션 래퍼 (Fixed-option wrappers)
    list_incomplete_deletions / resume_deletion: 중단된 삭제 조회 및 재개
        (Reconciliation of deletions that stopped half-way)
    list_category_deletions: 카테고리별 삭제 이력 (Deletion history per category)

Step ordering:
    1. 검증 — 카테고리/대상 존재, 단순 삭제 시 종속 서비스 0개 (no writes)
    2. 저널 기록 (started) → 커밋
    3. 서비스 처리 (삭제/이동/방치) + 저널 services_resolved → 커밋
    4. 카테고리 삭제 + 저널 completed → 커밋

    The category row is removed only after the service-side mutation has
    been committed, so an interruption leaves "services handled, category
    still present", which resume_deletion finishes. The two stores are not
    changed in one transaction.
"""

import asyncio
from collections.abc import Awaitable
from typing import Sequence, TypeVar
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.config import settings
from catalog.models.catalog import Category, Service, normalize_category_name
from catalog.models.deletion import (
    STEP_COMPLETED,
    STEP_SERVICES_RESOLVED,
    STEP_STARTED,
    CategoryDeletion,
)
from catalog.repositories.category_repository import category_repository
from catalog.repositories.deletion_repository import category_deletion_repository
from catalog.repositories.service_repository import service_repository
from catalog.schemas.deletion import (
    BulkDeleteFailure,
    BulkDeleteResult,
    CategoryDeletionResponse,
    DeleteCategoryOptions,
    DeletionInfo,
    DeletionOutcome,
    DependentService,
)
from catalog.services.deletion_modes import (
    ALTERNATIVE_OPTIONS,
    CascadeDelete,
    DeletionMode,
    ForceDelete,
    MigrateDelete,
    SafeDelete,
    SimpleDelete,
    mode_from_journal,
    resolve_deletion_mode,
)
from catalog.utils.exceptions import (
    BadRequestError,
    ConflictError,
    DeletionTimeoutError,
    NotFoundError,
)
from catalog.utils.ids import parse_id
from catalog.utils.locks import category_locks

T = TypeVar("T")


class CategoryDeletionService:
    """카테고리 삭제 비즈니스 로직을 처리하는 서비스.

    Service owning every category deletion. It is the only component
    that rewrites Service.category_id in bulk.
    """

    # ------------------------------------------------------------------
    # 미리보기 — Preview
    # ------------------------------------------------------------------

    async def get_deletion_info(
        self,
        db: AsyncSession,
        category_id: str | UUID,
    ) -> DeletionInfo:
        """카테고리 삭제 시 영향을 받는 서비스를 미리 조회합니다.

        Preview what deleting a category would affect. Read only.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            category_id: 카테고리 ID (Category id)

        Returns:
            DeletionInfo: 종속 서비스 목록과 안전 삭제 가능 여부
                          (Dependent services and the can-delete-safely flag)

        Raises:
            BadRequestError: ID 형식 오류 (Malformed id)
            NotFoundError: 카테고리를 찾을 수 없음 (Category not found)
        """
        cid: UUID = parse_id(category_id)
        category: Category = await self._get_category_or_404(db, cid)

        services: Sequence[Service] = await service_repository.get_by_category(db, cid)
        return DeletionInfo(
            category_id=str(category.id),
            category_name=category.name,
            service_count=len(services),
            services=[DependentService(id=str(s.id), title=s.title) for s in services],
            can_delete_safely=len(services) == 0,
        )

    # ------------------------------------------------------------------
    # 단일 삭제 — Single deletion
    # ------------------------------------------------------------------

    async def delete_category(
        self,
        db: AsyncSession,
        category_id: str | UUID,
        options: DeleteCategoryOptions | None = None,
        timeout: float | None = None,
    ) -> DeletionOutcome:
        """옵션에 따라 카테고리를 삭제하고 종속 서비스를 처리합니다.

        Delete a category and resolve its dependent services according to
        the options. Commits each step itself.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            category_id: 삭제할 카테고리 ID (Category id to delete)
            options: 삭제 옵션, None이면 단순 삭제 (Delete options; None means simple)
            timeout: 제한 시간(초), None이면 설정값 사용
                     (Deadline in seconds; defaults to CATEGORY_DELETE_TIMEOUT_SECONDS)

        Returns:
            DeletionOutcome: 삭제 결과 (Deletion outcome)

        Raises:
            BadRequestError: ID 형식 오류 또는 자기 자신으로 이동
                             (Malformed id, or migrating into itself)
            NotFoundError: 카테고리 또는 이동 대상 없음 (Category or target not found)
            ConflictError: 단순 삭제인데 종속 서비스 존재 (Simple delete with dependents)
            DeletionTimeoutError: 제한 시간 초과 (Deadline exceeded)
        """
        cid: UUID = parse_id(category_id)
        mode: DeletionMode = resolve_deletion_mode(options or DeleteCategoryOptions())
        return await self._with_deadline(self._run(db, cid, mode), timeout)

    async def simple_delete(self, db: AsyncSession, category_id: str | UUID) -> DeletionOutcome:
        """종속 서비스가 없을 때만 삭제합니다 (Delete only when nothing depends on it)."""
        return await self.delete_category(db, category_id, DeleteCategoryOptions())

    async def safe_delete(self, db: AsyncSession, category_id: str | UUID) -> DeletionOutcome:
        """서비스를 기본 카테고리로 옮긴 뒤 삭제합니다 (Move services to the fallback category)."""
        return await self.delete_category(db, category_id, DeleteCategoryOptions(create_default=True))

    async def cascade_delete(self, db: AsyncSession, category_id: str | UUID) -> DeletionOutcome:
        """종속 서비스까지 함께 삭제합니다 (Delete dependent services too)."""
        return await self.delete_category(db, category_id, DeleteCategoryOptions(cascade=True))

    async def migrate_delete(
        self,
        db: AsyncSession,
        category_id: str | UUID,
        target_category_id: str | UUID,
    ) -> DeletionOutcome:
        """서비스를 대상 카테고리로 옮긴 뒤 삭제합니다 (Move services to target, then delete)."""
        options = DeleteCategoryOptions(migrate_to=str(target_category_id))
        return await self.delete_category(db, category_id, options)

    async def force_delete(self, db: AsyncSession, category_id: str | UUID) -> DeletionOutcome:
        """종속 서비스를 그대로 두고 삭제합니다 (Delete, leaving dangling references)."""
        return await self.delete_category(db, category_id, DeleteCategoryOptions(force=True))

    # ------------------------------------------------------------------
    # 일괄 삭제 — Bulk deletion
    # ------------------------------------------------------------------

    async def bulk_delete_categories(
        self,
        db: AsyncSession,
        category_ids: Sequence[str | UUID],
        options: DeleteCategoryOptions | None = None,
    ) -> BulkDeleteResult:
        """여러 카테고리에 같은 삭제 옵션을 적용합니다.

        Apply one set of delete options to many categories, in order.
        Each id is deleted independently; a failure is recorded in
        ``failed`` and the batch continues. The batch as a whole is not
        atomic.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            category_ids: 삭제할 카테고리 ID 목록 (Ids, duplicates allowed)
            options: 공통 삭제 옵션 (Shared delete options)

        Returns:
            BulkDeleteResult: 성공/실패 목록과 합계 (Successes, failures, totals)
        """
        result = BulkDeleteResult()
        for raw_id in category_ids:
            try:
                outcome: DeletionOutcome = await self.delete_category(db, raw_id, options)
            except DeletionTimeoutError as exc:
                # 중간 단계에서 끊겼을 수 있음 — 미완료 작업 롤백 (May have stopped mid-sequence)
                await db.rollback()
                result.failed.append(BulkDeleteFailure(id=str(raw_id), error=str(exc.detail)))
                continue
            except HTTPException as exc:
                # 검증 단계 실패 — 쓰기 전이므로 롤백 불필요 (Raised before any write)
                result.failed.append(BulkDeleteFailure(id=str(raw_id), error=str(exc.detail)))
                continue
            except SQLAlchemyError as exc:
                await db.rollback()
                result.failed.append(
                    BulkDeleteFailure(id=str(raw_id), error=f"Database error: {type(exc).__name__}")
                )
                continue

            result.successful.append(str(raw_id))
            result.total_deleted += 1
            result.total_migrated += outcome.migrated_services_count or 0
            result.total_services_deleted += outcome.deleted_services_count or 0
        return result

    # ------------------------------------------------------------------
    # 재조정 — Reconciliation
    # ------------------------------------------------------------------

    async def list_incomplete_deletions(
        self,
        db: AsyncSession,
    ) -> list[CategoryDeletionResponse]:
        """완료되지 않은 삭제 저널 항목을 조회합니다.

        List deletions that stopped before the category was removed.
        """
        entries: Sequence[CategoryDeletion] = await category_deletion_repository.get_incomplete(db)
        return [self._journal_to_response(e) for e in entries]

    async def list_category_deletions(
        self,
        db: AsyncSession,
        category_id: str | UUID,
    ) -> list[CategoryDeletionResponse]:
        """카테고리의 삭제 이력을 조회합니다.

        List every deletion attempt recorded for a category id, oldest
        first. The category itself may already be gone.
        """
        cid: UUID = parse_id(category_id)
        entries: Sequence[CategoryDeletion] = await category_deletion_repository.get_by_category(db, cid)
        return [self._journal_to_response(e) for e in entries]

    async def resume_deletion(
        self,
        db: AsyncSession,
        deletion_id: str | UUID,
        timeout: float | None = None,
    ) -> DeletionOutcome:
        """중단된 삭제를 기록된 모드로 다시 실행합니다.

        Re-run an incomplete deletion with its recorded mode. Re-running
        cascade or migrate against an already emptied category touches no
        services and goes straight to the category delete.

        Raises:
            NotFoundError: 저널 항목 없음 (Journal entry not found)
            ConflictError: 이미 완료된 삭제 (Deletion already completed)
        """
        did: UUID = parse_id(deletion_id, "deletion")
        entry: CategoryDeletion | None = await category_deletion_repository.get_by_id(db, did)
        if entry is None:
            raise NotFoundError(f"Deletion not found: {did}")
        if entry.step == STEP_COMPLETED:
            raise ConflictError(f"Deletion {did} is already completed")

        mode: DeletionMode = mode_from_journal(entry.mode, entry.target_category_id)
        category: Category | None = await category_repository.get_by_id(db, entry.category_id)
        if category is None:
            # 카테고리가 이미 없음 — 저널만 완료 처리 (Category already gone; close the entry)
            await category_deletion_repository.advance(db, entry, STEP_COMPLETED)
            await db.commit()
            return self._outcome(entry, mode, entry.category_name, entry.affected_services)

        return await self._with_deadline(self._run(db, entry.category_id, mode, entry), timeout)

    # ------------------------------------------------------------------
    # 내부 구현 — Internals
    # ------------------------------------------------------------------

    async def _with_deadline(self, operation: Awaitable[T], timeout: float | None) -> T:
        """제한 시간 안에 작업을 실행합니다 (Run an operation under a deadline)."""
        deadline: float = settings.CATEGORY_DELETE_TIMEOUT_SECONDS if timeout is None else timeout
        try:
            async with asyncio.timeout(deadline):
                return await operation
        except TimeoutError:
            raise DeletionTimeoutError(
                f"Category deletion did not finish within {deadline} seconds; "
                "check incomplete deletions and resume"
            )

    async def _run(
        self,
        db: AsyncSession,
        category_id: UUID,
        mode: DeletionMode,
        entry: CategoryDeletion | None = None,
    ) -> DeletionOutcome:
        """카테고리 잠금을 잡고 삭제 단계를 순서대로 실행합니다.

        Run the deletion steps in order while holding the category lock.
        """
        locked: tuple[UUID, ...] = (category_id,)
        if isinstance(mode, MigrateDelete):
            if mode.target_id == category_id:
                raise BadRequestError("Cannot migrate services to the category being deleted")
            locked = (category_id, mode.target_id)

        async with category_locks.hold(*locked):
            category: Category = await self._get_category_or_404(db, category_id)
            target: Category | None = await self._check_preconditions(db, category, mode)

            # 1단계: 저널 기록 — Step 1: journal entry
            if entry is None:
                entry = await category_deletion_repository.create(
                    db,
                    {
                        "category_id": category.id,
                        "category_name": category.name,
                        "mode": mode.kind,
                        "target_category_id": target.id if target is not None else None,
                        "step": STEP_STARTED,
                    },
                )
            elif target is not None:
                entry.target_category_id = target.id
            await db.commit()

            # 2단계: 종속 서비스 처리 — Step 2: resolve dependent services
            affected: int = await self._resolve_services(db, category, mode, target, entry)
            await category_deletion_repository.advance(db, entry, STEP_SERVICES_RESOLVED, affected)
            await db.commit()

            # 3단계: 카테고리 삭제 — Step 3: delete the category
            await category_repository.delete(db, category.id)
            await category_deletion_repository.advance(db, entry, STEP_COMPLETED)
            await db.commit()

        return self._outcome(entry, mode, entry.category_name, affected, target)

    async def _check_preconditions(
        self,
        db: AsyncSession,
        category: Category,
        mode: DeletionMode,
    ) -> Category | None:
        """모드별 선행 조건을 확인하고 이동 대상 카테고리를 반환합니다.

        Check the mode's precondition without writing anything except the
        fallback category, and return the migration target if any.
        """
        match mode:
            case SimpleDelete():
                count: int = await service_repository.count_by_category(db, category.id)
                if count > 0:
                    raise ConflictError(
                        f"Cannot delete category '{category.name}': {count} service(s) "
                        f"depend on it. Use one of: {', '.join(ALTERNATIVE_OPTIONS)}"
                    )
                return None
            case MigrateDelete(target_id=target_id):
                target: Category | None = await category_repository.get_by_id(db, target_id)
                if target is None:
                    raise NotFoundError(f"Target category not found: {target_id}")
                return target
            case SafeDelete():
                return await self._fallback_target(db, category)
            case CascadeDelete() | ForceDelete():
                return None

    async def _fallback_target(self, db: AsyncSession, category: Category) -> Category | None:
        """기본 카테고리를 찾거나 생성합니다. 옮길 서비스가 없으면 None.

        Find or create the fallback category. Returns None when there is
        nothing to migrate, so no empty fallback category is created.
        """
        count: int = await service_repository.count_by_category(db, category.id)
        if count == 0:
            return None
        fallback_name: str = settings.DEFAULT_CATEGORY_NAME
        if category.name_key == normalize_category_name(fallback_name):
            raise BadRequestError(
                f"Category '{category.name}' is the fallback category; "
                "use cascade, migrate_to or force to delete it"
            )
        target, _ = await category_repository.get_or_create_by_name(
            db,
            fallback_name,
            {"description": "Services whose category was deleted", "tags": []},
        )
        return target

    async def _resolve_services(
        self,
        db: AsyncSession,
        category: Category,
        mode: DeletionMode,
        target: Category | None,
        entry: CategoryDeletion,
    ) -> int:
        """모드에 따라 종속 서비스를 처리하고 영향받은 수를 반환합니다.

        Apply the mode to dependent services and return the affected
        count, added to what a resumed entry already recorded.
        """
        match mode:
            case SimpleDelete():
                return 0
            case CascadeDelete():
                deleted: int = await service_repository.delete_by_category(db, category.id)
                return entry.affected_services + deleted
            case MigrateDelete() | SafeDelete():
                if target is None:
                    return entry.affected_services
                migrated: int = await service_repository.reassign_category(db, category.id, target.id)
                return entry.affected_services + migrated
            case ForceDelete():
                # 서비스는 건드리지 않음 — 끊어진 참조 수만 기록 (Record the dangling count only)
                return await service_repository.count_by_category(db, category.id)

    async def _get_category_or_404(self, db: AsyncSession, category_id: UUID) -> Category:
        category: Category | None = await category_repository.get_by_id(db, category_id)
        if category is None:
            raise NotFoundError(f"Category not found: {category_id}")
        return category

    def _outcome(
        self,
        entry: CategoryDeletion,
        mode: DeletionMode,
        name: str,
        affected: int,
        target: Category | None = None,
    ) -> DeletionOutcome:
        """삭제 결과 응답을 구성합니다 (Build the deletion outcome)."""
        outcome = DeletionOutcome(
            message=f"Category '{name}' deleted successfully",
            mode=mode.kind,
            category_id=str(entry.category_id),
            deletion_id=str(entry.id),
        )
        match mode:
            case CascadeDelete():
                outcome.deleted_services_count = affected
                outcome.message = f"Category '{name}' and {affected} dependent service(s) deleted"
            case MigrateDelete() | SafeDelete():
                outcome.migrated_services_count = affected
                if target is not None:
                    outcome.target_category_id = str(target.id)
                    outcome.message = (
                        f"Category '{name}' deleted; {affected} service(s) migrated to '{target.name}'"
                    )
            case ForceDelete():
                outcome.orphaned_services_count = affected
                outcome.message = (
                    f"Category '{name}' force deleted; {affected} service(s) left without a category"
                )
        return outcome

    def _journal_to_response(self, entry: CategoryDeletion) -> CategoryDeletionResponse:
        return CategoryDeletionResponse(
            id=str(entry.id),
            category_id=str(entry.category_id),
            category_name=entry.category_name,
            mode=entry.mode,
            target_category_id=str(entry.target_category_id) if entry.target_category_id else None,
            step=entry.step,
            affected_services=entry.affected_services,
            created_at=entry.created_at,
            updated_at=entry.updated_at,
        )


# 싱글턴 인스턴스 — Singleton instance
category_deletion_service: CategoryDeletionService = CategoryDeletionService()
