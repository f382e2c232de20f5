"""카테고리 라우터 — 카테고리 CRUD 및 삭제 엔드포인트.

Category Router — CRUD endpoints plus deletion preview, deletion with
dependent-service resolution, bulk deletion, and reconciliation of
incomplete deletions.
"""

from typing import Annotated

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.database import get_db
from catalog.schemas.catalog import (
    CategoryCreate,
    CategoryResponse,
    CategoryStatsItem,
    CategoryUpdate,
    ServiceResponse,
)
from catalog.schemas.deletion import (
    BulkDeleteRequest,
    BulkDeleteResult,
    CategoryDeletionResponse,
    DeleteCategoryOptions,
    DeletionInfo,
    DeletionOutcome,
)
from catalog.services.category_deletion_service import category_deletion_service
from catalog.services.category_service import category_service
from catalog.services.service_service import service_service

router: APIRouter = APIRouter()


@router.get("/", response_model=list[CategoryResponse])
async def list_categories(
    db: Annotated[AsyncSession, Depends(get_db)],
    tag: Annotated[str | None, Query()] = None,
) -> list[CategoryResponse]:
    """카테고리 목록을 조회합니다.

    List categories with service counts.
    """
    return await category_service.list_categories(db, tag)


@router.post("/", response_model=CategoryResponse, status_code=201)
async def create_category(
    data: CategoryCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> CategoryResponse:
    """새 카테고리를 생성합니다.

    Create a new category.
    """
    result: CategoryResponse = await category_service.create_category(db, data)
    await db.commit()
    return result


@router.get("/stats", response_model=list[CategoryStatsItem])
async def get_category_stats(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[CategoryStatsItem]:
    """카테고리별 서비스 수 통계를 조회합니다.

    Service count per category.
    """
    return await category_service.get_category_stats(db)


@router.post("/bulk-delete", response_model=BulkDeleteResult)
async def bulk_delete_categories(
    data: BulkDeleteRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> BulkDeleteResult:
    """여러 카테고리를 같은 옵션으로 삭제합니다.

    Delete many categories with one set of options. Always 200; per-id
    failures are listed in ``failed``.
    """
    return await category_deletion_service.bulk_delete_categories(
        db, data.category_ids, data.options
    )


@router.get("/deletions/incomplete", response_model=list[CategoryDeletionResponse])
async def list_incomplete_deletions(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[CategoryDeletionResponse]:
    """완료되지 않은 삭제 목록을 조회합니다.

    List deletions that stopped before the category was removed.
    """
    return await category_deletion_service.list_incomplete_deletions(db)


@router.post("/deletions/{deletion_id}/resume", response_model=DeletionOutcome)
async def resume_deletion(
    deletion_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> DeletionOutcome:
    """중단된 삭제를 재개합니다.

    Resume an incomplete deletion with its recorded mode.
    """
    return await category_deletion_service.resume_deletion(db, deletion_id)


@router.get("/{category_id}", response_model=CategoryResponse)
async def get_category(
    category_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    include_services: Annotated[bool, Query()] = False,
) -> CategoryResponse:
    """카테고리 상세 정보를 조회합니다.

    Retrieve a category, optionally with its services.
    """
    return await category_service.get_category(db, category_id, include_services)


@router.put("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: str,
    data: CategoryUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> CategoryResponse:
    """카테고리 정보를 수정합니다.

    Update an existing category (partial replace).
    """
    result: CategoryResponse = await category_service.update_category(db, category_id, data)
    await db.commit()
    return result


@router.get("/{category_id}/services", response_model=list[ServiceResponse])
async def list_category_services(
    category_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    active_only: Annotated[bool, Query()] = False,
) -> list[ServiceResponse]:
    """카테고리에 속한 서비스 목록을 조회합니다.

    List the services of a category.
    """
    return await service_service.list_category_services(db, category_id, active_only)


@router.get("/{category_id}/deletion-info", response_model=DeletionInfo)
async def get_deletion_info(
    category_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> DeletionInfo:
    """카테고리 삭제 영향을 미리 조회합니다.

    Preview what deleting the category would affect.
    """
    return await category_deletion_service.get_deletion_info(db, category_id)


@router.get("/{category_id}/deletions", response_model=list[CategoryDeletionResponse])
async def list_category_deletions(
    category_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[CategoryDeletionResponse]:
    """카테고리 삭제 이력을 조회합니다.

    Deletion journal entries for a category, including deleted ones.
    """
    return await category_deletion_service.list_category_deletions(db, category_id)


@router.delete("/{category_id}", response_model=DeletionOutcome)
async def delete_category(
    category_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    force: Annotated[bool, Query()] = False,
    cascade: Annotated[bool, Query()] = False,
    migrate_to: Annotated[str | None, Query()] = None,
    create_default: Annotated[bool, Query()] = False,
    body: Annotated[DeleteCategoryOptions | None, Body()] = None,
) -> DeletionOutcome:
    """카테고리를 삭제합니다.

    Delete a category. Options come from the query string and may be
    overridden field by field by a JSON body.
    """
    options = DeleteCategoryOptions(
        force=force,
        cascade=cascade,
        migrate_to=migrate_to,
        create_default=create_default,
    )
    if body is not None:
        # 본문 값이 쿼리보다 우선 — Body fields win over query parameters
        options = options.model_copy(update=body.model_dump(exclude_unset=True))
    return await category_deletion_service.delete_category(db, category_id, options)
