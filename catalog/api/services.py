"""서비스 라우터 — 카탈로그 서비스 CRUD 엔드포인트.

Service Router — CRUD endpoints for catalog services, popular listing,
statistics, active/popular toggles, and the listing of services whose
category no longer exists.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.database import get_db
from catalog.schemas.catalog import ServiceCreate, ServiceResponse, ServiceStats, ServiceUpdate
from catalog.services.service_service import service_service

router: APIRouter = APIRouter()


@router.get("/", response_model=list[ServiceResponse])
async def list_services(
    db: Annotated[AsyncSession, Depends(get_db)],
    category_id: Annotated[str | None, Query()] = None,
    active_only: Annotated[bool, Query()] = False,
) -> list[ServiceResponse]:
    """서비스 목록을 조회합니다.

    List services, optionally filtered by category.
    """
    return await service_service.list_services(db, category_id, active_only)


@router.post("/", response_model=ServiceResponse, status_code=201)
async def create_service(
    data: ServiceCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ServiceResponse:
    """새 서비스를 생성합니다 (서비스 계층에서 커밋).

    Create a service under an existing category. Committed by the service
    layer while the category lock is held.
    """
    return await service_service.create_service(db, data)


@router.get("/orphaned", response_model=list[ServiceResponse])
async def list_orphaned_services(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[ServiceResponse]:
    """카테고리가 삭제되어 끊어진 서비스 목록을 조회합니다.

    List services whose category no longer exists.
    """
    return await service_service.list_orphaned_services(db)


@router.get("/popular", response_model=list[ServiceResponse])
async def list_popular_services(
    db: Annotated[AsyncSession, Depends(get_db)],
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
) -> list[ServiceResponse]:
    """인기 서비스 목록을 조회합니다.

    List active popular services, newest first.
    """
    return await service_service.list_popular_services(db, limit)


@router.get("/stats", response_model=ServiceStats)
async def get_service_stats(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ServiceStats:
    """서비스 통계를 조회합니다."""
    return await service_service.get_service_stats(db)


@router.get("/{service_id}", response_model=ServiceResponse)
async def get_service(
    service_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ServiceResponse:
    """서비스 상세 정보를 조회합니다."""
    return await service_service.get_service(db, service_id)


@router.put("/{service_id}", response_model=ServiceResponse)
async def update_service(
    service_id: str,
    data: ServiceUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ServiceResponse:
    """서비스 정보를 수정합니다 (서비스 계층에서 커밋)."""
    return await service_service.update_service(db, service_id, data)


@router.delete("/{service_id}", status_code=204)
async def delete_service(
    service_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> None:
    """서비스를 삭제합니다."""
    await service_service.delete_service(db, service_id)
    await db.commit()


@router.patch("/{service_id}/toggle-active", response_model=ServiceResponse)
async def toggle_service_active(
    service_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ServiceResponse:
    """서비스 활성 상태를 반전합니다 (Flip is_active)."""
    result: ServiceResponse = await service_service.toggle_flag(db, service_id, "is_active")
    await db.commit()
    return result


@router.patch("/{service_id}/toggle-popular", response_model=ServiceResponse)
async def toggle_service_popular(
    service_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ServiceResponse:
    """서비스 인기 표시를 반전합니다 (Flip is_popular)."""
    result: ServiceResponse = await service_service.toggle_flag(db, service_id, "is_popular")
    await db.commit()
    return result
