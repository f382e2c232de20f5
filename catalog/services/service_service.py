"""서비스(판매 항목) 서비스 — 서비스 CRUD 비즈니스 로직.

Service Service — Business logic for the catalog's sellable services.
Creating a service or moving it to another category holds that
category's lock and commits before releasing it, so it cannot interleave
with a deletion of the same category in this process.
"""

from typing import Any, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from catalog.models.catalog import Category, Service
from catalog.repositories.category_repository import category_repository
from catalog.repositories.service_repository import service_repository
from catalog.schemas.catalog import (
    CategoryImage,
    CategoryStatsItem,
    ServiceCreate,
    ServiceResponse,
    ServiceStats,
    ServiceUpdate,
)
from catalog.utils.exceptions import BadRequestError, NotFoundError
from catalog.utils.ids import parse_id
from catalog.utils.locks import category_locks


class ServiceService:
    """서비스 관련 비즈니스 로직을 처리하는 서비스.

    Service handling business logic for catalog services.
    """

    def _to_response(self, service: Service, is_orphaned: bool) -> ServiceResponse:
        """서비스 모델을 응답 스키마로 변환합니다.

        Convert a Service model instance to a ServiceResponse schema.
        """
        image: CategoryImage | None = None
        if service.image_url:
            image = CategoryImage(url=service.image_url, name=service.image_name)
        return ServiceResponse(
            id=str(service.id),
            category_id=str(service.category_id),
            title=service.title,
            description=service.description,
            is_active=service.is_active,
            is_popular=service.is_popular,
            tags=list(service.tags or []),
            image=image,
            is_orphaned=is_orphaned,
            created_at=service.created_at,
            updated_at=service.updated_at,
        )

    async def _to_responses(
        self,
        db: AsyncSession,
        services: Sequence[Service],
    ) -> list[ServiceResponse]:
        """서비스 목록을 끊어진 참조 여부와 함께 변환합니다.

        Convert services, flagging those whose category no longer exists.
        """
        existing: set[UUID] = await category_repository.get_existing_ids(
            db, {s.category_id for s in services}
        )
        return [self._to_response(s, s.category_id not in existing) for s in services]

    async def list_services(
        self,
        db: AsyncSession,
        category_id: str | UUID | None = None,
        active_only: bool = False,
    ) -> list[ServiceResponse]:
        """서비스 목록을 조회합니다.

        List services, optionally restricted to one category.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            category_id: 카테고리 필터 (Optional category filter)
            active_only: 활성 서비스만 (Only active services)

        Returns:
            list[ServiceResponse]: 서비스 목록 (List of service responses)
        """
        if category_id is not None:
            cid: UUID = parse_id(category_id)
            services: Sequence[Service] = await service_repository.get_by_category(db, cid, active_only)
        else:
            filters: dict[str, Any] = {"is_active": True} if active_only else {}
            services = await service_repository.get_all(db, filters, order_by=Service.created_at)
        return await self._to_responses(db, services)

    async def list_category_services(
        self,
        db: AsyncSession,
        category_id: str | UUID,
        active_only: bool = False,
    ) -> list[ServiceResponse]:
        """존재하는 카테고리의 서비스 목록을 조회합니다.

        List the services of a category that must exist.

        Raises:
            NotFoundError: 카테고리를 찾을 수 없을 때 (Category not found)
        """
        cid: UUID = parse_id(category_id)
        if await category_repository.get_by_id(db, cid) is None:
            raise NotFoundError("Category not found")
        services: Sequence[Service] = await service_repository.get_by_category(db, cid, active_only)
        return [self._to_response(s, False) for s in services]

    async def list_orphaned_services(self, db: AsyncSession) -> list[ServiceResponse]:
        """소속 카테고리가 없는 서비스를 조회합니다.

        List services left with a dangling category_id (e.g. after a
        force deletion).
        """
        services: Sequence[Service] = await service_repository.get_orphaned(db)
        return [self._to_response(s, True) for s in services]

    async def list_popular_services(
        self,
        db: AsyncSession,
        limit: int = 10,
    ) -> list[ServiceResponse]:
        """활성 상태의 인기 서비스를 최신순으로 조회합니다.

        List active popular services, newest first.
        """
        services: Sequence[Service] = await service_repository.get_popular(db, limit)
        return await self._to_responses(db, services)

    async def get_service_stats(self, db: AsyncSession) -> ServiceStats:
        """서비스 통계를 조회합니다.

        Totals for all, active, popular and orphaned services, plus the
        service count of every non-empty category.
        """
        rows = await category_repository.get_service_counts(db)
        return ServiceStats(
            total=await service_repository.count(db),
            active=await service_repository.count(db, {"is_active": True}),
            popular=await service_repository.count(db, {"is_popular": True}),
            orphaned=await service_repository.count_orphaned(db),
            by_category=[
                CategoryStatsItem(id=str(cid), name=name, service_count=count)
                for cid, name, count in rows
                if count > 0
            ],
        )

    async def toggle_flag(
        self,
        db: AsyncSession,
        service_id: str | UUID,
        flag: str,
    ) -> ServiceResponse:
        """서비스의 불리언 플래그(is_active / is_popular)를 반전합니다.

        Flip is_active or is_popular on a service. The caller commits.

        Raises:
            NotFoundError: 서비스를 찾을 수 없을 때 (Service not found)
        """
        sid: UUID = parse_id(service_id, "service")
        service: Service | None = await service_repository.get_by_id(db, sid)
        if service is None:
            raise NotFoundError("Service not found")
        updated: Service | None = await service_repository.update(
            db, sid, {flag: not getattr(service, flag)}
        )
        category: Category | None = await category_repository.get_by_id(db, updated.category_id)
        return self._to_response(updated, category is None)

    async def get_service(
        self,
        db: AsyncSession,
        service_id: str | UUID,
    ) -> ServiceResponse:
        """서비스 상세 정보를 조회합니다.

        Raises:
            NotFoundError: 서비스를 찾을 수 없을 때 (Service not found)
        """
        sid: UUID = parse_id(service_id, "service")
        service: Service | None = await service_repository.get_by_id(db, sid)
        if service is None:
            raise NotFoundError("Service not found")
        category: Category | None = await category_repository.get_by_id(db, service.category_id)
        return self._to_response(service, category is None)

    async def create_service(
        self,
        db: AsyncSession,
        data: ServiceCreate,
    ) -> ServiceResponse:
        """카테고리 아래에 새 서비스를 생성하고 커밋합니다.

        Create a service under an existing category and commit while
        holding the category lock.

        Raises:
            BadRequestError: 카테고리 ID 형식 오류 (Malformed category id)
            NotFoundError: 카테고리를 찾을 수 없을 때 (Category not found)
        """
        cid: UUID = parse_id(data.category_id)
        async with category_locks.hold(cid):
            if await category_repository.get_by_id(db, cid) is None:
                raise NotFoundError("Category not found")

            service: Service = await service_repository.create(
                db,
                {
                    "category_id": cid,
                    "title": data.title.strip(),
                    "description": data.description.strip(),
                    "is_active": data.is_active,
                    "is_popular": data.is_popular,
                    "tags": data.tags,
                    "image_url": data.image.url if data.image else None,
                    "image_name": data.image.name if data.image else None,
                },
            )
            await db.commit()
        return self._to_response(service, False)

    async def update_service(
        self,
        db: AsyncSession,
        service_id: str | UUID,
        data: ServiceUpdate,
    ) -> ServiceResponse:
        """서비스를 부분 수정하고 커밋합니다.

        Update a service. Moving it to another category requires that
        category to exist and holds its lock until committed.

        Raises:
            NotFoundError: 서비스 또는 대상 카테고리 없음 (Service or target category not found)
            BadRequestError: 필수 필드를 null로 변경 (Required field set to null)
        """
        sid: UUID = parse_id(service_id, "service")
        update_data: dict[str, Any] = data.model_dump(exclude_unset=True)

        for required in ("title", "description", "is_active", "is_popular", "category_id"):
            if required in update_data and update_data[required] is None:
                raise BadRequestError(f"Service {required} cannot be null")

        if "image" in update_data:
            image: dict[str, Any] | None = update_data.pop("image")
            update_data["image_url"] = image["url"] if image else None
            update_data["image_name"] = image.get("name") if image else None

        if update_data.get("tags", []) is None:
            update_data["tags"] = []

        locked: tuple[UUID, ...] = ()
        if "category_id" in update_data:
            update_data["category_id"] = parse_id(update_data["category_id"])
            locked = (update_data["category_id"],)

        async with category_locks.hold(*locked):
            if locked and await category_repository.get_by_id(db, locked[0]) is None:
                raise NotFoundError("Category not found")

            service: Service | None = await service_repository.update(db, sid, update_data)
            if service is None:
                raise NotFoundError("Service not found")
            await db.commit()

        category: Category | None = await category_repository.get_by_id(db, service.category_id)
        return self._to_response(service, category is None)

    async def delete_service(
        self,
        db: AsyncSession,
        service_id: str | UUID,
    ) -> None:
        """서비스를 삭제합니다.

        Raises:
            NotFoundError: 서비스를 찾을 수 없을 때 (Service not found)
        """
        sid: UUID = parse_id(service_id, "service")
        deleted: bool = await service_repository.delete(db, sid)
        if not deleted:
            raise NotFoundError("Service not found")


# 싱글턴 인스턴스 — Singleton instance
service_service: ServiceService = ServiceService()
