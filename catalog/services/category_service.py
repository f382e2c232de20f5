"""카테고리 서비스 — 카테고리 생성/조회/수정 비즈니스 로직.

Category Service — Business logic for creating, reading, and updating
categories. Deletion lives in category_deletion_service because it has
side effects on services.
"""

from typing import Any, Sequence
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.models.catalog import Category, Service, normalize_category_name
from catalog.repositories.category_repository import category_repository
from catalog.repositories.service_repository import service_repository
from catalog.schemas.catalog import (
    CategoryCreate,
    CategoryImage,
    CategoryResponse,
    CategoryStatsItem,
    CategoryUpdate,
    ServiceSummary,
)
from catalog.utils.exceptions import BadRequestError, DuplicateError, NotFoundError
from catalog.utils.ids import parse_id


class CategoryService:
    """카테고리 관련 비즈니스 로직을 처리하는 서비스.

    Service handling category business logic.
    Category names are unique ignoring case.
    """

    def _to_response(
        self,
        category: Category,
        service_count: int,
        services: Sequence[Service] | None = None,
    ) -> CategoryResponse:
        """카테고리 모델을 응답 스키마로 변환합니다.

        Convert a Category model instance to a CategoryResponse schema.

        Args:
            category: 카테고리 모델 (Category model instance)
            service_count: 소속 서비스 수 (Derived service count)
            services: 소속 서비스 목록, None이면 미포함 (Services to embed, if any)

        Returns:
            CategoryResponse: 카테고리 응답 (Category response)
        """
        image: CategoryImage | None = None
        if category.image_url:
            image = CategoryImage(url=category.image_url, name=category.image_name)
        return CategoryResponse(
            id=str(category.id),
            name=category.name,
            description=category.description,
            image=image,
            tags=list(category.tags or []),
            service_count=service_count,
            services=(
                [
                    ServiceSummary(
                        id=str(s.id),
                        title=s.title,
                        is_active=s.is_active,
                        is_popular=s.is_popular,
                    )
                    for s in services
                ]
                if services is not None
                else None
            ),
            created_at=category.created_at,
            updated_at=category.updated_at,
        )

    async def list_categories(
        self,
        db: AsyncSession,
        tag: str | None = None,
    ) -> list[CategoryResponse]:
        """카테고리 목록을 서비스 수와 함께 조회합니다.

        List categories with their service counts, newest first.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            tag: 태그 필터 (Optional tag filter)

        Returns:
            list[CategoryResponse]: 카테고리 목록 (List of category responses)
        """
        rows = await category_repository.get_all_with_counts(db, tag)
        return [self._to_response(c, n) for c, n in rows]

    async def get_category(
        self,
        db: AsyncSession,
        category_id: str | UUID,
        include_services: bool = False,
    ) -> CategoryResponse:
        """카테고리 상세 정보를 조회합니다.

        Retrieve a category, optionally embedding its services.

        Raises:
            BadRequestError: ID 형식 오류 (Malformed id)
            NotFoundError: 카테고리를 찾을 수 없을 때 (Category not found)
        """
        cid: UUID = parse_id(category_id)
        category: Category | None = await category_repository.get_by_id(db, cid)
        if category is None:
            raise NotFoundError("Category not found")

        if include_services:
            services: Sequence[Service] = await service_repository.get_by_category(db, cid)
            return self._to_response(category, len(services), services)

        count: int = await service_repository.count_by_category(db, cid)
        return self._to_response(category, count)

    async def create_category(
        self,
        db: AsyncSession,
        data: CategoryCreate,
    ) -> CategoryResponse:
        """새 카테고리를 생성합니다.

        Create a new category.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            data: 카테고리 생성 데이터 (Category creation data)

        Returns:
            CategoryResponse: 생성된 카테고리 응답 (Created category response)

        Raises:
            DuplicateError: 대소문자 무시 동일 이름 존재 (Name already used, ignoring case)
        """
        if await category_repository.get_by_name(db, data.name) is not None:
            raise DuplicateError("Category with this name already exists")

        try:
            # 동시 생성 경합 시 unique name_key 위반 — Concurrent insert of the same name
            async with db.begin_nested():
                category: Category = await category_repository.create(
                    db,
                    {
                        "name": data.name,
                        "name_key": normalize_category_name(data.name),
                        "description": data.description,
                        "image_url": data.image.url if data.image else None,
                        "image_name": data.image.name if data.image else None,
                        "tags": data.tags,
                    },
                )
        except IntegrityError:
            raise DuplicateError("Category with this name already exists")
        return self._to_response(category, 0)

    async def update_category(
        self,
        db: AsyncSession,
        category_id: str | UUID,
        data: CategoryUpdate,
    ) -> CategoryResponse:
        """카테고리 정보를 부분 수정합니다.

        Replace the fields present in the request on an existing category.

        Raises:
            BadRequestError: 이름을 null로 변경 시도 (Name explicitly set to null)
            NotFoundError: 카테고리를 찾을 수 없을 때 (Category not found)
            DuplicateError: 다른 카테고리와 이름 중복 (Name used by another category)
        """
        cid: UUID = parse_id(category_id)
        update_data: dict[str, Any] = data.model_dump(exclude_unset=True)

        if "name" in update_data:
            name: str | None = update_data["name"]
            if name is None:
                raise BadRequestError("Category name cannot be null")
            if await category_repository.get_by_name(db, name, exclude_id=cid) is not None:
                raise DuplicateError("Category with this name already exists")
            update_data["name_key"] = normalize_category_name(name)

        # 이미지 필드 분해 — Flatten the nested image into columns
        if "image" in update_data:
            image: dict[str, Any] | None = update_data.pop("image")
            update_data["image_url"] = image["url"] if image else None
            update_data["image_name"] = image.get("name") if image else None

        if update_data.get("tags", []) is None:
            update_data["tags"] = []

        try:
            async with db.begin_nested():
                category: Category | None = await category_repository.update(db, cid, update_data)
        except IntegrityError:
            raise DuplicateError("Category with this name already exists")
        if category is None:
            raise NotFoundError("Category not found")

        count: int = await service_repository.count_by_category(db, cid)
        return self._to_response(category, count)

    async def get_category_stats(self, db: AsyncSession) -> list[CategoryStatsItem]:
        """카테고리별 서비스 수 통계를 조회합니다.

        Service count per category, most services first.
        """
        rows = await category_repository.get_service_counts(db)
        return [
            CategoryStatsItem(id=str(cid), name=name, service_count=count)
            for cid, name, count in rows
        ]


# 싱글턴 인스턴스 — Singleton instance
category_service: CategoryService = CategoryService()
