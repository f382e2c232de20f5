"""카테고리 및 서비스 관련 Pydantic 요청/응답 스키마 정의.

Category and Service Pydantic request/response schema definitions.
Covers the plain create/read/update operations of the catalog.
"""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator


def _normalize_tags(tags: list[str] | None) -> list[str] | None:
    """태그를 소문자로 정리하고 중복을 제거합니다 (입력 순서 유지).

    Lower-case, trim and de-duplicate tags, keeping first-seen order.
    """
    if tags is None:
        return None
    seen: list[str] = []
    for tag in tags:
        cleaned = tag.strip().lower()
        if cleaned and cleaned not in seen:
            seen.append(cleaned)
    return seen


# === 카테고리 (Category) 스키마 ===

class CategoryImage(BaseModel):
    """카테고리/서비스 이미지 정보.

    Image reference attached to a category or service.
    """

    url: str = Field(max_length=500)
    name: str | None = Field(default=None, max_length=255)


class CategoryCreate(BaseModel):
    """카테고리 생성 요청 스키마.

    Category creation request schema.

    Attributes:
        name: 카테고리 이름 (Category name, unique ignoring case)
        description: 설명 (Optional description)
        image: 대표 이미지 (Optional image)
        tags: 태그 목록 (Tag set)
    """

    name: str = Field(min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    image: CategoryImage | None = None
    tags: list[str] = []

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Category name must not be blank")
        return value

    @field_validator("tags")
    @classmethod
    def _clean_tags(cls, value: list[str]) -> list[str]:
        return _normalize_tags(value) or []


class CategoryUpdate(BaseModel):
    """카테고리 수정 요청 스키마 (부분 업데이트).

    Category update request schema (partial update).
    Only fields present in the request body are replaced.
    """

    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    image: CategoryImage | None = None
    tags: list[str] | None = None

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str | None) -> str | None:
        if value is None:
            return value
        value = value.strip()
        if not value:
            raise ValueError("Category name must not be blank")
        return value

    @field_validator("tags")
    @classmethod
    def _clean_tags(cls, value: list[str] | None) -> list[str] | None:
        return _normalize_tags(value)


class ServiceSummary(BaseModel):
    """카테고리 상세에 포함되는 서비스 요약."""

    id: str
    title: str
    is_active: bool
    is_popular: bool


class CategoryResponse(BaseModel):
    """카테고리 응답 스키마.

    Category response schema returned from API.

    Attributes:
        id: 카테고리 UUID (Category unique identifier)
        name: 카테고리 이름 (Category name)
        service_count: 소속 서비스 수 — 조회 시 계산 (Derived service count)
        services: 소속 서비스 목록 — include_services 요청 시에만
                  (Dependent services, only when requested)
    """

    id: str  # 카테고리 UUID 문자열 (Category UUID as string)
    name: str
    description: str | None = None
    image: CategoryImage | None = None
    tags: list[str] = []
    service_count: int = 0
    services: list[ServiceSummary] | None = None
    created_at: datetime
    updated_at: datetime


class CategoryStatsItem(BaseModel):
    """카테고리별 서비스 수 통계 항목.

    Category statistics entry (service count per category).
    """

    id: str
    name: str
    service_count: int


class ServiceStats(BaseModel):
    """서비스 통계 응답 스키마.

    Service totals plus per-category counts (categories with at least one
    service, most services first).
    """

    total: int
    active: int
    popular: int
    orphaned: int
    by_category: list[CategoryStatsItem]


# === 서비스 (Service) 스키마 ===

class ServiceCreate(BaseModel):
    """서비스 생성 요청 스키마.

    Service creation request schema. The category must exist.
    """

    category_id: str  # 소속 카테고리 UUID (Owning category UUID)
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1, max_length=500)
    is_active: bool = True
    is_popular: bool = False
    tags: list[str] = []
    image: CategoryImage | None = None

    @field_validator("tags")
    @classmethod
    def _clean_tags(cls, value: list[str]) -> list[str]:
        return _normalize_tags(value) or []


class ServiceUpdate(BaseModel):
    """서비스 수정 요청 스키마 (부분 업데이트).

    Service update request schema (partial update). Changing category_id
    moves the service to another existing category.
    """

    category_id: str | None = None
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, min_length=1, max_length=500)
    is_active: bool | None = None
    is_popular: bool | None = None
    tags: list[str] | None = None
    image: CategoryImage | None = None

    @field_validator("tags")
    @classmethod
    def _clean_tags(cls, value: list[str] | None) -> list[str] | None:
        return _normalize_tags(value)


class ServiceResponse(BaseModel):
    """서비스 응답 스키마.

    Service response schema.

    Attributes:
        is_orphaned: 소속 카테고리가 존재하지 않음 — 강제 삭제로 남은 끊어진 참조
                     (True when category_id no longer resolves, e.g. after a force deletion)
    """

    id: str
    category_id: str
    title: str
    description: str
    is_active: bool
    is_popular: bool
    tags: list[str] = []
    image: CategoryImage | None = None
    is_orphaned: bool = False
    created_at: datetime
    updated_at: datetime
