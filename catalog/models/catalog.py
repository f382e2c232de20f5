"""카탈로그 관련 SQLAlchemy ORM 모델 정의.

Catalog-related SQLAlchemy ORM model definitions.
Includes Category (grouping) and Service (sellable offering) entities.

Tables:
    - categories: 서비스 분류 (Named grouping of services)
    - services: 카테고리에 속한 서비스 (Service owned by a category)

서비스의 category_id는 DB 외래키 제약을 두지 않습니다. 강제 삭제(force)가
의도적으로 끊어진 참조를 남길 수 있어야 하기 때문입니다.
services.category_id carries no database FK constraint: force deletion
must be able to leave dangling references behind.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, DateTime, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from catalog.database import Base


def normalize_category_name(name: str) -> str:
    """카테고리 이름 정규화 키 — 대소문자 무시 유일성 비교에 사용.

    Normalized lookup key for case-insensitive category name uniqueness.
    """
    return name.strip().lower()


class Category(Base):
    """카테고리 모델 — 서비스를 묶는 이름 있는 분류.

    Category model — Named grouping that owns zero or more services.
    The service count is derived from the services table and never stored.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        name: 카테고리 이름 (Display name, unique ignoring case)
        name_key: 정규화된 이름 (Lower-cased name backing the unique index)
        description: 설명 (Optional description)
        image_url: 대표 이미지 URL (Optional image URL)
        image_name: 대표 이미지 이름 (Optional image display name)
        tags: 태그 목록 (Lower-cased tag set stored as a JSON list)
        created_at: 생성 일시 UTC (Creation timestamp in UTC)
        updated_at: 수정 일시 UTC (Last update timestamp in UTC)
    """

    __tablename__ = "categories"

    # 카테고리 고유 식별자 — Category unique identifier (UUID v4, auto-generated)
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 카테고리 이름 — Display name (max 100 chars, required)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    # 정규화 이름 — Case-insensitive uniqueness key
    name_key: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    image_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    # 수정 일시 — Last modification timestamp (UTC, auto-updated)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))


class Service(Base):
    """서비스 모델 — 하나의 카테고리에 속한 판매 가능한 서비스.

    Service model — Sellable offering belonging to exactly one category.
    category_id may dangle after a force deletion; read paths report it
    as orphaned instead of failing.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        category_id: 소속 카테고리 ID (Owning category identifier)
        title: 서비스 제목 (Service title)
        description: 서비스 설명 (Service description)
        is_active: 활성 상태 (Active status flag)
        is_popular: 인기 서비스 여부 (Popular flag)
        tags: 태그 목록 (Lower-cased tags)
        image_url: 서비스 이미지 URL (Optional image URL)
        image_name: 서비스 이미지 이름 (Optional image display name)
    """

    __tablename__ = "services"
    __table_args__ = (
        Index("ix_services_category_active_popular", "category_id", "is_active", "is_popular"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 소속 카테고리 — Owning category (indexed, no FK constraint)
    category_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    is_popular: Mapped[bool] = mapped_column(Boolean, default=False)
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    image_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))
