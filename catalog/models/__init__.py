"""SQLAlchemy ORM 모델 패키지 — 모든 도메인 모델의 중앙 임포트 지점.

SQLAlchemy ORM models package — Central import point for all domain models.
Importing from this package ensures all models are registered with the
SQLAlchemy metadata, which is required for Alembic migrations.

Modules:
    catalog: 카테고리 및 서비스 (Category and Service)
    deletion: 카테고리 삭제 저널 (Category deletion journal)
"""

from catalog.models.catalog import Category, Service
from catalog.models.deletion import CategoryDeletion

__all__ = [
    "Category", "Service",
    "CategoryDeletion",
]
