"""카테고리 삭제 저널 ORM 모델.

Category deletion journal ORM model.
Each deletion attempt writes one row and advances its step as the
service-side mutation and the category delete are committed, so a
reconciliation job can find deletions that stopped half-way.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from catalog.database import Base

# 삭제 단계 — Deletion steps, in the order they are reached
STEP_STARTED: str = "started"
STEP_SERVICES_RESOLVED: str = "services_resolved"
STEP_COMPLETED: str = "completed"


class CategoryDeletion(Base):
    """카테고리 삭제 저널 항목.

    Journal entry for a single category deletion.

    Attributes:
        id: 저널 항목 UUID (Journal entry identifier)
        category_id: 삭제 대상 카테고리 ID (Source category identifier)
        category_name: 삭제 시점의 카테고리 이름 (Category name at deletion time)
        mode: 삭제 모드 (simple | cascade | migrate | safe | force)
        target_category_id: 이동 대상 카테고리 ID (Migration target, if any)
        step: 완료된 단계 (started | services_resolved | completed)
        affected_services: 영향받은 서비스 수 (Services deleted/migrated/orphaned)
    """

    __tablename__ = "category_deletions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    category_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    category_name: Mapped[str] = mapped_column(String(100), nullable=False)
    mode: Mapped[str] = mapped_column(String(20), nullable=False)
    target_category_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    # 진행 단계 — Last completed step
    step: Mapped[str] = mapped_column(String(30), nullable=False, default=STEP_STARTED, index=True)
    affected_services: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))
