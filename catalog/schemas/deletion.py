"""카테고리 삭제 관련 Pydantic 요청/응답 스키마 정의.

Category deletion Pydantic request/response schema definitions.
Covers delete options, the deletion outcome, the deletion preview,
bulk deletion, and journal entries.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class DeleteCategoryOptions(BaseModel):
    """카테고리 삭제 옵션.

    Category delete options. When more than one is set, precedence is
    cascade > migrate_to > create_default > force; none set means a
    simple delete that refuses when services depend on the category.

    Attributes:
        force: 종속 서비스를 그대로 두고 삭제 (Delete, leaving dangling references)
        cascade: 종속 서비스까지 함께 삭제 (Delete dependent services too)
        migrate_to: 종속 서비스를 옮길 대상 카테고리 ID (Migration target id)
        create_default: 기본 카테고리로 서비스 이동 (Move services to the fallback category)
    """

    force: bool = False
    cascade: bool = False
    migrate_to: str | None = None
    create_default: bool = False


class DeletionOutcome(BaseModel):
    """카테고리 삭제 결과.

    Result of one category deletion.

    Attributes:
        success: 성공 여부 (Always True when returned; failures raise)
        message: 사람이 읽을 수 있는 결과 메시지 (Human-readable message)
        mode: 실제 적용된 삭제 모드 (Resolved deletion mode)
        deleted_services_count: 함께 삭제된 서비스 수 (cascade only)
        migrated_services_count: 이동된 서비스 수 (migrate / create_default only)
        orphaned_services_count: 끊어진 참조로 남은 서비스 수 (force only)
        target_category_id: 서비스가 이동된 카테고리 (Migration target)
        deletion_id: 삭제 저널 항목 ID (Journal entry id)
    """

    success: bool = True
    message: str
    mode: str
    category_id: str
    deleted_services_count: int | None = None
    migrated_services_count: int | None = None
    orphaned_services_count: int | None = None
    target_category_id: str | None = None
    deletion_id: str | None = None


class DependentService(BaseModel):
    """삭제 미리보기에 포함되는 종속 서비스."""

    id: str
    title: str


class DeletionInfo(BaseModel):
    """카테고리 삭제 미리보기 — 읽기 전용.

    Read-only preview of what deleting a category would affect.

    Attributes:
        can_delete_safely: 종속 서비스가 없어 단순 삭제 가능 (True iff service_count == 0)
    """

    category_id: str
    category_name: str
    service_count: int
    services: list[DependentService]
    can_delete_safely: bool


class BulkDeleteRequest(BaseModel):
    """카테고리 일괄 삭제 요청.

    Bulk deletion request. Ids are processed in order; duplicates are
    processed (and reported) once per occurrence.
    """

    category_ids: list[str] = Field(min_length=1)
    options: DeleteCategoryOptions = DeleteCategoryOptions()


class BulkDeleteFailure(BaseModel):
    """일괄 삭제 중 실패한 항목."""

    id: str
    error: str


class BulkDeleteResult(BaseModel):
    """카테고리 일괄 삭제 결과.

    Bulk deletion result. Individual failures never fail the batch.

    Attributes:
        successful: 삭제된 카테고리 ID 목록 (Deleted ids, in request order)
        failed: 실패한 ID와 사유 (Failed ids with their error message)
        total_deleted: 삭제된 카테고리 수 (Categories deleted)
        total_migrated: 이동된 서비스 총합 (Services migrated)
        total_services_deleted: 삭제된 서비스 총합 (Services deleted)
    """

    successful: list[str] = []
    failed: list[BulkDeleteFailure] = []
    total_deleted: int = 0
    total_migrated: int = 0
    total_services_deleted: int = 0


class CategoryDeletionResponse(BaseModel):
    """삭제 저널 항목 응답 스키마.

    Deletion journal entry response.
    """

    id: str
    category_id: str
    category_name: str
    mode: str
    target_category_id: str | None = None
    step: str
    affected_services: int
    created_at: datetime
    updated_at: datetime
