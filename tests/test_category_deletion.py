"""카테고리 삭제 서비스 테스트.

Category deletion service tests — simple, cascade, migrate, safe, and
force deletion, the deletion preview, and mode precedence.
Runs against the service layer directly with the test session.
"""

import uuid

import pytest
from sqlalchemy import func, select

from catalog.models.catalog import Category, Service
from catalog.repositories.category_repository import category_repository
from catalog.repositories.service_repository import service_repository
from catalog.schemas.deletion import DeleteCategoryOptions
from catalog.services.category_deletion_service import category_deletion_service
from catalog.services.deletion_modes import (
    CascadeDelete,
    ForceDelete,
    MigrateDelete,
    SafeDelete,
    SimpleDelete,
    resolve_deletion_mode,
)
from catalog.utils.exceptions import BadRequestError, ConflictError, NotFoundError


async def _service_total(db) -> int:
    return (await db.execute(select(func.count()).select_from(Service))).scalar()


async def _category_exists(db, category_id) -> bool:
    return await category_repository.get_by_id(db, category_id) is not None


class TestDeletionModeResolution:
    """삭제 옵션 → 모드 해석 테스트."""

    def test_no_flags_is_simple(self):
        assert resolve_deletion_mode(DeleteCategoryOptions()) == SimpleDelete()

    def test_cascade_wins_over_everything(self):
        target = str(uuid.uuid4())
        options = DeleteCategoryOptions(cascade=True, migrate_to=target, create_default=True, force=True)
        assert isinstance(resolve_deletion_mode(options), CascadeDelete)

    def test_migrate_wins_over_create_default_and_force(self):
        target = uuid.uuid4()
        options = DeleteCategoryOptions(migrate_to=str(target), create_default=True, force=True)
        assert resolve_deletion_mode(options) == MigrateDelete(target_id=target)

    def test_create_default_wins_over_force(self):
        options = DeleteCategoryOptions(create_default=True, force=True)
        assert isinstance(resolve_deletion_mode(options), SafeDelete)

    def test_force_alone(self):
        assert isinstance(resolve_deletion_mode(DeleteCategoryOptions(force=True)), ForceDelete)

    def test_malformed_migrate_target(self):
        with pytest.raises(BadRequestError):
            resolve_deletion_mode(DeleteCategoryOptions(migrate_to="not-a-uuid"))


class TestDeletionInfo:
    """삭제 미리보기 테스트."""

    async def test_info_lists_dependent_services(self, db, make_category, make_services):
        """서비스 A, B가 있으면 안전 삭제 불가, 목록에 정확히 A, B."""
        category = await make_category("Cleaning")
        a, b = await make_services(category, "Window cleaning", "Carpet cleaning")

        info = await category_deletion_service.get_deletion_info(db, category.id)

        assert info.category_name == "Cleaning"
        assert info.service_count == 2
        assert info.can_delete_safely is False
        assert {(s.id, s.title) for s in info.services} == {
            (str(a.id), "Window cleaning"),
            (str(b.id), "Carpet cleaning"),
        }

    async def test_info_empty_category_is_safe(self, db, empty_category):
        info = await category_deletion_service.get_deletion_info(db, str(empty_category.id))
        assert info.service_count == 0
        assert info.services == []
        assert info.can_delete_safely is True

    async def test_info_not_found(self, db):
        with pytest.raises(NotFoundError):
            await category_deletion_service.get_deletion_info(db, uuid.uuid4())

    async def test_info_malformed_id(self, db):
        with pytest.raises(BadRequestError):
            await category_deletion_service.get_deletion_info(db, "abc")

    async def test_info_does_not_mutate(self, db, plumbing):
        await category_deletion_service.get_deletion_info(db, plumbing.id)
        assert await _category_exists(db, plumbing.id)
        assert await service_repository.count_by_category(db, plumbing.id) == 3


class TestSimpleDelete:
    """단순 삭제 테스트."""

    async def test_simple_delete_empty_category(self, db, empty_category, plumbing):
        """종속 서비스가 없으면 삭제 성공, 서비스 저장소 변화 없음."""
        before = await _service_total(db)

        outcome = await category_deletion_service.simple_delete(db, empty_category.id)

        assert outcome.success is True
        assert outcome.mode == "simple"
        assert outcome.deleted_services_count is None
        assert outcome.migrated_services_count is None
        assert not await _category_exists(db, empty_category.id)
        assert await _service_total(db) == before

    async def test_simple_delete_with_services_conflicts(self, db, plumbing):
        """종속 서비스가 있으면 Conflict, 아무것도 변경되지 않음."""
        with pytest.raises(ConflictError) as exc_info:
            await category_deletion_service.simple_delete(db, plumbing.id)

        detail = exc_info.value.detail
        assert "3 service(s)" in detail
        for alternative in ("cascade", "migrate_to", "create_default", "force"):
            assert alternative in detail
        assert await _category_exists(db, plumbing.id)
        assert await service_repository.count_by_category(db, plumbing.id) == 3
        assert await category_deletion_service.list_incomplete_deletions(db) == []

    async def test_delete_missing_category(self, db):
        with pytest.raises(NotFoundError):
            await category_deletion_service.delete_category(db, uuid.uuid4())


class TestCascadeDelete:
    """연쇄 삭제 테스트."""

    async def test_cascade_removes_category_and_services(self, db, plumbing, make_category, make_services):
        other = await make_category("Electrical")
        await make_services(other, "Rewiring")

        outcome = await category_deletion_service.cascade_delete(db, plumbing.id)

        assert outcome.mode == "cascade"
        assert outcome.deleted_services_count == 3
        assert not await _category_exists(db, plumbing.id)
        assert await service_repository.count_by_category(db, plumbing.id) == 0
        # 다른 카테고리의 서비스는 유지 — Other categories untouched
        assert await service_repository.count_by_category(db, other.id) == 1

    async def test_cascade_twice_is_not_found(self, db, plumbing):
        """두 번째 연쇄 삭제는 NotFound, 추가 부작용 없음."""
        cid = plumbing.id
        await category_deletion_service.cascade_delete(db, cid)
        total = await _service_total(db)

        with pytest.raises(NotFoundError):
            await category_deletion_service.cascade_delete(db, cid)
        assert await _service_total(db) == total

    async def test_cascade_empty_category(self, db, empty_category):
        outcome = await category_deletion_service.cascade_delete(db, empty_category.id)
        assert outcome.deleted_services_count == 0


class TestMigrateDelete:
    """지정 카테고리로 이동 후 삭제 테스트."""

    async def test_migrate_moves_every_service(self, db, plumbing, make_category, make_services):
        target = await make_category("Home repair")
        await make_services(target, "Door fitting")

        outcome = await category_deletion_service.migrate_delete(db, plumbing.id, target.id)

        assert outcome.mode == "migrate"
        assert outcome.migrated_services_count == 3
        assert outcome.target_category_id == str(target.id)
        assert "Home repair" in outcome.message
        assert not await _category_exists(db, plumbing.id)
        assert await service_repository.count_by_category(db, target.id) == 4
        assert await service_repository.count_by_category(db, plumbing.id) == 0

    async def test_migrate_to_self_is_invalid(self, db, plumbing):
        """자기 자신으로 이동하면 InvalidArgument, 변경 없음."""
        with pytest.raises(BadRequestError):
            await category_deletion_service.migrate_delete(db, plumbing.id, plumbing.id)
        assert await _category_exists(db, plumbing.id)
        assert await service_repository.count_by_category(db, plumbing.id) == 3

    async def test_migrate_to_missing_target(self, db, plumbing):
        with pytest.raises(NotFoundError):
            await category_deletion_service.migrate_delete(db, plumbing.id, uuid.uuid4())
        assert await _category_exists(db, plumbing.id)
        assert await service_repository.count_by_category(db, plumbing.id) == 3


class TestSafeDelete:
    """기본 카테고리(Uncategorized)로 이동 후 삭제 테스트."""

    async def _fallback_categories(self, db) -> list[Category]:
        result = await db.execute(select(Category).where(Category.name_key == "uncategorized"))
        return list(result.scalars().all())

    async def test_safe_delete_creates_fallback(self, db, plumbing):
        outcome = await category_deletion_service.safe_delete(db, plumbing.id)

        fallbacks = await self._fallback_categories(db)
        assert len(fallbacks) == 1
        assert fallbacks[0].name == "Uncategorized"
        assert outcome.mode == "safe"
        assert outcome.migrated_services_count == 3
        assert outcome.target_category_id == str(fallbacks[0].id)
        assert await service_repository.count_by_category(db, fallbacks[0].id) == 3
        assert not await _category_exists(db, plumbing.id)

    async def test_safe_delete_twice_converges_on_one_fallback(self, db, plumbing, make_category, make_services):
        """두 카테고리를 연속 안전 삭제해도 Uncategorized는 하나."""
        electrical = await make_category("Electrical")
        await make_services(electrical, "Rewiring", "Socket install")

        first = await category_deletion_service.safe_delete(db, plumbing.id)
        second = await category_deletion_service.safe_delete(db, electrical.id)

        fallbacks = await self._fallback_categories(db)
        assert len(fallbacks) == 1
        assert first.target_category_id == second.target_category_id
        assert await service_repository.count_by_category(db, fallbacks[0].id) == 5

    async def test_safe_delete_reuses_existing_fallback_ignoring_case(self, db, plumbing, make_category):
        existing = await make_category("uncategorized")

        outcome = await category_deletion_service.safe_delete(db, plumbing.id)

        assert outcome.target_category_id == str(existing.id)
        assert len(await self._fallback_categories(db)) == 1

    async def test_safe_delete_without_services_creates_nothing(self, db, empty_category):
        outcome = await category_deletion_service.safe_delete(db, empty_category.id)
        assert outcome.migrated_services_count == 0
        assert outcome.target_category_id is None
        assert await self._fallback_categories(db) == []

    async def test_safe_delete_of_fallback_itself_is_invalid(self, db, make_category, make_services):
        fallback = await make_category("Uncategorized")
        await make_services(fallback, "Odd job")
        with pytest.raises(BadRequestError):
            await category_deletion_service.safe_delete(db, fallback.id)
        assert await _category_exists(db, fallback.id)


class TestForceDelete:
    """강제 삭제 테스트."""

    async def test_force_leaves_dangling_references(self, db, plumbing):
        cid = plumbing.id
        outcome = await category_deletion_service.force_delete(db, cid)

        assert outcome.mode == "force"
        assert outcome.orphaned_services_count == 3
        assert not await _category_exists(db, cid)
        # 서비스는 그대로 — Services keep the old category_id
        assert await service_repository.count_by_category(db, cid) == 3
        orphaned = await service_repository.get_orphaned(db)
        assert {s.category_id for s in orphaned} == {cid}
