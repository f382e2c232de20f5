"""카테고리 삭제 모드 정의 및 해석.

Category deletion modes and their resolution.
A deletion runs in exactly one mode. DeleteCategoryOptions flags are
turned into a mode once, here, so the precedence between flags lives
in a single function.
"""

from dataclasses import dataclass
from typing import ClassVar
from uuid import UUID

from catalog.schemas.deletion import DeleteCategoryOptions
from catalog.utils.ids import parse_id


@dataclass(frozen=True)
class SimpleDelete:
    """종속 서비스가 없을 때만 삭제 (Delete only when no service depends on the category)."""

    kind: ClassVar[str] = "simple"


@dataclass(frozen=True)
class CascadeDelete:
    """종속 서비스까지 삭제 (Delete dependent services, then the category)."""

    kind: ClassVar[str] = "cascade"


@dataclass(frozen=True)
class MigrateDelete:
    """종속 서비스를 지정 카테고리로 이동 후 삭제 (Move services to target, then delete)."""

    target_id: UUID
    kind: ClassVar[str] = "migrate"


@dataclass(frozen=True)
class SafeDelete:
    """종속 서비스를 기본 카테고리로 이동 후 삭제 (Move services to the fallback category)."""

    kind: ClassVar[str] = "safe"


@dataclass(frozen=True)
class ForceDelete:
    """종속 서비스를 그대로 두고 삭제 (Delete, leaving dangling references)."""

    kind: ClassVar[str] = "force"


DeletionMode = SimpleDelete | CascadeDelete | MigrateDelete | SafeDelete | ForceDelete

# Conflict 메시지에 안내되는 대안 옵션 — Alternatives listed when a simple delete is refused
ALTERNATIVE_OPTIONS: tuple[str, ...] = ("cascade", "migrate_to", "create_default", "force")


def resolve_deletion_mode(options: DeleteCategoryOptions) -> DeletionMode:
    """삭제 옵션을 하나의 삭제 모드로 해석합니다.

    Resolve delete options into one deletion mode.
    Precedence: cascade > migrate_to > create_default > force > simple.

    Args:
        options: 삭제 옵션 (Delete options)

    Returns:
        DeletionMode: 해석된 삭제 모드 (Resolved mode)

    Raises:
        BadRequestError: migrate_to 형식이 잘못됨 (Malformed migrate_to id)
    """
    if options.cascade:
        return CascadeDelete()
    if options.migrate_to:
        return MigrateDelete(target_id=parse_id(options.migrate_to, "target category"))
    if options.create_default:
        return SafeDelete()
    if options.force:
        return ForceDelete()
    return SimpleDelete()


def mode_from_journal(kind: str, target_id: UUID | None) -> DeletionMode:
    """저널에 기록된 모드 이름으로 삭제 모드를 복원합니다.

    Rebuild a deletion mode from the name recorded in the journal.
    """
    match kind:
        case "simple":
            return SimpleDelete()
        case "cascade":
            return CascadeDelete()
        case "migrate" if target_id is not None:
            return MigrateDelete(target_id=target_id)
        case "safe":
            return SafeDelete()
        case "force":
            return ForceDelete()
    raise ValueError(f"Unknown deletion mode in journal: {kind!r}")
