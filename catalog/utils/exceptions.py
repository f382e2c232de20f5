"""커스텀 HTTP 예외 클래스 모듈.

Custom HTTP exception classes module.
Provides pre-configured HTTPException subclasses for common error patterns
so services can raise domain errors without specifying status codes.

Usage:
    from catalog.utils.exceptions import NotFoundError, ConflictError
    raise NotFoundError("Category not found")
    raise ConflictError("Category has 3 dependent services")
"""

from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    """404 Not Found 예외 — 요청한 리소스를 찾을 수 없을 때 사용.

    404 Not Found exception.
    Raised when a category, migration target, service, or journal entry
    does not exist.

    Args:
        detail: 오류 메시지 (Error message, default: "Resource not found")
    """

    def __init__(self, detail: str = "Resource not found") -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class DuplicateError(HTTPException):
    """409 Conflict 예외 — 중복 리소스 생성 시도 시 사용.

    409 Conflict exception.
    Raised when a category name collides with an existing one ignoring case.

    Args:
        detail: 오류 메시지 (Error message, default: "Resource already exists")
    """

    def __init__(self, detail: str = "Resource already exists") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class ConflictError(HTTPException):
    """409 Conflict 예외 — 현재 상태에서 요청을 수행할 수 없을 때 사용.

    409 Conflict exception.
    Raised when a simple deletion is requested for a category that still
    owns services, or when an already completed deletion is resumed.

    Args:
        detail: 오류 메시지 (Error message, default: "Conflict with current state")
    """

    def __init__(self, detail: str = "Conflict with current state") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class BadRequestError(HTTPException):
    """400 Bad Request 예외 — 잘못된 요청 데이터 시 사용.

    400 Bad Request exception.
    Raised for malformed ids and invalid arguments beyond what Pydantic
    validation catches (e.g. migrating a category into itself).

    Args:
        detail: 오류 메시지 (Error message, default: "Bad request")
    """

    def __init__(self, detail: str = "Bad request") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class DeletionTimeoutError(HTTPException):
    """504 Gateway Timeout 예외 — 삭제 제한 시간 초과 시 사용.

    504 Gateway Timeout exception.
    Raised when a category deletion does not finish within its deadline.
    The deletion journal records the last completed step.

    Args:
        detail: 오류 메시지 (Error message, default: "Category deletion timed out")
    """

    def __init__(self, detail: str = "Category deletion timed out") -> None:
        super().__init__(status_code=status.HTTP_504_GATEWAY_TIMEOUT, detail=detail)
