"""식별자 파싱 유틸리티 모듈.

Identifier parsing utility module.
Path and body ids arrive as strings; malformed ones are reported as
400 Bad Request instead of FastAPI's 422 validation response.
"""

from uuid import UUID

from catalog.utils.exceptions import BadRequestError


def parse_id(value: str | UUID, label: str = "category") -> UUID:
    """문자열 ID를 UUID로 변환합니다.

    Convert a string id to a UUID.

    Args:
        value: 원본 ID 문자열 또는 UUID (Raw id string or UUID)
        label: 오류 메시지에 쓰일 리소스 이름 (Resource name for the error message)

    Returns:
        UUID: 변환된 UUID (Parsed UUID)

    Raises:
        BadRequestError: 형식이 잘못된 ID (Malformed id)
    """
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value).strip())
    except (ValueError, AttributeError):
        raise BadRequestError(f"Invalid {label} ID: {value!r}")
