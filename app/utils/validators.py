"""
공통 검증 유틸리티 함수들
"""

from uuid import UUID

from fastapi import HTTPException, status


def validate_uuid(uuid_str: str, field_name: str = "ID") -> UUID:
    """
    UUID 형식 검증 및 변환

    Args:
        uuid_str: 검증할 UUID 문자열
        field_name: 에러 메시지에 사용할 필드명

    Returns:
        검증된 UUID 객체

    Raises:
        HTTPException: UUID 형식이 올바르지 않은 경우
    """
    try:
        return UUID(uuid_str)
    except (ValueError, TypeError):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"올바른 {field_name} 형식이 아닙니다.",
        )


def parse_optional_list(values: list[str] | None) -> list[str | None]:
    """폼 필드 목록의 빈 문자열을 None 으로 변환"""
    if not values:
        return []
    return [value if value else None for value in values]
