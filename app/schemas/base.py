"""
공통 API 응답 스키마

성공 응답(BaseResponse, PaginatedResponse)과 에러 응답(ErrorResponse) 형식
"""

import math
import uuid
from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class BaseResponse(BaseModel, Generic[T]):
    """기본 응답 모델"""

    success: bool = True
    data: T | None = None
    message: str | None = None
    timestamp: datetime = Field(default_factory=datetime.now)
    request_id: str = Field(default_factory=lambda: str(uuid.uuid4()))


class PaginationInfo(BaseModel):
    """페이지네이션 정보"""

    page: int = Field(ge=1)
    page_size: int = Field(ge=1, le=100)
    total_items: int = Field(ge=0)
    total_pages: int = Field(ge=0)
    has_next: bool
    has_previous: bool

    @classmethod
    def from_counts(cls, page: int, page_size: int, total_items: int) -> "PaginationInfo":
        """현재 페이지와 전체 개수로 페이지 정보 계산"""
        total_pages = math.ceil(total_items / page_size) if total_items else 0
        return cls(
            page=page,
            page_size=page_size,
            total_items=total_items,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_previous=page > 1,
        )


class PaginatedResponse(BaseModel, Generic[T]):
    """페이지네이션 응답 모델"""

    success: bool = True
    data: list[T]
    pagination: PaginationInfo
    message: str | None = None
    timestamp: datetime = Field(default_factory=datetime.now)
    request_id: str = Field(default_factory=lambda: str(uuid.uuid4()))


class ErrorDetail(BaseModel):
    """에러 내용"""

    code: str
    message: Any
    details: Any | None = None


class ErrorResponse(BaseModel):
    """에러 응답 모델 (예외 처리기가 사용)"""

    success: bool = False
    error: ErrorDetail
    timestamp: datetime = Field(default_factory=datetime.now)
    path: str
