"""
통일된 에러 응답 핸들러
API 에러 응답 형식과 데이터베이스 트랜잭션 에러 처리를 위한 컨텍스트 매니저
"""

import logging
from contextlib import contextmanager

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.constants import ErrorCodes, ResponseMessages
from app.schemas.base import ErrorDetail, ErrorResponse

logger = logging.getLogger(__name__)


def _error_body(request: Request, code: str, message, details=None) -> dict:
    body = ErrorResponse(
        error=ErrorDetail(code=code, message=message, details=details),
        path=request.url.path,
    )
    return body.model_dump(mode="json", exclude_none=True)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """HTTP 예외 처리기 (BusinessException 의 error_code 포함)"""
    error_code = getattr(exc, "error_code", None)

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(request, error_code or f"HTTP_{exc.status_code}", exc.detail),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """검증 예외 처리기"""
    if hasattr(exc, "errors"):
        # ctx/input 에는 JSON 직렬화가 불가능한 값이 들어갈 수 있음
        details = [
            {key: value for key, value in error.items() if key in ("loc", "msg", "type")}
            for error in exc.errors()
        ]
    else:
        details = str(exc)

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=_error_body(
            request,
            ErrorCodes.VALIDATION_ERROR,
            ErrorPatterns.VALIDATION_ERROR,
            details=details,
        ),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """일반 예외 처리기"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body(
            request, ErrorCodes.INTERNAL_ERROR, ResponseMessages.INTERNAL_SERVER_ERROR
        ),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """애플리케이션에 공통 예외 처리기 등록"""
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)


@contextmanager
def database_transaction_handler(
    session: Session,
    error_message: str = "작업 처리 중 오류가 발생했습니다",
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
    log_context: str = "Database operation",
):
    """
    데이터베이스 트랜잭션 에러 처리 컨텍스트 매니저

    HTTPException 은 롤백 후 그대로 전달하고, 그 외 예외는 롤백 후
    HTTPException 으로 변환한다.

    Usage:
        with database_transaction_handler(session, ErrorPatterns.IMAGE_UPLOAD_FAILED):
            # database operations
            pass
    """
    try:
        yield
    except HTTPException:
        session.rollback()
        raise
    except Exception as e:
        session.rollback()
        logger.error(f"{log_context} 실패: {str(e)}")
        raise HTTPException(
            status_code=status_code,
            detail=error_message,
        ) from e


class ErrorPatterns:
    """공통 에러 메시지 패턴 상수"""

    # 이미지 관련
    IMAGE_UPLOAD_FAILED = "이미지 업로드에 실패했습니다"
    IMAGE_UPDATE_FAILED = "이미지 정보 수정에 실패했습니다"
    IMAGE_DELETE_FAILED = "이미지 삭제에 실패했습니다"
    IMAGE_RECLAIM_FAILED = "고아 이미지 정리에 실패했습니다"

    # 일반적인 에러
    INTERNAL_ERROR = "내부 서버 오류가 발생했습니다"
    VALIDATION_ERROR = "입력 데이터 검증에 실패했습니다"
