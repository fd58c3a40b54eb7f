"""
시르쿨로 미디어 업로드 백엔드 FastAPI 애플리케이션
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.openapi.utils import get_openapi

from app.api import router as api_router
from app.core.config import get_settings
from app.core.lifespan import lifespan
from app.core.logging_config import setup_logging
from app.schemas.base import BaseResponse
from app.utils.error_handlers import register_exception_handlers

settings = get_settings()

# 로깅 설정
setup_logging(debug=settings.debug)
logger = logging.getLogger(__name__)


# FastAPI 애플리케이션 인스턴스 생성
app = FastAPI(
    title=settings.app_name,
    description="시르쿨로 마켓플레이스 이미지 업로드/가공 서비스",
    version=settings.version,
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    lifespan=lifespan,
)


def custom_openapi():
    """
    Swagger UI에 JWT Bearer Token 인증 버튼을 추가하기 위한 OpenAPI 스키마 커스터마이징
    """
    if app.openapi_schema:
        return app.openapi_schema

    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
    )

    openapi_schema.setdefault("components", {})["securitySchemes"] = {
        "bearerAuth": {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
            "description": "JWT Authorization header using the Bearer scheme. Example: 'Authorization: Bearer {token}'",
        }
    }

    # 파일 조회 엔드포인트를 제외한 API 에 Bearer 토큰 보안 적용
    for path, operations in openapi_schema["paths"].items():
        if path.startswith(("/api/uploads/image/{filename}", "/api/uploads/thumbnail/")):
            continue
        if not path.startswith("/api/"):
            continue
        for operation in operations.values():
            operation.setdefault("security", [{"bearerAuth": []}])

    app.openapi_schema = openapi_schema
    return app.openapi_schema


# 커스텀 OpenAPI 스키마 적용
app.openapi = custom_openapi

# 미들웨어 설정
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.is_development else settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "Accept", "Origin"],
)

# 프로덕션 환경에서만 적용되는 미들웨어
if settings.is_production:
    app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.allowed_hosts)

# Gzip 압축 (이미지 응답은 이미 압축되어 있어 JSON 응답에만 효과)
app.add_middleware(GZipMiddleware, minimum_size=1000)

# 전역 예외 핸들러
register_exception_handlers(app)


# 헬스체크 라우트
@app.get("/", tags=["health"], response_model=BaseResponse[dict])
async def health_check() -> BaseResponse[dict]:
    """헬스체크 엔드포인트 - 애플리케이션 상태 확인"""
    health_data = {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.version,
        "environment": settings.environment,
        "storage_backend": settings.storage_backend,
    }

    return BaseResponse(
        data=health_data, message="시르쿨로 미디어 백엔드가 정상적으로 실행 중입니다."
    )


# API 라우터 등록
app.include_router(api_router)
