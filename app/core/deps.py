"""
의존성 주입 (Dependency Injection)
"""

import logging
from uuid import UUID

from fastapi import HTTPException, Request, status

from app.constants import AuthConstants, ResponseMessages
from app.core.config import ImagePipelineConfig, get_pipeline_config
from app.core.security import decode_access_token
from app.utils.image_storage import ImageStorage, get_image_storage

logger = logging.getLogger(__name__)


def _extract_user_id(request: Request) -> UUID | None:
    """Bearer 토큰에서 사용자 ID 추출"""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith(AuthConstants.BEARER_PREFIX):
        return None

    token = auth_header[len(AuthConstants.BEARER_PREFIX):].strip()
    payload = decode_access_token(token)
    user_id = payload.get("sub")
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=ResponseMessages.TOKEN_INVALID,
        )

    logger.debug("Bearer 토큰에서 user_id 추출 성공")
    return UUID(user_id)


async def get_current_user_id(request: Request) -> UUID:
    """
    Bearer 토큰을 통해 현재 로그인한 사용자 ID 조회

    Raises:
        HTTPException: 토큰이 없거나 유효하지 않은 경우
    """
    try:
        user_id = _extract_user_id(request)

        if user_id is None:
            logger.warning("인증 토큰을 찾을 수 없음")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=ResponseMessages.TOKEN_REQUIRED,
            )

        return user_id

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"인증 중 예외 발생: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail=ResponseMessages.AUTH_FAILED
        )


def get_storage() -> ImageStorage:
    """이미지 스토리지 의존성"""
    return get_image_storage()


def get_image_pipeline_config() -> ImagePipelineConfig:
    """이미지 파이프라인 설정 의존성"""
    return get_pipeline_config()
