"""
보안 및 인증 관련 유틸리티
JWT 액세스 토큰 생성/검증
"""

import uuid
from datetime import UTC, datetime, timedelta
from typing import Any, Dict, Optional

import jwt
from fastapi import HTTPException, status

from app.constants import ResponseMessages
from app.core.config import get_settings


class JWTHandler:
    """JWT 토큰 처리 클래스"""

    @staticmethod
    def create_access_token(
        data: Dict[str, Any], expires_delta: Optional[timedelta] = None
    ) -> str:
        """
        JWT 액세스 토큰 생성

        Args:
            data: 토큰에 포함할 데이터
            expires_delta: 만료 시간 (기본값: 설정값)

        Returns:
            JWT 토큰
        """
        settings = get_settings()
        to_encode = data.copy()
        now = datetime.now(UTC)

        if expires_delta:
            expire = now + expires_delta
        else:
            expire = now + timedelta(minutes=settings.jwt_access_token_expire_minutes)

        to_encode.update(
            {
                "exp": expire,
                "iat": now,
                "jti": str(uuid.uuid4()),  # JWT ID
                "type": "access",
            }
        )

        return jwt.encode(
            to_encode, settings.secret_key, algorithm=settings.jwt_algorithm
        )

    @staticmethod
    def decode_token(token: str) -> Dict[str, Any]:
        """
        JWT 토큰 디코딩 및 검증

        Raises:
            HTTPException: 토큰 검증 실패 시
        """
        settings = get_settings()
        try:
            return jwt.decode(
                token, settings.secret_key, algorithms=[settings.jwt_algorithm]
            )

        except jwt.ExpiredSignatureError:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=ResponseMessages.TOKEN_EXPIRED,
                headers={"WWW-Authenticate": "Bearer"},
            )
        except jwt.InvalidTokenError:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=ResponseMessages.TOKEN_INVALID,
                headers={"WWW-Authenticate": "Bearer"},
            )


def create_access_token(user_id: uuid.UUID | str) -> str:
    """사용자 ID 로 액세스 토큰 생성 (전역 함수)"""
    return JWTHandler.create_access_token({"sub": str(user_id)})


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    액세스 토큰 디코딩 (전역 함수)

    Args:
        token: JWT 토큰

    Returns:
        토큰 페이로드
    """
    return JWTHandler.decode_token(token)
