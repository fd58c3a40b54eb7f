"""
예외 클래스 패키지

도메인별로 분리된 예외 클래스들을 관리합니다:
- base: 기본 예외 클래스
- image: 이미지 업로드/가공/수명주기 관련 예외
"""

from .base import BusinessException
from .image import (
    ImageArtifactNotFoundException,
    ImageNotFoundException,
    ImageProcessingException,
    ImageServiceException,
    ImageUploadLimitException,
    InvalidImageException,
)

__all__ = [
    # Base exceptions
    "BusinessException",
    # Image exceptions
    "ImageServiceException",
    "InvalidImageException",
    "ImageUploadLimitException",
    "ImageProcessingException",
    "ImageNotFoundException",
    "ImageArtifactNotFoundException",
]
