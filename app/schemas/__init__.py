"""
API 스키마
"""

from .base import (
    BaseResponse,
    ErrorDetail,
    ErrorResponse,
    PaginatedResponse,
    PaginationInfo,
)
from .image import (
    BatchUploadMetadata,
    BatchUploadResponse,
    ImageArtifactInfo,
    ImageDetailResponse,
    ImageResponse,
    ImageUploadMetadata,
)

__all__ = [
    "BaseResponse",
    "PaginatedResponse",
    "PaginationInfo",
    "ErrorDetail",
    "ErrorResponse",
    "ImageArtifactInfo",
    "ImageResponse",
    "ImageDetailResponse",
    "ImageUploadMetadata",
    "BatchUploadMetadata",
    "BatchUploadResponse",
]
