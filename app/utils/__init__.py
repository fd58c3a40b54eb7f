# 유틸리티 함수 패키지

from .image_storage import (
    ImageStorage,
    LocalImageStorage,
    MinIOImageStorage,
    get_image_storage,
)

__all__ = [
    "ImageStorage",
    "LocalImageStorage",
    "MinIOImageStorage",
    "get_image_storage",
]
