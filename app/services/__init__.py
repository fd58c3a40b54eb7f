"""
비즈니스 로직 서비스
"""

from .base import BaseService
from .image_lifecycle import ImageLifecycleService, OrphanReclaimResult
from .image_processor import ImageArtifactProcessor, ProcessedImage
from .image_upload import BatchUploadResult, ImageUploadService, UploadedImageFile
from .image_validator import ImageValidator, ValidationResult

__all__ = [
    "BaseService",
    "ImageValidator",
    "ValidationResult",
    "ImageArtifactProcessor",
    "ProcessedImage",
    "ImageLifecycleService",
    "OrphanReclaimResult",
    "ImageUploadService",
    "UploadedImageFile",
    "BatchUploadResult",
]
