"""
데이터베이스 모델
"""

from .base import Base, BaseModel
from .image import Image

# 명시적으로 모든 모델을 노출
__all__ = [
    "Base",
    "BaseModel",
    "Image",
]
