"""
이미지 관련 스키마
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.constants import EntityType
from app.core.config import ImagePipelineConfig
from app.models.image import Image


def _check_entity_pair(entity_type, entity_id) -> None:
    if (entity_type is None) != (entity_id is None):
        raise ValueError("entity_type 과 entity_id 는 함께 지정하거나 함께 생략해야 합니다.")


class ImageUploadMetadata(BaseModel):
    """단일 업로드 시 함께 전달되는 메타데이터"""

    caption: Optional[str] = None
    alt_text: Optional[str] = Field(None, max_length=255)
    display_order: int = Field(0, ge=0)
    entity_type: Optional[EntityType] = None
    entity_id: Optional[int] = Field(None, gt=0)

    @model_validator(mode="after")
    def validate_entity_pair(self):
        _check_entity_pair(self.entity_type, self.entity_id)
        return self


class BatchUploadMetadata(BaseModel):
    """
    일괄 업로드 메타데이터

    captions/alt_texts/display_orders 는 파일 순서대로 대응되며,
    엔티티 연결 정보는 모든 파일에 공통으로 적용된다.
    """

    captions: list[Optional[str]] = Field(default_factory=list)
    alt_texts: list[Optional[str]] = Field(default_factory=list)
    display_orders: list[int] = Field(default_factory=list)
    entity_type: Optional[EntityType] = None
    entity_id: Optional[int] = Field(None, gt=0)

    @model_validator(mode="after")
    def validate_entity_pair(self):
        _check_entity_pair(self.entity_type, self.entity_id)
        return self

    def for_index(self, index: int) -> ImageUploadMetadata:
        """index 번째 파일에 적용할 메타데이터"""

        def pick(values: list, default=None):
            return values[index] if index < len(values) else default

        return ImageUploadMetadata(
            caption=pick(self.captions) or None,
            alt_text=pick(self.alt_texts) or None,
            display_order=pick(self.display_orders, index),
            entity_type=self.entity_type,
            entity_id=self.entity_id,
        )


class ImageResponse(BaseModel):
    """이미지 응답 모델"""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    filename: str
    original_name: str
    mime_type: str
    size: int
    url: str
    thumbnail_url: str
    width: int
    height: int
    format: str
    caption: Optional[str] = None
    alt_text: Optional[str] = None
    display_order: int = 0
    entity_type: Optional[EntityType] = None
    entity_id: Optional[int] = None
    created_at: datetime

    @classmethod
    def from_image(cls, image: Image, config: ImagePipelineConfig) -> "ImageResponse":
        """Image 모델로부터 응답 생성 (URL 은 스토리지 키로 계산)"""
        return cls(
            id=image.id,
            filename=image.storage_key,
            original_name=image.original_name,
            mime_type=image.mime_type,
            size=image.size_bytes,
            url=config.image_url(image.storage_key),
            thumbnail_url=config.thumbnail_url(image.storage_key),
            width=image.width,
            height=image.height,
            format=image.format,
            caption=image.caption,
            alt_text=image.alt_text,
            display_order=image.display_order,
            entity_type=image.entity_type,
            entity_id=image.entity_id,
            created_at=image.created_at,
        )


class ImageArtifactInfo(BaseModel):
    """스토리지에 저장된 파생 파일 상태"""

    exists: bool
    has_thumbnail: bool
    original_size: int = 0
    thumbnail_size: int = 0

    @classmethod
    def from_inspection(cls, inspection: dict) -> "ImageArtifactInfo":
        sizes = inspection.get("sizes", {})
        return cls(
            exists=inspection["exists"],
            has_thumbnail=inspection["has_thumbnail"],
            original_size=sizes.get("original", 0),
            thumbnail_size=sizes.get("thumbnail", 0),
        )


class ImageDetailResponse(ImageResponse):
    """이미지 상세 응답 모델"""

    uploader_id: UUID
    dimensions: Optional[str] = None
    formatted_size: str
    updated_at: datetime
    artifacts: Optional[ImageArtifactInfo] = None

    @classmethod
    def from_image(
        cls,
        image: Image,
        config: ImagePipelineConfig,
        artifacts: Optional[dict] = None,
    ) -> "ImageDetailResponse":
        base = ImageResponse.from_image(image, config)
        return cls(
            **base.model_dump(),
            uploader_id=image.uploader_id,
            dimensions=image.dimensions,
            formatted_size=image.formatted_size,
            updated_at=image.updated_at,
            artifacts=(
                ImageArtifactInfo.from_inspection(artifacts) if artifacts else None
            ),
        )


class ImageMetadataUpdateRequest(BaseModel):
    """이미지 메타데이터 수정 요청 (보낸 필드만 변경)"""

    caption: Optional[str] = None
    alt_text: Optional[str] = Field(None, max_length=255)
    display_order: Optional[int] = Field(None, ge=0)

    @field_validator("display_order")
    @classmethod
    def reject_null_display_order(cls, v):
        """표시 순서는 생략할 수는 있지만 null 로 비울 수는 없음"""
        if v is None:
            raise ValueError("display_order 는 null 일 수 없습니다.")
        return v


class ImageAssociateRequest(BaseModel):
    """엔티티 연결 요청"""

    entity_type: EntityType
    entity_id: int = Field(..., gt=0)


class ImageOrderItem(BaseModel):
    """표시 순서 변경 항목"""

    image_id: UUID
    display_order: int = Field(..., ge=0)


class ImageOrderUpdateRequest(BaseModel):
    """엔티티 이미지 순서 변경 요청"""

    orders: list[ImageOrderItem] = Field(..., min_length=1)


class BatchUploadResponse(BaseModel):
    """일괄 업로드 응답"""

    images: list[ImageResponse]
    uploaded: int
    failed: int
    errors: Optional[list[str]] = None


class OrphanReclaimResponse(BaseModel):
    """고아 이미지 정리 결과 응답"""

    cutoff_date: str
    candidates: int
    deleted: int
    skipped: int
    failed: int
    errors: list[str] = Field(default_factory=list)
