"""
이미지 업로드 API 라우터
"""

import logging
from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Path, Query, UploadFile, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from app.constants import EntityType, ResponseMessages, SystemConstants
from app.core.config import ImagePipelineConfig
from app.core.deps import get_current_user_id, get_image_pipeline_config, get_storage
from app.db.database import get_session
from app.schemas.base import BaseResponse, PaginatedResponse, PaginationInfo
from app.schemas.image import (
    BatchUploadMetadata,
    BatchUploadResponse,
    ImageAssociateRequest,
    ImageDetailResponse,
    ImageMetadataUpdateRequest,
    ImageOrderUpdateRequest,
    ImageResponse,
    ImageUploadMetadata,
)
from app.services.image_lifecycle import ImageLifecycleService
from app.services.image_processor import ImageArtifactProcessor
from app.services.image_upload import (
    BatchUploadResult,
    ImageUploadService,
    UploadedImageFile,
)
from app.utils.image_storage import ImageStorage
from app.utils.validators import parse_optional_list, validate_uuid

logger = logging.getLogger(__name__)

router = APIRouter(tags=["uploads"])

# 가공된 파일은 키가 바뀌지 않는 한 내용이 바뀌지 않음
IMAGE_CACHE_HEADERS = {"Cache-Control": "public, max-age=31536000, immutable"}


def get_upload_service(
    session: Annotated[Session, Depends(get_session)],
    storage: Annotated[ImageStorage, Depends(get_storage)],
    config: Annotated[ImagePipelineConfig, Depends(get_image_pipeline_config)],
) -> ImageUploadService:
    return ImageUploadService(session, storage, config)


def get_lifecycle_service(
    session: Annotated[Session, Depends(get_session)],
    storage: Annotated[ImageStorage, Depends(get_storage)],
    config: Annotated[ImagePipelineConfig, Depends(get_image_pipeline_config)],
) -> ImageLifecycleService:
    return ImageLifecycleService(session, storage, config)


def get_artifact_processor(
    storage: Annotated[ImageStorage, Depends(get_storage)],
    config: Annotated[ImagePipelineConfig, Depends(get_image_pipeline_config)],
) -> ImageArtifactProcessor:
    return ImageArtifactProcessor(storage, config)


def _batch_response(
    result: BatchUploadResult, config: ImagePipelineConfig
) -> BaseResponse[BatchUploadResponse]:
    return BaseResponse(
        data=BatchUploadResponse(
            images=[ImageResponse.from_image(image, config) for image in result.images],
            uploaded=result.uploaded,
            failed=result.failed,
            errors=result.error_messages or None,
        ),
        message=f"{ResponseMessages.IMAGE_UPLOADED} (성공 {result.uploaded}개, 실패 {result.failed}개)",
    )


# ----------------------------------------------------------------------
# 업로드
# ----------------------------------------------------------------------
@router.post(
    "/image",
    response_model=BaseResponse[ImageResponse],
    status_code=status.HTTP_201_CREATED,
)
async def upload_image(
    *,
    user_id: Annotated[UUID, Depends(get_current_user_id)],
    service: Annotated[ImageUploadService, Depends(get_upload_service)],
    config: Annotated[ImagePipelineConfig, Depends(get_image_pipeline_config)],
    image: Annotated[UploadFile, File(description="업로드할 이미지 파일")],
    caption: Annotated[Optional[str], Form()] = None,
    alt_text: Annotated[Optional[str], Form()] = None,
    display_order: Annotated[int, Form(ge=0)] = 0,
    entity_type: Annotated[Optional[EntityType], Form()] = None,
    entity_id: Annotated[Optional[int], Form(gt=0)] = None,
) -> BaseResponse[ImageResponse]:
    """단일 이미지 업로드"""
    metadata = ImageUploadMetadata(
        caption=caption or None,
        alt_text=alt_text or None,
        display_order=display_order,
        entity_type=entity_type,
        entity_id=entity_id,
    )
    file = await UploadedImageFile.from_upload(image, config.max_file_size)

    created = service.ingest(file, user_id, metadata)

    return BaseResponse(
        data=ImageResponse.from_image(created, config),
        message=ResponseMessages.IMAGE_UPLOADED,
    )


@router.post(
    "/images",
    response_model=BaseResponse[BatchUploadResponse],
    status_code=status.HTTP_201_CREATED,
)
async def upload_images(
    *,
    user_id: Annotated[UUID, Depends(get_current_user_id)],
    service: Annotated[ImageUploadService, Depends(get_upload_service)],
    config: Annotated[ImagePipelineConfig, Depends(get_image_pipeline_config)],
    images: Annotated[list[UploadFile], File(description="업로드할 이미지 파일들")],
    captions: Annotated[Optional[list[str]], Form()] = None,
    alt_texts: Annotated[Optional[list[str]], Form()] = None,
    display_orders: Annotated[Optional[list[int]], Form()] = None,
    entity_type: Annotated[Optional[EntityType], Form()] = None,
    entity_id: Annotated[Optional[int], Form(gt=0)] = None,
) -> BaseResponse[BatchUploadResponse]:
    """여러 이미지 일괄 업로드 (파일별 성공/실패 집계)"""
    metadata = BatchUploadMetadata(
        captions=parse_optional_list(captions),
        alt_texts=parse_optional_list(alt_texts),
        display_orders=display_orders or [],
        entity_type=entity_type,
        entity_id=entity_id,
    )

    result = await service.ingest_uploads(images, user_id, metadata)

    return _batch_response(result, config)


@router.post(
    "/entity/{entity_type}/{entity_id}/images",
    response_model=BaseResponse[BatchUploadResponse],
    status_code=status.HTTP_201_CREATED,
)
async def upload_entity_images(
    *,
    user_id: Annotated[UUID, Depends(get_current_user_id)],
    service: Annotated[ImageUploadService, Depends(get_upload_service)],
    config: Annotated[ImagePipelineConfig, Depends(get_image_pipeline_config)],
    entity_type: EntityType = Path(..., description="엔티티 타입"),
    entity_id: int = Path(..., gt=0, description="엔티티 ID"),
    images: Annotated[list[UploadFile], File(description="업로드할 이미지 파일들")],
    captions: Annotated[Optional[list[str]], Form()] = None,
    alt_texts: Annotated[Optional[list[str]], Form()] = None,
) -> BaseResponse[BatchUploadResponse]:
    """엔티티에 바로 연결되는 이미지 일괄 업로드 (표시 순서는 파일 순서)"""
    result = await service.upload_entity_images(
        images,
        user_id,
        entity_type,
        entity_id,
        captions=parse_optional_list(captions),
        alt_texts=parse_optional_list(alt_texts),
    )

    return _batch_response(result, config)


# ----------------------------------------------------------------------
# 파일 제공
# ----------------------------------------------------------------------
@router.get("/image/{filename}")
async def get_image_file(
    filename: Annotated[str, Path(description="스토리지 키")],
    processor: Annotated[ImageArtifactProcessor, Depends(get_artifact_processor)],
) -> Response:
    """최적화 원본 이미지 파일 조회"""
    data, media_type = processor.load_original(filename)
    return Response(content=data, media_type=media_type, headers=IMAGE_CACHE_HEADERS)


@router.get("/thumbnail/{filename}")
async def get_thumbnail_file(
    filename: Annotated[str, Path(description="스토리지 키")],
    processor: Annotated[ImageArtifactProcessor, Depends(get_artifact_processor)],
) -> Response:
    """썸네일 파일 조회 (썸네일이 없으면 원본)"""
    data, media_type = processor.load_thumbnail(filename)
    return Response(content=data, media_type=media_type, headers=IMAGE_CACHE_HEADERS)


# ----------------------------------------------------------------------
# 메타데이터
# ----------------------------------------------------------------------
@router.get("/image/{image_id}/metadata", response_model=BaseResponse[ImageDetailResponse])
async def get_image_metadata(
    *,
    user_id: Annotated[UUID, Depends(get_current_user_id)],
    service: Annotated[ImageLifecycleService, Depends(get_lifecycle_service)],
    processor: Annotated[ImageArtifactProcessor, Depends(get_artifact_processor)],
    config: Annotated[ImagePipelineConfig, Depends(get_image_pipeline_config)],
    image_id: str = Path(..., description="이미지 ID (UUID)"),
) -> BaseResponse[ImageDetailResponse]:
    """이미지 상세 정보 조회 (저장된 파일 상태 포함)"""
    image = service.get_image(validate_uuid(image_id, "이미지 ID"), user_id)
    artifacts = processor.inspect_artifacts(image.storage_key)

    return BaseResponse(
        data=ImageDetailResponse.from_image(image, config, artifacts),
        message="이미지 정보 조회 성공",
    )


@router.put("/image/{image_id}/metadata", response_model=BaseResponse[ImageResponse])
async def update_image_metadata(
    *,
    user_id: Annotated[UUID, Depends(get_current_user_id)],
    service: Annotated[ImageLifecycleService, Depends(get_lifecycle_service)],
    config: Annotated[ImagePipelineConfig, Depends(get_image_pipeline_config)],
    image_id: str = Path(..., description="이미지 ID (UUID)"),
    update_request: ImageMetadataUpdateRequest,
) -> BaseResponse[ImageResponse]:
    """이미지 캡션/대체 텍스트/표시 순서 수정"""
    image = service.update_metadata(
        validate_uuid(image_id, "이미지 ID"),
        user_id,
        update_request.model_dump(exclude_unset=True),
    )

    return BaseResponse(
        data=ImageResponse.from_image(image, config),
        message=ResponseMessages.IMAGE_METADATA_UPDATED,
    )


@router.delete("/image/{image_id}", response_model=BaseResponse[dict])
async def delete_image(
    *,
    user_id: Annotated[UUID, Depends(get_current_user_id)],
    service: Annotated[ImageLifecycleService, Depends(get_lifecycle_service)],
    image_id: str = Path(..., description="이미지 ID (UUID)"),
) -> BaseResponse[dict]:
    """이미지 삭제 (레코드와 파일 모두)"""
    image_uuid = validate_uuid(image_id, "이미지 ID")
    service.delete_image(image_uuid, user_id)

    return BaseResponse(
        data={"id": str(image_uuid)},
        message=ResponseMessages.IMAGE_DELETED,
    )


# ----------------------------------------------------------------------
# 엔티티 연결
# ----------------------------------------------------------------------
@router.post("/image/{image_id}/associate", response_model=BaseResponse[ImageResponse])
async def associate_image(
    *,
    user_id: Annotated[UUID, Depends(get_current_user_id)],
    service: Annotated[ImageLifecycleService, Depends(get_lifecycle_service)],
    config: Annotated[ImagePipelineConfig, Depends(get_image_pipeline_config)],
    image_id: str = Path(..., description="이미지 ID (UUID)"),
    associate_request: ImageAssociateRequest,
) -> BaseResponse[ImageResponse]:
    """이미지를 엔티티에 연결 (기존 연결은 덮어씀)"""
    image = service.associate(
        validate_uuid(image_id, "이미지 ID"),
        user_id,
        associate_request.entity_type,
        associate_request.entity_id,
    )

    return BaseResponse(
        data=ImageResponse.from_image(image, config),
        message=ResponseMessages.IMAGE_ASSOCIATED,
    )


@router.delete("/image/{image_id}/associate", response_model=BaseResponse[ImageResponse])
async def dissociate_image(
    *,
    user_id: Annotated[UUID, Depends(get_current_user_id)],
    service: Annotated[ImageLifecycleService, Depends(get_lifecycle_service)],
    config: Annotated[ImagePipelineConfig, Depends(get_image_pipeline_config)],
    image_id: str = Path(..., description="이미지 ID (UUID)"),
) -> BaseResponse[ImageResponse]:
    """이미지의 엔티티 연결 해제"""
    image = service.dissociate(validate_uuid(image_id, "이미지 ID"), user_id)

    return BaseResponse(
        data=ImageResponse.from_image(image, config),
        message=ResponseMessages.IMAGE_DISSOCIATED,
    )


# ----------------------------------------------------------------------
# 목록
# ----------------------------------------------------------------------
@router.get("/my-images", response_model=PaginatedResponse[ImageResponse])
async def list_my_images(
    *,
    user_id: Annotated[UUID, Depends(get_current_user_id)],
    service: Annotated[ImageLifecycleService, Depends(get_lifecycle_service)],
    config: Annotated[ImagePipelineConfig, Depends(get_image_pipeline_config)],
    page: int = Query(1, ge=1, description="페이지 번호"),
    page_size: int = Query(
        SystemConstants.DEFAULT_PAGE_SIZE,
        ge=SystemConstants.MIN_PAGE_SIZE,
        le=SystemConstants.MAX_PAGE_SIZE,
        description="페이지 크기",
    ),
) -> PaginatedResponse[ImageResponse]:
    """내가 업로드한 이미지 목록 (최신순)"""
    images, total_count = service.list_user_images(user_id, page, page_size)
    return PaginatedResponse(
        data=[ImageResponse.from_image(image, config) for image in images],
        pagination=PaginationInfo.from_counts(page, page_size, total_count),
        message="이미지 목록 조회 성공",
    )


@router.get(
    "/entity/{entity_type}/{entity_id}",
    response_model=BaseResponse[list[ImageResponse]],
)
async def list_entity_images(
    *,
    service: Annotated[ImageLifecycleService, Depends(get_lifecycle_service)],
    config: Annotated[ImagePipelineConfig, Depends(get_image_pipeline_config)],
    entity_type: EntityType = Path(..., description="엔티티 타입"),
    entity_id: int = Path(..., gt=0, description="엔티티 ID"),
) -> BaseResponse[list[ImageResponse]]:
    """엔티티에 연결된 이미지 목록 (표시 순서대로)"""
    images = service.list_entity_images(entity_type, entity_id)

    return BaseResponse(
        data=[ImageResponse.from_image(image, config) for image in images],
        message="엔티티 이미지 목록 조회 성공",
    )


@router.put(
    "/entity/{entity_type}/{entity_id}/order",
    response_model=BaseResponse[list[ImageResponse]],
)
async def reorder_entity_images(
    *,
    user_id: Annotated[UUID, Depends(get_current_user_id)],
    service: Annotated[ImageLifecycleService, Depends(get_lifecycle_service)],
    config: Annotated[ImagePipelineConfig, Depends(get_image_pipeline_config)],
    entity_type: EntityType = Path(..., description="엔티티 타입"),
    entity_id: int = Path(..., gt=0, description="엔티티 ID"),
    order_request: ImageOrderUpdateRequest,
) -> BaseResponse[list[ImageResponse]]:
    """엔티티 이미지 표시 순서 변경 (본인이 올린 이미지만 반영)"""
    images = service.reorder_entity_images(
        user_id,
        entity_type,
        entity_id,
        {item.image_id: item.display_order for item in order_request.orders},
    )

    return BaseResponse(
        data=[ImageResponse.from_image(image, config) for image in images],
        message=ResponseMessages.IMAGE_ORDER_UPDATED,
    )
