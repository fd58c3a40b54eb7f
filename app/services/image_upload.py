"""
이미지 업로드 서비스

파일마다 검증 -> 원본 스테이징 -> 가공 -> 메타데이터 저장 순서로 처리하고,
일괄 업로드에서는 파일별 성공/실패를 모아 반환한다.
"""

import logging
from dataclasses import dataclass, field
from uuid import UUID

from fastapi import UploadFile
from sqlalchemy.orm import Session

from app.constants import EntityType, ImageVariant, ResponseMessages
from app.core.config import ImagePipelineConfig
from app.db.image_repository import ImageRepository
from app.exceptions.image import (
    ImageProcessingException,
    ImageServiceException,
    ImageUploadLimitException,
    InvalidImageException,
)
from app.models.image import Image
from app.schemas.image import BatchUploadMetadata, ImageUploadMetadata
from app.services.base import BaseService
from app.services.image_processor import ImageArtifactProcessor
from app.services.image_validator import ImageValidator
from app.utils.image_storage import ImageStorage

logger = logging.getLogger(__name__)


@dataclass
class UploadedImageFile:
    """업로드된 파일 내용 (요청 처리 중에만 메모리에 유지)"""

    filename: str
    content_type: str | None
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    async def from_upload(cls, upload: UploadFile, max_size: int) -> "UploadedImageFile":
        """
        UploadFile 을 읽어 생성

        최대 크기보다 1바이트만 더 읽어 크기 초과 여부만 판별할 수 있게 한다.
        """
        data = await upload.read(max_size + 1)
        return cls(
            filename=upload.filename or "unknown",
            content_type=upload.content_type,
            data=data,
        )


@dataclass
class BatchUploadError:
    """일괄 업로드 중 실패한 파일"""

    filename: str
    message: str

    def __str__(self) -> str:
        return f"{self.filename}: {self.message}"


@dataclass
class BatchUploadResult:
    """일괄 업로드 결과 누적기"""

    images: list[Image] = field(default_factory=list)
    failures: list[BatchUploadError] = field(default_factory=list)

    @property
    def uploaded(self) -> int:
        return len(self.images)

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def error_messages(self) -> list[str]:
        return [str(failure) for failure in self.failures]

    def add_success(self, image: Image) -> None:
        self.images.append(image)

    def add_failure(self, filename: str, message: str) -> None:
        self.failures.append(BatchUploadError(filename=filename, message=message))


class ImageUploadService(BaseService):
    """이미지 업로드 서비스"""

    def __init__(
        self, session: Session, storage: ImageStorage, config: ImagePipelineConfig
    ):
        super().__init__(session)
        self.storage = storage
        self.config = config
        self.repository = ImageRepository(session)
        self.validator = ImageValidator(config)
        self.processor = ImageArtifactProcessor(storage, config)

    def ingest(
        self,
        file: UploadedImageFile,
        owner_id: UUID,
        metadata: ImageUploadMetadata | None = None,
    ) -> Image:
        """
        단일 이미지 업로드

        Args:
            file: 업로드된 파일
            owner_id: 업로더 ID
            metadata: 캡션/대체 텍스트/표시 순서/엔티티 연결 정보

        Returns:
            Image: 저장된 이미지 레코드

        Raises:
            InvalidImageException: 검증 실패 (스토리지에 아무것도 남지 않음)
            ImageProcessingException: 가공 또는 저장 실패 (생성된 파일은 정리됨)
        """
        metadata = metadata or ImageUploadMetadata()

        # 1) 검증
        result = self.validator.validate(file.content_type, file.size, file.data)
        if not result.is_valid:
            logger.info(
                f"이미지 업로드 거부: {file.filename} ({result.reason.value}) - {result.message}"
            )
            raise InvalidImageException(result.reason, result.message)

        # 2) 원본 스테이징
        storage_key = self.storage.generate_key(file.filename)
        try:
            self.storage.write(ImageVariant.ORIGINAL, storage_key, file.data)
        except Exception as e:
            logger.error(f"원본 스테이징 실패 ({file.filename} -> {storage_key}): {e}")
            self.processor.delete_artifacts(storage_key)
            raise ImageProcessingException(
                detail=f"이미지 저장에 실패했습니다: {e}", storage_key=storage_key
            ) from e

        # 3) 가공 (실패 시 processor 가 파일을 정리함)
        processed = self.processor.process(storage_key)

        # 4) 메타데이터 저장
        image = Image(
            storage_key=storage_key,
            original_name=file.filename,
            mime_type=file.content_type,
            size_bytes=file.size,
            width=processed.width,
            height=processed.height,
            format=processed.format,
            caption=metadata.caption,
            alt_text=metadata.alt_text,
            display_order=metadata.display_order,
            uploader_id=owner_id,
            entity_type=metadata.entity_type,
            entity_id=metadata.entity_id,
        )
        try:
            with self.transaction():
                self.repository.add(image)
        except Exception as e:
            logger.error(f"이미지 메타데이터 저장 실패 ({storage_key}): {e}")
            self.processor.delete_artifacts(storage_key)
            raise ImageProcessingException(
                detail=f"이미지 정보 저장에 실패했습니다: {e}", storage_key=storage_key
            ) from e

        self.refresh(image)
        logger.info(
            f"이미지 업로드 완료: {file.filename} -> {storage_key} "
            f"({image.width}x{image.height}, uploader={owner_id})"
        )
        return image

    def _check_batch_size(self, count: int) -> None:
        if count == 0:
            raise InvalidImageException(None, ResponseMessages.NO_FILES_UPLOADED)

        limit = self.config.max_files_per_upload
        if count > limit:
            raise ImageUploadLimitException(count, limit)

    def _ingest_into(
        self,
        result: BatchUploadResult,
        file: UploadedImageFile,
        owner_id: UUID,
        metadata: ImageUploadMetadata,
    ) -> None:
        """파일 하나를 업로드하고 결과를 누적 (실패는 기록만 함)"""
        try:
            result.add_success(self.ingest(file, owner_id, metadata))
        except ImageServiceException as e:
            result.add_failure(file.filename, e.detail)
        except Exception as e:
            logger.error(f"일괄 업로드 중 예상치 못한 오류 ({file.filename}): {e}", exc_info=True)
            result.add_failure(file.filename, str(e))

    def ingest_batch(
        self,
        files: list[UploadedImageFile],
        owner_id: UUID,
        metadata: BatchUploadMetadata | None = None,
    ) -> BatchUploadResult:
        """
        여러 이미지를 순서대로 업로드

        한 파일의 실패는 다른 파일의 처리나 이미 저장된 결과에 영향을 주지 않는다.

        Raises:
            ImageUploadLimitException: 파일 수가 허용 개수를 초과한 경우
            InvalidImageException: 파일이 하나도 없는 경우
        """
        self._check_batch_size(len(files))
        metadata = metadata or BatchUploadMetadata()
        result = BatchUploadResult()

        for index, file in enumerate(files):
            self._ingest_into(result, file, owner_id, metadata.for_index(index))

        logger.info(
            f"일괄 업로드 완료: 성공 {result.uploaded}개, 실패 {result.failed}개 "
            f"(uploader={owner_id})"
        )
        return result

    async def ingest_uploads(
        self,
        uploads: list[UploadFile],
        owner_id: UUID,
        metadata: BatchUploadMetadata | None = None,
    ) -> BatchUploadResult:
        """
        요청의 UploadFile 목록을 일괄 업로드

        각 파일은 처리 직전에 읽으므로 메모리에는 한 번에 한 파일만 올라간다.
        """
        self._check_batch_size(len(uploads))
        metadata = metadata or BatchUploadMetadata()
        result = BatchUploadResult()

        for index, upload in enumerate(uploads):
            file = await UploadedImageFile.from_upload(upload, self.config.max_file_size)
            self._ingest_into(result, file, owner_id, metadata.for_index(index))

        logger.info(
            f"일괄 업로드 완료: 성공 {result.uploaded}개, 실패 {result.failed}개 "
            f"(uploader={owner_id})"
        )
        return result

    async def upload_entity_images(
        self,
        uploads: list[UploadFile],
        owner_id: UUID,
        entity_type: EntityType,
        entity_id: int,
        captions: list[str | None] | None = None,
        alt_texts: list[str | None] | None = None,
    ) -> BatchUploadResult:
        """엔티티에 연결된 이미지 일괄 업로드 (표시 순서는 파일 순서)"""
        metadata = BatchUploadMetadata(
            captions=captions or [],
            alt_texts=alt_texts or [],
            entity_type=entity_type,
            entity_id=entity_id,
        )
        return await self.ingest_uploads(uploads, owner_id, metadata)
