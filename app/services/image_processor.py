"""
이미지 파생본 생성 서비스

스테이징된 원본 업로드로부터 최적화 원본과 썸네일을 만들고,
실패 시 해당 키의 모든 파일을 정리한다.
"""

import io
import logging
import mimetypes
from dataclasses import dataclass

from PIL import Image, ImageOps

from app.constants import ImageVariant, SystemConstants
from app.core.config import ImagePipelineConfig
from app.exceptions.image import (
    ImageArtifactNotFoundException,
    ImageProcessingException,
)
from app.utils.image_storage import ImageStorage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessedImage:
    """가공 결과 (최적화 원본 기준)"""

    storage_key: str
    width: int
    height: int
    format: str
    optimized_size: int
    thumbnail_size: int


class ImageArtifactProcessor:
    """최적화 원본/썸네일 생성기"""

    def __init__(self, storage: ImageStorage, config: ImagePipelineConfig):
        self.storage = storage
        self.config = config

    @staticmethod
    def medium_key(storage_key: str) -> str:
        """중간 크기 파생본 키"""
        return f"{SystemConstants.MEDIUM_VARIANT_PREFIX}{storage_key}"

    def _artifact_locations(self, storage_key: str) -> list[tuple[ImageVariant, str]]:
        """키 하나에 대해 존재할 수 있는 모든 파일 위치"""
        return [
            (ImageVariant.ORIGINAL, storage_key),
            (ImageVariant.THUMBNAIL, storage_key),
            (ImageVariant.ORIGINAL, self.medium_key(storage_key)),
        ]

    @staticmethod
    def _to_rgb(img: Image.Image) -> Image.Image:
        """JPEG 로 저장 가능한 RGB 모드로 변환"""
        if img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info):
            # 투명 영역은 흰 배경으로 합성
            rgba = img.convert("RGBA")
            background = Image.new("RGB", rgba.size, (255, 255, 255))
            background.paste(rgba, mask=rgba.getchannel("A"))
            return background
        if img.mode != "RGB":
            return img.convert("RGB")
        return img

    @staticmethod
    def _encode_jpeg(img: Image.Image, quality: int) -> bytes:
        buffer = io.BytesIO()
        img.save(buffer, "JPEG", quality=quality, optimize=True, progressive=True)
        return buffer.getvalue()

    def _optimize(self, img: Image.Image) -> Image.Image:
        """최대 크기 안으로 축소 (비율 유지, 확대 없음)"""
        optimized = img.copy()
        optimized.thumbnail(self.config.optimized_max_size, Image.Resampling.LANCZOS)
        return optimized

    def _make_thumbnail(self, img: Image.Image) -> Image.Image:
        """정사각형 썸네일 (중앙 기준으로 채워서 자르기)"""
        return ImageOps.fit(
            img,
            self.config.thumbnail_size,
            method=Image.Resampling.LANCZOS,
            centering=(0.5, 0.5),
        )

    def _make_medium(self, img: Image.Image) -> Image.Image:
        medium = img.copy()
        medium.thumbnail(self.config.medium_max_size, Image.Resampling.LANCZOS)
        return medium

    def process(self, storage_key: str) -> ProcessedImage:
        """
        스테이징된 원본을 가공하여 최적화 원본과 썸네일 생성

        Args:
            storage_key: 원본 업로드가 저장된 키

        Returns:
            ProcessedImage: 최적화 원본의 크기/포맷 정보

        Raises:
            ImageProcessingException: 가공 실패 (이 키의 파일은 모두 삭제됨)
        """
        try:
            raw = self.storage.read(ImageVariant.ORIGINAL, storage_key)
            if raw is None:
                raise FileNotFoundError(f"스테이징된 원본이 없습니다: {storage_key}")

            with Image.open(io.BytesIO(raw)) as source:
                source.load()
                # EXIF 회전 정보 반영 (재인코딩 시 EXIF 는 제거됨)
                img = self._to_rgb(ImageOps.exif_transpose(source))

            # 1) 최적화 원본: 원본 업로드를 원자적으로 교체
            optimized = self._optimize(img)
            optimized_bytes = self._encode_jpeg(optimized, self.config.optimized_quality)
            self.storage.write(ImageVariant.ORIGINAL, storage_key, optimized_bytes)

            # 2) 썸네일
            thumbnail = self._make_thumbnail(optimized)
            thumbnail_bytes = self._encode_jpeg(thumbnail, self.config.thumbnail_quality)
            self.storage.write(ImageVariant.THUMBNAIL, storage_key, thumbnail_bytes)

            # 3) 중간 크기 (선택)
            if self.config.generate_medium_variant:
                medium_bytes = self._encode_jpeg(
                    self._make_medium(img), self.config.optimized_quality
                )
                self.storage.write(
                    ImageVariant.ORIGINAL, self.medium_key(storage_key), medium_bytes
                )

        except Exception as e:
            logger.error(f"이미지 가공 실패 ({storage_key}): {e}")
            self.delete_artifacts(storage_key)
            raise ImageProcessingException(
                detail=f"이미지 처리에 실패했습니다: {e}", storage_key=storage_key
            ) from e

        logger.info(
            f"이미지 가공 완료: {storage_key} -> {optimized.width}x{optimized.height}, "
            f"{len(optimized_bytes):,} bytes (썸네일 {len(thumbnail_bytes):,} bytes)"
        )

        return ProcessedImage(
            storage_key=storage_key,
            width=optimized.width,
            height=optimized.height,
            format=SystemConstants.PROCESSED_IMAGE_FORMAT,
            optimized_size=len(optimized_bytes),
            thumbnail_size=len(thumbnail_bytes),
        )

    def delete_artifacts(self, storage_key: str) -> int:
        """
        키에 해당하는 모든 파일 삭제 시도 (원본, 썸네일, 중간 크기)

        파일이 없거나 삭제에 실패해도 예외를 던지지 않는다.

        Returns:
            int: 실제로 삭제된 파일 수
        """
        deleted = 0
        for variant, key in self._artifact_locations(storage_key):
            try:
                if self.storage.delete(variant, key):
                    deleted += 1
            except Exception as e:
                logger.warning(f"이미지 파일 삭제 실패 ({variant.value}/{key}): {e}")

        logger.debug(f"이미지 파일 정리: {storage_key} ({deleted}개 삭제)")
        return deleted

    def inspect_artifacts(self, storage_key: str) -> dict:
        """파생본 존재 여부와 크기 조회"""
        original_size = self.storage.size(ImageVariant.ORIGINAL, storage_key)
        thumbnail_size = self.storage.size(ImageVariant.THUMBNAIL, storage_key)

        return {
            "exists": original_size is not None,
            "sizes": {
                "original": original_size or 0,
                "thumbnail": thumbnail_size or 0,
            },
            "has_thumbnail": thumbnail_size is not None,
        }

    @staticmethod
    def _media_type(storage_key: str) -> str:
        media_type, _ = mimetypes.guess_type(storage_key)
        return media_type or "application/octet-stream"

    def load_original(self, storage_key: str) -> tuple[bytes, str]:
        """최적화 원본 파일 조회"""
        if not self.storage.is_valid_key(storage_key):
            raise ImageArtifactNotFoundException(storage_key)

        data = self.storage.read(ImageVariant.ORIGINAL, storage_key)
        if data is None:
            raise ImageArtifactNotFoundException(storage_key)
        return data, self._media_type(storage_key)

    def load_thumbnail(self, storage_key: str) -> tuple[bytes, str]:
        """썸네일 조회 (썸네일이 없으면 원본으로 대체)"""
        if not self.storage.is_valid_key(storage_key):
            raise ImageArtifactNotFoundException(storage_key)

        data = self.storage.read(ImageVariant.THUMBNAIL, storage_key)
        if data is None:
            logger.info(f"썸네일 없음, 원본으로 대체: {storage_key}")
            return self.load_original(storage_key)
        return data, self._media_type(storage_key)
