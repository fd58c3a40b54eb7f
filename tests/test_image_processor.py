"""
이미지 파생본 생성 서비스 테스트
"""

import io
from unittest.mock import patch

import pytest
from PIL import Image as PILImage

from app.constants import ImageVariant
from app.core.config import ImagePipelineConfig
from app.exceptions.image import (
    ImageArtifactNotFoundException,
    ImageProcessingException,
)
from app.services.image_processor import ImageArtifactProcessor


@pytest.fixture
def processor(storage, pipeline_config):
    return ImageArtifactProcessor(storage, pipeline_config)


def _stage(storage, data: bytes) -> str:
    key = storage.generate_key("upload.jpg")
    storage.write(ImageVariant.ORIGINAL, key, data)
    return key


def _open(storage, variant, key) -> PILImage.Image:
    img = PILImage.open(io.BytesIO(storage.read(variant, key)))
    img.load()
    return img


class TestProcess:
    """최적화 원본/썸네일 생성 테스트"""

    def test_large_image_is_bounded(self, processor, storage, make_image):
        """4000x3000 원본은 1200x900 안으로 축소되고 썸네일은 200x200"""
        key = _stage(storage, make_image(4000, 3000))

        result = processor.process(key)

        assert (result.width, result.height) == (1200, 900)
        assert result.format == "jpeg"

        optimized = _open(storage, ImageVariant.ORIGINAL, key)
        thumbnail = _open(storage, ImageVariant.THUMBNAIL, key)
        assert optimized.size == (1200, 900)
        assert optimized.format == "JPEG"
        assert thumbnail.size == (200, 200)

    def test_aspect_ratio_preserved(self, processor, storage, make_image):
        """세로로 긴 이미지는 높이 기준으로 축소"""
        key = _stage(storage, make_image(1000, 2000))

        result = processor.process(key)

        assert result.height == 900
        assert result.width == 450

    def test_small_image_not_upscaled(self, processor, storage, make_image):
        """최대 크기보다 작은 이미지는 확대하지 않음"""
        key = _stage(storage, make_image(640, 480))

        result = processor.process(key)

        assert (result.width, result.height) == (640, 480)
        assert _open(storage, ImageVariant.THUMBNAIL, key).size == (200, 200)

    def test_transparent_png_converted_to_jpeg(self, processor, storage, png_bytes):
        """투명 PNG 는 RGB JPEG 로 변환"""
        key = _stage(storage, png_bytes)

        processor.process(key)

        optimized = _open(storage, ImageVariant.ORIGINAL, key)
        assert optimized.mode == "RGB"
        assert optimized.format == "JPEG"

    def test_exif_orientation_applied(self, processor, storage):
        """EXIF 회전 정보가 반영되고 EXIF 는 제거됨"""
        exif = PILImage.Exif()
        exif[0x0112] = 6  # 90도 회전
        buffer = io.BytesIO()
        PILImage.new("RGB", (600, 300), (0, 0, 255)).save(buffer, "JPEG", exif=exif)
        key = _stage(storage, buffer.getvalue())

        result = processor.process(key)

        assert (result.width, result.height) == (300, 600)
        optimized = _open(storage, ImageVariant.ORIGINAL, key)
        assert 0x0112 not in optimized.getexif()

    def test_medium_variant_optional(self, storage, make_image):
        """설정 시 medium_ 파생본 생성"""
        processor = ImageArtifactProcessor(
            storage, ImagePipelineConfig(generate_medium_variant=True)
        )
        key = _stage(storage, make_image(2000, 1500))

        processor.process(key)

        medium = _open(storage, ImageVariant.ORIGINAL, f"medium_{key}")
        assert medium.size == (800, 600)

    def test_medium_variant_off_by_default(self, processor, storage, make_image):
        key = _stage(storage, make_image(2000, 1500))

        processor.process(key)

        assert not storage.exists(ImageVariant.ORIGINAL, f"medium_{key}")


class TestProcessFailure:
    """가공 실패 시 정리 테스트"""

    def test_undecodable_upload_leaves_nothing(self, processor, storage):
        """디코딩 불가 파일은 예외 후 모든 파일이 삭제됨"""
        key = _stage(storage, b"not an image")

        with pytest.raises(ImageProcessingException) as exc_info:
            processor.process(key)

        assert exc_info.value.storage_key == key
        assert exc_info.value.status_code == 500
        assert not storage.exists(ImageVariant.ORIGINAL, key)
        assert not storage.exists(ImageVariant.THUMBNAIL, key)

    def test_thumbnail_write_failure_cleans_up(self, processor, storage, make_image):
        """썸네일 저장 실패 시 이미 만든 최적화 원본도 삭제"""
        key = _stage(storage, make_image(640, 480))
        original_write = storage.write

        def failing_write(variant, write_key, data):
            if variant is ImageVariant.THUMBNAIL:
                raise OSError("disk full")
            return original_write(variant, write_key, data)

        with patch.object(storage, "write", side_effect=failing_write):
            with pytest.raises(ImageProcessingException):
                processor.process(key)

        assert not storage.exists(ImageVariant.ORIGINAL, key)
        assert not storage.exists(ImageVariant.THUMBNAIL, key)

    def test_missing_staged_file(self, processor, storage):
        """스테이징 파일이 없으면 가공 실패"""
        with pytest.raises(ImageProcessingException):
            processor.process(storage.generate_key())


class TestDeleteArtifacts:
    """파일 삭제 테스트"""

    def test_deletes_all_variants(self, storage, make_image):
        processor = ImageArtifactProcessor(
            storage, ImagePipelineConfig(generate_medium_variant=True)
        )
        key = _stage(storage, make_image(2000, 1500))
        processor.process(key)

        assert processor.delete_artifacts(key) == 3
        assert not storage.exists(ImageVariant.ORIGINAL, key)
        assert not storage.exists(ImageVariant.THUMBNAIL, key)
        assert not storage.exists(ImageVariant.ORIGINAL, f"medium_{key}")

    def test_missing_files_tolerated(self, processor, storage):
        """이미 없는 파일 삭제는 오류 없이 0 반환"""
        assert processor.delete_artifacts(storage.generate_key()) == 0

    def test_backend_error_tolerated(self, processor, storage, make_image):
        """스토리지 오류가 나도 예외를 던지지 않음"""
        key = _stage(storage, make_image(640, 480))

        with patch.object(storage, "delete", side_effect=OSError("permission denied")):
            assert processor.delete_artifacts(key) == 0


class TestLoad:
    """파일 조회 테스트"""

    def test_load_original_and_thumbnail(self, processor, storage, make_image):
        key = _stage(storage, make_image(640, 480))
        processor.process(key)

        original, media_type = processor.load_original(key)
        thumbnail, _ = processor.load_thumbnail(key)

        assert media_type == "image/jpeg"
        assert original != thumbnail

    def test_thumbnail_falls_back_to_original(self, processor, storage, make_image):
        """썸네일이 없으면 원본 반환"""
        key = _stage(storage, make_image(640, 480))

        data, _ = processor.load_thumbnail(key)

        assert data == storage.read(ImageVariant.ORIGINAL, key)

    def test_missing_original_raises(self, processor, storage):
        with pytest.raises(ImageArtifactNotFoundException):
            processor.load_thumbnail(storage.generate_key())

    @pytest.mark.parametrize("key", ["../secret.jpg", "a/b.jpg", "..", ""])
    def test_invalid_key_raises(self, processor, key):
        """경로 탈출 키는 조회하지 않음"""
        with pytest.raises(ImageArtifactNotFoundException):
            processor.load_original(key)

    def test_inspect_artifacts(self, processor, storage, make_image):
        key = _stage(storage, make_image(640, 480))
        processor.process(key)

        info = processor.inspect_artifacts(key)

        assert info["exists"] is True
        assert info["has_thumbnail"] is True
        assert info["sizes"]["original"] > 0
