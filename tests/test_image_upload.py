"""
이미지 업로드 서비스 테스트
"""

import asyncio
import io
from unittest.mock import Mock, patch

import pytest
from fastapi import UploadFile
from pydantic import ValidationError
from sqlalchemy.exc import OperationalError
from starlette.datastructures import Headers

from app.constants import EntityType, ImageVariant, RejectionReason
from app.exceptions.image import (
    ImageProcessingException,
    ImageUploadLimitException,
    InvalidImageException,
)
from app.schemas.image import BatchUploadMetadata, ImageUploadMetadata
from app.services.image_upload import ImageUploadService, UploadedImageFile


@pytest.fixture
def service(test_session, storage, pipeline_config):
    return ImageUploadService(test_session, storage, pipeline_config)


def _file(name: str, data: bytes, content_type: str = "image/jpeg") -> UploadedImageFile:
    return UploadedImageFile(filename=name, content_type=content_type, data=data)


def _upload_file(name: str, data: bytes, content_type: str = "image/jpeg") -> UploadFile:
    return UploadFile(
        file=io.BytesIO(data),
        filename=name,
        headers=Headers({"content-type": content_type}),
    )


def _stored_keys(storage) -> set[str]:
    return {
        path.name
        for variant in ImageVariant
        for path in (storage.root_dir / variant.value).iterdir()
    }


class TestIngest:
    """단일 업로드 테스트"""

    def test_valid_upload(self, service, storage, owner_id, make_image):
        data = make_image(4000, 3000)

        image = service.ingest(
            _file("sofa.jpg", data),
            owner_id,
            ImageUploadMetadata(caption="빈티지 소파", alt_text="갈색 소파"),
        )

        assert image.original_name == "sofa.jpg"
        assert image.mime_type == "image/jpeg"
        assert image.size_bytes == len(data)
        assert (image.width, image.height) == (1200, 900)
        assert image.format == "jpeg"
        assert image.caption == "빈티지 소파"
        assert image.uploader_id == owner_id
        assert not image.is_associated
        assert storage.exists(ImageVariant.ORIGINAL, image.storage_key)
        assert storage.exists(ImageVariant.THUMBNAIL, image.storage_key)

    def test_upload_with_association(self, service, owner_id, jpeg_bytes):
        image = service.ingest(
            _file("a.jpg", jpeg_bytes),
            owner_id,
            ImageUploadMetadata(entity_type=EntityType.CRAFTS_LISTING, entity_id=12),
        )

        assert (image.entity_type, image.entity_id) == (EntityType.CRAFTS_LISTING, 12)

    def test_invalid_upload_leaves_no_trace(self, service, storage, owner_id, test_session):
        """검증 실패 시 스토리지/DB 모두 비어 있음"""
        with pytest.raises(InvalidImageException) as exc_info:
            service.ingest(_file("bad.jpg", b"garbage"), owner_id)

        assert exc_info.value.reason == RejectionReason.DECODE_FAILED
        assert exc_info.value.status_code == 400
        assert _stored_keys(storage) == set()
        assert service.repository.list_by_uploader(owner_id)[1] == 0

    def test_too_large_rejected_before_decoding(self, service, owner_id, pipeline_config):
        data = b"\xff" * (pipeline_config.max_file_size + 1)

        with pytest.raises(InvalidImageException) as exc_info:
            service.ingest(_file("huge.jpg", data), owner_id)

        assert exc_info.value.reason == RejectionReason.FILE_TOO_LARGE

    def test_processing_failure_cleans_up(self, service, storage, owner_id, jpeg_bytes):
        with patch.object(
            service.processor, "_make_thumbnail", side_effect=OSError("codec error")
        ):
            with pytest.raises(ImageProcessingException):
                service.ingest(_file("a.jpg", jpeg_bytes), owner_id)

        assert _stored_keys(storage) == set()
        assert service.repository.list_by_uploader(owner_id)[1] == 0

    def test_persistence_failure_removes_files(self, service, storage, owner_id, jpeg_bytes):
        """메타데이터 저장 실패 시 생성된 파일 삭제"""
        with patch.object(
            service.repository,
            "add",
            side_effect=OperationalError("INSERT", {}, Exception("db down")),
        ):
            with pytest.raises(ImageProcessingException):
                service.ingest(_file("a.jpg", jpeg_bytes), owner_id)

        assert _stored_keys(storage) == set()

    def test_staging_failure(self, service, storage, owner_id, jpeg_bytes):
        with patch.object(storage, "write", side_effect=OSError("read-only fs")):
            with pytest.raises(ImageProcessingException):
                service.ingest(_file("a.jpg", jpeg_bytes), owner_id)

        assert _stored_keys(storage) == set()


class TestIngestBatch:
    """일괄 업로드 테스트"""

    def test_partial_failure(self, service, storage, owner_id, jpeg_bytes, png_bytes):
        """[정상, 손상, 정상] -> 성공 2, 실패 1"""
        files = [
            _file("valid.jpg", jpeg_bytes),
            _file("corrupt.jpg", b"\x00\x01not-a-jpeg"),
            _file("valid2.png", png_bytes, "image/png"),
        ]

        result = service.ingest_batch(files, owner_id)

        assert result.uploaded == 2
        assert result.failed == 1
        assert len(result.error_messages) == 1
        assert result.error_messages[0].startswith("corrupt.jpg: ")
        assert [image.original_name for image in result.images] == ["valid.jpg", "valid2.png"]
        # 실패한 파일은 아무것도 남기지 않음
        assert len(_stored_keys(storage)) == 2

    def test_display_order_defaults_to_index(self, service, owner_id, jpeg_bytes):
        files = [_file(f"{i}.jpg", jpeg_bytes) for i in range(3)]

        result = service.ingest_batch(
            files,
            owner_id,
            BatchUploadMetadata(captions=["첫째", None], display_orders=[5]),
        )

        assert [image.display_order for image in result.images] == [5, 1, 2]
        assert [image.caption for image in result.images] == ["첫째", None, None]

    def test_failed_file_keeps_index_positions(self, service, owner_id, jpeg_bytes):
        """실패한 파일이 있어도 나머지 파일의 순서값은 원래 위치 기준"""
        files = [
            _file("bad.gif", jpeg_bytes, "image/gif"),
            _file("ok.jpg", jpeg_bytes),
        ]

        result = service.ingest_batch(files, owner_id)

        assert result.images[0].display_order == 1
        assert "bad.gif" in result.error_messages[0]

    def test_shared_association(self, service, owner_id, jpeg_bytes):
        files = [_file(f"{i}.jpg", jpeg_bytes) for i in range(2)]

        result = service.ingest_batch(
            files,
            owner_id,
            BatchUploadMetadata(entity_type=EntityType.LISTING, entity_id=3),
        )

        assert all(image.entity_id == 3 for image in result.images)

    def test_too_many_files_refused(self, service, owner_id, jpeg_bytes, storage):
        files = [_file(f"{i}.jpg", jpeg_bytes) for i in range(11)]

        with pytest.raises(ImageUploadLimitException):
            service.ingest_batch(files, owner_id)

        assert _stored_keys(storage) == set()

    def test_empty_batch_refused(self, service, owner_id):
        with pytest.raises(InvalidImageException):
            service.ingest_batch([], owner_id)

    def test_unexpected_error_is_isolated(self, service, owner_id, jpeg_bytes):
        """예상치 못한 오류도 해당 파일만 실패 처리"""
        original_ingest = service.ingest
        calls = {"count": 0}

        def flaky_ingest(file, owner, metadata=None):
            calls["count"] += 1
            if calls["count"] == 1:
                raise RuntimeError("unexpected")
            return original_ingest(file, owner, metadata)

        with patch.object(service, "ingest", side_effect=flaky_ingest):
            result = service.ingest_batch(
                [_file("a.jpg", jpeg_bytes), _file("b.jpg", jpeg_bytes)], owner_id
            )

        assert result.uploaded == 1
        assert result.error_messages == ["a.jpg: unexpected"]

    def test_upload_entity_images(self, service, owner_id, jpeg_bytes):
        uploads = [_upload_file(f"{i}.jpg", jpeg_bytes) for i in range(2)]

        result = asyncio.run(
            service.upload_entity_images(
                uploads, owner_id, EntityType.PROJECT_LISTING, 8, captions=["a", "b"]
            )
        )

        images = service.repository.list_by_entity(EntityType.PROJECT_LISTING, 8)
        assert result.uploaded == 2
        assert [image.caption for image in images] == ["a", "b"]
        assert [image.display_order for image in images] == [0, 1]

    def test_uploads_read_one_at_a_time(self, service, owner_id, jpeg_bytes):
        """각 파일은 앞 파일 처리가 끝난 뒤에 읽힘"""
        events = []

        def tracked_upload(name: str) -> Mock:
            upload = Mock(spec=UploadFile)
            upload.filename = name
            upload.content_type = "image/jpeg"

            async def async_read(size=-1):
                events.append(f"read {name}")
                return jpeg_bytes

            upload.read = async_read
            return upload

        original_ingest = service.ingest

        def tracked_ingest(file, owner, metadata=None):
            events.append(f"ingest {file.filename}")
            return original_ingest(file, owner, metadata)

        with patch.object(service, "ingest", side_effect=tracked_ingest):
            result = asyncio.run(
                service.ingest_uploads(
                    [tracked_upload("a.jpg"), tracked_upload("b.jpg")], owner_id
                )
            )

        assert result.uploaded == 2
        assert events == ["read a.jpg", "ingest a.jpg", "read b.jpg", "ingest b.jpg"]

    def test_uploads_limit_checked_before_reading(self, service, owner_id):
        uploads = [Mock(spec=UploadFile) for _ in range(11)]

        with pytest.raises(ImageUploadLimitException):
            asyncio.run(service.ingest_uploads(uploads, owner_id))

        for upload in uploads:
            upload.read.assert_not_called()


class TestUploadMetadata:
    """업로드 메타데이터 검증 테스트"""

    def test_entity_pair_required(self):
        with pytest.raises(ValidationError):
            ImageUploadMetadata(entity_type=EntityType.LISTING)

        with pytest.raises(ValidationError):
            BatchUploadMetadata(entity_id=3)

    def test_invalid_entity_type(self):
        with pytest.raises(ValidationError):
            ImageUploadMetadata(entity_type="warehouse", entity_id=1)


class TestUploadedImageFile:
    """UploadFile 변환 테스트"""

    def test_reads_at_most_limit_plus_one(self):
        upload = Mock(spec=UploadFile)
        upload.filename = "big.jpg"
        upload.content_type = "image/jpeg"
        received = {}

        async def async_read(size=-1):
            received["size"] = size
            return b"x" * size

        upload.read = async_read

        file = asyncio.run(UploadedImageFile.from_upload(upload, max_size=10))

        assert received["size"] == 11
        assert file.size == 11
        assert file.filename == "big.jpg"
