"""
테스트용 공통 설정 및 픽스처
"""

import io
import uuid
from datetime import timedelta

import pytest
from PIL import Image as PILImage
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from app.constants import ImageVariant
from app.core.config import ImagePipelineConfig
from app.models import Base
from app.models.base import utcnow
from app.models.image import Image
from app.utils.image_storage import LocalImageStorage


def make_image_bytes(
    width: int = 640,
    height: int = 480,
    fmt: str = "JPEG",
    color=(200, 120, 40),
    mode: str = "RGB",
) -> bytes:
    """Pillow 로 테스트용 이미지 바이트 생성"""
    buffer = io.BytesIO()
    PILImage.new(mode, (width, height), color).save(buffer, fmt)
    return buffer.getvalue()


@pytest.fixture
def test_engine():
    """테스트용 인메모리 데이터베이스 엔진"""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def test_session(test_engine):
    """테스트용 데이터베이스 세션"""
    with Session(test_engine) as session:
        yield session


@pytest.fixture
def storage(tmp_path):
    """임시 디렉토리 기반 로컬 스토리지"""
    return LocalImageStorage(tmp_path / "uploads")


@pytest.fixture
def pipeline_config():
    """테스트용 이미지 파이프라인 설정"""
    return ImagePipelineConfig(public_base_url="http://testserver")


@pytest.fixture
def owner_id():
    """업로더 ID"""
    return uuid.uuid4()


@pytest.fixture
def other_user_id():
    """업로더가 아닌 다른 사용자 ID"""
    return uuid.uuid4()


@pytest.fixture
def jpeg_bytes():
    """640x480 JPEG"""
    return make_image_bytes(640, 480, "JPEG")


@pytest.fixture
def png_bytes():
    """800x600 PNG"""
    return make_image_bytes(800, 600, "PNG", color=(10, 200, 90, 128), mode="RGBA")


@pytest.fixture
def image_factory(test_session, storage):
    """
    DB 레코드(와 선택적으로 스토리지 파일)를 바로 생성하는 팩토리

    생성 시각을 과거로 지정할 수 있어 고아 이미지 정리 테스트에 사용한다.
    """

    def _create(
        uploader_id,
        *,
        age_days: float = 0,
        entity_type=None,
        entity_id=None,
        display_order: int = 0,
        with_files: bool = False,
    ) -> Image:
        storage_key = storage.generate_key()
        created_at = utcnow() - timedelta(days=age_days)
        image = Image(
            storage_key=storage_key,
            original_name="photo.jpg",
            mime_type="image/jpeg",
            size_bytes=1024,
            width=640,
            height=480,
            format="jpeg",
            display_order=display_order,
            uploader_id=uploader_id,
            entity_type=entity_type,
            entity_id=entity_id,
            created_at=created_at,
            updated_at=created_at,
        )
        test_session.add(image)
        test_session.commit()

        if with_files:
            storage.write(ImageVariant.ORIGINAL, storage_key, make_image_bytes(640, 480))
            storage.write(ImageVariant.THUMBNAIL, storage_key, make_image_bytes(200, 200))

        return image

    return _create


@pytest.fixture
def make_image():
    """이미지 바이트 생성 함수"""
    return make_image_bytes
