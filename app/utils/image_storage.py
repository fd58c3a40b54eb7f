"""
이미지 스토리지 유틸리티

키 단위 읽기/쓰기/삭제를 제공하는 스토리지 백엔드 (로컬 디스크, MinIO)
"""

import io
import logging
import os
import tempfile
import uuid
from functools import lru_cache
from pathlib import Path

from minio import Minio
from minio.error import S3Error

from app.constants import ImageVariant, StorageBackend, SystemConstants
from app.core.config import get_settings

# 로깅 설정
logger = logging.getLogger(__name__)


class ImageStorage:
    """이미지 스토리지 기본 클래스"""

    def generate_key(self, original_filename: str | None = None) -> str:
        """
        고유한 스토리지 키 생성

        가공된 파일은 항상 JPEG 로 저장되므로 확장자는 .jpg 로 고정한다.

        Args:
            original_filename: 업로드된 원본 파일명 (로그 용도)

        Returns:
            str: 스토리지 키 (예: "3f2c...e1.jpg")
        """
        return f"{uuid.uuid4().hex}{SystemConstants.PROCESSED_IMAGE_EXTENSION}"

    @staticmethod
    def is_valid_key(key: str) -> bool:
        """디렉토리 탈출이 불가능한 단일 파일명인지 확인"""
        return bool(key) and key not in (".", "..") and "/" not in key and "\\" not in key

    def write(self, variant: ImageVariant, key: str, data: bytes) -> None:
        """키에 데이터를 원자적으로 기록 (기존 파일은 교체)"""
        raise NotImplementedError

    def read(self, variant: ImageVariant, key: str) -> bytes | None:
        """키의 데이터 조회 (없으면 None)"""
        raise NotImplementedError

    def exists(self, variant: ImageVariant, key: str) -> bool:
        """키 존재 여부"""
        return self.size(variant, key) is not None

    def size(self, variant: ImageVariant, key: str) -> int | None:
        """키의 바이트 크기 (없으면 None)"""
        raise NotImplementedError

    def delete(self, variant: ImageVariant, key: str) -> bool:
        """
        키 삭제

        Returns:
            bool: 실제로 삭제했으면 True, 원래 없었으면 False
        """
        raise NotImplementedError


class LocalImageStorage(ImageStorage):
    """로컬 디스크 이미지 스토리지 (uploads/images, uploads/thumbnails)"""

    def __init__(self, root_dir: str | Path):
        self.root_dir = Path(root_dir)
        for variant in ImageVariant:
            (self.root_dir / variant.value).mkdir(parents=True, exist_ok=True)

    def _path(self, variant: ImageVariant, key: str) -> Path:
        if not self.is_valid_key(key):
            raise ValueError(f"허용되지 않는 스토리지 키입니다: {key}")
        return self.root_dir / variant.value / key

    def write(self, variant: ImageVariant, key: str, data: bytes) -> None:
        """임시 파일에 기록한 뒤 os.replace 로 교체"""
        path = self._path(variant, key)
        fd, tmp_path = tempfile.mkstemp(
            dir=path.parent, prefix=f".{key}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_path, path)
        except Exception:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

        logger.debug(f"로컬 파일 저장: {variant.value}/{key} ({len(data)} bytes)")

    def read(self, variant: ImageVariant, key: str) -> bytes | None:
        path = self._path(variant, key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None

    def size(self, variant: ImageVariant, key: str) -> int | None:
        path = self._path(variant, key)
        try:
            return path.stat().st_size
        except FileNotFoundError:
            return None

    def delete(self, variant: ImageVariant, key: str) -> bool:
        path = self._path(variant, key)
        try:
            path.unlink()
        except FileNotFoundError:
            return False

        logger.debug(f"로컬 파일 삭제: {variant.value}/{key}")
        return True


class MinIOImageStorage(ImageStorage):
    """MinIO 이미지 스토리지"""

    def __init__(self, client: Minio, bucket_name: str):
        self.client = client
        self.bucket_name = bucket_name

        # 버킷 생성 (존재하지 않을 경우)
        self._ensure_bucket_exists()

    @classmethod
    def from_settings(cls) -> "MinIOImageStorage":
        """설정값으로 MinIO 클라이언트를 만들어 스토리지 생성"""
        settings = get_settings()
        client = Minio(
            endpoint=settings.minio_endpoint,
            access_key=settings.minio_access_key,
            secret_key=settings.minio_secret_key,
            secure=settings.minio_secure,
        )
        logger.info(
            f"MinIO 클라이언트 초기화: {settings.minio_endpoint}, 버킷: {settings.minio_bucket_name}"
        )
        return cls(client, settings.minio_bucket_name)

    def _ensure_bucket_exists(self) -> None:
        """버킷 존재 확인 및 생성"""
        if not self.client.bucket_exists(self.bucket_name):
            self.client.make_bucket(self.bucket_name)
            logger.info(f"MinIO 버킷 생성: {self.bucket_name}")

    def _object_name(self, variant: ImageVariant, key: str) -> str:
        if not self.is_valid_key(key):
            raise ValueError(f"허용되지 않는 스토리지 키입니다: {key}")
        return f"{variant.value}/{key}"

    def write(self, variant: ImageVariant, key: str, data: bytes) -> None:
        """put_object 는 객체 단위로 원자적"""
        object_name = self._object_name(variant, key)
        self.client.put_object(
            bucket_name=self.bucket_name,
            object_name=object_name,
            data=io.BytesIO(data),
            length=len(data),
            content_type=SystemConstants.PROCESSED_MEDIA_TYPE,
        )
        logger.debug(f"MinIO 객체 저장: {object_name} ({len(data)} bytes)")

    def read(self, variant: ImageVariant, key: str) -> bytes | None:
        object_name = self._object_name(variant, key)
        try:
            response = self.client.get_object(self.bucket_name, object_name)
        except S3Error as e:
            if e.code in ("NoSuchKey", "NoSuchObject"):
                return None
            raise

        try:
            return response.read()
        finally:
            response.close()
            response.release_conn()

    def size(self, variant: ImageVariant, key: str) -> int | None:
        object_name = self._object_name(variant, key)
        try:
            stat = self.client.stat_object(self.bucket_name, object_name)
        except S3Error as e:
            if e.code in ("NoSuchKey", "NoSuchObject"):
                return None
            raise
        return stat.size

    def delete(self, variant: ImageVariant, key: str) -> bool:
        # remove_object 는 없는 객체도 오류 없이 처리하므로 먼저 존재 여부 확인
        if not self.exists(variant, key):
            return False

        object_name = self._object_name(variant, key)
        self.client.remove_object(self.bucket_name, object_name)
        logger.debug(f"MinIO 객체 삭제: {object_name}")
        return True


@lru_cache()
def get_image_storage() -> ImageStorage:
    """설정된 스토리지 백엔드 인스턴스 반환 (싱글톤)"""
    settings = get_settings()
    backend = StorageBackend(settings.storage_backend.lower())

    if backend is StorageBackend.MINIO:
        return MinIOImageStorage.from_settings()
    return LocalImageStorage(settings.upload_dir)
