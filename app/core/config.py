"""애플리케이션 설정"""

import os
from functools import lru_cache
from typing import List, Union

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic_settings import BaseSettings

from app.core.env_config import load_env_file

# os.getenv 기본값이 평가되기 전에 .env 로드
load_env_file()


class Settings(BaseSettings):
    """애플리케이션 설정"""

    # 기본 설정
    app_name: str = "시르쿨로 - 미디어 업로드 서비스"
    debug: bool = False
    version: str = "1.0.0"
    environment: str = "development"

    # 서버 설정
    host: str = "0.0.0.0"
    port: int = 8000
    public_base_url: str = os.getenv("PUBLIC_BASE_URL", "http://localhost:8000")

    # 데이터베이스 설정
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./sirkulo_media.db")
    database_echo: bool = os.getenv("DATABASE_ECHO", "false").lower() == "true"
    database_pool_size: int = int(os.getenv("DATABASE_POOL_SIZE", "10"))
    database_max_overflow: int = int(os.getenv("DATABASE_MAX_OVERFLOW", "20"))
    database_pool_timeout: int = int(os.getenv("DATABASE_POOL_TIMEOUT", "30"))
    database_pool_recycle: int = int(os.getenv("DATABASE_POOL_RECYCLE", "3600"))
    database_ssl_mode: str = os.getenv("DATABASE_SSL_MODE", "prefer")

    # 보안 설정
    secret_key: str = os.getenv(
        "SECRET_KEY", "sirkulo-media-development-secret-key-change-me"
    )
    jwt_algorithm: str = os.getenv("JWT_ALGORITHM", "HS256")
    jwt_access_token_expire_minutes: int = int(
        os.getenv("JWT_ACCESS_TOKEN_EXPIRE_MINUTES", "60")
    )

    # 스토리지 설정 (local | minio)
    storage_backend: str = os.getenv("STORAGE_BACKEND", "local")
    upload_dir: str = os.getenv("UPLOAD_DIR", "uploads")

    # MinIO 설정
    minio_endpoint: str = os.getenv("MINIO_ENDPOINT", "localhost:9000")
    minio_access_key: str = os.getenv("MINIO_ACCESS_KEY", "")
    minio_secret_key: str = os.getenv("MINIO_SECRET_KEY", "")
    minio_secure: bool = os.getenv("MINIO_SECURE", "false").lower() == "true"
    minio_bucket_name: str = os.getenv("MINIO_BUCKET_NAME", "sirkulo")

    # 이미지 업로드 설정
    allowed_image_types: Union[List[str], str] = os.getenv(
        "ALLOWED_IMAGE_TYPES", "image/jpeg,image/jpg,image/png,image/webp"
    )
    max_file_size: int = int(os.getenv("MAX_FILE_SIZE", str(5 * 1024 * 1024)))
    max_files_per_upload: int = int(os.getenv("MAX_FILES_PER_UPLOAD", "10"))
    min_image_width: int = int(os.getenv("MIN_IMAGE_WIDTH", "100"))
    min_image_height: int = int(os.getenv("MIN_IMAGE_HEIGHT", "100"))

    # 이미지 가공 설정
    optimized_max_width: int = int(os.getenv("OPTIMIZED_MAX_WIDTH", "1200"))
    optimized_max_height: int = int(os.getenv("OPTIMIZED_MAX_HEIGHT", "900"))
    optimized_quality: int = int(os.getenv("OPTIMIZED_QUALITY", "85"))
    thumbnail_width: int = int(os.getenv("THUMBNAIL_WIDTH", "200"))
    thumbnail_height: int = int(os.getenv("THUMBNAIL_HEIGHT", "200"))
    thumbnail_quality: int = int(os.getenv("THUMBNAIL_QUALITY", "80"))
    medium_max_width: int = int(os.getenv("MEDIUM_MAX_WIDTH", "800"))
    medium_max_height: int = int(os.getenv("MEDIUM_MAX_HEIGHT", "600"))
    generate_medium_variant: bool = (
        os.getenv("GENERATE_MEDIUM_VARIANT", "false").lower() == "true"
    )

    # 고아 이미지 정리 설정
    orphan_retention_days: int = int(os.getenv("ORPHAN_RETENTION_DAYS", "7"))
    orphan_reclaim_enabled: bool = (
        os.getenv("ORPHAN_RECLAIM_ENABLED", "true").lower() == "true"
    )
    orphan_reclaim_hour: int = int(os.getenv("ORPHAN_RECLAIM_HOUR", "3"))

    # CORS 설정 (환경변수에서 쉼표로 구분된 문자열을 리스트로 변환)
    allowed_hosts: Union[List[str], str] = os.getenv(
        "ALLOWED_HOSTS", "http://localhost:3000,http://localhost:8081"
    )

    @field_validator("allowed_hosts", "allowed_image_types", mode="before")
    @classmethod
    def parse_comma_separated(cls, v):
        """쉼표로 구분된 환경변수를 리스트로 파싱"""
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @property
    def is_development(self) -> bool:
        """개발 환경인지 확인"""
        return self.environment.lower() == "development"

    @property
    def is_production(self) -> bool:
        """운영 환경인지 확인"""
        return self.environment.lower() == "production"

    @property
    def cors_origins(self) -> List[str]:
        """CORS origins 반환"""
        if isinstance(self.allowed_hosts, list):
            return self.allowed_hosts
        return [self.allowed_hosts]

    model_config = {"env_file": ".env", "case_sensitive": False, "extra": "ignore"}


class ImagePipelineConfig(BaseModel):
    """
    이미지 파이프라인 설정

    검증/가공/정리 기준값을 한 곳에 묶어 서비스 생성 시 명시적으로 전달한다.
    """

    model_config = ConfigDict(frozen=True)

    allowed_mime_types: tuple[str, ...] = (
        "image/jpeg",
        "image/jpg",
        "image/png",
        "image/webp",
    )
    # 디코딩된 실제 포맷 (Pillow format 소문자, mpo 는 카메라 JPEG)
    allowed_formats: tuple[str, ...] = ("jpeg", "mpo", "png", "webp")
    max_file_size: int = 5 * 1024 * 1024
    max_files_per_upload: int = 10
    min_width: int = 100
    min_height: int = 100

    optimized_max_size: tuple[int, int] = (1200, 900)
    optimized_quality: int = 85
    thumbnail_size: tuple[int, int] = (200, 200)
    thumbnail_quality: int = 80
    medium_max_size: tuple[int, int] = (800, 600)
    generate_medium_variant: bool = False

    orphan_retention_days: int = 7
    public_base_url: str = "http://localhost:8000"

    @property
    def max_file_size_mb(self) -> float:
        """최대 파일 크기 (MB)"""
        return self.max_file_size / (1024 * 1024)

    def image_url(self, storage_key: str) -> str:
        """원본(최적화) 이미지 URL 생성"""
        return f"{self.public_base_url.rstrip('/')}/api/uploads/image/{storage_key}"

    def thumbnail_url(self, storage_key: str) -> str:
        """썸네일 URL 생성"""
        return f"{self.public_base_url.rstrip('/')}/api/uploads/thumbnail/{storage_key}"

    @classmethod
    def from_settings(cls, settings: Settings) -> "ImagePipelineConfig":
        """애플리케이션 설정으로부터 파이프라인 설정 생성"""
        return cls(
            allowed_mime_types=tuple(settings.allowed_image_types),
            max_file_size=settings.max_file_size,
            max_files_per_upload=settings.max_files_per_upload,
            min_width=settings.min_image_width,
            min_height=settings.min_image_height,
            optimized_max_size=(
                settings.optimized_max_width,
                settings.optimized_max_height,
            ),
            optimized_quality=settings.optimized_quality,
            thumbnail_size=(settings.thumbnail_width, settings.thumbnail_height),
            thumbnail_quality=settings.thumbnail_quality,
            medium_max_size=(settings.medium_max_width, settings.medium_max_height),
            generate_medium_variant=settings.generate_medium_variant,
            orphan_retention_days=settings.orphan_retention_days,
            public_base_url=settings.public_base_url,
        )


@lru_cache()
def get_settings() -> Settings:
    """설정 싱글톤 인스턴스 반환"""
    return Settings()


@lru_cache()
def get_pipeline_config() -> ImagePipelineConfig:
    """이미지 파이프라인 설정 반환"""
    return ImagePipelineConfig.from_settings(get_settings())


# 전역 settings 객체 생성
settings = get_settings()
