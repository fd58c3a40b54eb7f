"""
업로드 이미지 검증 서비스

선언된 MIME 타입, 바이트 크기, 디코딩 결과(픽셀 크기)를 확인한다.
스토리지나 데이터베이스에 아무것도 기록하지 않는다.
"""

import io
import logging
import warnings
from dataclasses import dataclass

from PIL import Image, UnidentifiedImageError

from app.constants import RejectionReason
from app.core.config import ImagePipelineConfig

logger = logging.getLogger(__name__)

# Pillow 디코딩 중 발생할 수 있는 오류들
DECODE_ERRORS = (
    UnidentifiedImageError,
    Image.DecompressionBombError,
    OSError,
    SyntaxError,
    ValueError,
)


@dataclass(frozen=True)
class ValidationResult:
    """이미지 검증 결과"""

    is_valid: bool
    reason: RejectionReason | None = None
    message: str | None = None
    width: int | None = None
    height: int | None = None
    format: str | None = None

    @classmethod
    def accept(
        cls, width: int | None = None, height: int | None = None, format: str | None = None
    ) -> "ValidationResult":
        return cls(is_valid=True, width=width, height=height, format=format)

    @classmethod
    def reject(cls, reason: RejectionReason, message: str) -> "ValidationResult":
        return cls(is_valid=False, reason=reason, message=message)


class ImageValidator:
    """업로드 이미지 검증기"""

    def __init__(self, config: ImagePipelineConfig):
        self.config = config

    def check_declared(self, content_type: str | None, size: int) -> ValidationResult:
        """선언된 MIME 타입과 파일 크기 검증"""
        allowed = self.config.allowed_mime_types
        if not content_type or content_type.lower() not in allowed:
            return ValidationResult.reject(
                RejectionReason.UNSUPPORTED_TYPE,
                f"허용되지 않는 파일 형식입니다. 허용된 형식: {', '.join(allowed)}",
            )

        if size <= 0:
            return ValidationResult.reject(
                RejectionReason.EMPTY_FILE, "빈 파일은 업로드할 수 없습니다."
            )

        if size > self.config.max_file_size:
            return ValidationResult.reject(
                RejectionReason.FILE_TOO_LARGE,
                f"파일 크기가 {self.config.max_file_size_mb:g}MB를 초과합니다.",
            )

        return ValidationResult.accept()

    def check_dimensions(self, width: int, height: int) -> ValidationResult:
        """디코딩된 이미지의 최소 크기 검증"""
        min_width, min_height = self.config.min_width, self.config.min_height
        if width < min_width or height < min_height:
            return ValidationResult.reject(
                RejectionReason.DIMENSIONS_TOO_SMALL,
                f"이미지 크기가 너무 작습니다 (최소 {min_width}x{min_height}px, "
                f"현재 {width}x{height}px)",
            )
        return ValidationResult.accept(width=width, height=height)

    def check_format(self, image_format: str | None) -> ValidationResult:
        """디코딩된 실제 포맷이 허용 목록에 있는지 검증"""
        allowed = self.config.allowed_formats
        if image_format not in allowed:
            return ValidationResult.reject(
                RejectionReason.UNSUPPORTED_TYPE,
                f"선언된 형식과 달리 실제 파일 형식({image_format or 'unknown'})은 "
                f"허용되지 않습니다. 허용된 형식: {', '.join(allowed)}",
            )
        return ValidationResult.accept(format=image_format)

    def decode(self, data: bytes) -> ValidationResult:
        """픽셀 데이터 전체를 디코딩하여 크기/포맷 확인"""
        try:
            with warnings.catch_warnings():
                # DecompressionBombWarning 도 거부 대상으로 취급
                warnings.simplefilter("error", Image.DecompressionBombWarning)
                with Image.open(io.BytesIO(data)) as img:
                    img.load()
                    width, height = img.size
                    image_format = (img.format or "").lower()
        except (*DECODE_ERRORS, Image.DecompressionBombWarning) as e:
            logger.info(f"이미지 디코딩 실패: {e}")
            return ValidationResult.reject(
                RejectionReason.DECODE_FAILED,
                f"이미지 파일을 읽을 수 없습니다 (손상되었거나 지원하지 않는 형식): {e}",
            )

        return ValidationResult.accept(width=width, height=height, format=image_format)

    def validate(
        self, content_type: str | None, size: int, data: bytes
    ) -> ValidationResult:
        """
        업로드 파일 전체 검증

        Args:
            content_type: 선언된 MIME 타입
            size: 파일 바이트 크기
            data: 파일 내용

        Returns:
            ValidationResult: 통과 시 디코딩된 가로/세로/포맷 포함
        """
        declared = self.check_declared(content_type, size)
        if not declared.is_valid:
            return declared

        decoded = self.decode(data)
        if not decoded.is_valid:
            return decoded

        actual_format = self.check_format(decoded.format)
        if not actual_format.is_valid:
            return actual_format

        dimensions = self.check_dimensions(decoded.width, decoded.height)
        if not dimensions.is_valid:
            return dimensions

        return decoded
