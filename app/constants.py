"""
상수 정의 모듈

애플리케이션 전반에서 사용되는 상수들을 중앙 집중식으로 관리
"""

from enum import Enum


class EntityType(str, Enum):
    """이미지를 소유할 수 있는 엔티티 타입 열거형"""

    LISTING = "listing"
    CRAFTS_LISTING = "crafts_listing"
    PROJECT_LISTING = "project_listing"
    USER = "user"
    BUSINESS = "business"


class ImageVariant(str, Enum):
    """스토리지에 저장되는 이미지 파생본 영역"""

    ORIGINAL = "images"
    THUMBNAIL = "thumbnails"


class RejectionReason(str, Enum):
    """이미지 검증 거부 사유"""

    UNSUPPORTED_TYPE = "unsupported_type"
    EMPTY_FILE = "empty_file"
    FILE_TOO_LARGE = "file_too_large"
    DECODE_FAILED = "decode_failed"
    DIMENSIONS_TOO_SMALL = "dimensions_too_small"


class StorageBackend(str, Enum):
    """스토리지 백엔드 종류"""

    LOCAL = "local"
    MINIO = "minio"


# 시스템 상수
class SystemConstants:
    """시스템 전반에서 사용되는 상수들"""

    # 페이지네이션
    DEFAULT_PAGE_SIZE = 20
    MAX_PAGE_SIZE = 100
    MIN_PAGE_SIZE = 1

    # 파생 파일명
    MEDIUM_VARIANT_PREFIX = "medium_"
    PROCESSED_IMAGE_FORMAT = "jpeg"
    PROCESSED_IMAGE_EXTENSION = ".jpg"
    PROCESSED_MEDIA_TYPE = "image/jpeg"

    # 고아 이미지 정리 작업
    ORPHAN_RECLAIM_JOB_ID = "orphan_image_reclaim_job"
    ORPHAN_RECLAIM_BATCH_LIMIT = 500


# 응답 메시지 상수
class ResponseMessages:
    """API 응답 메시지 상수"""

    # 성공 메시지
    SUCCESS = "성공적으로 처리되었습니다."
    IMAGE_UPLOADED = "이미지가 업로드되었습니다."
    IMAGE_METADATA_UPDATED = "이미지 정보가 수정되었습니다."
    IMAGE_ASSOCIATED = "이미지가 연결되었습니다."
    IMAGE_DISSOCIATED = "이미지 연결이 해제되었습니다."
    IMAGE_DELETED = "이미지가 삭제되었습니다."
    IMAGE_ORDER_UPDATED = "이미지 순서가 변경되었습니다."

    # 에러 메시지
    NOT_FOUND = "요청한 리소스를 찾을 수 없습니다."
    UNAUTHORIZED = "인증이 필요합니다."
    BAD_REQUEST = "잘못된 요청입니다."
    INTERNAL_SERVER_ERROR = "내부 서버 오류가 발생했습니다."

    # 인증 관련
    TOKEN_REQUIRED = "인증 토큰이 필요합니다."
    TOKEN_INVALID = "유효하지 않은 토큰입니다."
    TOKEN_EXPIRED = "토큰이 만료되었습니다."
    AUTH_FAILED = "인증에 실패했습니다."

    # 이미지 관련
    IMAGE_NOT_FOUND = "이미지를 찾을 수 없습니다."
    IMAGE_FILE_NOT_FOUND = "이미지 파일을 찾을 수 없습니다."
    NO_FILES_UPLOADED = "업로드된 파일이 없습니다."


# 인증 상수
class AuthConstants:
    """인증 관련 상수"""

    BEARER_PREFIX = "Bearer "


# 에러 코드 상수
class ErrorCodes:
    """애플리케이션 에러 코드"""

    # 일반 에러
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    NOT_FOUND_ERROR = "NOT_FOUND_ERROR"

    # 이미지 에러
    INVALID_IMAGE = "INVALID_IMAGE"
    UPLOAD_LIMIT_EXCEEDED = "UPLOAD_LIMIT_EXCEEDED"
    IMAGE_PROCESSING_FAILED = "IMAGE_PROCESSING_FAILED"
    IMAGE_NOT_FOUND = "IMAGE_NOT_FOUND"
    IMAGE_FILE_NOT_FOUND = "IMAGE_FILE_NOT_FOUND"
