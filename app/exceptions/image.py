"""
이미지 관련 예외 클래스들
"""

from app.constants import ErrorCodes, RejectionReason, ResponseMessages

from .base import BusinessException


class ImageServiceException(BusinessException):
    """이미지 서비스 관련 예외 기본 클래스"""

    pass


class InvalidImageException(ImageServiceException):
    """업로드 파일 검증 실패 예외 (재시도 대상 아님)"""

    def __init__(self, reason: RejectionReason | None, detail: str):
        self.reason = reason

        super().__init__(
            status_code=400, detail=detail, error_code=ErrorCodes.INVALID_IMAGE
        )


class ImageUploadLimitException(ImageServiceException):
    """한 번에 업로드할 수 있는 파일 수 초과 예외"""

    def __init__(self, file_count: int, limit: int):
        self.file_count = file_count
        self.limit = limit

        detail = f"한 번에 최대 {limit}개의 파일만 업로드할 수 있습니다. (요청: {file_count}개)"

        super().__init__(
            status_code=400, detail=detail, error_code=ErrorCodes.UPLOAD_LIMIT_EXCEEDED
        )


class ImageProcessingException(ImageServiceException):
    """이미지 가공(리사이즈/인코딩/저장) 실패 예외"""

    def __init__(
        self,
        detail: str = "이미지 처리 중 오류가 발생했습니다.",
        storage_key: str | None = None,
    ):
        self.storage_key = storage_key

        super().__init__(
            status_code=500,
            detail=detail,
            error_code=ErrorCodes.IMAGE_PROCESSING_FAILED,
        )


class ImageNotFoundException(ImageServiceException):
    """
    이미지를 찾을 수 없는 예외

    존재하지 않는 경우와 소유자가 아닌 경우를 구분하지 않는다.
    """

    def __init__(self, image_id: str):
        self.image_id = image_id

        super().__init__(
            status_code=404,
            detail=ResponseMessages.IMAGE_NOT_FOUND,
            error_code=ErrorCodes.IMAGE_NOT_FOUND,
        )


class ImageArtifactNotFoundException(ImageServiceException):
    """스토리지에 이미지 파일이 없는 예외"""

    def __init__(self, storage_key: str):
        self.storage_key = storage_key

        super().__init__(
            status_code=404,
            detail=ResponseMessages.IMAGE_FILE_NOT_FOUND,
            error_code=ErrorCodes.IMAGE_FILE_NOT_FOUND,
        )
