"""
관리자용 데이터 정리 API
"""

from typing import Annotated, Dict, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.config import ImagePipelineConfig
from app.core.deps import get_image_pipeline_config, get_storage
from app.db.database import get_session
from app.schemas.base import BaseResponse
from app.schemas.image import OrphanReclaimResponse
from app.services.image_lifecycle import ImageLifecycleService
from app.utils.error_handlers import ErrorPatterns, database_transaction_handler
from app.utils.image_storage import ImageStorage

router = APIRouter(tags=["admin"])


@router.post(
    "/cleanup/orphan-images", response_model=BaseResponse[OrphanReclaimResponse]
)
async def reclaim_orphan_images(
    db: Annotated[Session, Depends(get_session)],
    storage: Annotated[ImageStorage, Depends(get_storage)],
    config: Annotated[ImagePipelineConfig, Depends(get_image_pipeline_config)],
    older_than_days: Optional[int] = Query(
        None, ge=0, description="보관 기간 (일, 기본값은 설정값)"
    ),
) -> BaseResponse[OrphanReclaimResponse]:
    """
    보관 기간이 지난 고아 이미지 정리 (관리자용)

    Args:
        older_than_days: 이 기간보다 오래된 미연결 이미지를 삭제

    Returns:
        정리 결과 통계
    """
    with database_transaction_handler(
        db, ErrorPatterns.IMAGE_RECLAIM_FAILED, log_context="고아 이미지 정리"
    ):
        service = ImageLifecycleService(db, storage, config)
        result = service.reclaim_orphans(older_than_days)

    return BaseResponse(
        success=True,
        data=OrphanReclaimResponse(**result.to_dict()),
        message=f"고아 이미지 정리가 완료되었습니다. (삭제 {result.deleted}개)",
    )


@router.get("/cleanup/orphan-images/statistics", response_model=BaseResponse[Dict])
async def get_orphan_image_statistics(
    db: Annotated[Session, Depends(get_session)],
    storage: Annotated[ImageStorage, Depends(get_storage)],
    config: Annotated[ImagePipelineConfig, Depends(get_image_pipeline_config)],
    older_than_days: Optional[int] = Query(None, ge=0),
) -> BaseResponse[Dict]:
    """고아 이미지 통계 조회 (관리자용)"""
    service = ImageLifecycleService(db, storage, config)
    statistics = service.get_orphan_statistics(older_than_days)

    return BaseResponse(
        success=True,
        data=statistics,
        message="통계 조회가 완료되었습니다.",
    )
