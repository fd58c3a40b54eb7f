"""
고아 이미지 정리 스케줄러
엔티티에 연결되지 않은 채 보관 기간이 지난 이미지를 주기적으로 삭제하는 백그라운드 작업
"""

import logging

from app.core.config import get_pipeline_config
from app.db.database import get_session_context
from app.services.image_lifecycle import ImageLifecycleService, OrphanReclaimResult
from app.utils.image_storage import get_image_storage

logger = logging.getLogger(__name__)


class OrphanImageReclaimer:
    """고아 이미지 정리 작업"""

    @staticmethod
    def run(older_than_days: int | None = None) -> OrphanReclaimResult | None:
        """
        정리 작업 1회 실행

        작업 자체의 실패는 기록만 하고 다음 실행에 맡긴다.
        """
        logger.info("고아 이미지 정리 작업 시작")
        try:
            with get_session_context() as session:
                service = ImageLifecycleService(
                    session, get_image_storage(), get_pipeline_config()
                )
                result = service.reclaim_orphans(older_than_days)
        except Exception as e:
            logger.error(f"고아 이미지 정리 작업 실패: {e}", exc_info=True)
            return None

        if result.failed:
            logger.warning(f"고아 이미지 정리 중 실패 {result.failed}건: {result.errors}")
        return result

    @staticmethod
    async def process_orphan_images() -> None:
        """스케줄러에서 호출되는 비동기 진입점"""
        OrphanImageReclaimer.run()
