"""
이미지 생명주기 서비스

업로드 이후의 조회, 메타데이터 수정, 엔티티 연결/해제,
삭제와 고아 이미지 정리를 담당한다.
"""

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from app.constants import EntityType, SystemConstants
from app.core.config import ImagePipelineConfig
from app.db.image_repository import ImageRepository
from app.models.image import Image
from app.services.base import BaseService
from app.services.image_processor import ImageArtifactProcessor
from app.utils.image_storage import ImageStorage

logger = logging.getLogger(__name__)


@dataclass
class OrphanReclaimResult:
    """고아 이미지 정리 결과"""

    cutoff: datetime
    candidates: int = 0
    deleted: int = 0
    skipped: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "cutoff_date": self.cutoff.isoformat(),
            "candidates": self.candidates,
            "deleted": self.deleted,
            "skipped": self.skipped,
            "failed": self.failed,
            "errors": list(self.errors),
        }


class ImageLifecycleService(BaseService):
    """업로드된 이미지의 생명주기 관리"""

    def __init__(
        self, session: Session, storage: ImageStorage, config: ImagePipelineConfig
    ):
        super().__init__(session)
        self.config = config
        self.repository = ImageRepository(session)
        self.processor = ImageArtifactProcessor(storage, config)

    # ------------------------------------------------------------------
    # 조회
    # ------------------------------------------------------------------
    def get_image(self, image_id: UUID, owner_id: UUID) -> Image:
        """소유자의 이미지 조회"""
        return self.repository.get_owned(image_id, owner_id)

    def list_user_images(
        self,
        owner_id: UUID,
        page: int = 1,
        page_size: int = SystemConstants.DEFAULT_PAGE_SIZE,
    ) -> tuple[list[Image], int]:
        """사용자가 업로드한 이미지 목록 (최신순)"""
        return self.repository.list_by_uploader(owner_id, page, page_size)

    def list_entity_images(self, entity_type: EntityType, entity_id: int) -> list[Image]:
        """엔티티에 연결된 이미지 목록 (표시 순서대로)"""
        return self.repository.list_by_entity(entity_type, entity_id)

    # ------------------------------------------------------------------
    # 수정
    # ------------------------------------------------------------------
    def update_metadata(
        self, image_id: UUID, owner_id: UUID, changes: dict[str, Any]
    ) -> Image:
        """
        캡션/대체 텍스트/표시 순서 수정

        Args:
            image_id: 이미지 ID
            owner_id: 요청 사용자 ID
            changes: 변경할 필드만 담은 딕셔너리

        Raises:
            ImageNotFoundException: 이미지가 없거나 소유자가 아닌 경우
        """
        with self.transaction():
            image = self.repository.update_metadata(image_id, owner_id, changes)

        logger.info(f"이미지 메타데이터 수정: {image_id} ({', '.join(changes) or '변경 없음'})")
        return image

    def associate(
        self,
        image_id: UUID,
        owner_id: UUID,
        entity_type: EntityType,
        entity_id: int,
    ) -> Image:
        """이미지를 엔티티에 연결 (기존 연결은 덮어씀)"""
        with self.transaction():
            image = self.repository.associate(image_id, owner_id, entity_type, entity_id)

        logger.info(f"이미지 연결: {image_id} -> {entity_type.value}:{entity_id}")
        return image

    def dissociate(self, image_id: UUID, owner_id: UUID) -> Image:
        """이미지의 엔티티 연결 해제"""
        with self.transaction():
            image = self.repository.dissociate(image_id, owner_id)

        logger.info(f"이미지 연결 해제: {image_id}")
        return image

    def reorder_entity_images(
        self,
        owner_id: UUID,
        entity_type: EntityType,
        entity_id: int,
        orders: dict[UUID, int],
    ) -> list[Image]:
        """엔티티 내 이미지 표시 순서 변경 후 정렬된 목록 반환"""
        with self.transaction():
            updated = self.repository.update_display_orders(
                owner_id, entity_type, entity_id, orders
            )

        logger.info(
            f"이미지 순서 변경: {entity_type.value}:{entity_id} "
            f"({updated}/{len(orders)}개 반영)"
        )
        return self.repository.list_by_entity(entity_type, entity_id)

    # ------------------------------------------------------------------
    # 삭제
    # ------------------------------------------------------------------
    def delete_image(self, image_id: UUID, owner_id: UUID) -> None:
        """
        이미지 삭제

        레코드를 먼저 삭제(커밋)한 뒤 파일을 정리한다.
        파일 삭제 실패는 레코드 삭제를 되돌리지 않는다.
        """
        with self.transaction():
            storage_key = self.repository.delete_owned(image_id, owner_id)

        removed = self.processor.delete_artifacts(storage_key)
        logger.info(f"이미지 삭제: {image_id} ({storage_key}, 파일 {removed}개 삭제)")

    def delete_entity_images(self, entity_type: EntityType, entity_id: int) -> int:
        """엔티티 삭제 시 연결된 이미지 전체 삭제"""
        with self.transaction():
            storage_keys = self.repository.delete_by_entity(entity_type, entity_id)

        for storage_key in storage_keys:
            self.processor.delete_artifacts(storage_key)

        logger.info(
            f"엔티티 이미지 일괄 삭제: {entity_type.value}:{entity_id} ({len(storage_keys)}개)"
        )
        return len(storage_keys)

    # ------------------------------------------------------------------
    # 고아 이미지 정리
    # ------------------------------------------------------------------
    def _cutoff(self, older_than_days: int | None) -> datetime:
        days = (
            self.config.orphan_retention_days
            if older_than_days is None
            else older_than_days
        )
        return datetime.now(UTC) - timedelta(days=days)

    def reclaim_orphans(
        self,
        older_than_days: int | None = None,
        limit: int = SystemConstants.ORPHAN_RECLAIM_BATCH_LIMIT,
    ) -> OrphanReclaimResult:
        """
        보관 기간이 지난 고아 이미지 정리

        후보마다 "여전히 연결되지 않은 경우에만" 조건부 삭제를 수행하고,
        레코드가 실제로 삭제된 경우에만 파일을 삭제한다.
        개별 이미지 실패는 기록 후 다음 후보로 진행한다.

        Args:
            older_than_days: 보관 기간 (기본값은 설정값)
            limit: 한 번에 처리할 최대 후보 수

        Returns:
            OrphanReclaimResult: 정리 통계
        """
        cutoff = self._cutoff(older_than_days)
        result = OrphanReclaimResult(cutoff=cutoff)

        # 커밋 시 만료되는 ORM 객체 대신 식별자만 보관
        candidates = [
            (image.id, image.storage_key)
            for image in self.repository.find_orphans(cutoff, limit)
        ]
        result.candidates = len(candidates)

        for image_id, storage_key in candidates:
            try:
                with self.transaction():
                    removed = self.repository.delete_if_orphan(image_id, cutoff)

                if not removed:
                    # 조회 이후 연결되었거나 이미 삭제된 이미지
                    result.skipped += 1
                    logger.info(f"고아 이미지 정리 제외 (상태 변경됨): {image_id}")
                    continue

                self.processor.delete_artifacts(storage_key)
                result.deleted += 1

            except Exception as e:
                result.failed += 1
                result.errors.append(f"{image_id}: {e}")
                logger.error(f"고아 이미지 정리 실패 ({image_id}): {e}")

        logger.info(
            f"고아 이미지 정리 완료: 후보 {result.candidates}개, 삭제 {result.deleted}개, "
            f"제외 {result.skipped}개, 실패 {result.failed}개 (기준 {cutoff.isoformat()})"
        )
        return result

    def get_orphan_statistics(self, older_than_days: int | None = None) -> dict[str, Any]:
        """
        고아 이미지 통계 조회

        Returns:
            전체 고아 이미지 수, 보관 기간 경과 수, 기준 시각
        """
        cutoff = self._cutoff(older_than_days)
        total_orphans = self.repository.count_orphans()
        expired_orphans = self.repository.count_orphans(cutoff)

        return {
            "total_orphans": total_orphans,
            "expired_orphans": expired_orphans,
            "within_retention": total_orphans - expired_orphans,
            "cutoff_date": cutoff.isoformat(),
        }
