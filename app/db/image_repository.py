"""
이미지 메타데이터 저장소

이미지 레코드 CRUD 와 조회 쿼리를 담당한다.
쓰기 작업은 모두 소유자 조건을 포함한 단일 구문으로 수행된다.
"""

import logging
from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session

from app.constants import EntityType
from app.exceptions.image import ImageNotFoundException
from app.models.image import Image

logger = logging.getLogger(__name__)

# 소유자가 수정할 수 있는 필드
EDITABLE_FIELDS = frozenset({"caption", "alt_text", "display_order"})

# NULL 로 비울 수 없는 필드 (None 이면 변경하지 않음)
NON_NULLABLE_FIELDS = frozenset({"display_order"})


class ImageRepository:
    """이미지 레코드 저장소"""

    def __init__(self, session: Session):
        self.session = session

    # ------------------------------------------------------------------
    # 조회
    # ------------------------------------------------------------------
    def get_by_id(self, image_id: UUID) -> Image | None:
        """ID로 이미지 조회"""
        result = self.session.execute(select(Image).where(Image.id == image_id))
        return result.scalar_one_or_none()

    def get_by_storage_key(self, storage_key: str) -> Image | None:
        """스토리지 키로 이미지 조회"""
        result = self.session.execute(
            select(Image).where(Image.storage_key == storage_key)
        )
        return result.scalar_one_or_none()

    def get_owned(self, image_id: UUID, owner_id: UUID) -> Image:
        """
        소유자 조건으로 이미지 조회

        Raises:
            ImageNotFoundException: 이미지가 없거나 소유자가 다른 경우
        """
        image = self.get_by_id(image_id)
        if image is None:
            raise ImageNotFoundException(str(image_id))

        if image.uploader_id != owner_id:
            logger.warning(
                f"소유자가 아닌 사용자의 이미지 접근 시도: image={image_id}, user={owner_id}"
            )
            raise ImageNotFoundException(str(image_id))

        return image

    def list_by_uploader(
        self, owner_id: UUID, page: int = 1, page_size: int = 20
    ) -> tuple[list[Image], int]:
        """업로더별 이미지 목록 (최신순, 페이지네이션)"""
        count_statement = select(func.count(Image.id)).where(
            Image.uploader_id == owner_id
        )
        total_count = self.session.execute(count_statement).scalar_one()

        offset = (page - 1) * page_size
        statement = (
            select(Image)
            .where(Image.uploader_id == owner_id)
            .order_by(Image.created_at.desc(), Image.id)
            .offset(offset)
            .limit(page_size)
        )
        images = self.session.execute(statement).scalars().all()

        return list(images), total_count

    def list_by_entity(self, entity_type: EntityType, entity_id: int) -> list[Image]:
        """엔티티에 연결된 이미지 목록 (표시 순서, 생성 시각 순)"""
        statement = (
            select(Image)
            .where(Image.entity_type == entity_type, Image.entity_id == entity_id)
            .order_by(Image.display_order.asc(), Image.created_at.asc())
        )
        return list(self.session.execute(statement).scalars().all())

    def find_orphans(self, cutoff: datetime, limit: int | None = None) -> list[Image]:
        """cutoff 이전에 생성되었고 연결되지 않은 이미지 목록"""
        statement = (
            select(Image)
            .where(
                Image.entity_type.is_(None),
                Image.entity_id.is_(None),
                Image.created_at < cutoff,
            )
            .order_by(Image.created_at.asc())
        )
        if limit is not None:
            statement = statement.limit(limit)
        return list(self.session.execute(statement).scalars().all())

    def count_orphans(self, cutoff: datetime | None = None) -> int:
        """연결되지 않은 이미지 수 (cutoff 지정 시 그 이전 생성분만)"""
        statement = select(func.count(Image.id)).where(
            Image.entity_type.is_(None), Image.entity_id.is_(None)
        )
        if cutoff is not None:
            statement = statement.where(Image.created_at < cutoff)
        return self.session.execute(statement).scalar_one()

    # ------------------------------------------------------------------
    # 쓰기
    # ------------------------------------------------------------------
    def add(self, image: Image) -> Image:
        """새 이미지 레코드 저장 (커밋은 호출자가 수행)"""
        self.session.add(image)
        self.session.flush()
        return image

    def _update_owned(self, image_id: UUID, owner_id: UUID, values: dict[str, Any]) -> Image:
        """소유자 조건부 UPDATE 후 갱신된 레코드 반환"""
        statement = (
            update(Image)
            .where(Image.id == image_id, Image.uploader_id == owner_id)
            .values(**values)
            .execution_options(synchronize_session="fetch")
        )
        result = self.session.execute(statement)

        if result.rowcount != 1:
            # 존재 여부 노출 방지를 위해 동일한 예외 사용
            self.get_owned(image_id, owner_id)
            raise ImageNotFoundException(str(image_id))

        image = self.get_by_id(image_id)
        self.session.refresh(image)
        return image

    def update_metadata(
        self, image_id: UUID, owner_id: UUID, changes: dict[str, Any]
    ) -> Image:
        """캡션/대체 텍스트/표시 순서 수정"""
        values = {
            key: value
            for key, value in changes.items()
            if key in EDITABLE_FIELDS
            and not (value is None and key in NON_NULLABLE_FIELDS)
        }
        if not values:
            return self.get_owned(image_id, owner_id)
        return self._update_owned(image_id, owner_id, values)

    def associate(
        self,
        image_id: UUID,
        owner_id: UUID,
        entity_type: EntityType,
        entity_id: int,
    ) -> Image:
        """엔티티 연결 (entity_type/entity_id 를 한 번에 덮어씀)"""
        return self._update_owned(
            image_id, owner_id, {"entity_type": entity_type, "entity_id": entity_id}
        )

    def dissociate(self, image_id: UUID, owner_id: UUID) -> Image:
        """엔티티 연결 해제"""
        return self._update_owned(
            image_id, owner_id, {"entity_type": None, "entity_id": None}
        )

    def update_display_orders(
        self,
        owner_id: UUID,
        entity_type: EntityType,
        entity_id: int,
        orders: dict[UUID, int],
    ) -> int:
        """엔티티 내 이미지 표시 순서 일괄 변경 (변경된 행 수 반환)"""
        updated = 0
        for image_id, display_order in orders.items():
            result = self.session.execute(
                update(Image)
                .where(
                    Image.id == image_id,
                    Image.uploader_id == owner_id,
                    Image.entity_type == entity_type,
                    Image.entity_id == entity_id,
                )
                .values(display_order=display_order)
                .execution_options(synchronize_session="fetch")
            )
            updated += result.rowcount
        return updated

    def delete_owned(self, image_id: UUID, owner_id: UUID) -> str:
        """
        소유자 조건부 삭제

        Returns:
            str: 삭제된 이미지의 스토리지 키
        """
        image = self.get_owned(image_id, owner_id)
        storage_key = image.storage_key

        result = self.session.execute(
            delete(Image)
            .where(Image.id == image_id, Image.uploader_id == owner_id)
            .execution_options(synchronize_session="fetch")
        )
        if result.rowcount != 1:
            raise ImageNotFoundException(str(image_id))

        return storage_key

    def delete_by_entity(self, entity_type: EntityType, entity_id: int) -> list[str]:
        """엔티티에 연결된 이미지 레코드 전체 삭제 (삭제된 스토리지 키 반환)"""
        storage_keys = [image.storage_key for image in self.list_by_entity(entity_type, entity_id)]
        if not storage_keys:
            return []

        self.session.execute(
            delete(Image)
            .where(
                Image.entity_type == entity_type,
                Image.entity_id == entity_id,
                Image.storage_key.in_(storage_keys),
            )
            .execution_options(synchronize_session="fetch")
        )
        return storage_keys

    def delete_if_orphan(self, image_id: UUID, cutoff: datetime) -> bool:
        """
        삭제 시점에도 연결되지 않은 상태인 경우에만 삭제

        조회와 삭제 사이에 연결된 이미지는 삭제되지 않는다.

        Returns:
            bool: 실제로 삭제되었는지 여부
        """
        result = self.session.execute(
            delete(Image)
            .where(
                Image.id == image_id,
                Image.entity_type.is_(None),
                Image.entity_id.is_(None),
                Image.created_at < cutoff,
            )
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount == 1
