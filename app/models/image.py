"""
이미지 모델
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import CheckConstraint, Enum, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.constants import EntityType
from app.models.base import BaseModel


class Image(BaseModel):
    """이미지 테이블 모델"""

    __tablename__ = "images"
    __table_args__ = (
        Index("idx_images_uploader_created", "uploader_id", "created_at"),
        Index("idx_images_entity", "entity_type", "entity_id"),
        CheckConstraint(
            "(entity_type IS NULL) = (entity_id IS NULL)",
            name="ck_images_entity_pair",
        ),
    )

    storage_key: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    original_name: Mapped[str] = mapped_column(String(255), nullable=False)
    mime_type: Mapped[str] = mapped_column(String(100), nullable=False)
    size_bytes: Mapped[int] = mapped_column(Integer, nullable=False)

    width: Mapped[int] = mapped_column(Integer, nullable=False)
    height: Mapped[int] = mapped_column(Integer, nullable=False)
    format: Mapped[str] = mapped_column(String(50), nullable=False)

    caption: Mapped[str | None] = mapped_column(Text, nullable=True)
    alt_text: Mapped[str | None] = mapped_column(String(255), nullable=True)
    display_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    uploader_id: Mapped[UUID] = mapped_column(nullable=False, index=True)

    # 연결된 엔티티 (둘 다 NULL 이거나 둘 다 값이 있어야 함)
    entity_type: Mapped[EntityType | None] = mapped_column(
        Enum(
            EntityType,
            native_enum=False,
            length=50,
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=True,
    )
    entity_id: Mapped[int | None] = mapped_column(Integer, nullable=True)

    @property
    def is_associated(self) -> bool:
        """엔티티와 연결되어 있는지 여부"""
        return self.entity_type is not None and self.entity_id is not None

    @property
    def dimensions(self) -> str | None:
        """'가로x세로' 형식의 크기 문자열"""
        if self.width and self.height:
            return f"{self.width}x{self.height}"
        return None

    @property
    def formatted_size(self) -> str:
        """사람이 읽기 쉬운 파일 크기"""
        units = ["B", "KB", "MB", "GB"]
        size = float(self.size_bytes or 0)
        unit_index = 0

        while size >= 1024 and unit_index < len(units) - 1:
            size /= 1024
            unit_index += 1

        return f"{round(size, 2):g} {units[unit_index]}"

    def __repr__(self) -> str:
        return (
            f"<Image(id={self.id}, storage_key={self.storage_key}, "
            f"entity={self.entity_type}:{self.entity_id})>"
        )
