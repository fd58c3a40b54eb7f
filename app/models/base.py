"""
기본 데이터베이스 모델
"""

import uuid
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func


def utcnow() -> datetime:
    """현재 UTC 시각"""
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """SQLAlchemy 2.0 기본 모델 클래스"""

    pass


class BaseModel(Base):
    """기본 모델 클래스 (abstract)"""

    __abstract__ = True

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
        nullable=False,
    )
