"""
서비스 기본 클래스
세션 보관과 트랜잭션 컨텍스트 매니저 제공
"""

import logging

from sqlalchemy.orm import Session

from app.core.transaction_manager import TransactionManager

logger = logging.getLogger(__name__)


class BaseService:
    """모든 서비스의 기본 클래스"""

    def __init__(self, db: Session | None = None):
        """
        서비스 초기화

        Args:
            db: 데이터베이스 세션
        """
        self.db = db

    def transaction(self):
        """트랜잭션 컨텍스트 매니저 반환

        Example:
            with service.transaction() as tx:
                tx.add(image)
        """
        if self.db is None:
            raise ValueError("Database session not available")

        return TransactionManager.transaction(self.db)

    def refresh(self, instance):
        """인스턴스 새로고침"""
        if self.db is None:
            logger.warning("Database session not available for refresh")
            return

        self.db.refresh(instance)
