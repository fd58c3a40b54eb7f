"""
트랜잭션 관리 컨텍스트 매니저
데이터베이스 세션의 자동 커밋/롤백을 제공
"""

import logging
from collections.abc import Generator
from contextlib import contextmanager
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


class TransactionManager:
    """트랜잭션 관리 유틸리티 클래스"""

    @staticmethod
    @contextmanager
    def transaction(session: Session) -> Generator[Session, None, None]:
        """트랜잭션 컨텍스트 매니저

        Args:
            session: 데이터베이스 세션

        Yields:
            Session: 트랜잭션이 관리되는 세션

        Example:
            with TransactionManager.transaction(session) as tx:
                tx.add(image)
                # 자동 커밋 또는 예외 발생시 롤백
        """
        try:
            yield session
            session.commit()
            logger.debug("Transaction committed successfully")
        except Exception as e:
            session.rollback()
            logger.error(f"Transaction rolled back due to error: {e}")
            raise
