"""
애플리케이션 생명주기 관리
FastAPI lifespan context manager
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.core.scheduler import setup_scheduler, shutdown_scheduler, start_scheduler
from app.db.database import create_db_and_tables

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    애플리케이션 생명주기 관리

    시작 시:
    - 데이터베이스 테이블 생성
    - 고아 이미지 정리 스케줄러 시작

    종료 시:
    - 스케줄러 종료
    """
    # === 시작 이벤트 ===
    logger.info("애플리케이션 시작 중...")

    try:
        create_db_and_tables()
        logger.info("✅ 데이터베이스 테이블 생성 완료")
    except Exception as e:
        logger.warning(f"⚠️ 데이터베이스 연결 실패: {e}")
        logger.info("데이터베이스 없이 서버를 시작합니다.")

    setup_scheduler()
    start_scheduler()

    logger.info("🚀 애플리케이션 시작 완료")

    yield  # 애플리케이션 실행

    # === 종료 이벤트 ===
    logger.info("🛑 애플리케이션 종료 중...")

    shutdown_scheduler()

    logger.info("✅ 애플리케이션 종료 완료")
