"""
데이터베이스 연결 설정
"""
from contextlib import contextmanager
from typing import Any, Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool

from app.core.config import get_settings
from app.models.base import Base

settings = get_settings()


def _engine_options(database_url: str) -> dict[str, Any]:
    """데이터베이스 종류별 엔진 옵션"""
    options: dict[str, Any] = {"echo": settings.database_echo, "pool_pre_ping": True}

    # 커넥션 풀 설정은 PostgreSQL 에만 적용
    if database_url.startswith("postgresql"):
        options.update(
            {
                "poolclass": QueuePool,
                "pool_size": settings.database_pool_size,
                "max_overflow": settings.database_max_overflow,
                "pool_timeout": settings.database_pool_timeout,
                "pool_recycle": settings.database_pool_recycle,
                "connect_args": {
                    "sslmode": settings.database_ssl_mode,
                    "connect_timeout": 10,
                },
            }
        )
    elif database_url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False}

    return options


# 엔진 생성
engine = create_engine(settings.database_url, **_engine_options(settings.database_url))

# 세션 팩토리 생성
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def create_db_and_tables() -> None:
    """데이터베이스 테이블 생성"""
    # 모델 등록을 위해 import
    import app.models  # noqa: F401

    Base.metadata.create_all(engine)


def get_session() -> Generator[Session, None, None]:
    """데이터베이스 세션 의존성"""
    session = SessionLocal()
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@contextmanager
def get_session_context():
    """컨텍스트 매니저로 사용할 수 있는 세션 팩토리"""
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
