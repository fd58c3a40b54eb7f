"""
로깅 설정
"""

import contextlib
import locale
import logging
import sys


def setup_logging(debug: bool = False):
    """로깅 설정"""
    # Windows 환경에서 한글 로그 메시지 처리를 위한 로케일 설정
    if sys.platform == "win32":
        with contextlib.suppress(locale.Error):
            locale.setlocale(locale.LC_ALL, "ko_KR.UTF-8")
        with contextlib.suppress(locale.Error):
            locale.setlocale(locale.LC_ALL, "Korean_Korea.UTF-8")

    level = logging.DEBUG if debug else logging.INFO

    # 로깅 핸들러 설정 (기본 stderr 사용)
    handler = logging.StreamHandler()
    handler.setLevel(level)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    handler.setFormatter(formatter)

    # 루트 로거 설정
    logging.basicConfig(level=level, handlers=[handler], force=True)

    # 데이터베이스 관련 로거
    logging.getLogger("app.db").setLevel(level)

    # API 관련 로거
    logging.getLogger("app.api").setLevel(level)

    # 이미지 파이프라인 서비스 로거
    logging.getLogger("app.services").setLevel(level)

    # SQLAlchemy 로거
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    # 스케줄러 로거
    logging.getLogger("apscheduler").setLevel(logging.INFO)
