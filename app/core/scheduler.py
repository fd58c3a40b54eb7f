"""
애플리케이션 스케줄러 설정
백그라운드 작업 및 주기적 작업을 관리하는 중앙 스케줄러 설정
"""

import logging
from typing import Optional

from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_EXECUTED
from apscheduler.executors.asyncio import AsyncIOExecutor
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from app.constants import SystemConstants
from app.core.config import get_settings

logger = logging.getLogger(__name__)


class AppScheduler:
    """애플리케이션 스케줄러 관리 클래스"""

    _instance: Optional["AppScheduler"] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if not hasattr(self, "initialized"):
            self.initialized = True
            self._scheduler: Optional[AsyncIOScheduler] = None

    @property
    def scheduler(self) -> Optional[AsyncIOScheduler]:
        """스케줄러 인스턴스 반환"""
        return self._scheduler

    def setup_scheduler(self):
        """APScheduler 설정 및 초기화"""
        try:
            jobstores = {
                "default": MemoryJobStore(),
            }
            executors = {
                "default": AsyncIOExecutor(),
            }
            job_defaults = {"coalesce": True, "max_instances": 1}

            self._scheduler = AsyncIOScheduler(
                jobstores=jobstores,
                executors=executors,
                job_defaults=job_defaults,
                timezone="UTC",
            )

            # 이벤트 리스너 추가
            self._scheduler.add_listener(
                self._job_listener, EVENT_JOB_EXECUTED | EVENT_JOB_ERROR
            )

            if get_settings().orphan_reclaim_enabled:
                self._add_orphan_reclaim_job()
            else:
                logger.info("고아 이미지 정리 작업이 비활성화되어 있습니다.")

            logger.info("APScheduler가 성공적으로 설정되었습니다.")

        except Exception as e:
            logger.error(f"APScheduler 설정 실패: {str(e)}")

    def _add_orphan_reclaim_job(self):
        """고아 이미지 정리 작업 추가 (매일 지정된 시각)"""
        from app.services.orphan_reclaim_scheduler import OrphanImageReclaimer

        hour = get_settings().orphan_reclaim_hour
        self._scheduler.add_job(
            OrphanImageReclaimer.process_orphan_images,
            trigger=CronTrigger(hour=hour, minute=0),
            id=SystemConstants.ORPHAN_RECLAIM_JOB_ID,
            name="고아 이미지 정리",
            replace_existing=True,
        )

        logger.info(f"고아 이미지 정리 작업이 스케줄러에 추가되었습니다. (매일 {hour:02d}:00 UTC)")

    def _job_listener(self, event):
        """작업 실행 결과를 로깅하는 이벤트 리스너"""
        if event.exception:
            logger.error(f"작업 실행 실패 - {event.job_id}: {event.exception}")
        else:
            logger.debug(f"작업 실행 완료 - {event.job_id}")

    def start(self):
        """스케줄러 시작"""
        if self._scheduler is None:
            logger.warning("스케줄러가 설정되지 않았습니다.")
            return

        try:
            if not self._scheduler.running:
                self._scheduler.start()
                logger.info("스케줄러가 시작되었습니다.")
            else:
                logger.warning("스케줄러가 이미 실행 중입니다.")
        except Exception as e:
            logger.error(f"스케줄러 시작 실패: {str(e)}")

    def shutdown(self):
        """스케줄러 종료"""
        if self._scheduler is None:
            return

        try:
            if self._scheduler.running:
                self._scheduler.shutdown(wait=False)
                logger.info("스케줄러가 종료되었습니다.")
        except Exception as e:
            logger.error(f"스케줄러 종료 실패: {str(e)}")

    def get_jobs(self):
        """현재 등록된 작업 목록 반환"""
        if self._scheduler is None:
            return []

        return self._scheduler.get_jobs()


# 전역 스케줄러 인스턴스
app_scheduler = AppScheduler()


def get_scheduler() -> AppScheduler:
    """스케줄러 인스턴스 반환"""
    return app_scheduler


def setup_scheduler():
    """스케줄러 설정 함수"""
    app_scheduler.setup_scheduler()


def start_scheduler():
    """스케줄러 시작 함수"""
    app_scheduler.start()


def shutdown_scheduler():
    """스케줄러 종료 함수"""
    app_scheduler.shutdown()
