import logging
import os
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from app.core.config import settings
from app.core.database import SessionLocal
from app.services.exam_lifecycle import exam_lifecycle_service

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler()


async def close_overdue_exams():
    db = SessionLocal()
    try:
        closed = exam_lifecycle_service.close_overdue_exams(db)
        if closed:
            logger.info(f"Overdue exam sweep closed {len(closed)} exam(s)")
    except Exception as e:
        db.rollback()
        logger.error(f"Error closing overdue exams: {e}")
    finally:
        db.close()


def start_scheduler():
    if os.getenv("TESTING") == "true":
        logger.info("Scheduler disabled in test environment")
        return

    if not settings.EXAM_SWEEP_ENABLED:
        logger.info("Overdue exam sweep disabled")
        return

    if not scheduler.running:
        scheduler.add_job(
            close_overdue_exams,
            'interval',
            seconds=settings.EXAM_SWEEP_INTERVAL_SECONDS,
            id='close_overdue_exams',
            name='Close Overdue Exams',
            replace_existing=True
        )
        scheduler.start()
        logger.info(f"Scheduler started, sweeping overdue exams every {settings.EXAM_SWEEP_INTERVAL_SECONDS}s")


def stop_scheduler():
    if scheduler.running:
        scheduler.shutdown()
        logger.info("Scheduler stopped")
