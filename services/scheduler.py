import logging
from datetime import timedelta
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from database.database import session_scope
from services.upload_service import sweep_orphan_uploads
from config import settings

logger = logging.getLogger(__name__)

scheduler: AsyncIOScheduler = None


async def run_orphan_sweep():
    """Удалить загрузки, не привязанные ни к одной регистрации"""
    try:
        with session_scope() as db:
            removed = sweep_orphan_uploads(
                db,
                settings.upload_path,
                timedelta(hours=settings.UPLOAD_RETENTION_HOURS),
            )
        logger.info(f"Orphan sweep finished, {len(removed)} files removed")
    except Exception as e:
        logger.error(f"Orphan sweep failed: {e}", exc_info=True)


def start_scheduler():
    """Запустить планировщик (новый экземпляр на каждый запуск приложения)"""
    global scheduler
    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        run_orphan_sweep,
        trigger=IntervalTrigger(minutes=settings.SWEEP_INTERVAL_MINUTES),
        id='sweep_orphan_uploads',
        replace_existing=True
    )
    scheduler.start()
    logger.info("Upload sweep scheduler started")


def stop_scheduler():
    """Остановить планировщик"""
    if scheduler and scheduler.running:
        scheduler.shutdown()
        logger.info("Upload sweep scheduler stopped")
