"""Celery worker configuration and the periodic report task."""

import asyncio
import logging

from celery import Celery

from mediacost.config import get_settings

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Create Celery app
celery_app = Celery(
    "mediacost_worker",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
)

# Celery configuration
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=1800,  # 30 minutes max per run
    task_soft_time_limit=1740,
    worker_prefetch_multiplier=1,
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_default_queue="reports",
    beat_schedule={
        "process-report": {
            "task": "mediacost.worker.process_report",
            "schedule": settings.report_interval_seconds,
        },
    },
)


async def run_report():
    """Run one report pass with fresh clients and a fresh session."""
    from mediacost.db.session import async_session_maker, engine
    from mediacost.services.presets import PresetCatalog
    from mediacost.services.pricing import PricingClient
    from mediacost.services.report_service import ReportService
    from mediacost.services.report_store import report_store

    service = ReportService(
        settings,
        PricingClient.from_settings(settings),
        PresetCatalog.from_settings(settings),
        report_store,
    )
    try:
        async with async_session_maker() as db:
            return await service.run(db)
    finally:
        # Pooled connections belong to this event loop
        await engine.dispose()


@celery_app.task(name="mediacost.worker.process_report")
def process_report():
    """
    Periodic task building the dashboard report data.

    Errors propagate so the run is marked failed; the next beat retries the whole job.
    """
    try:
        values = asyncio.run(run_report())
    except Exception as e:
        logger.error(f"Report processing failed: {e}")
        raise

    if values is None:
        return {"status": "skipped"}
    logger.info(f"Report processing finished: {values}")
    return {"status": "completed", "values": values}
