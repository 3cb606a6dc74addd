"""
Scheduler Service for PMHNP Hiring

Celery Beat schedule for the periodic pipeline jobs:
- Ingestion from the default job sources
- Expired job cleanup
- Freshness decay
- Dead link checks
- Employer expiry warnings
"""

import asyncio
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Optional

import structlog
from celery import Celery
from celery.schedules import crontab
from celery import signals

from pmhnp_hiring.core.config import get_settings
from pmhnp_hiring.core.database import DatabaseManager
from pmhnp_hiring.core.events import EventManager
from pmhnp_hiring.services.dead_link_checker import DeadLinkChecker
from pmhnp_hiring.services.expiry_checker import ExpiryChecker
from pmhnp_hiring.services.freshness_decay import FreshnessService
from pmhnp_hiring.services.ingestion_service import IngestionService, DEFAULT_CRON_SOURCES
from pmhnp_hiring.services.notifier import DiscordNotifier

logger = structlog.get_logger(__name__)

settings = get_settings()

celery_app = Celery(
    'pmhnp-hiring-scheduler',
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
)

celery_app.conf.update(
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',
    timezone='UTC',
    enable_utc=True,
    beat_schedule_filename='celerybeat-schedule',
    beat_sync_every=1,
)

celery_app.conf.beat_schedule = {
    'ingest-jobs': {
        'task': 'ingest_jobs',
        'schedule': crontab(minute=0, hour='*/6'),
        'options': {'queue': 'ingestion'}
    },
    'cleanup-expired-jobs': {
        'task': 'cleanup_expired_jobs',
        'schedule': crontab(minute=0, hour=3),
        'options': {'queue': 'maintenance'}
    },
    'freshness-decay': {
        'task': 'freshness_decay',
        'schedule': crontab(minute=30, hour=3),
        'options': {'queue': 'maintenance'}
    },
    'check-dead-links': {
        'task': 'check_dead_links',
        'schedule': crontab(minute=0, hour=4),
        'options': {'queue': 'maintenance'}
    },
    'expiry-warnings': {
        'task': 'send_expiry_warnings',
        'schedule': crontab(minute=0, hour=14),
        'options': {'queue': 'notifications'}
    },
}


async def _with_database(operation: Callable[[DatabaseManager], Awaitable[Any]]) -> Any:
    """Run ``operation`` against a database manager bound to the current loop."""
    manager = DatabaseManager()
    await manager.init_database(use_redis=False)
    try:
        return await operation(manager)
    finally:
        await manager.close_connections()


def _run_task(name: str, operation: Callable[[DatabaseManager], Awaitable[Any]]) -> Dict[str, Any]:
    try:
        logger.info("Starting scheduled task", task=name)
        result = asyncio.run(_with_database(operation))
        logger.info("Scheduled task completed", task=name)
        return {
            'status': 'success',
            'result': result,
            'timestamp': datetime.utcnow().isoformat()
        }
    except Exception as exc:
        logger.error("Scheduled task failed", task=name, error=str(exc), exc_info=True)
        return {
            'status': 'error',
            'error': str(exc),
            'timestamp': datetime.utcnow().isoformat()
        }


@celery_app.task(name='ingest_jobs')
def ingest_jobs_task(sources: Optional[list] = None) -> Dict[str, Any]:
    """Ingest the default sources and notify Discord per source."""
    async def operation(manager: DatabaseManager):
        events = EventManager()
        DiscordNotifier().subscribe(events)
        service = IngestionService(manager, events=events)
        results = await service.ingest_jobs(sources or DEFAULT_CRON_SOURCES)
        return [result.to_dict() for result in results]

    return _run_task('ingest_jobs', operation)


@celery_app.task(name='cleanup_expired_jobs')
def cleanup_expired_jobs_task() -> Dict[str, Any]:
    return _run_task('cleanup_expired_jobs', lambda manager: IngestionService(manager).cleanup_expired_jobs())


@celery_app.task(name='freshness_decay')
def freshness_decay_task() -> Dict[str, Any]:
    return _run_task('freshness_decay', lambda manager: FreshnessService(manager).apply_freshness_decay())


@celery_app.task(name='check_dead_links')
def check_dead_links_task() -> Dict[str, Any]:
    return _run_task('check_dead_links', lambda manager: DeadLinkChecker(manager).check_dead_links())


@celery_app.task(name='send_expiry_warnings')
def send_expiry_warnings_task() -> Dict[str, Any]:
    return _run_task('send_expiry_warnings', lambda manager: ExpiryChecker(manager).check_expiring_jobs())


@signals.beat_init.connect
def beat_init_handler(sender=None, **kwargs):
    """Handle beat initialization"""
    logger.info("Scheduler initialized", scheduler_name=str(sender))


@signals.worker_shutdown.connect
def beat_shutdown_handler(sender=None, **kwargs):
    """Handle beat shutdown"""
    logger.info("Scheduler shutting down", scheduler_name=str(sender))
