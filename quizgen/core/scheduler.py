"""Interval scheduler for automatic AI quiz generation."""

from __future__ import annotations

import logging
from datetime import datetime

import pytz
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from quizgen.core.config import Settings, get_settings
from quizgen.core.wiring import build_node_service
from quizgen.db.session import SessionLocal
from quizgen.services.quiz_node_service import QuizNodeService

logger = logging.getLogger(__name__)

JOB_ID = "quiz_generation"


def run_generation_job(node_service: QuizNodeService, session_factory=SessionLocal) -> int | None:
    """Create one AI quiz node; returns its id, or None on failure."""
    db = session_factory()
    try:
        node = node_service.create_ai_generated_quiz_node(db)
    except Exception as exc:  # noqa: BLE001
        logger.exception("scheduled quiz generation failed: %s", exc)
        return None
    finally:
        db.close()

    if node is None:
        logger.warning("scheduled quiz generation produced no node")
        return None
    logger.info("scheduled quiz generation completed", extra={"nid": node.id})
    return node.id


def start_scheduler(settings: Settings | None = None) -> BackgroundScheduler | None:
    settings = settings or get_settings()
    if not settings.cron_generation_enabled:
        logger.info("quiz scheduler disabled via CRON_GENERATION_ENABLED")
        return None

    scheduler = BackgroundScheduler(timezone=pytz.timezone(settings.scheduler_timezone))
    trigger = IntervalTrigger(seconds=settings.cron_generation_interval, timezone=scheduler.timezone)

    # 수동 실행과 겹쳐도 같은 잡은 한 번에 하나만 돈다.
    scheduler.add_job(
        run_generation_job,
        trigger,
        kwargs={"node_service": build_node_service(settings)},
        id=JOB_ID,
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )

    scheduler.start()
    job = scheduler.get_job(JOB_ID)
    logger.info(
        "quiz scheduler started",
        extra={
            "interval_seconds": settings.cron_generation_interval,
            "tz": str(scheduler.timezone),
            "next_run": job.next_run_time if job else None,
            "started_at": datetime.now(tz=scheduler.timezone),
        },
    )
    return scheduler


def shutdown_scheduler(scheduler: BackgroundScheduler | None) -> None:
    if scheduler and scheduler.running:
        scheduler.shutdown(wait=False)
