"""Celery worker configuration."""

from celery import Celery

from comment_guard.config import settings
from comment_guard.logging import setup_logging

# Setup logging before anything else
setup_logging()

celery_app = Celery(
    "comment_guard",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
)

celery_app.conf.update(
    # Task settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    # Task execution
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_time_limit=900,  # 15 minutes max
    task_soft_time_limit=840,
    # Worker settings
    worker_prefetch_multiplier=1,
    worker_concurrency=4,
    # Result backend
    result_expires=86400,  # 24 hours
    # Task routing
    task_routes={
        "analysis.run_analysis": {"queue": "analysis"},
        "analysis.batch_remediate": {"queue": "remediation"},
    },
)

celery_app.autodiscover_tasks(["comment_guard.jobs"])
