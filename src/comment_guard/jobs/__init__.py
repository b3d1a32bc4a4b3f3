"""Celery job definitions."""

from comment_guard.jobs.tasks import batch_remediate_task, run_analysis_task

__all__ = ["batch_remediate_task", "run_analysis_task"]
