"""Celery tasks for comment analysis and batch remediation."""

from dataclasses import asdict
from typing import Any

from comment_guard.adapters import (
    get_classifier_provider,
    get_comments_adapter,
    get_moderation_adapter,
)
from comment_guard.db.session import get_session_context
from comment_guard.domain.errors import CommentGuardError
from comment_guard.logging import get_logger
from comment_guard.services import AnalysisService, BatchRemediationService
from comment_guard.utils import run_async
from comment_guard.worker import celery_app

logger = get_logger(__name__)


async def _analyze(user_id: str, video_url: str) -> dict[str, Any]:
    comments_adapter = get_comments_adapter()
    classifier = get_classifier_provider()
    try:
        with get_session_context() as session:
            service = AnalysisService(session, comments_adapter, classifier)
            analysis = service.start_analysis(user_id, video_url)
            analysis_id = str(analysis.id)
            try:
                await service.execute(analysis)
            except CommentGuardError as e:
                return {
                    "success": False,
                    "analysis_id": analysis_id,
                    "status": analysis.status,
                    "error": e.to_dict(),
                }
            return {
                "success": True,
                "analysis_id": analysis_id,
                "status": analysis.status,
                "video_id": analysis.youtube_video_id,
                "total_comments_fetched": analysis.total_comments_fetched,
                "total_comments_analyzed": analysis.total_comments_analyzed,
                "total_comments_skipped": analysis.total_comments_skipped,
                "total_comments_invalid": analysis.total_comments_invalid,
                "total_comments_failed": analysis.total_comments_failed,
            }
    finally:
        await comments_adapter.close()
        await classifier.close()


async def _batch_remediate(user_id: str, analysis_id: str) -> dict[str, Any]:
    moderation = get_moderation_adapter()
    try:
        with get_session_context() as session:
            service = BatchRemediationService(session, moderation)
            summary = await service.batch_remediate(user_id, analysis_id)
            return {"success": True, "analysis_id": analysis_id, **asdict(summary)}
    finally:
        await moderation.close()


@celery_app.task(bind=True, name="analysis.run_analysis")
def run_analysis_task(self: Any, user_id: str, video_url: str) -> dict[str, Any]:
    """Analyze the comments of a video for a user.

    Args:
        user_id: Owning user id.
        video_url: Any accepted video URL form, or a bare video id.

    Returns:
        Result dict with the job id, final status and counters, or the
        serialized error when the job failed.
    """
    task_id = self.request.id
    logger.info("run_analysis_started", task_id=task_id, user_id=user_id, video_url=video_url)

    try:
        result = run_async(_analyze(user_id, video_url))
    except CommentGuardError as e:
        # Rejected before a job record was created
        logger.warning("run_analysis_rejected", task_id=task_id, error=e.message)
        return {"success": False, "task_id": task_id, "error": e.to_dict()}
    except Exception as e:
        logger.error("run_analysis_error", task_id=task_id, error=str(e))
        raise

    logger.info("run_analysis_finished", task_id=task_id, **result)
    return {"task_id": task_id, **result}


@celery_app.task(bind=True, name="analysis.batch_remediate")
def batch_remediate_task(self: Any, user_id: str, analysis_id: str) -> dict[str, Any]:
    """Remediate every flagged comment of an analysis.

    Returns:
        Result dict with the batch summary, including the failed subset.
    """
    task_id = self.request.id
    logger.info(
        "batch_remediate_started", task_id=task_id, user_id=user_id, analysis_id=analysis_id
    )

    try:
        result = run_async(_batch_remediate(user_id, analysis_id))
    except CommentGuardError as e:
        logger.warning("batch_remediate_rejected", task_id=task_id, error=e.message)
        return {"success": False, "task_id": task_id, "error": e.to_dict()}
    except Exception as e:
        logger.error("batch_remediate_error", task_id=task_id, error=str(e))
        raise

    logger.info(
        "batch_remediate_finished",
        task_id=task_id,
        succeeded=result["successfully_deleted"],
        failed=result["failed_to_delete"],
    )
    return {"task_id": task_id, **result}
