"""Job record lifecycle.

All status changes go through :func:`transition`, which enforces the
allowed edges and keeps ``error_message`` set exactly while the job is in
a failure state.
"""

from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from comment_guard.db.models import VideoAnalysisModel
from comment_guard.domain.enums import AnalysisStatus
from comment_guard.domain.errors import InternalError, InvalidStateTransitionError, NotFoundError
from comment_guard.logging import get_logger

logger = get_logger(__name__)

_BATCH_ENTRY_STATES = {
    AnalysisStatus.COMPLETED,
    AnalysisStatus.FAILED,
    AnalysisStatus.DELETING_CLASSIFIED_COMMENTS,
    AnalysisStatus.COMPLETED_ALL_DELETIONS_SUCCESSFULLY,
    AnalysisStatus.COMPLETED_DELETION_WITH_PARTIAL_ERRORS,
    AnalysisStatus.FAILED_ALL_DELETIONS,
}

ALLOWED_TRANSITIONS: dict[AnalysisStatus, set[AnalysisStatus]] = {
    AnalysisStatus.PROCESSING: {AnalysisStatus.COMPLETED, AnalysisStatus.FAILED},
    AnalysisStatus.DELETING_CLASSIFIED_COMMENTS: {
        AnalysisStatus.COMPLETED_ALL_DELETIONS_SUCCESSFULLY,
        AnalysisStatus.COMPLETED_DELETION_WITH_PARTIAL_ERRORS,
        AnalysisStatus.FAILED_ALL_DELETIONS,
    },
}
for _state in _BATCH_ENTRY_STATES:
    ALLOWED_TRANSITIONS.setdefault(_state, set()).add(AnalysisStatus.DELETING_CLASSIFIED_COMMENTS)


def can_transition(current: AnalysisStatus, target: AnalysisStatus) -> bool:
    """Whether the lifecycle allows moving from ``current`` to ``target``."""
    return target in ALLOWED_TRANSITIONS.get(current, set())


def transition(
    analysis: VideoAnalysisModel,
    target: AnalysisStatus,
    error_message: str | None = None,
) -> None:
    """Move a job to ``target`` in memory. Callers persist with :func:`save`.

    Raises:
        InvalidStateTransitionError: If the edge is not allowed.
    """
    current = AnalysisStatus(analysis.status)
    if not can_transition(current, target):
        raise InvalidStateTransitionError(
            f"Analysis cannot move from {current} to {target}.",
            details={"analysis_id": str(analysis.id), "status": current.value},
        )
    if target.is_failure:
        analysis.error_message = error_message or "Unknown error"
    else:
        analysis.error_message = None
    analysis.status = target.value


def save(session: Session, analysis: VideoAnalysisModel) -> VideoAnalysisModel:
    """Commit pending changes to a job record."""
    try:
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        raise InternalError(
            f"Failed to save analysis {analysis.id}: {e}",
            details={"analysis_id": str(analysis.id)},
        ) from e
    return analysis


def create_analysis(session: Session, user_id: str, video_id: str) -> VideoAnalysisModel:
    """Create a job record in PROCESSING with zeroed counters."""
    analysis = VideoAnalysisModel(
        user_id=user_id,
        youtube_video_id=video_id,
        status=AnalysisStatus.PROCESSING.value,
        total_comments_fetched=0,
        total_comments_analyzed=0,
        total_comments_invalid=0,
        total_comments_skipped=0,
        total_comments_failed=0,
        last_batch_success_count=0,
        last_batch_failure_count=0,
        processing_started_at=datetime.now(UTC),
    )
    session.add(analysis)
    save(session, analysis)
    logger.info("analysis_created", analysis_id=str(analysis.id), video_id=video_id)
    return analysis


def get_owned_analysis(session: Session, analysis_id: UUID, user_id: str) -> VideoAnalysisModel:
    """Load a job record owned by the user.

    Raises:
        NotFoundError: If absent or owned by someone else.
    """
    analysis = session.execute(
        select(VideoAnalysisModel).where(
            VideoAnalysisModel.id == analysis_id,
            VideoAnalysisModel.user_id == user_id,
        )
    ).scalar_one_or_none()
    if analysis is None:
        raise NotFoundError(
            "Video analysis not found or you do not have access to it.",
            details={"analysis_id": str(analysis_id)},
        )
    return analysis


def list_analyses(session: Session, user_id: str, limit: int = 50) -> list[VideoAnalysisModel]:
    """Most recent job records of a user."""
    return list(
        session.execute(
            select(VideoAnalysisModel)
            .where(VideoAnalysisModel.user_id == user_id)
            .order_by(VideoAnalysisModel.created_at.desc())
            .limit(limit)
        ).scalars()
    )


def complete_analysis(session: Session, analysis: VideoAnalysisModel) -> VideoAnalysisModel:
    """Finalize ingestion as COMPLETED."""
    transition(analysis, AnalysisStatus.COMPLETED)
    analysis.completed_at = datetime.now(UTC)
    return save(session, analysis)


def fail_analysis(
    session: Session,
    analysis: VideoAnalysisModel,
    error_message: str,
) -> VideoAnalysisModel:
    """Finalize ingestion as FAILED with a human-readable cause."""
    transition(analysis, AnalysisStatus.FAILED, error_message=error_message)
    analysis.completed_at = datetime.now(UTC)
    return save(session, analysis)


def start_batch(session: Session, analysis: VideoAnalysisModel) -> VideoAnalysisModel:
    """Enter DELETING_CLASSIFIED_COMMENTS."""
    transition(analysis, AnalysisStatus.DELETING_CLASSIFIED_COMMENTS)
    analysis.last_batch_attempt_at = datetime.now(UTC)
    return save(session, analysis)


def batch_status(successes: int, failures: int) -> AnalysisStatus | None:
    """Terminal remediation status for a batch result, None if nothing ran."""
    if failures and successes:
        return AnalysisStatus.COMPLETED_DELETION_WITH_PARTIAL_ERRORS
    if failures:
        return AnalysisStatus.FAILED_ALL_DELETIONS
    if successes:
        return AnalysisStatus.COMPLETED_ALL_DELETIONS_SUCCESSFULLY
    return None


def finish_batch(
    session: Session,
    analysis: VideoAnalysisModel,
    successes: int,
    failures: int,
) -> VideoAnalysisModel:
    """Record batch counts and leave DELETING_CLASSIFIED_COMMENTS."""
    status = batch_status(successes, failures)
    if status is None:
        raise InvalidStateTransitionError(
            "A remediation batch cannot finish without any processed comments.",
            details={"analysis_id": str(analysis.id)},
        )
    transition(
        analysis,
        status,
        error_message=f"All {failures} remediation attempts failed.",
    )
    analysis.last_batch_success_count = successes
    analysis.last_batch_failure_count = failures
    analysis.last_batch_completed_at = datetime.now(UTC)
    return save(session, analysis)
