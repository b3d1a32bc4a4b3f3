"""Comment analysis endpoints."""

from datetime import datetime

from fastapi import APIRouter, Query, Response, status
from pydantic import BaseModel, Field

from comment_guard.api.deps import (
    ClassifierDep,
    CommentsAdapterDep,
    CurrentUserDep,
    ModerationAdapterDep,
    SessionDep,
)
from comment_guard.db.models import AnalyzedCommentModel, VideoAnalysisModel
from comment_guard.domain.errors import CommentGuardError
from comment_guard.domain.identifiers import parse_record_id
from comment_guard.domain.models import BatchRemediationSummary
from comment_guard.logging import get_logger
from comment_guard.services import (
    AnalysisService,
    BatchRemediationService,
    CommentStore,
    analysis_jobs,
)

router = APIRouter(prefix="/analyses", tags=["Analyses"])
logger = get_logger(__name__)


class AnalysisRequest(BaseModel):
    """Request to analyze the comments of a video."""

    video_url: str = Field(..., description="Video URL or bare 11-character video id")


class AnalysisResponse(BaseModel):
    """A job record."""

    id: str
    youtube_video_id: str
    video_title: str | None = None
    status: str
    total_comments_fetched: int
    total_comments_analyzed: int
    total_comments_invalid: int
    total_comments_skipped: int
    total_comments_failed: int
    last_batch_success_count: int
    last_batch_failure_count: int
    error_message: str | None = None
    processing_started_at: datetime | None = None
    completed_at: datetime | None = None
    last_batch_attempt_at: datetime | None = None
    last_batch_completed_at: datetime | None = None

    @classmethod
    def from_model(cls, analysis: VideoAnalysisModel) -> "AnalysisResponse":
        return cls(
            id=str(analysis.id),
            youtube_video_id=analysis.youtube_video_id,
            video_title=analysis.video_title,
            status=analysis.status,
            total_comments_fetched=analysis.total_comments_fetched,
            total_comments_analyzed=analysis.total_comments_analyzed,
            total_comments_invalid=analysis.total_comments_invalid,
            total_comments_skipped=analysis.total_comments_skipped,
            total_comments_failed=analysis.total_comments_failed,
            last_batch_success_count=analysis.last_batch_success_count,
            last_batch_failure_count=analysis.last_batch_failure_count,
            error_message=analysis.error_message,
            processing_started_at=analysis.processing_started_at,
            completed_at=analysis.completed_at,
            last_batch_attempt_at=analysis.last_batch_attempt_at,
            last_batch_completed_at=analysis.last_batch_completed_at,
        )


class AnalysisListResponse(BaseModel):
    """Recent job records of the user."""

    analyses: list[AnalysisResponse]
    total: int


class AnalyzedCommentResponse(BaseModel):
    """One classified comment and its remediation state."""

    id: str
    analysis_id: str
    youtube_comment_id: str
    author_channel_id: str | None = None
    author_display_name: str | None = None
    text_display: str | None = None
    published_at: datetime | None = None
    like_count: int = 0
    classification: str
    confidence_score: float | None = None
    model_version: str | None = None
    is_deleted_on_platform: bool
    is_moderated: bool
    deletion_attempted_at: datetime | None = None
    deletion_error: str | None = None

    @classmethod
    def from_model(cls, comment: AnalyzedCommentModel) -> "AnalyzedCommentResponse":
        return cls(
            id=str(comment.id),
            analysis_id=str(comment.analysis_id),
            youtube_comment_id=comment.youtube_comment_id,
            author_channel_id=comment.author_channel_id,
            author_display_name=comment.comment_author_display_name,
            text_display=comment.comment_text_display,
            published_at=comment.comment_published_at,
            like_count=comment.like_count or 0,
            classification=comment.classification,
            confidence_score=comment.ai_confidence_score,
            model_version=comment.ai_model_version,
            is_deleted_on_platform=bool(comment.is_deleted_on_platform),
            is_moderated=bool(comment.is_moderated),
            deletion_attempted_at=comment.deletion_attempted_at,
            deletion_error=comment.deletion_error,
        )


class AnalysisResultsResponse(BaseModel):
    """Analyzed comments of a job, oldest first."""

    analysis: AnalysisResponse
    comments: list[AnalyzedCommentResponse]
    total: int


class RemediationFailureResponse(BaseModel):
    youtube_comment_id: str
    error: str


class BatchRemediationResponse(BaseModel):
    """Outcome of remediating every flagged comment of a job."""

    analysis_id: str
    status: str
    total_targeted: int
    successfully_deleted: int
    failed_to_delete: int
    failures: list[RemediationFailureResponse]

    @classmethod
    def from_summary(
        cls, analysis: VideoAnalysisModel, summary: BatchRemediationSummary
    ) -> "BatchRemediationResponse":
        return cls(
            analysis_id=str(analysis.id),
            status=analysis.status,
            total_targeted=summary.total_targeted,
            successfully_deleted=summary.successfully_deleted,
            failed_to_delete=summary.failed_to_delete,
            failures=[
                RemediationFailureResponse(
                    youtube_comment_id=f.upstream_comment_id, error=f.error
                )
                for f in summary.failures
            ],
        )


@router.post(
    "",
    response_model=AnalysisResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Analyze a video",
    description=(
        "Fetch, classify and store the top-level comments of a video. "
        "A failed run still returns its job record, with the error status code."
    ),
)
async def create_analysis(
    request: AnalysisRequest,
    response: Response,
    session: SessionDep,
    user_id: CurrentUserDep,
    comments: CommentsAdapterDep,
    classifier: ClassifierDep,
) -> AnalysisResponse:
    """Run an analysis and return the finished job record."""
    service = AnalysisService(session, comments, classifier)
    analysis = service.start_analysis(user_id, request.video_url)

    try:
        await service.execute(analysis)
    except CommentGuardError as e:
        response.status_code = e.status_code

    return AnalysisResponse.from_model(analysis)


@router.get(
    "",
    response_model=AnalysisListResponse,
    summary="List analyses",
    description="Most recent analyses of the requesting user.",
)
async def list_user_analyses(
    session: SessionDep,
    user_id: CurrentUserDep,
    limit: int = Query(default=50, ge=1, le=200),
) -> AnalysisListResponse:
    analyses = analysis_jobs.list_analyses(session, user_id, limit=limit)
    return AnalysisListResponse(
        analyses=[AnalysisResponse.from_model(a) for a in analyses],
        total=len(analyses),
    )


@router.get(
    "/{analysis_id}",
    response_model=AnalysisResponse,
    summary="Get analysis",
)
async def get_analysis(
    analysis_id: str,
    session: SessionDep,
    user_id: CurrentUserDep,
) -> AnalysisResponse:
    analysis = analysis_jobs.get_owned_analysis(
        session, parse_record_id(analysis_id, "analysis"), user_id
    )
    return AnalysisResponse.from_model(analysis)


@router.get(
    "/{analysis_id}/comments",
    response_model=AnalysisResultsResponse,
    summary="Get analysis results",
    description="Analyzed comments of a job sorted by publish time, oldest first.",
)
async def get_analysis_results(
    analysis_id: str,
    session: SessionDep,
    user_id: CurrentUserDep,
) -> AnalysisResultsResponse:
    analysis = analysis_jobs.get_owned_analysis(
        session, parse_record_id(analysis_id, "analysis"), user_id
    )
    results = CommentStore(session).list_for_analysis(analysis.id)
    return AnalysisResultsResponse(
        analysis=AnalysisResponse.from_model(analysis),
        comments=[AnalyzedCommentResponse.from_model(c) for c in results],
        total=len(results),
    )


@router.post(
    "/{analysis_id}/remediate",
    response_model=BatchRemediationResponse,
    summary="Remediate flagged comments",
    description=(
        "Delete or hide every flagged comment of the analysis that is not yet deleted. "
        "Failures are reported per comment so exactly that subset can be retried."
    ),
)
async def remediate_analysis(
    analysis_id: str,
    session: SessionDep,
    user_id: CurrentUserDep,
    moderation: ModerationAdapterDep,
) -> BatchRemediationResponse:
    service = BatchRemediationService(session, moderation)
    summary = await service.batch_remediate(user_id, analysis_id)
    analysis = analysis_jobs.get_owned_analysis(
        session, parse_record_id(analysis_id, "analysis"), user_id
    )
    return BatchRemediationResponse.from_summary(analysis, summary)

