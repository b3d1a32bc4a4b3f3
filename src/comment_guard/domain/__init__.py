"""Domain models and business logic."""

from comment_guard.domain.enums import (
    AnalysisStatus,
    CommentClassification,
    ForbiddenReason,
    RemediationAction,
    UpstreamReason,
)
from comment_guard.domain.models import (
    BatchRemediationSummary,
    ClassificationResult,
    CommentThread,
    FetchedComment,
    RemediationFailure,
    VideoDetails,
)

__all__ = [
    "AnalysisStatus",
    "BatchRemediationSummary",
    "ClassificationResult",
    "CommentClassification",
    "CommentThread",
    "FetchedComment",
    "ForbiddenReason",
    "RemediationAction",
    "RemediationFailure",
    "UpstreamReason",
    "VideoDetails",
]
