"""Domain enumerations."""

from enum import StrEnum


class AnalysisStatus(StrEnum):
    """Lifecycle status of a video analysis job."""

    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    # Remediation sub-states
    DELETING_CLASSIFIED_COMMENTS = "DELETING_CLASSIFIED_COMMENTS"
    COMPLETED_ALL_DELETIONS_SUCCESSFULLY = "COMPLETED_ALL_DELETIONS_SUCCESSFULLY"
    COMPLETED_DELETION_WITH_PARTIAL_ERRORS = "COMPLETED_DELETION_WITH_PARTIAL_ERRORS"
    FAILED_ALL_DELETIONS = "FAILED_ALL_DELETIONS"

    @property
    def is_failure(self) -> bool:
        """Whether the job carries an error message in this state."""
        return self in (AnalysisStatus.FAILED, AnalysisStatus.FAILED_ALL_DELETIONS)


class CommentClassification(StrEnum):
    """Labels returned by the comment classifier."""

    JUDI = "JUDI"  # Online-gambling promotion
    NON_JUDI = "NON_JUDI"


class RemediationAction(StrEnum):
    """What was done to a flagged comment on the platform."""

    DELETE = "delete"  # Permanent removal, only for the channel's own comments
    MODERATE = "moderate"  # Hidden via moderation status on the user's video


class ForbiddenReason(StrEnum):
    """Distinguished permission denials from the platform."""

    CANNOT_DELETE_PERMANENTLY = "cannot_delete_permanently"
    CANNOT_MODERATE_VIDEO = "cannot_moderate_video"


class UpstreamReason(StrEnum):
    """Machine-readable reason codes reported by platform gateways."""

    BAD_REQUEST = "bad_request"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    NOT_COMMENT_OWNER = "not_comment_owner"
    NOT_VIDEO_OWNER = "not_video_owner"
    QUOTA_EXCEEDED = "quota_exceeded"
    COMMENTS_DISABLED = "comments_disabled"
    UNKNOWN = "unknown"
