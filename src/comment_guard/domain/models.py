"""Domain models - pure Python classes independent of database."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class FetchedComment:
    """A top-level comment as returned by the fetch gateway.

    Fields are optional because upstream payloads are not trusted; the
    orchestrator validates structure before using a comment.
    """

    comment_id: str | None
    author_channel_id: str | None
    text_original: str = ""
    text_display: str = ""
    author_display_name: str | None = None
    author_profile_image_url: str | None = None
    published_at: datetime | None = None
    updated_at: datetime | None = None
    like_count: int = 0
    raw_data: dict[str, Any] = field(default_factory=dict)


@dataclass
class CommentThread:
    """A comment thread with its top-level comment."""

    thread_id: str | None
    top_level_comment: FetchedComment | None
    total_reply_count: int = 0


@dataclass
class VideoDetails:
    """Metadata about the analyzed video."""

    video_id: str
    title: str | None = None
    channel_id: str | None = None


@dataclass
class ClassificationResult:
    """Output of the classifier for one comment."""

    label: str
    confidence_score: float
    model_version: str


@dataclass
class RemediationFailure:
    """A comment a batch could not remediate, and why."""

    upstream_comment_id: str
    error: str


@dataclass
class BatchRemediationSummary:
    """Aggregated result of remediating every flagged comment of a job."""

    total_targeted: int = 0
    successfully_deleted: int = 0
    failed_to_delete: int = 0
    failures: list[RemediationFailure] = field(default_factory=list)

    @property
    def failed_comment_ids(self) -> list[str]:
        """Upstream ids to retry."""
        return [f.upstream_comment_id for f in self.failures]
