"""SQLAlchemy ORM models."""

from datetime import datetime
from typing import Any
from uuid import UUID as PyUUID
from uuid import uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from comment_guard.domain.enums import AnalysisStatus

JSONType = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class VideoAnalysisModel(Base):
    """Job record: one analysis run of one video for one user."""

    __tablename__ = "video_analyses"

    id: Mapped[PyUUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    youtube_video_id: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    video_title: Mapped[str | None] = mapped_column(String(512), nullable=True)
    status: Mapped[str] = mapped_column(
        String(64), nullable=False, default=AnalysisStatus.PROCESSING.value, index=True
    )
    # Ingestion counters
    total_comments_fetched: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_comments_analyzed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_comments_invalid: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_comments_skipped: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_comments_failed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # Remediation counters
    last_batch_success_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_batch_failure_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    processing_started_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    last_batch_attempt_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    last_batch_completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), onupdate=func.now()
    )

    # Relationships
    comments: Mapped[list["AnalyzedCommentModel"]] = relationship(
        "AnalyzedCommentModel", back_populates="analysis"
    )


class AnalyzedCommentModel(Base):
    """A classified comment. Deduplicated globally by upstream comment id."""

    __tablename__ = "analyzed_comments"

    id: Mapped[PyUUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    analysis_id: Mapped[PyUUID] = mapped_column(
        Uuid, ForeignKey("video_analyses.id"), nullable=False, index=True
    )
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    youtube_video_id: Mapped[str] = mapped_column(String(32), nullable=False)
    youtube_comment_id: Mapped[str] = mapped_column(String(128), nullable=False)
    parent_youtube_comment_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    author_channel_id: Mapped[str] = mapped_column(String(128), nullable=False)
    comment_text_original: Mapped[str] = mapped_column(Text, nullable=False, default="")
    comment_text_display: Mapped[str] = mapped_column(Text, nullable=False, default="")
    comment_author_display_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    comment_author_profile_image_url: Mapped[str | None] = mapped_column(
        String(1024), nullable=True
    )
    comment_published_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    comment_updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    like_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # Classification (immutable once written)
    classification: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    ai_confidence_score: Mapped[float] = mapped_column(Float, nullable=False)
    ai_model_version: Mapped[str] = mapped_column(String(128), nullable=False)
    # Remediation state
    is_deleted_on_platform: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_moderated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    deletion_attempted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    deletion_error: Mapped[str | None] = mapped_column(Text, nullable=True)
    metadata_: Mapped[dict[str, Any] | None] = mapped_column("metadata_", JSONType, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), onupdate=func.now()
    )

    # Constraints
    __table_args__ = (
        UniqueConstraint("youtube_comment_id", name="uq_analyzed_comment_youtube_id"),
        Index("ix_analyzed_comments_analysis_published", "analysis_id", "comment_published_at"),
    )

    # Relationships
    analysis: Mapped["VideoAnalysisModel"] = relationship(
        "VideoAnalysisModel", back_populates="comments"
    )
