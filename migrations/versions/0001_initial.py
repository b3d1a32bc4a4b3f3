"""Initial schema: analyses and analyzed comments

Revision ID: 0001
Revises:
Create Date: 2026-10-18

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Job records
    op.create_table(
        "video_analyses",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("youtube_video_id", sa.String(32), nullable=False),
        sa.Column("video_title", sa.String(512), nullable=True),
        sa.Column("status", sa.String(64), nullable=False, server_default="PROCESSING"),
        sa.Column("total_comments_fetched", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_comments_analyzed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_comments_invalid", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_comments_skipped", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_comments_failed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_batch_success_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_batch_failure_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("processing_started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_batch_attempt_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_batch_completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), onupdate=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_video_analyses_user_id", "video_analyses", ["user_id"])
    op.create_index("ix_video_analyses_youtube_video_id", "video_analyses", ["youtube_video_id"])
    op.create_index("ix_video_analyses_status", "video_analyses", ["status"])

    # Analyzed comments, unique per upstream comment id
    op.create_table(
        "analyzed_comments",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("analysis_id", sa.UUID(), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("youtube_video_id", sa.String(32), nullable=False),
        sa.Column("youtube_comment_id", sa.String(128), nullable=False),
        sa.Column("parent_youtube_comment_id", sa.String(128), nullable=True),
        sa.Column("author_channel_id", sa.String(128), nullable=False),
        sa.Column("comment_text_original", sa.Text(), nullable=False, server_default=""),
        sa.Column("comment_text_display", sa.Text(), nullable=False, server_default=""),
        sa.Column("comment_author_display_name", sa.String(255), nullable=True),
        sa.Column("comment_author_profile_image_url", sa.String(1024), nullable=True),
        sa.Column("comment_published_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("comment_updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("like_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("classification", sa.String(64), nullable=False),
        sa.Column("ai_confidence_score", sa.Float(), nullable=False),
        sa.Column("ai_model_version", sa.String(128), nullable=False),
        sa.Column(
            "is_deleted_on_platform", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("is_moderated", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("deletion_attempted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("deletion_error", sa.Text(), nullable=True),
        sa.Column("metadata_", postgresql.JSONB(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), onupdate=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["analysis_id"], ["video_analyses.id"]),
        sa.UniqueConstraint("youtube_comment_id", name="uq_analyzed_comment_youtube_id"),
    )
    op.create_index("ix_analyzed_comments_analysis_id", "analyzed_comments", ["analysis_id"])
    op.create_index("ix_analyzed_comments_user_id", "analyzed_comments", ["user_id"])
    op.create_index(
        "ix_analyzed_comments_classification", "analyzed_comments", ["classification"]
    )
    op.create_index(
        "ix_analyzed_comments_analysis_published",
        "analyzed_comments",
        ["analysis_id", "comment_published_at"],
    )


def downgrade() -> None:
    op.drop_table("analyzed_comments")
    op.drop_table("video_analyses")
