"""Comment store: durable, deduplicated storage of analyzed comments.

The unique constraint on the upstream comment id is the only guard against
classifying a comment twice. A duplicate-key insert therefore means
"already classified" and is reported, not raised.
"""

from collections.abc import Iterable
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from comment_guard.db.models import AnalyzedCommentModel
from comment_guard.domain.enums import RemediationAction
from comment_guard.domain.errors import InternalError
from comment_guard.logging import get_logger

logger = get_logger(__name__)

# Keep IN (...) lists well under backend bind-parameter limits
_LOOKUP_CHUNK_SIZE = 500


class CommentStore:
    """Keyed access to AnalyzedCommentModel rows."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def existing_ids(self, upstream_comment_ids: Iterable[str]) -> set[str]:
        """Return the subset of upstream comment ids already stored."""
        ids = list(dict.fromkeys(upstream_comment_ids))
        found: set[str] = set()
        for start in range(0, len(ids), _LOOKUP_CHUNK_SIZE):
            chunk = ids[start : start + _LOOKUP_CHUNK_SIZE]
            rows = self.session.execute(
                select(AnalyzedCommentModel.youtube_comment_id).where(
                    AnalyzedCommentModel.youtube_comment_id.in_(chunk)
                )
            ).scalars()
            found.update(rows)
        return found

    def insert_if_absent(self, comment: AnalyzedCommentModel) -> bool:
        """Insert and commit a new analyzed comment.

        Returns:
            True if inserted, False if the upstream id was already stored.

        Raises:
            InternalError: On any other persistence failure.
        """
        self.session.add(comment)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            logger.info("comment_already_stored", comment_id=comment.youtube_comment_id)
            return False
        except SQLAlchemyError as e:
            self.session.rollback()
            raise InternalError(
                f"Failed to store comment {comment.youtube_comment_id}: {e}",
                details={"comment_id": comment.youtube_comment_id},
            ) from e
        return True

    def get_owned(
        self,
        comment_id: UUID,
        user_id: str,
        upstream_comment_id: str | None = None,
    ) -> AnalyzedCommentModel | None:
        """Load an analyzed comment if it belongs to the user."""
        query = select(AnalyzedCommentModel).where(
            AnalyzedCommentModel.id == comment_id,
            AnalyzedCommentModel.user_id == user_id,
        )
        if upstream_comment_id is not None:
            query = query.where(AnalyzedCommentModel.youtube_comment_id == upstream_comment_id)
        return self.session.execute(query).scalar_one_or_none()

    def list_for_analysis(self, analysis_id: UUID) -> list[AnalyzedCommentModel]:
        """All comments of an analysis, oldest first."""
        return list(
            self.session.execute(
                select(AnalyzedCommentModel)
                .where(AnalyzedCommentModel.analysis_id == analysis_id)
                .order_by(
                    AnalyzedCommentModel.comment_published_at.asc(),
                    AnalyzedCommentModel.created_at.asc(),
                )
            ).scalars()
        )

    def flagged_pending(self, analysis_id: UUID, classification: str) -> list[AnalyzedCommentModel]:
        """Flagged comments of an analysis not yet deleted on the platform."""
        return list(
            self.session.execute(
                select(AnalyzedCommentModel)
                .where(
                    AnalyzedCommentModel.analysis_id == analysis_id,
                    AnalyzedCommentModel.classification == classification,
                    AnalyzedCommentModel.is_deleted_on_platform.is_not(True),
                )
                .order_by(AnalyzedCommentModel.comment_published_at.asc())
            ).scalars()
        )

    def mark_remediated(
        self,
        comment: AnalyzedCommentModel,
        action: RemediationAction,
    ) -> AnalyzedCommentModel:
        """Record a successful delete or moderation."""
        comment.is_deleted_on_platform = action == RemediationAction.DELETE
        comment.is_moderated = action == RemediationAction.MODERATE
        comment.deletion_error = None
        comment.deletion_attempted_at = datetime.now(UTC)
        self._commit(comment)
        return comment

    def mark_remediation_failed(
        self,
        comment: AnalyzedCommentModel,
        error: str,
    ) -> AnalyzedCommentModel:
        """Record a failed remediation attempt."""
        comment.is_deleted_on_platform = False
        comment.is_moderated = False
        comment.deletion_error = error
        comment.deletion_attempted_at = datetime.now(UTC)
        self._commit(comment)
        return comment

    def _commit(self, comment: AnalyzedCommentModel) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise InternalError(
                f"Failed to update comment {comment.id}: {e}",
                details={"analyzed_comment_id": str(comment.id)},
            ) from e
