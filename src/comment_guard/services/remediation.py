"""Remediation decision engine.

For one flagged comment, choose between a permanent delete and a
moderation hide based on who authored the comment *right now*, then call
the platform and record the outcome on the stored record.
"""

from uuid import UUID

from sqlalchemy.orm import Session

from comment_guard.adapters.moderation.base import ModerationAdapter
from comment_guard.config import settings
from comment_guard.db.models import AnalyzedCommentModel
from comment_guard.domain.enums import ForbiddenReason, RemediationAction, UpstreamReason
from comment_guard.domain.errors import (
    ForbiddenError,
    InvalidRequestError,
    NotFoundError,
    UpstreamAPIError,
)
from comment_guard.domain.identifiers import parse_record_id, validate_comment_id
from comment_guard.logging import get_logger
from comment_guard.services.comment_store import CommentStore

logger = get_logger(__name__)


def translate_remediation_error(error: Exception) -> Exception:
    """Map a platform failure onto the error the caller should see.

    Only ``UpstreamAPIError`` is translated, keyed on its reason code.
    Quota exhaustion stays an upstream error. Anything else is returned
    unchanged.
    """
    if not isinstance(error, UpstreamAPIError):
        return error

    details = {"upstream_status": error.upstream_status, "reason": error.reason.value}

    if error.upstream_status == 400 or error.reason == UpstreamReason.BAD_REQUEST:
        return InvalidRequestError(
            f"The platform rejected the remediation request: {error.message}",
            details=details,
        )
    if error.upstream_status == 404 or error.reason == UpstreamReason.NOT_FOUND:
        return NotFoundError(
            "The comment no longer exists on the platform.",
            details=details,
        )
    if error.upstream_status == 403:
        if error.reason == UpstreamReason.NOT_COMMENT_OWNER:
            return ForbiddenError(
                "You can only permanently delete your own comments. "
                "This comment will be hidden from your video instead.",
                reason=ForbiddenReason.CANNOT_DELETE_PERMANENTLY,
                details=details,
            )
        if error.reason == UpstreamReason.NOT_VIDEO_OWNER:
            return ForbiddenError(
                "You do not have permission to moderate comments on this video.",
                reason=ForbiddenReason.CANNOT_MODERATE_VIDEO,
                details=details,
            )
        if error.reason == UpstreamReason.QUOTA_EXCEEDED:
            return error
        return ForbiddenError(
            f"The platform refused the remediation: {error.message}",
            details=details,
        )
    return error


class RemediationService:
    """Deletes or hides one analyzed comment on the platform."""

    def __init__(
        self,
        session: Session,
        moderation_adapter: ModerationAdapter,
        moderation_status: str | None = None,
    ) -> None:
        self.session = session
        self.moderation_adapter = moderation_adapter
        self.moderation_status = moderation_status or settings.moderation_status
        self.store = CommentStore(session)

    async def remediate(
        self,
        user_id: str,
        analyzed_comment_id: str | UUID,
        upstream_comment_id: str,
    ) -> AnalyzedCommentModel:
        """Remediate a comment and return its updated record.

        Already remediated comments are returned unchanged without any
        platform call.

        Raises:
            InvalidInputError: Malformed identifiers.
            NotFoundError: Unknown comment, not owned, or gone upstream.
            ForbiddenError: The platform refused the action.
            InvalidRequestError: The platform rejected the request.
        """
        record_id = parse_record_id(analyzed_comment_id, "analyzed comment")
        validate_comment_id(upstream_comment_id)

        comment = self.store.get_owned(record_id, user_id, upstream_comment_id)
        if comment is None:
            raise NotFoundError(
                "Analyzed comment not found or you do not have access to it.",
                details={"analyzed_comment_id": str(record_id)},
            )

        if comment.is_deleted_on_platform or comment.is_moderated:
            logger.info(
                "remediation_skipped",
                comment_id=upstream_comment_id,
                deleted=comment.is_deleted_on_platform,
                moderated=comment.is_moderated,
            )
            return comment

        try:
            action = await self._apply(upstream_comment_id)
        except Exception as e:
            translated = translate_remediation_error(e)
            message = getattr(translated, "message", None) or str(translated)
            self.store.mark_remediation_failed(comment, message)
            logger.warning(
                "remediation_failed",
                comment_id=upstream_comment_id,
                error=message,
                error_type=type(translated).__name__,
            )
            if translated is e:
                raise
            raise translated from e

        self.store.mark_remediated(comment, action)
        logger.info("remediation_succeeded", comment_id=upstream_comment_id, action=action)
        return comment

    async def _apply(self, upstream_comment_id: str) -> RemediationAction:
        """Check live ownership and issue the matching platform call."""
        author_channel_id = await self.moderation_adapter.get_comment_owner(upstream_comment_id)
        own_channel_id = await self.moderation_adapter.get_authenticated_channel_id()

        if author_channel_id and author_channel_id == own_channel_id:
            await self.moderation_adapter.delete_comment(upstream_comment_id)
            return RemediationAction.DELETE

        await self.moderation_adapter.moderate_comment(upstream_comment_id, self.moderation_status)
        return RemediationAction.MODERATE
