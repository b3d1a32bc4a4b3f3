"""Tests for single-comment remediation."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from comment_guard.adapters.moderation.base import ModerationAdapter
from comment_guard.adapters.moderation.stub import StubModerationAdapter
from comment_guard.domain.enums import ForbiddenReason, UpstreamReason
from comment_guard.domain.errors import (
    ForbiddenError,
    InvalidInputError,
    InvalidRequestError,
    NotFoundError,
    UpstreamAPIError,
    UpstreamUnavailableError,
)
from comment_guard.services import CommentStore, RemediationService, translate_remediation_error
from conftest import OTHER_USER_ID, OWN_CHANNEL_ID, USER_ID


def flagged_comment(db_session, seed_analysis):
    analysis = seed_analysis(flagged=1, clean=0)
    return CommentStore(db_session).flagged_pending(analysis.id, "JUDI")[0]


def api_error(status: int, reason: UpstreamReason) -> UpstreamAPIError:
    return UpstreamAPIError("upstream said no", upstream_status=status, reason=reason)


class TestDecision:
    """Delete own comments, hide everyone else's."""

    @pytest.mark.asyncio
    async def test_own_comment_is_deleted(self, db_session, seed_analysis) -> None:
        comment = flagged_comment(db_session, seed_analysis)
        moderation = StubModerationAdapter(
            channel_id=OWN_CHANNEL_ID, owners={comment.youtube_comment_id: OWN_CHANNEL_ID}
        )
        service = RemediationService(db_session, moderation)

        result = await service.remediate(USER_ID, comment.id, comment.youtube_comment_id)

        assert result.is_deleted_on_platform is True
        assert result.is_moderated is False
        assert result.deletion_error is None
        assert result.deletion_attempted_at is not None
        assert moderation.deleted == [comment.youtube_comment_id]
        assert moderation.moderated == {}

    @pytest.mark.asyncio
    async def test_foreign_comment_is_hidden(self, db_session, seed_analysis) -> None:
        comment = flagged_comment(db_session, seed_analysis)
        moderation = StubModerationAdapter(channel_id=OWN_CHANNEL_ID)
        service = RemediationService(db_session, moderation, moderation_status="heldForReview")

        result = await service.remediate(USER_ID, str(comment.id), comment.youtube_comment_id)

        assert result.is_deleted_on_platform is False
        assert result.is_moderated is True
        assert moderation.deleted == []
        assert moderation.moderated == {comment.youtube_comment_id: "heldForReview"}

    @pytest.mark.asyncio
    async def test_ownership_is_checked_live(self, db_session, seed_analysis) -> None:
        """The stored author is not trusted, the platform is asked."""
        comment = flagged_comment(db_session, seed_analysis)
        comment.author_channel_id = OWN_CHANNEL_ID
        db_session.commit()
        moderation = StubModerationAdapter(
            channel_id=OWN_CHANNEL_ID, owners={comment.youtube_comment_id: "UCnewowner"}
        )

        result = await RemediationService(db_session, moderation).remediate(
            USER_ID, comment.id, comment.youtube_comment_id
        )

        assert result.is_moderated is True

    @pytest.mark.asyncio
    async def test_already_remediated_is_a_no_op(self, db_session, seed_analysis) -> None:
        comment = flagged_comment(db_session, seed_analysis)
        comment.is_deleted_on_platform = True
        db_session.commit()
        moderation = MagicMock(spec=ModerationAdapter)
        moderation.get_comment_owner = AsyncMock(side_effect=UpstreamUnavailableError("down"))
        moderation.get_authenticated_channel_id = AsyncMock()
        moderation.delete_comment = AsyncMock()
        moderation.moderate_comment = AsyncMock()

        result = await RemediationService(db_session, moderation).remediate(
            USER_ID, comment.id, comment.youtube_comment_id
        )

        assert result.id == comment.id
        assert result.is_deleted_on_platform is True
        assert result.deletion_attempted_at is None
        moderation.get_comment_owner.assert_not_awaited()
        moderation.delete_comment.assert_not_awaited()
        moderation.moderate_comment.assert_not_awaited()


class TestValidation:
    """Identifier and ownership checks happen before any platform call."""

    @pytest.mark.asyncio
    async def test_malformed_ids(self, db_session, seed_analysis, moderation_adapter) -> None:
        comment = flagged_comment(db_session, seed_analysis)
        service = RemediationService(db_session, moderation_adapter)

        with pytest.raises(InvalidInputError):
            await service.remediate(USER_ID, "not-a-uuid", comment.youtube_comment_id)
        with pytest.raises(InvalidInputError):
            await service.remediate(USER_ID, comment.id, "notacommentid")

        assert moderation_adapter.deleted == []
        assert moderation_adapter.moderated == {}

    @pytest.mark.asyncio
    async def test_not_owned(self, db_session, seed_analysis, moderation_adapter) -> None:
        comment = flagged_comment(db_session, seed_analysis)
        service = RemediationService(db_session, moderation_adapter)

        with pytest.raises(NotFoundError):
            await service.remediate(OTHER_USER_ID, comment.id, comment.youtube_comment_id)

    @pytest.mark.asyncio
    async def test_mismatched_upstream_id(
        self, db_session, seed_analysis, moderation_adapter
    ) -> None:
        comment = flagged_comment(db_session, seed_analysis)
        service = RemediationService(db_session, moderation_adapter)

        with pytest.raises(NotFoundError):
            await service.remediate(USER_ID, comment.id, "Ugsomeothercomment")


class TestFailures:
    """Platform failures are recorded and translated."""

    @pytest.mark.asyncio
    async def test_refused_moderation(self, db_session, seed_analysis) -> None:
        comment = flagged_comment(db_session, seed_analysis)
        moderation = StubModerationAdapter(
            failures={comment.youtube_comment_id: api_error(403, UpstreamReason.NOT_VIDEO_OWNER)}
        )

        with pytest.raises(ForbiddenError) as exc_info:
            await RemediationService(db_session, moderation).remediate(
                USER_ID, comment.id, comment.youtube_comment_id
            )

        assert exc_info.value.reason == ForbiddenReason.CANNOT_MODERATE_VIDEO
        db_session.refresh(comment)
        assert comment.is_deleted_on_platform is False
        assert comment.is_moderated is False
        assert comment.deletion_error == exc_info.value.message
        assert comment.deletion_attempted_at is not None

    @pytest.mark.asyncio
    async def test_success_clears_previous_error(self, db_session, seed_analysis) -> None:
        comment = flagged_comment(db_session, seed_analysis)
        failing = StubModerationAdapter(
            failures={comment.youtube_comment_id: api_error(404, UpstreamReason.NOT_FOUND)}
        )
        with pytest.raises(NotFoundError):
            await RemediationService(db_session, failing).remediate(
                USER_ID, comment.id, comment.youtube_comment_id
            )
        assert comment.deletion_error is not None

        result = await RemediationService(db_session, StubModerationAdapter()).remediate(
            USER_ID, comment.id, comment.youtube_comment_id
        )

        assert result.is_moderated is True
        assert result.deletion_error is None

    @pytest.mark.asyncio
    async def test_unknown_errors_propagate_unchanged(self, db_session, seed_analysis) -> None:
        comment = flagged_comment(db_session, seed_analysis)
        error = RuntimeError("connection reset")
        moderation = StubModerationAdapter(failures={comment.youtube_comment_id: error})

        with pytest.raises(RuntimeError) as exc_info:
            await RemediationService(db_session, moderation).remediate(
                USER_ID, comment.id, comment.youtube_comment_id
            )

        assert exc_info.value is error
        assert comment.deletion_error == "connection reset"


class TestTranslation:
    """Tests for translate_remediation_error."""

    def test_bad_request(self) -> None:
        translated = translate_remediation_error(api_error(400, UpstreamReason.BAD_REQUEST))
        assert isinstance(translated, InvalidRequestError)
        assert translated.status_code == 400

    def test_not_found(self) -> None:
        translated = translate_remediation_error(api_error(404, UpstreamReason.NOT_FOUND))
        assert isinstance(translated, NotFoundError)

    def test_not_comment_owner_explains_hiding(self) -> None:
        translated = translate_remediation_error(api_error(403, UpstreamReason.NOT_COMMENT_OWNER))
        assert isinstance(translated, ForbiddenError)
        assert translated.reason == ForbiddenReason.CANNOT_DELETE_PERMANENTLY
        assert "hidden" in translated.message

    def test_not_video_owner(self) -> None:
        translated = translate_remediation_error(api_error(403, UpstreamReason.NOT_VIDEO_OWNER))
        assert isinstance(translated, ForbiddenError)
        assert translated.reason == ForbiddenReason.CANNOT_MODERATE_VIDEO

    def test_other_forbidden(self) -> None:
        translated = translate_remediation_error(api_error(403, UpstreamReason.UNKNOWN))
        assert isinstance(translated, ForbiddenError)
        assert translated.reason is None

    def test_quota_stays_upstream(self) -> None:
        error = api_error(403, UpstreamReason.QUOTA_EXCEEDED)
        assert translate_remediation_error(error) is error

    @pytest.mark.parametrize(
        "error",
        [
            api_error(500, UpstreamReason.UNKNOWN),
            api_error(401, UpstreamReason.UNAUTHORIZED),
            UpstreamUnavailableError("timeout"),
            ValueError("x"),
        ],
    )
    def test_everything_else_unchanged(self, error: Exception) -> None:
        assert translate_remediation_error(error) is error
