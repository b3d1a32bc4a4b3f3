"""YouTube remediation adapter using the Data API."""

from comment_guard.adapters.moderation.base import ModerationAdapter
from comment_guard.adapters.youtube_api import YouTubeAPIClient
from comment_guard.domain.enums import UpstreamReason
from comment_guard.domain.errors import UpstreamAPIError
from comment_guard.logging import get_logger

logger = get_logger(__name__)


class YouTubeModerationAdapter(YouTubeAPIClient, ModerationAdapter):
    """Deletes or hides comments through the ``comments`` endpoints."""

    async def get_comment_owner(self, comment_id: str) -> str | None:
        data = await self._request(
            "GET",
            "/comments",
            params={"part": "snippet", "id": comment_id},
        )
        items = data.get("items") or []
        if not items:
            raise UpstreamAPIError(
                "Comment not found on YouTube.",
                upstream_status=404,
                reason=UpstreamReason.NOT_FOUND,
                details={"comment_id": comment_id},
            )
        snippet = items[0].get("snippet") or {}
        return (snippet.get("authorChannelId") or {}).get("value")

    async def get_authenticated_channel_id(self) -> str:
        data = await self._request("GET", "/channels", params={"part": "id", "mine": "true"})
        items = data.get("items") or []
        if not items or not items[0].get("id"):
            raise UpstreamAPIError(
                "Authenticated user has no YouTube channel.",
                reason=UpstreamReason.UNAUTHORIZED,
            )
        return items[0]["id"]

    async def delete_comment(self, comment_id: str) -> None:
        await self._request(
            "DELETE",
            "/comments",
            params={"id": comment_id},
            forbidden_reason=UpstreamReason.NOT_COMMENT_OWNER,
        )
        logger.info("youtube_comment_deleted", comment_id=comment_id)

    async def moderate_comment(self, comment_id: str, moderation_status: str) -> None:
        await self._request(
            "POST",
            "/comments/setModerationStatus",
            params={"id": comment_id, "moderationStatus": moderation_status},
            forbidden_reason=UpstreamReason.NOT_VIDEO_OWNER,
        )
        logger.info(
            "youtube_comment_moderated",
            comment_id=comment_id,
            moderation_status=moderation_status,
        )
