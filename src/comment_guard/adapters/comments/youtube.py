"""YouTube comments adapter using the Data API."""

from typing import Any

from comment_guard.adapters.comments.base import CommentsAdapter
from comment_guard.adapters.youtube_api import YouTubeAPIClient, parse_timestamp
from comment_guard.domain.models import CommentThread, FetchedComment, VideoDetails
from comment_guard.logging import get_logger

logger = get_logger(__name__)

MAX_PAGE_SIZE = 100


def parse_comment(payload: dict[str, Any] | None) -> FetchedComment | None:
    """Build a FetchedComment from a Data API ``comment`` resource."""
    if not payload:
        return None
    snippet = payload.get("snippet") or {}
    author_channel = snippet.get("authorChannelId") or {}
    return FetchedComment(
        comment_id=payload.get("id"),
        author_channel_id=author_channel.get("value"),
        text_original=snippet.get("textOriginal") or "",
        text_display=snippet.get("textDisplay") or "",
        author_display_name=snippet.get("authorDisplayName"),
        author_profile_image_url=snippet.get("authorProfileImageUrl"),
        published_at=parse_timestamp(snippet.get("publishedAt")),
        updated_at=parse_timestamp(snippet.get("updatedAt")),
        like_count=int(snippet.get("likeCount") or 0),
        raw_data=payload,
    )


def parse_thread(item: dict[str, Any]) -> CommentThread:
    """Build a CommentThread from a Data API ``commentThread`` resource."""
    snippet = item.get("snippet") or {}
    return CommentThread(
        thread_id=item.get("id"),
        top_level_comment=parse_comment(snippet.get("topLevelComment")),
        total_reply_count=int(snippet.get("totalReplyCount") or 0),
    )


class YouTubeCommentsAdapter(YouTubeAPIClient, CommentsAdapter):
    """Fetches top-level comments via ``commentThreads.list``.

    Replies are not fetched; only top-level comments are analyzed.
    """

    async def fetch_video_details(self, video_id: str) -> VideoDetails | None:
        data = await self._request(
            "GET",
            "/videos",
            params={"part": "snippet", "id": video_id},
        )
        items = data.get("items") or []
        if not items:
            logger.warning("youtube_video_not_found", video_id=video_id)
            return None
        snippet = items[0].get("snippet") or {}
        return VideoDetails(
            video_id=video_id,
            title=snippet.get("title"),
            channel_id=snippet.get("channelId"),
        )

    async def fetch_comments(
        self,
        video_id: str,
        page_size: int = 100,
        max_items: int = 200,
    ) -> list[CommentThread]:
        threads: list[CommentThread] = []
        page_token: str | None = None
        page_size = max(1, min(page_size, MAX_PAGE_SIZE))

        while len(threads) < max_items:
            params: dict[str, Any] = {
                "part": "snippet",
                "videoId": video_id,
                "maxResults": min(page_size, max_items - len(threads)),
                "order": "time",
                "textFormat": "plainText",
            }
            if page_token:
                params["pageToken"] = page_token

            data = await self._request("GET", "/commentThreads", params=params)

            for item in data.get("items") or []:
                threads.append(parse_thread(item))

            page_token = data.get("nextPageToken")
            if not page_token:
                break

        logger.debug("youtube_comments_fetched", video_id=video_id, count=len(threads))
        return threads[:max_items]

    async def health_check(self) -> bool:
        return bool(self.access_token)
