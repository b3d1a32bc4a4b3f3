"""Stub comments adapter for testing and offline runs."""

import hashlib
from datetime import UTC, datetime, timedelta

from comment_guard.adapters.comments.base import CommentsAdapter
from comment_guard.domain.models import CommentThread, FetchedComment, VideoDetails
from comment_guard.logging import get_logger

logger = get_logger(__name__)

SAMPLE_COMMENTS = [
    "Great explanation, thanks!",
    "Main di situs gacor pasti maxwin, deposit 10rb langsung WD",
    "Who else is watching in 2025?",
    "Slot online terpercaya, link di bio",
    "The editing on this one is so clean",
    "Can you make a part 2?",
    "Togel hari ini bocoran angka jitu, gabung sekarang",
    "I learned more here than in class",
]


class StubCommentsAdapter(CommentsAdapter):
    """Returns a fixed, video-dependent set of comment threads.

    Comment ids are derived from the video id so repeated runs against the
    same video see the same comments.
    """

    def __init__(self, comments: list[str] | None = None) -> None:
        self.comments = SAMPLE_COMMENTS if comments is None else comments

    async def fetch_video_details(self, video_id: str) -> VideoDetails | None:
        return VideoDetails(video_id=video_id, title=f"Stub video {video_id}", channel_id="UCstubowner")

    async def fetch_comments(
        self,
        video_id: str,
        page_size: int = 100,
        max_items: int = 200,
    ) -> list[CommentThread]:
        logger.info("stub_fetch_comments", video_id=video_id, max_items=max_items)

        base_time = datetime(2025, 1, 1, tzinfo=UTC)
        threads = []
        for index, text in enumerate(self.comments[:max_items]):
            digest = hashlib.sha256(f"{video_id}:{index}".encode()).hexdigest()[:20]
            comment_id = f"Ug{digest}"
            published_at = base_time + timedelta(hours=index)
            threads.append(
                CommentThread(
                    thread_id=comment_id,
                    top_level_comment=FetchedComment(
                        comment_id=comment_id,
                        author_channel_id=f"UCviewer{index:03d}",
                        text_original=text,
                        text_display=text,
                        author_display_name=f"viewer_{index}",
                        published_at=published_at,
                        updated_at=published_at,
                        like_count=index,
                        raw_data={"source": "stub"},
                    ),
                )
            )
        return threads
