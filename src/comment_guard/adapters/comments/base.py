"""Base interface for comment fetch adapters."""

from abc import ABC, abstractmethod

from comment_guard.domain.models import CommentThread, VideoDetails


class CommentsAdapter(ABC):
    """Abstract base class for comment fetch adapters.

    Implementations:
    - StubCommentsAdapter: Returns deterministic sample threads for testing
    - YouTubeCommentsAdapter: Pages through the YouTube Data API
    """

    @abstractmethod
    async def fetch_video_details(self, video_id: str) -> VideoDetails | None:
        """Fetch metadata for a video.

        Args:
            video_id: The platform video ID

        Returns:
            VideoDetails, or None if the video is unknown
        """
        ...

    @abstractmethod
    async def fetch_comments(
        self,
        video_id: str,
        page_size: int = 100,
        max_items: int = 200,
    ) -> list[CommentThread]:
        """Fetch top-level comment threads for a video.

        Args:
            video_id: The platform video ID
            page_size: Threads requested per upstream page
            max_items: Maximum number of threads to return

        Returns:
            Threads in upstream order, at most ``max_items`` long
        """
        ...

    async def health_check(self) -> bool:
        """Check if the comments API is available."""
        return True

    async def close(self) -> None:
        """Release any held resources."""
        return None
