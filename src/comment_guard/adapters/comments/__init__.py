"""Comment fetch adapters."""

from comment_guard.adapters.comments.base import CommentsAdapter
from comment_guard.adapters.comments.stub import StubCommentsAdapter
from comment_guard.adapters.comments.youtube import YouTubeCommentsAdapter

__all__ = [
    "CommentsAdapter",
    "StubCommentsAdapter",
    "YouTubeCommentsAdapter",
]
