"""Comment remediation adapters."""

from comment_guard.adapters.moderation.base import ModerationAdapter
from comment_guard.adapters.moderation.stub import StubModerationAdapter
from comment_guard.adapters.moderation.youtube import YouTubeModerationAdapter

__all__ = [
    "ModerationAdapter",
    "StubModerationAdapter",
    "YouTubeModerationAdapter",
]
