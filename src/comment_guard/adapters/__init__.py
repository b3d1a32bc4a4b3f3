"""Adapters for external services, and factories for the configured ones."""

from comment_guard.adapters.classifier.base import ClassifierProvider
from comment_guard.adapters.comments.base import CommentsAdapter
from comment_guard.adapters.moderation.base import ModerationAdapter
from comment_guard.config import settings


def get_comments_adapter() -> CommentsAdapter:
    """Get the configured comment fetch adapter."""
    provider = settings.comments_provider.lower()

    if provider == "youtube":
        from comment_guard.adapters.comments.youtube import YouTubeCommentsAdapter

        return YouTubeCommentsAdapter()
    else:
        from comment_guard.adapters.comments.stub import StubCommentsAdapter

        return StubCommentsAdapter()


def get_classifier_provider() -> ClassifierProvider:
    """Get the configured classifier provider."""
    provider = settings.classifier_provider.lower()

    if provider == "http":
        from comment_guard.adapters.classifier.http import HTTPClassifierProvider

        return HTTPClassifierProvider()
    else:
        from comment_guard.adapters.classifier.stub import StubClassifierProvider

        return StubClassifierProvider()


def get_moderation_adapter() -> ModerationAdapter:
    """Get the configured remediation adapter."""
    provider = settings.moderation_provider.lower()

    if provider == "youtube":
        from comment_guard.adapters.moderation.youtube import YouTubeModerationAdapter

        return YouTubeModerationAdapter()
    else:
        from comment_guard.adapters.moderation.stub import StubModerationAdapter

        return StubModerationAdapter()


__all__ = [
    "ClassifierProvider",
    "CommentsAdapter",
    "ModerationAdapter",
    "get_classifier_provider",
    "get_comments_adapter",
    "get_moderation_adapter",
]
