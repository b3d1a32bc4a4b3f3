"""Base interface for comment remediation adapters."""

from abc import ABC, abstractmethod


class ModerationAdapter(ABC):
    """Abstract base class for platform remediation calls.

    Implementations:
    - YouTubeModerationAdapter: YouTube Data API comments endpoints
    - StubModerationAdapter: In-memory platform, for testing

    Failures are raised as ``UpstreamAPIError`` with a structured reason:
    a refused delete reports ``NOT_COMMENT_OWNER``, a refused moderation
    reports ``NOT_VIDEO_OWNER``.
    """

    @abstractmethod
    async def get_comment_owner(self, comment_id: str) -> str | None:
        """Return the author channel id of a comment as it is right now."""
        ...

    @abstractmethod
    async def get_authenticated_channel_id(self) -> str:
        """Return the channel id of the authenticated user."""
        ...

    @abstractmethod
    async def delete_comment(self, comment_id: str) -> None:
        """Permanently delete a comment authored by the authenticated channel."""
        ...

    @abstractmethod
    async def moderate_comment(self, comment_id: str, moderation_status: str) -> None:
        """Set the moderation status of a comment on the user's own video."""
        ...

    async def close(self) -> None:
        """Release any held resources."""
        return None
