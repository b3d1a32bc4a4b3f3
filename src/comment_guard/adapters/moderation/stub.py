"""Stub remediation adapter backed by an in-memory platform."""

from comment_guard.adapters.moderation.base import ModerationAdapter
from comment_guard.domain.enums import UpstreamReason
from comment_guard.domain.errors import UpstreamAPIError
from comment_guard.logging import get_logger

logger = get_logger(__name__)


class StubModerationAdapter(ModerationAdapter):
    """Simulates the platform.

    Comments not listed in ``owners`` are treated as authored by someone
    other than the authenticated channel. ``failures`` maps comment ids to
    errors raised on any remediation call for them.
    """

    def __init__(
        self,
        channel_id: str = "UCstubowner",
        owners: dict[str, str] | None = None,
        failures: dict[str, Exception] | None = None,
    ) -> None:
        self.channel_id = channel_id
        self.owners = owners or {}
        self.failures = failures or {}
        self.deleted: list[str] = []
        self.moderated: dict[str, str] = {}

    def _check(self, comment_id: str) -> None:
        if comment_id in self.failures:
            raise self.failures[comment_id]
        if comment_id in self.deleted:
            raise UpstreamAPIError(
                "Comment not found.", upstream_status=404, reason=UpstreamReason.NOT_FOUND
            )

    async def get_comment_owner(self, comment_id: str) -> str | None:
        self._check(comment_id)
        return self.owners.get(comment_id, "UCsomeoneelse")

    async def get_authenticated_channel_id(self) -> str:
        return self.channel_id

    async def delete_comment(self, comment_id: str) -> None:
        self._check(comment_id)
        logger.info("stub_delete_comment", comment_id=comment_id)
        self.deleted.append(comment_id)

    async def moderate_comment(self, comment_id: str, moderation_status: str) -> None:
        self._check(comment_id)
        logger.info("stub_moderate_comment", comment_id=comment_id, status=moderation_status)
        self.moderated[comment_id] = moderation_status
