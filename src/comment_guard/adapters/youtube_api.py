"""Shared HTTP plumbing for the YouTube Data API adapters."""

from datetime import datetime
from typing import Any

import httpx

from comment_guard.config import settings
from comment_guard.domain.enums import UpstreamReason
from comment_guard.domain.errors import UpstreamAPIError, UpstreamUnavailableError
from comment_guard.logging import get_logger

logger = get_logger(__name__)

# Data API error reasons (error.errors[].reason) we act on
_QUOTA_REASONS = {"quotaExceeded", "rateLimitExceeded", "dailyLimitExceeded", "userRateLimitExceeded"}
_COMMENTS_DISABLED_REASONS = {"commentsDisabled"}


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an RFC 3339 timestamp as returned by the Data API."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def _error_body(response: httpx.Response) -> dict[str, Any]:
    """The ``error`` object of a Data API error response, or empty."""
    try:
        body = response.json()
    except ValueError:
        return {}
    error = body.get("error") if isinstance(body, dict) else None
    return error if isinstance(error, dict) else {}


def _error_reason(response: httpx.Response) -> str:
    error = _error_body(response)
    errors = error.get("errors")
    first = errors[0] if isinstance(errors, list) and errors else {}
    reason = first.get("reason") if isinstance(first, dict) else None
    return reason or error.get("status") or ""


def _error_message(response: httpx.Response) -> str:
    return _error_body(response).get("message") or response.text[:500]


class YouTubeAPIClient:
    """Authenticated async client for YouTube Data API v3.

    The access token is issued and refreshed by the external auth service;
    this client only attaches it to requests.
    """

    def __init__(
        self,
        access_token: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.access_token = access_token or settings.youtube_access_token
        self.base_url = (base_url or settings.youtube_api_base_url).rstrip("/")
        self.timeout = timeout or settings.youtube_timeout_seconds
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        forbidden_reason: UpstreamReason | None = None,
    ) -> dict[str, Any]:
        """Send a request and return the decoded JSON body.

        Args:
            method: HTTP method.
            path: Path relative to the API base URL.
            params: Query parameters.
            forbidden_reason: Reason code to report for a plain 403 on this call.

        Raises:
            UpstreamUnavailableError: On transport failure or missing credentials.
            UpstreamAPIError: On any non-2xx response.
        """
        if not self.access_token:
            raise UpstreamUnavailableError("YouTube access token is not configured.")

        client = await self._get_client()
        try:
            response = await client.request(
                method,
                path,
                params=params,
                headers={"Authorization": f"Bearer {self.access_token}"},
            )
        except httpx.HTTPError as e:
            logger.error("youtube_transport_error", path=path, error=str(e))
            raise UpstreamUnavailableError(f"YouTube API request failed: {e}") from e

        if response.is_success:
            if response.status_code == 204 or not response.content:
                return {}
            return response.json()

        raise self._to_error(response, path, forbidden_reason)

    def _to_error(
        self,
        response: httpx.Response,
        path: str,
        forbidden_reason: UpstreamReason | None,
    ) -> UpstreamAPIError:
        """Map an error response onto a structured reason code."""
        status = response.status_code
        raw_reason = _error_reason(response)
        message = _error_message(response)

        if status == 400:
            reason = UpstreamReason.BAD_REQUEST
        elif status == 401:
            reason = UpstreamReason.UNAUTHORIZED
        elif status == 404:
            reason = UpstreamReason.NOT_FOUND
        elif status in (403, 429) and raw_reason in _QUOTA_REASONS:
            reason = UpstreamReason.QUOTA_EXCEEDED
        elif status == 403 and raw_reason in _COMMENTS_DISABLED_REASONS:
            reason = UpstreamReason.COMMENTS_DISABLED
        elif status == 403 and forbidden_reason is not None:
            reason = forbidden_reason
        else:
            reason = UpstreamReason.UNKNOWN

        logger.warning(
            "youtube_api_error",
            path=path,
            status=status,
            upstream_reason=raw_reason,
            reason=reason,
        )
        return UpstreamAPIError(
            message or f"YouTube API error: {status}",
            upstream_status=status,
            reason=reason,
            details={"path": path, "upstream_reason": raw_reason},
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
