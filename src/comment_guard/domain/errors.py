"""Exception hierarchy shared by services, adapters and the API layer.

Every error carries the HTTP status the API answers with, so routes never
need their own translation tables.
"""

from typing import Any

from comment_guard.domain.enums import ForbiddenReason, UpstreamReason


class CommentGuardError(Exception):
    """Base class for all application errors."""

    status_code: int = 500
    code: str = "internal"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Serialize for an API error body."""
        return {"error": self.code, "message": self.message, "details": self.details}


class InvalidInputError(CommentGuardError):
    """Malformed URL or identifier. Raised before any external call."""

    status_code = 400
    code = "invalid_input"


class UnauthorizedError(CommentGuardError):
    """The request carries no authenticated user."""

    status_code = 401
    code = "unauthorized"


class InvalidRequestError(CommentGuardError):
    """The platform rejected a request as malformed."""

    status_code = 400
    code = "invalid_request"


class NotFoundError(CommentGuardError):
    """Job or comment is absent, or not owned by the requesting user."""

    status_code = 404
    code = "not_found"


class ForbiddenError(CommentGuardError):
    """The platform denied the action for the authenticated user."""

    status_code = 403
    code = "forbidden"

    def __init__(
        self,
        message: str,
        reason: ForbiddenReason | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.reason = reason

    def to_dict(self) -> dict[str, Any]:
        body = super().to_dict()
        body["reason"] = self.reason.value if self.reason else None
        return body


class InvalidStateTransitionError(CommentGuardError):
    """A job status change that the lifecycle does not allow."""

    status_code = 409
    code = "invalid_state"


class UpstreamUnavailableError(CommentGuardError):
    """Gateway, auth or quota failure talking to an external collaborator."""

    status_code = 502
    code = "upstream_unavailable"


class UpstreamAPIError(UpstreamUnavailableError):
    """A platform call failed with a known HTTP status and reason code."""

    code = "upstream_error"

    def __init__(
        self,
        message: str,
        upstream_status: int | None = None,
        reason: UpstreamReason = UpstreamReason.UNKNOWN,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.upstream_status = upstream_status
        self.reason = reason

    def to_dict(self) -> dict[str, Any]:
        body = super().to_dict()
        body["upstream_status"] = self.upstream_status
        body["reason"] = self.reason.value
        return body


class InternalError(CommentGuardError):
    """Unexpected persistence or logic failure."""

    status_code = 500
    code = "internal"
