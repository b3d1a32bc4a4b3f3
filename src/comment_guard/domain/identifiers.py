"""Identifier parsing and validation.

Upstream conventions live here and nowhere else:

- video ids are 11 characters of ``[A-Za-z0-9_-]``
- top-level comment ids start with ``Ug``
"""

import re
from urllib.parse import parse_qs, urlparse
from uuid import UUID

from comment_guard.domain.errors import InvalidInputError

COMMENT_ID_PREFIX = "Ug"

_VIDEO_ID_RE = re.compile(r"^[A-Za-z0-9_-]{11}$")
_PATH_PREFIXES = ("embed", "shorts", "live", "v", "e")
_YOUTUBE_HOSTS = {
    "youtube.com",
    "www.youtube.com",
    "m.youtube.com",
    "music.youtube.com",
    "youtube-nocookie.com",
    "www.youtube-nocookie.com",
}


def _is_video_id(candidate: str | None) -> bool:
    return bool(candidate) and bool(_VIDEO_ID_RE.match(candidate))


def extract_video_id(video_url: str | None) -> str | None:
    """Return the video id referenced by a URL, or None if there is none.

    Accepts watch, short-link, embed, shorts and live URLs as well as a bare
    video id.
    """
    if not video_url:
        return None

    value = video_url.strip()
    if _is_video_id(value):
        return value

    if "://" not in value:
        value = f"https://{value}"
    parsed = urlparse(value)
    host = (parsed.hostname or "").lower()
    segments = [s for s in parsed.path.split("/") if s]

    if host == "youtu.be":
        candidate = segments[0] if segments else None
        return candidate if _is_video_id(candidate) else None

    if host not in _YOUTUBE_HOSTS:
        return None

    if segments[:1] == ["watch"]:
        candidate = parse_qs(parsed.query).get("v", [None])[0]
        return candidate if _is_video_id(candidate) else None

    if len(segments) >= 2 and segments[0] in _PATH_PREFIXES:
        return segments[1] if _is_video_id(segments[1]) else None

    return None


def resolve_video_id(video_url: str | None) -> str:
    """Like :func:`extract_video_id` but raises on malformed input."""
    video_id = extract_video_id(video_url)
    if video_id is None:
        raise InvalidInputError(
            "Invalid YouTube video URL.",
            details={"video_url": video_url},
        )
    return video_id


def is_valid_comment_id(comment_id: str | None) -> bool:
    """Check the platform's top-level comment id convention."""
    if not comment_id:
        return False
    return comment_id.startswith(COMMENT_ID_PREFIX) and len(comment_id) > len(COMMENT_ID_PREFIX)


def validate_comment_id(comment_id: str | None) -> str:
    """Return the comment id or raise InvalidInputError."""
    if not is_valid_comment_id(comment_id):
        raise InvalidInputError(
            "Invalid YouTube comment ID format.",
            details={"comment_id": comment_id},
        )
    return comment_id  # type: ignore[return-value]


def parse_record_id(value: str | UUID, kind: str = "record") -> UUID:
    """Parse an internal record id (job or analyzed comment)."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"Invalid {kind} ID.", details={"id": str(value)}) from e
