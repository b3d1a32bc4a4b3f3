"""FastAPI dependencies."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from comment_guard.adapters import (
    get_classifier_provider,
    get_comments_adapter,
    get_moderation_adapter,
)
from comment_guard.adapters.classifier.base import ClassifierProvider
from comment_guard.adapters.comments.base import CommentsAdapter
from comment_guard.adapters.moderation.base import ModerationAdapter
from comment_guard.db.session import get_session
from comment_guard.domain.errors import UnauthorizedError

# Database session dependency
SessionDep = Annotated[Session, Depends(get_session)]


def get_current_user_id(
    x_user_id: Annotated[str | None, Header(description="Authenticated user id")] = None,
) -> str:
    """User id set by the upstream auth layer."""
    if not x_user_id or not x_user_id.strip():
        raise UnauthorizedError("Missing X-User-Id header.")
    return x_user_id.strip()


CurrentUserDep = Annotated[str, Depends(get_current_user_id)]


async def comments_adapter() -> AsyncGenerator[CommentsAdapter, None]:
    adapter = get_comments_adapter()
    try:
        yield adapter
    finally:
        await adapter.close()


async def classifier_provider() -> AsyncGenerator[ClassifierProvider, None]:
    provider = get_classifier_provider()
    try:
        yield provider
    finally:
        await provider.close()


async def moderation_adapter() -> AsyncGenerator[ModerationAdapter, None]:
    adapter = get_moderation_adapter()
    try:
        yield adapter
    finally:
        await adapter.close()


CommentsAdapterDep = Annotated[CommentsAdapter, Depends(comments_adapter)]
ClassifierDep = Annotated[ClassifierProvider, Depends(classifier_provider)]
ModerationAdapterDep = Annotated[ModerationAdapter, Depends(moderation_adapter)]
