"""Single comment remediation endpoint."""

from fastapi import APIRouter
from pydantic import BaseModel, Field

from comment_guard.api.deps import CurrentUserDep, ModerationAdapterDep, SessionDep
from comment_guard.api.routes.analyses import AnalyzedCommentResponse
from comment_guard.services import RemediationService

router = APIRouter(prefix="/comments", tags=["Comments"])


class RemediateCommentRequest(BaseModel):
    """Identifies the platform comment behind an analyzed comment."""

    youtube_comment_id: str = Field(..., description="Platform id of the top-level comment")


@router.post(
    "/{analyzed_comment_id}/remediate",
    response_model=AnalyzedCommentResponse,
    summary="Remediate a comment",
    description=(
        "Permanently delete the comment if the requesting user wrote it, "
        "otherwise hide it on the user's video."
    ),
)
async def remediate_comment(
    analyzed_comment_id: str,
    request: RemediateCommentRequest,
    session: SessionDep,
    user_id: CurrentUserDep,
    moderation: ModerationAdapterDep,
) -> AnalyzedCommentResponse:
    service = RemediationService(session, moderation)
    comment = await service.remediate(user_id, analyzed_comment_id, request.youtube_comment_id)
    return AnalyzedCommentResponse.from_model(comment)
