"""Database layer."""

from comment_guard.db.models import AnalyzedCommentModel, Base, VideoAnalysisModel
from comment_guard.db.session import get_session, get_session_context, init_db

__all__ = [
    "Base",
    "get_session",
    "get_session_context",
    "init_db",
    # Models
    "AnalyzedCommentModel",
    "VideoAnalysisModel",
]
