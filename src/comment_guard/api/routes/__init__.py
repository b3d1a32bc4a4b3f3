"""API route modules."""

from comment_guard.api.routes import analyses, comments, health

__all__ = ["analyses", "comments", "health"]
