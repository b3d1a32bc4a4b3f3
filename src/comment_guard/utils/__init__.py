"""Shared utilities."""

from comment_guard.utils.async_utils import Outcome, gather_outcomes, run_async

__all__ = ["Outcome", "gather_outcomes", "run_async"]
