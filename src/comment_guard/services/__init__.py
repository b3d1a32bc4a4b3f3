"""Core services: analysis, remediation and their persistence helpers."""

from comment_guard.services.analysis import AnalysisService
from comment_guard.services.batch_remediation import BatchRemediationService
from comment_guard.services.comment_store import CommentStore
from comment_guard.services.remediation import RemediationService, translate_remediation_error

__all__ = [
    "AnalysisService",
    "BatchRemediationService",
    "CommentStore",
    "RemediationService",
    "translate_remediation_error",
]
