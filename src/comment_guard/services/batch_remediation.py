"""Batch remediation over every flagged comment of an analysis."""

from uuid import UUID

from sqlalchemy.orm import Session

from comment_guard.adapters.moderation.base import ModerationAdapter
from comment_guard.config import settings
from comment_guard.domain.identifiers import parse_record_id
from comment_guard.domain.models import BatchRemediationSummary, RemediationFailure
from comment_guard.logging import get_logger
from comment_guard.services import analysis_jobs
from comment_guard.services.comment_store import CommentStore
from comment_guard.services.remediation import RemediationService
from comment_guard.utils import gather_outcomes

logger = get_logger(__name__)


class BatchRemediationService:
    """Fans the remediation engine out over an analysis' flagged comments."""

    def __init__(
        self,
        session: Session,
        moderation_adapter: ModerationAdapter,
        flagged_classification: str | None = None,
        max_concurrency: int | None = None,
        moderation_status: str | None = None,
    ) -> None:
        self.session = session
        self.store = CommentStore(session)
        self.remediation = RemediationService(session, moderation_adapter, moderation_status)
        self.flagged_classification = flagged_classification or settings.flagged_classification
        self.max_concurrency = max_concurrency or settings.remediation_max_concurrency

    async def batch_remediate(
        self,
        user_id: str,
        analysis_id: str | UUID,
    ) -> BatchRemediationSummary:
        """Remediate every flagged, not yet deleted comment of an analysis.

        With no targets the job status is left untouched and an empty
        summary is returned. One comment failing never affects the others.

        Raises:
            InvalidInputError: Malformed analysis id.
            NotFoundError: Unknown analysis or not owned by the user.
            InvalidStateTransitionError: The analysis is still processing.
        """
        analysis = analysis_jobs.get_owned_analysis(
            self.session, parse_record_id(analysis_id, "analysis"), user_id
        )
        log = logger.bind(analysis_id=str(analysis.id), user_id=user_id)

        targets = [
            (c.id, c.youtube_comment_id)
            for c in self.store.flagged_pending(analysis.id, self.flagged_classification)
        ]
        if not targets:
            log.info("batch_remediation_no_targets")
            return BatchRemediationSummary()

        analysis_jobs.start_batch(self.session, analysis)
        log.info("batch_remediation_started", targets=len(targets))

        outcomes = await gather_outcomes(
            targets,
            lambda target: self.remediation.remediate(user_id, target[0], target[1]),
            max_concurrency=self.max_concurrency,
        )

        summary = BatchRemediationSummary(total_targeted=len(targets))
        for outcome in outcomes:
            if outcome.ok:
                summary.successfully_deleted += 1
                continue
            summary.failed_to_delete += 1
            summary.failures.append(
                RemediationFailure(
                    upstream_comment_id=outcome.item[1],
                    error=getattr(outcome.error, "message", None) or str(outcome.error),
                )
            )

        analysis_jobs.finish_batch(
            self.session,
            analysis,
            successes=summary.successfully_deleted,
            failures=summary.failed_to_delete,
        )
        log.info(
            "batch_remediation_finished",
            status=analysis.status,
            succeeded=summary.successfully_deleted,
            failed=summary.failed_to_delete,
        )
        return summary
