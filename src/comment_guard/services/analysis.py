"""Analysis orchestrator: fetch, dedup, classify, persist, finalize.

One call to :meth:`AnalysisService.run_analysis` creates exactly one job
record and drives it from PROCESSING to COMPLETED or FAILED:

1. resolve the video id from the URL (InvalidInputError, no record created)
2. create the job record before any external call
3. fetch video details and comment threads
4. drop structurally invalid comments
5. skip comments already in the store
6. classify the rest concurrently, one classifier call per comment
7. persist each classified comment independently
8. finalize counters and status

Comments persisted before a failure stay in the store.
"""

from uuid import UUID

from sqlalchemy.orm import Session

from comment_guard.adapters.classifier.base import ClassifierProvider
from comment_guard.adapters.comments.base import CommentsAdapter
from comment_guard.config import settings
from comment_guard.db.models import AnalyzedCommentModel, VideoAnalysisModel
from comment_guard.domain.errors import UpstreamUnavailableError
from comment_guard.domain.identifiers import is_valid_comment_id, parse_record_id, resolve_video_id
from comment_guard.domain.models import ClassificationResult, CommentThread, FetchedComment
from comment_guard.logging import get_logger
from comment_guard.services import analysis_jobs
from comment_guard.services.comment_store import CommentStore
from comment_guard.utils import gather_outcomes

logger = get_logger(__name__)


def select_valid_comments(
    threads: list[CommentThread],
    analysis_id: UUID | None = None,
) -> list[FetchedComment]:
    """Keep top-level comments with a well-formed id and an author channel.

    Invalid entries are logged and dropped.
    """
    valid: list[FetchedComment] = []
    for thread in threads:
        comment = thread.top_level_comment
        if comment is None or not is_valid_comment_id(comment.comment_id):
            logger.warning(
                "invalid_comment_dropped",
                analysis_id=str(analysis_id),
                thread_id=thread.thread_id,
                comment_id=comment.comment_id if comment else None,
                reason="bad_comment_id",
            )
            continue
        if not comment.author_channel_id:
            logger.warning(
                "invalid_comment_dropped",
                analysis_id=str(analysis_id),
                comment_id=comment.comment_id,
                reason="missing_author_channel_id",
            )
            continue
        valid.append(comment)
    return valid


def build_analyzed_comment(
    analysis: VideoAnalysisModel,
    comment: FetchedComment,
    result: ClassificationResult,
    total_reply_count: int = 0,
) -> AnalyzedCommentModel:
    """Create the persisted record for one classified top-level comment."""
    return AnalyzedCommentModel(
        analysis_id=analysis.id,
        user_id=analysis.user_id,
        youtube_video_id=analysis.youtube_video_id,
        youtube_comment_id=comment.comment_id,
        parent_youtube_comment_id=None,
        author_channel_id=comment.author_channel_id,
        comment_text_original=comment.text_original,
        comment_text_display=comment.text_display,
        comment_author_display_name=comment.author_display_name,
        comment_author_profile_image_url=comment.author_profile_image_url,
        comment_published_at=comment.published_at,
        comment_updated_at=comment.updated_at,
        like_count=comment.like_count,
        classification=result.label,
        ai_confidence_score=result.confidence_score,
        ai_model_version=result.model_version,
        is_deleted_on_platform=False,
        is_moderated=False,
        metadata_={
            "is_reply": False,
            "total_reply_count": total_reply_count,
            "original_response": comment.raw_data,
        },
    )


class AnalysisService:
    """Runs comment analyses for a user's videos."""

    def __init__(
        self,
        session: Session,
        comments_adapter: CommentsAdapter,
        classifier: ClassifierProvider,
        max_comments: int | None = None,
        page_size: int | None = None,
        max_concurrency: int | None = None,
    ) -> None:
        self.session = session
        self.comments_adapter = comments_adapter
        self.classifier = classifier
        self.store = CommentStore(session)
        self.max_comments = max_comments or settings.max_top_level_comments
        self.page_size = page_size or settings.comments_page_size
        self.max_concurrency = max_concurrency or settings.classifier_max_concurrency

    async def run_analysis(self, user_id: str, video_url: str) -> VideoAnalysisModel:
        """Analyze the comments of a video and return the finished job record.

        Raises:
            InvalidInputError: If the URL does not reference a video.
            Exception: Whatever made the job fail, after it is saved as FAILED.
        """
        analysis = self.start_analysis(user_id, video_url)
        return await self.execute(analysis)

    def start_analysis(self, user_id: str, video_url: str) -> VideoAnalysisModel:
        """Validate the URL and create the PROCESSING job record."""
        video_id = resolve_video_id(video_url)
        return analysis_jobs.create_analysis(self.session, user_id, video_id)

    async def execute(self, analysis: VideoAnalysisModel) -> VideoAnalysisModel:
        """Drive a PROCESSING job record to COMPLETED or FAILED."""
        analysis_id = analysis.id
        log = logger.bind(analysis_id=str(analysis_id), video_id=analysis.youtube_video_id)

        try:
            await self._ingest(analysis, log)
        except Exception as e:
            log.exception("analysis_failed", error=str(e))
            self.session.rollback()
            analysis_jobs.fail_analysis(self.session, analysis, _describe(e))
            raise

        log.info(
            "analysis_completed",
            fetched=analysis.total_comments_fetched,
            analyzed=analysis.total_comments_analyzed,
            skipped=analysis.total_comments_skipped,
            invalid=analysis.total_comments_invalid,
            failed=analysis.total_comments_failed,
        )
        return analysis

    async def _ingest(self, analysis: VideoAnalysisModel, log) -> None:
        video_id = analysis.youtube_video_id

        details = await self.comments_adapter.fetch_video_details(video_id)
        if details is not None and details.title:
            analysis.video_title = details.title
            analysis_jobs.save(self.session, analysis)

        threads = await self.comments_adapter.fetch_comments(
            video_id,
            page_size=self.page_size,
            max_items=self.max_comments,
        )
        threads = threads[: self.max_comments]
        analysis.total_comments_fetched = len(threads)

        if not threads:
            log.info("analysis_no_comments")
            analysis_jobs.complete_analysis(self.session, analysis)
            return

        candidates = select_valid_comments(threads, analysis.id)
        reply_counts = {
            t.top_level_comment.comment_id: t.total_reply_count
            for t in threads
            if t.top_level_comment is not None
        }
        analysis.total_comments_invalid = len(threads) - len(candidates)

        unique: dict[str, FetchedComment] = {}
        for comment in candidates:
            unique.setdefault(comment.comment_id, comment)

        existing = self.store.existing_ids(unique)
        new_comments = [c for c in unique.values() if c.comment_id not in existing]
        # Repeats within this fetch count as skipped, like already stored ones
        skipped = len(candidates) - len(new_comments)
        analysis.total_comments_skipped = skipped
        # Persist fetch counters before per-comment commits start
        analysis_jobs.save(self.session, analysis)

        log.info(
            "analysis_candidates_selected",
            fetched=len(threads),
            valid=len(candidates),
            new=len(new_comments),
            already_stored=skipped,
        )

        analyzed = 0
        failed = 0
        if new_comments:
            outcomes = await gather_outcomes(
                new_comments,
                self._classify,
                max_concurrency=self.max_concurrency,
            )

            classified = [o for o in outcomes if o.ok]
            for outcome in outcomes:
                if not outcome.ok:
                    failed += 1
                    log.warning(
                        "comment_classification_failed",
                        comment_id=outcome.item.comment_id,
                        error=_describe(outcome.error),
                    )

            if not classified:
                analysis.total_comments_failed = failed
                analysis_jobs.save(self.session, analysis)
                raise UpstreamUnavailableError(
                    f"Classifier unavailable: all {len(outcomes)} classification calls failed.",
                    details={"first_error": _describe(outcomes[0].error)},
                )

            for outcome in classified:
                comment = outcome.item
                try:
                    record = build_analyzed_comment(
                        analysis,
                        comment,
                        outcome.value,
                        total_reply_count=reply_counts.get(comment.comment_id, 0),
                    )
                    if self.store.insert_if_absent(record):
                        analyzed += 1
                    else:
                        skipped += 1
                except Exception as e:
                    failed += 1
                    log.error(
                        "comment_persist_failed",
                        comment_id=comment.comment_id,
                        error=str(e),
                    )

            log.info("analysis_persisted", saved=analyzed, total=len(new_comments))

        analysis.total_comments_analyzed = analyzed
        analysis.total_comments_skipped = skipped
        analysis.total_comments_failed = failed
        analysis_jobs.complete_analysis(self.session, analysis)

    async def _classify(self, comment: FetchedComment) -> ClassificationResult:
        return await self.classifier.classify(comment.text_original or comment.text_display)

    def get_analysis(self, user_id: str, analysis_id: str | UUID) -> VideoAnalysisModel:
        """Load a job record owned by the user."""
        return analysis_jobs.get_owned_analysis(
            self.session, parse_record_id(analysis_id, "analysis"), user_id
        )

    def get_analysis_results(
        self, user_id: str, analysis_id: str | UUID
    ) -> list[AnalyzedCommentModel]:
        """Analyzed comments of a job owned by the user, oldest first."""
        analysis = self.get_analysis(user_id, analysis_id)
        return self.store.list_for_analysis(analysis.id)


def _describe(error: BaseException | None) -> str:
    if error is None:
        return ""
    return getattr(error, "message", None) or str(error) or error.__class__.__name__
