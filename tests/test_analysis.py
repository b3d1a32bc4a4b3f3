"""Tests for the analysis orchestrator."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy import func, select

from comment_guard.adapters.classifier.base import ClassifierProvider
from comment_guard.adapters.classifier.stub import StubClassifierProvider
from comment_guard.adapters.comments.base import CommentsAdapter
from comment_guard.adapters.comments.stub import StubCommentsAdapter
from comment_guard.db.models import AnalyzedCommentModel, VideoAnalysisModel
from comment_guard.domain.enums import AnalysisStatus, UpstreamReason
from comment_guard.domain.errors import (
    InternalError,
    InvalidInputError,
    NotFoundError,
    UpstreamAPIError,
    UpstreamUnavailableError,
)
from comment_guard.domain.models import ClassificationResult, VideoDetails
from comment_guard.services import AnalysisService
from comment_guard.services.analysis import select_valid_comments
from conftest import OTHER_USER_ID, USER_ID, make_thread

VIDEO_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"


def counting_classifier() -> MagicMock:
    """A classifier whose calls can be counted, answering like the stub."""
    stub = StubClassifierProvider()
    classifier = MagicMock(spec=ClassifierProvider)
    classifier.classify = AsyncMock(side_effect=stub.classify)
    return classifier


def fake_comments(threads, title: str | None = "A video") -> MagicMock:
    adapter = MagicMock(spec=CommentsAdapter)
    adapter.fetch_video_details = AsyncMock(
        return_value=VideoDetails(video_id="dQw4w9WgXcQ", title=title)
    )
    adapter.fetch_comments = AsyncMock(return_value=threads)
    return adapter


def count_comments(session) -> int:
    return session.execute(select(func.count()).select_from(AnalyzedCommentModel)).scalar_one()


class TestRunAnalysis:
    """Tests for a full analysis run."""

    @pytest.mark.asyncio
    async def test_stub_run(self, db_session, comments_adapter, classifier) -> None:
        """The stub video has eight comments, three of them gambling spam."""
        service = AnalysisService(db_session, comments_adapter, classifier)

        analysis = await service.run_analysis(USER_ID, VIDEO_URL)

        assert analysis.status == AnalysisStatus.COMPLETED
        assert analysis.youtube_video_id == "dQw4w9WgXcQ"
        assert analysis.video_title == "Stub video dQw4w9WgXcQ"
        assert analysis.total_comments_fetched == 8
        assert analysis.total_comments_analyzed == 8
        assert analysis.error_message is None
        assert analysis.completed_at is not None

        results = service.get_analysis_results(USER_ID, analysis.id)
        flagged = [c for c in results if c.classification == "JUDI"]
        assert len(flagged) == 3
        assert all(c.user_id == USER_ID for c in results)
        assert all(c.parent_youtube_comment_id is None for c in results)
        assert all(c.metadata_["original_response"] == {"source": "stub"} for c in results)

    @pytest.mark.asyncio
    async def test_zero_comments(self, db_session, classifier) -> None:
        """No comments completes with all counters at zero."""
        service = AnalysisService(db_session, StubCommentsAdapter(comments=[]), classifier)

        analysis = await service.run_analysis(USER_ID, VIDEO_URL)

        assert analysis.status == AnalysisStatus.COMPLETED
        assert analysis.total_comments_fetched == 0
        assert analysis.total_comments_analyzed == 0
        assert analysis.total_comments_skipped == 0
        assert analysis.total_comments_invalid == 0
        assert analysis.total_comments_failed == 0

    @pytest.mark.asyncio
    async def test_invalid_thread_is_dropped(self, db_session) -> None:
        """Three threads, one missing its author channel id."""
        threads = [
            make_thread("Ugfirst"),
            make_thread("Ugsecond", author_channel_id=None),
            make_thread("Ugthird"),
        ]
        classifier = counting_classifier()
        service = AnalysisService(db_session, fake_comments(threads), classifier)

        analysis = await service.run_analysis(USER_ID, VIDEO_URL)

        assert analysis.total_comments_fetched == 3
        assert analysis.total_comments_invalid == 1
        assert analysis.total_comments_analyzed == 2
        assert classifier.classify.await_count == 2
        stored = {c.youtube_comment_id for c in service.get_analysis_results(USER_ID, analysis.id)}
        assert stored == {"Ugfirst", "Ugthird"}

    @pytest.mark.asyncio
    async def test_rerun_is_idempotent(self, db_session, comments_adapter) -> None:
        """Already stored comments are neither reclassified nor duplicated."""
        classifier = counting_classifier()
        service = AnalysisService(db_session, comments_adapter, classifier)

        first = await service.run_analysis(USER_ID, VIDEO_URL)
        assert classifier.classify.await_count == 8

        second = await service.run_analysis(USER_ID, VIDEO_URL)

        assert classifier.classify.await_count == 8
        assert second.id != first.id
        assert second.status == AnalysisStatus.COMPLETED
        assert second.total_comments_fetched == 8
        assert second.total_comments_analyzed == 0
        assert second.total_comments_skipped == 8
        assert count_comments(db_session) == 8
        assert service.get_analysis_results(USER_ID, second.id) == []

    @pytest.mark.asyncio
    async def test_rerun_classifies_only_new_comments(self, db_session) -> None:
        classifier = counting_classifier()
        service = AnalysisService(
            db_session, fake_comments([make_thread("Uga"), make_thread("Ugb")]), classifier
        )
        await service.run_analysis(USER_ID, VIDEO_URL)

        service.comments_adapter = fake_comments(
            [make_thread("Uga"), make_thread("Ugb"), make_thread("Ugc")]
        )
        analysis = await service.run_analysis(USER_ID, VIDEO_URL)

        assert classifier.classify.await_count == 3
        assert analysis.total_comments_analyzed == 1
        assert analysis.total_comments_skipped == 2

    @pytest.mark.asyncio
    async def test_duplicate_ids_in_one_fetch(self, db_session) -> None:
        threads = [make_thread("Uga"), make_thread("Uga"), make_thread("Ugb")]
        service = AnalysisService(db_session, fake_comments(threads), counting_classifier())

        analysis = await service.run_analysis(USER_ID, VIDEO_URL)

        assert analysis.total_comments_analyzed == 2
        assert analysis.total_comments_skipped == 1
        assert analysis.total_comments_invalid == 0
        assert analysis.total_comments_analyzed <= analysis.total_comments_fetched
        assert count_comments(db_session) == 2

    @pytest.mark.asyncio
    async def test_fetch_is_capped(self, db_session) -> None:
        threads = [make_thread(f"Ug{i}") for i in range(10)]
        service = AnalysisService(
            db_session, fake_comments(threads), counting_classifier(), max_comments=4
        )

        analysis = await service.run_analysis(USER_ID, VIDEO_URL)

        assert analysis.total_comments_fetched == 4
        assert analysis.total_comments_analyzed == 4

    @pytest.mark.asyncio
    async def test_missing_video_details_is_not_an_error(self, db_session) -> None:
        adapter = fake_comments([make_thread("Uga")])
        adapter.fetch_video_details = AsyncMock(return_value=None)
        service = AnalysisService(db_session, adapter, counting_classifier())

        analysis = await service.run_analysis(USER_ID, VIDEO_URL)

        assert analysis.status == AnalysisStatus.COMPLETED
        assert analysis.video_title is None


class TestFailures:
    """Tests for partial and total failures."""

    @pytest.mark.asyncio
    async def test_invalid_url_creates_no_record(self, db_session, comments_adapter) -> None:
        classifier = counting_classifier()
        service = AnalysisService(db_session, comments_adapter, classifier)

        with pytest.raises(InvalidInputError):
            await service.run_analysis(USER_ID, "https://example.com/nope")

        count = db_session.execute(
            select(func.count()).select_from(VideoAnalysisModel)
        ).scalar_one()
        assert count == 0
        classifier.classify.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_fetch_failure_marks_job_failed(self, db_session, classifier) -> None:
        adapter = fake_comments([])
        adapter.fetch_comments = AsyncMock(
            side_effect=UpstreamAPIError(
                "The video has disabled comments.",
                upstream_status=403,
                reason=UpstreamReason.COMMENTS_DISABLED,
            )
        )
        service = AnalysisService(db_session, adapter, classifier)

        with pytest.raises(UpstreamAPIError):
            await service.run_analysis(USER_ID, VIDEO_URL)

        analysis = db_session.execute(select(VideoAnalysisModel)).scalar_one()
        assert analysis.status == AnalysisStatus.FAILED
        assert analysis.error_message == "The video has disabled comments."
        assert analysis.completed_at is not None
        assert analysis.video_title == "A video"
        assert analysis.total_comments_fetched == 0

    @pytest.mark.asyncio
    async def test_single_classifier_failure_is_counted(self, db_session) -> None:
        async def classify(text: str) -> ClassificationResult:
            if text == "bad":
                raise UpstreamUnavailableError("classifier timeout")
            return ClassificationResult(label="NON_JUDI", confidence_score=0.8, model_version="t")

        classifier = MagicMock(spec=ClassifierProvider)
        classifier.classify = AsyncMock(side_effect=classify)
        threads = [make_thread("Uga"), make_thread("Ugb", text="bad"), make_thread("Ugc")]
        service = AnalysisService(db_session, fake_comments(threads), classifier)

        analysis = await service.run_analysis(USER_ID, VIDEO_URL)

        assert analysis.status == AnalysisStatus.COMPLETED
        assert analysis.total_comments_analyzed == 2
        assert analysis.total_comments_failed == 1
        assert count_comments(db_session) == 2

    @pytest.mark.asyncio
    async def test_failed_comment_is_retried_on_next_run(self, db_session) -> None:
        """A comment that failed classification was never stored."""
        classifier = MagicMock(spec=ClassifierProvider)
        classifier.classify = AsyncMock(
            side_effect=[
                UpstreamUnavailableError("timeout"),
                ClassificationResult(label="JUDI", confidence_score=0.9, model_version="t"),
            ]
        )
        service = AnalysisService(db_session, fake_comments([make_thread("Uga")]), classifier)

        with pytest.raises(UpstreamUnavailableError):
            await service.run_analysis(USER_ID, VIDEO_URL)
        analysis = await service.run_analysis(USER_ID, VIDEO_URL)

        assert analysis.total_comments_analyzed == 1
        assert classifier.classify.await_count == 2

    @pytest.mark.asyncio
    async def test_all_classifications_fail(self, db_session) -> None:
        classifier = MagicMock(spec=ClassifierProvider)
        classifier.classify = AsyncMock(side_effect=UpstreamUnavailableError("down"))
        threads = [make_thread("Uga"), make_thread("Ugb")]
        service = AnalysisService(db_session, fake_comments(threads), classifier)

        with pytest.raises(UpstreamUnavailableError):
            await service.run_analysis(USER_ID, VIDEO_URL)

        analysis = db_session.execute(select(VideoAnalysisModel)).scalar_one()
        assert analysis.status == AnalysisStatus.FAILED
        assert "all 2 classification calls failed" in analysis.error_message
        assert analysis.total_comments_fetched == 2
        assert analysis.total_comments_failed == 2
        assert analysis.total_comments_analyzed == 0
        assert count_comments(db_session) == 0

    @pytest.mark.asyncio
    async def test_persist_failure_does_not_abort_batch(self, db_session) -> None:
        threads = [make_thread("Uga"), make_thread("Ugb"), make_thread("Ugc")]
        service = AnalysisService(db_session, fake_comments(threads), counting_classifier())
        original = service.store.insert_if_absent

        def insert(comment: AnalyzedCommentModel) -> bool:
            if comment.youtube_comment_id == "Ugb":
                raise InternalError("write failed")
            return original(comment)

        with patch.object(service.store, "insert_if_absent", side_effect=insert):
            analysis = await service.run_analysis(USER_ID, VIDEO_URL)

        assert analysis.status == AnalysisStatus.COMPLETED
        assert analysis.total_comments_analyzed == 2
        assert analysis.total_comments_failed == 1
        assert analysis.total_comments_analyzed <= analysis.total_comments_fetched

    @pytest.mark.asyncio
    async def test_concurrent_duplicate_counts_as_skipped(self, db_session) -> None:
        """A comment stored by another job between dedup and insert."""
        threads = [make_thread("Uga"), make_thread("Ugb")]
        service = AnalysisService(db_session, fake_comments(threads), counting_classifier())

        with patch.object(service.store, "existing_ids", return_value=set()):
            await service.run_analysis(USER_ID, VIDEO_URL)
            analysis = await service.run_analysis(USER_ID, VIDEO_URL)

        assert analysis.status == AnalysisStatus.COMPLETED
        assert analysis.total_comments_analyzed == 0
        assert analysis.total_comments_skipped == 2
        assert count_comments(db_session) == 2


class TestQueries:
    """Tests for reading analyses back."""

    @pytest.mark.asyncio
    async def test_results_sorted_oldest_first(self, db_session) -> None:
        base = datetime(2025, 3, 1, tzinfo=UTC)
        threads = [
            make_thread("Ugnewest", published_at=base + timedelta(days=2)),
            make_thread("Ugoldest", published_at=base),
            make_thread("Ugmiddle", published_at=base + timedelta(days=1)),
        ]
        service = AnalysisService(db_session, fake_comments(threads), counting_classifier())
        analysis = await service.run_analysis(USER_ID, VIDEO_URL)

        results = service.get_analysis_results(USER_ID, str(analysis.id))

        assert [c.youtube_comment_id for c in results] == ["Ugoldest", "Ugmiddle", "Ugnewest"]

    @pytest.mark.asyncio
    async def test_other_users_cannot_read(self, db_session, comments_adapter, classifier) -> None:
        service = AnalysisService(db_session, comments_adapter, classifier)
        analysis = await service.run_analysis(USER_ID, VIDEO_URL)

        with pytest.raises(NotFoundError):
            service.get_analysis(OTHER_USER_ID, analysis.id)
        with pytest.raises(NotFoundError):
            service.get_analysis_results(OTHER_USER_ID, analysis.id)

    def test_malformed_analysis_id(self, db_session, comments_adapter, classifier) -> None:
        service = AnalysisService(db_session, comments_adapter, classifier)

        with pytest.raises(InvalidInputError):
            service.get_analysis(USER_ID, "not-a-uuid")


def test_select_valid_comments() -> None:
    threads = [
        make_thread("Ugok"),
        make_thread("Xxbad"),
        make_thread(None),
        make_thread("Ugnoauthor", author_channel_id=""),
        make_thread("Ugok"),
    ]

    valid = select_valid_comments(threads)

    assert [c.comment_id for c in valid] == ["Ugok", "Ugok"]
