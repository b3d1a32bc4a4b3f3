"""Pytest configuration and fixtures."""

import os
from collections.abc import Callable, Generator
from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient

# Set test environment before importing app modules
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["REDIS_URL"] = "redis://localhost:6379/1"
os.environ["CELERY_BROKER_URL"] = "memory://"
os.environ["CELERY_RESULT_BACKEND"] = "cache+memory://"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["COMMENTS_PROVIDER"] = "stub"
os.environ["CLASSIFIER_PROVIDER"] = "stub"
os.environ["MODERATION_PROVIDER"] = "stub"

USER_ID = "user-1"
OTHER_USER_ID = "user-2"
OWN_CHANNEL_ID = "UCstubowner"


@pytest.fixture
def db_session() -> Generator:
    """Fresh schema and a session bound to it."""
    from comment_guard.db.models import Base
    from comment_guard.db.session import SessionLocal, engine

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def test_client(db_session) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI app."""
    from comment_guard.main import app

    with TestClient(app) as client:
        yield client


@pytest.fixture
def comments_adapter():
    """Get a stub comments adapter."""
    from comment_guard.adapters.comments.stub import StubCommentsAdapter

    return StubCommentsAdapter()


@pytest.fixture
def classifier():
    """Get a stub classifier."""
    from comment_guard.adapters.classifier.stub import StubClassifierProvider

    return StubClassifierProvider()


@pytest.fixture
def moderation_adapter():
    """Get a stub remediation adapter."""
    from comment_guard.adapters.moderation.stub import StubModerationAdapter

    return StubModerationAdapter(channel_id=OWN_CHANNEL_ID)


def make_thread(
    comment_id: str | None,
    author_channel_id: str | None = "UCviewer",
    text: str = "nice video",
    published_at: datetime | None = None,
):
    """Build a comment thread as a fetch gateway would return it."""
    from comment_guard.domain.models import CommentThread, FetchedComment

    return CommentThread(
        thread_id=comment_id,
        top_level_comment=FetchedComment(
            comment_id=comment_id,
            author_channel_id=author_channel_id,
            text_original=text,
            text_display=text,
            published_at=published_at or datetime(2025, 1, 1, tzinfo=UTC),
        ),
    )


@pytest.fixture
def seed_analysis(db_session) -> Callable:
    """Factory creating an analysis with stored comments.

    Flagged comments come first and are named ``Ugflagged<i>``; clean ones
    follow as ``Ugclean<i>``.
    """
    from comment_guard.db.models import AnalyzedCommentModel
    from comment_guard.domain.enums import AnalysisStatus, CommentClassification
    from comment_guard.services import analysis_jobs

    counter = {"videos": 0}

    def _seed(
        flagged: int = 3,
        clean: int = 2,
        user_id: str = USER_ID,
        completed: bool = True,
    ):
        counter["videos"] += 1
        analysis = analysis_jobs.create_analysis(
            db_session, user_id, f"vid{counter['videos']:08d}"
        )
        base_time = datetime(2025, 1, 1, tzinfo=UTC)
        labels = [(f"Ugflagged{i}", CommentClassification.JUDI) for i in range(flagged)] + [
            (f"Ugclean{i}", CommentClassification.NON_JUDI) for i in range(clean)
        ]
        for index, (comment_id, label) in enumerate(labels):
            db_session.add(
                AnalyzedCommentModel(
                    analysis_id=analysis.id,
                    user_id=user_id,
                    youtube_video_id=analysis.youtube_video_id,
                    youtube_comment_id=f"{comment_id}v{counter['videos']}",
                    author_channel_id=f"UCviewer{index}",
                    comment_text_original=f"comment {index}",
                    comment_text_display=f"comment {index}",
                    comment_published_at=base_time + timedelta(minutes=index),
                    classification=label.value,
                    ai_confidence_score=0.9,
                    ai_model_version="test",
                )
            )
        if completed:
            analysis_jobs.transition(analysis, AnalysisStatus.COMPLETED)
        db_session.commit()
        return analysis

    return _seed
