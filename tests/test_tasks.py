"""Tests for Celery task wrappers, run eagerly."""

from comment_guard.jobs.tasks import batch_remediate_task, run_analysis_task
from conftest import USER_ID

VIDEO_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"


def test_run_analysis_task(db_session) -> None:
    result = run_analysis_task.apply(kwargs={"user_id": USER_ID, "video_url": VIDEO_URL}).get()

    assert result["success"] is True
    assert result["status"] == "COMPLETED"
    assert result["total_comments_analyzed"] == 8


def test_run_analysis_task_rejects_bad_url(db_session) -> None:
    result = run_analysis_task.apply(
        kwargs={"user_id": USER_ID, "video_url": "not a video"}
    ).get()

    assert result["success"] is False
    assert result["error"]["error"] == "invalid_input"


def test_batch_remediate_task(db_session) -> None:
    analysis = run_analysis_task.apply(
        kwargs={"user_id": USER_ID, "video_url": VIDEO_URL}
    ).get()

    result = batch_remediate_task.apply(
        kwargs={"user_id": USER_ID, "analysis_id": analysis["analysis_id"]}
    ).get()

    assert result["success"] is True
    assert result["total_targeted"] == 3
    assert result["successfully_deleted"] == 3
    assert result["failures"] == []
