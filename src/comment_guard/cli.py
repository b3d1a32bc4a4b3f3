"""Command-line interface using Typer."""

from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from comment_guard import __version__
from comment_guard.domain.errors import CommentGuardError
from comment_guard.logging import setup_logging

setup_logging()

app = typer.Typer(
    name="comment-guard",
    help="Comment Guard - find and remediate policy-violating video comments",
    add_completion=False,
)

console = Console()

UserOption = typer.Option(
    ...,
    "--user",
    "-u",
    envvar="COMMENT_GUARD_USER_ID",
    help="Id of the user owning the analysis.",
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"Comment Guard v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Comment Guard - classify video comments and remove the offending ones."""
    pass


def _fail(error: CommentGuardError) -> None:
    console.print(f"[bold red]✗ {error.message}[/bold red]")
    raise typer.Exit(code=1)


def _print_analysis(analysis: Any) -> None:
    table = Table(title=f"Analysis {analysis.id}", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Video", analysis.youtube_video_id)
    table.add_row("Title", analysis.video_title or "-")
    table.add_row("Status", analysis.status)
    table.add_row("Fetched", str(analysis.total_comments_fetched))
    table.add_row("Analyzed", str(analysis.total_comments_analyzed))
    table.add_row("Already stored", str(analysis.total_comments_skipped))
    table.add_row("Invalid", str(analysis.total_comments_invalid))
    table.add_row("Failed", str(analysis.total_comments_failed))
    if analysis.last_batch_attempt_at:
        table.add_row("Last batch removed", str(analysis.last_batch_success_count))
        table.add_row("Last batch failed", str(analysis.last_batch_failure_count))
    if analysis.error_message:
        table.add_row("Error", f"[red]{analysis.error_message}[/red]")
    console.print(table)


@app.command("init-db")
def init_db_command() -> None:
    """Create missing database tables."""
    from comment_guard.db.session import init_db

    init_db(create_tables=True)
    console.print("[bold green]✓ Database ready[/bold green]")


@app.command()
def analyze(
    video_url: str = typer.Argument(..., help="Video URL or bare video id"),
    user_id: str = UserOption,
    queue: bool = typer.Option(False, "--queue", "-q", help="Enqueue to the worker instead"),
) -> None:
    """Fetch, classify and store the comments of a video."""
    if queue:
        from comment_guard.jobs.tasks import run_analysis_task

        result = run_analysis_task.delay(user_id=user_id, video_url=video_url)
        console.print(f"[green]Task enqueued: {result.id}[/green]")
        return

    from comment_guard.adapters import get_classifier_provider, get_comments_adapter
    from comment_guard.db.session import get_session_context
    from comment_guard.services import AnalysisService
    from comment_guard.utils import run_async

    console.print(f"[bold blue]Analyzing {video_url}...[/bold blue]")
    comments_adapter = get_comments_adapter()
    classifier = get_classifier_provider()
    failure: CommentGuardError | None = None
    try:
        with get_session_context() as session:
            service = AnalysisService(session, comments_adapter, classifier)
            analysis = service.start_analysis(user_id, video_url)
            try:
                run_async(service.execute(analysis))
            except CommentGuardError as e:
                failure = e
            _print_analysis(analysis)
    except CommentGuardError as e:
        _fail(e)
    finally:
        run_async(comments_adapter.close())
        run_async(classifier.close())

    if failure is not None:
        _fail(failure)


@app.command("list")
def list_analyses(
    user_id: str = UserOption,
    limit: int = typer.Option(20, "--limit", "-n", help="Maximum number of analyses"),
) -> None:
    """List recent analyses."""
    from comment_guard.db.session import get_session_context
    from comment_guard.services import analysis_jobs

    with get_session_context() as session:
        analyses = analysis_jobs.list_analyses(session, user_id, limit=limit)
        if not analyses:
            console.print("[dim]No analyses yet.[/dim]")
            return

        table = Table(title="Analyses")
        table.add_column("ID", style="cyan")
        table.add_column("Video")
        table.add_column("Status")
        table.add_column("Analyzed", justify="right")
        table.add_column("Created")
        for a in analyses:
            table.add_row(
                str(a.id),
                a.youtube_video_id,
                a.status,
                str(a.total_comments_analyzed),
                a.created_at.strftime("%Y-%m-%d %H:%M") if a.created_at else "-",
            )
        console.print(table)


@app.command()
def results(
    analysis_id: str = typer.Argument(..., help="Analysis id"),
    user_id: str = UserOption,
    flagged_only: bool = typer.Option(False, "--flagged", "-f", help="Only flagged comments"),
) -> None:
    """Show the analyzed comments of an analysis, oldest first."""
    from comment_guard.config import settings
    from comment_guard.db.session import get_session_context
    from comment_guard.domain.identifiers import parse_record_id
    from comment_guard.services import CommentStore, analysis_jobs

    try:
        with get_session_context() as session:
            analysis = analysis_jobs.get_owned_analysis(
                session, parse_record_id(analysis_id, "analysis"), user_id
            )
            _print_analysis(analysis)

            comments = CommentStore(session).list_for_analysis(analysis.id)
            if flagged_only:
                comments = [
                    c for c in comments if c.classification == settings.flagged_classification
                ]

            table = Table(title="Comments")
            table.add_column("ID", style="dim")
            table.add_column("Comment ID", style="cyan")
            table.add_column("Label", no_wrap=True, min_width=8)
            table.add_column("Score", justify="right")
            table.add_column("State")
            table.add_column("Text")
            for c in comments:
                if c.is_deleted_on_platform:
                    state = "[green]deleted[/green]"
                elif c.is_moderated:
                    state = "[yellow]hidden[/yellow]"
                elif c.deletion_error:
                    state = "[red]failed[/red]"
                else:
                    state = "-"
                label_style = "red" if c.classification == settings.flagged_classification else ""
                table.add_row(
                    str(c.id),
                    c.youtube_comment_id,
                    f"[{label_style}]{c.classification}[/{label_style}]"
                    if label_style
                    else c.classification,
                    f"{c.ai_confidence_score:.2f}" if c.ai_confidence_score is not None else "-",
                    state,
                    (c.comment_text_original or "")[:60],
                )
            console.print(table)
    except CommentGuardError as e:
        _fail(e)


@app.command()
def remediate(
    analyzed_comment_id: str = typer.Argument(..., help="Analyzed comment id"),
    youtube_comment_id: str = typer.Argument(..., help="Platform comment id"),
    user_id: str = UserOption,
) -> None:
    """Delete or hide a single analyzed comment."""
    from comment_guard.adapters import get_moderation_adapter
    from comment_guard.db.session import get_session_context
    from comment_guard.services import RemediationService
    from comment_guard.utils import run_async

    moderation = get_moderation_adapter()
    try:
        with get_session_context() as session:
            service = RemediationService(session, moderation)
            comment = run_async(
                service.remediate(user_id, analyzed_comment_id, youtube_comment_id)
            )
            action = "deleted" if comment.is_deleted_on_platform else "hidden"
            console.print(f"[bold green]✓ Comment {youtube_comment_id} {action}[/bold green]")
    except CommentGuardError as e:
        _fail(e)
    finally:
        run_async(moderation.close())


@app.command("remediate-all")
def remediate_all(
    analysis_id: str = typer.Argument(..., help="Analysis id"),
    user_id: str = UserOption,
    queue: bool = typer.Option(False, "--queue", "-q", help="Enqueue to the worker instead"),
) -> None:
    """Delete or hide every flagged comment of an analysis."""
    if queue:
        from comment_guard.jobs.tasks import batch_remediate_task

        result = batch_remediate_task.delay(user_id=user_id, analysis_id=analysis_id)
        console.print(f"[green]Task enqueued: {result.id}[/green]")
        return

    from comment_guard.adapters import get_moderation_adapter
    from comment_guard.db.session import get_session_context
    from comment_guard.services import BatchRemediationService
    from comment_guard.utils import run_async

    moderation = get_moderation_adapter()
    try:
        with get_session_context() as session:
            service = BatchRemediationService(session, moderation)
            summary = run_async(service.batch_remediate(user_id, analysis_id))
    except CommentGuardError as e:
        _fail(e)
    finally:
        run_async(moderation.close())

    if summary.total_targeted == 0:
        console.print("[dim]No flagged comments left to remediate.[/dim]")
        return

    console.print(
        f"Targeted {summary.total_targeted}: "
        f"[green]{summary.successfully_deleted} remediated[/green], "
        f"[red]{summary.failed_to_delete} failed[/red]"
    )
    if summary.failures:
        table = Table(title="Failures")
        table.add_column("Comment ID", style="cyan")
        table.add_column("Error")
        for failure in summary.failures:
            table.add_row(failure.upstream_comment_id, failure.error)
        console.print(table)
        raise typer.Exit(code=1)


@app.command()
def worker() -> None:
    """Start a Celery worker for the analysis and remediation queues."""
    from comment_guard.worker import celery_app

    console.print("[bold blue]Starting Celery worker...[/bold blue]")
    celery_app.worker_main(["worker", "--loglevel=INFO", "-Q", "celery,analysis,remediation"])


if __name__ == "__main__":
    app()
