"""
PitchTrainer CLI Application.

Runs the HTTP server and offers the evaluation pipeline from the command
line: transcribe a recording, evaluate a transcript, normalize a raw model
answer, inspect statistics and check upstream connectivity.
"""

import json
import mimetypes
from pathlib import Path
from typing import Annotated, Optional

import typer
import uvicorn
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from pitchtrainer.api import create_app
from pitchtrainer.config import MissingConfigError, get_settings
from pitchtrainer.evaluation import InvalidInputError, PitchEvaluator, normalize
from pitchtrainer.logging_config import configure_logging
from pitchtrainer.models import SUPPORTED_DURATIONS, NormalizedEvaluation
from pitchtrainer.rubric import PITCH_RUBRIC, RubricValidator
from pitchtrainer.storage import StatisticsStore, StorageError
from pitchtrainer.transcription import TranscriptionClient
from pitchtrainer.upstream import UpstreamError

# Create Typer app
app = typer.Typer(
    name="pitchtrainer",
    help="Transcribe and score short networking pitches",
    add_completion=False,
)

console = Console()


@app.callback()
def main(
    log_level: Annotated[
        Optional[str],
        typer.Option("--log-level", help="Override the configured log level"),
    ] = None,
) -> None:
    settings = get_settings()
    configure_logging(log_level or settings.log_level)


@app.command()
def serve(
    host: Annotated[Optional[str], typer.Option("--host", help="Bind address")] = None,
    port: Annotated[Optional[int], typer.Option("--port", "-p", help="Port")] = None,
) -> None:
    """Run the HTTP API server."""
    settings = get_settings()
    try:
        api = create_app(settings)
    except MissingConfigError as e:
        console.print(f"[red]Configuration Error:[/red] {e}")
        raise typer.Exit(1)

    console.print(f"[green]PitchTrainer server running on port {port or settings.port}[/green]")
    uvicorn.run(
        api,
        host=host or settings.host,
        port=port or settings.port,
        log_level=settings.log_level.lower(),
    )


@app.command()
def evaluate(
    transcript_file: Annotated[Path, typer.Argument(help="Text file with the pitch transcript")],
    duration: Annotated[
        int,
        typer.Option("--duration", "-d", help="Pitch length in seconds (45 or 60)"),
    ] = 60,
    as_json: Annotated[bool, typer.Option("--json", help="Print the raw result as JSON")] = False,
) -> None:
    """
    Evaluate a pitch transcript against the rubric.

    Nothing is stored; use the HTTP API to record statistics.
    """
    if duration not in SUPPORTED_DURATIONS:
        console.print(f"[red]Error:[/red] Duration must be one of {SUPPORTED_DURATIONS}")
        raise typer.Exit(1)

    if not transcript_file.exists():
        console.print(f"[red]Error:[/red] Transcript file not found: {transcript_file}")
        raise typer.Exit(1)

    transcript = transcript_file.read_text(encoding="utf-8")

    try:
        evaluator = PitchEvaluator(get_settings())
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            progress.add_task(f"Evaluating {duration}s pitch...", total=None)
            outcome = evaluator.evaluate(transcript, duration)
    except MissingConfigError as e:
        console.print(f"[red]Configuration Error:[/red] {e}")
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except (UpstreamError, InvalidInputError) as e:
        console.print(f"[red]Evaluation Error:[/red] {e}")
        raise typer.Exit(1)

    if as_json:
        console.print_json(outcome.model_dump_json())
        return

    _display_evaluation(outcome)
    console.print(f"[dim]{outcome.model_used}, {outcome.processing_time_ms}ms[/dim]")


@app.command()
def transcribe(
    audio_file: Annotated[Path, typer.Argument(help="Audio recording (webm, wav, mp3, m4a)")],
) -> None:
    """Transcribe an audio recording."""
    if not audio_file.exists():
        console.print(f"[red]Error:[/red] Audio file not found: {audio_file}")
        raise typer.Exit(1)

    mime_type = mimetypes.guess_type(audio_file.name)[0] or "audio/webm"

    try:
        client = TranscriptionClient(get_settings())
        result = client.transcribe(audio_file.read_bytes(), mime_type)
    except MissingConfigError as e:
        console.print(f"[red]Configuration Error:[/red] {e}")
        raise typer.Exit(1)
    except UpstreamError as e:
        console.print(f"[red]Transcription Error:[/red] {e}")
        raise typer.Exit(1)

    console.print(Panel(result.transcript or "[dim](empty)[/dim]", title="Transcript"))
    console.print(
        f"Language: {result.language}  Confidence: {result.confidence:.2f}  "
        f"Time: {result.processing_time_ms}ms"
    )


@app.command("normalize")
def normalize_command(
    raw_file: Annotated[Path, typer.Argument(help="JSON file with a raw model evaluation")],
) -> None:
    """
    Normalize a raw evaluation JSON file offline.

    Prints the complete, weighted result as JSON.
    """
    if not raw_file.exists():
        console.print(f"[red]Error:[/red] File not found: {raw_file}")
        raise typer.Exit(1)

    try:
        raw = json.loads(raw_file.read_text(encoding="utf-8"))
        evaluation = normalize(raw)
    except json.JSONDecodeError as e:
        console.print(f"[red]Error:[/red] Invalid JSON: {e}")
        raise typer.Exit(1)
    except InvalidInputError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    console.print_json(evaluation.model_dump_json())


@app.command()
def stats(
    recent: Annotated[int, typer.Option("--recent", "-n", help="Recent evaluations to show")] = 10,
) -> None:
    """Show aggregate statistics from the database."""
    store = StatisticsStore(get_settings().database_path)
    try:
        store.initialize()
        statistics = store.get_statistics(recent_limit=recent)
    except StorageError as e:
        console.print(f"[red]Database Error:[/red] {e}")
        raise typer.Exit(1)
    finally:
        store.close()

    console.print(Panel(f"[bold]{statistics.total_evaluations}[/bold] evaluations", title="Statistics"))

    if statistics.averages_by_duration:
        table = Table(title="Averages by Duration")
        table.add_column("Duration", justify="right")
        table.add_column("Count", justify="right")
        table.add_column("Avg Score", justify="right")
        table.add_column("Avg Words", justify="right")
        for avg in statistics.averages_by_duration:
            table.add_row(
                f"{avg.duration}s",
                str(avg.count),
                f"{avg.avg_overall:.1f}" if avg.avg_overall is not None else "-",
                f"{avg.avg_words:.0f}" if avg.avg_words is not None else "-",
            )
        console.print(table)

    if statistics.proposal_stats:
        table = Table(title="Proposal Types")
        table.add_column("Type", style="cyan")
        table.add_column("Count", justify="right")
        for row in statistics.proposal_stats:
            table.add_row(row.type, str(row.total_count))
        console.print(table)


@app.command()
def rubric() -> None:
    """Show and validate the pitch rubric."""
    is_valid, issues = RubricValidator().validate(PITCH_RUBRIC)

    console.print(Panel(f"[bold]{PITCH_RUBRIC.title}[/bold]", title="Rubric"))

    table = Table(title="Categories")
    table.add_column("Category", style="cyan")
    table.add_column("Weight", justify="right")
    table.add_column("Sub-criteria")

    for category in PITCH_RUBRIC.categories:
        table.add_row(
            category.title,
            f"{int(category.weight * 100)}%",
            "\n".join(category.criterion_keys),
        )

    console.print(table)

    if is_valid:
        console.print("\n[green]✓ Rubric is valid[/green]")
    else:
        console.print("\n[yellow]⚠ Validation issues found:[/yellow]")
        for issue in issues:
            console.print(f"  • {issue}")
        raise typer.Exit(1)


@app.command()
def health() -> None:
    """
    Check that the upstream APIs are reachable.

    Verifies configuration and connectivity of both Mistral endpoints.
    """
    settings = get_settings()
    console.print("[bold]PitchTrainer Health Check[/bold]\n")

    console.print("[dim]Checking configuration...[/dim]")
    console.print(f"  API Base URL: {settings.mistral_base_url}")
    console.print(f"  Evaluation Model: {settings.mistral_evaluation_model}")
    console.print(f"  Transcription Model: {settings.mistral_transcription_model}")
    console.print(f"  Database: {settings.database_path}")

    try:
        evaluator = PitchEvaluator(settings)
        transcriber = TranscriptionClient(settings)
    except MissingConfigError as e:
        console.print(f"[red]Configuration Error:[/red] {e}")
        raise typer.Exit(1)

    console.print("\n[dim]Checking API connectivity...[/dim]")
    chat = evaluator.test_connection()
    audio = transcriber.test_connection()

    healthy = True
    for name, report in (("Chat API", chat), ("Transcription API", audio)):
        if report.get("connected"):
            console.print(f"[green]✓ {name} is reachable[/green]")
        else:
            console.print(f"[red]✗ {name} is not reachable:[/red] {report.get('error')}")
            healthy = False

    if not healthy:
        raise typer.Exit(1)

    console.print("\n[green]All systems operational[/green]")


def _display_evaluation(evaluation: NormalizedEvaluation) -> None:
    """Display an evaluation as score panel and KPI table."""
    score = evaluation.overall_score
    score_color = "green" if score >= 70 else "yellow" if score >= 50 else "red"
    console.print(
        Panel(f"[{score_color}][bold]{score:.1f} / 100[/bold][/{score_color}]", title="Overall Score")
    )

    table = Table(title="KPI Breakdown")
    table.add_column("Category", style="cyan")
    table.add_column("Weight", justify="right")
    table.add_column("Score", justify="right")

    for category in PITCH_RUBRIC.categories:
        table.add_row(
            category.title,
            f"{int(category.weight * 100)}%",
            str(evaluation.category_scores.get(category.key, 0)),
        )

    console.print(table)

    for proposal in evaluation.proposals:
        console.print(
            Panel(
                proposal.description,
                title=f"[{proposal.priority.value}] {proposal.title}",
                subtitle=proposal.type,
            )
        )

    console.print(Panel(evaluation.summary, title="Summary"))


if __name__ == "__main__":
    app()
