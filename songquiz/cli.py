"""Command-line front-end for the song quiz.

Nothing is played here: each question prints the media URL, start offset and
clip length so the clip can be played in any external player.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from .catalog import CatalogError, load_catalog
from .clock import RealClock
from .log import setup_logger
from .persistence import (
    DEFAULT_RANKING_LIMIT,
    list_rankings,
    mark_pending_registered,
    record_submission,
    save_pending_result,
)
from .questions import NoTracksAvailable
from .results import InvalidSubmission, submission_from_session
from .rng import SeededRng
from .scoring import PERMITTED_CLIP_DURATIONS, RankingScheme
from .session import (
    ChallengeConfig,
    ChallengeSession,
    ClipRequest,
    build_challenge_session,
    build_free_session,
)

app = typer.Typer(help="Guess the song from a short clip of its middle section")
console = Console()

DEFAULT_DB_PATH = Path("songquiz.db")

HELP_LINE = "Type a title, or /clip SECONDS, /reveal, /quit"


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Also log to this file"),
) -> None:
    setup_logger(level="DEBUG" if verbose else "WARNING", log_file=log_file)


def _load(catalog_path: Path):
    try:
        return load_catalog(catalog_path)
    except (OSError, CatalogError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


def _print_clip(number: int, count: int, clip: ClipRequest) -> None:
    console.print(
        f"\n[bold cyan]Q.{number} / {count}[/bold cyan]  "
        f"{clip.media_url}  from [bold]{clip.start_s:g}s[/bold] for {clip.duration_s:g}s"
    )


def _parse_clip(value: str) -> float | None:
    try:
        seconds = float(value)
    except ValueError:
        return None
    return seconds if seconds in PERMITTED_CLIP_DURATIONS else None


@app.command()
def free(
    catalog_path: Path = typer.Argument(..., help="Path to songs.json"),
    album: Optional[list[str]] = typer.Option(None, "--album", "-a", help="Album id to draw from (repeatable)"),
    count: int = typer.Option(10, "--count", "-n", min=1, help="Number of questions"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed"),
) -> None:
    """Untimed practice: guess as often as you like, reveal when stuck."""
    catalog = _load(catalog_path)
    try:
        quiz = build_free_session(catalog, rng=SeededRng(seed), album_ids=album or None, count=count)
    except NoTracksAvailable as e:
        console.print(f"[red]Could not prepare the quiz: {e}[/red]")
        raise typer.Exit(1)

    total = len(quiz.questions)
    while not quiz.is_finished:
        q = quiz.current_question
        assert q is not None
        console.print(
            f"\n[bold cyan]Q.{quiz.current_index + 1} / {total}[/bold cyan]  "
            f"{q.track.media_url}  from [bold]{q.start_time_s:g}s[/bold]"
        )
        while True:
            raw = typer.prompt("Title (/reveal, /quit)", default="", show_default=False)
            if raw.strip() == "/quit":
                return
            if raw.strip() == "/reveal":
                console.print(f"[yellow]{quiz.reveal_answer()}[/yellow] ({q.album.name} / {q.artist.name})")
                break
            if quiz.check_answer(raw):
                console.print(f"[green]Correct! {q.track.title}[/green]")
                break
            if raw.strip():
                console.print("[red]Not quite.[/red]")
        quiz.next_question()

    console.print("\n[bold]That was the last question.[/bold]")


def _play_challenge(session: ChallengeSession) -> None:
    console.print(HELP_LINE)
    count = len(session.questions)
    while not session.is_finished:
        clip = session.play_clip()
        _print_clip(session.current_index + 1, count, clip)
        while True:
            raw = typer.prompt("Title", default="", show_default=False).strip()
            if raw == "/quit":
                session.abandon()
                return
            if raw == "/reveal":
                score = session.reveal_answer()
                title = session.snapshot().correct_title
                console.print(f"[yellow]{title}[/yellow]  +{score.total_score}")
                break
            if raw.startswith("/clip"):
                seconds = _parse_clip(raw[len("/clip"):].strip())
                if seconds is None:
                    allowed = ", ".join(f"{d:g}" for d in PERMITTED_CLIP_DURATIONS)
                    console.print(f"[red]Clip length must be one of {allowed}[/red]")
                    continue
                _print_clip(session.current_index + 1, count, session.play_clip(seconds))
                continue
            if session.submit_answer(raw):
                score = session.scores[-1]
                console.print(
                    f"[green]Correct![/green] +{score.total_score} "
                    f"(time {score.time_bonus:+d}, clip {score.clip_duration_bonus:+d}) "
                    f"in {score.elapsed_s:.1f}s"
                )
                break
            if raw:
                console.print("[red]Not quite.[/red]")
        session.next_question()


def _print_summary(session: ChallengeSession) -> None:
    summary = session.summary()
    table = Table(title="Challenge Result")
    table.add_column("#", justify="right")
    table.add_column("Track", style="green")
    table.add_column("Time", justify="right")
    table.add_column("Clip", justify="right")
    table.add_column("Points", justify="right")
    for s in summary.scores:
        q = session.questions[s.question_index]
        title = f"{q.track.title} [yellow](revealed)[/yellow]" if s.was_revealed else q.track.title
        table.add_row(
            str(s.question_index + 1),
            title,
            f"{s.elapsed_s:.1f}s",
            f"{s.clip_duration_s:g}s",
            str(s.total_score),
        )
    console.print(table)
    console.print(f"[bold]Score: {summary.total_score}   Rank: {summary.rank.value}[/bold]")
    console.print(summary.message)


@app.command()
def challenge(
    catalog_path: Path = typer.Argument(..., help="Path to songs.json"),
    album: Optional[list[str]] = typer.Option(None, "--album", "-a", help="Album id to draw from (repeatable)"),
    clip: float = typer.Option(1.0, "--clip", help="Default clip length in seconds"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed"),
    db: Path = typer.Option(DEFAULT_DB_PATH, "--db", help="Leaderboard database"),
    name: Optional[str] = typer.Option(None, "--name", help="Register the result under this name"),
    percentage_ranks: bool = typer.Option(
        False, "--percentage-ranks", help="Rank by share of the maximum score instead of fixed thresholds"
    ),
) -> None:
    """Time attack: 10 questions, scored on speed and clip length."""
    if _parse_clip(str(clip)) is None:
        console.print("[red]Error: --clip must be one of 1, 1.5, 2, 3, 5[/red]")
        raise typer.Exit(1)

    catalog = _load(catalog_path)
    config = ChallengeConfig(
        default_clip_duration_s=clip,
        ranking_scheme=RankingScheme.PERCENTAGE if percentage_ranks else RankingScheme.FIXED,
    )
    try:
        session = build_challenge_session(
            catalog,
            clock=RealClock(),
            rng=SeededRng(seed),
            album_ids=album or None,
            config=config,
        )
    except NoTracksAvailable as e:
        console.print(f"[red]Could not prepare the quiz: {e}[/red]")
        raise typer.Exit(1)

    _play_challenge(session)
    if not session.scores:
        console.print("[yellow]No questions answered.[/yellow]")
        return

    _print_summary(session)
    save_pending_result(db_path=db, total_score=session.total_score, scores=session.scores)

    if name is None:
        if not typer.confirm("Register your score on the leaderboard?", default=False):
            return
        name = typer.prompt("Name")

    try:
        submission = submission_from_session(session, name)
    except InvalidSubmission as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    record_submission(db_path=db, submission=submission)
    mark_pending_registered(db_path=db)
    console.print(f"[green]Registered {submission.username}: {submission.score} ({submission.rank.value})[/green]")


@app.command()
def ranking(
    db: Path = typer.Option(DEFAULT_DB_PATH, "--db", help="Leaderboard database"),
    limit: int = typer.Option(DEFAULT_RANKING_LIMIT, "--limit", "-n", min=1, max=1000, help="Rows to show"),
) -> None:
    """Show the leaderboard."""
    entries = list_rankings(db_path=db, limit=limit)
    if not entries:
        console.print("[yellow]No scores registered yet[/yellow]")
        return

    table = Table(title="Ranking")
    table.add_column("#", justify="right")
    table.add_column("Name", style="green")
    table.add_column("Score", justify="right")
    table.add_column("Rank", justify="center")
    table.add_column("Registered")
    for pos, entry in enumerate(entries, start=1):
        table.add_row(str(pos), entry.username, str(entry.score), entry.rank.value, entry.created_at_utc)
    console.print(table)


if __name__ == "__main__":
    app()
