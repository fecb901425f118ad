"""Community prediction sub-commands: browse the consensus, submit a pick."""
from __future__ import annotations

import datetime as dt
from typing import Optional

import typer
from rich.table import Table

from oddsflow.cli._shared import _backend, _setup_logging, console, run

app = typer.Typer(help="Community match predictions.")


def _parse_day(value: Optional[str]) -> dt.date:
    if not value:
        return dt.date.today()
    try:
        return dt.date.fromisoformat(value)
    except ValueError:
        raise typer.BadParameter(f"expected YYYY-MM-DD, got {value!r}") from None


def _bar(pct: int, width: int = 20) -> str:
    return "█" * round(width * pct / 100)


@app.command()
def matches(
    date: Optional[str] = typer.Option(None, "--date", "-d", help="Calendar date, YYYY-MM-DD (default today)"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """List the matches of a day with the community consensus."""
    from oddsflow.controller import PredictionPageController
    from oddsflow.predictions import PredictionStore
    from oddsflow.utils import date_label

    _setup_logging(verbose)
    day = _parse_day(date)
    page = PredictionPageController(PredictionStore(_backend()))
    run(page.select_date(day))

    console.print(f"\n[cyan]Matches: {date_label(day, dt.date.today())} ({day.isoformat()})[/cyan]")
    if not page.matches:
        console.print("[yellow]No matches on this day[/yellow]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("ID", justify="right")
    table.add_column("Kickoff")
    table.add_column("Match")
    table.add_column("League")
    table.add_column("1 / X / 2")
    table.add_column("Votes", justify="right")
    for m in page.matches:
        summary = page.consensus.get(m.match_id)
        if summary is None:
            split, votes = "[dim]no predictions yet[/dim]", "0"
        else:
            split = f"{summary.home_percent}% / {summary.draw_percent}% / {summary.away_percent}%"
            votes = str(summary.total_votes)
        table.add_row(str(m.match_id), f"{m.kickoff:%H:%M}", f"{m.home_team} vs {m.away_team}",
                      m.league or "", split, votes)
    console.print(table)


@app.command()
def predict(
    user_id: str,
    match_id: int,
    home: Optional[int] = typer.Option(None, "--home", help="Predicted home goals"),
    away: Optional[int] = typer.Option(None, "--away", help="Predicted away goals"),
    winner: Optional[str] = typer.Option(None, "--winner", "-w", help="1 (home), X (draw) or 2 (away)"),
    name: Optional[str] = typer.Option(None, "--name", help="Display name"),
    analysis: Optional[str] = typer.Option(None, "--analysis", help="Optional reasoning"),
    date: Optional[str] = typer.Option(None, "--date", "-d", help="Date of the match, YYYY-MM-DD (default today)"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Validate and submit a prediction, then show the updated consensus."""
    from oddsflow.controller import PredictionPageController
    from oddsflow.models import Identity, Winner
    from oddsflow.predictions import PredictionStore
    from oddsflow.validation import describe

    _setup_logging(verbose)
    try:
        choice = Winner.parse(winner)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from None

    page = PredictionPageController(
        PredictionStore(_backend()), Identity(user_id=user_id, full_name=name),
    )

    async def _submit():
        await page.select_date(_parse_day(date))
        session = page.open_editor(match_id)
        page.update_draft(home_score=home, away_score=away, winner=choice, analysis=analysis)
        return session, await page.submit()

    try:
        session, result = run(_submit())
    except KeyError:
        console.print(f"[red]Match {match_id} is not scheduled on that day[/red]")
        raise typer.Exit(1)

    if result.violation is not None:
        console.print(f"[red]{describe(result.violation, session.match.home_team, session.match.away_team)}[/red]")
        raise typer.Exit(1)
    if not result.ok:
        console.print(f"[red]{result.error}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]Prediction saved[/green] for {session.match.home_team} vs {session.match.away_team}")
    summary = page.consensus.get(match_id)
    if summary:
        console.print(f"  Home {summary.home_percent:>3}% {_bar(summary.home_percent)}")
        console.print(f"  Draw {summary.draw_percent:>3}% {_bar(summary.draw_percent)}")
        console.print(f"  Away {summary.away_percent:>3}% {_bar(summary.away_percent)}")
        console.print(f"  {summary.total_votes} votes")
