"""Team and league statistics sub-commands."""
from __future__ import annotations

import typer
from rich.table import Table

from oddsflow.cli._shared import _backend, _setup_logging, console, run

app = typer.Typer(help="Team and league statistics.")


@app.command()
def show(league_slug: str, team_slug: str, verbose: bool = typer.Option(False, "--verbose", "-v")):
    """Team statistics and squad, e.g. `oddsflow team show premier-league manchester-city`."""
    from oddsflow.team_data import TeamDataCache, league_db_name

    _setup_logging(verbose)
    cache = TeamDataCache(_backend())
    data = run(cache.get_team_data(team_slug, league_db_name(league_slug)))

    if data.team is None:
        console.print(f"[yellow]Team not found: {team_slug}[/yellow]")
        return

    t = data.team
    console.print(f"\n[cyan]{t.team_name}, {t.league_name} {t.season_year or ''}[/cyan]")
    console.print(f"  Played {t.total_played or 0}: {t.total_wins or 0}W {t.total_draws or 0}D {t.total_loses or 0}L")
    console.print(f"  Goals: {t.goals_for_total or 0} scored, {t.goals_against_total or 0} conceded")
    if t.form:
        console.print(f"  Form: {t.form}")

    if not data.players:
        return
    table = Table(show_header=True, header_style="bold")
    for col in ("Player", "Pos", "Apps", "Goals", "Assists", "Rating"):
        table.add_column(col)
    for p in data.players:
        table.add_row(p.player_name or "", p.position or "", str(p.appearances or 0),
                      str(p.goals or 0), str(p.assists or 0),
                      f"{p.rating:.2f}" if p.rating is not None else "-")
    console.print(table)


@app.command()
def leaders(league_slug: str, verbose: bool = typer.Option(False, "--verbose", "-v")):
    """Top scorers, assisters and rated players of a league."""
    from oddsflow.team_data import TeamDataCache, league_db_name

    _setup_logging(verbose)
    cache = TeamDataCache(_backend())
    data = run(cache.get_league_players(league_db_name(league_slug)))
    if not data.players:
        console.print(f"[yellow]No players for {league_slug}[/yellow]")
        return
    for title, rows, stat in (
        ("Top scorers", data.top_scorers, lambda p: p.goals or 0),
        ("Top assists", data.top_assists, lambda p: p.assists or 0),
        ("Highest rated", data.highest_rated, lambda p: p.rating or 0),
    ):
        console.print(f"\n[cyan]{title}[/cyan]")
        for i, p in enumerate(rows, 1):
            console.print(f"  {i}. {p.player_name} ({p.team_name or '?'}) {stat(p)}")
