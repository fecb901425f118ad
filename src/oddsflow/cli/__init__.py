"""OddsFlow community CLI.

Usage examples:
    oddsflow db init                                   # create the schema
    oddsflow community matches --date 2026-10-19       # consensus for a day
    oddsflow community predict u1 555 -w 1 --home 2 --away 1
    oddsflow team show premier-league manchester-city  # team page data
    oddsflow team leaders bundesliga                   # league leaderboards
"""
from __future__ import annotations

import typer

from oddsflow.cli.community_cmds import app as _community_app
from oddsflow.cli.db_cmds import app as _db_app
from oddsflow.cli.team_cmds import app as _team_app

app = typer.Typer(add_completion=False)

app.add_typer(_db_app, name="db")
app.add_typer(_community_app, name="community")
app.add_typer(_team_app, name="team")


if __name__ == "__main__":
    app()
