"""Database sub-commands."""
from __future__ import annotations

import typer

from oddsflow.cli._shared import console

app = typer.Typer(help="Table store maintenance.")


@app.command()
def init():
    """Create the table store schema (safe to re-run)."""
    from oddsflow.config import settings
    from oddsflow.db import connect

    con = connect()
    tables = [r[0] for r in con.execute(
        "SELECT table_name FROM information_schema.tables WHERE table_schema='main' ORDER BY 1"
    ).fetchall()]
    con.close()
    console.print(f"[green]Schema ready[/green] at {settings().db_path}: {', '.join(tables)}")
