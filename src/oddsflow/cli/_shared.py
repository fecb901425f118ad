"""Shared CLI utilities: console, logging setup, store factories."""
from __future__ import annotations

import asyncio
import logging

from rich.console import Console
from rich.logging import RichHandler

console = Console()


def _setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


def _backend():
    from oddsflow.backend import TableStore
    from oddsflow.db import connect
    return TableStore(connect())


def run(coro):
    """Drive one coroutine to completion from a synchronous command."""
    return asyncio.run(coro)
