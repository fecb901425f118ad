"""Small helpers shared by the controller and the CLI."""
from __future__ import annotations

import datetime as dt
from typing import Optional

from oddsflow.models import Identity


def day_window(day: dt.date) -> tuple[dt.datetime, dt.datetime]:
    """Local-time bounds of *day*, both inclusive.

    Kickoff times are stored as site-local wall clock, so the window is built
    from the calendar date itself and never shifted through UTC.
    """
    start = dt.datetime.combine(day, dt.time.min)
    end = dt.datetime.combine(day, dt.time.max)
    return start, end


def date_options(today: dt.date, days: int = 7) -> list[dt.date]:
    """*days* consecutive dates starting with yesterday."""
    return [today + dt.timedelta(days=i - 1) for i in range(days)]


def date_label(day: dt.date, today: dt.date) -> str:
    offset = (day - today).days
    if offset == 0:
        return "today"
    if offset == 1:
        return "tomorrow"
    if offset == -1:
        return "yesterday"
    return f"{day:%b} {day.day}"


def time_ago(when: dt.datetime, now: Optional[dt.datetime] = None) -> str:
    now = now or dt.datetime.now(when.tzinfo)
    seconds = int((now - when).total_seconds())
    if seconds < 60:
        return "just now"
    minutes = seconds // 60
    if minutes < 60:
        return f"{minutes}m ago"
    hours = minutes // 60
    if hours < 24:
        return f"{hours}h ago"
    return f"{hours // 24}d ago"


def display_name(identity: Identity) -> str:
    """Name shown next to a prediction: full name, else e-mail local part."""
    if identity.full_name:
        return identity.full_name
    if identity.email:
        return identity.email.split("@")[0]
    return "Anonymous"
