"""Season windows: which calendar dates belong to a team's season.

``season_year`` is the calendar year containing the season's *end* month, so a
September-June season with season_year 2026 starts in September 2025.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from ..common.datetime_utils import DateLike, as_calendar_date, last_day_of_month
from ..common.validators import require_month
from ..users.model import Team
from .model import Season, SeasonWindow


def resolve(start_month: int, end_month: int, season_year: int) -> SeasonWindow:
    start_month = require_month(start_month, "Start month")
    end_month = require_month(end_month, "End month")
    season_year = int(season_year)

    start_year = season_year if start_month <= end_month else season_year - 1
    return SeasonWindow(
        start=date(start_year, start_month, 1),
        end=last_day_of_month(season_year, end_month),
    )


def is_within(day: DateLike, window: SeasonWindow) -> bool:
    """Inclusive on both ends."""
    return window.contains(as_calendar_date(day))


def window_for(team: Team, season: Optional[Season]) -> Optional[SeasonWindow]:
    """None when the team has no season assignment."""
    if season is None or team.season_year is None:
        return None
    return resolve(season.start_month, season.end_month, team.season_year)


def is_currently_active(team: Team, season: Optional[Season], today: DateLike) -> bool:
    # Unscoped teams are always active.
    window = window_for(team, season)
    if window is None:
        return True
    return is_within(today, window)


def display_name(name: str, season_year: int) -> str:
    return f"{name} {season_year}"
