"""Season calendar rules shared by the live and simulation paths."""

from __future__ import annotations

from datetime import date, datetime
from typing import Union

from pykeeper.config import KeeperSettings


DateLike = Union[date, datetime]


def season_for(moment: DateLike, settings: KeeperSettings) -> int:
    """Season a calendar date belongs to.

    Dates before ``season_rollover_month`` are the tail (playoffs) of the
    previous calendar year's season.
    """

    if moment.month < settings.season_rollover_month:
        return moment.year - 1
    return moment.year


def is_offseason(moment: DateLike, settings: KeeperSettings) -> bool:
    return settings.offseason_window.contains(moment.month, moment.day)


def upcoming_season(moment: DateLike, settings: KeeperSettings) -> int:
    """Season an offseason date prepares for."""

    window = settings.offseason_window
    if window.wraps_new_year and (moment.month, moment.day) >= window.start:
        return moment.year + 1
    return moment.year
