from datetime import date

from pykeeper.config import KeeperSettings
from pykeeper.seasons import is_offseason, season_for, upcoming_season


SETTINGS = KeeperSettings()


def test_playoff_dates_belong_to_previous_season():
    assert season_for(date(2024, 1, 15), SETTINGS) == 2023
    assert season_for(date(2024, 2, 28), SETTINGS) == 2023
    assert season_for(date(2024, 3, 1), SETTINGS) == 2024
    assert season_for(date(2024, 10, 1), SETTINGS) == 2024


def test_rollover_month_is_configurable():
    settings = KeeperSettings(season_rollover_month=1)
    assert season_for(date(2024, 1, 15), settings) == 2024


def test_is_offseason_uses_window():
    assert is_offseason(date(2024, 2, 10), SETTINGS)
    assert is_offseason(date(2023, 12, 5), SETTINGS)
    assert not is_offseason(date(2023, 10, 15), SETTINGS)


def test_upcoming_season_after_window_start():
    assert upcoming_season(date(2023, 12, 5), SETTINGS) == 2024
    assert upcoming_season(date(2024, 2, 10), SETTINGS) == 2024
    assert upcoming_season(date(2024, 8, 20), SETTINGS) == 2024
