from pathlib import Path

import pytest
from pydantic import ValidationError

from pykeeper.config import (
    KeeperSettings,
    OffseasonWindow,
    default_settings,
    get_settings,
    iter_presets,
    settings_from_mapping,
)
from pykeeper.config_loader import SettingsProfile


def test_default_settings_match_league_rules():
    settings = KeeperSettings()
    assert settings.max_keepers == 7
    assert settings.max_franchise_tags == 2
    assert settings.max_regular_keepers == 5
    assert settings.regular_keeper_max_years == 2
    assert settings.undrafted_round == 10
    assert settings.minimum_round == 1
    assert settings.cost_reduction_per_year == 1


def test_get_settings_is_case_insensitive():
    assert get_settings("Standard") == KeeperSettings()
    assert get_settings("STRICT").max_keepers == 3


def test_get_settings_missing_raises():
    with pytest.raises(KeyError):
        get_settings("auction")


def test_iter_presets_lists_known_names():
    assert {"standard", "dynasty-lite", "strict"} <= set(iter_presets())


def test_settings_from_mapping_layers_over_preset():
    settings = settings_from_mapping({"max_keepers": 4, "undrafted_round": None}, base="dynasty-lite")
    assert settings.max_keepers == 4
    assert settings.undrafted_round == 12


def test_undrafted_round_below_minimum_rejected():
    with pytest.raises(ValidationError):
        KeeperSettings(minimum_round=5, undrafted_round=3)


def test_settings_are_frozen():
    settings = KeeperSettings()
    with pytest.raises((TypeError, ValidationError)):
        settings.max_keepers = 3  # type: ignore[misc]


def test_default_settings_reads_environment(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("PYKEEPER_MAX_KEEPERS", "4")
    monkeypatch.setenv("PYKEEPER_UNDRAFTED_ROUND", "12")
    settings = default_settings()
    assert settings.max_keepers == 4
    assert settings.undrafted_round == 12


def test_default_settings_ignores_bad_environment(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("PYKEEPER_MAX_KEEPERS", "seven")
    assert default_settings().max_keepers == 7


def test_default_settings_falls_back_on_inconsistent_environment(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("PYKEEPER_MINIMUM_ROUND", "12")
    settings = default_settings()
    assert settings.minimum_round == 1
    assert settings.undrafted_round == 10


@pytest.mark.parametrize(
    ("month", "day", "expected"),
    [(2, 10, True), (12, 1, True), (8, 31, True), (9, 1, False), (11, 30, False)],
)
def test_offseason_window_wraps_new_year(month: int, day: int, expected: bool):
    window = OffseasonWindow()
    assert window.wraps_new_year
    assert window.contains(month, day) is expected


def test_offseason_window_within_one_year():
    window = OffseasonWindow(start_month=3, start_day=1, end_month=8, end_day=15)
    assert not window.wraps_new_year
    assert window.contains(5, 5)
    assert not window.contains(1, 5)


def test_settings_profile_roundtrip(tmp_path: Path):
    path = tmp_path / "profile.json"
    SettingsProfile(preset="strict", overrides={"max_keepers": 2}).save(path)

    profile = SettingsProfile.load(path)
    assert profile.preset == "strict"
    settings = profile.resolve()
    assert settings.max_keepers == 2
    assert settings.max_franchise_tags == 1
