"""Configuration helpers for keeper league rules."""

from .settings import (
    KeeperSettings,
    OffseasonWindow,
    default_settings,
    get_settings,
    iter_presets,
    settings_from_mapping,
)

__all__ = [
    "KeeperSettings",
    "OffseasonWindow",
    "default_settings",
    "get_settings",
    "iter_presets",
    "settings_from_mapping",
]
