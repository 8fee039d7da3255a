"""Keeper league settings and named presets."""

from __future__ import annotations

import logging
import os
from typing import Dict, Iterable, Mapping, Union

from pydantic import BaseModel, Field, ValidationError, model_validator
from pydantic.config import ConfigDict


logger = logging.getLogger(__name__)

_ENV_PREFIX = "PYKEEPER_"


class OffseasonWindow(BaseModel):
    """Inclusive month/day range during which trades reset the held-years clock.

    The window may wrap the new year (e.g. Dec 1 through Aug 31).
    """

    start_month: int = Field(default=12, ge=1, le=12)
    start_day: int = Field(default=1, ge=1, le=31)
    end_month: int = Field(default=8, ge=1, le=12)
    end_day: int = Field(default=31, ge=1, le=31)

    model_config = ConfigDict(frozen=True)

    @property
    def start(self) -> tuple[int, int]:
        return (self.start_month, self.start_day)

    @property
    def end(self) -> tuple[int, int]:
        return (self.end_month, self.end_day)

    @property
    def wraps_new_year(self) -> bool:
        return self.start > self.end

    def contains(self, month: int, day: int) -> bool:
        point = (month, day)
        if self.wraps_new_year:
            return point >= self.start or point <= self.end
        return self.start <= point <= self.end


class KeeperSettings(BaseModel):
    """Per-league keeper configuration passed explicitly into every engine call."""

    max_keepers: int = Field(default=7, ge=0)
    max_franchise_tags: int = Field(default=2, ge=0)
    max_regular_keepers: int = Field(default=5, ge=0)
    regular_keeper_max_years: int = Field(default=2, ge=0)
    undrafted_round: int = Field(default=10, ge=1)
    minimum_round: int = Field(default=1, ge=1)
    cost_reduction_per_year: int = Field(default=1, ge=0)
    season_rollover_month: int = Field(default=3, ge=1, le=12)
    offseason_window: OffseasonWindow = Field(default_factory=OffseasonWindow)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_round_bounds(self) -> "KeeperSettings":
        if self.undrafted_round < self.minimum_round:
            raise ValueError(
                f"undrafted_round ({self.undrafted_round}) must be >= minimum_round ({self.minimum_round})"
            )
        return self


_PRESETS: Dict[str, KeeperSettings] = {
    "standard": KeeperSettings(),
    "dynasty-lite": KeeperSettings(
        max_keepers=10,
        max_franchise_tags=3,
        max_regular_keepers=7,
        regular_keeper_max_years=3,
        undrafted_round=12,
    ),
    "strict": KeeperSettings(
        max_keepers=3,
        max_franchise_tags=1,
        max_regular_keepers=2,
        regular_keeper_max_years=1,
        undrafted_round=8,
        cost_reduction_per_year=0,
    ),
}


def iter_presets() -> Iterable[str]:
    """Return the names of all configured presets."""

    return _PRESETS.keys()


def get_settings(name: str) -> KeeperSettings:
    """Fetch a preset by name, raising KeyError if missing."""

    key = name.strip().lower()
    if key not in _PRESETS:
        raise KeyError(f"No keeper settings preset named {name!r}")
    return _PRESETS[key]


def settings_from_mapping(
    data: Mapping[str, object] | None,
    *,
    base: Union[KeeperSettings, str, None] = None,
) -> KeeperSettings:
    """Build settings from a (possibly partial) mapping layered over ``base``."""

    if isinstance(base, str):
        base = get_settings(base)
    base = base or default_settings()
    if not data:
        return base
    merged = base.model_dump()
    merged.update({key: value for key, value in data.items() if value is not None})
    return KeeperSettings.model_validate(merged)


def _env_int(name: str, default: int, *, min_value: int | None = None) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid int for %s: %s; using default %d", name, raw, default)
        return default
    if min_value is not None:
        value = max(min_value, value)
    return value


def default_settings() -> KeeperSettings:
    """Process-wide defaults, with ``PYKEEPER_*`` environment overrides applied."""

    base = _PRESETS["standard"]
    overrides = {
        "max_keepers": _env_int(f"{_ENV_PREFIX}MAX_KEEPERS", base.max_keepers, min_value=0),
        "max_franchise_tags": _env_int(f"{_ENV_PREFIX}MAX_FRANCHISE_TAGS", base.max_franchise_tags, min_value=0),
        "max_regular_keepers": _env_int(f"{_ENV_PREFIX}MAX_REGULAR_KEEPERS", base.max_regular_keepers, min_value=0),
        "regular_keeper_max_years": _env_int(
            f"{_ENV_PREFIX}REGULAR_KEEPER_MAX_YEARS", base.regular_keeper_max_years, min_value=0
        ),
        "undrafted_round": _env_int(f"{_ENV_PREFIX}UNDRAFTED_ROUND", base.undrafted_round, min_value=1),
        "minimum_round": _env_int(f"{_ENV_PREFIX}MINIMUM_ROUND", base.minimum_round, min_value=1),
        "cost_reduction_per_year": _env_int(
            f"{_ENV_PREFIX}COST_REDUCTION_PER_YEAR", base.cost_reduction_per_year, min_value=0
        ),
    }
    if all(getattr(base, key) == value for key, value in overrides.items()):
        return base
    try:
        return KeeperSettings.model_validate({**base.model_dump(), **overrides})
    except ValidationError as exc:
        logger.warning("Ignoring inconsistent %s* overrides: %s", _ENV_PREFIX, exc)
        return base
