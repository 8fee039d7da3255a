"""Keeper decision and draft pick models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class KeeperType(str, Enum):
    REGULAR = "REGULAR"
    FRANCHISE = "FRANCHISE"


class OverrideAction(str, Enum):
    ADD = "add"
    REMOVE = "remove"
    UPDATE = "update"


class KeeperSelection(BaseModel):
    """A requested (possibly hypothetical) keeper for a roster."""

    player_id: str = Field(..., min_length=1)
    keeper_type: KeeperType = KeeperType.REGULAR

    model_config = ConfigDict(frozen=True)


class KeeperIntent(BaseModel):
    """A persisted decision to keep a player.

    ``base_cost`` is the origin base round; ``final_cost`` is the round the
    keeper occupies after years-held reduction and slot resolution.
    """

    player_id: str = Field(..., min_length=1)
    roster_id: str = Field(..., min_length=1)
    season: int
    keeper_type: KeeperType = KeeperType.REGULAR
    base_cost: int = Field(..., ge=1)
    final_cost: int = Field(..., ge=1)
    years_held: int = Field(default=0, ge=0)
    is_locked: bool = False

    model_config = ConfigDict(frozen=True)

    def to_selection(self) -> KeeperSelection:
        return KeeperSelection(player_id=self.player_id, keeper_type=self.keeper_type)


class DraftPickOwnership(BaseModel):
    season: int
    round: int = Field(..., ge=1)
    original_owner_roster_id: str
    current_owner_roster_id: str

    model_config = ConfigDict(frozen=True)
