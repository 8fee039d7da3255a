"""Immutable league snapshot consumed by every engine call."""

from __future__ import annotations

from typing import Iterable, List, Optional

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from pykeeper.config import KeeperSettings

from .events import AcquisitionEvent
from .keeper import DraftPickOwnership, KeeperIntent
from .player import Player, Roster


class LeagueSnapshot(BaseModel):
    league_id: str = Field(..., min_length=1)
    season: int
    draft_rounds: int = Field(default=16, ge=1)
    settings: KeeperSettings = Field(default_factory=KeeperSettings)
    players: List[Player] = Field(default_factory=list)
    rosters: List[Roster] = Field(default_factory=list)
    events: List[AcquisitionEvent] = Field(default_factory=list)
    draft_picks: List[DraftPickOwnership] = Field(default_factory=list)
    keepers: List[KeeperIntent] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    def roster(self, roster_id: str) -> Optional[Roster]:
        for roster in self.rosters:
            if roster.roster_id == roster_id:
                return roster
        return None

    def player(self, player_id: str) -> Optional[Player]:
        for player in self.players:
            if player.player_id == player_id:
                return player
        return None

    def keepers_for(self, roster_id: str) -> List[KeeperIntent]:
        return [
            intent
            for intent in self.keepers
            if intent.roster_id == roster_id and intent.season == self.season
        ]

    def roster_ids(self) -> List[str]:
        """Rosters known to the snapshot, including ones only referenced by keepers."""

        seen: dict[str, None] = {roster.roster_id: None for roster in self.rosters}
        for intent in self.keepers:
            seen.setdefault(intent.roster_id, None)
        return list(seen)

    def with_keepers(self, keepers: Iterable[KeeperIntent]) -> "LeagueSnapshot":
        return self.model_copy(update={"keepers": list(keepers)})
