from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from pykeeper.models import KeeperSelection, KeeperType


class WarningResponse(BaseModel):
    player_id: str
    roster_id: str
    code: str
    message: str


class KeeperCommitRequest(BaseModel):
    player_id: str = Field(..., min_length=1)
    keeper_type: KeeperType = KeeperType.REGULAR

    def to_selection(self) -> KeeperSelection:
        return KeeperSelection(player_id=self.player_id, keeper_type=self.keeper_type)


class SimulationRequest(BaseModel):
    roster_id: str = Field(..., min_length=1)
    keepers: List[KeeperCommitRequest] = Field(default_factory=list)


class KeeperResponse(BaseModel):
    player_id: str
    roster_id: str
    season: int
    keeper_type: KeeperType
    base_cost: int
    final_cost: int
    years_held: int
    is_locked: bool


class ResolvedKeeperResponse(BaseModel):
    player_id: str
    keeper_type: KeeperType
    base_cost: int
    requested_round: int
    final_cost: int
    years_held: int
    cascaded: bool
    cascade_reason: Optional[str] = None


class SimulationResponse(BaseModel):
    roster_id: str
    season: int
    keepers: List[ResolvedKeeperResponse]
    total_slots_taken: int
    available_slots: int
    available_rounds: List[int]
    warnings: List[WarningResponse] = Field(default_factory=list)
