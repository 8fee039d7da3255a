from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from pykeeper.models import KeeperType, OverrideAction

from .keeper import KeeperResponse
from .quote import KeeperCostResponse


class OverrideRequest(BaseModel):
    action: OverrideAction
    reason: str = Field(..., min_length=1, max_length=500)
    keeper_type: Optional[KeeperType] = None
    final_cost: Optional[int] = Field(default=None, ge=1)


class OverrideResponse(BaseModel):
    action: OverrideAction
    player_id: str
    roster_id: str
    keeper: Optional[KeeperResponse] = None


class EligibleKeeperResponse(BaseModel):
    player_id: str
    eligible: bool
    reason: str
    keeper_types: List[KeeperType]
    origin_season: int
    base_round: int
    cost: KeeperCostResponse
    existing: Optional[KeeperResponse] = None


class EligibilityResponse(BaseModel):
    roster_id: str
    season: int
    players: List[EligibleKeeperResponse]
    franchise_count: int
    regular_count: int
    total_count: int
    can_add_franchise: bool
    can_add_regular: bool
    can_add_any: bool


class AuditResponse(BaseModel):
    audit_id: int
    season: int
    roster_id: str
    player_id: str
    action: str
    old_cost: Optional[int] = None
    new_cost: Optional[int] = None
    message: Optional[str] = None
    created_at: datetime
