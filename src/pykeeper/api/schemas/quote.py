from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel

from .keeper import WarningResponse


class CostOptionResponse(BaseModel):
    base_cost: int
    final_cost: int
    eligible: bool
    reason: str = ""


class KeeperCostResponse(BaseModel):
    season: int
    years_held: int
    regular: CostOptionResponse
    franchise: CostOptionResponse
    must_franchise_tag: bool


class QuoteResponse(BaseModel):
    player_id: str
    roster_id: str
    season: int
    origin_season: int
    base_round: int
    origin_source: str
    acquired_via: Optional[str] = None
    cost: KeeperCostResponse
    projections: List[KeeperCostResponse]
    warnings: List[WarningResponse]
