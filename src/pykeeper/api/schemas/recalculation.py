from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel

from .keeper import WarningResponse


class KeeperDeltaResponse(BaseModel):
    player_id: str
    roster_id: str
    season: int
    status: str
    old_cost: int
    new_cost: Optional[int] = None
    years_held: Optional[int] = None
    base_cost: Optional[int] = None
    error: Optional[str] = None


class RecalculationResponse(BaseModel):
    league_id: str
    season: int
    applied: bool
    updated: int
    unchanged: int
    failed: int
    entries: List[KeeperDeltaResponse]
    warnings: List[WarningResponse]
