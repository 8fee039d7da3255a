"""Canonical player and roster models shared across ingestion and the engine."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class Player(BaseModel):
    """Reference player entity owned by the external data store."""

    player_id: str = Field(..., min_length=1)
    name: str = ""
    position: Optional[str] = None
    team: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)


class Roster(BaseModel):
    """A team within a league-season."""

    roster_id: str = Field(..., min_length=1)
    owner_id: Optional[str] = None
    season: int
    team_name: Optional[str] = None
    player_ids: List[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)
