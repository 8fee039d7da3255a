"""Ownership history events."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator
from pydantic.config import ConfigDict


class EventKind(str, Enum):
    DRAFTED = "DRAFTED"
    TRADED_IN = "TRADED_IN"
    TRADED_OUT = "TRADED_OUT"
    WAIVER_ADD = "WAIVER_ADD"
    FREE_AGENT_ADD = "FREE_AGENT_ADD"
    DROPPED = "DROPPED"

    @property
    def is_acquisition(self) -> bool:
        return self in _ACQUISITIONS

    @property
    def is_departure(self) -> bool:
        return self in _DEPARTURES


_ACQUISITIONS = frozenset(
    {EventKind.DRAFTED, EventKind.TRADED_IN, EventKind.WAIVER_ADD, EventKind.FREE_AGENT_ADD}
)
_DEPARTURES = frozenset({EventKind.TRADED_OUT, EventKind.DROPPED})


class AcquisitionEvent(BaseModel):
    """One append-only history entry for a (player, roster) pair.

    ``round`` is meaningful only for DRAFTED events and ``counterparty_roster_id``
    only for TRADED_IN / TRADED_OUT. ``season`` optionally pins the draft season
    when it cannot be inferred from the timestamp. Naive timestamps are read as UTC.
    """

    player_id: str = Field(..., min_length=1)
    roster_id: str = Field(..., min_length=1)
    kind: EventKind
    timestamp: datetime
    round: Optional[int] = Field(default=None, ge=1)
    season: Optional[int] = None
    counterparty_roster_id: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @field_validator("timestamp")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
