"""Walk ownership history backward to find where a player's current holding began."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import List, Optional, Set, Tuple

from pykeeper.config import KeeperSettings
from pykeeper.history import OwnershipHistory, departed_after, latest_acquisition, previous_drop
from pykeeper.models import AcquisitionEvent, EventKind
from pykeeper.seasons import is_offseason, season_for, upcoming_season


logger = logging.getLogger(__name__)


class OriginSource(str, Enum):
    DRAFTED = "DRAFTED"
    UNDRAFTED = "UNDRAFTED"
    NO_HISTORY = "NO_HISTORY"
    CYCLE = "CYCLE"


class WarningCode(str, Enum):
    NO_HISTORY = "NO_HISTORY"
    MISSING_DRAFT_ROUND = "MISSING_DRAFT_ROUND"
    OWNERSHIP_CYCLE = "OWNERSHIP_CYCLE"
    MISSING_COUNTERPARTY = "MISSING_COUNTERPARTY"
    LEFT_ROSTER = "LEFT_ROSTER"


@dataclass(frozen=True)
class DataQualityWarning:
    player_id: str
    roster_id: str
    code: WarningCode
    message: str


@dataclass(frozen=True)
class Origin:
    origin_season: int
    base_round: int
    source: OriginSource
    acquired_via: Optional[EventKind] = None
    chain: Tuple[str, ...] = ()
    warnings: Tuple[DataQualityWarning, ...] = ()


def _event_season(event: AcquisitionEvent, settings: KeeperSettings) -> int:
    if event.kind is EventKind.DRAFTED and event.season is not None:
        return event.season
    return season_for(event.timestamp, settings)


def resolve_origin(
    player_id: str,
    roster_id: str,
    as_of_season: int,
    history: OwnershipHistory,
    settings: KeeperSettings,
) -> Origin:
    """Resolve the origin season and base round for ``player_id`` on ``roster_id``.

    Never raises on bad history: gaps degrade to the undrafted round and are
    reported as warnings. The walk is iterative and remembers every
    ``(player, roster)`` it has entered; reaching a roster a second time (A
    traded to B, traded back to A) stops at ``as_of_season`` and the undrafted
    round, the most expensive reading.
    """

    events = tuple(
        event for event in history.events_for(player_id) if _event_season(event, settings) <= as_of_season
    )
    warnings: List[DataQualityWarning] = []
    visited: Set[Tuple[str, str]] = set()
    chain: List[str] = []
    acquired_via: Optional[EventKind] = None
    origin_override: Optional[int] = None

    def warn(code: WarningCode, holder: str, message: str) -> None:
        logger.warning("Ownership history for %s on %s: %s", player_id, holder, message)
        warnings.append(DataQualityWarning(player_id=player_id, roster_id=holder, code=code, message=message))

    def finish(origin_season: int, base_round: int, source: OriginSource) -> Origin:
        if origin_override is not None and source is not OriginSource.CYCLE:
            origin_season = origin_override
        return Origin(
            origin_season=origin_season,
            base_round=base_round,
            source=source,
            acquired_via=acquired_via,
            chain=tuple(chain),
            warnings=tuple(warnings),
        )

    current = roster_id
    before: Optional[datetime] = None
    while True:
        chain.append(current)
        if (player_id, current) in visited:
            warn(WarningCode.OWNERSHIP_CYCLE, current, f"ownership loop through roster {current}")
            return finish(as_of_season, settings.undrafted_round, OriginSource.CYCLE)
        visited.add((player_id, current))

        acquisition = latest_acquisition(events, current, before=before)
        while acquisition is not None:
            if before is None and current == roster_id:
                acquired_via = acquisition.kind
                if departed_after(events, acquisition):
                    warn(WarningCode.LEFT_ROSTER, current, "player left the roster after its last acquisition")

            if acquisition.kind is EventKind.DRAFTED:
                season = _event_season(acquisition, settings)
                if acquisition.round is None:
                    warn(WarningCode.MISSING_DRAFT_ROUND, current, f"draft pick in {season} has no round")
                    return finish(season, settings.undrafted_round, OriginSource.UNDRAFTED)
                return finish(season, acquisition.round, OriginSource.DRAFTED)

            if acquisition.kind is EventKind.TRADED_IN:
                offseason = is_offseason(acquisition.timestamp, settings)
                if offseason and origin_override is None:
                    origin_override = upcoming_season(acquisition.timestamp, settings)
                if not acquisition.counterparty_roster_id:
                    warn(WarningCode.MISSING_COUNTERPARTY, current, "trade has no counterparty roster")
                    season = (
                        upcoming_season(acquisition.timestamp, settings)
                        if offseason
                        else season_for(acquisition.timestamp, settings)
                    )
                    return finish(season, settings.undrafted_round, OriginSource.UNDRAFTED)
                current = acquisition.counterparty_roster_id
                before = acquisition.timestamp
                break

            if acquisition.kind in (EventKind.WAIVER_ADD, EventKind.FREE_AGENT_ADD):
                add_season = season_for(acquisition.timestamp, settings)
                drop = previous_drop(events, acquisition)
                if drop is None or season_for(drop.timestamp, settings) != add_season:
                    return finish(add_season, settings.undrafted_round, OriginSource.UNDRAFTED)
                before = drop.timestamp
                if drop.roster_id == current:
                    # Same roster dropped and re-added within the season: keep walking this roster.
                    acquisition = latest_acquisition(events, current, before=before)
                    continue
                current = drop.roster_id
                break

            raise ValueError(f"Unhandled acquisition kind {acquisition.kind!r}")
        else:
            holder = current
            if holder == roster_id:
                message = "no acquisition event found"
            else:
                message = f"no acquisition event found before handoff to {chain[-2] if len(chain) > 1 else roster_id}"
            warn(WarningCode.NO_HISTORY, holder, message)
            return finish(as_of_season, settings.undrafted_round, OriginSource.NO_HISTORY)
