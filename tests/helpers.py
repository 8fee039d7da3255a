"""Builders for league snapshots used across the test modules."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Mapping, Optional, Sequence

from pykeeper.config import KeeperSettings
from pykeeper.models import (
    AcquisitionEvent,
    DraftPickOwnership,
    EventKind,
    KeeperIntent,
    LeagueSnapshot,
    Roster,
)


def at(year: int, month: int, day: int) -> datetime:
    return datetime(year, month, day, 12, 0, tzinfo=timezone.utc)


def drafted(player_id: str, roster_id: str, season: int, round_no: Optional[int]) -> AcquisitionEvent:
    return AcquisitionEvent(
        player_id=player_id,
        roster_id=roster_id,
        kind=EventKind.DRAFTED,
        timestamp=at(season, 8, 25),
        round=round_no,
        season=season,
    )


def traded(player_id: str, from_roster: str, to_roster: str, when: datetime) -> list[AcquisitionEvent]:
    return [
        AcquisitionEvent(
            player_id=player_id,
            roster_id=from_roster,
            kind=EventKind.TRADED_OUT,
            timestamp=when,
            counterparty_roster_id=to_roster,
        ),
        AcquisitionEvent(
            player_id=player_id,
            roster_id=to_roster,
            kind=EventKind.TRADED_IN,
            timestamp=when,
            counterparty_roster_id=from_roster,
        ),
    ]


def dropped(player_id: str, roster_id: str, when: datetime) -> AcquisitionEvent:
    return AcquisitionEvent(player_id=player_id, roster_id=roster_id, kind=EventKind.DROPPED, timestamp=when)


def added(
    player_id: str,
    roster_id: str,
    when: datetime,
    kind: EventKind = EventKind.FREE_AGENT_ADD,
) -> AcquisitionEvent:
    return AcquisitionEvent(player_id=player_id, roster_id=roster_id, kind=kind, timestamp=when)


def intent(
    player_id: str,
    roster_id: str,
    season: int,
    *,
    base_cost: int,
    final_cost: int,
    years_held: int = 0,
    keeper_type: str = "REGULAR",
    is_locked: bool = False,
) -> KeeperIntent:
    return KeeperIntent(
        player_id=player_id,
        roster_id=roster_id,
        season=season,
        keeper_type=keeper_type,
        base_cost=base_cost,
        final_cost=final_cost,
        years_held=years_held,
        is_locked=is_locked,
    )


def make_snapshot(
    *,
    season: int = 2025,
    events: Iterable[AcquisitionEvent] = (),
    rosters: Mapping[str, Sequence[str]] | None = None,
    keepers: Iterable[KeeperIntent] = (),
    picks: Iterable[DraftPickOwnership] = (),
    settings: KeeperSettings | None = None,
    draft_rounds: int = 16,
    league_id: str = "league-1",
) -> LeagueSnapshot:
    rosters = rosters if rosters is not None else {"A": [], "B": []}
    return LeagueSnapshot(
        league_id=league_id,
        season=season,
        draft_rounds=draft_rounds,
        settings=settings or KeeperSettings(),
        rosters=[
            Roster(roster_id=roster_id, season=season, player_ids=list(player_ids))
            for roster_id, player_ids in rosters.items()
        ],
        events=list(events),
        draft_picks=list(picks),
        keepers=list(keepers),
    )
