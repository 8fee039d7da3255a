"""Read-only ownership history index."""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Protocol, Sequence, Tuple

from pykeeper.models import AcquisitionEvent, EventKind


class OwnershipHistory(Protocol):
    def events_for(self, player_id: str) -> Sequence[AcquisitionEvent]:
        """All events for a player, ordered by timestamp."""


def _order_key(event: AcquisitionEvent) -> Tuple[datetime, str, str]:
    return (event.timestamp, event.roster_id, event.kind.value)


class InMemoryHistory:
    """Ownership history backed by an in-memory event list.

    Events are grouped per player and sorted once; ties on timestamp are broken
    by roster id and kind so lookups never depend on input order.
    """

    def __init__(self, events: Iterable[AcquisitionEvent]):
        grouped: Dict[str, List[AcquisitionEvent]] = defaultdict(list)
        for event in events:
            grouped[event.player_id].append(event)
        self._by_player: Dict[str, Tuple[AcquisitionEvent, ...]] = {
            player_id: tuple(sorted(items, key=_order_key)) for player_id, items in grouped.items()
        }

    def events_for(self, player_id: str) -> Sequence[AcquisitionEvent]:
        return self._by_player.get(player_id, ())

    def __len__(self) -> int:
        return sum(len(items) for items in self._by_player.values())


def latest_acquisition(
    events: Sequence[AcquisitionEvent],
    roster_id: str,
    *,
    before: Optional[datetime] = None,
) -> Optional[AcquisitionEvent]:
    """Most recent event that brought the player onto ``roster_id``."""

    for event in reversed(events):
        if before is not None and event.timestamp >= before:
            continue
        if event.roster_id == roster_id and event.kind.is_acquisition:
            return event
    return None


def departed_after(events: Sequence[AcquisitionEvent], acquisition: AcquisitionEvent) -> bool:
    """Whether the acquiring roster later dropped or traded the player away."""

    for event in events:
        if event.timestamp <= acquisition.timestamp or event.roster_id != acquisition.roster_id:
            continue
        if event.kind.is_departure:
            return True
    return False


def previous_drop(events: Sequence[AcquisitionEvent], add: AcquisitionEvent) -> Optional[AcquisitionEvent]:
    """The DROPPED event (by any roster) immediately preceding ``add``."""

    for event in reversed(events):
        if event.timestamp >= add.timestamp:
            continue
        if event.kind is EventKind.DROPPED:
            return event
    return None
