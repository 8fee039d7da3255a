"""Domain models for the keeper engine."""

from .events import AcquisitionEvent, EventKind
from .keeper import DraftPickOwnership, KeeperIntent, KeeperSelection, KeeperType, OverrideAction
from .player import Player, Roster
from .snapshot import LeagueSnapshot

__all__ = [
    "AcquisitionEvent",
    "DraftPickOwnership",
    "EventKind",
    "KeeperIntent",
    "KeeperSelection",
    "KeeperType",
    "LeagueSnapshot",
    "OverrideAction",
    "Player",
    "Roster",
]
