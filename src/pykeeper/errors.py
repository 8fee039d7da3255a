"""Exception hierarchy raised by the keeper engine and its persisted path."""

from __future__ import annotations

from typing import Optional


class KeeperError(Exception):
    """Base class; ``code`` is a stable identifier surfaced to API callers."""

    code = "KEEPER_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class KeeperValidationError(KeeperError, ValueError):
    code = "VALIDATION_ERROR"


class KeeperLimitError(KeeperValidationError):
    code = "KEEPER_LIMIT_EXCEEDED"

    def __init__(self, roster_id: str, limit: str, allowed: int, requested: int):
        super().__init__(
            f"Roster {roster_id} requested {requested} keepers against {limit}={allowed}"
        )
        self.roster_id = roster_id
        self.limit = limit
        self.allowed = allowed
        self.requested = requested


class DuplicateKeeperError(KeeperValidationError):
    code = "DUPLICATE_KEEPER"

    def __init__(self, roster_id: str, player_id: str):
        super().__init__(f"Player {player_id} is listed more than once for roster {roster_id}")
        self.roster_id = roster_id
        self.player_id = player_id


class FranchiseTagRequiredError(KeeperValidationError):
    code = "FRANCHISE_TAG_REQUIRED"

    def __init__(self, roster_id: str, player_id: str, years_held: int, max_years: int):
        super().__init__(
            f"Player {player_id} has been held {years_held} seasons (max {max_years} as a regular "
            "keeper) and can only be kept with a franchise tag"
        )
        self.roster_id = roster_id
        self.player_id = player_id
        self.years_held = years_held
        self.max_years = max_years


class UnknownPlayerError(KeeperValidationError):
    code = "UNKNOWN_PLAYER"

    def __init__(self, roster_id: str, player_id: str):
        super().__init__(f"Player {player_id} is not on roster {roster_id}")
        self.roster_id = roster_id
        self.player_id = player_id


class UnresolvableCascadeError(KeeperError):
    code = "UNRESOLVABLE_CASCADE"

    def __init__(self, roster_id: str, player_id: str, requested_round: int, reason: Optional[str] = None):
        detail = reason or "no owned round at or after the requested round is free"
        super().__init__(
            f"Cannot keep player {player_id} on roster {roster_id} from round {requested_round}: "
            f"{detail}; cannot keep this many players with current draft capital"
        )
        self.roster_id = roster_id
        self.player_id = player_id
        self.requested_round = requested_round


class KeeperLockedError(KeeperError):
    code = "KEEPER_LOCKED"

    def __init__(self, roster_id: str, player_id: str):
        super().__init__(f"Keeper {player_id} on roster {roster_id} is locked")
        self.roster_id = roster_id
        self.player_id = player_id


class KeeperOverrideError(KeeperValidationError):
    code = "INVALID_OVERRIDE"
