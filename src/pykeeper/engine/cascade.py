"""Assign keepers to draft rounds, cascading collisions to later rounds."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Set, Tuple

from pykeeper.config import KeeperSettings
from pykeeper.errors import DuplicateKeeperError, KeeperLimitError, UnresolvableCascadeError
from pykeeper.models import DraftPickOwnership, KeeperType


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SlotRequest:
    player_id: str
    keeper_type: KeeperType
    requested_round: int
    years_held: int = 0


@dataclass(frozen=True)
class CascadeResult:
    player_id: str
    roster_id: str
    keeper_type: KeeperType
    requested_round: int
    assigned_round: int
    was_cascaded: bool
    reason: str = ""


def _type_rank(keeper_type: KeeperType) -> int:
    if keeper_type is KeeperType.FRANCHISE:
        return 0
    if keeper_type is KeeperType.REGULAR:
        return 1
    raise ValueError(f"Unhandled keeper type {keeper_type!r}")


def _sort_key(request: SlotRequest) -> Tuple[int, int, int, str]:
    return (request.requested_round, _type_rank(request.keeper_type), -request.years_held, request.player_id)


def owned_rounds_for(
    roster_id: str,
    season: int,
    draft_rounds: int,
    picks: Iterable[DraftPickOwnership],
) -> Tuple[int, ...]:
    """Rounds a roster controls: its own 1..N minus traded-away picks plus acquired ones."""

    counts: Counter[int] = Counter({round_no: 1 for round_no in range(1, draft_rounds + 1)})
    for pick in picks:
        if pick.season != season or pick.original_owner_roster_id == pick.current_owner_roster_id:
            continue
        if pick.original_owner_roster_id == roster_id:
            counts[pick.round] -= 1
        if pick.current_owner_roster_id == roster_id:
            counts[pick.round] += 1
    return tuple(sorted(round_no for round_no, count in counts.items() if count > 0))


def validate_limits(roster_id: str, requests: Sequence[SlotRequest], settings: KeeperSettings) -> None:
    """Reject keeper sets that break league limits before any slot is claimed."""

    seen: Set[str] = set()
    for request in requests:
        if request.player_id in seen:
            raise DuplicateKeeperError(roster_id, request.player_id)
        seen.add(request.player_id)

    if len(requests) > settings.max_keepers:
        raise KeeperLimitError(roster_id, "max_keepers", settings.max_keepers, len(requests))
    franchise = sum(1 for request in requests if request.keeper_type is KeeperType.FRANCHISE)
    if franchise > settings.max_franchise_tags:
        raise KeeperLimitError(roster_id, "max_franchise_tags", settings.max_franchise_tags, franchise)
    regular = sum(1 for request in requests if request.keeper_type is KeeperType.REGULAR)
    if regular > settings.max_regular_keepers:
        raise KeeperLimitError(roster_id, "max_regular_keepers", settings.max_regular_keepers, regular)


def _claim(
    roster_id: str,
    request: SlotRequest,
    inventory: Sequence[int],
    claimed: Set[int],
    settings: KeeperSettings,
) -> CascadeResult:
    wanted = request.requested_round
    if wanted in inventory and wanted not in claimed:
        claimed.add(wanted)
        return CascadeResult(
            player_id=request.player_id,
            roster_id=roster_id,
            keeper_type=request.keeper_type,
            requested_round=wanted,
            assigned_round=wanted,
            was_cascaded=False,
        )

    assigned = next((round_no for round_no in inventory if round_no > wanted and round_no not in claimed), None)
    if assigned is None:
        logger.info(
            "Roster %s cannot place %s: rounds after %s exhausted (owned=%s, claimed=%s)",
            roster_id,
            request.player_id,
            wanted,
            list(inventory),
            sorted(claimed),
        )
        raise UnresolvableCascadeError(roster_id, request.player_id, wanted)

    if wanted in claimed:
        reason = f"round {wanted} occupied, moved to {assigned}"
    elif wanted < settings.minimum_round:
        reason = f"round {wanted} below minimum round {settings.minimum_round}, moved to {assigned}"
    else:
        reason = f"round {wanted} not owned, moved to {assigned}"
    claimed.add(assigned)
    return CascadeResult(
        player_id=request.player_id,
        roster_id=roster_id,
        keeper_type=request.keeper_type,
        requested_round=wanted,
        assigned_round=assigned,
        was_cascaded=True,
        reason=reason,
    )


def resolve_slots(
    roster_id: str,
    requests: Sequence[SlotRequest],
    owned_rounds: Iterable[int],
    settings: KeeperSettings,
) -> Tuple[CascadeResult, ...]:
    """Assign every request to a distinct owned round.

    Franchise tags claim first, cascading only among themselves; regular
    keepers then take what is left. Within each pass requests are processed in
    ``(round, seniority, player id)`` order so the output never depends on
    input order. A request keeps its round when that round is owned, free and
    at least ``minimum_round``; otherwise it moves to the first later round
    that is. Rounds only ever move later, and a regular keeper never displaces
    a franchise tag.
    """

    validate_limits(roster_id, requests, settings)

    inventory = sorted({round_no for round_no in owned_rounds if round_no >= settings.minimum_round})
    claimed: Set[int] = set()
    ordered = sorted(requests, key=_sort_key)
    franchise = [request for request in ordered if request.keeper_type is KeeperType.FRANCHISE]
    regular = [request for request in ordered if request.keeper_type is KeeperType.REGULAR]

    results: List[CascadeResult] = []
    for request in (*franchise, *regular):
        results.append(_claim(roster_id, request, inventory, claimed, settings))
    return tuple(results)
