"""Pure composition of origin, cost and slot resolution over a league snapshot."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from pykeeper.errors import FranchiseTagRequiredError, UnknownPlayerError
from pykeeper.history import InMemoryHistory, OwnershipHistory
from pykeeper.models import KeeperIntent, KeeperSelection, KeeperType, LeagueSnapshot

from .cascade import SlotRequest, owned_rounds_for, resolve_slots, validate_limits
from .cost import KeeperCost, compute_cost, project_costs
from .origin import DataQualityWarning, Origin, resolve_origin


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KeeperQuote:
    player_id: str
    roster_id: str
    season: int
    origin: Origin
    cost: KeeperCost
    projections: Tuple[KeeperCost, ...] = ()

    @property
    def warnings(self) -> Tuple[DataQualityWarning, ...]:
        return self.origin.warnings


@dataclass(frozen=True)
class ResolvedKeeper:
    player_id: str
    roster_id: str
    keeper_type: KeeperType
    base_cost: int
    requested_round: int
    final_cost: int
    years_held: int
    cascaded: bool
    cascade_reason: str = ""

    def to_intent(self, season: int, *, is_locked: bool = False) -> KeeperIntent:
        return KeeperIntent(
            player_id=self.player_id,
            roster_id=self.roster_id,
            season=season,
            keeper_type=self.keeper_type,
            base_cost=self.base_cost,
            final_cost=self.final_cost,
            years_held=self.years_held,
            is_locked=is_locked,
        )


@dataclass(frozen=True)
class RosterResolution:
    roster_id: str
    season: int
    keepers: Tuple[ResolvedKeeper, ...]
    owned_rounds: Tuple[int, ...]
    warnings: Tuple[DataQualityWarning, ...] = ()

    @property
    def total_slots_taken(self) -> int:
        return len(self.keepers)

    @property
    def available_rounds(self) -> Tuple[int, ...]:
        taken = {keeper.final_cost for keeper in self.keepers}
        return tuple(round_no for round_no in self.owned_rounds if round_no not in taken)

    @property
    def available_slots(self) -> int:
        return len(self.available_rounds)

    def keeper(self, player_id: str) -> Optional[ResolvedKeeper]:
        for keeper in self.keepers:
            if keeper.player_id == player_id:
                return keeper
        return None


# A simulation returns exactly what the persisted path would store.
SimulationResult = RosterResolution


@dataclass(frozen=True)
class EligibleKeeper:
    quote: KeeperQuote
    eligible: bool
    keeper_types: Tuple[KeeperType, ...]
    reason: str
    existing: Optional[KeeperIntent] = None

    @property
    def player_id(self) -> str:
        return self.quote.player_id


@dataclass(frozen=True)
class RosterEligibility:
    roster_id: str
    season: int
    players: Tuple[EligibleKeeper, ...]
    franchise_count: int
    regular_count: int
    can_add_franchise: bool
    can_add_regular: bool
    can_add_any: bool

    @property
    def total_count(self) -> int:
        return self.franchise_count + self.regular_count


class KeeperEngine:
    """Keeper rules evaluated against one immutable league snapshot.

    Every method is side-effect free; the persisted path and what-if
    simulations both go through :meth:`resolve_roster`.
    """

    def __init__(self, snapshot: LeagueSnapshot, history: Optional[OwnershipHistory] = None):
        self.snapshot = snapshot
        self.settings = snapshot.settings
        self.season = snapshot.season
        self._history = history if history is not None else InMemoryHistory(snapshot.events)

    def quote(
        self,
        player_id: str,
        roster_id: str,
        *,
        season: Optional[int] = None,
        years: int = 0,
    ) -> KeeperQuote:
        target = self.season if season is None else season
        origin = resolve_origin(player_id, roster_id, target, self._history, self.settings)
        cost = compute_cost(origin, target, self.settings)
        projections = project_costs(origin, target, years, self.settings) if years else ()
        return KeeperQuote(
            player_id=player_id,
            roster_id=roster_id,
            season=target,
            origin=origin,
            cost=cost,
            projections=projections,
        )

    def owned_rounds(self, roster_id: str) -> Tuple[int, ...]:
        return owned_rounds_for(roster_id, self.season, self.snapshot.draft_rounds, self.snapshot.draft_picks)

    def persisted_selections(self, roster_id: str) -> List[KeeperSelection]:
        return [intent.to_selection() for intent in self.snapshot.keepers_for(roster_id)]

    def selections_with_changes(
        self,
        roster_id: str,
        *,
        add: Iterable[KeeperSelection] = (),
        remove: Iterable[str] = (),
    ) -> List[KeeperSelection]:
        """Persisted keepers with ``remove`` dropped and ``add`` applied.

        Adding a player that is already kept substitutes its keeper type.
        """

        removed = set(remove)
        additions = {selection.player_id: selection for selection in add}
        selections: List[KeeperSelection] = []
        for selection in self.persisted_selections(roster_id):
            if selection.player_id in removed:
                continue
            selections.append(additions.pop(selection.player_id, selection))
        selections.extend(selection for selection in additions.values() if selection.player_id not in removed)
        return selections

    def _check_rostered(self, roster_id: str, selections: Sequence[KeeperSelection]) -> None:
        roster = self.snapshot.roster(roster_id)
        if roster is None or not roster.player_ids:
            return
        rostered = set(roster.player_ids)
        for selection in selections:
            if selection.player_id not in rostered:
                raise UnknownPlayerError(roster_id, selection.player_id)

    def resolve_roster(
        self,
        roster_id: str,
        selections: Sequence[KeeperSelection],
        *,
        require_rostered: bool = True,
    ) -> RosterResolution:
        if require_rostered:
            self._check_rostered(roster_id, selections)

        quotes = {selection.player_id: self.quote(selection.player_id, roster_id) for selection in selections}
        requests: List[SlotRequest] = []
        franchise_required: Optional[FranchiseTagRequiredError] = None
        for selection in selections:
            cost = quotes[selection.player_id].cost
            option = cost.option(selection.keeper_type)
            if not option.eligible and franchise_required is None:
                franchise_required = FranchiseTagRequiredError(
                    roster_id, selection.player_id, cost.years_held, self.settings.regular_keeper_max_years
                )
            requests.append(
                SlotRequest(
                    player_id=selection.player_id,
                    keeper_type=selection.keeper_type,
                    requested_round=option.final_cost,
                    years_held=cost.years_held,
                )
            )

        validate_limits(roster_id, requests, self.settings)
        if franchise_required is not None:
            raise franchise_required

        owned = self.owned_rounds(roster_id)
        slots = resolve_slots(roster_id, requests, owned, self.settings)

        keepers = []
        warnings: List[DataQualityWarning] = []
        for slot in slots:
            quote = quotes[slot.player_id]
            option = quote.cost.option(slot.keeper_type)
            warnings.extend(quote.warnings)
            keepers.append(
                ResolvedKeeper(
                    player_id=slot.player_id,
                    roster_id=roster_id,
                    keeper_type=slot.keeper_type,
                    base_cost=option.base_cost,
                    requested_round=slot.requested_round,
                    final_cost=slot.assigned_round,
                    years_held=quote.cost.years_held,
                    cascaded=slot.was_cascaded,
                    cascade_reason=slot.reason,
                )
            )
        return RosterResolution(
            roster_id=roster_id,
            season=self.season,
            keepers=tuple(keepers),
            owned_rounds=owned,
            warnings=tuple(warnings),
        )

    def simulate(self, roster_id: str, selections: Sequence[KeeperSelection]) -> SimulationResult:
        """What-if resolution for a caller-supplied keeper list; writes nothing."""

        result = self.resolve_roster(roster_id, selections)
        logger.debug(
            "Simulated %s keepers for roster %s in %s (%s cascaded)",
            result.total_slots_taken,
            roster_id,
            self.season,
            sum(1 for keeper in result.keepers if keeper.cascaded),
        )
        return result

    def eligible_keepers(self, roster_id: str) -> RosterEligibility:
        """Every rostered or already kept player with its cost and allowed keeper types.

        Eligible players come first, cheapest round first.
        """

        settings = self.settings
        kept = {intent.player_id: intent for intent in self.snapshot.keepers_for(roster_id)}
        roster = self.snapshot.roster(roster_id)
        player_ids = list(dict.fromkeys([*(roster.player_ids if roster else ()), *kept]))
        franchise_count = sum(1 for intent in kept.values() if intent.keeper_type is KeeperType.FRANCHISE)
        regular_count = len(kept) - franchise_count

        players: List[EligibleKeeper] = []
        for player_id in player_ids:
            quote = self.quote(player_id, roster_id)
            existing = kept.get(player_id)
            # A keeper changing type frees its own franchise tag.
            tags_used = franchise_count - int(existing is not None and existing.keeper_type is KeeperType.FRANCHISE)
            keeper_types: List[KeeperType] = []
            if quote.cost.regular.eligible:
                keeper_types.append(KeeperType.REGULAR)
            if tags_used < settings.max_franchise_tags:
                keeper_types.append(KeeperType.FRANCHISE)

            if not keeper_types:
                reason = "franchise tag required and no franchise tags left"
            elif quote.cost.must_franchise_tag:
                reason = "franchise tag required"
            elif quote.cost.years_held == 0:
                reason = "first season held"
            else:
                reason = f"held {quote.cost.years_held} of {settings.regular_keeper_max_years} regular seasons"
            players.append(
                EligibleKeeper(
                    quote=quote,
                    eligible=bool(keeper_types),
                    keeper_types=tuple(keeper_types),
                    reason=reason,
                    existing=existing,
                )
            )

        players.sort(key=lambda item: (not item.eligible, item.quote.cost.regular.final_cost, item.player_id))
        return RosterEligibility(
            roster_id=roster_id,
            season=self.season,
            players=tuple(players),
            franchise_count=franchise_count,
            regular_count=regular_count,
            can_add_franchise=franchise_count < settings.max_franchise_tags,
            can_add_regular=regular_count < settings.max_regular_keepers,
            can_add_any=len(kept) < settings.max_keepers,
        )


def simulate(
    snapshot: LeagueSnapshot,
    roster_id: str,
    selections: Sequence[KeeperSelection],
) -> SimulationResult:
    return KeeperEngine(snapshot).simulate(roster_id, selections)
