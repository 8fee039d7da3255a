"""Persisted keeper commits, serialized per roster."""

from __future__ import annotations

import logging
import threading
from contextlib import ExitStack
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from pykeeper.engine import (
    KeeperEngine,
    KeeperQuote,
    RecalculationReport,
    RosterEligibility,
    RosterResolution,
    SimulationResult,
    recalculate_all,
)
from pykeeper.errors import KeeperLockedError, KeeperOverrideError
from pykeeper.models import KeeperIntent, KeeperSelection, KeeperType, LeagueSnapshot, OverrideAction
from pykeeper.persistence import KeeperStore, SnapshotRecord


logger = logging.getLogger("uvicorn.error")
logger.setLevel(logging.INFO)

_LockKey = Tuple[str, int, str]


class KeeperService:
    """Commits keeper changes through the same resolution path used by simulations.

    Every write for a ``(league, season, roster)`` happens under one lock: the
    snapshot and persisted keepers are reloaded, the whole roster is re-resolved,
    and every intent of the roster is written in a single transaction.
    """

    def __init__(self, store: KeeperStore):
        self.store = store
        self._locks: Dict[_LockKey, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def _roster_lock(self, league_id: str, season: int, roster_id: str) -> threading.Lock:
        key = (league_id, season, roster_id)
        with self._registry_lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    def snapshot(self, league_id: str) -> LeagueSnapshot:
        snapshot = self.store.load_snapshot(league_id)
        if snapshot is None:
            raise KeyError(f"League {league_id} not found")
        return snapshot

    def store_snapshot(self, snapshot: LeagueSnapshot) -> SnapshotRecord:
        """Replace a league snapshot once no roster of the old or new season is mid-commit."""

        keys = {(snapshot.season, roster_id) for roster_id in snapshot.roster_ids()}
        current = self.store.load_snapshot(snapshot.league_id)
        if current is not None:
            keys.update((current.season, roster_id) for roster_id in current.roster_ids())
        with ExitStack() as stack:
            for season, roster_id in sorted(keys):
                stack.enter_context(self._roster_lock(snapshot.league_id, season, roster_id))
            record = self.store.save_snapshot(snapshot)
        logger.info(
            "Stored snapshot for league %s season %s (%s rosters, %s events)",
            snapshot.league_id,
            snapshot.season,
            len(snapshot.rosters),
            len(snapshot.events),
        )
        return record

    def quote(self, league_id: str, player_id: str, roster_id: str, *, years: int = 0) -> KeeperQuote:
        return KeeperEngine(self.snapshot(league_id)).quote(player_id, roster_id, years=years)

    def simulate(self, league_id: str, roster_id: str, selections: Sequence[KeeperSelection]) -> SimulationResult:
        snapshot = self.snapshot(league_id)
        self._require_roster(snapshot, roster_id)
        return KeeperEngine(snapshot).simulate(roster_id, selections)

    def eligible_keepers(self, league_id: str, roster_id: str) -> RosterEligibility:
        snapshot = self.snapshot(league_id)
        self._require_roster(snapshot, roster_id)
        return KeeperEngine(snapshot).eligible_keepers(roster_id)

    def list_keepers(self, league_id: str, roster_id: str) -> List[KeeperIntent]:
        snapshot = self.snapshot(league_id)
        self._require_roster(snapshot, roster_id)
        return self.store.list_keepers(league_id, snapshot.season, roster_id)

    def add_keeper(self, league_id: str, roster_id: str, selection: KeeperSelection) -> RosterResolution:
        """Add or re-type a keeper; the roster's other keepers may cascade as a result."""

        season = self._season(league_id)
        with self._roster_lock(league_id, season, roster_id):
            snapshot = self.snapshot(league_id)
            self._require_roster(snapshot, roster_id)
            existing = {intent.player_id: intent for intent in snapshot.keepers_for(roster_id)}
            current = existing.get(selection.player_id)
            if current is not None and current.is_locked and current.keeper_type != selection.keeper_type:
                raise KeeperLockedError(roster_id, selection.player_id)
            engine = KeeperEngine(snapshot)
            selections = engine.selections_with_changes(roster_id, add=[selection])
            resolution = engine.resolve_roster(roster_id, selections)
            self._write(snapshot, roster_id, resolution, existing, action="add")
        logger.info(
            "Committed keeper %s for roster %s in league %s (%s keepers on roster)",
            selection.player_id,
            roster_id,
            league_id,
            resolution.total_slots_taken,
        )
        return resolution

    def remove_keeper(self, league_id: str, roster_id: str, player_id: str) -> RosterResolution:
        season = self._season(league_id)
        with self._roster_lock(league_id, season, roster_id):
            snapshot = self.snapshot(league_id)
            existing = {intent.player_id: intent for intent in snapshot.keepers_for(roster_id)}
            current = existing.get(player_id)
            if current is None:
                raise KeyError(f"Keeper {player_id} not found on roster {roster_id}")
            if current.is_locked:
                raise KeeperLockedError(roster_id, player_id)
            engine = KeeperEngine(snapshot)
            selections = engine.selections_with_changes(roster_id, remove=[player_id])
            resolution = engine.resolve_roster(roster_id, selections, require_rostered=False)
            self._write(snapshot, roster_id, resolution, existing, action="remove")
        logger.info("Removed keeper %s from roster %s in league %s", player_id, roster_id, league_id)
        return resolution

    def override_keeper(
        self,
        league_id: str,
        roster_id: str,
        player_id: str,
        *,
        action: OverrideAction,
        reason: str,
        keeper_type: Optional[KeeperType] = None,
        final_cost: Optional[int] = None,
    ) -> Optional[KeeperIntent]:
        """Commissioner correction written exactly as given.

        Overrides skip eligibility checks, slot resolution and keeper locks.
        ``reason`` is required and is stored as the audit message. Returns the
        written keeper, or ``None`` for a removal.
        """

        reason = reason.strip()
        if not reason:
            raise KeeperOverrideError("An override requires a reason")

        season = self._season(league_id)
        with self._roster_lock(league_id, season, roster_id):
            snapshot = self.snapshot(league_id)
            self._require_roster(snapshot, roster_id)
            if final_cost is not None and not 1 <= final_cost <= snapshot.draft_rounds:
                raise KeeperOverrideError(
                    f"Final cost {final_cost} is outside rounds 1-{snapshot.draft_rounds}"
                )
            current = self.store.get_keeper(league_id, season, roster_id, player_id)

            if action is OverrideAction.ADD:
                if current is not None:
                    raise KeeperOverrideError(f"Player {player_id} is already a keeper on roster {roster_id}")
                chosen = keeper_type or KeeperType.REGULAR
                cost = KeeperEngine(snapshot).quote(player_id, roster_id).cost
                option = cost.option(chosen)
                intent: Optional[KeeperIntent] = KeeperIntent(
                    player_id=player_id,
                    roster_id=roster_id,
                    season=season,
                    keeper_type=chosen,
                    base_cost=option.base_cost,
                    final_cost=final_cost or option.final_cost,
                    years_held=cost.years_held,
                )
                self.store.upsert_keeper(league_id, intent, action="override-add", message=reason)
            elif current is None:
                raise KeyError(f"Keeper {player_id} not found on roster {roster_id}")
            elif action is OverrideAction.REMOVE:
                self.store.delete_keeper(
                    league_id,
                    season,
                    roster_id,
                    player_id,
                    action="override-remove",
                    message=reason,
                    force=True,
                )
                intent = None
            else:
                if keeper_type is None and final_cost is None:
                    raise KeeperOverrideError("An update override needs a keeper type or a final cost")
                intent = current.model_copy(
                    update={
                        "keeper_type": keeper_type or current.keeper_type,
                        "final_cost": final_cost or current.final_cost,
                    }
                )
                self.store.upsert_keeper(league_id, intent, action="override-update", message=reason)
        logger.info(
            "Override %s for keeper %s on roster %s in league %s: %s",
            action.value,
            player_id,
            roster_id,
            league_id,
            reason,
        )
        return intent

    def set_locked(self, league_id: str, roster_id: str, player_id: str, locked: bool) -> KeeperIntent:
        season = self._season(league_id)
        with self._roster_lock(league_id, season, roster_id):
            intent = self.store.set_locked(league_id, season, roster_id, player_id, locked)
        logger.info("%s keeper %s on roster %s", "Locked" if locked else "Unlocked", player_id, roster_id)
        return intent

    def recalculate(self, league_id: str, *, apply: bool = False) -> RecalculationReport:
        """League-wide sweep; with ``apply`` the updated costs are written back."""

        if not apply:
            return recalculate_all(self.snapshot(league_id))

        season = self._season(league_id)
        roster_ids = sorted(self.snapshot(league_id).roster_ids())
        with ExitStack() as stack:
            # Fixed acquisition order keeps concurrent sweeps from deadlocking.
            for roster_id in roster_ids:
                stack.enter_context(self._roster_lock(league_id, season, roster_id))
            snapshot = self.snapshot(league_id)
            report = recalculate_all(snapshot)
            changed = self.store.apply_recalculation(league_id, report)
        logger.info("Applied recalculation for league %s: %s keepers changed", league_id, changed)
        return report

    def _season(self, league_id: str) -> int:
        record = self.store.get_snapshot_record(league_id)
        if record is None:
            raise KeyError(f"League {league_id} not found")
        return record.season

    def _require_roster(self, snapshot: LeagueSnapshot, roster_id: str) -> None:
        if snapshot.roster(roster_id) is None:
            raise KeyError(f"Roster {roster_id} not found in league {snapshot.league_id}")

    def _write(
        self,
        snapshot: LeagueSnapshot,
        roster_id: str,
        resolution: RosterResolution,
        existing: Dict[str, KeeperIntent],
        *,
        action: str,
    ) -> None:
        intents = _intents_for(resolution, existing, snapshot.season)
        self.store.replace_roster_keepers(
            snapshot.league_id,
            snapshot.season,
            roster_id,
            intents,
            action=action,
        )


def _intents_for(
    resolution: RosterResolution,
    existing: Dict[str, KeeperIntent],
    season: int,
) -> Iterable[KeeperIntent]:
    for keeper in resolution.keepers:
        previous: Optional[KeeperIntent] = existing.get(keeper.player_id)
        yield keeper.to_intent(season, is_locked=bool(previous and previous.is_locked))
