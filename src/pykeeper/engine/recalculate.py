"""League-wide keeper cost sweep producing an immutable list of deltas."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from pykeeper.errors import KeeperError
from pykeeper.models import KeeperIntent, LeagueSnapshot

from .origin import DataQualityWarning
from .simulation import KeeperEngine


logger = logging.getLogger(__name__)


class DeltaStatus(str, Enum):
    UPDATED = "UPDATED"
    UNCHANGED = "UNCHANGED"
    FAILED = "FAILED"


@dataclass(frozen=True)
class KeeperDelta:
    player_id: str
    roster_id: str
    season: int
    status: DeltaStatus
    old_cost: int
    new_cost: Optional[int] = None
    years_held: Optional[int] = None
    base_cost: Optional[int] = None
    error: Optional[str] = None

    def apply_to(self, intent: KeeperIntent) -> KeeperIntent:
        if self.status is not DeltaStatus.UPDATED:
            return intent
        return intent.model_copy(
            update={
                "final_cost": self.new_cost,
                "base_cost": self.base_cost,
                "years_held": self.years_held,
            }
        )


@dataclass(frozen=True)
class RecalculationReport:
    league_id: str
    season: int
    entries: Tuple[KeeperDelta, ...] = ()
    warnings: Tuple[DataQualityWarning, ...] = field(default=())

    def _with_status(self, status: DeltaStatus) -> Tuple[KeeperDelta, ...]:
        return tuple(entry for entry in self.entries if entry.status is status)

    @property
    def updated(self) -> Tuple[KeeperDelta, ...]:
        return self._with_status(DeltaStatus.UPDATED)

    @property
    def unchanged(self) -> Tuple[KeeperDelta, ...]:
        return self._with_status(DeltaStatus.UNCHANGED)

    @property
    def failed(self) -> Tuple[KeeperDelta, ...]:
        return self._with_status(DeltaStatus.FAILED)


def _failed_entries(intents: List[KeeperIntent], message: str) -> List[KeeperDelta]:
    return [
        KeeperDelta(
            player_id=intent.player_id,
            roster_id=intent.roster_id,
            season=intent.season,
            status=DeltaStatus.FAILED,
            old_cost=intent.final_cost,
            error=message,
        )
        for intent in intents
    ]


def recalculate_all(snapshot: LeagueSnapshot, engine: Optional[KeeperEngine] = None) -> RecalculationReport:
    """Recompute every persisted keeper of the snapshot season.

    Rosters are resolved independently; a failure on one roster is logged and
    reported as FAILED entries without affecting the others. Nothing is
    written: apply the report with the persistence layer.
    """

    engine = engine or KeeperEngine(snapshot)
    by_roster: Dict[str, List[KeeperIntent]] = {}
    for intent in snapshot.keepers:
        if intent.season != snapshot.season:
            continue
        by_roster.setdefault(intent.roster_id, []).append(intent)

    entries: List[KeeperDelta] = []
    warnings: List[DataQualityWarning] = []
    for roster_id in sorted(by_roster):
        intents = sorted(by_roster[roster_id], key=lambda item: item.player_id)
        try:
            resolution = engine.resolve_roster(
                roster_id,
                [intent.to_selection() for intent in intents],
                require_rostered=False,
            )
        except KeeperError as exc:
            logger.warning("Recalculation failed for roster %s: %s", roster_id, exc)
            entries.extend(_failed_entries(intents, str(exc)))
            continue
        except Exception as exc:
            logger.exception("Unexpected error recalculating roster %s", roster_id)
            entries.extend(_failed_entries(intents, f"unexpected error: {exc}"))
            continue

        warnings.extend(resolution.warnings)
        for intent in intents:
            resolved = resolution.keeper(intent.player_id)
            if resolved is None:  # pragma: no cover - resolve_roster places every keeper or raises
                entries.extend(_failed_entries([intent], "keeper missing from resolution"))
                continue
            changed = (
                resolved.final_cost != intent.final_cost
                or resolved.base_cost != intent.base_cost
                or resolved.years_held != intent.years_held
            )
            entries.append(
                KeeperDelta(
                    player_id=intent.player_id,
                    roster_id=roster_id,
                    season=intent.season,
                    status=DeltaStatus.UPDATED if changed else DeltaStatus.UNCHANGED,
                    old_cost=intent.final_cost,
                    new_cost=resolved.final_cost,
                    years_held=resolved.years_held,
                    base_cost=resolved.base_cost,
                )
            )

    report = RecalculationReport(
        league_id=snapshot.league_id,
        season=snapshot.season,
        entries=tuple(entries),
        warnings=tuple(warnings),
    )
    logger.info(
        "Recalculated %s keepers for league %s season %s: %s updated, %s unchanged, %s failed",
        len(report.entries),
        snapshot.league_id,
        snapshot.season,
        len(report.updated),
        len(report.unchanged),
        len(report.failed),
    )
    return report


def apply_report(snapshot: LeagueSnapshot, report: RecalculationReport) -> LeagueSnapshot:
    """Snapshot with every UPDATED delta applied to its persisted keeper."""

    deltas = {(entry.roster_id, entry.player_id, entry.season): entry for entry in report.updated}
    keepers = []
    for intent in snapshot.keepers:
        delta = deltas.get((intent.roster_id, intent.player_id, intent.season))
        keepers.append(delta.apply_to(intent) if delta else intent)
    return snapshot.with_keepers(keepers)
