"""Load and write league snapshot JSON files."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional, Sequence

from pykeeper.config import KeeperSettings, default_settings
from pykeeper.models import AcquisitionEvent, LeagueSnapshot


logger = logging.getLogger(__name__)


def with_process_defaults(snapshot: LeagueSnapshot) -> LeagueSnapshot:
    """Give a snapshot without explicit settings the process defaults, environment included."""

    if "settings" in snapshot.model_fields_set:
        return snapshot
    return snapshot.model_copy(update={"settings": default_settings()})


def load_snapshot(
    path: Path,
    *,
    settings: Optional[KeeperSettings] = None,
    extra_events: Sequence[AcquisitionEvent] = (),
) -> LeagueSnapshot:
    """Read a snapshot file, optionally overriding its settings and appending events."""

    data = json.loads(path.read_text(encoding="utf-8"))
    snapshot = with_process_defaults(LeagueSnapshot.model_validate(data))
    update: dict[str, object] = {}
    if settings is not None:
        update["settings"] = settings
    if extra_events:
        update["events"] = [*snapshot.events, *extra_events]
    if update:
        snapshot = snapshot.model_copy(update=update)
    logger.debug(
        "Loaded snapshot %s season %s: %s rosters, %s events, %s keepers",
        snapshot.league_id,
        snapshot.season,
        len(snapshot.rosters),
        len(snapshot.events),
        len(snapshot.keepers),
    )
    return snapshot


def dump_snapshot(snapshot: LeagueSnapshot, path: Path) -> None:
    payload = snapshot.model_dump(mode="json")
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
