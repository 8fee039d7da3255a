"""Persistence layer for league snapshots, keeper intents and their audit trail."""

from __future__ import annotations

import json
import os
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional

from pykeeper.engine import RecalculationReport
from pykeeper.errors import KeeperLockedError
from pykeeper.models import KeeperIntent, KeeperType, LeagueSnapshot


@dataclass
class SnapshotRecord:
    league_id: str
    season: int
    created_at: datetime
    updated_at: datetime


@dataclass
class AuditRecord:
    audit_id: int
    league_id: str
    season: int
    roster_id: str
    player_id: str
    action: str
    old_cost: Optional[int]
    new_cost: Optional[int]
    message: Optional[str]
    created_at: datetime


class KeeperStore:
    """SQLite-backed store for keeper intents and the snapshots they are resolved against."""

    def __init__(self, db_path: Path | str):
        self._use_uri = False
        env_db = os.getenv("PYKEEPER_DB_PATH")
        raw = env_db or db_path
        if isinstance(raw, str) and raw.startswith("file:"):
            self.db_path: Path | str = raw
            self._use_uri = True
        else:
            self.db_path = Path(raw)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.db_path)
        else:
            conn = sqlite3.connect(self.db_path, uri=self._use_uri)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            self._create_schema(conn)

    def _create_schema(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS snapshots (
                league_id TEXT PRIMARY KEY,
                season INTEGER NOT NULL,
                payload_json TEXT NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS keepers (
                league_id TEXT NOT NULL,
                season INTEGER NOT NULL,
                roster_id TEXT NOT NULL,
                player_id TEXT NOT NULL,
                keeper_type TEXT NOT NULL,
                base_cost INTEGER NOT NULL,
                final_cost INTEGER NOT NULL,
                years_held INTEGER NOT NULL,
                is_locked INTEGER NOT NULL DEFAULT 0,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                PRIMARY KEY (league_id, season, roster_id, player_id)
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS keeper_audit (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                league_id TEXT NOT NULL,
                season INTEGER NOT NULL,
                roster_id TEXT NOT NULL,
                player_id TEXT NOT NULL,
                action TEXT NOT NULL,
                old_cost INTEGER,
                new_cost INTEGER,
                message TEXT,
                created_at TEXT NOT NULL
            )
            """
        )
        conn.commit()

    def save_snapshot(self, snapshot: LeagueSnapshot) -> SnapshotRecord:
        """Store a snapshot; any keepers it carries replace the stored ones for its season."""

        now = datetime.now(timezone.utc).isoformat()
        payload = snapshot.model_dump(mode="json", exclude={"keepers"})
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO snapshots (league_id, season, payload_json, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(league_id) DO UPDATE SET
                    season = excluded.season,
                    payload_json = excluded.payload_json,
                    updated_at = excluded.updated_at
                """,
                (snapshot.league_id, snapshot.season, json.dumps(payload), now, now),
            )
            if snapshot.keepers:
                conn.execute(
                    "DELETE FROM keepers WHERE league_id = ? AND season = ?",
                    (snapshot.league_id, snapshot.season),
                )
                for intent in snapshot.keepers:
                    self._insert_keeper(conn, snapshot.league_id, intent, now)
                    self._audit(conn, snapshot.league_id, intent, "import", None, intent.final_cost, None, now)
            conn.commit()
        record = self.get_snapshot_record(snapshot.league_id)
        if record is None:  # pragma: no cover
            raise KeyError(f"Snapshot {snapshot.league_id} not found after insert")
        return record

    def get_snapshot_record(self, league_id: str) -> Optional[SnapshotRecord]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT league_id, season, created_at, updated_at FROM snapshots WHERE league_id = ?",
                (league_id,),
            ).fetchone()
        if row is None:
            return None
        return SnapshotRecord(
            league_id=row["league_id"],
            season=row["season"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    def load_snapshot(self, league_id: str) -> Optional[LeagueSnapshot]:
        """Stored snapshot with the currently persisted keepers of its season."""

        with self._connect() as conn:
            row = conn.execute("SELECT * FROM snapshots WHERE league_id = ?", (league_id,)).fetchone()
            if row is None:
                return None
            keeper_rows = conn.execute(
                "SELECT * FROM keepers WHERE league_id = ? AND season = ? ORDER BY roster_id, player_id",
                (league_id, row["season"]),
            ).fetchall()
        payload = json.loads(row["payload_json"])
        payload["keepers"] = [self._row_to_intent(keeper_row).model_dump(mode="json") for keeper_row in keeper_rows]
        return LeagueSnapshot.model_validate(payload)

    def list_keepers(self, league_id: str, season: int, roster_id: Optional[str] = None) -> List[KeeperIntent]:
        query = "SELECT * FROM keepers WHERE league_id = ? AND season = ?"
        params: list[str | int] = [league_id, season]
        if roster_id:
            query += " AND roster_id = ?"
            params.append(roster_id)
        query += " ORDER BY roster_id, final_cost, player_id"
        with self._connect() as conn:
            rows = conn.execute(query, tuple(params)).fetchall()
        return [self._row_to_intent(row) for row in rows]

    def get_keeper(self, league_id: str, season: int, roster_id: str, player_id: str) -> Optional[KeeperIntent]:
        with self._connect() as conn:
            row = conn.execute(
                """
                SELECT * FROM keepers
                WHERE league_id = ? AND season = ? AND roster_id = ? AND player_id = ?
                """,
                (league_id, season, roster_id, player_id),
            ).fetchone()
        return self._row_to_intent(row) if row is not None else None

    def replace_roster_keepers(
        self,
        league_id: str,
        season: int,
        roster_id: str,
        intents: Iterable[KeeperIntent],
        *,
        action: str,
        message: Optional[str] = None,
    ) -> List[KeeperIntent]:
        """Write the full keeper set of one roster in a single transaction."""

        now = datetime.now(timezone.utc).isoformat()
        intents = list(intents)
        with self._connect() as conn:
            existing = {
                row["player_id"]: self._row_to_intent(row)
                for row in conn.execute(
                    "SELECT * FROM keepers WHERE league_id = ? AND season = ? AND roster_id = ?",
                    (league_id, season, roster_id),
                ).fetchall()
            }
            keep_ids = {intent.player_id for intent in intents}
            for player_id, previous in existing.items():
                if player_id in keep_ids:
                    continue
                if previous.is_locked:
                    raise KeeperLockedError(roster_id, player_id)
                conn.execute(
                    """
                    DELETE FROM keepers
                    WHERE league_id = ? AND season = ? AND roster_id = ? AND player_id = ?
                    """,
                    (league_id, season, roster_id, player_id),
                )
                self._audit(conn, league_id, previous, "remove", previous.final_cost, None, message, now)
            for intent in intents:
                previous = existing.get(intent.player_id)
                if previous is None:
                    self._insert_keeper(conn, league_id, intent, now)
                    self._audit(conn, league_id, intent, action, None, intent.final_cost, message, now)
                    continue
                if previous == intent:
                    continue
                self._update_keeper(conn, league_id, intent, now)
                self._audit(conn, league_id, intent, action, previous.final_cost, intent.final_cost, message, now)
            conn.commit()
        return self.list_keepers(league_id, season, roster_id)

    def upsert_keeper(
        self,
        league_id: str,
        intent: KeeperIntent,
        *,
        action: str,
        message: Optional[str] = None,
    ) -> KeeperIntent:
        """Write one keeper exactly as given, without re-resolving its roster."""

        previous = self.get_keeper(league_id, intent.season, intent.roster_id, intent.player_id)
        now = datetime.now(timezone.utc).isoformat()
        with self._connect() as conn:
            if previous is None:
                self._insert_keeper(conn, league_id, intent, now)
            else:
                self._update_keeper(conn, league_id, intent, now)
            old_cost = previous.final_cost if previous is not None else None
            self._audit(conn, league_id, intent, action, old_cost, intent.final_cost, message, now)
            conn.commit()
        return intent

    def delete_keeper(
        self,
        league_id: str,
        season: int,
        roster_id: str,
        player_id: str,
        *,
        action: str = "remove",
        message: Optional[str] = None,
        force: bool = False,
    ) -> KeeperIntent:
        """Remove one keeper row; ``force`` also removes a locked keeper."""

        keeper = self.get_keeper(league_id, season, roster_id, player_id)
        if keeper is None:
            raise KeyError(f"Keeper {player_id} not found on roster {roster_id}")
        if keeper.is_locked and not force:
            raise KeeperLockedError(roster_id, player_id)
        now = datetime.now(timezone.utc).isoformat()
        with self._connect() as conn:
            conn.execute(
                "DELETE FROM keepers WHERE league_id = ? AND season = ? AND roster_id = ? AND player_id = ?",
                (league_id, season, roster_id, player_id),
            )
            self._audit(conn, league_id, keeper, action, keeper.final_cost, None, message, now)
            conn.commit()
        return keeper

    def set_locked(self, league_id: str, season: int, roster_id: str, player_id: str, locked: bool) -> KeeperIntent:
        keeper = self.get_keeper(league_id, season, roster_id, player_id)
        if keeper is None:
            raise KeyError(f"Keeper {player_id} not found on roster {roster_id}")
        now = datetime.now(timezone.utc).isoformat()
        with self._connect() as conn:
            conn.execute(
                """
                UPDATE keepers SET is_locked = ?, updated_at = ?
                WHERE league_id = ? AND season = ? AND roster_id = ? AND player_id = ?
                """,
                (int(locked), now, league_id, season, roster_id, player_id),
            )
            self._audit(
                conn,
                league_id,
                keeper,
                "lock" if locked else "unlock",
                keeper.final_cost,
                keeper.final_cost,
                None,
                now,
            )
            conn.commit()
        updated = self.get_keeper(league_id, season, roster_id, player_id)
        if updated is None:  # pragma: no cover
            raise KeyError(f"Keeper {player_id} not found after update")
        return updated

    def apply_recalculation(self, league_id: str, report: RecalculationReport) -> int:
        """Write every UPDATED delta of a sweep; returns the number of rows changed."""

        now = datetime.now(timezone.utc).isoformat()
        changed = 0
        with self._connect() as conn:
            for delta in report.updated:
                cursor = conn.execute(
                    """
                    UPDATE keepers
                    SET final_cost = ?, base_cost = ?, years_held = ?, updated_at = ?
                    WHERE league_id = ? AND season = ? AND roster_id = ? AND player_id = ?
                    """,
                    (
                        delta.new_cost,
                        delta.base_cost,
                        delta.years_held,
                        now,
                        league_id,
                        delta.season,
                        delta.roster_id,
                        delta.player_id,
                    ),
                )
                if cursor.rowcount:
                    changed += cursor.rowcount
                    conn.execute(
                        """
                        INSERT INTO keeper_audit (
                            league_id, season, roster_id, player_id, action,
                            old_cost, new_cost, message, created_at
                        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                        """,
                        (
                            league_id,
                            delta.season,
                            delta.roster_id,
                            delta.player_id,
                            "recalculate",
                            delta.old_cost,
                            delta.new_cost,
                            None,
                            now,
                        ),
                    )
            conn.commit()
        return changed

    def list_audit(self, league_id: str, limit: int = 50) -> List[AuditRecord]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM keeper_audit WHERE league_id = ? ORDER BY id DESC LIMIT ?",
                (league_id, limit),
            ).fetchall()
        return [self._row_to_audit(row) for row in rows]

    def _insert_keeper(self, conn: sqlite3.Connection, league_id: str, intent: KeeperIntent, now: str) -> None:
        conn.execute(
            """
            INSERT INTO keepers (
                league_id, season, roster_id, player_id, keeper_type, base_cost,
                final_cost, years_held, is_locked, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                league_id,
                intent.season,
                intent.roster_id,
                intent.player_id,
                intent.keeper_type.value,
                intent.base_cost,
                intent.final_cost,
                intent.years_held,
                int(intent.is_locked),
                now,
                now,
            ),
        )

    def _update_keeper(self, conn: sqlite3.Connection, league_id: str, intent: KeeperIntent, now: str) -> None:
        conn.execute(
            """
            UPDATE keepers
            SET keeper_type = ?, base_cost = ?, final_cost = ?, years_held = ?,
                is_locked = ?, updated_at = ?
            WHERE league_id = ? AND season = ? AND roster_id = ? AND player_id = ?
            """,
            (
                intent.keeper_type.value,
                intent.base_cost,
                intent.final_cost,
                intent.years_held,
                int(intent.is_locked),
                now,
                league_id,
                intent.season,
                intent.roster_id,
                intent.player_id,
            ),
        )

    def _audit(
        self,
        conn: sqlite3.Connection,
        league_id: str,
        intent: KeeperIntent,
        action: str,
        old_cost: Optional[int],
        new_cost: Optional[int],
        message: Optional[str],
        now: str,
    ) -> None:
        conn.execute(
            """
            INSERT INTO keeper_audit (
                league_id, season, roster_id, player_id, action,
                old_cost, new_cost, message, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                league_id,
                intent.season,
                intent.roster_id,
                intent.player_id,
                action,
                old_cost,
                new_cost,
                message,
                now,
            ),
        )

    def _row_to_intent(self, row: sqlite3.Row) -> KeeperIntent:
        return KeeperIntent(
            player_id=row["player_id"],
            roster_id=row["roster_id"],
            season=row["season"],
            keeper_type=KeeperType(row["keeper_type"]),
            base_cost=row["base_cost"],
            final_cost=row["final_cost"],
            years_held=row["years_held"],
            is_locked=bool(row["is_locked"]),
        )

    def _row_to_audit(self, row: sqlite3.Row) -> AuditRecord:
        return AuditRecord(
            audit_id=row["id"],
            league_id=row["league_id"],
            season=row["season"],
            roster_id=row["roster_id"],
            player_id=row["player_id"],
            action=row["action"],
            old_cost=row["old_cost"],
            new_cost=row["new_cost"],
            message=row["message"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )
