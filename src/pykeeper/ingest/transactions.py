"""Helpers to load ownership-history CSV exports and emit acquisition events."""

from __future__ import annotations

import csv
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Mapping, Optional, Sequence, Tuple

from pydantic import BaseModel

from pykeeper.models import AcquisitionEvent, EventKind


logger = logging.getLogger(__name__)

DEFAULT_TRANSACTION_MAPPING = {
    "player_id": "player_id",
    "roster_id": "roster_id",
    "kind": "kind",
    "timestamp": "timestamp",
    "round": "round",
    "season": "season",
    "counterparty_roster_id": "counterparty_roster_id",
}

KIND_ALIASES: dict[str, EventKind] = {
    "DRAFT": EventKind.DRAFTED,
    "DRAFTED": EventKind.DRAFTED,
    "DRAFT_PICK": EventKind.DRAFTED,
    "TRADE": EventKind.TRADED_IN,
    "TRADE_IN": EventKind.TRADED_IN,
    "TRADED_IN": EventKind.TRADED_IN,
    "TRADE_OUT": EventKind.TRADED_OUT,
    "TRADED_OUT": EventKind.TRADED_OUT,
    "WAIVER": EventKind.WAIVER_ADD,
    "WAIVER_ADD": EventKind.WAIVER_ADD,
    "FREE_AGENT": EventKind.FREE_AGENT_ADD,
    "FREE_AGENT_ADD": EventKind.FREE_AGENT_ADD,
    "FA": EventKind.FREE_AGENT_ADD,
    "ADD": EventKind.FREE_AGENT_ADD,
    "DROP": EventKind.DROPPED,
    "DROPPED": EventKind.DROPPED,
}


class TransactionRow(BaseModel):
    raw_player_id: str
    raw_roster_id: str
    raw_kind: str
    raw_timestamp: str
    raw_round: Optional[str] = None
    raw_season: Optional[str] = None
    raw_counterparty: Optional[str] = None

    @classmethod
    def from_mapping(cls, row: Mapping[str, str], mapping: Mapping[str, str]) -> "TransactionRow":
        def extract(key: str, *, default: Optional[str] = None) -> Optional[str]:
            column = mapping.get(key)
            if column is None:
                return default
            value = row.get(column)
            if value is None:
                return default
            value = value.strip()
            return value or default

        return cls(
            raw_player_id=extract("player_id", default="") or "",
            raw_roster_id=extract("roster_id", default="") or "",
            raw_kind=extract("kind", default="") or "",
            raw_timestamp=extract("timestamp", default="") or "",
            raw_round=extract("round"),
            raw_season=extract("season"),
            raw_counterparty=extract("counterparty_roster_id"),
        )


@dataclass
class TransactionImportReport:
    rows_read: int = 0
    events: List[AcquisitionEvent] = field(default_factory=list)
    skipped: List[Tuple[int, str]] = field(default_factory=list)


def _parse_kind(raw_kind: str) -> EventKind:
    token = re.sub(r"[^A-Z]+", "_", raw_kind.upper()).strip("_")
    kind = KIND_ALIASES.get(token)
    if kind is None:
        raise ValueError(f"unknown transaction kind '{raw_kind}'")
    return kind


def _parse_timestamp(raw_timestamp: str) -> datetime:
    text = raw_timestamp.strip()
    if not text:
        raise ValueError("timestamp is empty")
    if text.isdigit():
        value = int(text)
        # Platform exports use epoch milliseconds.
        if value > 10_000_000_000:
            value //= 1000
        return datetime.fromtimestamp(value, tz=timezone.utc)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        raise ValueError(f"timestamp '{raw_timestamp}' is not ISO-8601 or epoch") from None


def _parse_optional_int(raw: Optional[str], label: str) -> Optional[int]:
    if raw is None or not raw.strip():
        return None
    digits = re.sub(r"[^0-9]", "", raw)
    if not digits:
        raise ValueError(f"{label} '{raw}' has no digits")
    return int(digits)


def load_transaction_csv(path: Path, *, mapping: Mapping[str, str] | None = None) -> List[TransactionRow]:
    mapping = mapping or DEFAULT_TRANSACTION_MAPPING
    with path.open(newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        rows = [TransactionRow.from_mapping(row, mapping) for row in reader]
    return rows


def rows_to_events(rows: Sequence[TransactionRow]) -> TransactionImportReport:
    """Convert raw rows to events; unusable rows are skipped and reported."""

    report = TransactionImportReport(rows_read=len(rows))
    for index, row in enumerate(rows, start=1):
        if not row.raw_player_id or not row.raw_roster_id:
            report.skipped.append((index, "missing player_id or roster_id"))
            continue
        try:
            kind = _parse_kind(row.raw_kind)
            event = AcquisitionEvent(
                player_id=row.raw_player_id,
                roster_id=row.raw_roster_id,
                kind=kind,
                timestamp=_parse_timestamp(row.raw_timestamp),
                round=_parse_optional_int(row.raw_round, "round") if kind is EventKind.DRAFTED else None,
                season=_parse_optional_int(row.raw_season, "season"),
                counterparty_roster_id=row.raw_counterparty,
            )
        except ValueError as exc:
            report.skipped.append((index, str(exc)))
            continue
        report.events.append(event)

    if report.skipped:
        logger.warning(
            "Skipped %s of %s transaction rows (first: row %s, %s)",
            len(report.skipped),
            report.rows_read,
            report.skipped[0][0],
            report.skipped[0][1],
        )
    return report


def load_events_from_csv(path: Path, *, mapping: Mapping[str, str] | None = None) -> TransactionImportReport:
    return rows_to_events(load_transaction_csv(path, mapping=mapping))
