"""Input adapters that normalize league snapshots and ownership history."""

from .snapshot import dump_snapshot, load_snapshot, with_process_defaults
from .transactions import (
    DEFAULT_TRANSACTION_MAPPING,
    KIND_ALIASES,
    TransactionImportReport,
    TransactionRow,
    load_events_from_csv,
    load_transaction_csv,
    rows_to_events,
)

__all__ = [
    "DEFAULT_TRANSACTION_MAPPING",
    "KIND_ALIASES",
    "TransactionImportReport",
    "TransactionRow",
    "dump_snapshot",
    "load_events_from_csv",
    "load_snapshot",
    "load_transaction_csv",
    "rows_to_events",
    "with_process_defaults",
]
