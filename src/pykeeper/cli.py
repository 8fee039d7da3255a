"""Command-line interface for keeper quotes, what-if simulations and cost sweeps."""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Optional, Sequence

from pykeeper.config import KeeperSettings, iter_presets, settings_from_mapping
from pykeeper.config_loader import SettingsProfile
from pykeeper.engine import KeeperEngine, KeeperQuote, RosterResolution, apply_report, recalculate_all
from pykeeper.errors import KeeperError
from pykeeper.ingest import dump_snapshot, load_events_from_csv, load_snapshot
from pykeeper.models import KeeperSelection, KeeperType, LeagueSnapshot


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("snapshot", type=Path, help="Path to league snapshot JSON")
    parser.add_argument(
        "--transactions",
        type=Path,
        default=None,
        help="Optional transactions CSV appended to the snapshot history",
    )
    parser.add_argument(
        "--preset",
        default=None,
        choices=sorted(iter_presets()),
        help="Named keeper settings preset (overrides the snapshot settings)",
    )
    parser.add_argument(
        "--setting",
        action="append",
        default=[],
        help="Settings override (e.g., max_keepers=5)",
    )
    parser.add_argument("--load-profile", type=Path, help="Load settings profile JSON", default=None)
    parser.add_argument("--save-profile", type=Path, help="Save settings profile JSON", default=None)
    parser.add_argument(
        "--report",
        type=Path,
        default=None,
        help="Optional path to write the result as JSON",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pykeeper", description="Keeper cost and slot-cascade engine")
    subparsers = parser.add_subparsers(dest="command", required=True)

    quote = subparsers.add_parser("quote", help="Show the keeper cost of one player")
    _add_common(quote)
    quote.add_argument("--player", required=True, help="Player ID")
    quote.add_argument("--roster", required=True, help="Roster ID holding the player")
    quote.add_argument("--season", type=int, default=None, help="Season to quote (default: snapshot season)")
    quote.add_argument("--years", type=int, default=0, help="Number of future seasons to project")

    simulate = subparsers.add_parser("simulate", help="Resolve a hypothetical keeper list without saving")
    _add_common(simulate)
    simulate.add_argument("--roster", required=True, help="Roster ID")
    simulate.add_argument(
        "--keep",
        action="append",
        default=[],
        help="Player to keep; append =FRANCHISE for a franchise tag (e.g., p123=FRANCHISE)",
    )
    simulate.add_argument(
        "--drop",
        action="append",
        default=[],
        help="Persisted keeper to leave out of the simulation",
    )
    simulate.add_argument(
        "--ignore-persisted",
        action="store_true",
        help="Start from an empty keeper list instead of the snapshot's keepers",
    )

    recalculate = subparsers.add_parser("recalculate", help="Recompute every persisted keeper cost")
    _add_common(recalculate)
    recalculate.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write the snapshot with updated keeper costs to this path",
    )
    return parser


def _parse_mapping(entries: list[str]) -> dict[str, str]:
    mapping: dict[str, str] = {}
    for entry in entries:
        if "=" not in entry:
            raise ValueError(f"Invalid setting entry '{entry}', expected key=value")
        key, value = entry.split("=", 1)
        mapping[key.strip()] = value.strip()
    return mapping


def _parse_keep(entry: str) -> KeeperSelection:
    player_id, _, raw_type = entry.partition("=")
    keeper_type = KeeperType(raw_type.strip().upper()) if raw_type.strip() else KeeperType.REGULAR
    return KeeperSelection(player_id=player_id.strip(), keeper_type=keeper_type)


def _resolve_settings(args: argparse.Namespace, snapshot: LeagueSnapshot) -> Optional[KeeperSettings]:
    overrides = _parse_mapping(args.setting)
    profile: Optional[SettingsProfile] = None
    if args.load_profile:
        profile = SettingsProfile.load(args.load_profile)
    if profile is None and not overrides and not args.preset:
        return None

    profile = profile or SettingsProfile()
    if args.preset:
        profile.preset = args.preset
    profile.overrides = {**profile.overrides, **overrides}
    if args.save_profile:
        profile.save(args.save_profile)
        print(f"Saved settings profile to {args.save_profile}")
    return settings_from_mapping(profile.overrides, base=profile.preset or snapshot.settings)


def _load(args: argparse.Namespace) -> LeagueSnapshot:
    extra_events = []
    if args.transactions:
        import_report = load_events_from_csv(args.transactions)
        extra_events = import_report.events
        print(f"Imported {len(import_report.events)}/{import_report.rows_read} transactions")
        if import_report.skipped:
            preview = ", ".join(f"row {row}: {reason}" for row, reason in import_report.skipped[:3])
            more = len(import_report.skipped) - 3
            suffix = f", +{more} more" if more > 0 else ""
            print(f"Skipped transactions: {preview}{suffix}")
    snapshot = load_snapshot(args.snapshot, extra_events=extra_events)
    settings = _resolve_settings(args, snapshot)
    if settings is not None:
        snapshot = snapshot.model_copy(update={"settings": settings})
    return snapshot


def _quote_payload(quote: KeeperQuote) -> dict:
    def cost_payload(cost) -> dict:
        return {
            "season": cost.season,
            "years_held": cost.years_held,
            "regular": asdict(cost.regular),
            "franchise": asdict(cost.franchise),
            "must_franchise_tag": cost.must_franchise_tag,
        }

    return {
        "player_id": quote.player_id,
        "roster_id": quote.roster_id,
        "season": quote.season,
        "origin_season": quote.origin.origin_season,
        "base_round": quote.origin.base_round,
        "origin_source": quote.origin.source.value,
        "cost": cost_payload(quote.cost),
        "projections": [cost_payload(cost) for cost in quote.projections],
        "warnings": [warning.message for warning in quote.warnings],
    }


def _resolution_payload(resolution: RosterResolution) -> dict:
    return {
        "roster_id": resolution.roster_id,
        "season": resolution.season,
        "keepers": [
            {
                "player_id": keeper.player_id,
                "keeper_type": keeper.keeper_type.value,
                "base_cost": keeper.base_cost,
                "requested_round": keeper.requested_round,
                "final_cost": keeper.final_cost,
                "years_held": keeper.years_held,
                "cascaded": keeper.cascaded,
                "cascade_reason": keeper.cascade_reason or None,
            }
            for keeper in resolution.keepers
        ],
        "total_slots_taken": resolution.total_slots_taken,
        "available_rounds": list(resolution.available_rounds),
        "warnings": [warning.message for warning in resolution.warnings],
    }


def _run_quote(args: argparse.Namespace, snapshot: LeagueSnapshot) -> dict:
    quote = KeeperEngine(snapshot).quote(args.player, args.roster, season=args.season, years=max(0, args.years))
    cost = quote.cost
    print(
        f"{quote.player_id} ({quote.roster_id}) {quote.season}: origin {quote.origin.origin_season} "
        f"round {quote.origin.base_round} [{quote.origin.source.value}], held {cost.years_held}"
    )
    regular = "requires franchise tag" if not cost.regular.eligible else f"round {cost.regular.final_cost}"
    print(f"  regular: {regular}")
    print(f"  franchise: round {cost.franchise.final_cost}")
    for projected in quote.projections:
        flag = " (franchise only)" if projected.must_franchise_tag else ""
        print(f"  {projected.season}: round {projected.regular.final_cost}{flag}")
    for warning in quote.warnings:
        print(f"  warning: {warning.message}")
    return _quote_payload(quote)


def _run_simulate(args: argparse.Namespace, snapshot: LeagueSnapshot) -> dict:
    engine = KeeperEngine(snapshot)
    keeps = [_parse_keep(entry) for entry in args.keep]
    if args.ignore_persisted:
        selections = [selection for selection in keeps if selection.player_id not in set(args.drop)]
    else:
        selections = engine.selections_with_changes(args.roster, add=keeps, remove=args.drop)
    resolution = engine.simulate(args.roster, selections)
    print(f"Roster {resolution.roster_id} {resolution.season}: {resolution.total_slots_taken} keepers")
    for keeper in sorted(resolution.keepers, key=lambda item: item.final_cost):
        note = f" ({keeper.cascade_reason})" if keeper.cascaded else ""
        print(f"  round {keeper.final_cost}: {keeper.player_id} [{keeper.keeper_type.value}]{note}")
    available = ", ".join(str(round_no) for round_no in resolution.available_rounds) or "none"
    print(f"Available rounds: {available}")
    for warning in resolution.warnings:
        print(f"  warning: {warning.message}")
    return _resolution_payload(resolution)


def _run_recalculate(args: argparse.Namespace, snapshot: LeagueSnapshot) -> dict:
    report = recalculate_all(snapshot)
    print(
        f"Recalculated {len(report.entries)} keepers: {len(report.updated)} updated, "
        f"{len(report.unchanged)} unchanged, {len(report.failed)} failed"
    )
    for entry in report.updated:
        print(f"  {entry.roster_id}/{entry.player_id}: round {entry.old_cost} -> {entry.new_cost}")
    for entry in report.failed:
        print(f"  {entry.roster_id}/{entry.player_id}: failed ({entry.error})")
    if args.output:
        dump_snapshot(apply_report(snapshot, report), args.output)
        print(f"Wrote updated snapshot to {args.output}")
    return {
        "league_id": report.league_id,
        "season": report.season,
        "entries": [
            {
                "player_id": entry.player_id,
                "roster_id": entry.roster_id,
                "status": entry.status.value,
                "old_cost": entry.old_cost,
                "new_cost": entry.new_cost,
                "years_held": entry.years_held,
                "base_cost": entry.base_cost,
                "error": entry.error,
            }
            for entry in report.entries
        ],
    }


_COMMANDS = {
    "quote": _run_quote,
    "simulate": _run_simulate,
    "recalculate": _run_recalculate,
}


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    snapshot = _load(args)
    try:
        payload = _COMMANDS[args.command](args, snapshot)
    except KeeperError as exc:
        print(f"error: {exc.message}", file=sys.stderr)
        return 1
    if args.report:
        args.report.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        print(f"Wrote report to {args.report}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
