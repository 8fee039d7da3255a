"""Lightweight REST client for the pykeeper API."""

from __future__ import annotations

import argparse
import json
from pathlib import Path

import httpx


def build_keepers(entries: list[str]) -> list[dict[str, str]]:
    keepers = []
    for entry in entries:
        player_id, _, keeper_type = entry.partition("=")
        keepers.append({"player_id": player_id, "keeper_type": (keeper_type or "REGULAR").upper()})
    return keepers


def _check(resp: httpx.Response, what: str) -> dict:
    if resp.status_code == 404:
        raise SystemExit(f"{what} not found")
    if resp.status_code in (400, 409, 422):
        raise SystemExit(f"{what} rejected: {json.dumps(resp.json().get('detail'))}")
    resp.raise_for_status()
    return resp.json()


def main() -> None:
    parser = argparse.ArgumentParser(description="Interact with the pykeeper REST API")
    parser.add_argument("base_url", help="Base URL of the API, e.g. http://localhost:8000")
    parser.add_argument("league_id", help="League ID")
    parser.add_argument("--upload", type=Path, help="Snapshot JSON to store before anything else")
    parser.add_argument("--roster", help="Roster ID for roster-scoped calls")
    parser.add_argument("--quote", metavar="PLAYER_ID", help="Fetch the keeper cost of a player")
    parser.add_argument("--years", type=int, default=0, help="Seasons to project with --quote")
    parser.add_argument(
        "--simulate",
        nargs="*",
        metavar="PLAYER_ID[=FRANCHISE]",
        help="Simulate the given keeper list for --roster",
    )
    parser.add_argument("--keep", metavar="PLAYER_ID[=FRANCHISE]", help="Commit a keeper for --roster")
    parser.add_argument("--release", metavar="PLAYER_ID", help="Remove a keeper from --roster")
    parser.add_argument("--list-keepers", action="store_true", help="List keepers for --roster")
    parser.add_argument("--eligible", action="store_true", help="Show keeper eligibility for --roster")
    parser.add_argument("--recalculate", action="store_true", help="Run the league-wide cost sweep")
    parser.add_argument("--apply", action="store_true", help="Write sweep results back")
    args = parser.parse_args()

    roster_calls = (
        args.quote or args.simulate is not None or args.keep or args.release or args.list_keepers or args.eligible
    )
    if roster_calls and not args.roster:
        raise SystemExit("--roster is required for quote/simulate/keep/release/list-keepers/eligible")

    league = f"/leagues/{args.league_id}"
    with httpx.Client(base_url=args.base_url) as client:
        if args.upload:
            payload = json.loads(args.upload.read_text(encoding="utf-8"))
            result = _check(client.put(f"{league}/snapshot", json=payload), f"league {args.league_id}")
            print("Stored snapshot:", json.dumps(result, indent=2))
        if args.quote:
            resp = client.get(
                f"{league}/players/{args.quote}/quote",
                params={"roster_id": args.roster, "years": args.years},
            )
            print(json.dumps(_check(resp, f"player {args.quote}"), indent=2))
        if args.simulate is not None:
            body = {"roster_id": args.roster, "keepers": build_keepers(args.simulate)}
            print(json.dumps(_check(client.post(f"{league}/simulate", json=body), "simulation"), indent=2))
        if args.keep:
            body = build_keepers([args.keep])[0]
            resp = client.post(f"{league}/rosters/{args.roster}/keepers", json=body)
            print(json.dumps(_check(resp, f"keeper {body['player_id']}"), indent=2))
        if args.release:
            resp = client.delete(f"{league}/rosters/{args.roster}/keepers/{args.release}")
            print(json.dumps(_check(resp, f"keeper {args.release}"), indent=2))
        if args.list_keepers:
            resp = client.get(f"{league}/rosters/{args.roster}/keepers")
            print(json.dumps(_check(resp, f"roster {args.roster}"), indent=2))
        if args.eligible:
            resp = client.get(f"{league}/rosters/{args.roster}/eligible-keepers")
            print(json.dumps(_check(resp, f"roster {args.roster}"), indent=2))
        if args.recalculate:
            resp = client.post(f"{league}/recalculate", params={"apply": str(args.apply).lower()})
            report = _check(resp, f"league {args.league_id}")
            print(
                f"Recalculated: {report['updated']} updated, {report['unchanged']} unchanged, "
                f"{report['failed']} failed (applied={report['applied']})"
            )


if __name__ == "__main__":
    main()
