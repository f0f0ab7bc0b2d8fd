"""Lightweight REST client for the pyteams API."""

from __future__ import annotations

import argparse
import csv
import json
from pathlib import Path

import httpx


ATTRIBUTE_COLUMNS = ("goalscoring", "defending", "stamina_pace", "control", "teamwork", "resilience")


def load_players(path: Path) -> tuple[list[dict], list[dict]]:
    players: list[dict] = []
    metrics: list[dict] = []
    with path.open(newline="", encoding="utf-8") as f:
        for row in csv.DictReader(f):
            player = {"player_id": row["player_id"], "name": row.get("name") or row["player_id"]}
            for column in ATTRIBUTE_COLUMNS:
                if row.get(column):
                    player[column] = int(row[column])
            players.append(player)
            if row.get("power_rating") or row.get("goal_threat"):
                metrics.append(
                    {
                        "player_id": row["player_id"],
                        "power_rating": float(row["power_rating"]) if row.get("power_rating") else None,
                        "goal_threat": float(row["goal_threat"]) if row.get("goal_threat") else None,
                    }
                )
    return players, metrics


def print_teams(payload: dict) -> None:
    for team in payload["teams"]:
        formation = team["formation"]
        print(f"Team {team['team']} ({formation['defenders']}-{formation['midfielders']}-{formation['attackers']})")
        for slot in team["slots"]:
            print(f"  {slot['slot_number']:>2} {slot['position']:<8} {slot['name'] or '-'}")
    if payload["unassigned"]:
        print("Unassigned:", ", ".join(payload["unassigned"]))
    result = payload.get("result")
    if result and result.get("balance_score") is not None:
        print(f"Balance: {result['balance_percentage']:.1f}% ({result['quality_band']})")


def main() -> None:
    parser = argparse.ArgumentParser(description="Interact with the pyteams REST API")
    parser.add_argument("base_url", help="Base URL of the API, e.g. http://localhost:8000")
    parser.add_argument("roster", type=Path, nargs="?", help="Roster CSV to balance into a new session")
    parser.add_argument("--team-size", type=int, default=None, help="Players per side (default: half the roster)")
    parser.add_argument("--strategy", default="ability", help="ability, performance or random")
    parser.add_argument("--session", metavar="SESSION_ID", help="Operate on an existing session")
    parser.add_argument(
        "--move",
        nargs=3,
        metavar=("PLAYER_ID", "TEAM", "SLOT"),
        help="Move a player into a slot of the session (TEAM may be Unassigned, SLOT then ignored)",
    )
    parser.add_argument("--undo", action="store_true", help="Undo the last edit of the session")
    parser.add_argument("--compare", action="store_true", help="Print comparative stats for the session")
    args = parser.parse_args()

    with httpx.Client(base_url=args.base_url) as client:
        session_id = args.session
        if session_id is None:
            if args.roster is None:
                raise SystemExit("a roster CSV is required unless --session is given")
            players, metrics = load_players(args.roster)
            team_size = args.team_size or len(players) // 2
            resp = client.post(
                "/sessions",
                json={
                    "players": players,
                    "metrics": metrics,
                    "team_size_a": team_size,
                    "team_size_b": len(players) - team_size,
                    "strategy": args.strategy,
                },
            )
            if resp.status_code == 400:
                raise SystemExit(f"balance rejected: {resp.json()['detail']}")
            resp.raise_for_status()
            payload = resp.json()
            session_id = payload["session_id"]
            print(f"Created session {session_id}")
            print_teams(payload)

        if args.move:
            player_id, team, slot = args.move
            body = {"player_id": player_id, "target_team": team}
            if team != "Unassigned":
                body["target_slot"] = int(slot)
            resp = client.post(f"/sessions/{session_id}/moves", json=body)
            if resp.status_code in (400, 404, 409):
                raise SystemExit(f"move rejected: {resp.json()['detail']}")
            resp.raise_for_status()
            print_teams(resp.json())

        if args.undo:
            resp = client.post(f"/sessions/{session_id}/undo")
            if resp.status_code in (400, 404):
                raise SystemExit(f"undo rejected: {resp.json()['detail']}")
            resp.raise_for_status()
            print_teams(resp.json())

        if args.compare:
            resp = client.get(f"/sessions/{session_id}/compare")
            if resp.status_code == 404:
                raise SystemExit(f"session {session_id} not found")
            resp.raise_for_status()
            print(json.dumps(resp.json(), indent=2))


if __name__ == "__main__":
    main()
